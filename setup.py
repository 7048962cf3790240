"""Setup script for nuphase package."""

from setuptools import setup, find_packages

setup(
    name='nuphase',
    version='1.0',
    packages=find_packages(include=['nuphase', 'nuphase.*']),
    package_data={
        'nuphase.config': ['*.yaml'],
        'nuphase.core': ['data/*.yaml'],
    },
    python_requires='>=3.10',
    install_requires=[
        'numpy>=1.23.0',
        'scipy>=1.15.0',
        'matplotlib>=3.3.0',
        'pyyaml>=6.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
)
