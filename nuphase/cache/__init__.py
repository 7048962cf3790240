"""Memoization store and rejection-sampling support.

Import Policy:
    from nuphase.cache import Cache, KineGeneratorWithCache
"""

from nuphase.cache.cache import Cache, CacheBranch
from nuphase.cache.generator import WQ2KinematicsGenerator
from nuphase.cache.max_xsec import GenerationFailure, KineGeneratorWithCache, MaxXSecResult

__all__ = [
    "Cache",
    "CacheBranch",
    "KineGeneratorWithCache",
    "MaxXSecResult",
    "GenerationFailure",
    "WQ2KinematicsGenerator",
]
