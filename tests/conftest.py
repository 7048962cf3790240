"""Pytest configuration and shared fixtures for nuphase tests."""

import matplotlib

matplotlib.use("Agg")

import pytest

from nuphase.config.enums import IntegrationType
from nuphase.config.physics_config import (
    IntegrationConfig,
    MaxXSecConfig,
    NuphaseConfig,
    PhaseSpaceConfig,
    RunOptions,
)
from nuphase.core import pdg, units
from nuphase.core.event import EventRecord, PhaseSpaceKind
from nuphase.core.interaction import ExclusiveTag, Interaction
from nuphase.core.pdg import ParticleTable
from nuphase.core.process import ProcessKind
from nuphase.xsec.model import XSecAlgorithm

CARBON12 = pdg.ion_pdg(6, 12)
ARGON40 = pdg.ion_pdg(18, 40)


# Toy differential cross-section models


class LinearWModel(XSecAlgorithm):
    """d2xsec/dWdQ2 = scale * W everywhere.

    A polynomial integrand, so cubature rules converge on the first region.
    No kinematic check: the integral covers the whole W x Q2 rectangle.
    """

    def __init__(self, scale=1e-38 * units.cm2, kinds=(ProcessKind.DEEP_INELASTIC,)):
        super().__init__("LinearWModel", "Test")
        self.scale = scale
        self.kinds = tuple(kinds)
        self.calls = 0

    def xsec(self, interaction, kps=PhaseSpaceKind.W_Q2):
        self.calls += 1
        return self.scale * interaction.kinematics.W

    def valid_process(self, interaction):
        return interaction.process.kind in self.kinds


class PeakedModel(XSecAlgorithm):
    """Smooth d2xsec/dWdQ2 falling with Q2, zero outside the phase space."""

    def __init__(self, phase_space_config=None):
        super().__init__("PeakedModel", "Test", phase_space_config)

    def xsec(self, interaction, kps=PhaseSpaceKind.W_Q2):
        if not self.valid_kinematics(interaction):
            return 0.0
        kine = interaction.kinematics
        return 1e-38 * units.cm2 * kine.W / (1.0 + kine.Q2) ** 2

    def valid_process(self, interaction):
        return interaction.process.is_deep_inelastic


# Fixtures


@pytest.fixture
def particle_table():
    """Shared particle table, reloaded after the test so overrides do not leak."""
    yield ParticleTable.instance()
    ParticleTable.reset()


@pytest.fixture
def phase_space_config():
    return PhaseSpaceConfig()


@pytest.fixture
def fast_config():
    """Integration settings that keep test integrals cheap."""
    return NuphaseConfig(
        integration=IntegrationConfig(
            integration_type=IntegrationType.ADAPTIVE,
            rel_tolerance=1e-3,
            abs_tolerance=0.0,
            max_eval=20000,
            min_eval=0,
            validity_E_min=1.0,
            validity_E_max=10.0,
        ),
        max_xsec=MaxXSecConfig(),
        phase_space=PhaseSpaceConfig(),
        run=RunOptions(),
    )


@pytest.fixture
def dis_cc_proton():
    """numu CC DIS on a free proton at 5 GeV."""
    return Interaction.dis_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, energy=5.0)


@pytest.fixture
def dis_cc_carbon():
    """numu CC DIS on a bound neutron in carbon-12 at 5 GeV."""
    return Interaction.dis_cc(CARBON12, pdg.NEUTRON, pdg.NU_MU, energy=5.0)


@pytest.fixture
def qel_cc_neutron():
    return Interaction.qel_cc(CARBON12, pdg.NEUTRON, pdg.NU_MU, energy=1.0)


@pytest.fixture
def spp_cc_proton():
    """numu p -> mu- p pi+ at 1 GeV."""
    tag = ExclusiveTag(n_protons=1, n_pi_plus=1)
    return Interaction.spp_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, tag, energy=1.0)


@pytest.fixture
def linear_model():
    return LinearWModel()


@pytest.fixture
def peaked_model():
    return PeakedModel()


@pytest.fixture
def dis_event(dis_cc_proton):
    return EventRecord(dis_cc_proton)
