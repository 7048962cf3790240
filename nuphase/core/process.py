"""Interaction channel and current classification.

Import Policy:
    from nuphase.core.process import ProcessKind, CurrentKind, ProcessInfo
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProcessKind(Enum):
    """Scattering channel.

    Options:
        QUASI_ELASTIC: Quasi-elastic scattering off a nucleon
        INVERSE_BETA_DECAY: Anti-neutrino IBD on a free proton
        SINGLE_PION: Exclusive single pion production
        RESONANT: Baryon resonance production
        DEEP_INELASTIC: Deep inelastic scattering
        COHERENT_ELASTIC: Coherent elastic scattering off a nucleus (CEvNS)
        COHERENT_PRODUCTION: Coherent meson production off a nucleus
        DIFFRACTIVE: Diffractive pion production off a free nucleon
        INVERSE_MU_DECAY: nu_mu + e- -> mu- + nu_e
        IMD_ANNIHILATION: anti-nu_e + e- -> mu- + anti-nu_mu
        NU_ELECTRON_ELASTIC: Neutrino-electron elastic scattering
        AM_NU_GAMMA: Anomaly-mediated single photon production
        MEC: Meson exchange current (two-nucleon) scattering
        GLASHOW_RESONANCE: anti-nu_e + e- -> W-
        PHOTON_RESONANCE: W production off a nucleon via a photon
        PHOTON_COHERENT: W production off a nucleus via a photon
        SINGLE_KAON: Associated single kaon production
        DARK_MATTER_ELASTIC: Dark matter elastic scattering off a nucleon
        DARK_MATTER_DEEP_INELASTIC: Dark matter deep inelastic scattering
        DARK_MATTER_ELECTRON_ELASTIC: Dark matter elastic scattering off an electron
        NORMALIZATION: Flux normalisation pseudo-process
        UNKNOWN: Unclassified process
    """
    QUASI_ELASTIC = "QES"
    INVERSE_BETA_DECAY = "IBD"
    SINGLE_PION = "SPP"
    RESONANT = "RES"
    DEEP_INELASTIC = "DIS"
    COHERENT_ELASTIC = "CEvNS"
    COHERENT_PRODUCTION = "COH"
    DIFFRACTIVE = "DFR"
    INVERSE_MU_DECAY = "IMD"
    IMD_ANNIHILATION = "IMDAnh"
    NU_ELECTRON_ELASTIC = "NuEEL"
    AM_NU_GAMMA = "AMNuGamma"
    MEC = "MEC"
    GLASHOW_RESONANCE = "GLR"
    PHOTON_RESONANCE = "PhotonRES"
    PHOTON_COHERENT = "PhotonCOH"
    SINGLE_KAON = "SKN"
    DARK_MATTER_ELASTIC = "DMEL"
    DARK_MATTER_DEEP_INELASTIC = "DMDIS"
    DARK_MATTER_ELECTRON_ELASTIC = "DME"
    NORMALIZATION = "Norm"
    UNKNOWN = "Unknown"


class CurrentKind(Enum):
    """Exchanged current.

    Options:
        WEAK_CC: Weak charged current
        WEAK_NC: Weak neutral current
        WEAK_MIX: CC/NC interference (e.g. nu_e-electron elastic)
        EM: Electromagnetic
        DARK_MATTER: Dark sector mediator
        UNKNOWN: Unclassified
    """
    WEAK_CC = "Weak[CC]"
    WEAK_NC = "Weak[NC]"
    WEAK_MIX = "Weak[mix]"
    EM = "EM"
    DARK_MATTER = "DM"
    UNKNOWN = "Unknown"


_QUASI_ELASTIC_FAMILY = frozenset({
    ProcessKind.QUASI_ELASTIC,
    ProcessKind.INVERSE_BETA_DECAY,
    ProcessKind.DARK_MATTER_ELASTIC,
})

_DARK_MATTER_NUCLEON = frozenset({
    ProcessKind.DARK_MATTER_ELASTIC,
    ProcessKind.DARK_MATTER_DEEP_INELASTIC,
})


@dataclass(frozen=True)
class ProcessInfo:
    """Channel plus current; immutable once an interaction is built."""

    kind: ProcessKind = ProcessKind.UNKNOWN
    current: CurrentKind = CurrentKind.UNKNOWN

    @property
    def is_known(self) -> bool:
        return self.kind is not ProcessKind.UNKNOWN

    @property
    def is_quasi_elastic_family(self) -> bool:
        """QE, IBD and dark-matter elastic: a single recoil nucleon, W fixed."""
        return self.kind in _QUASI_ELASTIC_FAMILY

    @property
    def is_quasi_elastic(self) -> bool:
        return self.kind is ProcessKind.QUASI_ELASTIC

    @property
    def is_resonant(self) -> bool:
        return self.kind is ProcessKind.RESONANT

    @property
    def is_deep_inelastic(self) -> bool:
        return self.kind is ProcessKind.DEEP_INELASTIC

    @property
    def is_coherent_production(self) -> bool:
        return self.kind is ProcessKind.COHERENT_PRODUCTION

    @property
    def is_diffractive(self) -> bool:
        return self.kind is ProcessKind.DIFFRACTIVE

    @property
    def is_mec(self) -> bool:
        return self.kind is ProcessKind.MEC

    @property
    def is_weak(self) -> bool:
        return self.current in (CurrentKind.WEAK_CC, CurrentKind.WEAK_NC, CurrentKind.WEAK_MIX)

    @property
    def is_weak_cc(self) -> bool:
        return self.current is CurrentKind.WEAK_CC

    @property
    def is_weak_nc(self) -> bool:
        return self.current is CurrentKind.WEAK_NC

    @property
    def is_em(self) -> bool:
        return self.current is CurrentKind.EM

    @property
    def is_dark_matter_elastic(self) -> bool:
        return self.kind is ProcessKind.DARK_MATTER_ELASTIC

    @property
    def is_dark_matter_deep_inelastic(self) -> bool:
        return self.kind is ProcessKind.DARK_MATTER_DEEP_INELASTIC

    @property
    def is_dark_matter(self) -> bool:
        """Dark matter scattering off a nucleon (elastic or deep inelastic)."""
        return self.kind in _DARK_MATTER_NUCLEON

    def as_string(self) -> str:
        return f"{self.current.value},{self.kind.value}"

    def __str__(self) -> str:
        return self.as_string()
