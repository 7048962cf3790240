"""Interaction descriptor: channel, initial state, exclusive tag and kinematics.

The phase-space engine reads interactions and never mutates them. The running
kinematic point (``Interaction.kinematics``) is owned by the caller, usually
a kinematics generator.

Import Policy:
    from nuphase.core.interaction import Interaction, InteractionFlag
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field, replace
from enum import Enum, Flag, auto
from typing import Optional

from nuphase.core import pdg
from nuphase.core.constants import NUCLEON_MASS
from nuphase.core.pdg import ParticleTable
from nuphase.core.process import CurrentKind, ProcessInfo, ProcessKind


class ReferenceFrame(Enum):
    """Frame in which the probe energy is quoted.

    Options:
        LAB: Laboratory frame (nucleus at rest)
        HIT_NUCLEON_REST: Rest frame of the (possibly off-shell) hit nucleon
    """
    LAB = "lab"
    HIT_NUCLEON_REST = "hit_nucleon_rest"


@dataclass(frozen=True)
class FourVector:
    """Energy-momentum four-vector [GeV], metric (+,-,-,-)."""

    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    E: float = 0.0

    @classmethod
    def at_rest(cls, mass: float) -> FourVector:
        return cls(0.0, 0.0, 0.0, mass)

    @classmethod
    def along_z(cls, energy: float, mass: float) -> FourVector:
        pz = math.sqrt(max(0.0, energy * energy - mass * mass))
        return cls(0.0, 0.0, pz, energy)

    @property
    def p(self) -> float:
        return math.sqrt(self.px ** 2 + self.py ** 2 + self.pz ** 2)

    @property
    def mass2(self) -> float:
        return self.dot(self)

    @property
    def mass(self) -> float:
        """Invariant mass; negative for space-like vectors."""
        m2 = self.mass2
        return math.sqrt(m2) if m2 >= 0 else -math.sqrt(-m2)

    def dot(self, other: FourVector) -> float:
        return self.E * other.E - self.px * other.px - self.py * other.py - self.pz * other.pz

    def __add__(self, other: FourVector) -> FourVector:
        return FourVector(
            self.px + other.px, self.py + other.py, self.pz + other.pz, self.E + other.E
        )


@dataclass
class Target:
    """Nuclear or free-nucleon target.

    ``pdg`` is a 10LZZZAAAI ion code or a free nucleon code. The hit nucleon
    may be off the mass shell; when no hit nucleon is set its four-momentum
    defaults to an average nucleon at rest.
    """

    pdg: int
    hit_nucleon_pdg: int = 0
    hit_nucleon_p4: Optional[FourVector] = None

    def __post_init__(self):
        if self.hit_nucleon_p4 is None:
            if self.hit_nucleon_pdg:
                self.hit_nucleon_p4 = FourVector.at_rest(
                    ParticleTable.instance().mass(self.hit_nucleon_pdg)
                )
            else:
                self.hit_nucleon_p4 = FourVector.at_rest(NUCLEON_MASS)

    @property
    def Z(self) -> int:
        return pdg.ion_Z(self.pdg)

    @property
    def A(self) -> int:
        return pdg.ion_A(self.pdg)

    @property
    def N(self) -> int:
        return self.A - self.Z

    @property
    def is_free_nucleon(self) -> bool:
        return self.A == 1

    @property
    def is_free_proton(self) -> bool:
        return self.A == 1 and self.Z == 1

    @property
    def is_free_neutron(self) -> bool:
        return self.A == 1 and self.Z == 0

    @property
    def is_nucleus(self) -> bool:
        return self.A > 1

    @property
    def mass(self) -> float:
        return ParticleTable.instance().mass(self.pdg)

    @property
    def hit_nucleon_is_set(self) -> bool:
        return self.hit_nucleon_pdg != 0

    @property
    def hit_nucleon_mass(self) -> float:
        """Invariant mass of the hit-nucleon four-momentum, off-shell if bound."""
        return self.hit_nucleon_p4.mass

    def nucleon_count(self, nucleon_pdg: int) -> int:
        """Number of nucleons of the given species in the target."""
        if pdg.is_proton(nucleon_pdg):
            return self.Z
        if pdg.is_neutron(nucleon_pdg):
            return self.N
        return 0

    def as_string(self) -> str:
        text = f"tgt:{self.pdg};"
        if self.hit_nucleon_is_set:
            text += f"N:{self.hit_nucleon_pdg};"
        return text


@dataclass
class InitialState:
    """Probe plus target. The probe four-momentum is given in the lab frame."""

    probe_pdg: int
    probe_p4: FourVector
    target: Target

    @property
    def probe_mass(self) -> float:
        return ParticleTable.instance().mass(self.probe_pdg)

    def probe_energy(self, frame: ReferenceFrame = ReferenceFrame.HIT_NUCLEON_REST) -> float:
        if frame is ReferenceFrame.LAB:
            return self.probe_p4.E
        nucleon = self.target.hit_nucleon_p4
        if not self.target.hit_nucleon_is_set or nucleon.mass <= 0:
            return self.probe_p4.E
        return self.probe_p4.dot(nucleon) / nucleon.mass

    def cm_energy(self) -> float:
        """Invariant mass of the probe and hit nucleon system."""
        if self.target.hit_nucleon_is_set:
            s = (self.probe_p4 + self.target.hit_nucleon_p4).mass2
        else:
            M = self.target.mass
            m = self.probe_mass
            s = M * M + m * m + 2.0 * M * self.probe_p4.E
        return math.sqrt(max(0.0, s))

    def set_probe_energy(self, energy: float) -> None:
        self.probe_p4 = FourVector.along_z(energy, self.probe_mass)

    def as_string(self) -> str:
        return f"probe:{self.probe_pdg};" + self.target.as_string()


@dataclass(frozen=True)
class ExclusiveTag:
    """Exclusive final-state annotations."""

    n_protons: int = 0
    n_neutrons: int = 0
    n_pi0: int = 0
    n_pi_plus: int = 0
    n_pi_minus: int = 0
    charm: bool = False
    inclusive_charm: bool = False
    charm_hadron_pdg: int = 0
    strange: bool = False
    strange_hadron_pdg: int = 0

    @property
    def n_pions(self) -> int:
        return self.n_pi0 + self.n_pi_plus + self.n_pi_minus

    @property
    def n_nucleons(self) -> int:
        return self.n_protons + self.n_neutrons

    @property
    def is_charm_event(self) -> bool:
        return self.charm

    @property
    def is_inclusive_charm(self) -> bool:
        return self.charm and self.inclusive_charm

    @property
    def is_strange_event(self) -> bool:
        return self.strange

    @property
    def is_set(self) -> bool:
        return self != ExclusiveTag()

    def as_string(self) -> str:
        if not self.is_set:
            return ""
        parts = []
        if self.charm:
            parts.append("charm:incl" if self.inclusive_charm else f"charm:{self.charm_hadron_pdg}")
        if self.strange:
            parts.append(f"strange:{self.strange_hadron_pdg}")
        if self.n_nucleons:
            parts.append(f"p:{self.n_protons},n:{self.n_neutrons}")
        if self.n_pions:
            parts.append(f"pi+:{self.n_pi_plus},pi0:{self.n_pi0},pi-:{self.n_pi_minus}")
        return "xcls:" + ";".join(parts) + ";"


@dataclass
class Kinematics:
    """Running kinematic point. Q2 is positive; q2 = -Q2."""

    W: float = 0.0
    Q2: float = 0.0
    x: float = 0.0
    y: float = 0.0
    t: float = 0.0

    @property
    def q2(self) -> float:
        return -self.Q2

    @q2.setter
    def q2(self, value: float) -> None:
        self.Q2 = -value


class InteractionFlag(Flag):
    """Switches carried by an interaction.

    Options:
        SKIP_PROCESS_CHECK: Models skip their applicability check
        SKIP_KINEMATIC_CHECK: Models evaluate outside the physical region
        NO_NUCLEAR_CORRECTION: Models skip nuclear medium corrections
        ASSUME_FREE_NUCLEON: Models treat the hit nucleon as free
    """
    NONE = 0
    SKIP_PROCESS_CHECK = auto()
    SKIP_KINEMATIC_CHECK = auto()
    NO_NUCLEAR_CORRECTION = auto()
    ASSUME_FREE_NUCLEON = auto()


# Channels whose final-state lepton is the probe itself
_PROBE_SCATTERS = frozenset({
    ProcessKind.COHERENT_ELASTIC,
    ProcessKind.NU_ELECTRON_ELASTIC,
    ProcessKind.AM_NU_GAMMA,
    ProcessKind.NORMALIZATION,
    ProcessKind.DARK_MATTER_ELASTIC,
    ProcessKind.DARK_MATTER_DEEP_INELASTIC,
    ProcessKind.DARK_MATTER_ELECTRON_ELASTIC,
})


def default_fs_lepton(kind: ProcessKind, current: CurrentKind, probe_pdg: int) -> int:
    """Primary final-state lepton implied by channel, current and probe."""
    if kind in (ProcessKind.INVERSE_MU_DECAY, ProcessKind.IMD_ANNIHILATION):
        return pdg.MUON
    if kind is ProcessKind.GLASHOW_RESONANCE:
        return -pdg.W_BOSON
    if kind is ProcessKind.PHOTON_RESONANCE:
        return pdg.W_BOSON if probe_pdg > 0 else -pdg.W_BOSON
    if kind in _PROBE_SCATTERS:
        return probe_pdg
    if current is CurrentKind.WEAK_CC and pdg.is_neutral_lepton(probe_pdg):
        return pdg.charged_lepton_partner(probe_pdg)
    return probe_pdg


@dataclass
class Interaction:
    """One scattering: channel, initial state, exclusive tag and kinematics."""

    process: ProcessInfo
    initial_state: InitialState
    exclusive_tag: ExclusiveTag = field(default_factory=ExclusiveTag)
    fs_lepton_pdg: int = 0
    kinematics: Kinematics = field(default_factory=Kinematics)
    flags: InteractionFlag = InteractionFlag.NONE

    def __post_init__(self):
        if not self.fs_lepton_pdg:
            self.fs_lepton_pdg = default_fs_lepton(
                self.process.kind, self.process.current, self.initial_state.probe_pdg
            )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def target(self) -> Target:
        return self.initial_state.target

    @property
    def probe_pdg(self) -> int:
        return self.initial_state.probe_pdg

    @property
    def fs_lepton_mass(self) -> float:
        return ParticleTable.instance().mass(self.fs_lepton_pdg)

    @property
    def recoil_nucleon_pdg(self) -> int:
        """Recoiling nucleon (or nucleon cluster for MEC); 0 if not applicable."""
        struck = self.target.hit_nucleon_pdg
        if self.process.is_quasi_elastic_family:
            if self.process.is_weak_cc:
                return pdg.switch_proton_neutron(struck)
            return struck
        if self.process.is_mec:
            if self.process.is_weak_cc:
                return pdg.cluster_after_cc(struck, self.probe_pdg)
            return struck
        return 0

    @property
    def recoil_nucleon_mass(self) -> float:
        code = self.recoil_nucleon_pdg
        if not code:
            raise ValueError(f"No recoil nucleon defined for {self.as_string()}")
        return ParticleTable.instance().mass(code)

    def probe_energy(self, frame: ReferenceFrame = ReferenceFrame.HIT_NUCLEON_REST) -> float:
        return self.initial_state.probe_energy(frame)

    def set_probe_energy(self, energy: float) -> None:
        """Set the lab-frame probe energy [GeV]."""
        self.initial_state.set_probe_energy(energy)

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    def set_flag(self, flag: InteractionFlag) -> None:
        self.flags |= flag

    def clear_flag(self, flag: InteractionFlag) -> None:
        self.flags &= ~flag

    def test_flag(self, flag: InteractionFlag) -> bool:
        return bool(self.flags & flag)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def as_string(self) -> str:
        """Canonical signature; excludes energy and the running kinematics."""
        return (
            self.initial_state.as_string()
            + f"proc:{self.process.as_string()};"
            + self.exclusive_tag.as_string()
        )

    def copy(self) -> Interaction:
        return copy.deepcopy(self)

    def with_target(self, target_pdg: int, hit_nucleon_pdg: Optional[int] = None) -> Interaction:
        """Copy re-targeted onto another nuclide, keeping the probe four-momentum."""
        other = self.copy()
        hit = self.target.hit_nucleon_pdg if hit_nucleon_pdg is None else hit_nucleon_pdg
        other.initial_state = replace(
            other.initial_state, target=Target(pdg=target_pdg, hit_nucleon_pdg=hit)
        )
        return other

    def __str__(self) -> str:
        return self.as_string()

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        kind: ProcessKind,
        current: CurrentKind,
        probe_pdg: int,
        target_pdg: int,
        hit_nucleon_pdg: int = 0,
        energy: float = 0.0,
        fs_lepton_pdg: int = 0,
        exclusive_tag: Optional[ExclusiveTag] = None,
    ) -> Interaction:
        """Build an interaction with the probe moving along +z at ``energy``."""
        if not hit_nucleon_pdg and pdg.is_nucleon(target_pdg):
            hit_nucleon_pdg = target_pdg
        target = Target(pdg=target_pdg, hit_nucleon_pdg=hit_nucleon_pdg)
        probe_mass = ParticleTable.instance().mass(probe_pdg)
        init = InitialState(probe_pdg, FourVector.along_z(energy, probe_mass), target)
        return cls(
            process=ProcessInfo(kind, current),
            initial_state=init,
            exclusive_tag=exclusive_tag or ExclusiveTag(),
            fs_lepton_pdg=fs_lepton_pdg,
        )

    @classmethod
    def qel_cc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0, exclusive_tag=None):
        return cls.create(ProcessKind.QUASI_ELASTIC, CurrentKind.WEAK_CC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy, exclusive_tag=exclusive_tag)

    @classmethod
    def qel_nc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.QUASI_ELASTIC, CurrentKind.WEAK_NC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def qel_em(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.QUASI_ELASTIC, CurrentKind.EM, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def ibd(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.INVERSE_BETA_DECAY, CurrentKind.WEAK_CC, probe_pdg,
                          target_pdg, hit_nucleon_pdg, energy)

    @classmethod
    def res_cc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.RESONANT, CurrentKind.WEAK_CC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def res_nc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.RESONANT, CurrentKind.WEAK_NC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def res_em(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.RESONANT, CurrentKind.EM, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def spp_cc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, exclusive_tag, energy=0.0):
        return cls.create(ProcessKind.SINGLE_PION, CurrentKind.WEAK_CC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy, exclusive_tag=exclusive_tag)

    @classmethod
    def spp_nc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, exclusive_tag, energy=0.0):
        return cls.create(ProcessKind.SINGLE_PION, CurrentKind.WEAK_NC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy, exclusive_tag=exclusive_tag)

    @classmethod
    def dis_cc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0, exclusive_tag=None):
        return cls.create(ProcessKind.DEEP_INELASTIC, CurrentKind.WEAK_CC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy, exclusive_tag=exclusive_tag)

    @classmethod
    def dis_nc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.DEEP_INELASTIC, CurrentKind.WEAK_NC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def dis_em(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.DEEP_INELASTIC, CurrentKind.EM, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def coh_cc(cls, target_pdg, probe_pdg, energy=0.0, n_pions=1):
        tag = ExclusiveTag(n_pi_plus=n_pions) if n_pions else ExclusiveTag()
        return cls.create(ProcessKind.COHERENT_PRODUCTION, CurrentKind.WEAK_CC, probe_pdg,
                          target_pdg, 0, energy, exclusive_tag=tag)

    @classmethod
    def coh_nc(cls, target_pdg, probe_pdg, energy=0.0, n_pions=1):
        tag = ExclusiveTag(n_pi0=n_pions) if n_pions else ExclusiveTag()
        return cls.create(ProcessKind.COHERENT_PRODUCTION, CurrentKind.WEAK_NC, probe_pdg,
                          target_pdg, 0, energy, exclusive_tag=tag)

    @classmethod
    def cevns(cls, target_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.COHERENT_ELASTIC, CurrentKind.WEAK_NC, probe_pdg,
                          target_pdg, 0, energy)

    @classmethod
    def dfr_cc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.DIFFRACTIVE, CurrentKind.WEAK_CC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def dfr_nc(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.DIFFRACTIVE, CurrentKind.WEAK_NC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def imd(cls, target_pdg, energy=0.0):
        return cls.create(ProcessKind.INVERSE_MU_DECAY, CurrentKind.WEAK_CC, pdg.NU_MU,
                          target_pdg, 0, energy)

    @classmethod
    def imd_annihilation(cls, target_pdg, energy=0.0):
        return cls.create(ProcessKind.IMD_ANNIHILATION, CurrentKind.WEAK_CC, -pdg.NU_E,
                          target_pdg, 0, energy)

    @classmethod
    def nue_elastic(cls, target_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.NU_ELECTRON_ELASTIC, CurrentKind.WEAK_MIX, probe_pdg,
                          target_pdg, 0, energy)

    @classmethod
    def am_nu_gamma(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.AM_NU_GAMMA, CurrentKind.WEAK_NC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy)

    @classmethod
    def mec_cc(cls, target_pdg, probe_pdg, energy=0.0, hit_cluster_pdg=0):
        return cls.create(ProcessKind.MEC, CurrentKind.WEAK_CC, probe_pdg, target_pdg,
                          hit_cluster_pdg, energy)

    @classmethod
    def mec_nc(cls, target_pdg, probe_pdg, energy=0.0, hit_cluster_pdg=0):
        return cls.create(ProcessKind.MEC, CurrentKind.WEAK_NC, probe_pdg, target_pdg,
                          hit_cluster_pdg, energy)

    @classmethod
    def glashow_resonance(cls, target_pdg, energy=0.0):
        return cls.create(ProcessKind.GLASHOW_RESONANCE, CurrentKind.WEAK_CC, -pdg.NU_E,
                          target_pdg, 0, energy)

    @classmethod
    def photon_resonance(cls, target_pdg, hit_nucleon_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.PHOTON_RESONANCE, CurrentKind.WEAK_CC, probe_pdg,
                          target_pdg, hit_nucleon_pdg, energy)

    @classmethod
    def photon_coherent(cls, target_pdg, probe_pdg, energy=0.0):
        return cls.create(ProcessKind.PHOTON_COHERENT, CurrentKind.WEAK_CC, probe_pdg,
                          target_pdg, 0, energy)

    @classmethod
    def single_kaon(cls, target_pdg, hit_nucleon_pdg, probe_pdg, kaon_pdg, energy=0.0,
                    n_protons=1):
        tag = ExclusiveTag(
            n_protons=n_protons, n_neutrons=1 - n_protons,
            strange=True, strange_hadron_pdg=kaon_pdg,
        )
        return cls.create(ProcessKind.SINGLE_KAON, CurrentKind.WEAK_CC, probe_pdg, target_pdg,
                          hit_nucleon_pdg, energy, exclusive_tag=tag)

    @classmethod
    def dm_elastic(cls, target_pdg, hit_nucleon_pdg, energy=0.0):
        return cls.create(ProcessKind.DARK_MATTER_ELASTIC, CurrentKind.DARK_MATTER,
                          pdg.DARK_MATTER, target_pdg, hit_nucleon_pdg, energy)

    @classmethod
    def dm_dis(cls, target_pdg, hit_nucleon_pdg, energy=0.0):
        return cls.create(ProcessKind.DARK_MATTER_DEEP_INELASTIC, CurrentKind.DARK_MATTER,
                          pdg.DARK_MATTER, target_pdg, hit_nucleon_pdg, energy)

    @classmethod
    def dm_electron_elastic(cls, target_pdg, energy=0.0):
        return cls.create(ProcessKind.DARK_MATTER_ELECTRON_ELASTIC, CurrentKind.DARK_MATTER,
                          pdg.DARK_MATTER, target_pdg, 0, energy)
