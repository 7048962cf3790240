"""Phase-space facade bound to one interaction.

``PhaseSpace`` answers threshold, limit and membership queries for the
interaction it is bound to. Every ``ProcessKind`` has one entry in
``CHANNEL_RULES`` naming the calculators used for each query, so adding a
channel means adding a row there.

Import Policy:
    from nuphase.kinematics.phase_space import PhaseSpace, KinematicVariable

Example:
    >>> interaction = Interaction.dis_cc(pdg.ion_pdg(6, 12), pdg.NEUTRON, pdg.NU_MU, 5.0)
    >>> ps = PhaseSpace(interaction)
    >>> ps.is_above_threshold()
    True
    >>> Wl = ps.limits(KinematicVariable.W)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

import numpy as np

from nuphase.config.physics_config import PhaseSpaceConfig
from nuphase.core import pdg
from nuphase.core.constants import (
    A_SMALL_NUM,
    ELECTRON_MASS,
    ELECTRON_MASS2,
    LIGHTEST_CHARM_HADRON_MASS,
    MIN_Q2_LIMIT_VLE,
    MUON_MASS,
    MUON_MASS2,
    NEUTRON_MASS,
    NUCLEON_MASS,
    PHOTON_TEST_MASS,
    PI0_MASS,
    PION_MASS,
    PROTON_MASS,
    TAU_MASS,
    W_BOSON_MASS,
)
from nuphase.core.exceptions import NumericalError, UnsupportedChannel
from nuphase.core.interaction import Interaction, ReferenceFrame
from nuphase.core.pdg import ParticleTable
from nuphase.core.process import ProcessKind
from nuphase.core.range import Range1D
from nuphase.kinematics import limits, spp

logger = logging.getLogger(__name__)


class KinematicVariable(Enum):
    """Kinematic variable tag for ``PhaseSpace.limits``.

    Supported: W, Q2, q2, x, y, t. The remaining members are valid tags for
    which no limit calculator exists; asking for them logs an error and
    returns the undefined range.
    """
    NULL = "null"
    W = "W"
    Q2 = "Q2"
    SIGNED_Q2 = "q2"
    X = "x"
    Y = "y"
    T = "t"
    TK = "TK"    # hadron kinetic energy
    TL = "TL"    # lepton kinetic energy
    CTL = "CTL"  # cos(theta) of the lepton
    EL = "EL"    # lepton energy


def _within(value: float, bounds: Range1D) -> bool:
    return not bounds.is_undefined and bounds.contains(value)


def set_running_W_Q2(interaction: Interaction, W: float, Q2: float) -> None:
    """Move the running kinematics to (W, Q2) and the matching Bjorken (x, y).

    Raises:
        ValueError: If the probe energy or hit-nucleon mass is not positive
    """
    kine = interaction.kinematics
    kine.W = W
    kine.Q2 = Q2
    Ev = interaction.probe_energy(ReferenceFrame.HIT_NUCLEON_REST)
    kine.x, kine.y = limits.x_y_from_W_Q2(Ev, interaction.target.hit_nucleon_mass, W, Q2)


class PhaseSpace:
    """Kinematic phase space of one interaction.

    Holds a non-owning reference to the interaction and never mutates it.
    Limits are only meaningful above threshold; check ``is_above_threshold``
    first.

    Args:
        interaction: Interaction to bind (may be bound later)
        config: Channel caps; resolved from the YAML defaults when omitted
    """

    def __init__(self, interaction: Optional[Interaction] = None,
                 config: Optional[PhaseSpaceConfig] = None):
        self._config = config if config is not None else PhaseSpaceConfig.from_defaults()
        self._interaction: Optional[Interaction] = None
        self.use_interaction(interaction)

    def use_interaction(self, interaction: Optional[Interaction]) -> None:
        """Bind to another interaction; nothing from the previous one is kept."""
        self._interaction = interaction

    @property
    def interaction(self) -> Interaction:
        if self._interaction is None:
            raise ValueError("PhaseSpace is not bound to an interaction")
        return self._interaction

    @property
    def config(self) -> PhaseSpaceConfig:
        return self._config

    @property
    def _rules(self) -> ChannelRules:
        return CHANNEL_RULES[self.interaction.process.kind]

    # ------------------------------------------------------------------
    # Public query surface
    # ------------------------------------------------------------------

    def threshold(self) -> float:
        """Minimum probe energy [GeV] at which the final state is reachable.

        Quoted in the frame used by ``is_above_threshold`` for the channel.

        Raises:
            UnsupportedChannel: If no threshold formula applies
            UnresolvedChannel: If a single-pion tag names no pion
        """
        return self._rules.threshold(self)

    def is_above_threshold(self) -> bool:
        frame = self._rules.frame
        E = 0.0 if frame is None else self.interaction.probe_energy(frame)
        Ethr = self.threshold()
        logger.debug(f"E = {E}, Ethr = {Ethr}")
        return E > Ethr

    def is_allowed(self) -> bool:
        """Whether the running kinematic point lies inside the phase space."""
        return self._rules.allowed(self)

    def limits(self, variable: KinematicVariable) -> Range1D:
        handler = _LIMIT_HANDLERS.get(variable)
        if handler is None:
            logger.error(f"Couldn't compute limits for {variable.value}")
            return Range1D.undefined()
        return handler(self)

    def minimum(self, variable: KinematicVariable) -> float:
        return self.limits(variable).min

    def maximum(self, variable: KinematicVariable) -> float:
        return self.limits(variable).max

    def W_lim(self) -> Range1D:
        """Hadronic invariant mass limits."""
        return self._rules.W(self)

    def Q2_lim_W(self) -> Range1D:
        """Q2 limits at the running W (fixed recoil mass for elastic channels)."""
        return self._rules.Q2_W(self, self.interaction.kinematics.W)

    def Q2_lim_at_W(self, W: float) -> Range1D:
        """Q2 limits at an explicit W, leaving the running kinematics untouched."""
        return self._rules.Q2_W(self, W)

    def q2_lim_W(self) -> Range1D:
        return self.Q2_lim_W().reflected()

    def Q2_lim(self) -> Range1D:
        """Q2 limits irrespective of W."""
        return self._rules.Q2(self)

    def q2_lim(self) -> Range1D:
        return self.Q2_lim().reflected()

    def x_lim(self) -> Range1D:
        return self._rules.x(self)

    def y_lim(self, xsi: Optional[float] = None) -> Range1D:
        """y limits; ``xsi`` selects the Paschos-Schalla coherent variant."""
        if xsi is not None and self.interaction.process.is_coherent_production:
            return self._y_lim_coherent_xsi(xsi)
        return self._rules.y(self)

    def y_lim_X(self, xsi: Optional[float] = None) -> Range1D:
        """y limits at the running x."""
        if xsi is not None and self.interaction.process.is_coherent_production:
            return self._y_lim_coherent_xsi(xsi)
        return self._rules.y_X(self)

    def t_lim(self) -> Range1D:
        """|t| limits for coherent and diffractive production.

        Raises:
            NumericalError: If the diffractive t minimum is not finite
        """
        return self._rules.t(self)

    # Single-pion production windows

    def threshold_spp_iso(self) -> float:
        return spp.threshold_spp_iso(self.interaction)

    def W_lim_spp(self) -> Range1D:
        return spp.W_lim_spp(self.interaction)

    def W_lim_spp_iso(self) -> Range1D:
        return spp.W_lim_spp_iso(self.interaction)

    def Q2_lim_W_spp(self) -> Range1D:
        return spp.Q2_lim_W_spp(self.interaction)

    def Q2_lim_W_spp_iso(self) -> Range1D:
        return spp.Q2_lim_W_spp_iso(self.interaction)

    # ------------------------------------------------------------------
    # Shared inputs
    # ------------------------------------------------------------------

    def _Ev(self) -> float:
        return self.interaction.probe_energy(ReferenceFrame.HIT_NUCLEON_REST)

    def _Ev_lab(self) -> float:
        return self.interaction.probe_energy(ReferenceFrame.LAB)

    def _M(self) -> float:
        return self.interaction.target.hit_nucleon_mass

    def _ml(self) -> float:
        return self.interaction.fs_lepton_mass

    def _coherent_meson_mass(self) -> float:
        if self.interaction.exclusive_tag.n_pions > 0:
            return PION_MASS if self.interaction.process.is_weak_cc else PI0_MASS
        # Photon-like hadronic system, kept finite
        return A_SMALL_NUM

    def _elastic_hadron_mass(self) -> float:
        """W of a quasi-elastic final state, honouring charm/strange tags."""
        tag = self.interaction.exclusive_tag
        table = ParticleTable.instance()
        if tag.is_charm_event:
            return table.mass(tag.charm_hadron_pdg)
        if tag.is_strange_event:
            return table.mass(tag.strange_hadron_pdg)
        return self.interaction.recoil_nucleon_mass

    def _W_Q2_from_running_x_y(self):
        kine = self.interaction.kinematics
        return limits.W_Q2_from_x_y(self._Ev(), self._M(), kine.x, kine.y)

    # ------------------------------------------------------------------
    # Thresholds
    # ------------------------------------------------------------------

    def _threshold_unsupported(self) -> float:
        logger.error(f"Can't compute threshold for {self.interaction.as_string()}")
        raise UnsupportedChannel(
            f"Can't compute threshold for {self.interaction.as_string()}"
        )

    def _threshold_zero(self) -> float:
        return 0.0

    def _threshold_single_pion(self) -> float:
        interaction = self.interaction
        table = ParticleTable.instance()
        Mi = self._M()
        Mf = PROTON_MASS if interaction.exclusive_tag.n_protons == 1 else NEUTRON_MASS
        mpi = table.mass(spp.final_pion_pdg(interaction))
        mi = interaction.initial_state.probe_mass
        mtot = Mf + self._ml() + mpi
        return (mtot * mtot - Mi * Mi - mi * mi) / (2.0 * Mi)

    def _threshold_single_kaon(self) -> float:
        tag = self.interaction.exclusive_tag
        Mi = self._M()
        Mf = PROTON_MASS if tag.n_protons == 1 else NEUTRON_MASS
        mk = ParticleTable.instance().mass(tag.strange_hadron_pdg)
        mtot = Mf + self._ml() + mk
        return (mtot * mtot - Mi * Mi) / (2.0 * Mi)

    def _threshold_coherent_elastic(self) -> float:
        ml = self._ml()
        return ml + 0.5 * ml * ml / self.interaction.target.mass

    def _threshold_coherent_production(self) -> float:
        MA = self.interaction.target.mass
        m = self._ml() + self._coherent_meson_mass()
        return max(0.0, m + 0.5 * m * m / MA)

    def _threshold_inelastic(self) -> float:
        interaction = self.interaction
        process = interaction.process
        target = interaction.target
        if not target.hit_nucleon_is_set:
            raise UnsupportedChannel(
                f"Hit nucleon must be set to compute the threshold of {interaction.as_string()}"
            )
        table = ParticleTable.instance()
        Mn = self._M()
        Mn2 = Mn * Mn
        ml = self._ml()
        kind = process.kind

        Wmin = NUCLEON_MASS + PION_MASS
        if process.is_quasi_elastic_family:
            final_nucleon = target.hit_nucleon_pdg
            if process.is_weak_cc:
                final_nucleon = pdg.switch_proton_neutron(final_nucleon)
            Wmin = table.mass(final_nucleon)
        if kind is ProcessKind.RESONANT:
            Wmin = NUCLEON_MASS + PHOTON_TEST_MASS

        tag = interaction.exclusive_tag
        if tag.is_charm_event:
            if tag.is_inclusive_charm:
                Wmin = NUCLEON_MASS + LIGHTEST_CHARM_HADRON_MASS
            else:
                mchm = table.mass(tag.charm_hadron_pdg)
                if kind in (ProcessKind.QUASI_ELASTIC, ProcessKind.INVERSE_BETA_DECAY):
                    Wmin = mchm + A_SMALL_NUM
                else:
                    Wmin = NEUTRON_MASS + mchm + A_SMALL_NUM

        Ethr = 0.5 * ((Wmin + ml) ** 2 - Mn2) / Mn
        if process.is_dark_matter:
            # Outgoing probe keeps its mass: W starts at the nucleon
            Wmin = Mn
            Ethr = max(0.5 * ((Wmin + ml) ** 2 - Mn2 - ml * ml) / Mn, ml)

        return max(0.0, Ethr)

    def _threshold_inverse_mu_decay(self) -> float:
        return max(0.0, 0.5 * (MUON_MASS2 - ELECTRON_MASS2) / ELECTRON_MASS)

    def _threshold_mec(self) -> float:
        target = self.interaction.target
        ml = self._ml()
        if not target.hit_nucleon_is_set:
            return ml
        Mn = self._M()
        Wmin = self.interaction.recoil_nucleon_mass
        return max(0.0, 0.5 * ((Wmin + ml) ** 2 - Mn * Mn) / Mn)

    def _threshold_glashow(self) -> float:
        ml = self._ml()
        return max(0.0, 0.5 * (ml * ml - ELECTRON_MASS2) / ELECTRON_MASS)

    def _threshold_photon_resonance(self) -> float:
        ml = self._ml()
        Mn = self._M()
        return max(0.0, 0.5 * (ml * ml - Mn * Mn) / Mn)

    def _threshold_photon_coherent(self) -> float:
        probe = self.interaction.probe_pdg
        ml = 0.0
        if pdg.is_nu_e(probe):
            ml = ELECTRON_MASS
        elif pdg.is_nu_mu(probe):
            ml = MUON_MASS
        elif pdg.is_nu_tau(probe):
            ml = TAU_MASS
        target = self.interaction.target
        MA = target.Z * PROTON_MASS + target.N * NEUTRON_MASS
        return max(0.0, 0.5 * ((W_BOSON_MASS + ml) ** 2 - MA * MA) / MA)

    # ------------------------------------------------------------------
    # Allowed-region tests
    # ------------------------------------------------------------------

    def _never_allowed(self) -> bool:
        return False

    def _always_allowed(self) -> bool:
        # Single-kaon models return zero outside their own kinematic range
        return True

    def _allowed_Q2(self) -> bool:
        return _within(self.interaction.kinematics.Q2, self.Q2_lim())

    def _allowed_W_Q2(self) -> bool:
        kine = self.interaction.kinematics
        return _within(kine.Q2, self.Q2_lim_W()) and _within(kine.W, self.W_lim())

    def _allowed_y(self) -> bool:
        return _within(self.interaction.kinematics.y, self.y_lim())

    def _allowed_x_y(self) -> bool:
        kine = self.interaction.kinematics
        return _within(kine.x, self.x_lim()) and _within(kine.y, self.y_lim())

    def _allowed_positive_Q2(self) -> bool:
        return self.interaction.kinematics.Q2 > 0

    def _allowed_diffractive(self) -> bool:
        W, Q2 = self._W_Q2_from_running_x_y()
        Wl = self.W_lim()
        Q2l = self.Q2_lim_at_W(W)
        logger.debug(f"W = {W}, limits = [{Wl.min}, {Wl.max}]")
        logger.debug(f"Q2 = {Q2}, limits = [{Q2l.min}, {Q2l.max}]")
        in_phys = _within(W, Wl) and _within(Q2, Q2l)

        # t minimum is NaN outside the W, Q2 region
        if in_phys:
            t = self.interaction.kinematics.t
            tl = self.t_lim()
            logger.debug(f"t = {t}, limits = [{tl.min}, {tl.max}]")
            in_phys = _within(t, tl)

        logger.debug(f"phase space point is {'ALLOWED' if in_phys else 'NOT ALLOWED'}")
        return in_phys

    # ------------------------------------------------------------------
    # W limits
    # ------------------------------------------------------------------

    def _undefined(self, *args) -> Range1D:
        return Range1D.undefined()

    def _W_lim_recoil(self) -> Range1D:
        return Range1D.point(self.interaction.recoil_nucleon_mass)

    def _W_lim_inelastic(self) -> Range1D:
        process = self.interaction.process
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        if process.is_em:
            Wl = limits.em_W_lim(Ev, M, ml)
        else:
            Wl = limits.inel_W_lim(Ev, M, ml)

        W_min = Wl.min
        if self.interaction.exclusive_tag.is_charm_event:
            W_min = max(W_min, NEUTRON_MASS + LIGHTEST_CHARM_HADRON_MASS)
        elif process.kind in (ProcessKind.DIFFRACTIVE, ProcessKind.DEEP_INELASTIC):
            W_min = max(W_min, NEUTRON_MASS + PION_MASS)

        if W_min > Wl.max:
            return Range1D.undefined()
        return Range1D(W_min, Wl.max)

    def _W_lim_dark(self) -> Range1D:
        Wl = limits.dark_W_lim(self._Ev(), self._M(), self._ml())
        W_min = Wl.min
        if self.interaction.exclusive_tag.is_charm_event:
            W_min = max(W_min, NEUTRON_MASS + LIGHTEST_CHARM_HADRON_MASS)
        logger.debug(f"Found nominal limits: {W_min}, {Wl.max}")
        if W_min > Wl.max:
            return Range1D.undefined()
        return Range1D(W_min, Wl.max)

    def _W_lim_single_pion(self) -> Range1D:
        return self.W_lim_spp()

    # ------------------------------------------------------------------
    # Q2 limits at fixed W
    # ------------------------------------------------------------------

    def _Q2_lim_W_coherent(self, W: float) -> Range1D:
        # Coherent production ignores W and uses its W-integrated limits
        return self.Q2_lim()

    def _Q2_lim_W_elastic(self, W: float) -> Range1D:
        process = self.interaction.process
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        # Recoil nucleon only; charm and strange tags are honoured by Q2_lim
        W = self.interaction.recoil_nucleon_mass
        if process.kind is ProcessKind.INVERSE_BETA_DECAY:
            return limits.inel_Q2_lim_W(Ev, M, ml, W, MIN_Q2_LIMIT_VLE)
        if process.is_dark_matter:
            return limits.dark_Q2_lim_W(Ev, M, ml, W)
        if process.is_em:
            return limits.em_Q2_lim_W(Ev, M, ml, W)
        return limits.inel_Q2_lim_W(Ev, M, ml, W)

    def _Q2_lim_W_inelastic(self, W: float) -> Range1D:
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        if self.interaction.process.is_em:
            return limits.em_Q2_lim_W(Ev, M, ml, W)
        return limits.inel_Q2_lim_W(Ev, M, ml, W)

    def _Q2_lim_W_dark(self, W: float) -> Range1D:
        return limits.dark_Q2_lim_W(self._Ev(), self._M(), self._ml(), W)

    def _Q2_lim_W_single_pion(self, W: float) -> Range1D:
        return spp.Q2_lim_W_spp(self.interaction, W)

    # ------------------------------------------------------------------
    # W-integrated Q2 limits
    # ------------------------------------------------------------------

    def _Q2_lim_cevns(self) -> Range1D:
        return limits.cevns_Q2_lim(self._Ev_lab())

    def _Q2_lim_coherent(self) -> Range1D:
        return limits.coh_Q2_lim(self._M(), self._coherent_meson_mass(), self._ml(), self._Ev())

    def _Q2_lim_elastic(self) -> Range1D:
        process = self.interaction.process
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        W = self._elastic_hadron_mass()
        if process.kind is ProcessKind.INVERSE_BETA_DECAY:
            return limits.inel_Q2_lim_W(Ev, M, ml, W, MIN_Q2_LIMIT_VLE)
        if process.is_dark_matter:
            return limits.dark_Q2_lim_W(Ev, M, ml, W)
        if process.is_em:
            return limits.em_Q2_lim_W(Ev, M, ml, W)
        return limits.inel_Q2_lim_W(Ev, M, ml, W)

    def _Q2_lim_mec(self) -> Range1D:
        if not self.interaction.target.hit_nucleon_is_set:
            logger.warning("MEC Q2 limits need the hit nucleon cluster to be set")
            return Range1D.undefined()
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        W = self.interaction.recoil_nucleon_mass
        if self.interaction.process.is_em:
            Q2l = limits.em_Q2_lim_W(Ev, M, ml, W)
        else:
            Q2l = limits.inel_Q2_lim_W(Ev, M, ml, W)
        if Q2l.is_undefined:
            return Q2l
        return Range1D(Q2l.min, min(Q2l.max, self._config.mec_Q2_max))

    def _Q2_lim_inelastic(self) -> Range1D:
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        if self.interaction.process.is_em:
            return limits.em_Q2_lim(Ev, M, ml)
        return limits.inel_Q2_lim(Ev, M, ml)

    def _Q2_lim_dark(self) -> Range1D:
        return limits.dark_Q2_lim(self._Ev(), self._M(), self._ml())

    # ------------------------------------------------------------------
    # x limits
    # ------------------------------------------------------------------

    def _x_lim_inelastic(self) -> Range1D:
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        if self.interaction.process.is_em:
            return limits.em_x_lim(Ev, M, ml)
        return limits.inel_x_lim(Ev, M, ml)

    def _x_lim_dark(self) -> Range1D:
        return limits.dark_x_lim(self._Ev(), self._M(), self._ml())

    def _x_lim_coherent(self) -> Range1D:
        return limits.coh_x_lim()

    def _x_lim_elastic(self) -> Range1D:
        return Range1D.point(1.0)

    def _x_lim_open(self) -> Range1D:
        return Range1D(A_SMALL_NUM, 1.0 - A_SMALL_NUM)

    # ------------------------------------------------------------------
    # y limits
    # ------------------------------------------------------------------

    def _y_lim_inelastic(self) -> Range1D:
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        if self.interaction.process.is_em:
            return limits.em_y_lim(Ev, M, ml)
        return limits.inel_y_lim(Ev, M, ml)

    def _y_lim_dark(self) -> Range1D:
        return limits.dark_y_lim(self._Ev(), self._M(), self._ml())

    def _y_lim_coherent(self) -> Range1D:
        return limits.coh_y_lim(self._Ev_lab(), self._ml())

    def _y_lim_electron_target(self) -> Range1D:
        Ev = self._Ev_lab()
        ml = self._ml()
        me = ELECTRON_MASS
        y_max = 1.0 - (ml * ml + me * me) / (2.0 * me * Ev) - A_SMALL_NUM
        return Range1D(A_SMALL_NUM, y_max)

    def _y_lim_dark_electron(self) -> Range1D:
        Ev = self._Ev_lab()
        ml = self._ml()
        me = ELECTRON_MASS
        y_min = (Ev * me * me + ml * ml * (Ev + 2.0 * me)) / (
            Ev * (2.0 * Ev * me + me * me + ml * ml)
        )
        return Range1D(y_min + A_SMALL_NUM, 1.0 - A_SMALL_NUM)

    def _y_lim_diffractive(self) -> Range1D:
        Ev = self._Ev()
        ml = self._ml()
        return Range1D(PION_MASS / Ev + A_SMALL_NUM, 1.0 - ml / Ev - A_SMALL_NUM)

    def _y_lim_X_inelastic(self) -> Range1D:
        Ev, M, ml = self._Ev(), self._M(), self._ml()
        x = self.interaction.kinematics.x
        if self.interaction.process.is_em:
            return limits.em_y_lim_X(Ev, M, ml, x)
        return limits.inel_y_lim_X(Ev, M, ml, x)

    def _y_lim_X_dark(self) -> Range1D:
        x = self.interaction.kinematics.x
        return limits.dark_y_lim_X(self._Ev(), self._M(), self._ml(), x)

    def _y_lim_coherent_xsi(self, xsi: float) -> Range1D:
        return limits.coh_y_lim_xsi(
            self.interaction.target.mass,
            self._coherent_meson_mass(),
            self._ml(),
            self._Ev(),
            self.interaction.kinematics.Q2,
            xsi,
        )

    # ------------------------------------------------------------------
    # t limits
    # ------------------------------------------------------------------

    def _t_lim_inapplicable(self) -> Range1D:
        logger.warning(
            "It is not sensible to ask for t limits for events that are not "
            "coherent or diffractive."
        )
        return Range1D.undefined()

    def _t_lim_coherent(self) -> Range1D:
        # Kartavtsev, Paschos and Gounaris, PRD 74, 054007
        _, Q2 = self._W_Q2_from_running_x_y()
        nu = self._Ev() * self.interaction.kinematics.y
        if nu <= 0:
            logger.warning(f"Coherent t limits need nu > 0, got nu = {nu}")
            return Range1D.undefined()
        m_other2 = self._coherent_meson_mass() ** 2
        t_min = ((Q2 + m_other2) / (2.0 * nu)) ** 2
        return Range1D(t_min, self._config.coherent_t_max)

    def _t_lim_diffractive(self) -> Range1D:
        # Nucl. Phys. B278, 61 (1986), eq. 12; t is positive by convention
        Ev = self._Ev()
        _, Q2 = self._W_Q2_from_running_x_y()
        nu = Ev * self.interaction.kinematics.y

        mpi = PION_MASS if self.interaction.process.is_weak_cc else PI0_MASS
        mpi2 = mpi * mpi
        M = ParticleTable.instance().mass(self.interaction.target.hit_nucleon_pdg)
        M2 = M * M

        nu_sq_plus_Q2 = nu * nu + Q2
        nu_over_M = nu / M
        mpi_Q2_term = mpi2 - Q2 - 2.0 * nu * nu
        A1 = 1.0 + 2.0 * nu_over_M + nu_over_M * nu_over_M - nu_sq_plus_Q2 / M2
        A2 = (1.0 + nu_over_M) * mpi_Q2_term + 2.0 * nu_over_M * nu_sq_plus_Q2
        A3 = mpi_Q2_term * mpi_Q2_term - 4.0 * nu_sq_plus_Q2 * (nu * nu - mpi2)

        with np.errstate(invalid="ignore", divide="ignore"):
            t_min = float(np.abs((A2 + np.sqrt(A2 * A2 - A1 * A3)) / A1))

        if not np.isfinite(t_min):
            logger.error(
                f"tmin for diffractive scattering is NaN (Enu = {Ev}, Q2 = {Q2}, nu = {nu})"
            )
            raise NumericalError("NaN tmin for diffractive scattering")

        return Range1D(t_min, self._config.diffractive_t_max)


@dataclass(frozen=True)
class ChannelRules:
    """Calculators used by ``PhaseSpace`` for one channel.

    ``frame`` is the frame of the probe energy compared against the
    threshold; None means no energy is ever above threshold.
    """

    threshold: Callable[[PhaseSpace], float]
    frame: Optional[ReferenceFrame]
    allowed: Callable[[PhaseSpace], bool] = PhaseSpace._never_allowed
    W: Callable[[PhaseSpace], Range1D] = PhaseSpace._undefined
    Q2_W: Callable[[PhaseSpace, float], Range1D] = PhaseSpace._undefined
    Q2: Callable[[PhaseSpace], Range1D] = PhaseSpace._undefined
    x: Callable[[PhaseSpace], Range1D] = PhaseSpace._undefined
    y: Callable[[PhaseSpace], Range1D] = PhaseSpace._undefined
    y_X: Callable[[PhaseSpace], Range1D] = PhaseSpace._undefined
    t: Callable[[PhaseSpace], Range1D] = PhaseSpace._t_lim_inapplicable


_LAB = ReferenceFrame.LAB
_NUCLEON_REST = ReferenceFrame.HIT_NUCLEON_REST

_ELASTIC_RULES = dict(
    frame=_NUCLEON_REST,
    threshold=PhaseSpace._threshold_inelastic,
    allowed=PhaseSpace._allowed_Q2,
    W=PhaseSpace._W_lim_recoil,
    Q2_W=PhaseSpace._Q2_lim_W_elastic,
    Q2=PhaseSpace._Q2_lim_elastic,
    x=PhaseSpace._x_lim_elastic,
)

_INELASTIC_RULES = dict(
    frame=_NUCLEON_REST,
    threshold=PhaseSpace._threshold_inelastic,
    allowed=PhaseSpace._allowed_W_Q2,
    W=PhaseSpace._W_lim_inelastic,
    Q2_W=PhaseSpace._Q2_lim_W_inelastic,
    Q2=PhaseSpace._Q2_lim_inelastic,
    x=PhaseSpace._x_lim_inelastic,
    y=PhaseSpace._y_lim_inelastic,
    y_X=PhaseSpace._y_lim_X_inelastic,
)

_ELECTRON_TARGET_RULES = dict(
    frame=_LAB,
    allowed=PhaseSpace._allowed_y,
    y=PhaseSpace._y_lim_electron_target,
)

CHANNEL_RULES: Dict[ProcessKind, ChannelRules] = {
    ProcessKind.QUASI_ELASTIC: ChannelRules(**_ELASTIC_RULES),
    ProcessKind.INVERSE_BETA_DECAY: ChannelRules(**_ELASTIC_RULES),
    ProcessKind.DARK_MATTER_ELASTIC: ChannelRules(**_ELASTIC_RULES),
    ProcessKind.SINGLE_PION: ChannelRules(
        frame=_NUCLEON_REST,
        threshold=PhaseSpace._threshold_single_pion,
        W=PhaseSpace._W_lim_single_pion,
        Q2_W=PhaseSpace._Q2_lim_W_single_pion,
    ),
    ProcessKind.RESONANT: ChannelRules(**_INELASTIC_RULES),
    ProcessKind.DEEP_INELASTIC: ChannelRules(**_INELASTIC_RULES),
    ProcessKind.DARK_MATTER_DEEP_INELASTIC: ChannelRules(
        frame=_NUCLEON_REST,
        threshold=PhaseSpace._threshold_inelastic,
        allowed=PhaseSpace._allowed_W_Q2,
        W=PhaseSpace._W_lim_dark,
        Q2_W=PhaseSpace._Q2_lim_W_dark,
        Q2=PhaseSpace._Q2_lim_dark,
        x=PhaseSpace._x_lim_dark,
        y=PhaseSpace._y_lim_dark,
        y_X=PhaseSpace._y_lim_X_dark,
    ),
    ProcessKind.DIFFRACTIVE: ChannelRules(
        frame=_NUCLEON_REST,
        threshold=PhaseSpace._threshold_inelastic,
        allowed=PhaseSpace._allowed_diffractive,
        W=PhaseSpace._W_lim_inelastic,
        Q2_W=PhaseSpace._Q2_lim_W_inelastic,
        Q2=PhaseSpace._Q2_lim_inelastic,
        x=PhaseSpace._x_lim_open,
        y=PhaseSpace._y_lim_diffractive,
        t=PhaseSpace._t_lim_diffractive,
    ),
    ProcessKind.COHERENT_ELASTIC: ChannelRules(
        frame=_LAB,
        threshold=PhaseSpace._threshold_coherent_elastic,
        allowed=PhaseSpace._allowed_positive_Q2,
        Q2=PhaseSpace._Q2_lim_cevns,
    ),
    ProcessKind.COHERENT_PRODUCTION: ChannelRules(
        frame=_LAB,
        threshold=PhaseSpace._threshold_coherent_production,
        allowed=PhaseSpace._allowed_x_y,
        Q2_W=PhaseSpace._Q2_lim_W_coherent,
        Q2=PhaseSpace._Q2_lim_coherent,
        x=PhaseSpace._x_lim_coherent,
        y=PhaseSpace._y_lim_coherent,
        y_X=PhaseSpace._y_lim_coherent,
        t=PhaseSpace._t_lim_coherent,
    ),
    ProcessKind.INVERSE_MU_DECAY: ChannelRules(
        threshold=PhaseSpace._threshold_inverse_mu_decay, **_ELECTRON_TARGET_RULES
    ),
    ProcessKind.IMD_ANNIHILATION: ChannelRules(
        threshold=PhaseSpace._threshold_inverse_mu_decay, **_ELECTRON_TARGET_RULES
    ),
    ProcessKind.NU_ELECTRON_ELASTIC: ChannelRules(
        threshold=PhaseSpace._threshold_zero, **_ELECTRON_TARGET_RULES
    ),
    ProcessKind.DARK_MATTER_ELECTRON_ELASTIC: ChannelRules(
        frame=_LAB,
        threshold=PhaseSpace._threshold_zero,
        allowed=PhaseSpace._allowed_y,
        y=PhaseSpace._y_lim_dark_electron,
    ),
    ProcessKind.AM_NU_GAMMA: ChannelRules(
        frame=_NUCLEON_REST,
        threshold=PhaseSpace._threshold_zero,
    ),
    ProcessKind.MEC: ChannelRules(
        frame=_LAB,
        threshold=PhaseSpace._threshold_mec,
        allowed=PhaseSpace._allowed_Q2,
        Q2=PhaseSpace._Q2_lim_mec,
    ),
    ProcessKind.GLASHOW_RESONANCE: ChannelRules(
        frame=_LAB,
        threshold=PhaseSpace._threshold_glashow,
    ),
    ProcessKind.PHOTON_RESONANCE: ChannelRules(
        frame=_LAB,
        threshold=PhaseSpace._threshold_photon_resonance,
    ),
    ProcessKind.PHOTON_COHERENT: ChannelRules(
        frame=_LAB,
        threshold=PhaseSpace._threshold_photon_coherent,
    ),
    ProcessKind.SINGLE_KAON: ChannelRules(
        frame=_NUCLEON_REST,
        threshold=PhaseSpace._threshold_single_kaon,
        allowed=PhaseSpace._always_allowed,
    ),
    ProcessKind.NORMALIZATION: ChannelRules(
        frame=None,
        threshold=PhaseSpace._threshold_zero,
    ),
    ProcessKind.UNKNOWN: ChannelRules(
        frame=None,
        threshold=PhaseSpace._threshold_unsupported,
    ),
}

_LIMIT_HANDLERS: Dict[KinematicVariable, Callable[[PhaseSpace], Range1D]] = {
    KinematicVariable.W: PhaseSpace.W_lim,
    KinematicVariable.Q2: PhaseSpace.Q2_lim,
    KinematicVariable.SIGNED_Q2: PhaseSpace.q2_lim,
    KinematicVariable.X: PhaseSpace.x_lim,
    KinematicVariable.Y: PhaseSpace.y_lim,
    KinematicVariable.T: PhaseSpace.t_lim,
}
