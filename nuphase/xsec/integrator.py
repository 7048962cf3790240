"""Total cross-section integrator.

Turns a d2xsec/dWdQ2 model into a total cross section. Three routes are
tried in order:

1. A total cross-section spline for the equivalent free-nucleon interaction,
   scaled by the number of like nucleons in the target.
2. A cache branch of free-nucleon cross sections on a log-spaced knot grid,
   built on first use when ``RunOptions.bare_xsec_precalc`` is set.
3. Direct 2D integration over the W x Q2 rectangle returned by PhaseSpace.

Integrals run in units of 1e-38 cm^2; results are returned in natural units
(GeV^-2). Divide by ``nuphase.core.units.cm2`` for cm^2.

Import Policy:
    from nuphase.xsec.integrator import XSecIntegrator

DO NOT use: from nuphase.xsec.integrator import *
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from scipy.integrate import cubature, dblquad, qmc_quad

from nuphase.cache.cache import Cache, CacheBranch
from nuphase.config.enums import IntegrationType
from nuphase.config.physics_config import (
    IntegrationConfig,
    NuphaseConfig,
    RunOptions,
    create_default_config,
)
from nuphase.core import pdg
from nuphase.core.constants import A_SMALL_NUM
from nuphase.core.event import PhaseSpaceKind
from nuphase.core.interaction import Interaction, InteractionFlag, ReferenceFrame
from nuphase.core.range import Range1D
from nuphase.core.units import XSEC_UNIT_1E38_CM2
from nuphase.kinematics.phase_space import PhaseSpace, set_running_W_Q2
from nuphase.xsec.model import XSecAlgorithm
from nuphase.xsec.spline_list import XSecSplineList

logger = logging.getLogger(__name__)

# Genz-Malik degree-7 rule in 2D: 2^2 + 2*2^2 + 2*2 + 1 nodes per region,
# and each subdivision splits a region into 2^2 children
_GENZ_MALIK_NODES_2D = 17
_EVALS_PER_SUBDIVISION = 4 * _GENZ_MALIK_NODES_2D

_QMC_ESTIMATES = 8


def phase_space_ok(Wl: Range1D, Q2l: Range1D) -> bool:
    """Whether the W x Q2 rectangle is non-empty with non-negative bounds."""
    return (
        Q2l.min >= 0.0 and Q2l.max >= 0.0 and Q2l.max >= Q2l.min
        and Wl.min >= 0.0 and Wl.max >= 0.0 and Wl.max >= Wl.min
    )


class XSecIntegrator:
    """Integrates differential cross-section models into total cross sections.

    Args:
        config: Complete configuration (defaults.yaml when omitted)
        cache: Store for free-nucleon cross-section branches
        spline_list: Pre-computed free-nucleon total cross-section splines
        run_options: Run switches; ``config.run`` when omitted

    Example:
        >>> integrator = XSecIntegrator()
        >>> xsec = integrator.integrate(model, interaction)
        >>> xsec / units.cm2
    """

    def __init__(
        self,
        config: Optional[NuphaseConfig] = None,
        cache: Optional[Cache] = None,
        spline_list: Optional[XSecSplineList] = None,
        run_options: Optional[RunOptions] = None,
    ):
        self.config = config if config is not None else create_default_config()
        self.cache = cache if cache is not None else Cache()
        self.spline_list = spline_list if spline_list is not None else XSecSplineList()
        self.run_options = run_options if run_options is not None else self.config.run
        self.run_options.apply_dark_matter_mass()

    @property
    def integration(self) -> IntegrationConfig:
        return self.config.integration

    # ------------------------------------------------------------------
    # Total cross section
    # ------------------------------------------------------------------

    def integrate(self, model: XSecAlgorithm, interaction: Interaction) -> float:
        """Total cross section [GeV^-2] of the interaction at its probe energy.

        Returns 0 when the model does not apply to the channel or the probe
        is not above threshold.
        """
        if not model.valid_process(interaction):
            return 0.0

        phase_space = PhaseSpace(interaction, self.config.phase_space)
        if not phase_space.is_above_threshold():
            logger.debug("*** Below energy threshold")
            return 0.0

        E = interaction.probe_energy(ReferenceFrame.HIT_NUCLEON_REST)
        target = interaction.target

        if target.is_nucleus and not self.spline_list.is_empty:
            free = self.free_nucleon_interaction(interaction)
            spline = self.spline_list.get_spline(model, free)
            if spline is not None:
                if spline.contains(E):
                    xsec = spline.evaluate(E)
                    logger.info(f"From XSecSplineList: XSec[free nucleon] (E = {E} GeV) = {xsec}")
                    return self._scale_to_target(xsec, interaction)
                logger.info(
                    f"E = {E} GeV outside the free nucleon spline "
                    f"[{spline.x_min}, {spline.x_max}]"
                )

        if self.run_options.bare_xsec_precalc:
            free = self.free_nucleon_interaction(interaction)
            key = self.cache_branch_key(model, free)
            logger.info(f"Finding cache branch with key: {key}")
            branch = self.cache.find_branch(key)
            if branch is None:
                branch = self.cache_free_nucleon_xsec(model, interaction)
            if branch.spline is not None and branch.spline.contains(E):
                xsec = branch(E)
                logger.info(f"XSec[free nucleon, cached] (E = {E} GeV) = {xsec}")
                return self._scale_to_target(xsec, interaction)
            logger.info(f"E = {E} GeV outside the cached range - integrating directly")

        xsec = self._integrate_direct(model, interaction)
        logger.info(f"XSec (E = {E} GeV) = {xsec / XSEC_UNIT_1E38_CM2} x 1E-38 cm^2")
        return xsec

    def _scale_to_target(self, xsec: float, interaction: Interaction) -> float:
        if interaction.test_flag(InteractionFlag.ASSUME_FREE_NUCLEON):
            return xsec
        target = interaction.target
        return xsec * target.nucleon_count(target.hit_nucleon_pdg)

    def _integrate_direct(self, model: XSecAlgorithm, interaction: Interaction) -> float:
        bare = interaction.copy()
        bare.set_flag(InteractionFlag.SKIP_PROCESS_CHECK)
        # Nuclear corrections only redistribute strength in (x, y); keep them
        # out of the total cross section
        bare.set_flag(InteractionFlag.NO_NUCLEAR_CORRECTION)
        return self._integrate_bound(model, bare)

    def _integrate_bound(self, model: XSecAlgorithm, interaction: Interaction) -> float:
        phase_space = PhaseSpace(interaction, self.config.phase_space)
        Wl = phase_space.W_lim()
        Q2l = phase_space.Q2_lim()
        logger.debug(f"W integration range = [{Wl.min}, {Wl.max}]")
        logger.debug(f"Q2 integration range = [{Q2l.min}, {Q2l.max}]")

        if not phase_space_ok(Wl, Q2l):
            return 0.0
        return self.integrate_region(model, interaction, Wl, Q2l) * XSEC_UNIT_1E38_CM2

    # ------------------------------------------------------------------
    # Numerical back-ends
    # ------------------------------------------------------------------

    def integrate_region(
        self,
        model: XSecAlgorithm,
        interaction: Interaction,
        Wl: Range1D,
        Q2l: Range1D,
    ) -> float:
        """Integral of d2xsec/dWdQ2 over ``Wl x Q2l`` [1e-38 cm^2].

        The running kinematics of ``interaction`` are overwritten.
        """
        def d2xsec(W: float, Q2: float) -> float:
            set_running_W_Q2(interaction, W, Q2)
            return model.xsec(interaction, PhaseSpaceKind.W_Q2) / XSEC_UNIT_1E38_CM2

        settings = self.integration
        lower = np.array([Wl.min, Q2l.min])
        upper = np.array([Wl.max, Q2l.max])

        if settings.integration_type is IntegrationType.ADAPTIVE:
            def f(points):
                return np.array([d2xsec(W, Q2) for W, Q2 in points])

            result = cubature(
                f,
                lower,
                upper,
                rule="genz-malik",
                rtol=settings.rel_tolerance,
                atol=settings.abs_tolerance,
                max_subdivisions=max(1, settings.max_eval // _EVALS_PER_SUBDIVISION),
            )
            if result.status != "converged":
                logger.warning(
                    f"Adaptive integration did not converge: estimate = {result.estimate}, "
                    f"error = {result.error}"
                )
            return float(result.estimate)

        if settings.integration_type is IntegrationType.GAUSS_KRONROD:
            value, error = dblquad(
                lambda Q2, W: d2xsec(W, Q2),
                Wl.min,
                Wl.max,
                Q2l.min,
                Q2l.max,
                epsabs=settings.abs_tolerance,
                epsrel=settings.rel_tolerance,
            )
            logger.debug(f"Gauss-Kronrod integral = {value} +/- {error}")
            return float(value)

        if settings.integration_type is IntegrationType.QMC:
            def g(points):
                return np.array([d2xsec(W, Q2) for W, Q2 in points.T])

            n_points = max(settings.min_eval, settings.max_eval // _QMC_ESTIMATES)
            result = qmc_quad(g, lower, upper, n_estimates=_QMC_ESTIMATES, n_points=n_points)
            logger.debug(f"QMC integral = {result.integral} +/- {result.standard_error}")
            return float(result.integral)

        raise ValueError(f"Unknown integration type: {settings.integration_type}")

    # ------------------------------------------------------------------
    # Free-nucleon cross sections
    # ------------------------------------------------------------------

    @staticmethod
    def free_nucleon_interaction(interaction: Interaction) -> Interaction:
        """Copy of the interaction on a free nucleon of the hit-nucleon species."""
        hit = interaction.target.hit_nucleon_pdg
        target_pdg = pdg.PROTON if pdg.is_proton(hit) else pdg.NEUTRON
        return interaction.with_target(target_pdg, hit)

    @staticmethod
    def cache_branch_key(model: XSecAlgorithm, interaction: Interaction) -> str:
        return Cache.branch_key(model.id_key, interaction.as_string())

    def knot_energies(self, threshold: float) -> np.ndarray:
        """Energy knots [GeV] of a free-nucleon cross-section branch.

        The grid spans ``[E_min/3, E_max*3]`` of the validity range with at
        least ``min_knots`` knots and ``knots_per_efold`` knots per e-fold.
        When the threshold lies inside the grid, ``knots_below_threshold``
        knots are spread linearly below it and the rest logarithmically from
        the threshold up.
        """
        settings = self.integration
        E_min = settings.validity_E_min / 3.0
        E_max = settings.validity_E_max * 3.0
        n_knots = max(
            settings.min_knots,
            int(settings.knots_per_efold * (math.log(E_max) - math.log(E_min))),
        )

        n_below = settings.knots_below_threshold if threshold > E_min else 0
        n_above = n_knots - n_below

        below = np.empty(0)
        if n_below > 0:
            dE = (threshold - E_min) / n_below
            below = E_min + dE * np.arange(n_below)

        E0 = max(threshold, E_min)
        above = np.logspace(math.log10(E0), math.log10(E_max), n_above)
        return np.concatenate([below, above])

    def cache_free_nucleon_xsec(self, model: XSecAlgorithm, interaction: Interaction) -> CacheBranch:
        """Tabulate the free-nucleon cross section on the knot grid and cache it.

        Returns:
            The new branch, already promoted to a spline

        Raises:
            KeyError: If the branch already exists
        """
        logger.warning("Wait while computing/caching free nucleon xsections first...")

        free = self.free_nucleon_interaction(interaction)
        key = self.cache_branch_key(model, free)
        if key in self.cache:
            raise KeyError(f"Cache branch already exists: {key}")

        threshold = PhaseSpace(free, self.config.phase_space).threshold()
        energies = self.knot_energies(threshold)

        free.set_flag(InteractionFlag.SKIP_PROCESS_CHECK)
        free.set_flag(InteractionFlag.NO_NUCLEAR_CORRECTION)

        branch = CacheBranch(f"{model.name} free nucleon xsec")
        for i, E in enumerate(energies):
            logger.debug(f"Dealing with knot {i} out of {len(energies)}")
            free.set_probe_energy(float(E))
            xsec = 0.0
            if E > threshold + A_SMALL_NUM:
                xsec = self._integrate_bound(model, free)
            logger.info(
                f"Caching: XSec (E = {E} GeV) = {xsec / XSEC_UNIT_1E38_CM2} x 1E-38 cm^2"
            )
            branch.add_values(float(E), xsec)

        branch.create_spline()
        return self.cache.add_branch(key, branch)
