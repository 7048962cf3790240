"""Accept/reject kinematics generator over (W, Q2)."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from nuphase.cache.cache import Cache
from nuphase.cache.max_xsec import GenerationFailure, KineGeneratorWithCache, MaxXSecResult
from nuphase.config.physics_config import MaxXSecConfig, PhaseSpaceConfig
from nuphase.core.event import EventFlag, EventRecord, PhaseSpaceKind
from nuphase.core.interaction import Interaction, InteractionFlag, Kinematics
from nuphase.kinematics.phase_space import PhaseSpace, set_running_W_Q2
from nuphase.xsec.model import XSecAlgorithm

logger = logging.getLogger(__name__)

# Grid points per axis used to scan for the maximum, per sub-key
SCAN_GRID_POINTS = {0: 25, 1: 80}

DEFAULT_MAX_ITERATIONS = 100000


class WQ2KinematicsGenerator(KineGeneratorWithCache):
    """Rejection sampler of (W, Q2) for a d2xsec/dWdQ2 model.

    Points are thrown uniformly in the box ``W_lim x Q2_lim`` and accepted
    with probability ``xsec / xsec_max``.

    Args:
        model: Differential cross-section model
        cache: Store of cache branches
        config: Max cross-section cache settings
        phase_space_config: Caps handed to PhaseSpace
        max_iterations: Accept/reject attempts before giving up on an event
    """

    def __init__(
        self,
        model: XSecAlgorithm,
        cache: Optional[Cache] = None,
        config: Optional[MaxXSecConfig] = None,
        phase_space_config: Optional[PhaseSpaceConfig] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        super().__init__("WQ2KinematicsGenerator", model.id_key, cache, config)
        self.model = model
        self.phase_space_config = phase_space_config
        self.max_iterations = max_iterations

    def compute_max_xsec(self, interaction: Interaction, nkey: int = 0) -> float:
        """Maximum of d2xsec/dWdQ2 over a regular (W, Q2) grid.

        Sub-key 0 scans a coarse grid, sub-key 1 a fine one; other sub-keys
        have no procedure and return -1.
        """
        n_points = SCAN_GRID_POINTS.get(nkey)
        if n_points is None:
            return -1.0

        probe = interaction.copy()
        probe.set_flag(InteractionFlag.SKIP_PROCESS_CHECK)
        phase_space = PhaseSpace(probe, self.phase_space_config)

        Wl = phase_space.W_lim()
        if not Wl.is_valid:
            return -1.0

        xsec_max = -1.0
        for W in np.linspace(Wl.min, Wl.max, n_points):
            Q2l = phase_space.Q2_lim_at_W(float(W))
            if not Q2l.is_valid:
                continue
            for Q2 in np.linspace(Q2l.min, Q2l.max, n_points):
                set_running_W_Q2(probe, float(W), float(Q2))
                xsec = self.model.xsec(probe, PhaseSpaceKind.W_Q2)
                xsec_max = max(xsec_max, xsec)

        logger.debug(f"Scanned max xsec = {xsec_max} (nkey = {nkey})")
        return xsec_max

    def generate(
        self,
        event: EventRecord,
        rng: Optional[np.random.Generator] = None,
        nkey: int = 0,
    ) -> Kinematics:
        """Select (W, Q2) for the event's interaction.

        The accepted point and its x, y are written to the interaction's
        running kinematics and the differential cross section to the event.

        Raises:
            KinematicsGenerationFailure: If no point can be selected; the
                event is flagged and should be abandoned
            InvariantViolation: If a point exceeds the cached maximum beyond
                tolerance
        """
        if rng is None:
            rng = np.random.default_rng()

        interaction = event.interaction
        phase_space = PhaseSpace(interaction, self.phase_space_config)
        if not phase_space.is_above_threshold():
            event.set_flag(EventFlag.KINE_GEN_ERROR)
            raise MaxXSecResult.failed(GenerationFailure.BELOW_THRESHOLD).to_exception()

        xsec_max = self.max_xsec(event, nkey).unwrap()

        Wl = phase_space.W_lim()
        Q2l = phase_space.Q2_lim()
        interaction.set_flag(InteractionFlag.SKIP_KINEMATIC_CHECK)

        for iteration in range(self.max_iterations):
            W = rng.uniform(Wl.min, Wl.max)
            Q2 = rng.uniform(Q2l.min, Q2l.max)
            if not phase_space.Q2_lim_at_W(W).contains(Q2):
                continue

            set_running_W_Q2(interaction, W, Q2)
            xsec = self.model.xsec(interaction, PhaseSpaceKind.W_Q2)
            self.assert_xsec_limits(interaction, xsec, xsec_max)

            if xsec > xsec_max * rng.uniform():
                logger.debug(f"Selected W = {W}, Q2 = {Q2} after {iteration + 1} iterations")
                interaction.clear_flag(InteractionFlag.SKIP_KINEMATIC_CHECK)
                event.set_diff_xsec(xsec, PhaseSpaceKind.W_Q2)
                return interaction.kinematics

        logger.warning(f"No kinematics selected after {self.max_iterations} iterations")
        interaction.clear_flag(InteractionFlag.SKIP_KINEMATIC_CHECK)
        event.set_flag(EventFlag.KINE_GEN_ERROR)
        raise MaxXSecResult.failed(GenerationFailure.ITERATIONS_EXHAUSTED).to_exception()
