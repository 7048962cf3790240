"""Maximum differential cross section cache for rejection sampling.

Accept/reject kinematics generators need an upper bound of the differential
cross section over the accessible phase space. ``KineGeneratorWithCache``
computes that bound once per probe energy (per sub-key) and memoizes it in a
``CacheBranch``, which matures into a spline after enough points.

Import Policy:
    from nuphase.cache.max_xsec import KineGeneratorWithCache, MaxXSecResult

DO NOT use: from nuphase.cache.max_xsec import *
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from nuphase.cache.cache import Cache, CacheBranch
from nuphase.config.physics_config import MaxXSecConfig
from nuphase.core.event import EventFlag, EventRecord, PhaseSpaceKind
from nuphase.core.exceptions import InvariantViolation, KinematicsGenerationFailure
from nuphase.core.interaction import Interaction, InteractionFlag, ReferenceFrame

logger = logging.getLogger(__name__)

NOT_FOUND = -1.0


class GenerationFailure(Enum):
    """Recoverable reasons for abandoning an event.

    Options:
        MAX_XSEC_NOT_POSITIVE: The computed maximum was <= 0
        BELOW_THRESHOLD: The probe energy is not above threshold
        ITERATIONS_EXHAUSTED: The accept/reject loop hit its iteration cap
    """
    MAX_XSEC_NOT_POSITIVE = "kinematics generation: max_xsec<=0"
    BELOW_THRESHOLD = "kinematics generation: below threshold"
    ITERATIONS_EXHAUSTED = "kinematics generation: too many iterations"


@dataclass(frozen=True)
class MaxXSecResult:
    """Either a (safety-scaled) maximum or a failure reason."""

    value: float = 0.0
    failure: Optional[GenerationFailure] = None

    @classmethod
    def success(cls, value: float) -> MaxXSecResult:
        return cls(value=value)

    @classmethod
    def failed(cls, reason: GenerationFailure) -> MaxXSecResult:
        return cls(value=0.0, failure=reason)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_exception(self) -> KinematicsGenerationFailure:
        reason = self.failure.value if self.failure is not None else "no failure"
        return KinematicsGenerationFailure(reason, fast_forward=True)

    def unwrap(self) -> float:
        """The value, or raise the fast-forward failure."""
        if not self.ok:
            raise self.to_exception()
        return self.value


class KineGeneratorWithCache(ABC):
    """Base class of kinematics generators using a cached rejection bound.

    Args:
        name: Generator name, first half of ``id_key``
        config_name: Parameter set name, second half of ``id_key``
        cache: Store of cache branches (a private one is created if omitted)
        config: Cache settings; resolved from the YAML defaults when omitted
    """

    def __init__(
        self,
        name: str,
        config_name: str = "Default",
        cache: Optional[Cache] = None,
        config: Optional[MaxXSecConfig] = None,
    ):
        self.name = name
        self.config_name = config_name
        self.cache = cache if cache is not None else Cache()
        self.config = config if config is not None else MaxXSecConfig.from_defaults()

    @property
    def id_key(self) -> str:
        return f"{self.name}/{self.config_name}"

    @abstractmethod
    def compute_max_xsec(self, interaction: Interaction, nkey: int = 0) -> float:
        """Scan the phase space for the maximum differential cross section.

        ``nkey`` selects the scanning procedure; 0 is the primary one.
        Return a value <= 0 when no maximum can be determined.
        """

    def max_xsec(self, event: EventRecord, nkey: int = 0) -> MaxXSecResult:
        """Safety-scaled maximum for the event's interaction.

        On failure the event is flagged with KINE_GEN_ERROR, its differential
        cross section is cleared and the skip-check bits of the interaction
        are reset.
        """
        interaction = event.interaction

        xsec_max = self.find_max_xsec(interaction, nkey)
        if xsec_max > 0:
            return MaxXSecResult.success(self.config.safety_factor(nkey) * xsec_max)

        logger.info("Attempting to compute the max value")
        xsec_max = self.compute_max_xsec(interaction, nkey)
        if xsec_max > 0:
            logger.info(f"max = {xsec_max}")
            self.cache_max_xsec(interaction, xsec_max, nkey)
            return MaxXSecResult.success(self.config.safety_factor(nkey) * xsec_max)

        logger.info("Can not generate event kinematics (max_xsec <= 0)")
        event.set_diff_xsec(0.0, PhaseSpaceKind.NULL)
        event.set_flag(EventFlag.KINE_GEN_ERROR)
        interaction.clear_flag(InteractionFlag.SKIP_PROCESS_CHECK)
        interaction.clear_flag(InteractionFlag.SKIP_KINEMATIC_CHECK)
        return MaxXSecResult.failed(GenerationFailure.MAX_XSEC_NOT_POSITIVE)

    def find_max_xsec(self, interaction: Interaction, nkey: int = 0) -> float:
        """Cached maximum at the current energy, or -1 if it must be computed."""
        E = self.energy(interaction)
        logger.debug(f"E = {E}")

        if E < self.config.energy_min:
            logger.debug("Below minimum energy - forcing explicit calculation")
            return NOT_FOUND

        branch = self.access_cache_branch(interaction, nkey)

        spline = branch.spline
        if spline is not None:
            if spline.contains(E):
                value = spline.evaluate(E)
                logger.debug(f"Interpolated: max (E={E}) = {value}")
                return value
            logger.debug("Outside spline boundaries - forcing explicit calculation")
            return NOT_FOUND

        dE = min(0.25, 0.05 * E)
        nearest = branch.lower_bound(E)
        if nearest is not None and abs(E - nearest[0]) < dE:
            return nearest[1]

        return NOT_FOUND

    def cache_max_xsec(self, interaction: Interaction, max_xsec: float, nkey: int = 0) -> None:
        """Add a computed maximum to the branch and keep its spline current."""
        branch = self.access_cache_branch(interaction, nkey)

        E = self.energy(interaction)
        if E < self.config.energy_min:
            return
        if max_xsec > 0:
            branch.add_values(E, max_xsec)

        method = self.config.interpolation_method(nkey)
        if branch.spline is None:
            if len(branch) >= self.config.spline_min_points:
                branch.create_spline(method)
        elif not branch.spline.contains(E):
            branch.create_spline(method)

    def energy(self, interaction: Interaction) -> float:
        """Energy used to index the cache: probe energy in the hit-nucleon rest frame."""
        return interaction.probe_energy(ReferenceFrame.HIT_NUCLEON_REST)

    def cache_branch_key(self, interaction: Interaction, nkey: int = 0) -> str:
        return Cache.branch_key(self.id_key, interaction.as_string(), str(nkey))

    def access_cache_branch(self, interaction: Interaction, nkey: int = 0) -> CacheBranch:
        """Branch for this generator, interaction and sub-key, created on demand."""
        key = self.cache_branch_key(interaction, nkey)
        branch = self.cache.find_branch(key)
        if branch is None:
            logger.debug(f"Creating cache branch - key = {key}")
            branch = self.cache.add_branch(key, CacheBranch("Max over phase space"))
        return branch

    def assert_xsec_limits(self, interaction: Interaction, xsec: float, xsec_max: float) -> None:
        """Check a realised cross section against the rejection bound.

        Raises:
            InvariantViolation: If xsec exceeds xsec_max beyond diff_tolerance
        """
        if xsec > xsec_max:
            f = 200.0 * (xsec - xsec_max) / (xsec_max + xsec)
            if f > self.config.diff_tolerance:
                logger.critical(
                    f"xsec: (curr) = {xsec} > (max) = {xsec_max} for {interaction.as_string()}"
                )
                raise InvariantViolation(
                    "Exceeding estimated maximum differential cross section",
                    xsec=xsec,
                    xsec_max=xsec_max,
                )
            logger.warning(
                f"xsec: (curr) = {xsec} > (max) = {xsec_max} for {interaction.as_string()}; "
                f"the fractional deviation of {f} % was allowed"
            )

        if xsec < 0:
            logger.error(
                f"Negative cross section for current kinematics: {interaction.as_string()}"
            )
