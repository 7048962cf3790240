"""Physics Configuration Dataclasses

This module provides the configuration dataclasses consumed by the phase-space
engine, the cross-section integrator and the max cross-section cache.
Values are resolved once (usually at start-up, via ``from_defaults``) and then
passed explicitly to the objects that need them.

Import Policy:
    from nuphase.config.physics_config import NuphaseConfig, PhaseSpaceConfig

DO NOT use: from nuphase.config.physics_config import *
"""

from __future__ import annotations

from dataclasses import dataclass, field

from nuphase.config.defaults import (
    DEFAULT_ABS_TOLERANCE,
    DEFAULT_BARE_XSEC_PRECALC,
    DEFAULT_CACHE_E_MIN,
    DEFAULT_COH_T_MAX,
    DEFAULT_DARK_MATTER_MASS,
    DEFAULT_DFR_T_MAX,
    DEFAULT_INTEGRATION_TYPE,
    DEFAULT_INTERPOLATION_METHODS,
    DEFAULT_KNOTS_BELOW_THRESHOLD,
    DEFAULT_KNOTS_PER_EFOLD,
    DEFAULT_MAX_EVAL,
    DEFAULT_MAX_XSEC_DIFF_TOLERANCE,
    DEFAULT_MEC_Q2_MAX,
    DEFAULT_MIN_EVAL,
    DEFAULT_MIN_KNOTS,
    DEFAULT_REL_TOLERANCE,
    DEFAULT_SAFETY_FACTORS,
    DEFAULT_SPLINE_MIN_POINTS,
    DEFAULT_VALIDITY_E_MAX,
    DEFAULT_VALIDITY_E_MIN,
)
from nuphase.config.enums import IntegrationType, InterpolationMethod
from nuphase.config.yaml_loader import get_default


@dataclass
class IntegrationConfig:
    """Settings of the total cross-section integrator.

    Attributes:
        integration_type: Integration back-end
        rel_tolerance: Relative tolerance of the integral
        abs_tolerance: Absolute tolerance [1e-38 cm^2]
        max_eval: Cap on integrand evaluations per integral
        min_eval: Minimum number of integrand evaluations (adaptive only)
        validity_E_min, validity_E_max: Energy range [GeV] of cached
            free-nucleon splines
        min_knots: Minimum number of knots of a free-nucleon spline
        knots_per_efold: Minimum knot density
        knots_below_threshold: Knots placed below threshold

    """

    integration_type: IntegrationType = IntegrationType(DEFAULT_INTEGRATION_TYPE)
    rel_tolerance: float = DEFAULT_REL_TOLERANCE
    abs_tolerance: float = DEFAULT_ABS_TOLERANCE
    max_eval: int = DEFAULT_MAX_EVAL
    min_eval: int = DEFAULT_MIN_EVAL
    validity_E_min: float = DEFAULT_VALIDITY_E_MIN
    validity_E_max: float = DEFAULT_VALIDITY_E_MAX
    min_knots: int = DEFAULT_MIN_KNOTS
    knots_per_efold: int = DEFAULT_KNOTS_PER_EFOLD
    knots_below_threshold: int = DEFAULT_KNOTS_BELOW_THRESHOLD

    @classmethod
    def from_defaults(cls) -> IntegrationConfig:
        return cls(
            integration_type=IntegrationType(
                get_default("integration.type", DEFAULT_INTEGRATION_TYPE)
            ),
            rel_tolerance=float(get_default("integration.relative_tolerance", DEFAULT_REL_TOLERANCE)),
            abs_tolerance=float(get_default("integration.absolute_tolerance", DEFAULT_ABS_TOLERANCE)),
            max_eval=int(get_default("integration.max_eval", DEFAULT_MAX_EVAL)),
            min_eval=int(get_default("integration.min_eval", DEFAULT_MIN_EVAL)),
            validity_E_min=float(get_default("integration.validity_energy_min", DEFAULT_VALIDITY_E_MIN)),
            validity_E_max=float(get_default("integration.validity_energy_max", DEFAULT_VALIDITY_E_MAX)),
            min_knots=int(get_default("integration.min_knots", DEFAULT_MIN_KNOTS)),
            knots_per_efold=int(get_default("integration.knots_per_efold", DEFAULT_KNOTS_PER_EFOLD)),
            knots_below_threshold=int(
                get_default("integration.knots_below_threshold", DEFAULT_KNOTS_BELOW_THRESHOLD)
            ),
        )

    def validate(self) -> list[str]:
        """Validate integration configuration.

        Returns:
            List of error messages (empty if valid)

        """
        errors = []

        if not (0 < self.rel_tolerance < 1):
            errors.append(f"rel_tolerance must be in (0, 1), got {self.rel_tolerance}")
        if self.abs_tolerance < 0:
            errors.append(f"abs_tolerance must be >= 0, got {self.abs_tolerance}")
        if self.max_eval <= 0:
            errors.append(f"max_eval must be > 0, got {self.max_eval}")
        if self.min_eval < 0:
            errors.append(f"min_eval must be >= 0, got {self.min_eval}")
        if self.min_eval > self.max_eval:
            errors.append(f"min_eval ({self.min_eval}) must be <= max_eval ({self.max_eval})")
        if self.validity_E_min <= 0:
            errors.append(f"validity_E_min must be > 0, got {self.validity_E_min}")
        if self.validity_E_max <= self.validity_E_min:
            errors.append(
                f"validity_E_max ({self.validity_E_max}) must be > "
                f"validity_E_min ({self.validity_E_min})"
            )
        if self.min_knots < 2:
            errors.append(f"min_knots must be >= 2, got {self.min_knots}")
        if self.knots_below_threshold < 0 or self.knots_below_threshold >= self.min_knots:
            errors.append(
                f"knots_below_threshold ({self.knots_below_threshold}) must be in "
                f"[0, min_knots)"
            )

        return errors


@dataclass
class MaxXSecConfig:
    """Settings of the rejection-sampling max cross-section cache.

    Attributes:
        energy_min: Probe energy [GeV] below which the cache is bypassed
        safety_factors: Multiplier applied to the cached maximum, per sub-key.
            Sub-keys beyond the list are returned unscaled.
        interpolation_methods: Spline type per sub-key. Sub-keys beyond the
            list use the cubic default.
        diff_tolerance: Tolerated excess over the maximum [percent]
        spline_min_points: Points needed before a branch becomes a spline

    """

    energy_min: float = DEFAULT_CACHE_E_MIN
    safety_factors: list[float] = field(default_factory=lambda: list(DEFAULT_SAFETY_FACTORS))
    interpolation_methods: list[InterpolationMethod] = field(
        default_factory=lambda: [InterpolationMethod(m) for m in DEFAULT_INTERPOLATION_METHODS]
    )
    diff_tolerance: float = DEFAULT_MAX_XSEC_DIFF_TOLERANCE
    spline_min_points: int = DEFAULT_SPLINE_MIN_POINTS

    @classmethod
    def from_defaults(cls) -> MaxXSecConfig:
        factors = get_default("max_xsec.safety_factors", list(DEFAULT_SAFETY_FACTORS))
        methods = get_default("max_xsec.interpolation_methods", list(DEFAULT_INTERPOLATION_METHODS))
        return cls(
            energy_min=float(get_default("max_xsec.energy_min", DEFAULT_CACHE_E_MIN)),
            safety_factors=[float(f) for f in factors],
            interpolation_methods=[InterpolationMethod(m) for m in methods],
            diff_tolerance=float(get_default("max_xsec.diff_tolerance", DEFAULT_MAX_XSEC_DIFF_TOLERANCE)),
            spline_min_points=int(get_default("max_xsec.spline_min_points", DEFAULT_SPLINE_MIN_POINTS)),
        )

    def safety_factor(self, nkey: int) -> float:
        if 0 <= nkey < len(self.safety_factors):
            return self.safety_factors[nkey]
        return 1.0

    def interpolation_method(self, nkey: int) -> InterpolationMethod:
        if 0 <= nkey < len(self.interpolation_methods):
            return self.interpolation_methods[nkey]
        return InterpolationMethod.CUBIC

    def validate(self) -> list[str]:
        errors = []

        if self.energy_min < 0:
            errors.append(f"energy_min must be >= 0, got {self.energy_min}")
        for i, factor in enumerate(self.safety_factors):
            if factor < 1:
                errors.append(f"safety_factors[{i}] must be >= 1, got {factor}")
        if self.diff_tolerance < 0:
            errors.append(f"diff_tolerance must be >= 0, got {self.diff_tolerance}")
        if self.spline_min_points < 4:
            errors.append(f"spline_min_points must be >= 4, got {self.spline_min_points}")

        return errors


@dataclass(frozen=True)
class PhaseSpaceConfig:
    """Tunable kinematic caps used by the phase-space engine.

    Frozen: resolve once and share between PhaseSpace instances.

    Attributes:
        diffractive_t_max: Upper |t| limit for diffractive scattering [GeV^2]
        mec_Q2_max: Q2 ceiling for MEC interactions [GeV^2]
        coherent_t_max: Upper |t| limit for coherent production [GeV^2]

    """

    diffractive_t_max: float = DEFAULT_DFR_T_MAX
    mec_Q2_max: float = DEFAULT_MEC_Q2_MAX
    coherent_t_max: float = DEFAULT_COH_T_MAX

    @classmethod
    def from_defaults(cls) -> PhaseSpaceConfig:
        return cls(
            diffractive_t_max=float(get_default("phase_space.diffractive_t_max", DEFAULT_DFR_T_MAX)),
            mec_Q2_max=float(get_default("phase_space.mec_Q2_max", DEFAULT_MEC_Q2_MAX)),
            coherent_t_max=float(get_default("phase_space.coherent_t_max", DEFAULT_COH_T_MAX)),
        )

    def validate(self) -> list[str]:
        errors = []

        if self.diffractive_t_max <= 0:
            errors.append(f"diffractive_t_max must be > 0, got {self.diffractive_t_max}")
        if self.mec_Q2_max <= 0:
            errors.append(f"mec_Q2_max must be > 0, got {self.mec_Q2_max}")
        if self.coherent_t_max <= 0:
            errors.append(f"coherent_t_max must be > 0, got {self.coherent_t_max}")

        return errors


@dataclass
class RunOptions:
    """Process-wide run switches.

    Attributes:
        bare_xsec_precalc: Cache free-nucleon cross sections on a knot grid
            the first time a nuclear cross section is requested
        dark_matter_mass: Mass of the dark matter probe [GeV]

    """

    bare_xsec_precalc: bool = DEFAULT_BARE_XSEC_PRECALC
    dark_matter_mass: float = DEFAULT_DARK_MATTER_MASS

    @classmethod
    def from_defaults(cls) -> RunOptions:
        return cls(
            bare_xsec_precalc=bool(get_default("integration.bare_xsec_precalc", DEFAULT_BARE_XSEC_PRECALC)),
            dark_matter_mass=float(get_default("dark_matter.mass", DEFAULT_DARK_MATTER_MASS)),
        )

    def apply_dark_matter_mass(self, table=None) -> None:
        """Install the dark matter probe mass in the particle table."""
        from nuphase.core import pdg

        table = table if table is not None else pdg.ParticleTable.instance()
        table.set_mass(pdg.DARK_MATTER, self.dark_matter_mass)

    def validate(self) -> list[str]:
        errors = []
        if self.dark_matter_mass <= 0:
            errors.append(f"dark_matter_mass must be > 0, got {self.dark_matter_mass}")
        return errors


@dataclass
class NuphaseConfig:
    """Complete configuration.

    Attributes:
        integration: Integrator settings
        max_xsec: Max cross-section cache settings
        phase_space: Phase-space caps
        run: Run switches

    """

    integration: IntegrationConfig = field(default_factory=IntegrationConfig)
    max_xsec: MaxXSecConfig = field(default_factory=MaxXSecConfig)
    phase_space: PhaseSpaceConfig = field(default_factory=PhaseSpaceConfig)
    run: RunOptions = field(default_factory=RunOptions)

    def validate(self) -> list[str]:
        """Validate every section.

        Returns:
            List of error messages (empty if valid)

        """
        errors = []
        errors.extend(self.integration.validate())
        errors.extend(self.max_xsec.validate())
        errors.extend(self.phase_space.validate())
        errors.extend(self.run.validate())
        return errors


def create_default_config() -> NuphaseConfig:
    """Create a configuration from defaults.yaml."""
    return NuphaseConfig(
        integration=IntegrationConfig.from_defaults(),
        max_xsec=MaxXSecConfig.from_defaults(),
        phase_space=PhaseSpaceConfig.from_defaults(),
        run=RunOptions.from_defaults(),
    )
