"""Differential cross-section model interface.

Concrete models compute d2xsec/dWdQ2 (or another differential form) at the
running kinematics of an interaction. The integrator and the kinematics
generators only rely on this interface.

Import Policy:
    from nuphase.xsec.model import XSecAlgorithm

DO NOT use: from nuphase.xsec.model import *
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from nuphase.config.physics_config import PhaseSpaceConfig
from nuphase.core.event import PhaseSpaceKind
from nuphase.core.interaction import Interaction, InteractionFlag
from nuphase.kinematics.phase_space import PhaseSpace


class XSecAlgorithm(ABC):
    """Base class of differential cross-section models.

    Args:
        name: Algorithm name, first half of ``id_key``
        config_name: Tune / parameter set name, second half of ``id_key``
        phase_space_config: Caps used for the kinematic checks
    """

    def __init__(
        self,
        name: str,
        config_name: str = "Default",
        phase_space_config: Optional[PhaseSpaceConfig] = None,
    ):
        self.name = name
        self.config_name = config_name
        self.phase_space_config = phase_space_config
        self.integrator = None

    @property
    def id_key(self) -> str:
        """Identity of the model and its tune, used in cache keys."""
        return f"{self.name}/{self.config_name}"

    @abstractmethod
    def xsec(self, interaction: Interaction, kps: PhaseSpaceKind = PhaseSpaceKind.W_Q2) -> float:
        """Differential cross section [GeV^-2 per unit of ``kps``] at the running kinematics."""

    @abstractmethod
    def valid_process(self, interaction: Interaction) -> bool:
        """Whether the model applies to this channel."""

    def valid_kinematics(self, interaction: Interaction) -> bool:
        """Whether the running kinematics lie inside the phase space.

        Skipped (always True) when SKIP_KINEMATIC_CHECK is set.
        """
        if interaction.test_flag(InteractionFlag.SKIP_KINEMATIC_CHECK):
            return True
        phase_space = PhaseSpace(interaction, self.phase_space_config)
        return phase_space.is_above_threshold() and phase_space.is_allowed()

    def set_integrator(self, integrator) -> None:
        self.integrator = integrator

    def integral(self, interaction: Interaction) -> float:
        """Total cross section [GeV^-2] via the attached integrator."""
        if self.integrator is None:
            raise RuntimeError(f"No integrator attached to {self.id_key}")
        return self.integrator.integrate(self, interaction)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id_key!r})"
