"""Total cross-section splines keyed by model and interaction."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Sequence

from nuphase.config.enums import InterpolationMethod
from nuphase.core.interaction import Interaction
from nuphase.xsec.model import XSecAlgorithm
from nuphase.xsec.spline import Spline

logger = logging.getLogger(__name__)


class XSecSplineList:
    """Store of total cross-section splines (energy [GeV] -> xsec [GeV^-2]).

    Keys combine the model identity with the canonical interaction signature,
    so a spline built for a free proton is found again for any interaction
    re-targeted onto a free proton.
    """

    def __init__(self):
        self._splines: Dict[str, Spline] = {}

    @staticmethod
    def spline_key(model: XSecAlgorithm, interaction: Interaction) -> str:
        return f"{model.id_key}/{interaction.as_string()}"

    def add_spline(self, model: XSecAlgorithm, interaction: Interaction, spline: Spline) -> None:
        key = self.spline_key(model, interaction)
        if key in self._splines:
            logger.warning(f"Replacing spline {key}")
        self._splines[key] = spline

    def create_spline(
        self,
        model: XSecAlgorithm,
        interaction: Interaction,
        energies: Sequence[float],
        xsecs: Sequence[float],
        method: InterpolationMethod = InterpolationMethod.CUBIC,
    ) -> Spline:
        """Build and store a spline from tabulated total cross sections."""
        spline = Spline(energies, xsecs, method)
        self.add_spline(model, interaction, spline)
        logger.info(f"Created spline {self.spline_key(model, interaction)}: {spline}")
        return spline

    def spline_exists(self, model: XSecAlgorithm, interaction: Interaction) -> bool:
        return self.spline_key(model, interaction) in self._splines

    def get_spline(self, model: XSecAlgorithm, interaction: Interaction) -> Optional[Spline]:
        return self._splines.get(self.spline_key(model, interaction))

    @property
    def is_empty(self) -> bool:
        return not self._splines

    def keys(self) -> Iterator[str]:
        return iter(self._splines)

    def __len__(self) -> int:
        return len(self._splines)
