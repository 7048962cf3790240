"""Process-lifetime memoization store.

A ``Cache`` owns named ``CacheBranch`` objects, each a sorted map from probe
energy to a cached value (a free-nucleon total cross section, or the maximum
differential cross section used by a rejection sampler). Once a branch has
enough points it can be promoted to a spline.

Branches are append-only and never evicted. The cache performs no locking;
create one per process (or per worker) and pass it explicitly.

Import Policy:
    from nuphase.cache.cache import Cache, CacheBranch

DO NOT use: from nuphase.cache.cache import *
"""

from __future__ import annotations

import bisect
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from nuphase.config.enums import InterpolationMethod
from nuphase.xsec.spline import Spline

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "/"


class CacheBranch:
    """Sorted energy -> value map with an optional spline.

    Args:
        name: Description of the cached quantity
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._x: List[float] = []
        self._y: Dict[float, float] = {}
        self._spline: Optional[Spline] = None

    def add_values(self, x: float, y: float) -> None:
        """Insert (or overwrite) the value at x. The spline is not rebuilt."""
        x = float(x)
        if x not in self._y:
            bisect.insort(self._x, x)
        self._y[x] = float(y)

    def lower_bound(self, x: float) -> Optional[Tuple[float, float]]:
        """First cached point with abscissa >= x, or None."""
        i = bisect.bisect_left(self._x, x)
        if i == len(self._x):
            return None
        xi = self._x[i]
        return xi, self._y[xi]

    def create_spline(self, method: InterpolationMethod = InterpolationMethod.CUBIC) -> Spline:
        """(Re)build the spline over all cached points.

        Raises:
            ValueError: If fewer than 2 points are cached
        """
        self._spline = Spline(self._x, [self._y[x] for x in self._x], method)
        logger.debug(f"Built spline for cache branch '{self.name}': {self._spline}")
        return self._spline

    @property
    def spline(self) -> Optional[Spline]:
        return self._spline

    @property
    def energies(self) -> np.ndarray:
        return np.array(self._x)

    @property
    def values(self) -> np.ndarray:
        return np.array([self._y[x] for x in self._x])

    def items(self) -> Iterator[Tuple[float, float]]:
        for x in self._x:
            yield x, self._y[x]

    def __len__(self) -> int:
        return len(self._x)

    def __call__(self, x: float) -> float:
        """Spline value at x.

        Raises:
            ValueError: If no spline has been built
        """
        if self._spline is None:
            raise ValueError(f"Cache branch '{self.name}' has no spline")
        return self._spline.evaluate(x)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "x": self.energies,
            "y": self.values,
            "spline_method": None if self._spline is None else self._spline.method.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CacheBranch:
        branch = cls(data.get("name", ""))
        for x, y in zip(data["x"], data["y"]):
            branch.add_values(x, y)
        if data.get("spline_method") is not None:
            branch.create_spline(InterpolationMethod(data["spline_method"]))
        return branch

    def __repr__(self) -> str:
        return f"CacheBranch(name={self.name!r}, n_points={len(self)}, spline={self._spline is not None})"


class Cache:
    """Store of cache branches keyed by composite strings.

    Example:
        >>> cache = Cache()
        >>> key = Cache.branch_key("Model/Default", "nu:14;tgt:2212;", "0")
        >>> branch = cache.add_branch(key, CacheBranch("max xsec"))
    """

    def __init__(self):
        self._branches: Dict[str, CacheBranch] = {}

    @staticmethod
    def branch_key(*parts: str) -> str:
        """Compose a branch key, e.g. algorithm/config/interaction/subkey."""
        return KEY_SEPARATOR.join(str(p) for p in parts)

    def find_branch(self, key: str) -> Optional[CacheBranch]:
        return self._branches.get(key)

    def add_branch(self, key: str, branch: CacheBranch) -> CacheBranch:
        """Register a new branch.

        Raises:
            KeyError: If the key is taken
        """
        if key in self._branches:
            raise KeyError(f"Cache branch already exists: {key}")
        self._branches[key] = branch
        logger.debug(f"Added cache branch {key}")
        return branch

    def remove_branch(self, key: str) -> None:
        self._branches.pop(key, None)

    def clear(self) -> None:
        self._branches.clear()

    def keys(self) -> Iterator[str]:
        return iter(self._branches)

    def __contains__(self, key: str) -> bool:
        return key in self._branches

    def __len__(self) -> int:
        return len(self._branches)

    def save(self, filepath: Path) -> None:
        """Save all branches to an NPY file.

        Args:
            filepath: Output file path
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        np.save(
            filepath,
            {key: branch.to_dict() for key, branch in self._branches.items()},
        )
        logger.info(f"Saved {len(self)} cache branches to {filepath}")

    @classmethod
    def load(cls, filepath: Path) -> Cache:
        """Load branches from an NPY file written by ``save``.

        Args:
            filepath: Input file path

        Returns:
            Cache object
        """
        data = np.load(Path(filepath), allow_pickle=True).item()
        cache = cls()
        for key, branch_data in data.items():
            cache.add_branch(key, CacheBranch.from_dict(branch_data))
        logger.info(f"Loaded {len(cache)} cache branches from {filepath}")
        return cache
