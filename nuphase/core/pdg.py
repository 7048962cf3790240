"""PDG particle codes and the process-wide particle mass table.

Import Policy:
    from nuphase.core import pdg
    from nuphase.core.pdg import ParticleTable

DO NOT use: from nuphase.core.pdg import *
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, Optional

import yaml

from nuphase.core.constants import NEUTRON_MASS, PROTON_MASS

logger = logging.getLogger(__name__)

# =============================================================================
# PDG Codes
# =============================================================================

ELECTRON = 11
NU_E = 12
MUON = 13
NU_MU = 14
TAU = 15
NU_TAU = 16

PHOTON = 22
Z_BOSON = 23
W_BOSON = 24

PI0 = 111
PI_PLUS = 211
PI_MINUS = -211
K0 = 311
K_PLUS = 321
K_MINUS = -321

NEUTRON = 2112
PROTON = 2212

LAMBDA = 3122
LAMBDA_C = 4122

CLUSTER_NN = 2000000200
CLUSTER_NP = 2000000201
CLUSTER_PP = 2000000202

DARK_MATTER = 2000010000
ANTI_DARK_MATTER = -2000010000

_ION_BASE = 1000000000

# Charged lepton partner of each neutrino flavour
_CHARGED_PARTNER = {NU_E: ELECTRON, NU_MU: MUON, NU_TAU: TAU}


# =============================================================================
# Code Predicates
# =============================================================================

def is_neutrino(code: int) -> bool:
    return code in (NU_E, NU_MU, NU_TAU)


def is_anti_neutrino(code: int) -> bool:
    return code in (-NU_E, -NU_MU, -NU_TAU)


def is_neutral_lepton(code: int) -> bool:
    return is_neutrino(code) or is_anti_neutrino(code)


def is_charged_lepton(code: int) -> bool:
    return abs(code) in (ELECTRON, MUON, TAU)


def is_nu_e(code: int) -> bool:
    return abs(code) == NU_E


def is_nu_mu(code: int) -> bool:
    return abs(code) == NU_MU


def is_nu_tau(code: int) -> bool:
    return abs(code) == NU_TAU


def is_dark_matter(code: int) -> bool:
    return abs(code) == DARK_MATTER


def is_proton(code: int) -> bool:
    return code == PROTON


def is_neutron(code: int) -> bool:
    return code == NEUTRON


def is_nucleon(code: int) -> bool:
    return code in (PROTON, NEUTRON)


def is_nucleon_cluster(code: int) -> bool:
    return code in (CLUSTER_NN, CLUSTER_NP, CLUSTER_PP)


def is_ion(code: int) -> bool:
    return code > _ION_BASE and not is_nucleon_cluster(code) and not is_dark_matter(code)


def is_pion(code: int) -> bool:
    return code in (PI0, PI_PLUS, PI_MINUS)


def is_kaon(code: int) -> bool:
    return code in (K0, -K0, K_PLUS, K_MINUS)


# =============================================================================
# Code Conversions
# =============================================================================

def ion_pdg(Z: int, A: int, L: int = 0, I: int = 0) -> int:
    """Build a 10LZZZAAAI ion code."""
    return _ION_BASE + L * 10000000 + Z * 10000 + A * 10 + I


def ion_Z(code: int) -> int:
    if is_proton(code):
        return 1
    if is_neutron(code):
        return 0
    return (code // 10000) % 1000


def ion_A(code: int) -> int:
    if is_nucleon(code):
        return 1
    return (code // 10) % 1000


def switch_proton_neutron(code: int) -> int:
    if code == PROTON:
        return NEUTRON
    if code == NEUTRON:
        return PROTON
    return code


def charged_lepton_partner(code: int) -> int:
    """Charged lepton produced by a neutrino of the given code in a CC interaction."""
    partner = _CHARGED_PARTNER.get(abs(code))
    if partner is None:
        raise ValueError(f"PDG code {code} is not a neutrino")
    return partner if code > 0 else -partner


def cluster_after_cc(cluster: int, probe: int) -> int:
    """Final two-nucleon cluster once the weak charged current flips one nucleon."""
    if is_neutrino(probe):
        return {CLUSTER_NN: CLUSTER_NP, CLUSTER_NP: CLUSTER_PP}.get(cluster, cluster)
    if is_anti_neutrino(probe):
        return {CLUSTER_PP: CLUSTER_NP, CLUSTER_NP: CLUSTER_NN}.get(cluster, cluster)
    return cluster


# =============================================================================
# Particle Mass Table
# =============================================================================

def _default_table_path() -> Path:
    return Path(__file__).parent / "data" / "particles.yaml"


def semi_empirical_mass(Z: int, A: int) -> float:
    """Nuclear mass from the Bethe-Weizsacker formula [GeV]."""
    N = A - Z
    a_v, a_s, a_c, a_a, a_p = 0.01575, 0.0178, 0.000711, 0.0237, 0.01118
    binding = (
        a_v * A
        - a_s * A ** (2.0 / 3.0)
        - a_c * Z * (Z - 1) / A ** (1.0 / 3.0)
        - a_a * (N - Z) ** 2 / A
    )
    if A % 2 == 0:
        pairing = a_p / math.sqrt(A)
        binding += pairing if Z % 2 == 0 else -pairing
    return Z * PROTON_MASS + N * NEUTRON_MASS - binding


class ParticleTable:
    """PDG code to rest-mass lookup.

    One shared instance is loaded lazily from the packaged ``particles.yaml``
    and reused for the process lifetime. Build a private table by passing an
    explicit path.
    """

    _instance: Optional[ParticleTable] = None

    def __init__(self, yaml_path: str | Path | None = None):
        self._masses: Dict[int, float] = {}
        self._names: Dict[int, str] = {}
        self.load_from_yaml(yaml_path or _default_table_path())

    @classmethod
    def instance(cls) -> ParticleTable:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance so the next access reloads it."""
        cls._instance = None

    def load_from_yaml(self, yaml_path: str | Path) -> None:
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Particle table not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if "particles" not in data:
            raise ValueError("YAML must contain 'particles' key")

        for entry in data["particles"]:
            self._masses[int(entry["pdg"])] = float(entry["mass"])
            self._names[int(entry["pdg"])] = str(entry.get("name", entry["pdg"]))
        for entry in data.get("nuclei", []):
            self._masses[int(entry["pdg"])] = float(entry["mass"])
            self._names[int(entry["pdg"])] = str(entry.get("name", entry["pdg"]))

        logger.debug(f"Loaded {len(self._masses)} particle masses from {path}")

    def set_mass(self, code: int, mass: float) -> None:
        """Override a mass, e.g. the dark matter probe mass of a model."""
        if mass < 0:
            raise ValueError(f"Mass must be >= 0, got {mass}")
        self._masses[abs(code)] = mass

    def mass(self, code: int) -> float:
        """Rest mass [GeV] of a particle or nucleus.

        Raises:
            KeyError: If the code is unknown and is not an ion
        """
        key = abs(code)
        if key in self._masses:
            return self._masses[key]
        if is_ion(key):
            mass = semi_empirical_mass(ion_Z(key), ion_A(key))
            self._masses[key] = mass
            return mass
        raise KeyError(f"No mass for PDG code {code}")

    def name(self, code: int) -> str:
        name = self._names.get(abs(code), str(abs(code)))
        return f"anti-{name}" if code < 0 else name

    def __contains__(self, code: int) -> bool:
        return abs(code) in self._masses or is_ion(abs(code))


def mass(code: int) -> float:
    """Shortcut for ``ParticleTable.instance().mass(code)``."""
    return ParticleTable.instance().mass(code)
