"""Single-pion production windows.

Channel-specific W and Q2 windows use the actual nucleon and pion masses of
the channel; the ``*_iso`` variants assume isospin symmetry (averaged nucleon
and pion masses). All windows pass through ``snap_degenerate``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from nuphase.core import pdg
from nuphase.core.exceptions import UnresolvedChannel
from nuphase.core.interaction import Interaction, ReferenceFrame
from nuphase.core.pdg import ParticleTable
from nuphase.core.range import Range1D
from nuphase.kinematics.limits import snap_degenerate


@dataclass(frozen=True)
class SppChannel:
    """Initial nucleon, final nucleon and pion of a single-pion channel."""

    initial_nucleon: int
    final_nucleon: int
    final_pion: int

    @classmethod
    def from_interaction(cls, interaction: Interaction) -> SppChannel:
        """Resolve the channel from the hit nucleon and the exclusive tag.

        Raises:
            UnresolvedChannel: If the tag names no single pion
        """
        tag = interaction.exclusive_tag
        final_nucleon = pdg.PROTON if tag.n_protons == 1 else pdg.NEUTRON
        return cls(
            initial_nucleon=interaction.target.hit_nucleon_pdg,
            final_nucleon=final_nucleon,
            final_pion=final_pion_pdg(interaction),
        )


def final_pion_pdg(interaction: Interaction) -> int:
    tag = interaction.exclusive_tag
    if tag.n_pi_plus == 1:
        return pdg.PI_PLUS
    if tag.n_pi_minus == 1:
        return pdg.PI_MINUS
    if tag.n_pi0 == 1:
        return pdg.PI0
    raise UnresolvedChannel(
        f"Cannot identify the single pion of {interaction.as_string()}"
    )


def _iso_masses(table: ParticleTable):
    M = 0.5 * (table.mass(pdg.PROTON) + table.mass(pdg.NEUTRON))
    mpi = (table.mass(pdg.PI_PLUS) + table.mass(pdg.PI0) + table.mass(pdg.PI_MINUS)) / 3.0
    return M, mpi


def threshold_spp_iso(interaction: Interaction) -> float:
    """Isospin-averaged single-pion threshold in the nucleon rest frame."""
    table = ParticleTable.instance()
    M, mpi = _iso_masses(table)
    mi = interaction.initial_state.probe_mass
    mf = interaction.fs_lepton_mass
    mtot = M + mf + mpi
    return (mtot * mtot - M * M - mi * mi) / (2.0 * M)


def W_lim_spp(interaction: Interaction) -> Range1D:
    table = ParticleTable.instance()
    channel = SppChannel.from_interaction(interaction)
    Mf = table.mass(channel.final_nucleon)
    mpi = table.mass(channel.final_pion)
    mf = interaction.fs_lepton_mass
    ECM = interaction.initial_state.cm_energy()
    return snap_degenerate(Mf + mpi, ECM - mf)


def W_lim_spp_iso(interaction: Interaction) -> Range1D:
    table = ParticleTable.instance()
    M, mpi = _iso_masses(table)
    mi = interaction.initial_state.probe_mass
    mf = interaction.fs_lepton_mass
    Ei = interaction.probe_energy(ReferenceFrame.HIT_NUCLEON_REST)
    ECM = math.sqrt(M * (M + 2.0 * Ei) + mi * mi)
    return snap_degenerate(M + mpi, ECM - mf)


def _Q2_window(s: float, Mi: float, mi: float, mf: float, W: float) -> Range1D:
    mi2 = mi * mi
    mf2 = mf * mf
    ECM = math.sqrt(s)

    Ei_CM = 0.5 * (s + mi2 - Mi * Mi) / ECM
    Ef_CM = 0.5 * (s + mf2 - W * W) / ECM
    Pi_CM = 0.0 if Ei_CM < mi else math.sqrt(Ei_CM * Ei_CM - mi2)
    Pf_CM = 0.0 if Ef_CM < mf else math.sqrt(Ef_CM * Ef_CM - mf2)

    Q2_min = 2.0 * (Ei_CM * Ef_CM - Pi_CM * Pf_CM) - mi2 - mf2
    Q2_max = 2.0 * (Ei_CM * Ef_CM + Pi_CM * Pf_CM) - mi2 - mf2
    return snap_degenerate(Q2_min, Q2_max)


def Q2_lim_W_spp(interaction: Interaction, W: Optional[float] = None) -> Range1D:
    """Q2 window at W (default: the running W) for the resolved channel."""
    table = ParticleTable.instance()
    channel = SppChannel.from_interaction(interaction)
    Mi = table.mass(channel.initial_nucleon)
    ECM = interaction.initial_state.cm_energy()
    return _Q2_window(
        ECM * ECM,
        Mi,
        interaction.initial_state.probe_mass,
        interaction.fs_lepton_mass,
        interaction.kinematics.W if W is None else W,
    )


def Q2_lim_W_spp_iso(interaction: Interaction, W: Optional[float] = None) -> Range1D:
    table = ParticleTable.instance()
    M, _ = _iso_masses(table)
    mi = interaction.initial_state.probe_mass
    Ei = interaction.probe_energy(ReferenceFrame.HIT_NUCLEON_REST)
    s = M * (M + 2.0 * Ei) + mi * mi
    if W is None:
        W = interaction.kinematics.W
    return _Q2_window(s, M, mi, interaction.fs_lepton_mass, W)
