"""Plots of kinematic phase-space regions."""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from nuphase.kinematics.phase_space import PhaseSpace

logger = logging.getLogger(__name__)


def W_Q2_boundary(phase_space: PhaseSpace, n_points: int = 200) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Sample the (W, Q2) region boundary of the bound interaction.

    Args:
        phase_space: PhaseSpace bound to an interaction above threshold
        n_points: Number of W samples

    Returns:
        (W, Q2_min, Q2_max) arrays; Q2 entries are NaN where undefined.
        All three are empty when the W range is undefined.
    """
    Wl = phase_space.W_lim()
    if not Wl.is_valid:
        return np.array([]), np.array([]), np.array([])

    W = np.linspace(Wl.min, Wl.max, n_points)
    Q2_min = np.full(n_points, np.nan)
    Q2_max = np.full(n_points, np.nan)
    for i, w in enumerate(W):
        Q2l = phase_space.Q2_lim_at_W(float(w))
        if Q2l.is_valid:
            Q2_min[i] = Q2l.min
            Q2_max[i] = Q2l.max
    return W, Q2_min, Q2_max


def plot_W_Q2_region(
    phase_space: PhaseSpace,
    n_points: int = 200,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    ax=None,
):
    """Shade the allowed (W, Q2) region of the bound interaction.

    Args:
        phase_space: PhaseSpace bound to an interaction
        n_points: Number of W samples
        title: Plot title (defaults to the interaction signature)
        save_path: If provided, save to file
        ax: Existing axes to draw into; a new figure is made otherwise

    Returns:
        The matplotlib axes
    """
    W, Q2_min, Q2_max = W_Q2_boundary(phase_space, n_points)

    own_figure = ax is None
    if own_figure:
        fig, ax = plt.subplots(figsize=(8, 6))

    if W.size:
        ax.fill_between(W, Q2_min, Q2_max, alpha=0.4, label="allowed")
        ax.plot(W, Q2_min, linewidth=1.5)
        ax.plot(W, Q2_max, linewidth=1.5)
    else:
        logger.warning("W range is undefined; nothing to plot")

    ax.set_xlabel("W [GeV]")
    ax.set_ylabel("Q$^2$ [GeV$^2$]")
    ax.set_title(title or phase_space.interaction.as_string())
    ax.grid(True, alpha=0.3)

    if own_figure:
        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches="tight")
            logger.info(f"Saved: {save_path}")
            plt.close()

    return ax


def plot_y_range_vs_energy(
    phase_space: PhaseSpace,
    energies: Sequence[float],
    title: str = "y limits",
    save_path: Optional[str] = None,
):
    """Plot y_min and y_max of the bound interaction over probe energies.

    The interaction's probe energy is restored afterwards.
    """
    interaction = phase_space.interaction
    original_E = interaction.initial_state.probe_p4.E
    y_min = np.full(len(energies), np.nan)
    y_max = np.full(len(energies), np.nan)
    try:
        for i, E in enumerate(energies):
            interaction.set_probe_energy(E)
            yl = phase_space.y_lim()
            if yl.is_valid:
                y_min[i], y_max[i] = yl.min, yl.max
    finally:
        interaction.set_probe_energy(original_E)

    fig, ax = plt.subplots(figsize=(8, 6))
    ax.plot(energies, y_min, linewidth=2, label="y min")
    ax.plot(energies, y_max, linewidth=2, label="y max")
    ax.set_xscale("log")
    ax.set_xlabel("E [GeV]")
    ax.set_ylabel("y")
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        logger.info(f"Saved: {save_path}")
        plt.close()

    return ax
