"""Tests for phase-space plots."""

import matplotlib.pyplot as plt
import numpy as np

from nuphase.core import pdg
from nuphase.core.interaction import Interaction
from nuphase.kinematics.phase_space import PhaseSpace
from nuphase.kinematics.visualization import (
    W_Q2_boundary,
    plot_W_Q2_region,
    plot_y_range_vs_energy,
)


class TestBoundary:
    """Tests for sampling the (W, Q2) boundary."""

    def test_shapes(self, dis_cc_proton):
        W, Q2_min, Q2_max = W_Q2_boundary(PhaseSpace(dis_cc_proton), n_points=50)

        assert W.shape == Q2_min.shape == Q2_max.shape == (50,)
        finite = np.isfinite(Q2_min)
        assert finite.any()
        assert np.all(Q2_min[finite] <= Q2_max[finite])

    def test_below_threshold_is_empty(self):
        interaction = Interaction.dis_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, 0.2)
        W, Q2_min, Q2_max = W_Q2_boundary(PhaseSpace(interaction))

        assert W.size == Q2_min.size == Q2_max.size == 0


class TestPlots:
    """Tests for the plotting helpers."""

    def test_region_saved(self, dis_cc_proton, tmp_path):
        save_path = tmp_path / "region.png"
        plot_W_Q2_region(PhaseSpace(dis_cc_proton), n_points=40, save_path=str(save_path))

        assert save_path.exists()

    def test_region_into_existing_axes(self, dis_cc_proton):
        fig, ax = plt.subplots()
        returned = plot_W_Q2_region(PhaseSpace(dis_cc_proton), n_points=20, ax=ax, title="DIS")

        assert returned is ax
        assert ax.get_title() == "DIS"
        plt.close(fig)

    def test_y_range_restores_energy(self, dis_cc_proton, tmp_path):
        save_path = tmp_path / "y_range.png"
        plot_y_range_vs_energy(PhaseSpace(dis_cc_proton), [2.0, 5.0, 20.0],
                               save_path=str(save_path))

        assert save_path.exists()
        assert dis_cc_proton.initial_state.probe_p4.E == 5.0
