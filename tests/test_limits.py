"""Tests for the closed-form kinematic boundaries."""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from nuphase.core.constants import (
    A_SMALL_NUM,
    MACHINE_EPSILON,
    MIN_Q2_LIMIT,
    MIN_Q2_LIMIT_VLE,
    MUON_MASS,
    NEUTRON_MASS,
    PION_MASS,
    PROTON_MASS,
)
from nuphase.core.range import Range1D
from nuphase.kinematics import limits


class TestRange1D:
    """Tests for the interval type and its sentinel."""

    def test_undefined_sentinel(self):
        r = Range1D.undefined()
        assert r.is_undefined
        assert not r.is_valid
        assert tuple(r) == (-1.0, -1.0)

    def test_point_is_valid(self):
        r = Range1D.point(0.938)
        assert r.is_valid
        assert r.width == 0.0
        assert r.contains(0.938)

    def test_reflected(self):
        r = Range1D(0.1, 2.0).reflected()
        assert r.min == -2.0
        assert r.max == -0.1


class TestSnapDegenerate:
    """Tests for the zero-width window guard."""

    def test_equal_ends_collapse_to_point(self):
        r = limits.snap_degenerate(1.2, 1.2)
        assert r.min == r.max
        assert r.min == pytest.approx(1.2)

    def test_inverted_ends_collapse_to_harmonic_mean(self):
        r = limits.snap_degenerate(1.0776, 1.0149)
        expected = 2.0 * 1.0776 * 1.0149 / (1.0776 + 1.0149)
        assert r.min == r.max
        assert r.min == pytest.approx(expected)

    def test_normal_window_nudged_inward(self):
        r = limits.snap_degenerate(1.0, 2.0)
        assert r.min == 1.0 * (1.0 + MACHINE_EPSILON)
        assert r.max == 2.0 * (1.0 - MACHINE_EPSILON)
        assert 1.0 < r.min < r.max < 2.0


class TestConversions:
    """Tests for Bjorken (x, y) <-> (W, Q2)."""

    def test_round_trip(self):
        Ev, M = 5.0, PROTON_MASS
        W, Q2 = limits.W_Q2_from_x_y(Ev, M, 0.2, 0.5)

        assert Q2 == pytest.approx(2.0 * M * Ev * 0.2 * 0.5)
        x, y = limits.x_y_from_W_Q2(Ev, M, W, Q2)
        assert_allclose([x, y], [0.2, 0.5], rtol=1e-12)

    def test_elastic_point(self):
        # x = 1 puts W on the nucleon mass
        W, _ = limits.W_Q2_from_x_y(2.0, PROTON_MASS, 1.0, 0.3)
        assert W == pytest.approx(PROTON_MASS)

    def test_non_positive_energy_rejected(self):
        with pytest.raises(ValueError, match="must be > 0"):
            limits.x_y_from_W_Q2(0.0, PROTON_MASS, 1.2, 0.5)


class TestInelasticLimits:
    """Tests for massless-probe inelastic limits."""

    def test_W_lim_above_threshold(self):
        Ev = 5.0
        Wl = limits.inel_W_lim(Ev, PROTON_MASS, MUON_MASS)

        W_max = math.sqrt(PROTON_MASS ** 2 + 2.0 * PROTON_MASS * Ev) - MUON_MASS
        assert Wl.min == pytest.approx(NEUTRON_MASS + A_SMALL_NUM)
        assert Wl.max == pytest.approx(W_max - A_SMALL_NUM)

    def test_W_lim_below_threshold_is_undefined(self):
        assert limits.inel_W_lim(0.05, PROTON_MASS, MUON_MASS).is_undefined

    def test_Q2_lim_W_ordering(self):
        Q2l = limits.inel_Q2_lim_W(5.0, PROTON_MASS, MUON_MASS, 1.5)
        assert Q2l.is_valid
        assert Q2l.min >= MIN_Q2_LIMIT
        assert Q2l.max > Q2l.min

    def test_Q2_lim_W_beyond_reach_is_undefined(self):
        Q2l = limits.inel_Q2_lim_W(5.0, PROTON_MASS, MUON_MASS, 10.0)
        assert Q2l.is_undefined

    def test_x_lim_non_positive_energy(self):
        assert limits.inel_x_lim(0.0, PROTON_MASS, MUON_MASS).is_undefined
        assert limits.inel_x_lim(-1.0, PROTON_MASS, MUON_MASS).is_undefined

    def test_y_lim_inside_unit_interval(self):
        yl = limits.inel_y_lim(5.0, PROTON_MASS, MUON_MASS)
        assert 0.0 < yl.min < yl.max < 1.0

    def test_y_lim_X_requires_positive_x(self):
        assert limits.inel_y_lim_X(5.0, PROTON_MASS, MUON_MASS, 0.0).is_undefined


class TestMassiveProbeLimits:
    """Tests for dark-matter and charged-lepton probe limits."""

    def test_dark_W_lim_starts_above_pion_threshold(self):
        Wl = limits.dark_W_lim(5.0, PROTON_MASS, 0.1)
        assert Wl.min == pytest.approx(NEUTRON_MASS + PION_MASS + A_SMALL_NUM)

    def test_dark_y_lim_X_below_probe_mass(self):
        assert limits.dark_y_lim_X(0.05, PROTON_MASS, 0.1, 0.5).is_undefined

    def test_em_Q2_lim_valid(self):
        Q2l = limits.em_Q2_lim(2.0, PROTON_MASS, 0.000511)
        assert Q2l.is_valid


class TestCoherentLimits:
    """Tests for coherent scattering off a nucleus."""

    def test_y_lim_non_positive_energy(self):
        assert limits.coh_y_lim(0.0, MUON_MASS).is_undefined

    def test_y_lim_bounds(self):
        yl = limits.coh_y_lim(2.0, MUON_MASS)
        assert yl.min == pytest.approx(PION_MASS / 2.0 + A_SMALL_NUM)
        assert yl.max == pytest.approx(1.0 - MUON_MASS / 2.0 - A_SMALL_NUM)

    def test_Q2_lim_open_above(self):
        M = 11.17
        Q2l = limits.coh_Q2_lim(M, PION_MASS, MUON_MASS, 2.0)
        assert Q2l.min >= 0.0
        assert Q2l.max > 1e300

    def test_Q2_lim_clamped_below_production_threshold(self):
        M = 11.17
        Q2l = limits.coh_Q2_lim(M, PION_MASS, MUON_MASS, 0.05)
        assert Q2l.min == 0.0
        assert Q2l.max > 1e300

    def test_y_lim_xsi_scales_upper_bound(self):
        M = 11.17
        loose = limits.coh_y_lim_xsi(M, PION_MASS, MUON_MASS, 2.0, 0.1, 0.0)
        tight = limits.coh_y_lim_xsi(M, PION_MASS, MUON_MASS, 2.0, 0.1, 1.0)
        assert tight.max < loose.max
        assert tight.min == loose.min


class TestCevnsLimits:
    """Tests for coherent elastic scattering."""

    def test_Q2_lim(self):
        Q2l = limits.cevns_Q2_lim(0.05)
        assert Q2l.min == MIN_Q2_LIMIT_VLE
        assert Q2l.max == pytest.approx(4.0 * 0.05 ** 2)

    @pytest.mark.parametrize("Ev", [0.01, 0.1, 1.0])
    def test_Q2_max_grows_quadratically(self, Ev):
        assert limits.cevns_Q2_lim(Ev).max == pytest.approx(4.0 * Ev * Ev)


def test_y_lim_envelope_requires_positive_x():
    yl = limits._scan_y_lim(Range1D(0.0, 1.0), lambda x: Range1D(0.1, 0.9))
    assert yl.is_undefined

    yl = limits._scan_y_lim(Range1D(0.01, 0.99), lambda x: Range1D(0.1, 0.9))
    assert_allclose([yl.min, yl.max], [0.1, 0.9])
    assert np.isfinite(yl.width)
