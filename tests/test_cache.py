"""Tests for cache branches and the cache store."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from nuphase.cache.cache import Cache, CacheBranch
from nuphase.config.enums import InterpolationMethod


class TestCacheBranch:
    """Tests for a single energy -> value branch."""

    def test_values_kept_sorted(self):
        branch = CacheBranch("max xsec")
        for x, y in [(3.0, 30.0), (1.0, 10.0), (2.0, 20.0)]:
            branch.add_values(x, y)

        assert len(branch) == 3
        assert_allclose(branch.energies, [1.0, 2.0, 3.0])
        assert_allclose(branch.values, [10.0, 20.0, 30.0])
        assert list(branch.items()) == [(1.0, 10.0), (2.0, 20.0), (3.0, 30.0)]

    def test_overwrite_same_energy(self):
        branch = CacheBranch()
        branch.add_values(1.0, 10.0)
        branch.add_values(1.0, 11.0)

        assert len(branch) == 1
        assert branch.values[0] == 11.0

    def test_lower_bound(self):
        branch = CacheBranch()
        branch.add_values(1.0, 10.0)
        branch.add_values(2.0, 20.0)

        assert branch.lower_bound(0.5) == (1.0, 10.0)
        assert branch.lower_bound(1.0) == (1.0, 10.0)
        assert branch.lower_bound(1.5) == (2.0, 20.0)
        assert branch.lower_bound(2.5) is None

    def test_call_without_spline(self):
        branch = CacheBranch("empty")
        branch.add_values(1.0, 10.0)

        with pytest.raises(ValueError, match="has no spline"):
            branch(1.0)

    def test_spline(self):
        branch = CacheBranch()
        for x in np.linspace(1.0, 5.0, 5):
            branch.add_values(x, 2.0 * x)

        spline = branch.create_spline(InterpolationMethod.LINEAR)

        assert branch.spline is spline
        assert branch(2.5) == pytest.approx(5.0)
        assert branch(6.0) == 0.0

    def test_spline_needs_two_points(self):
        branch = CacheBranch()
        branch.add_values(1.0, 10.0)

        with pytest.raises(ValueError, match="at least 2 knots"):
            branch.create_spline()


class TestCache:
    """Tests for the branch store."""

    def test_branch_key(self):
        key = Cache.branch_key("Model/Default", "probe:14;tgt:2212;", 0)
        assert key == "Model/Default/probe:14;tgt:2212;/0"

    def test_add_and_find(self):
        cache = Cache()
        branch = cache.add_branch("a/b", CacheBranch("test"))

        assert cache.find_branch("a/b") is branch
        assert cache.find_branch("a/c") is None
        assert "a/b" in cache
        assert len(cache) == 1

    def test_duplicate_key_rejected(self):
        cache = Cache()
        cache.add_branch("a/b", CacheBranch())

        with pytest.raises(KeyError, match="already exists"):
            cache.add_branch("a/b", CacheBranch())

    def test_remove_and_clear(self):
        cache = Cache()
        cache.add_branch("a", CacheBranch())
        cache.add_branch("b", CacheBranch())

        cache.remove_branch("a")
        assert list(cache.keys()) == ["b"]

        cache.clear()
        assert len(cache) == 0

    def test_save_load_round_trip(self, tmp_path):
        cache = Cache()
        with_spline = cache.add_branch("x/with_spline", CacheBranch("splined"))
        for x in np.linspace(1.0, 4.0, 4):
            with_spline.add_values(x, x * x)
        with_spline.create_spline(InterpolationMethod.PCHIP)

        plain = cache.add_branch("x/plain", CacheBranch("plain"))
        plain.add_values(2.0, 3.0)

        filepath = tmp_path / "cache.npy"
        cache.save(filepath)
        loaded = Cache.load(filepath)

        assert sorted(loaded.keys()) == ["x/plain", "x/with_spline"]

        restored = loaded.find_branch("x/with_spline")
        assert restored.name == "splined"
        assert_allclose(restored.energies, with_spline.energies)
        assert_allclose(restored.values, with_spline.values)
        assert restored.spline.method is InterpolationMethod.PCHIP
        assert restored(2.5) == pytest.approx(with_spline(2.5))

        assert loaded.find_branch("x/plain").spline is None
