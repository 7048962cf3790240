"""Tests for the PhaseSpace facade."""

import logging

import numpy as np
import pytest

from nuphase.config.physics_config import PhaseSpaceConfig
from nuphase.core import pdg
from nuphase.core.constants import (
    ELECTRON_MASS,
    MUON_MASS,
    NUCLEON_MASS,
    PION_MASS,
)
from nuphase.core.exceptions import NumericalError, UnresolvedChannel, UnsupportedChannel
from nuphase.core.interaction import ExclusiveTag, Interaction
from nuphase.core.pdg import ParticleTable
from nuphase.core.process import CurrentKind, ProcessInfo, ProcessKind
from nuphase.kinematics.phase_space import (
    CHANNEL_RULES,
    KinematicVariable,
    PhaseSpace,
    set_running_W_Q2,
)

CARBON12 = pdg.ion_pdg(6, 12)


def supported_interactions():
    """One interaction per supported channel family."""
    spp_tag = ExclusiveTag(n_protons=1, n_pi_plus=1)
    return [
        Interaction.qel_cc(CARBON12, pdg.NEUTRON, pdg.NU_MU, 1.0),
        Interaction.qel_nc(CARBON12, pdg.PROTON, pdg.NU_MU, 1.0),
        Interaction.ibd(pdg.PROTON, pdg.PROTON, -pdg.NU_E, 1.0),
        Interaction.res_cc(CARBON12, pdg.NEUTRON, pdg.NU_MU, 1.0),
        Interaction.spp_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, spp_tag, 1.0),
        Interaction.dis_cc(CARBON12, pdg.NEUTRON, pdg.NU_MU, 5.0),
        Interaction.dis_em(pdg.PROTON, pdg.PROTON, pdg.ELECTRON, 5.0),
        Interaction.coh_cc(CARBON12, pdg.NU_MU, 2.0),
        Interaction.cevns(CARBON12, pdg.NU_MU, 0.05),
        Interaction.dfr_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, 5.0),
        Interaction.imd(CARBON12, 20.0),
        Interaction.nue_elastic(CARBON12, pdg.NU_E, 1.0),
        Interaction.am_nu_gamma(CARBON12, pdg.NEUTRON, pdg.NU_MU, 1.0),
        Interaction.mec_cc(CARBON12, pdg.NU_MU, 1.0, hit_cluster_pdg=pdg.CLUSTER_NP),
        Interaction.glashow_resonance(CARBON12, 1.0),
        Interaction.photon_resonance(CARBON12, pdg.PROTON, pdg.NU_MU, 1.0),
        Interaction.photon_coherent(CARBON12, pdg.NU_MU, 1.0),
        Interaction.single_kaon(pdg.PROTON, pdg.PROTON, pdg.NU_MU, pdg.K_PLUS, 2.0),
        Interaction.dm_elastic(CARBON12, pdg.NEUTRON, 1.0),
        Interaction.dm_dis(CARBON12, pdg.NEUTRON, 5.0),
        Interaction.dm_electron_elastic(CARBON12, 1.0),
    ]


class TestChannelRules:
    """Tests for the channel dispatch table."""

    def test_every_process_kind_has_rules(self):
        assert set(CHANNEL_RULES) == set(ProcessKind)

    @pytest.mark.parametrize(
        "interaction", supported_interactions(), ids=lambda i: i.process.kind.value
    )
    def test_threshold_non_negative(self, interaction):
        ps = PhaseSpace(interaction)
        Ethr = ps.threshold()
        assert np.isfinite(Ethr)
        assert Ethr >= 0.0

    def test_unknown_process_is_unsupported(self):
        interaction = Interaction.create(
            ProcessKind.UNKNOWN, CurrentKind.WEAK_CC, pdg.NU_MU, pdg.PROTON, energy=1.0
        )
        ps = PhaseSpace(interaction)

        with pytest.raises(UnsupportedChannel, match="Can't compute threshold"):
            ps.threshold()
        with pytest.raises(UnsupportedChannel):
            ps.is_above_threshold()


class TestBinding:
    """Tests for binding a PhaseSpace to interactions."""

    def test_unbound_raises(self):
        ps = PhaseSpace()
        with pytest.raises(ValueError, match="not bound"):
            ps.threshold()

    def test_rebinding_drops_previous_interaction(self, dis_cc_proton, qel_cc_neutron):
        ps = PhaseSpace(dis_cc_proton)
        assert ps.W_lim().width > 0

        ps.use_interaction(qel_cc_neutron)
        assert ps.interaction is qel_cc_neutron
        assert ps.W_lim().width == 0.0

    def test_queries_do_not_mutate_interaction(self, dis_cc_proton):
        before = dis_cc_proton.copy()
        ps = PhaseSpace(dis_cc_proton)
        ps.W_lim()
        ps.Q2_lim()
        ps.Q2_lim_at_W(1.5)
        ps.y_lim()

        assert dis_cc_proton.kinematics == before.kinematics
        assert dis_cc_proton.as_string() == before.as_string()


class TestThresholds:
    """Tests for channel thresholds."""

    def test_dis_threshold(self, dis_cc_proton):
        Mp = ParticleTable.instance().mass(pdg.PROTON)
        Wmin = NUCLEON_MASS + PION_MASS
        expected = 0.5 * ((Wmin + MUON_MASS) ** 2 - Mp * Mp) / Mp

        assert PhaseSpace(dis_cc_proton).threshold() == pytest.approx(expected)

    def test_cevns_threshold(self, particle_table):
        particle_table.set_mass(pdg.NU_MU, 0.106)
        particle_table.set_mass(CARBON12, 12.0)
        interaction = Interaction.cevns(CARBON12, pdg.NU_MU, 1.0)

        assert PhaseSpace(interaction).threshold() == pytest.approx(
            0.106 + 0.5 * 0.106 * 0.106 / 12.0
        )

    def test_threshold_comparison_is_strict(self, particle_table):
        particle_table.set_mass(pdg.NU_MU, 0.106)
        interaction = Interaction.cevns(CARBON12, pdg.NU_MU, 1.0)
        ps = PhaseSpace(interaction)
        Ethr = ps.threshold()

        interaction.set_probe_energy(Ethr)
        assert not ps.is_above_threshold()

        interaction.set_probe_energy(Ethr * (1.0 + 1e-9))
        assert ps.is_above_threshold()

    def test_inverse_mu_decay_threshold(self):
        expected = 0.5 * (MUON_MASS ** 2 - ELECTRON_MASS ** 2) / ELECTRON_MASS
        interaction = Interaction.imd(CARBON12, 10.0)
        ps = PhaseSpace(interaction)

        assert ps.threshold() == pytest.approx(expected)
        assert not ps.is_above_threshold()
        interaction.set_probe_energy(12.0)
        assert ps.is_above_threshold()

    def test_dark_matter_dis_threshold_is_probe_mass(self):
        interaction = Interaction.dm_dis(CARBON12, pdg.NEUTRON, 5.0)
        mdm = ParticleTable.instance().mass(pdg.DARK_MATTER)
        assert PhaseSpace(interaction).threshold() == pytest.approx(mdm)

    def test_mec_threshold_without_cluster_is_lepton_mass(self):
        interaction = Interaction.mec_cc(CARBON12, pdg.NU_MU, 1.0)
        assert PhaseSpace(interaction).threshold() == pytest.approx(MUON_MASS)

    def test_normalization_never_above_threshold(self):
        interaction = Interaction.create(
            ProcessKind.NORMALIZATION, CurrentKind.WEAK_CC, pdg.NU_MU, pdg.PROTON, energy=10.0
        )
        ps = PhaseSpace(interaction)

        assert ps.threshold() == 0.0
        assert not ps.is_above_threshold()


class TestWLimits:
    """Tests for hadronic invariant mass limits."""

    def test_quasi_elastic_W_is_recoil_mass(self, qel_cc_neutron):
        Wl = PhaseSpace(qel_cc_neutron).W_lim()
        Mp = ParticleTable.instance().mass(pdg.PROTON)

        assert Wl.min == Wl.max
        assert Wl.min == pytest.approx(Mp)

    def test_dis_W_starts_above_pion_production(self, dis_cc_proton):
        Wl = PhaseSpace(dis_cc_proton).W_lim()
        assert Wl.min >= ParticleTable.instance().mass(pdg.NEUTRON) + PION_MASS
        assert Wl.max > Wl.min

    def test_dis_below_threshold_is_undefined_and_not_allowed(self):
        interaction = Interaction.dis_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, 0.2)
        ps = PhaseSpace(interaction)

        assert ps.limits(KinematicVariable.W).is_undefined
        interaction.kinematics.W = 1.0
        interaction.kinematics.Q2 = 0.1
        assert not ps.is_allowed()


class TestQ2Limits:
    """Tests for Q2 and q2 limits."""

    def test_q2_is_reflected_Q2(self, dis_cc_proton):
        ps = PhaseSpace(dis_cc_proton)
        Q2l = ps.Q2_lim()
        q2l = ps.q2_lim()

        assert q2l.min == -Q2l.max
        assert q2l.max == -Q2l.min
        assert ps.limits(KinematicVariable.SIGNED_Q2) == q2l

    def test_Q2_lim_at_W_matches_running_W(self, dis_cc_proton):
        ps = PhaseSpace(dis_cc_proton)
        dis_cc_proton.kinematics.W = 1.6

        assert ps.Q2_lim_at_W(1.6) == ps.Q2_lim_W()
        assert ps.q2_lim_W() == ps.Q2_lim_W().reflected()

    def test_mec_without_cluster_is_undefined(self, caplog):
        interaction = Interaction.mec_cc(CARBON12, pdg.NU_MU, 1.0)
        ps = PhaseSpace(interaction)

        with caplog.at_level(logging.WARNING):
            Q2l = ps.Q2_lim()

        assert Q2l.is_undefined
        assert "hit nucleon cluster" in caplog.text

    def test_mec_Q2_capped(self):
        interaction = Interaction.mec_cc(CARBON12, pdg.NU_MU, 3.0, hit_cluster_pdg=pdg.CLUSTER_NP)
        Q2l = PhaseSpace(interaction, PhaseSpaceConfig(mec_Q2_max=1.2)).Q2_lim()

        assert Q2l.is_valid
        assert Q2l.max <= 1.2

    def test_quasi_elastic_Q2_at_W_uses_recoil_nucleon(self):
        tag = ExclusiveTag(charm=True, charm_hadron_pdg=pdg.LAMBDA_C)
        charm = Interaction.qel_cc(pdg.NEUTRON, pdg.NEUTRON, pdg.NU_MU, 5.0, exclusive_tag=tag)
        plain = Interaction.qel_cc(pdg.NEUTRON, pdg.NEUTRON, pdg.NU_MU, 5.0)
        ps = PhaseSpace(charm)

        assert ps.Q2_lim_W() == PhaseSpace(plain).Q2_lim_W()
        assert ps.Q2_lim().max < ps.Q2_lim_W().max

    def test_cevns_Q2_uses_lab_energy(self):
        interaction = Interaction.cevns(CARBON12, pdg.NU_MU, 0.05)
        Q2l = PhaseSpace(interaction).Q2_lim()
        assert Q2l.max == pytest.approx(4.0 * 0.05 ** 2)


class TestXYLimits:
    """Tests for Bjorken x and inelasticity y limits."""

    def test_dis_y_window_widens_with_energy(self, dis_cc_proton):
        ps = PhaseSpace(dis_cc_proton)
        widths = []
        for E in (2.0, 5.0, 10.0, 50.0):
            dis_cc_proton.set_probe_energy(E)
            widths.append(ps.y_lim().width)

        assert np.all(np.diff(widths) >= 0)

    def test_quasi_elastic_x_is_one(self, qel_cc_neutron):
        xl = PhaseSpace(qel_cc_neutron).x_lim()
        assert xl.min == xl.max == 1.0

    def test_coherent_y_lim_with_xsi(self):
        interaction = Interaction.coh_cc(CARBON12, pdg.NU_MU, 2.0)
        interaction.kinematics.Q2 = 0.1
        ps = PhaseSpace(interaction)

        assert ps.y_lim(xsi=1.0).max < ps.y_lim(xsi=0.0).max
        assert ps.y_lim_X(xsi=0.5) == ps.y_lim(xsi=0.5)

    def test_minimum_and_maximum_project_limits(self, dis_cc_proton):
        ps = PhaseSpace(dis_cc_proton)
        for variable in (KinematicVariable.W, KinematicVariable.Q2,
                         KinematicVariable.X, KinematicVariable.Y):
            limits = ps.limits(variable)
            assert ps.minimum(variable) == limits.min
            assert ps.maximum(variable) == limits.max


class TestTLimits:
    """Tests for |t| limits."""

    def test_not_sensible_for_dis(self, dis_cc_proton, caplog):
        with caplog.at_level(logging.WARNING):
            tl = PhaseSpace(dis_cc_proton).t_lim()

        assert tl.is_undefined
        assert "not sensible" in caplog.text

    def test_diffractive_t_max_from_config(self):
        interaction = Interaction.dfr_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, 5.0)
        interaction.kinematics.x = 0.1
        interaction.kinematics.y = 0.5
        ps = PhaseSpace(interaction, PhaseSpaceConfig(diffractive_t_max=0.5))

        tl = ps.t_lim()
        assert tl.max == 0.5
        assert 0.0 < tl.min < 0.2

        interaction.kinematics.t = 0.2
        assert ps.is_allowed()
        interaction.kinematics.t = 0.6
        assert not ps.is_allowed()

    def test_diffractive_nan_t_min_raises(self):
        interaction = Interaction.dfr_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, 1.0)
        interaction.kinematics.x = 0.9
        interaction.kinematics.y = 0.5
        ps = PhaseSpace(interaction)

        with pytest.raises(NumericalError, match="NaN tmin"):
            ps.t_lim()
        # W below the diffractive window: rejected before t is computed
        assert not ps.is_allowed()

    def test_coherent_t_without_energy_transfer(self, caplog):
        interaction = Interaction.coh_cc(CARBON12, pdg.NU_MU, 2.0)
        interaction.kinematics.x = 0.1
        interaction.kinematics.y = 0.0

        with caplog.at_level(logging.WARNING):
            tl = PhaseSpace(interaction).t_lim()

        assert tl.is_undefined
        assert "nu > 0" in caplog.text

    def test_coherent_t_max_from_config(self):
        interaction = Interaction.coh_cc(CARBON12, pdg.NU_MU, 2.0)
        interaction.kinematics.x = 0.01
        interaction.kinematics.y = 0.3
        tl = PhaseSpace(interaction, PhaseSpaceConfig(coherent_t_max=0.08)).t_lim()

        assert tl.max == 0.08
        assert tl.min > 0.0


class TestUnsupportedVariable:
    """Tests for variable tags without a limit calculator."""

    @pytest.mark.parametrize(
        "variable",
        [KinematicVariable.TK, KinematicVariable.TL, KinematicVariable.CTL,
         KinematicVariable.EL, KinematicVariable.NULL],
    )
    def test_logs_error_and_returns_sentinel(self, dis_cc_proton, variable, caplog):
        with caplog.at_level(logging.ERROR):
            result = PhaseSpace(dis_cc_proton).limits(variable)

        assert result.is_undefined
        assert "Couldn't compute limits" in caplog.text


class TestSinglePion:
    """Tests for single-pion production windows."""

    def test_W_window(self, spp_cc_proton):
        table = ParticleTable.instance()
        Wl = PhaseSpace(spp_cc_proton).W_lim()

        assert Wl.min == pytest.approx(table.mass(pdg.PROTON) + table.mass(pdg.PI_PLUS))
        assert Wl.max > Wl.min

    def test_W_window_degenerate_below_threshold(self):
        tag = ExclusiveTag(n_protons=1, n_pi_plus=1)
        interaction = Interaction.spp_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, tag, 0.2)
        ps = PhaseSpace(interaction)

        Wl = ps.W_lim_spp()
        assert Wl.min == Wl.max
        assert not ps.is_above_threshold()

    def test_point_inside_window(self, spp_cc_proton):
        ps = PhaseSpace(spp_cc_proton)
        Q2l = ps.Q2_lim_at_W(1.2)
        set_running_W_Q2(spp_cc_proton, 1.2, 0.5 * (Q2l.min + Q2l.max))

        assert ps.W_lim_spp().contains(1.2)
        assert ps.Q2_lim_W_spp().contains(spp_cc_proton.kinematics.Q2)
        assert ps.Q2_lim_W_spp() == Q2l

    def test_is_allowed_has_no_single_pion_rule(self, spp_cc_proton):
        ps = PhaseSpace(spp_cc_proton)
        Q2l = ps.Q2_lim_at_W(1.2)
        set_running_W_Q2(spp_cc_proton, 1.2, 0.5 * (Q2l.min + Q2l.max))

        assert not ps.is_allowed()

    def test_iso_threshold_close_to_channel_threshold(self, spp_cc_proton):
        ps = PhaseSpace(spp_cc_proton)
        assert ps.threshold_spp_iso() == pytest.approx(ps.threshold(), rel=0.05)

    def test_unresolved_tag(self):
        tag = ExclusiveTag(n_protons=1)
        interaction = Interaction.spp_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, tag, 1.0)

        with pytest.raises(UnresolvedChannel):
            PhaseSpace(interaction).threshold()


def _mid(bounds):
    return 0.5 * (bounds.min + bounds.max)


def _set_any_point(ps, inside):
    kine = ps.interaction.kinematics
    kine.W, kine.Q2, kine.x, kine.y, kine.t = 1.5, 0.5, 0.3, 0.5, 0.1


def _set_Q2(ps, inside):
    Q2l = ps.Q2_lim()
    ps.interaction.kinematics.Q2 = _mid(Q2l) if inside else Q2l.max + 1.0


def _set_W_Q2(ps, inside):
    W = _mid(ps.W_lim())
    Q2l = ps.Q2_lim_at_W(W)
    ps.interaction.kinematics.W = W
    ps.interaction.kinematics.Q2 = _mid(Q2l) if inside else Q2l.max + 1.0


def _set_y(ps, inside):
    ps.interaction.kinematics.y = _mid(ps.y_lim()) if inside else 1.5


def _set_x_y(ps, inside):
    ps.interaction.kinematics.x = 0.5 if inside else 1.5
    ps.interaction.kinematics.y = _mid(ps.y_lim())


def _set_positive_Q2(ps, inside):
    ps.interaction.kinematics.Q2 = 1e-3 if inside else 0.0


def _set_diffractive(ps, inside):
    kine = ps.interaction.kinematics
    kine.x, kine.y = 0.1, 0.5
    kine.t = 0.2 if inside else 2.0


# (factory, point setter, allowed inside, allowed outside)
ALLOWED_CASES = {
    "QES": (lambda: Interaction.qel_cc(CARBON12, pdg.NEUTRON, pdg.NU_MU, 1.0),
            _set_Q2, True, False),
    "IBD": (lambda: Interaction.ibd(pdg.PROTON, pdg.PROTON, -pdg.NU_E, 1.0),
            _set_Q2, True, False),
    "DMEL": (lambda: Interaction.dm_elastic(CARBON12, pdg.NEUTRON, 1.0),
             _set_Q2, True, False),
    "SPP": (lambda: Interaction.spp_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU,
                                       ExclusiveTag(n_protons=1, n_pi_plus=1), 1.0),
            _set_W_Q2, False, False),
    "RES": (lambda: Interaction.res_cc(CARBON12, pdg.NEUTRON, pdg.NU_MU, 2.0),
            _set_W_Q2, True, False),
    "DIS": (lambda: Interaction.dis_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, 5.0),
            _set_W_Q2, True, False),
    "DMDIS": (lambda: Interaction.dm_dis(CARBON12, pdg.NEUTRON, 5.0),
              _set_W_Q2, True, False),
    "DFR": (lambda: Interaction.dfr_cc(pdg.PROTON, pdg.PROTON, pdg.NU_MU, 5.0),
            _set_diffractive, True, False),
    "CEvNS": (lambda: Interaction.cevns(CARBON12, pdg.NU_MU, 0.05),
              _set_positive_Q2, True, False),
    "COH": (lambda: Interaction.coh_cc(CARBON12, pdg.NU_MU, 2.0),
            _set_x_y, True, False),
    "IMD": (lambda: Interaction.imd(CARBON12, 20.0), _set_y, True, False),
    "IMDAnh": (lambda: Interaction.imd_annihilation(CARBON12, 20.0), _set_y, True, False),
    "NuEEL": (lambda: Interaction.nue_elastic(CARBON12, pdg.NU_E, 1.0), _set_y, True, False),
    "DME": (lambda: Interaction.dm_electron_elastic(CARBON12, 1.0), _set_y, True, False),
    "AMNuGamma": (lambda: Interaction.am_nu_gamma(CARBON12, pdg.NEUTRON, pdg.NU_MU, 1.0),
                  _set_any_point, False, False),
    "MEC": (lambda: Interaction.mec_cc(CARBON12, pdg.NU_MU, 1.0,
                                       hit_cluster_pdg=pdg.CLUSTER_NP),
            _set_Q2, True, False),
    "MEC-no-cluster": (lambda: Interaction.mec_cc(CARBON12, pdg.NU_MU, 1.0),
                       _set_any_point, False, False),
    "GLR": (lambda: Interaction.glashow_resonance(CARBON12, 10.0),
            _set_any_point, False, False),
    "PhotonRES": (lambda: Interaction.photon_resonance(CARBON12, pdg.PROTON, pdg.NU_MU, 10.0),
                  _set_any_point, False, False),
    "PhotonCOH": (lambda: Interaction.photon_coherent(CARBON12, pdg.NU_MU, 10.0),
                  _set_any_point, False, False),
    "SKN": (lambda: Interaction.single_kaon(pdg.PROTON, pdg.PROTON, pdg.NU_MU, pdg.K_PLUS, 2.0),
            _set_any_point, True, True),
    "Norm": (lambda: Interaction.create(ProcessKind.NORMALIZATION, CurrentKind.WEAK_CC,
                                        pdg.NU_MU, pdg.PROTON, energy=1.0),
             _set_any_point, False, False),
    "Unknown": (lambda: Interaction.create(ProcessKind.UNKNOWN, CurrentKind.WEAK_CC,
                                           pdg.NU_MU, pdg.PROTON, energy=1.0),
                _set_any_point, False, False),
}


class TestIsAllowedPerChannel:
    """Tests for the allowed-region rule of every channel."""

    def test_cases_cover_every_process_kind(self):
        kinds = {factory().process.kind for factory, _, _, _ in ALLOWED_CASES.values()}
        assert kinds == set(ProcessKind)

    @pytest.mark.parametrize(
        "factory, set_point, inside_ok, outside_ok",
        list(ALLOWED_CASES.values()),
        ids=list(ALLOWED_CASES),
    )
    def test_inside_and_outside(self, factory, set_point, inside_ok, outside_ok):
        ps = PhaseSpace(factory())

        set_point(ps, True)
        assert ps.is_allowed() is inside_ok

        set_point(ps, False)
        assert ps.is_allowed() is outside_ok


class TestProcessInfo:
    """Tests for channel predicates."""

    @pytest.mark.parametrize(
        "kind, expected",
        [
            (ProcessKind.DARK_MATTER_ELASTIC, True),
            (ProcessKind.DARK_MATTER_DEEP_INELASTIC, True),
            (ProcessKind.DARK_MATTER_ELECTRON_ELASTIC, False),
            (ProcessKind.QUASI_ELASTIC, False),
        ],
    )
    def test_dark_matter_keys_on_process_kind(self, kind, expected):
        info = ProcessInfo(kind, CurrentKind.DARK_MATTER)
        assert info.is_dark_matter is expected

    def test_dark_matter_current_alone_keeps_standard_limits(self):
        standard = Interaction.qel_nc(pdg.NEUTRON, pdg.NEUTRON, pdg.NU_MU, 2.0)
        relabelled = Interaction.create(
            ProcessKind.QUASI_ELASTIC, CurrentKind.DARK_MATTER, pdg.NU_MU, pdg.NEUTRON,
            energy=2.0, fs_lepton_pdg=pdg.NU_MU,
        )

        assert PhaseSpace(relabelled).Q2_lim() == PhaseSpace(standard).Q2_lim()
        assert PhaseSpace(relabelled).threshold() == PhaseSpace(standard).threshold()
