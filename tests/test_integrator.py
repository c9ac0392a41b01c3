"""Tests for sirdsim.integrator: forward-Euler loop, clamping, reproducibility."""

import numpy as np
import pytest

from sirdsim.errors import DimensionMismatch, InvalidRate, InvalidState, InvalidTimeRange
from sirdsim.feedback import IncidenceDependentRecovery, no_change
from sirdsim.integrator import integrate, n_steps, time_grid
from sirdsim.parameters import MixingParameterSet, ParameterSet
from sirdsim.sampling import RateSampler
from sirdsim.transitions import SinglePopulationModel, TwoPopulationModel


# ═══════════════════════════════════════════════════════════════════════
# TIME GRID
# ═══════════════════════════════════════════════════════════════════════

class TestTimeGrid:

    def test_unit_step(self):
        assert n_steps(0, 5, 1) == 6
        np.testing.assert_array_equal(time_grid(0, 5, 1), [0, 1, 2, 3, 4, 5])

    def test_fractional_step(self):
        assert n_steps(0, 5, 0.1) == 51
        assert n_steps(0, 1140, 1 / 400) == 456001

    def test_partial_last_step_dropped(self):
        assert n_steps(0, 5.5, 1) == 6

    def test_empty_horizon(self):
        assert n_steps(2, 2, 0.5) == 1

    @pytest.mark.parametrize("t_start,t_end,dt", [(0, 5, 0), (0, 5, -1), (5, 0, 1)])
    def test_invalid_range(self, t_start, t_end, dt):
        with pytest.raises(InvalidTimeRange):
            n_steps(t_start, t_end, dt)


# ═══════════════════════════════════════════════════════════════════════
# LOOP
# ═══════════════════════════════════════════════════════════════════════

X0 = np.array([990.0, 10.0, 0.0, 0.0])


class TestIntegrate:

    def test_worked_example(self, deterministic):
        p = ParameterSet(infection_rate=0.14, recovery_rate=0.07, total_population=1000,
                         initial_infected=10)
        F = integrate(SinglePopulationModel(deterministic, 1.0), None, 0, 1, 1.0, X0, p)
        assert F.shape == (2, 4)
        np.testing.assert_array_equal(F[0], X0)
        np.testing.assert_allclose(F[1], [988.614, 10.686, 0.7, 0.0], rtol=1e-12)

    def test_length_and_rows(self, deterministic, params):
        F = integrate(SinglePopulationModel(deterministic, 1.0), no_change, 0, 5, 1.0, X0, params)
        assert F.shape == (6, 4)

    def test_initial_state_not_modified(self, deterministic, params):
        x0 = X0.copy()
        integrate(SinglePopulationModel(deterministic, 1.0), None, 0, 5, 1.0, x0, params)
        np.testing.assert_array_equal(x0, X0)

    def test_deterministic_reproducible(self, deterministic, params):
        model = SinglePopulationModel(deterministic, 0.5)
        a = integrate(model, None, 0, 50, 0.5, X0, params.copy())
        b = integrate(model, None, 0, 50, 0.5, X0, params.copy())
        np.testing.assert_array_equal(a, b)

    def test_stochastic_reproducible_with_seed(self, params):
        a = integrate(SinglePopulationModel(RateSampler(seed=11), 0.5), None, 0, 50, 0.5, X0, params)
        b = integrate(SinglePopulationModel(RateSampler(seed=11), 0.5), None, 0, 50, 0.5, X0, params)
        np.testing.assert_array_equal(a, b)

    def test_stochastic_seeds_differ(self, params):
        a = integrate(SinglePopulationModel(RateSampler(seed=1), 0.5), None, 0, 50, 0.5, X0, params)
        b = integrate(SinglePopulationModel(RateSampler(seed=2), 0.5), None, 0, 50, 0.5, X0, params)
        assert not np.array_equal(a, b)

    def test_zero_rates_stochastic_equals_deterministic(self):
        p = ParameterSet(infection_rate=0, recovery_rate=0, immunity_loss_rate=0,
                         death_fraction=0, total_population=1000, initial_infected=10)
        a = integrate(SinglePopulationModel(RateSampler(seed=3), 1.0), None, 0, 20, 1.0, X0, p)
        b = integrate(SinglePopulationModel(RateSampler(stochastic=False), 1.0), None, 0, 20, 1.0, X0, p)
        np.testing.assert_array_equal(a, b)
        np.testing.assert_array_equal(a, np.tile(X0, (21, 1)))

    def test_population_conserved_without_clamping(self, deterministic, params):
        F = integrate(SinglePopulationModel(deterministic, 0.1), None, 0, 100, 0.1, X0, params)
        np.testing.assert_allclose(F.sum(axis=1), 1000.0, rtol=1e-9)

    def test_stochastic_run_non_negative(self):
        p = ParameterSet(infection_rate=1.5, recovery_rate=0.9, immunity_loss_rate=0.5,
                         death_fraction=0.3, total_population=100, initial_infected=10)
        x0 = [90.0, 10.0, 0.0, 0.0, 0.0]
        model = SinglePopulationModel(RateSampler(seed=0), 2.0, track_cumulative=True)
        F = integrate(model, None, 0, 200, 2.0, x0, p)
        assert np.all(F >= 0)


class TestClamp:
    """Overshoot from independent draws is clipped at zero, per component."""

    @pytest.fixture
    def overshoot(self):
        # dt * gamma = 2.5: each step removes 2.5 times the infected
        return ParameterSet(infection_rate=0.0, recovery_rate=0.5, total_population=100)

    def test_without_clamp_state_goes_negative(self, deterministic, overshoot):
        F = integrate(SinglePopulationModel(deterministic, 5.0), None, 0, 5, 5.0,
                      [90.0, 10.0, 0.0, 0.0], overshoot, clamp=False)
        assert F[1, 1] == pytest.approx(-15.0)

    def test_clamped_to_zero(self, deterministic, overshoot):
        F = integrate(SinglePopulationModel(deterministic, 5.0), None, 0, 5, 5.0,
                      [90.0, 10.0, 0.0, 0.0], overshoot)
        np.testing.assert_allclose(F[1], [90.0, 0.0, 25.0, 0.0])

    def test_clamping_breaks_conservation(self, deterministic, overshoot):
        F = integrate(SinglePopulationModel(deterministic, 5.0), None, 0, 5, 5.0,
                      [90.0, 10.0, 0.0, 0.0], overshoot)
        assert F[1].sum() > F[0].sum()


class TestCallbacks:

    def test_feedback_called_once_per_step_before_transition(self, params):
        calls = []

        def feedback(par, t, traj, n):
            calls.append(("feedback", n, t, len(traj)))

        def transition(t, traj, n, par):
            calls.append(("transition", n, t, len(traj)))
            return np.zeros(4)

        integrate(transition, feedback, 1.0, 3.0, 0.5, X0, params)
        assert calls == [
            ("feedback", 0, 1.0, 1), ("transition", 0, 1.0, 1),
            ("feedback", 1, 1.5, 2), ("transition", 1, 1.5, 2),
            ("feedback", 2, 2.0, 3), ("transition", 2, 2.0, 3),
            ("feedback", 3, 2.5, 4), ("transition", 3, 2.5, 4),
        ]

    def test_feedback_changes_are_seen_by_transition(self, deterministic, params):
        def stop_infections(par, t, traj, n):
            if n == 3:
                par.infection_rate = 0.0

        F = integrate(SinglePopulationModel(deterministic, 1.0, track_cumulative=True),
                      stop_infections, 0, 10, 1.0, [990.0, 10.0, 0, 0, 0], params)
        C = F[:, 4]
        assert np.all(np.diff(C[:4]) > 0)
        np.testing.assert_array_equal(C[3:], C[3])
        assert params.infection_rate == 0.0

    def test_trajectory_prefix_read_only(self, params):
        def vandal(par, t, traj, n):
            traj[n, 0] = -1.0

        with pytest.raises(ValueError):
            integrate(lambda t, traj, n, par: np.zeros(4), vandal, 0, 2, 1.0, X0, params)

    def test_no_feedback_means_no_change(self, deterministic, params):
        before = params.copy()
        integrate(SinglePopulationModel(deterministic, 1.0), None, 0, 10, 1.0, X0, params)
        assert params == before

    def test_error_aborts_run(self, params):
        def failing(t, traj, n, par):
            if n == 2:
                raise InvalidRate("negative")
            return np.zeros(4)

        with pytest.raises(InvalidRate):
            integrate(failing, None, 0, 10, 1.0, X0, params)


class TestPreconditions:

    def test_invalid_time_range(self, deterministic, params):
        with pytest.raises(InvalidTimeRange):
            integrate(SinglePopulationModel(deterministic, 1.0), None, 5, 0, 1.0, X0, params)

    def test_model_layout_mismatch(self, deterministic, params):
        model = SinglePopulationModel(deterministic, 1.0, track_cumulative=True)
        with pytest.raises(DimensionMismatch):
            integrate(model, None, 0, 5, 1.0, X0, params)

    def test_increment_shape_mismatch(self, params):
        with pytest.raises(DimensionMismatch):
            integrate(lambda t, traj, n, par: np.zeros(3), None, 0, 5, 1.0, X0, params)

    def test_two_dimensional_initial_state(self, deterministic, params):
        with pytest.raises(DimensionMismatch):
            integrate(SinglePopulationModel(deterministic, 1.0), None, 0, 5, 1.0,
                      np.zeros((2, 4)), params)

    def test_negative_initial_state(self, deterministic, params):
        with pytest.raises(InvalidState):
            integrate(SinglePopulationModel(deterministic, 1.0), None, 0, 5, 1.0,
                      [990.0, -1.0, 0.0, 0.0], params)

    def test_nan_initial_state(self, deterministic, params):
        with pytest.raises(InvalidState):
            integrate(SinglePopulationModel(deterministic, 1.0), None, 0, 5, 1.0,
                      [990.0, np.nan, 0.0, 0.0], params)

    def test_model_built_for_other_step(self, deterministic, params):
        # increments of a dt=0.1 model must not be laid on a dt=1 grid
        with pytest.raises(InvalidTimeRange):
            integrate(SinglePopulationModel(deterministic, 0.1), None, 0, 1, 1.0, X0, params)

    def test_feedback_built_for_other_step(self, deterministic, params):
        model = SinglePopulationModel(deterministic, 0.5, track_cumulative=True)
        policy = IncidenceDependentRecovery(dt=1.0)
        with pytest.raises(InvalidTimeRange):
            integrate(model, policy, 0, 5, 0.5, [990.0, 10.0, 0.0, 0.0, 0.0], params)

    def test_matching_steps_accepted(self, deterministic, params):
        dt = 1 / 400
        model = SinglePopulationModel(deterministic, dt, track_cumulative=True)
        F = integrate(model, IncidenceDependentRecovery(dt), 0, 0.01, dt,
                      [990.0, 10.0, 0.0, 0.0, 0.0], params)
        assert F.shape == (5, 5)


# ═══════════════════════════════════════════════════════════════════════
# TWO POPULATIONS
# ═══════════════════════════════════════════════════════════════════════

class TestTwoPopulationRuns:

    def test_no_mixing_decomposes_into_single_runs(self, deterministic, coupled):
        coupled.mixing = MixingParameterSet(0.0, 0.0)
        x1 = np.array([990.0, 10.0, 0.0, 0.0])
        x2 = np.array([395.0, 5.0, 0.0, 0.0])
        F = integrate(TwoPopulationModel(deterministic, 0.25), None, 0, 60, 0.25,
                      np.concatenate([x1, x2]), coupled)
        single = SinglePopulationModel(deterministic, 0.25)
        F1 = integrate(single, None, 0, 60, 0.25, x1, coupled.first.copy())
        F2 = integrate(single, None, 0, 60, 0.25, x2, coupled.second.copy())
        np.testing.assert_array_equal(F[:, :4], F1)
        np.testing.assert_array_equal(F[:, 4:], F2)

    def test_mixing_seeds_infection_in_clean_population(self, deterministic, coupled):
        x0 = np.array([990.0, 10.0, 0.0, 0.0, 400.0, 0.0, 0.0, 0.0])
        F = integrate(TwoPopulationModel(deterministic, 0.25), None, 0, 30, 0.25, x0, coupled)
        assert F[-1, 5] > 0

    def test_stochastic_coupled_reproducible_and_non_negative(self, coupled):
        x0 = np.array([990.0, 10.0, 0.0, 0.0, 400.0, 0.0, 0.0, 0.0])
        runs = [integrate(TwoPopulationModel(RateSampler(seed=8), 1.0), None, 0, 100, 1.0,
                          x0, coupled.copy()) for _ in range(2)]
        np.testing.assert_array_equal(runs[0], runs[1])
        assert np.all(runs[0] >= 0)
