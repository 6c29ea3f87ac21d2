"""Tests for sirsim.integrator and sirsim.solvers: trajectories, validation and failures."""

import warnings

import numpy as np
import pandas as pd
import pytest

from sirsim.errors import ConfigurationError, NumericalFailure, SimulationWarning
from sirsim.integrator import Trajectory, check_trajectory, integrate
from sirsim.model import CompartmentState, Parameters
from sirsim.solvers import RK4Solver, ScipySolver, Tolerances, get_solver


# ═══════════════════════════════════════════════════════════════════════
# REFERENCE OUTBREAK (R0 = 3)
# ═══════════════════════════════════════════════════════════════════════

class TestReferenceOutbreak:

    @pytest.fixture
    def traj(self, seed, params, days):
        return integrate(seed, params, days)

    def test_one_entry_per_grid_point(self, traj, days):
        assert len(traj) == len(days)
        np.testing.assert_array_equal(traj.t, days)

    def test_starts_at_initial_state(self, traj, seed):
        t0, s0 = traj[0]
        assert t0 == 0.0
        assert s0.S == pytest.approx(seed.S)
        assert s0.I == pytest.approx(seed.I)
        assert s0.R == pytest.approx(seed.R)

    def test_conservation(self, traj):
        np.testing.assert_allclose(traj.totals, 10_000, rtol=1e-6)

    def test_susceptible_non_increasing(self, traj):
        assert np.all(np.diff(traj.S) <= 1e-9)

    def test_non_negative(self, traj):
        eps = 1e-6
        assert traj.S.min() >= -eps and traj.I.min() >= -eps and traj.R.min() >= -eps

    def test_epidemic_takes_off_then_declines(self, traj):
        peak = int(np.argmax(traj.I))
        assert traj.I[peak] > traj.I[0]
        assert traj.I[-1] < traj.I[peak]
        assert traj.S[-1] < traj.S[0]

    def test_deterministic(self, traj, seed, params, days):
        again = integrate(seed, params, days)
        np.testing.assert_array_equal(traj.S, again.S)
        np.testing.assert_array_equal(traj.I, again.I)
        np.testing.assert_array_equal(traj.R, again.R)

    def test_no_simulation_warnings(self, seed, params, days):
        with warnings.catch_warnings():
            warnings.simplefilter("error", SimulationWarning)
            integrate(seed, params, days)

    def test_non_uniform_grid(self, seed, params):
        t = np.array([0.0, 0.5, 3.0, 17.25, 60.0])
        traj = integrate(seed, params, t)
        np.testing.assert_array_equal(traj.t, t)
        np.testing.assert_allclose(traj.totals, 10_000, rtol=1e-6)


class TestSubThreshold:

    def test_infected_non_increasing(self, seed, days):
        traj = integrate(seed, Parameters(N=10_000, beta=0.05, gamma=0.1), days)
        assert np.all(np.diff(traj.I) <= 1e-9)
        assert traj.I[0] == pytest.approx(10.0)

    def test_reproduction_number_one(self, seed, days):
        traj = integrate(seed, Parameters(N=10_000, beta=0.1, gamma=0.1), days)
        assert np.all(np.diff(traj.I) <= 1e-9)

    def test_no_transmission(self, seed, days):
        traj = integrate(seed, Parameters(N=10_000, beta=0.0, gamma=0.1), days)
        np.testing.assert_allclose(traj.S, seed.S)
        assert traj.I[-1] == pytest.approx(10 * np.exp(-0.1 * 100), rel=1e-2)


# ═══════════════════════════════════════════════════════════════════════
# SOLVERS
# ═══════════════════════════════════════════════════════════════════════

class TestSolvers:

    @pytest.fixture
    def rk45(self, seed, params, days):
        return integrate(seed, params, days)

    def test_default_is_rk45(self):
        solver = get_solver()
        assert isinstance(solver, ScipySolver) and solver.method == "RK45"

    def test_get_solver_by_name(self):
        assert isinstance(get_solver("RK4"), RK4Solver)
        assert get_solver("DOP853").method == "DOP853"
        custom = RK4Solver(substeps=4)
        assert get_solver(custom) is custom

    def test_unknown_method(self):
        with pytest.raises(ConfigurationError):
            ScipySolver(method="Euler")

    @pytest.mark.parametrize("max_step", [0.0, -1.0])
    def test_non_positive_max_step(self, max_step):
        with pytest.raises(ConfigurationError, match="max_step"):
            ScipySolver(max_step=max_step)

    def test_max_step_bounds_internal_steps(self, rk45, seed, params, days):
        traj = integrate(seed, params, days, solver=ScipySolver(max_step=0.5))
        np.testing.assert_allclose(traj.I, rk45.I, rtol=1e-3, atol=1e-2)
        np.testing.assert_allclose(traj.totals, 10_000, rtol=1e-6)

    def test_fixed_step_rk4_agrees(self, rk45, seed, params, days):
        rk4 = integrate(seed, params, days, solver=RK4Solver(substeps=2))
        np.testing.assert_allclose(rk4.I, rk45.I, rtol=1e-3, atol=1e-2)
        np.testing.assert_allclose(rk4.totals, 10_000, rtol=1e-9)

    @pytest.mark.parametrize("method", ["DOP853", "LSODA", "Radau"])
    def test_other_adaptive_methods_agree(self, rk45, seed, params, days, method):
        traj = integrate(seed, params, days, solver=method,
                         tolerances=Tolerances(rtol=1e-8, atol=1e-8))
        assert traj.I.max() == pytest.approx(rk45.I.max(), rel=1e-3)

    def test_tighter_tolerances_converge(self, rk45, seed, params, days):
        tight = integrate(seed, params, days, tolerances=Tolerances(rtol=1e-10, atol=1e-10))
        np.testing.assert_allclose(rk45.I, tight.I, rtol=1e-3, atol=1e-3)


# ═══════════════════════════════════════════════════════════════════════
# FAILURES
# ═══════════════════════════════════════════════════════════════════════

class TestNumericalFailure:

    def test_evaluation_budget_exhausted(self, seed, params, days):
        with pytest.raises(NumericalFailure, match="evaluated more than"):
            integrate(seed, params, days, tolerances=Tolerances(max_evaluations=10))

    def test_rk4_budget_exhausted(self, seed, params, days):
        with pytest.raises(NumericalFailure):
            integrate(seed, params, days, solver="RK4", tolerances=Tolerances(max_evaluations=8))

    def test_nan_derivative_adaptive(self):
        t = np.linspace(0.0, 1.0, 5)
        with pytest.raises(NumericalFailure):
            ScipySolver().solve(lambda t, y: np.full(3, np.nan), np.ones(3), t,
                                Tolerances(max_evaluations=1000))

    def test_nan_derivative_fixed_step(self):
        t = np.linspace(0.0, 1.0, 5)
        with pytest.raises(NumericalFailure, match="non-finite"):
            RK4Solver().solve(lambda t, y: np.full(3, np.nan), np.ones(3), t, Tolerances())

    def test_overflow_fixed_step(self):
        t = np.linspace(0.0, 10.0, 11)
        with pytest.raises(NumericalFailure):
            RK4Solver().solve(lambda t, y: y ** 2, np.full(3, 1e100), t, Tolerances())


class TestConfigurationError:

    @pytest.mark.parametrize("grid", [
        [0.0],
        [],
        [0.0, 0.0, 1.0],
        [0.0, 2.0, 1.0],
        [0.0, np.inf],
        [[0.0, 1.0], [2.0, 3.0]],
    ])
    def test_bad_time_grid(self, seed, params, grid):
        with pytest.raises(ConfigurationError):
            integrate(seed, params, grid)

    def test_bad_parameters(self, seed, days):
        with pytest.raises(ConfigurationError):
            integrate(seed, Parameters(N=10_000, beta=-0.3, gamma=0.1), days)

    def test_zero_population(self, days):
        with pytest.raises(ConfigurationError):
            integrate(CompartmentState(0, 0, 0), Parameters(N=0, beta=0.3, gamma=0.1), days)

    def test_initial_state_not_summing_to_N(self, params, days):
        with pytest.raises(ConfigurationError, match="sum to"):
            integrate(CompartmentState(9000, 10, 0), params, days)

    def test_negative_initial_compartment(self, params, days):
        with pytest.raises(ConfigurationError):
            integrate(CompartmentState(10_010, -10, 0), params, days)

    @pytest.mark.parametrize("tol", [
        Tolerances(rtol=0.0),
        Tolerances(atol=-1.0),
        Tolerances(max_evaluations=0),
    ])
    def test_bad_tolerances(self, seed, params, days, tol):
        with pytest.raises(ConfigurationError):
            integrate(seed, params, days, tolerances=tol)


# ═══════════════════════════════════════════════════════════════════════
# TRAJECTORY RECORD
# ═══════════════════════════════════════════════════════════════════════

class TestTrajectory:

    @pytest.fixture
    def traj(self):
        return Trajectory(t=[0, 1, 2], S=[90, 80, 75], I=[10, 15, 12], R=[0, 5, 13])

    def test_arrays_read_only(self, traj):
        with pytest.raises(ValueError):
            traj.I[0] = 99.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            Trajectory(t=[0, 1], S=[1], I=[1, 1], R=[1, 1])

    def test_iteration_yields_states(self, traj):
        entries = list(traj)
        assert entries[1] == (1.0, CompartmentState(80, 15, 5))

    def test_incidence(self, traj):
        np.testing.assert_array_equal(traj.incidence, [0.0, 10.0, 5.0])

    def test_to_frame(self, traj):
        df = traj.to_frame()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["t", "S", "I", "R", "incidence"]
        assert len(df) == 3

    def test_check_passes(self, traj):
        assert check_trajectory(traj, 100.0)

    def test_check_warns_on_drift(self, traj):
        with pytest.warns(SimulationWarning, match="drifted"):
            assert not check_trajectory(traj, 110.0)

    def test_check_warns_on_negative(self):
        traj = Trajectory(t=[0, 1], S=[90, 101], I=[10, -1], R=[0, 0])
        with pytest.warns(SimulationWarning, match="below zero"):
            assert not check_trajectory(traj, 100.0)

    def test_warning_points_at_caller(self, traj):
        with pytest.warns(SimulationWarning) as record:
            check_trajectory(traj, 110.0)
        assert record[0].filename == __file__


class _DriftingSolver:
    """Returns a constant state whose total is off by 1%"""

    def solve(self, fun, y0, t_eval, tolerances):
        y = np.tile(np.asarray(y0, dtype=float), (len(t_eval), 1))
        y[:, 0] *= 1.01
        return y


class TestIntegrateWarnings:

    def test_drift_warning_points_at_integrate_caller(self, seed, params, days):
        with pytest.warns(SimulationWarning, match="drifted") as record:
            integrate(seed, params, days, solver=_DriftingSolver())
        assert record[0].filename == __file__
