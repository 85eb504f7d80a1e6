"""
Test the Levenberg-Marquardt profile fit.
"""

import io

import pytest
import numpy as np

from pygrint import fit, func, FitOptions, FitConfigurationError, NTERMS
from pygrint._backends import InverterBase


C_TRUE = np.array([-1.0, 1.0, 0.5, 0.0, 1.0])
C_START = (-1.5, 1.5, 1.0, -0.1, 1.1)


class UphillInverter(InverterBase):
    """Returns a scaled, sign-flipped inverse so every step makes things worse."""

    def __init__(self):
        self.name = "uphill"
        self.calls = 0

    def invert(self, a):
        self.calls += 1
        return -1e3 * np.linalg.inv(a)

    def get_device_info(self):
        return {'backend': 'test'}


class CountingInverter(InverterBase):
    def __init__(self):
        self.name = "counting"
        self.calls = 0

    def invert(self, a):
        self.calls += 1
        return np.linalg.inv(a)

    def get_device_info(self):
        return {'backend': 'test'}


@pytest.fixture
def exact_data():
    x = np.arange(-5.0, 6.0)
    return x, func(x, C_TRUE)


@pytest.fixture
def noisy_data():
    rng = np.random.default_rng(42)
    x = np.linspace(-5.0, 5.0, 41)
    y = func(x, C_TRUE) + 0.01 * rng.standard_normal(x.shape)
    return x, y


class TestConvergence:

    def test_reference_scenario(self, exact_data):
        """11 exact points, starting guess off in every coefficient."""
        x, y = exact_data
        c = list(C_START)

        result = fit(x, y, c)

        assert result.fail is False
        assert result.converged
        np.testing.assert_allclose(result.coef, C_TRUE, atol=1e-3)
        np.testing.assert_allclose(c, result.coef)
        assert result.n_accepted <= 10

    def test_exact_start(self, exact_data):
        x, y = exact_data
        c = C_TRUE.copy()

        result = fit(x, y, c)

        assert not result.fail
        assert result.iterations <= 2
        np.testing.assert_allclose(c, C_TRUE, rtol=1e-12, atol=1e-12)
        assert np.all(np.isfinite(result.sigma))
        assert result.chisq_red == 0.0

    def test_noisy_data(self, noisy_data):
        x, y = noisy_data

        result = fit(x, y, np.array(C_START))

        assert not result.fail
        np.testing.assert_allclose(result.coef, C_TRUE, atol=0.05)
        # Reduced chi-square near the noise variance
        assert 0.3e-4 < result.chisq_red < 3e-4

    def test_accepted_steps_monotonic(self, noisy_data):
        x, y = noisy_data

        result = fit(x, y, np.array(C_START))

        history = np.array(result.history)
        assert len(history) >= 2
        assert np.all(np.diff(history) < 0)
        assert history[-1] == result.chisq_red

    def test_result_fields(self, noisy_data):
        x, y = noisy_data

        result = fit(x, y, C_START)

        assert result.n_obs == 41
        assert result.df_residual == 41 - NTERMS
        np.testing.assert_allclose(result.fitted_values, func(x, result.coef))
        np.testing.assert_allclose(result.residuals, y - result.fitted_values)
        assert result.sigma.shape == (NTERMS,)
        assert np.all(result.sigma > 0)

    def test_lapack_backend_agrees(self, noisy_data):
        x, y = noisy_data

        gj = fit(x, y, C_START, backend='gauss_jordan')
        lp = fit(x, y, C_START, backend='lapack')

        np.testing.assert_allclose(gj.coef, lp.coef, atol=1e-6)


class TestInPlaceUpdate:

    def test_ndarray_updated(self, noisy_data):
        x, y = noisy_data
        c = np.array(C_START)

        result = fit(x, y, c)

        np.testing.assert_array_equal(c, result.coef)

    def test_list_updated(self, noisy_data):
        x, y = noisy_data
        c = list(C_START)

        result = fit(x, y, c)

        assert c == result.coef.tolist()
        assert c != list(C_START)
        assert C_START == (-1.5, 1.5, 1.0, -0.1, 1.1)

    def test_tuple_left_alone(self, noisy_data):
        x, y = noisy_data
        c = tuple(C_START)

        result = fit(x, y, c)

        assert c == tuple(C_START)
        assert not result.fail

    def test_result_is_a_copy(self, noisy_data):
        x, y = noisy_data
        c = np.array(C_START)

        result = fit(x, y, c)
        c[0] = 99.0

        assert result.coef[0] != 99.0


class TestFailure:

    def test_damping_exhaustion(self, noisy_data):
        """Every candidate worse: fail, and coefficients never move."""
        x, y = noisy_data
        c = C_TRUE.copy()
        inverter = UphillInverter()

        result = fit(x, y, c, backend=inverter)

        assert result.fail is True
        assert not result.converged
        np.testing.assert_array_equal(c, C_TRUE)
        np.testing.assert_array_equal(result.coef, C_TRUE)
        assert len(result.history) == 1
        assert np.all(np.isnan(result.sigma))
        # lambda: 1e-3, 1e-2, 1e-1, 1 -> fail on the fourth rejection
        assert result.iterations == 4
        assert inverter.calls == 4
        assert result.lambda_final > 0.9

    def test_lambda_fail_tunable(self, noisy_data):
        x, y = noisy_data

        result = fit(x, y, C_TRUE.copy(), FitOptions(lambda_fail=0.05),
                     backend=UphillInverter())

        assert result.fail
        assert result.iterations == 3

    def test_iteration_bound(self, exact_data):
        x, y = exact_data

        result = fit(x, y, list(C_START), FitOptions(max_iter=1))

        assert result.fail
        assert result.iterations == 1

    @pytest.mark.filterwarnings("error")
    def test_flat_start_is_quiet(self, exact_data):
        """c4 == c5 leaves alpha with zero diagonal entries: no numpy warnings."""
        x, y = exact_data
        c0 = np.array([-1.0, 1.0, 0.5, 0.3, 0.3])

        result = fit(x, y, c0.copy())

        assert result.fail
        np.testing.assert_array_equal(result.coef, c0)

    def test_iteration_bound_counts_attempted_steps(self, exact_data):
        x, y = exact_data

        free = fit(x, y, list(C_START))
        bounded = fit(x, y, list(C_START), FitOptions(max_iter=free.iterations))

        assert not bounded.fail
        np.testing.assert_array_equal(bounded.coef, free.coef)

    def test_unbounded_by_default(self):
        assert FitOptions().max_iter is None


class TestConfigurationErrors:

    def test_length_mismatch(self):
        with pytest.raises(FitConfigurationError, match="dimensioning"):
            fit(np.arange(10.0), np.arange(9.0), list(C_START))

    @pytest.mark.parametrize("npts", [0, 1, 5])
    def test_too_few_points(self, npts):
        inverter = CountingInverter()
        x = np.arange(float(npts))

        with pytest.raises(FitConfigurationError, match="degrees of freedom"):
            fit(x, x.copy(), list(C_START), backend=inverter)

        assert inverter.calls == 0

    def test_six_points_is_enough(self):
        x = np.linspace(-3, 3, 6)
        result = fit(x, func(x, C_TRUE), C_TRUE.copy())
        assert result.df_residual == 1

    def test_wrong_coefficient_count(self):
        x = np.arange(10.0)
        with pytest.raises(FitConfigurationError, match="5 entries"):
            fit(x, x, [1.0, 2.0, 3.0, 4.0])

    def test_non_finite_data(self):
        x = np.arange(10.0)
        y = x.copy()
        y[3] = np.nan
        with pytest.raises(FitConfigurationError, match="NaN"):
            fit(x, y, list(C_START))

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            fit(np.arange(3.0), np.arange(3.0), list(C_START))


class TestTrace:

    def test_off_by_default(self, exact_data, capsys):
        x, y = exact_data
        fit(x, y, list(C_START))
        assert capsys.readouterr().out == ""

    def test_trace_to_sink(self, exact_data):
        x, y = exact_data
        sink = io.StringIO()

        result = fit(x, y, list(C_START), FitOptions(trace=True, sink=sink))

        lines = sink.getvalue().splitlines()
        assert 'Red chisq' in lines[0]
        assert 'sigma(c5)' in lines[0]
        assert lines[1].split()[0] == '0'
        # header, initial row, one row per accepted step plus the exact-fit row
        assert len(lines) >= 2 + len(result.history) - 1
        assert 'NOT CONVERGED' not in sink.getvalue()

    def test_exit_on_accepted_step(self, exact_data):
        """Reaching the rounding floor ends the fit on the step that reached it."""
        x, y = exact_data
        sink = io.StringIO()

        result = fit(x, y, list(C_START), FitOptions(trace=True, sink=sink))

        lines = sink.getvalue().splitlines()
        assert lines[-1] == "*** EXACT FIT ***"
        last_row = lines[-2].split()
        assert int(last_row[0]) == result.iterations
        # accepted rows carry change and lambda
        assert len(last_row) == 1 + 2 * NTERMS + 3

    def test_exact_start_row(self, exact_data):
        x, y = exact_data
        sink = io.StringIO()

        fit(x, y, C_TRUE.copy(), FitOptions(trace=True, sink=sink))

        lines = sink.getvalue().splitlines()
        assert lines[-1] == "*** EXACT FIT ***"
        row = lines[-2].split()
        assert row[0] == "1"
        # no change or lambda columns
        assert len(row) == 1 + 2 * NTERMS + 1

    def test_trace_on_failure(self, noisy_data):
        x, y = noisy_data
        sink = io.StringIO()

        fit(x, y, C_TRUE.copy(), FitOptions(trace=True, sink=sink),
            backend=UphillInverter())

        assert sink.getvalue().splitlines()[-1] == '*** NOT CONVERGED ***'

    def test_trace_defaults_to_stdout(self, exact_data, capsys):
        x, y = exact_data
        fit(x, y, list(C_START), FitOptions(trace=True))
        assert 'Red chisq' in capsys.readouterr().out

    def test_trace_does_not_change_result(self, noisy_data):
        x, y = noisy_data

        quiet = fit(x, y, C_START)
        traced = fit(x, y, C_START, FitOptions(trace=True, sink=io.StringIO()))

        np.testing.assert_array_equal(quiet.coef, traced.coef)
        assert quiet.iterations == traced.iterations
