"""
Tests for profilehmm.core.logprob.
"""
import warnings

import pytest
import numpy as np

from profilehmm.core.logprob import LN_ONE, LN_ZERO, ln_add_exp, logsumexp, to_log


class TestConstants:
    def test_ln_zero_and_one(self):
        assert LN_ZERO == -np.inf
        assert LN_ONE == 0.0
        assert np.exp(LN_ZERO) == 0.0
        assert np.exp(LN_ONE) == 1.0


class TestLnAddExp:
    def test_basic(self):
        result = ln_add_exp(np.log(0.2), np.log(0.3))
        np.testing.assert_allclose(result, np.log(0.5), rtol=1e-12)

    def test_symmetric(self):
        assert ln_add_exp(-1.0, -4.0) == ln_add_exp(-4.0, -1.0)

    def test_ln_zero_is_identity(self):
        assert ln_add_exp(LN_ZERO, -2.5) == -2.5
        assert ln_add_exp(-2.5, LN_ZERO) == -2.5

    def test_both_ln_zero(self):
        assert ln_add_exp(LN_ZERO, LN_ZERO) == LN_ZERO

    def test_numerical_stability(self):
        """Values far below exp's underflow limit still merge correctly."""
        result = ln_add_exp(-1000.0, -1000.0)
        np.testing.assert_allclose(result, -1000.0 + np.log(2.0), rtol=1e-12)

        result = ln_add_exp(0.0, -1000.0)
        np.testing.assert_allclose(result, 0.0, atol=1e-12)


class TestLogsumexp:
    def test_basic(self):
        a = np.array([-1.0, -2.0, -3.0])
        expected = np.log(np.exp(-1) + np.exp(-2) + np.exp(-3))
        np.testing.assert_allclose(logsumexp(a), expected, rtol=1e-12)

    def test_axis(self):
        a = np.array([[-1.0, -2.0], [-3.0, -4.0]])
        result = logsumexp(a, axis=1)
        expected = np.array([
            np.log(np.exp(-1) + np.exp(-2)),
            np.log(np.exp(-3) + np.exp(-4)),
        ])
        assert result.shape == (2,)
        np.testing.assert_allclose(result, expected, rtol=1e-12)

    def test_all_ln_zero(self):
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            assert logsumexp(np.array([LN_ZERO, LN_ZERO])) == LN_ZERO

    def test_agrees_with_pairwise_merge(self):
        np.random.seed(0)
        a = np.random.uniform(-50, 0, size=20)
        acc = LN_ZERO
        for x in a:
            acc = ln_add_exp(acc, x)
        np.testing.assert_allclose(logsumexp(a), acc, rtol=1e-12)


class TestToLog:
    def test_zero_maps_to_ln_zero(self):
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            result = to_log([0.0, 1.0, 0.5])
        assert result[0] == LN_ZERO
        assert result[1] == LN_ONE
        np.testing.assert_allclose(result[2], np.log(0.5))

    @pytest.mark.parametrize('shape', [(3,), (2, 3)])
    def test_preserves_shape(self, shape):
        assert to_log(np.full(shape, 0.25)).shape == shape
