"""
Log-probability primitives.

A probability p is stored as ln(p) in a float64. LN_ZERO (p = 0) is -inf and
LN_ONE (p = 1) is 0.0. Adding two log-probabilities multiplies the underlying
probabilities; ln_add_exp / logsumexp add them without leaving log space.
"""

from typing import Optional

import numpy as np
from numba import jit
from scipy.special import logsumexp as scipy_logsumexp


LN_ZERO = -np.inf
LN_ONE = 0.0


@jit(nopython=True, cache=False)
def ln_add_exp(a, b):
    """
    Stable ln(exp(a) + exp(b)).

    Compiled with Numba so the inference kernels can call it directly;
    it is equally callable from Python.
    """
    if a < b:
        a, b = b, a
    if b == -np.inf:
        return a
    return a + np.log1p(np.exp(b - a))


def logsumexp(a, axis: Optional[int] = None) -> np.ndarray:
    """Log-sum-exp of many log-probabilities. All-LN_ZERO input gives LN_ZERO."""
    with np.errstate(divide='ignore'):
        return scipy_logsumexp(a, axis=axis)


def to_log(p) -> np.ndarray:
    """Convert probabilities to log space (log(0) maps to LN_ZERO silently)."""
    with np.errstate(divide='ignore'):
        return np.log(np.asarray(p, dtype=np.float64))
