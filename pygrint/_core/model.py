"""
Double-tanh interface profile model.

    f(x) = c4 + (c5 - c4) * (tanh((x - c1)/c3) - tanh((x - c2)/c3)) / 2

c1, c2 are the interface positions, c3 the shared interface width,
c4 the level outside [c1, c2] and c5 the level between them.
"""

import numpy as np

NTERMS = 5
COEF_NAMES = ('x1', 'x2', 'width', 'outer', 'inner')


def _tanh_pair(x, c):
    t1 = np.tanh((x - c[0]) / c[2])
    t2 = np.tanh((x - c[1]) / c[2])
    return t1, t2


def func(x, c):
    """
    Evaluate the profile.

    Parameters
    ----------
    x : float or ndarray, shape (n,)
        Abscissa(e)
    c : array_like, shape (5,)
        Coefficients; c3 must be nonzero

    Returns
    -------
    f : float or ndarray, shape (n,)
    """
    x = np.asarray(x, dtype=np.float64)
    t1, t2 = _tanh_pair(x, c)
    return c[3] + 0.5 * (c[4] - c[3]) * (t1 - t2)


def func_derivs(x, c):
    """
    Analytic partial derivatives of ``func`` with respect to each coefficient.

    Returns
    -------
    d : ndarray, shape (5,) for scalar x, (n, 5) for x of shape (n,)
    """
    x = np.asarray(x, dtype=np.float64)
    t1, t2 = _tanh_pair(x, c)
    amp = 0.5 * (c[4] - c[3])
    s1 = t1 ** 2 - 1.0   # -sech^2
    s2 = 1.0 - t2 ** 2   # +sech^2

    d = np.stack([
        amp * s1 / c[2],
        amp * s2 / c[2],
        amp * ((x - c[0]) * s1 + (x - c[1]) * s2) / c[2] ** 2,
        1.0 - 0.5 * (t1 - t2),
        0.5 * (t1 - t2),
    ], axis=-1)
    return d


__all__ = ["NTERMS", "COEF_NAMES", "func", "func_derivs"]
