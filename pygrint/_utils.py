"""
Utility functions.
"""

import numpy as np


class FitConfigurationError(ValueError):
    """Fit called with inputs that make the problem ill-defined."""


def check_vector(y, name='y', dtype=np.float64):
    """Validate vector input."""
    y = np.asarray(y, dtype=dtype)
    if y.ndim != 1:
        raise FitConfigurationError(f"{name} must be 1-dimensional")
    if not np.all(np.isfinite(y)):
        raise FitConfigurationError(f"{name} contains NaN or Inf")
    return y


def check_coefficients(c, nterms, dtype=np.float64):
    """Validate a coefficient vector of fixed length."""
    c = check_vector(c, name='c', dtype=dtype)
    if c.shape[0] != nterms:
        raise FitConfigurationError(
            f"Coefficient vector must have {nterms} entries, got {c.shape[0]}"
        )
    return c


def check_square(a, dtype=np.float64):
    """Validate square matrix input."""
    a = np.asarray(a, dtype=dtype)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"Array not square: shape {a.shape}")
    return a
