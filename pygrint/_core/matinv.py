"""
Square matrix inversion.

Backend-agnostic interface to the inverter.
"""

import numpy as np


def matinv(a: np.ndarray, backend=None) -> np.ndarray:
    """
    Invert a square matrix.

    Delegates to backend-specific implementation.

    Parameters
    ----------
    a : ndarray, shape (n, n)
        Matrix to invert (not modified)
    backend : str or InverterBase, optional
        Computational backend (Gauss-Jordan by default)

    Returns
    -------
    ndarray, shape (n, n)
        Inverse of ``a``

    Raises
    ------
    ValueError
        If ``a`` is not square
    """
    from .._backends import get_backend
    backend = get_backend('auto' if backend is None else backend)

    return backend.invert(a)
