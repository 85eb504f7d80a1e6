"""
CPU backend: Gauss-Jordan elimination with partial pivoting.

This is the reference inverter used by the fit driver.
"""

import numpy as np
from typing import Tuple

from .base import CPUBackend
from .._utils import check_square


def gauss_jordan(a: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    In-place Gauss-Jordan sweep of ``a`` with row pivoting.

    Parameters
    ----------
    a : ndarray, shape (n, n)
        Working matrix, overwritten with the inverse of the row-permuted input

    Returns
    -------
    a : ndarray, shape (n, n)
        The swept working matrix
    pivot : ndarray of int, shape (n,)
        Original row index held in each working row (0-indexed)

    Notes
    -----
    At step k the row m >= k with the largest |a[m, k]| becomes the pivot
    row; ties keep the lowest index, so a row is only swapped in when it is
    strictly larger. A zero pivot is not guarded against.
    """
    n = a.shape[0]
    pivot = np.arange(n)

    for k in range(n):
        m = k + int(np.argmax(np.abs(a[k:, k])))

        if m != k:
            pivot[[m, k]] = pivot[[k, m]]
            a[[m, k], :] = a[[k, m], :]

        d = 1.0 / a[k, k]

        temp = a[:, k].copy()
        for j in range(n):
            c = a[k, j] * d
            a[:, j] -= temp * c
            a[k, j] = c
        a[:, k] = temp * (-d)
        a[k, k] = d

    return a, pivot


class CPUGaussJordanBackend(CPUBackend):
    """
    Pure NumPy Gauss-Jordan inverter.

    Always uses FP64 precision.
    """

    def __init__(self):
        self.name = "gauss_jordan"
        self.precision = "fp64"

    def invert(self, a: np.ndarray) -> np.ndarray:
        """
        Invert ``a`` by Gauss-Jordan elimination.

        Works on a copy; the swept matrix is scattered back to the original
        column order using the pivot record, ``result[:, pivot] = work``.
        """
        a = check_square(a)
        work, pivot = gauss_jordan(a.copy())

        result = np.empty_like(work)
        result[:, pivot] = work
        return result

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'method': 'gauss_jordan',
            'library': f'NumPy {np.__version__}',
        }
