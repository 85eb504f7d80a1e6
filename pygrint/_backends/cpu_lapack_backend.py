"""
CPU backend using SciPy (LAPACK getrf/getri).

Cross-check for the Gauss-Jordan inverter.
"""

import numpy as np
from scipy.linalg import inv

from .base import CPUBackend
from .._utils import check_square


class CPULapackBackend(CPUBackend):
    """LU-based inverse from SciPy, FP64."""

    def __init__(self):
        self.name = "lapack"
        self.precision = "fp64"

    def invert(self, a: np.ndarray) -> np.ndarray:
        a = check_square(a)
        return inv(a, overwrite_a=False, check_finite=True)

    def get_device_info(self) -> dict:
        """Get backend information."""
        import scipy
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'method': 'lapack',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
