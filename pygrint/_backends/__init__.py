"""
Backend selection and management.

Provides a unified interface to the matrix inversion engines used by the
fit driver.
"""

from typing import Union
import warnings

from .base import InverterBase, FitResult
from .._utils import FitConfigurationError

# Try importing Gauss-Jordan backend (always available)
try:
    from .cpu_gauss_jordan_backend import CPUGaussJordanBackend
    GAUSS_JORDAN_AVAILABLE = True
except ImportError:
    GAUSS_JORDAN_AVAILABLE = False
    warnings.warn("Gauss-Jordan backend unavailable - installation error!")

# Try importing LAPACK backend (needs SciPy)
try:
    from .cpu_lapack_backend import CPULapackBackend
    LAPACK_AVAILABLE = True
except ImportError:
    LAPACK_AVAILABLE = False


def get_backend(backend: Union[str, InverterBase] = 'auto') -> InverterBase:
    """
    Get matrix inversion backend.

    Parameters
    ----------
    backend : str or InverterBase
        Backend selection:
        - 'auto': Gauss-Jordan elimination (the default inverter)
        - 'gauss_jordan': Gauss-Jordan elimination with partial pivoting
        - 'lapack': SciPy LU inverse (cross-check)
        - an InverterBase instance is returned unchanged

    Returns
    -------
    InverterBase
        Backend instance

    Examples
    --------
    >>> backend = get_backend('auto')
    >>> backend = get_backend('lapack')
    """
    if isinstance(backend, InverterBase):
        return backend

    if backend in ('auto', 'gauss_jordan'):
        if not GAUSS_JORDAN_AVAILABLE:
            raise RuntimeError("Gauss-Jordan backend unavailable!")
        return CPUGaussJordanBackend()

    elif backend == 'lapack':
        if not LAPACK_AVAILABLE:
            raise RuntimeError(
                "LAPACK backend unavailable.\n"
                "Install: pip install scipy"
            )
        return CPULapackBackend()

    else:
        raise FitConfigurationError(
            f"Unknown backend: '{backend}'\n"
            f"Valid options: 'auto', 'gauss_jordan', 'lapack'"
        )


def list_available_backends() -> list:
    """List names of available backends."""
    backends = []
    if GAUSS_JORDAN_AVAILABLE:
        backends.append('gauss_jordan')
    if LAPACK_AVAILABLE:
        backends.append('lapack')
    return backends


def print_backend_info():
    """Print backend information (diagnostic)."""
    print("pygrint Backend Status")
    print("=" * 50)
    print(f"\nAvailable Backends:")
    print(f"  Gauss-Jordan (FP64): {'✓' if GAUSS_JORDAN_AVAILABLE else '✗'} - partial pivoting")
    print(f"  LAPACK (FP64):       {'✓' if LAPACK_AVAILABLE else '✗'} - LU inverse (SciPy)")

    print(f"\nDefault Backend:")
    backend = get_backend('auto')
    print(f"  {backend.name}")


__all__ = [
    'get_backend',
    'list_available_backends',
    'print_backend_info',
    'InverterBase',
    'FitResult',
    'GAUSS_JORDAN_AVAILABLE',
    'LAPACK_AVAILABLE',
]
