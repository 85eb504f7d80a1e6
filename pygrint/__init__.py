"""
pygrint: Levenberg-Marquardt fitting of double-tanh interface profiles.
"""

__version__ = "1.0.0"

# Import main user-facing API
from .profile import profile_fit, TanhProfileFit
from ._core import NTERMS, COEF_NAMES, FitOptions, fit, func, func_derivs, matinv
from ._backends.base import FitResult
from ._utils import FitConfigurationError

# Import backend utilities (for advanced users)
from ._backends import get_backend, list_available_backends

__all__ = [
    'profile_fit',
    'TanhProfileFit',
    'NTERMS',
    'COEF_NAMES',
    'FitOptions',
    'FitResult',
    'FitConfigurationError',
    'fit',
    'func',
    'func_derivs',
    'matinv',
    'get_backend',
    'list_available_backends',
]
