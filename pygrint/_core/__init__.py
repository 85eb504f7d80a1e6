"""
Core algorithms (backend-agnostic).
"""

from .model import NTERMS, COEF_NAMES, func, func_derivs
from .matinv import matinv
from .lm_solver import FitOptions, fit

__all__ = [
    "NTERMS",
    "COEF_NAMES",
    "func",
    "func_derivs",
    "matinv",
    "FitOptions",
    "fit",
]
