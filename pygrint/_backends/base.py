"""
Abstract base classes for backends.

Defines the interface all backends must implement.
"""

from abc import ABC, abstractmethod
import numpy as np
from dataclasses import dataclass, field
from typing import List


@dataclass
class FitResult:
    """Complete profile fit results."""
    coef: np.ndarray              # Best accepted coefficients
    sigma: np.ndarray             # Standard errors from last accepted step (NaN if none)
    chisq_red: float              # Reduced chi-square at coef
    fail: bool                    # Damping exhausted (or iteration bound hit)
    iterations: int               # Inversions performed: accepted and rejected steps, plus
                                  # the exact-start check when the initial guess is exact
    lambda_final: float           # Damping factor on exit
    n_obs: int
    df_residual: int
    fitted_values: np.ndarray
    residuals: np.ndarray
    history: List[float] = field(default_factory=list)  # chisq_red, start + accepted steps

    @property
    def converged(self) -> bool:
        return not self.fail

    @property
    def n_accepted(self) -> int:
        """Number of accepted steps."""
        return len(self.history) - 1


class InverterBase(ABC):
    """Abstract base class for all matrix inversion backends."""

    @abstractmethod
    def invert(self, a: np.ndarray) -> np.ndarray:
        """
        Invert a square matrix.

        Parameters
        ----------
        a : ndarray, shape (n, n)
            Matrix to invert (left untouched)

        Returns
        -------
        ndarray, shape (n, n)
            Inverse of ``a``
        """
        pass

    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass


class CPUBackend(InverterBase):
    """CPU backend base class (always FP64)."""
    pass
