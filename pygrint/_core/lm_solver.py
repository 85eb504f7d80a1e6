"""
Levenberg-Marquardt solver for the double-tanh profile.

Damped Gauss-Newton iteration in the form given by Bevington's CURFIT:
the curvature matrix is normalized by its diagonal, the damping factor is
added on the diagonal, and lambda moves by a factor of ten depending on
whether the step lowered the reduced chi-square.
"""

import logging
import sys
import numpy as np
from dataclasses import dataclass
from typing import Optional, TextIO

from .model import NTERMS, func, func_derivs
from .._utils import FitConfigurationError, check_vector, check_coefficients

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitOptions:
    """
    Per-call fit configuration.

    Attributes
    ----------
    tol : float
        Fractional reduced chi-square change below which an accepted step
        ends the fit successfully
    lambda_start : float
        Initial damping factor
    lambda_factor : float
        Factor lambda is divided by after an accepted step and multiplied
        by after a rejected one
    lambda_fail : float
        A rejected step with lambda above this value ends the fit as failed
    max_iter : int or None
        Optional bound on attempted steps; reaching it counts as failure
    trace : bool
        Write per-iteration diagnostics to ``sink``
    sink : text stream or None
        Trace destination (stdout when None)
    """
    tol: float = 1e-6
    lambda_start: float = 1e-3
    lambda_factor: float = 10.0
    lambda_fail: float = 0.9
    max_iter: Optional[int] = None
    trace: bool = False
    sink: Optional[TextIO] = None


def _curvature(x, y, yfit, c):
    """Gradient vector beta and curvature matrix alpha at c."""
    d = func_derivs(x, c)          # (n, NTERMS)
    beta = d.T @ (y - yfit)
    alpha = d.T @ d
    return alpha, beta


def _write_header(out):
    cols = ''.join(f"{'c' + str(t):>12}{'sigma(c' + str(t) + ')':>12}"
                   for t in range(1, NTERMS + 1))
    out.write(f"{'Iter':>5}{cols}{'Red chisq':>12}{'change':>12}{'lambda':>12}\n")


def _write_row(out, iteration, c, sigma, chisq_red, change=None, lam=None):
    line = f"{iteration:5d}"
    for t in range(NTERMS):
        line += f"{c[t]:12.6f}"
        line += f"{sigma[t]:12.6f}" if sigma is not None else " " * 12
    line += f"{chisq_red:12.2e}"
    if change is not None:
        line += f"{change:12.2e}{lam:12.2e}"
    out.write(line + "\n")


def fit(x, y, c, options: Optional[FitOptions] = None, backend=None):
    """
    Fit the double-tanh profile to (x, y) by Levenberg-Marquardt.

    Parameters
    ----------
    x : array_like, shape (n,)
        Abscissae
    y : array_like, shape (n,)
        Ordinates
    c : array_like, shape (5,)
        Initial coefficients. A list or writable ndarray is overwritten
        with the best accepted coefficients on return, whether or not the
        fit converged.
    options : FitOptions, optional
        Tolerances, damping schedule and trace settings
    backend : str or InverterBase, optional
        Matrix inverter (Gauss-Jordan by default)

    Returns
    -------
    result : FitResult
        ``result.fail`` is True when damping was exhausted without finding
        an improving step (or ``max_iter`` was reached).

    Raises
    ------
    FitConfigurationError
        Length mismatch between x and y, n <= 5, or a malformed c.
    """
    from .._backends import get_backend, FitResult

    opts = options if options is not None else FitOptions()

    x = check_vector(x, name='x')
    y = check_vector(y, name='y')
    npts = x.shape[0]
    if y.shape[0] != npts:
        raise FitConfigurationError(
            f"Array dimensioning error: len(x)={npts}, len(y)={y.shape[0]}"
        )

    nfree = npts - NTERMS
    if nfree <= 0:
        raise FitConfigurationError(
            f"Too few degrees of freedom: {npts} points, {NTERMS} coefficients, "
            f"{nfree} free"
        )

    c_in = c
    c = check_coefficients(c, NTERMS).copy()
    inverter = get_backend('auto' if backend is None else backend)

    out = None
    if opts.trace:
        out = opts.sink if opts.sink is not None else sys.stdout

    yfit = func(x, c)
    chisq_red = float(np.sum((y - yfit) ** 2)) / nfree
    # Below this the residuals are rounding noise in y
    chisq_floor = (64.0 * np.finfo(np.float64).eps * float(np.max(np.abs(y)))) ** 2

    history = [chisq_red]
    sigma = np.full(NTERMS, np.nan)
    lam = opts.lambda_start
    iteration = 0
    fail = False

    if out is not None:
        _write_header(out)
        _write_row(out, iteration, c, None, chisq_red)

    alpha, beta = _curvature(x, y, yfit, c)

    while True:
        if opts.max_iter is not None and iteration >= opts.max_iter:
            logger.debug("Iteration bound %d reached", opts.max_iter)
            fail = True
            break

        iteration += 1

        with np.errstate(invalid='ignore', divide='ignore'):
            diag = np.diag(alpha)
            scale = np.sqrt(np.outer(diag, diag))
            array = alpha / scale
            np.fill_diagonal(array, 1.0 + lam)
            array = inverter.invert(array)
            sigma_step = np.sqrt(np.diag(array) / diag)

            if chisq_red <= chisq_floor:
                # Only reachable for an exact initial guess
                sigma = sigma_step
                logger.debug("Exact fit at iteration %d (chisq_red=%.3e)", iteration, chisq_red)
                if out is not None:
                    _write_row(out, iteration, c, sigma, chisq_red)
                    out.write("*** EXACT FIT ***\n")
                break

            c_new = c + (array / scale) @ beta
            yfit_new = func(x, c_new)
            chisq_new = float(np.sum((y - yfit_new) ** 2)) / nfree
            change = (chisq_red - chisq_new) / chisq_red

        if change > 0.0:
            c = c_new
            yfit = yfit_new
            chisq_red = chisq_new
            history.append(chisq_red)
            sigma = sigma_step
            logger.debug("Iteration %d accepted: chisq_red=%.6e change=%.3e lambda=%.1e",
                         iteration, chisq_red, change, lam)

            if out is not None:
                _write_row(out, iteration, c, sigma, chisq_red, change, lam)

            if chisq_red <= chisq_floor:
                logger.debug("Exact fit at iteration %d (chisq_red=%.3e)", iteration, chisq_red)
                if out is not None:
                    out.write("*** EXACT FIT ***\n")
                break

            if change < opts.tol:
                break

            lam /= opts.lambda_factor
            alpha, beta = _curvature(x, y, yfit, c)

        else:
            logger.debug("Iteration %d rejected: chisq_red=%.6e lambda=%.1e",
                         iteration, chisq_new, lam)

            if lam > opts.lambda_fail:
                fail = True
                break

            lam *= opts.lambda_factor

    if fail:
        logger.debug("Fit not converged after %d iterations", iteration)
        if out is not None:
            out.write("*** NOT CONVERGED ***\n")

    if isinstance(c_in, np.ndarray) and c_in.flags.writeable:
        c_in[:] = c
    elif isinstance(c_in, list):
        c_in[:] = c.tolist()

    return FitResult(
        coef=c,
        sigma=sigma,
        chisq_red=chisq_red,
        fail=fail,
        iterations=iteration,
        lambda_final=lam,
        n_obs=npts,
        df_residual=nfree,
        fitted_values=yfit,
        residuals=y - yfit,
        history=history,
    )
