"""
Interface profile fitting with a summary-table interface.

This is the user-facing API for fitting measured profiles.
"""

import warnings
import numpy as np
import pandas as pd
from typing import Optional, Union

from ._core import NTERMS, COEF_NAMES, FitOptions, fit, func


class TanhProfileFit:
    """
    Fit a double-tanh interface profile.

    Wraps the Levenberg-Marquardt kernel with named coefficients, fitted
    values and a printed summary.

    Examples
    --------
    >>> import pandas as pd
    >>> from pygrint import profile_fit
    >>>
    >>> data = pd.read_csv('density_profile.csv')
    >>> model = profile_fit(x='z', y='density', data=data,
    ...                     c0=[-10.0, 10.0, 1.0, 0.0, 0.8])
    >>> model.summary()
    >>> model.coef          # Named coefficients
    >>> model.predict([0.0, 12.0])
    """

    def __init__(
        self,
        x: Union[str, np.ndarray],
        y: Union[str, np.ndarray],
        c0,
        data: Optional[pd.DataFrame] = None,
        options: Optional[FitOptions] = None,
        backend='auto',
    ):
        """
        Fit the profile.

        Parameters
        ----------
        x : str or array
            Abscissae
            - If string: column name in data
            - If array: numeric values
        y : str or array
            Ordinates, as for ``x``
        c0 : array_like, shape (5,)
            Initial guess (x1, x2, width, outer, inner); not modified
        data : DataFrame, optional
            Dataset containing the x and y columns
        options : FitOptions, optional
            Tolerances, damping schedule and trace settings
        backend : str or InverterBase
            Matrix inverter: 'auto', 'gauss_jordan', 'lapack'
        """
        if isinstance(x, str):
            if data is None:
                raise ValueError("Must provide data when x is a string")
            self.x_values = data[x].values
            self.x_name = x
        else:
            self.x_values = np.asarray(x)
            self.x_name = 'x'

        if isinstance(y, str):
            if data is None:
                raise ValueError("Must provide data when y is a string")
            self.y_values = data[y].values
            self.y_name = y
        else:
            self.y_values = np.asarray(y)
            self.y_name = 'y'

        self.c0 = np.array(c0, dtype=np.float64)
        self.options = options if options is not None else FitOptions()

        self._result = fit(
            self.x_values,
            self.y_values,
            self.c0.copy(),
            options=self.options,
            backend=backend,
        )

        result = self._result
        self.coefficients = result.coef
        self.sigma = result.sigma
        self.fitted_values = result.fitted_values
        self.residuals = result.residuals
        self.chisq_red = result.chisq_red
        self.n_obs = result.n_obs
        self.df_residual = result.df_residual
        self.iterations = result.iterations
        self.fail = result.fail
        self.converged = result.converged

        if self.fail:
            warnings.warn(
                f"Profile fit did not converge after {self.iterations} iterations; "
                f"returning last accepted coefficients",
                RuntimeWarning,
            )

    @property
    def coef(self):
        """Named coefficients (pandas Series)."""
        return pd.Series(self.coefficients, index=list(COEF_NAMES))

    @property
    def history(self):
        """Reduced chi-square of the initial guess and of each accepted step."""
        return list(self._result.history)

    def predict(self, newdata: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """
        Evaluate the fitted profile at new abscissae.

        Parameters
        ----------
        newdata : DataFrame or array
            - If DataFrame: must have a column named like the fitted x
            - If array: abscissa values

        Returns
        -------
        array
            Profile values
        """
        if isinstance(newdata, pd.DataFrame):
            x_new = newdata[self.x_name].values
        else:
            x_new = np.asarray(newdata, dtype=np.float64)

        return func(x_new, self.coefficients)

    def summary(self):
        """Print summary of fit results."""
        print()
        print("=" * 60)
        print("INTERFACE PROFILE FIT RESULTS")
        print("=" * 60)
        print()

        print(f"Dependent variable: {self.y_name}")
        print(f"Number of observations: {self.n_obs}")
        print(f"Degrees of freedom: {self.df_residual} (residual), {NTERMS} (model)")
        print()

        print("Coefficients:")
        print("-" * 60)
        print(f"{'Name':<12} {'Initial':>12} {'Estimate':>12} {'Std. Error':>12}")
        print("-" * 60)
        for i, name in enumerate(COEF_NAMES):
            print(f"{name:<12} {self.c0[i]:>12.6f} {self.coefficients[i]:>12.6f} "
                  f"{self.sigma[i]:>12.6f}")
        print("-" * 60)
        print()

        print(f"Reduced chi-square: {self.chisq_red:.4e}")
        print(f"Iterations:         {self.iterations}")
        print(f"Converged:          {'yes' if self.converged else 'NO'}")
        print("=" * 60)
        print()

    def __repr__(self):
        status = "converged" if self.converged else "failed"
        return f"TanhProfileFit(n={self.n_obs}, chisq_red={self.chisq_red:.3e}, {status})"


def profile_fit(x, y, c0, data=None, **kwargs):
    """
    Fit a double-tanh interface profile (convenience function).

    Parameters
    ----------
    x : str or array
        Abscissae
    y : str or array
        Ordinates
    c0 : array_like, shape (5,)
        Initial guess
    data : DataFrame, optional
        Dataset
    **kwargs
        Additional arguments passed to TanhProfileFit

    Returns
    -------
    TanhProfileFit
        Fitted model object
    """
    return TanhProfileFit(x, y, c0, data=data, **kwargs)
