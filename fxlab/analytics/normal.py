"""
Standard normal distribution functions.

The CDF uses the Abramowitz & Stegun 26.2.17 polynomial approximation
(absolute error below 7.5e-8) so results do not depend on an erf
implementation. Both functions take a float or a numpy array.
"""

from typing import Union
import numpy as np

ArrayLike = Union[float, np.ndarray]

_P = 0.2316419
_B1 = 0.319381530
_B2 = -0.356563782
_B3 = 1.781477937
_B4 = -1.821255978
_B5 = 1.330274429

_INV_SQRT_2PI = 1.0 / np.sqrt(2.0 * np.pi)

# Beyond this the CDF is 0 or 1 to double precision
_CUTOFF = 10.0


def _as_output(values: np.ndarray) -> ArrayLike:
    """Return a float for 0-d input, the array otherwise."""
    if values.ndim == 0:
        return float(values)
    return values


def norm_pdf(x: ArrayLike) -> ArrayLike:
    """
    Standard normal probability density.

    Args:
        x: Point or array of points

    Returns:
        Density at x (float for scalar input)
    """
    x = np.asarray(x, dtype=float)
    return _as_output(_INV_SQRT_2PI * np.exp(-0.5 * x * x))


def norm_cdf(x: ArrayLike) -> ArrayLike:
    """
    Standard normal cumulative distribution.

    Preconditions:
        - x is a real number or an array of real numbers

    Postconditions:
        - Result lies in [0, 1]
        - norm_cdf(-x) + norm_cdf(x) == 1 up to float rounding
        - x < -10 gives exactly 0, x > 10 gives exactly 1

    Args:
        x: Point or array of points

    Returns:
        P(Z <= x) (float for scalar input)
    """
    x = np.asarray(x, dtype=float)
    z = np.minimum(np.abs(x), _CUTOFF)

    t = 1.0 / (1.0 + _P * z)
    poly = t * (_B1 + t * (_B2 + t * (_B3 + t * (_B4 + t * _B5))))
    upper_tail = _INV_SQRT_2PI * np.exp(-0.5 * z * z) * poly

    cdf = np.where(x >= 0, 1.0 - upper_tail, upper_tail)
    cdf = np.where(x < -_CUTOFF, 0.0, cdf)
    cdf = np.where(x > _CUTOFF, 1.0, cdf)

    return _as_output(cdf)
