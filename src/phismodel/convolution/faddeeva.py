"""Overflow-safe products of exponentials and complementary error functions.

Every closed form in the resolution model is built from

    E(z, x) = exp(z**2 - 2*z*x) * erfc(z - x)

where ``x`` is a real rescaled time and ``z`` a real (hyperbolic kernels) or
complex (trigonometric kernels) rescaled rate.  Written naively the
exponential overflows while ``erfc`` underflows, so ``E`` is evaluated through
the Faddeeva function ``w(u) = exp(-u**2) * erfc(-i*u)``:

* ``Re(z - x) >= 0``:  ``E = exp(-x**2) * w(i*(z - x))``
* ``Re(z - x) < 0``:   ``E = 2*exp(z**2 - 2*z*x) - exp(-x**2) * w(-i*(z - x))``

On the real axis ``w(i*y)`` is ``erfcx(y)``.  The same code path serves both
real and complex rates.
"""

from __future__ import annotations

import numpy as np
from scipy import special

from ..constants import SQRT_PI

__all__ = ["scaled_erfc", "exp_erfc", "erf_primitive", "gauss_primitive"]


def scaled_erfc(y):
    """Return ``exp(y**2) * erfc(y)`` for real or complex ``y``."""

    y = np.asarray(y)
    if np.iscomplexobj(y):
        return special.wofz(1j * y)
    return special.erfcx(y)


def exp_erfc(z, x):
    """Return ``exp(z**2 - 2*z*x) * erfc(z - x)`` without spurious overflow.

    Parameters
    ----------
    z : float or complex
        Rescaled rate ``(a -/+ i*b) * sigma / sqrt(2)``.
    x : array-like
        Rescaled time ``(t - mu) / (sigma * sqrt(2))``.

    Returns
    -------
    numpy.ndarray
        Real array for real ``z``, complex array otherwise, shaped like ``x``.
    """

    x = np.asarray(x, dtype=float)
    y = z - x
    dtype = complex if np.iscomplexobj(y) else float
    y = np.asarray(y, dtype=dtype)
    out = np.empty_like(y)

    mask = np.real(y) >= 0.0
    gauss = np.asarray(np.exp(-x * x))

    out[mask] = gauss[mask] * scaled_erfc(y[mask])
    # For Re(z - x) < 0 use erfc(y) = 2 - erfc(-y); the first term carries the
    # physical exponential decay, the second is bounded by exp(-x**2).
    xm = x[~mask]
    out[~mask] = 2.0 * np.exp(z * z - 2.0 * z * xm) - gauss[~mask] * scaled_erfc(-y[~mask])

    if out.ndim == 0:
        return out[()]
    return out


def erf_primitive(z, x):
    """Return ``erf(x) - E(z, x)``.

    ``d/dx [erf(x) - E(z, x)] = 2*z*E(z, x)``, so the difference of this
    function between two bounds divided by ``2*z`` integrates ``E`` in ``x``.
    """

    x = np.asarray(x, dtype=float)
    return special.erf(x) - exp_erfc(z, x)


def gauss_primitive(n: int, x):
    """Antiderivative of ``x**n * 2/sqrt(pi) * exp(-x**2)``.

    ``G_0 = erf(x)``, ``G_1 = -exp(-x**2)/sqrt(pi)`` and for ``n >= 2``
    ``G_n = -x**(n-1) * exp(-x**2)/sqrt(pi) + (n-1)/2 * G_(n-2)``.
    """

    x = np.asarray(x, dtype=float)
    if n == 0:
        return special.erf(x)
    gauss = np.exp(-x * x) / SQRT_PI
    if n == 1:
        return -gauss
    return -(x ** (n - 1)) * gauss + 0.5 * (n - 1) * gauss_primitive(n - 2, x)
