"""Moment functions for integrating polynomials against the resolution kernels.

For ``E(z, x) = exp(z**2 - 2*z*x) * erfc(z - x)`` the raw moments

    I_n = int_{x1}^{x2} x**n E(z, x) dx

follow from ``E = (g - E') / (2z)`` with ``g = 2/sqrt(pi) * exp(-x**2)``,
i.e. ``I_n = (M_n + n*I_(n-1)) / (2z)``.  Unrolling the recursion gives the
decomposition of arXiv:1407.0748,

    I_n = sum_j C(n, j) * M_j(x1, x2; z) * K_(n-j)(z)

with

* ``K_n(z) = n! / (2z)**(n+1)``, built recursively as ``n/(2z) * K_(n-1)``;
* ``M_n(x1, x2; z) = [G_n(x) - x**n * E(z, x)]`` evaluated between the bounds,
  ``G_n`` the antiderivative of ``x**n * g``.

``z`` may be real (cosh/sinh kernels) or complex (cos/sin kernels); the same
functions serve both.
"""

from __future__ import annotations

import numpy as np

from ..convolution.faddeeva import exp_erfc, gauss_primitive

__all__ = ["K", "M", "raw_moment", "binomial"]

# 0! .. 3!, enough for cubic segments
FACTORIALS = (1, 1, 2, 6)


def binomial(n: int, k: int, factorials=FACTORIALS) -> float:
    return factorials[n] / (factorials[k] * factorials[n - k])


def K(z, n: int):
    """``K_n(z) = n! / (2z)**(n+1)``."""

    if n == 0:
        return 1.0 / (2.0 * z)
    return n / (2.0 * z) * K(z, n - 1)


def _M_point(x, z, n: int):
    x = np.asarray(x, dtype=float)
    return gauss_primitive(n, x) - x**n * exp_erfc(z, x)


def M(x1, x2, z, n: int):
    """``M_n(x1, x2; z)``: difference of ``G_n(x) - x**n E(z, x)`` between the bounds."""

    return _M_point(x2, z, n) - _M_point(x1, z, n)


def raw_moment(x1, x2, z, n: int, factorials=FACTORIALS):
    """``int_{x1}^{x2} x**n * E(z, x) dx`` for ``n <= 3``."""

    return sum(
        binomial(n, j, factorials) * M(x1, x2, z, j) * K(z, n - j) for j in range(n + 1)
    )
