"""Exponential decay kernels convolved with a Gaussian time resolution.

The kernels are ``exp(-a*t) * {cosh, sinh}(b*t)`` and
``exp(-a*t) * {cos, sin}(b*t)`` for ``t >= 0`` convolved with a Gaussian of
mean ``mu`` and width ``sigma`` (arXiv:1906.08356v4, appendix).  With
``x = (t - mu) / (sigma*sqrt(2))`` a single exponential term becomes
``0.5 * E(z, x)`` with ``E`` from :func:`~phismodel.convolution.faddeeva.exp_erfc`
and ``z = rate * sigma / sqrt(2)``.

``tag > 0`` selects cosh/cos and ``tag < 0`` selects sinh/sin.  The
integrated forms are exact definite integrals of the point forms over
``[lower, upper]``.

The unconvolved integrals used when no resolution model is configured live
here as well.
"""

from __future__ import annotations

import numpy as np

from ..constants import SQRT2
from .faddeeva import erf_primitive, exp_erfc

__all__ = [
    "convoluted_exp_sinhcosh",
    "convoluted_exp_sincos",
    "integrated_convoluted_exp_sinhcosh",
    "integrated_convoluted_exp_sincos",
    "integrated_exp_sinhcosh",
    "integrated_exp_sincos",
    "hyperbolic_rates",
    "tag_sign",
    "trigonometric_rates",
]


def tag_sign(tag: int) -> int:
    """``+1`` for cosh/cos (``tag > 0``), ``-1`` for sinh/sin (``tag < 0``)."""

    if tag == 0:
        raise ValueError("tag must be non-zero: >0 selects cosh/cos, <0 sinh/sin")
    return 1 if tag > 0 else -1


def hyperbolic_rates(a: float, b: float, sigma: float) -> tuple[float, float]:
    """Rescaled real rates ``z1 = (a-b)*sigma/sqrt2`` and ``z2 = (a+b)*sigma/sqrt2``."""

    return (a - b) * sigma / SQRT2, (a + b) * sigma / SQRT2


def trigonometric_rates(a: float, b: float, sigma: float) -> tuple[complex, complex]:
    """Rescaled complex rates ``z1,2 = (a -/+ i*b)*sigma/sqrt2``."""

    return complex(a * sigma / SQRT2, -b * sigma / SQRT2), complex(
        a * sigma / SQRT2, b * sigma / SQRT2
    )


def _combine_hyperbolic(v1, v2, sign: int):
    return v1 + v2 if sign > 0 else v1 - v2


def _combine_trigonometric(v1, v2, sign: int):
    if sign > 0:
        return np.real(v1 + v2)
    return np.real((v1 - v2) / 1j)


def convoluted_exp_sinhcosh(time, a: float, b: float, mu: float, sigma: float, tag: int):
    """Gaussian convolution of ``exp(-a*t)*cosh(b*t)`` (tag > 0) or ``sinh`` (tag < 0)."""

    sign = tag_sign(tag)
    x = (np.asarray(time, dtype=float) - mu) / (sigma * SQRT2)
    z1, z2 = hyperbolic_rates(a, b, sigma)
    return 0.25 * _combine_hyperbolic(exp_erfc(z1, x), exp_erfc(z2, x), sign)


def convoluted_exp_sincos(time, a: float, b: float, mu: float, sigma: float, tag: int):
    """Gaussian convolution of ``exp(-a*t)*cos(b*t)`` (tag > 0) or ``sin`` (tag < 0)."""

    sign = tag_sign(tag)
    x = (np.asarray(time, dtype=float) - mu) / (sigma * SQRT2)
    z1, z2 = trigonometric_rates(a, b, sigma)
    return 0.25 * _combine_trigonometric(exp_erfc(z1, x), exp_erfc(z2, x), sign)


def _integrated_term(z, x1, x2):
    # int_{x1}^{x2} E(z, x) dx = [erf(x) - E(z, x)] / (2z)
    return (erf_primitive(z, x2) - erf_primitive(z, x1)) / (2.0 * z)


def integrated_convoluted_exp_sinhcosh(
    a: float, b: float, mu: float, sigma: float, lower, upper, tag: int
):
    """Integral of :func:`convoluted_exp_sinhcosh` over ``[lower, upper]``."""

    sign = tag_sign(tag)
    x1 = (np.asarray(lower, dtype=float) - mu) / (sigma * SQRT2)
    x2 = (np.asarray(upper, dtype=float) - mu) / (sigma * SQRT2)
    z1, z2 = hyperbolic_rates(a, b, sigma)
    # dt = sigma*sqrt2 dx and each exponential carries 1/4
    scale = 0.25 * sigma * SQRT2
    return scale * _combine_hyperbolic(
        _integrated_term(z1, x1, x2), _integrated_term(z2, x1, x2), sign
    )


def integrated_convoluted_exp_sincos(
    a: float, b: float, mu: float, sigma: float, lower, upper, tag: int
):
    """Integral of :func:`convoluted_exp_sincos` over ``[lower, upper]``.

    The bounds must be finite.
    """

    sign = tag_sign(tag)
    x1 = (np.asarray(lower, dtype=float) - mu) / (sigma * SQRT2)
    x2 = (np.asarray(upper, dtype=float) - mu) / (sigma * SQRT2)
    z1, z2 = trigonometric_rates(a, b, sigma)
    scale = 0.25 * sigma * SQRT2
    return scale * _combine_trigonometric(
        _integrated_term(z1, x1, x2), _integrated_term(z2, x1, x2), sign
    )


def integrated_exp_sinhcosh(a: float, b: float, lower, upper, tag: int):
    """Exact integral of ``exp(-a*t)*cosh(b*t)`` (tag > 0) or ``sinh`` over ``[lower, upper]``.

    Requires ``|b| < a``.
    """

    sign = tag_sign(tag)

    def primitive(t):
        t = np.asarray(t, dtype=float)
        e = np.exp(-a * t)
        ch, sh = np.cosh(b * t), np.sinh(b * t)
        if sign > 0:
            return -e * (a * ch + b * sh) / (a * a - b * b)
        return -e * (a * sh + b * ch) / (a * a - b * b)

    return primitive(upper) - primitive(lower)


def integrated_exp_sincos(a: float, b: float, lower, upper, tag: int):
    """Exact integral of ``exp(-a*t)*cos(b*t)`` (tag > 0) or ``sin`` over ``[lower, upper]``."""

    sign = tag_sign(tag)

    def primitive(t):
        t = np.asarray(t, dtype=float)
        e = np.exp(-a * t)
        c, s = np.cos(b * t), np.sin(b * t)
        if sign > 0:
            return e * (b * s - a * c) / (a * a + b * b)
        return -e * (a * s + b * c) / (a * a + b * b)

    return primitive(upper) - primitive(lower)
