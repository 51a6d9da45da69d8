"""Cubic spline description of the decay-time efficiency.

The spline is specified by ``n`` knots and ``n + 2`` B-spline coefficients
(Simon Stemmle, PhD thesis, Heidelberg; arXiv:1407.0748).  At construction
the coefficients are converted once into the power basis, so that on
``[knot_i, knot_(i+1))`` the spline reads

    eff(t) = c0[i] + c1[i]*t + c2[i]*t**2 + c3[i]*t**3

Below the first knot the first polynomial is used.  After the last knot the
spline continues linearly with the slope it has there.  If that slope is
negative the line would eventually cross zero; beyond the crossing
:meth:`CubicSpline.evaluate` returns a small positive floor instead of a
negative efficiency.  The analytic integrals honour the floor exactly.

Knots must be strictly increasing and there must be ``len(knots) + 2``
coefficients.  These preconditions are not checked.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ..constants import SPLINE_COEFF_THRESHOLD, SPLINE_NEGATIVE_FLOOR, SQRT2
from ..convolution.kernels import hyperbolic_rates, tag_sign, trigonometric_rates
from .moments import FACTORIALS, binomial, raw_moment

logger = logging.getLogger(__name__)

__all__ = ["CubicSpline"]


class CubicSpline:
    """Piecewise-cubic efficiency with analytic convolution integrals.

    Parameters
    ----------
    knots : sequence of float
        Strictly increasing knot positions.
    coefficients : sequence of float
        ``len(knots) + 2`` B-spline coefficients.
    floor : float, optional
        Value returned where the linear extrapolation is negative.
    threshold : float, optional
        Power-basis coefficients of the cubic segments smaller than this in
        absolute value are set to zero.
    """

    def __init__(
        self,
        knots: Sequence[float],
        coefficients: Sequence[float],
        *,
        floor: float = SPLINE_NEGATIVE_FLOOR,
        threshold: float = SPLINE_COEFF_THRESHOLD,
    ):
        knots = np.array(knots, dtype=float)
        b = np.array(coefficients, dtype=float)
        n = knots.size

        self._knots = knots
        self._knots.setflags(write=False)
        self.floor = float(floor)
        self.threshold = float(threshold)
        self.factorials = FACTORIALS

        # knot vector with the end knots repeated three times
        u = np.concatenate([np.repeat(knots[0], 3), knots, np.repeat(knots[-1], 3)])

        AS = np.zeros((4, n))
        for i in range(n - 1):
            AS[:, i] = self._power_coefficients(u, b, i)
        AS[np.abs(AS) < self.threshold] = 0.0

        # after the last knot: linear extrapolation of the last cubic
        v = u[n + 2]
        c0, c1, c2, c3 = AS[:, n - 2]
        slope = c1 + 2 * c2 * v + 3 * c3 * v * v
        AS[1, n - 1] = slope
        AS[0, n - 1] = c0 + c1 * v + c2 * v * v + c3 * v * v * v - slope * v

        self._AS = AS
        self._AS.setflags(write=False)

        if slope < 0:
            self.negative_part = True
            self.x_negative = -AS[0, n - 1] / slope
            logger.debug(
                "efficiency spline turns negative at t=%.6g; using floor %.3g beyond",
                self.x_negative,
                self.floor,
            )
        else:
            self.negative_part = False
            self.x_negative = np.inf

    @staticmethod
    def _power_coefficients(u: np.ndarray, b: np.ndarray, i: int) -> np.ndarray:
        """Power-basis coefficients of segment ``i`` from four B-spline coefficients."""

        u1, u2, u3, u4, u5, u6 = u[i + 1 : i + 7]
        P = (u4 - u1) * (u4 - u2) * (u4 - u3)
        Q = (u5 - u2) * (u4 - u2) * (u4 - u3)
        R = (u5 - u3) * (u5 - u2) * (u4 - u3)
        S = (u6 - u3) * (u5 - u3) * (u4 - u3)

        a0 = (
            u4 * u4 * u4 / P,
            -u1 * u4 * u4 / P - u2 * u4 * u5 / Q - u3 * u5 * u5 / R,
            u2 * u2 * u4 / Q + u2 * u3 * u5 / R + u3 * u3 * u6 / S,
            -u3 * u3 * u3 / S,
        )
        a1 = (
            -3 * u4 * u4 / P,
            (2 * u1 * u4 + u4 * u4) / P
            + (u2 * u4 + u2 * u5 + u4 * u5) / Q
            + (2 * u3 * u5 + u5 * u5) / R,
            -(2 * u2 * u4 + u2 * u2) / Q
            - (u2 * u3 + u2 * u5 + u3 * u5) / R
            - (2 * u3 * u6 + u3 * u3) / S,
            3 * u3 * u3 / S,
        )
        a2 = (
            3 * u4 / P,
            -(2 * u4 + u1) / P - (u2 + u4 + u5) / Q - (2 * u5 + u3) / R,
            (2 * u2 + u4) / Q + (u2 + u5 + u3) / R + (2 * u3 + u6) / S,
            -3 * u3 / S,
        )
        a3 = (
            -1.0 / P,
            1.0 / P + 1.0 / Q + 1.0 / R,
            -1.0 / Q - 1.0 / R - 1.0 / S,
            1.0 / S,
        )

        bs = b[i : i + 4]
        return np.array([np.dot(bs, a) for a in (a0, a1, a2, a3)])

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    @property
    def knots(self) -> np.ndarray:
        return self._knots

    @property
    def n_knots(self) -> int:
        return self._knots.size

    @property
    def coefficients(self) -> np.ndarray:
        """Power-basis coefficients, shape ``(4, n_knots)``; row ``k`` multiplies ``t**k``."""

        return self._AS

    # ------------------------------------------------------------------
    # evaluation
    # ------------------------------------------------------------------
    def find_knot(self, x):
        """Index of the last knot ``<= x`` (0 below the first knot)."""

        idx = np.searchsorted(self._knots, np.asarray(x, dtype=float), side="right") - 1
        return np.clip(idx, 0, self.n_knots - 1)

    def segment_polynomial(self, j, x):
        """Evaluate the polynomial of segment ``j`` at ``x`` (no floor)."""

        x = np.asarray(x, dtype=float)
        c = self._AS[:, j]
        return c[0] + x * (c[1] + x * (c[2] + x * c[3]))

    def evaluate(self, x):
        """Efficiency at ``x`` with the negative-extrapolation floor applied."""

        x = np.asarray(x, dtype=float)
        value = self.segment_polynomial(self.find_knot(x), x)
        if self.negative_part:
            value = np.where(x > self.x_negative, self.floor, value)
        if value.ndim == 0:
            return float(value)
        return value

    __call__ = evaluate

    # ------------------------------------------------------------------
    # analytic integrals
    # ------------------------------------------------------------------
    def _pieces(self, lower: float, upper: float):
        """Yield ``(lo, hi, poly)`` covering ``[lower, upper]``.

        ``poly`` holds the four power-basis coefficients valid on the piece.
        """

        n = self.n_knots
        edges = [-np.inf, *self._knots[1:], np.inf]
        for j in range(n):
            lo, hi = max(lower, edges[j]), min(upper, edges[j + 1])
            if self.negative_part:
                hi = min(hi, self.x_negative)
            if hi > lo:
                yield lo, hi, self._AS[:, j]

        if self.negative_part:
            lo = max(lower, self.x_negative)
            if upper > lo:
                yield lo, upper, np.array([self.floor, 0.0, 0.0, 0.0])

    def _polynomial_times_kernel(self, poly, lo, hi, mu, sigma, z):
        """``int_lo^hi poly(t) * E(z, (t-mu)/(sigma*sqrt2)) dt``."""

        s = sigma * SQRT2
        x1 = (lo - mu) / s
        x2 = (hi - mu) / s
        moments = [raw_moment(x1, x2, z, n, self.factorials) for n in range(4)]

        total = 0.0
        for k in range(4):
            if poly[k] == 0.0:
                continue
            # t**k = sum_n C(k, n) s**n x**n mu**(k-n)
            t_k = sum(
                binomial(k, n, self.factorials) * s**n * mu ** (k - n) * moments[n]
                for n in range(k + 1)
            )
            total = total + poly[k] * t_k
        return s * total

    def _integrate(self, z1, z2, mu, sigma, lower, upper):
        I1 = I2 = 0.0
        for lo, hi, poly in self._pieces(float(lower), float(upper)):
            I1 = I1 + self._polynomial_times_kernel(poly, lo, hi, mu, sigma, z1)
            I2 = I2 + self._polynomial_times_kernel(poly, lo, hi, mu, sigma, z2)
        return I1, I2

    def integrate_times_convolved_exp_sinhcosh(
        self, a: float, b: float, mu: float, sigma: float, lower: float, upper: float, tag: int
    ) -> float:
        """``int eff(t) * convoluted_exp_sinhcosh(t, ...) dt`` over ``[lower, upper]``."""

        sign = tag_sign(tag)
        z1, z2 = hyperbolic_rates(a, b, sigma)
        I1, I2 = self._integrate(z1, z2, mu, sigma, lower, upper)
        return float(0.25 * (I1 + I2 if sign > 0 else I1 - I2))

    def integrate_times_convolved_exp_sincos(
        self, a: float, b: float, mu: float, sigma: float, lower: float, upper: float, tag: int
    ) -> float:
        """``int eff(t) * convoluted_exp_sincos(t, ...) dt`` over ``[lower, upper]``."""

        sign = tag_sign(tag)
        z1, z2 = trigonometric_rates(a, b, sigma)
        I1, I2 = self._integrate(z1, z2, mu, sigma, lower, upper)
        if sign > 0:
            return float(0.25 * np.real(I1 + I2))
        return float(0.25 * np.real((I1 - I2) / 1j))

    def __repr__(self) -> str:
        return f"CubicSpline(knots={self._knots.tolist()}, negative_part={self.negative_part})"
