"""Time-dependent angular signal density for B_s -> J/psi K+ K-.

Implements the sum of Eq. (9) of arXiv:1906.08356v4,

    pdf(t, Omega) = sum_k N_k f_k(Omega) h_k(t)

    h_k(t) = 3/(4 pi) exp(-Gamma_s t) [a_k cosh(DeltaGamma t/2)
             + b_k sinh(DeltaGamma t/2) + CP (c_k cos(DeltaM t) + d_k sin(DeltaM t))]

with ``Gamma_s = Gamma_d + DeltaGamma_sd`` and ``CP = +1`` for B_s,
``-1`` for anti-B_s.  Optionally the time dependence is convolved with a
Gaussian resolution and multiplied by a cubic-spline efficiency; the analytic
normalisation always uses the matching closed form, so that the integral of
:meth:`SignalDensity.evaluate` over ``[lower, upper]`` equals
:meth:`SignalDensity.time_integral` to numerical precision.

The density never raises on bad parameter points: outside the physical
simplex (``A_par2 < 0``) it is zero, and a NaN result is logged with the full
parameter vector and returned unchanged.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..constants import GAMMA_D, N_ANGULAR_TERMS, TIME_FACTOR_NORM
from ..convolution import (
    convoluted_exp_sincos,
    convoluted_exp_sinhcosh,
    integrated_convoluted_exp_sincos,
    integrated_convoluted_exp_sinhcosh,
    integrated_exp_sincos,
    integrated_exp_sinhcosh,
)
from ..efficiency import CubicSpline
from .angular import AngularBasis, AngularBasisProvider
from .coefficients import CoefficientSnapshot
from .parameters import CPState, TimeResolution

logger = logging.getLogger(__name__)

__all__ = ["SignalDensity"]


def _as_output(values):
    values = np.asarray(values)
    if values.ndim == 0:
        return float(values)
    return values


class SignalDensity:
    """Unnormalised signal density and its analytic time integral.

    Parameters
    ----------
    cp : CPState
        Flavour of the decaying meson; selects the sign of the c_k, d_k terms.
    resolution : TimeResolution, optional
        Gaussian decay-time resolution.  Without it the ideal (unsmeared)
        time dependence is used.
    efficiency : CubicSpline, optional
        Decay-time efficiency multiplying the density.  Requires a
        resolution model, whose convolved kernels the spline integrals use.
    basis : AngularBasisProvider, optional
        Angular functions; defaults to :class:`AngularBasis`.
    gamma_d : float
        B0 width added to ``DeltaGamma_sd`` to obtain ``Gamma_s``.
    """

    def __init__(
        self,
        cp: CPState = CPState.PARTICLE,
        *,
        resolution: Optional[TimeResolution] = None,
        efficiency: Optional[CubicSpline] = None,
        basis: Optional[AngularBasisProvider] = None,
        gamma_d: float = GAMMA_D,
    ):
        if efficiency is not None and resolution is None:
            raise ValueError("an efficiency spline requires a time resolution model")
        self.cp = CPState.from_config(cp)
        self.resolution = resolution
        self.efficiency = efficiency
        self.basis = basis if basis is not None else AngularBasis()
        self.gamma_d = float(gamma_d)

    def __repr__(self) -> str:
        return (
            f"SignalDensity(cp={self.cp.name}, resolution={self.resolution!r}, "
            f"efficiency={self.efficiency!r})"
        )

    # ------------------------------------------------------------------
    # time dependence
    # ------------------------------------------------------------------
    def rates(self, snapshot: CoefficientSnapshot) -> tuple[float, float, float]:
        """``(Gamma_s, DeltaGamma/2, DeltaM)`` for the snapshot."""

        p = snapshot.parameters
        return self.gamma_d + p.DeltaGamma_sd, 0.5 * p.DeltaGamma, p.DeltaM

    def _kernels(self, snapshot: CoefficientSnapshot, t):
        gamma, half_dg, dm = self.rates(snapshot)
        t = np.asarray(t, dtype=float)

        if self.resolution is None:
            decay = np.exp(-gamma * t)
            kernels = (
                decay * np.cosh(half_dg * t),
                decay * np.sinh(half_dg * t),
                decay * np.cos(dm * t),
                decay * np.sin(dm * t),
            )
        else:
            mu, sigma = self.resolution.mu, self.resolution.sigma
            kernels = (
                convoluted_exp_sinhcosh(t, gamma, half_dg, mu, sigma, 1),
                convoluted_exp_sinhcosh(t, gamma, half_dg, mu, sigma, -1),
                convoluted_exp_sincos(t, gamma, dm, mu, sigma, 1),
                convoluted_exp_sincos(t, gamma, dm, mu, sigma, -1),
            )

        if self.efficiency is not None:
            eff = self.efficiency(t)
            kernels = tuple(k * eff for k in kernels)
        return kernels

    def _integrated_kernels(self, snapshot: CoefficientSnapshot, lower, upper):
        gamma, half_dg, dm = self.rates(snapshot)

        if self.resolution is None:
            return (
                integrated_exp_sinhcosh(gamma, half_dg, lower, upper, 1),
                integrated_exp_sinhcosh(gamma, half_dg, lower, upper, -1),
                integrated_exp_sincos(gamma, dm, lower, upper, 1),
                integrated_exp_sincos(gamma, dm, lower, upper, -1),
            )

        mu, sigma = self.resolution.mu, self.resolution.sigma
        if self.efficiency is None:
            return (
                integrated_convoluted_exp_sinhcosh(gamma, half_dg, mu, sigma, lower, upper, 1),
                integrated_convoluted_exp_sinhcosh(gamma, half_dg, mu, sigma, lower, upper, -1),
                integrated_convoluted_exp_sincos(gamma, dm, mu, sigma, lower, upper, 1),
                integrated_convoluted_exp_sincos(gamma, dm, mu, sigma, lower, upper, -1),
            )

        spline = self.efficiency
        return (
            spline.integrate_times_convolved_exp_sinhcosh(gamma, half_dg, mu, sigma, lower, upper, 1),
            spline.integrate_times_convolved_exp_sinhcosh(gamma, half_dg, mu, sigma, lower, upper, -1),
            spline.integrate_times_convolved_exp_sincos(gamma, dm, mu, sigma, lower, upper, 1),
            spline.integrate_times_convolved_exp_sincos(gamma, dm, mu, sigma, lower, upper, -1),
        )

    @staticmethod
    def _combine(snapshot: CoefficientSnapshot, kernels):
        ch, sh, c, s = kernels
        outer = np.multiply.outer
        even = TIME_FACTOR_NORM * (outer(snapshot.A, ch) + outer(snapshot.B, sh))
        odd = TIME_FACTOR_NORM * (outer(snapshot.C, c) + outer(snapshot.D, s))
        return even, odd

    def even_odd_time_factors(self, snapshot: CoefficientSnapshot, t):
        """Split h_k(t) into the a_k, b_k part and the c_k, d_k part.

        Both arrays have shape ``(10,) + shape(t)``; the time factor of the
        configured flavour is ``even + cp.sign * odd``.
        """

        return self._combine(snapshot, self._kernels(snapshot, t))

    def time_factors(self, snapshot: CoefficientSnapshot, t) -> np.ndarray:
        """The ten time factors h_k(t), shape ``(10,) + shape(t)``."""

        even, odd = self.even_odd_time_factors(snapshot, t)
        return even + self.cp.sign * odd

    def integrated_time_factors(self, snapshot: CoefficientSnapshot, lower, upper) -> np.ndarray:
        """Integrals of the ten time factors over ``[lower, upper]``."""

        even, odd = self._combine(snapshot, self._integrated_kernels(snapshot, lower, upper))
        return even + self.cp.sign * odd

    # ------------------------------------------------------------------
    # density
    # ------------------------------------------------------------------
    def _angular(self, cos_theta_h, cos_theta_l, phi) -> np.ndarray:
        F = np.asarray(self.basis.evaluate(cos_theta_h, cos_theta_l, phi), dtype=float)
        if F.shape[0] != N_ANGULAR_TERMS:
            raise ValueError(
                f"angular basis returned {F.shape[0]} terms, expected {N_ANGULAR_TERMS}"
            )
        return F

    def evaluate(self, snapshot: CoefficientSnapshot, time, cos_theta_h, cos_theta_l, phi):
        """Unnormalised density at the given observables (scalars or arrays)."""

        time, cos_theta_h, cos_theta_l, phi = np.broadcast_arrays(
            *(np.asarray(v, dtype=float) for v in (time, cos_theta_h, cos_theta_l, phi))
        )
        if not snapshot.is_physical:
            return _as_output(np.zeros(time.shape))

        F = self._angular(cos_theta_h, cos_theta_l, phi)
        h = self.time_factors(snapshot, time)
        pdf = np.tensordot(snapshot.N, F * h, axes=1)

        n_nan = int(np.count_nonzero(np.isnan(pdf)))
        if n_nan:
            logger.warning(
                "signal density is NaN for %d event(s) with parameters: %s",
                n_nan,
                snapshot.parameters.describe(),
            )

        # negative values only come from rounding in the cancellations
        pdf = np.where(pdf < 0.0, 0.0, pdf)
        return _as_output(pdf)

    __call__ = evaluate

    # ------------------------------------------------------------------
    # normalisation
    # ------------------------------------------------------------------
    def time_integral(
        self, snapshot: CoefficientSnapshot, lower, upper, cos_theta_h, cos_theta_l, phi
    ):
        """Integral of :meth:`evaluate` over ``t`` in ``[lower, upper]`` at fixed angles."""

        cos_theta_h, cos_theta_l, phi = np.broadcast_arrays(
            *(np.asarray(v, dtype=float) for v in (cos_theta_h, cos_theta_l, phi))
        )
        if not snapshot.is_physical:
            return _as_output(np.zeros(phi.shape))

        F = self._angular(cos_theta_h, cos_theta_l, phi)
        H = self.integrated_time_factors(snapshot, lower, upper)
        H = H.reshape(H.shape + (1,) * (F.ndim - 1))
        return _as_output(np.tensordot(snapshot.N, F * H, axes=1))

    def integrate(self, snapshot: CoefficientSnapshot, lower, upper) -> float:
        """Integral over ``t`` in ``[lower, upper]`` and the full angular domain."""

        if not snapshot.is_physical:
            return 0.0

        F_int = np.asarray(self.basis.integrals(), dtype=float)
        H = self.integrated_time_factors(snapshot, lower, upper)
        return float(np.sum(snapshot.N * F_int * H))
