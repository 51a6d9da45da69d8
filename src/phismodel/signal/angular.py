"""Angular functions of the B_s -> J/psi K+ K- decay rate.

The ten functions ``f_k(cos theta_h, cos theta_l, phi)`` of
arXiv:1906.08356v4, Table 3, in the helicity basis.  ``phi`` must follow the
``[0, 2*pi)`` convention of :func:`phismodel.kinematics.phi_plane_angle`.

Any object exposing ``evaluate(cos_theta_h, cos_theta_l, phi)`` returning
ten arrays and ``integrals()`` returning ten floats can be passed to
:class:`~phismodel.signal.density.SignalDensity` in place of
:class:`AngularBasis`.
"""

from __future__ import annotations

import math
from typing import Protocol, Sequence

import numpy as np

__all__ = ["AngularBasisProvider", "AngularBasis"]


class AngularBasisProvider(Protocol):
    def evaluate(self, cos_theta_h, cos_theta_l, phi) -> Sequence[np.ndarray]: ...

    def integrals(self) -> Sequence[float]: ...


_SQRT2 = math.sqrt(2.0)
_SQRT3 = math.sqrt(3.0)
_SQRT6 = math.sqrt(6.0)

# Integrals over cos(theta_h), cos(theta_l) in [-1, 1] and phi in [0, 2*pi).
# Interference terms vanish; the four squared terms give 16*pi/9 each.
_FULL_INTEGRALS = (
    16.0 * math.pi / 9.0,
    16.0 * math.pi / 9.0,
    16.0 * math.pi / 9.0,
    0.0,
    0.0,
    0.0,
    16.0 * math.pi / 9.0,
    0.0,
    0.0,
    0.0,
)


class AngularBasis:
    """Default angular basis (``k = 0..9`` maps to Table 3 ``k = 1..10``)."""

    def evaluate(self, cos_theta_h, cos_theta_l, phi):
        ch = np.asarray(cos_theta_h, dtype=float)
        cl = np.asarray(cos_theta_l, dtype=float)
        phi = np.asarray(phi, dtype=float)

        sh2 = 1.0 - ch * ch
        sl2 = 1.0 - cl * cl
        sh = np.sqrt(sh2)
        sl = np.sqrt(sl2)
        s2h = 2.0 * sh * ch
        s2l = 2.0 * sl * cl
        cphi = np.cos(phi)
        sphi = np.sin(phi)

        return (
            ch * ch * sl2,                                   # A_0^2
            0.5 * sh2 * (1.0 - sl2 * cphi * cphi),           # A_par^2
            0.5 * sh2 * (1.0 - sl2 * sphi * sphi),           # A_perp^2
            sh2 * sl2 * sphi * cphi,                         # A_perp A_par
            0.25 * _SQRT2 * s2h * s2l * cphi,                # A_0 A_par
            -0.25 * _SQRT2 * s2h * s2l * sphi,               # A_0 A_perp
            sl2 / 3.0,                                       # A_S^2
            _SQRT6 / 6.0 * sh * s2l * cphi,                  # A_S A_par
            -_SQRT6 / 6.0 * sh * s2l * sphi,                 # A_S A_perp
            2.0 * _SQRT3 / 3.0 * ch * sl2,                   # A_S A_0
        )

    def integrals(self):
        return _FULL_INTEGRALS
