"""Four-momenta and the helicity angles of a four-body decay.

The angle formulas follow the EvtGen conventions (``EvtKine``).  All
functions accept either scalar four-momenta or four-momenta whose components
are equally shaped numpy arrays holding one entry per event, so whole
datasets can be processed in a single call.

Degenerate inputs are not trapped: a vanishing denominator yields ``nan``
(or ``inf``) and the caller decides how to treat the event.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

__all__ = ["FourMomentum", "cos_decay_angle", "phi_plane_angle"]

ArrayLike = Union[float, np.ndarray]


@dataclass(frozen=True)
class FourMomentum:
    """Immutable four-momentum ``(E, px, py, pz)``."""

    e: ArrayLike
    px: ArrayLike
    py: ArrayLike
    pz: ArrayLike

    @classmethod
    def from_mass(cls, mass, px, py, pz) -> "FourMomentum":
        """Build an on-shell four-momentum from its mass and 3-momentum."""

        px, py, pz = (np.asarray(v, dtype=float) for v in (px, py, pz))
        e = np.sqrt(np.asarray(mass, dtype=float) ** 2 + px * px + py * py + pz * pz)
        return cls(e, px, py, pz)

    def __add__(self, other: "FourMomentum") -> "FourMomentum":
        return FourMomentum(
            self.e + other.e, self.px + other.px, self.py + other.py, self.pz + other.pz
        )

    def __sub__(self, other: "FourMomentum") -> "FourMomentum":
        return FourMomentum(
            self.e - other.e, self.px - other.px, self.py - other.py, self.pz - other.pz
        )

    def scale(self, factor) -> "FourMomentum":
        return FourMomentum(
            factor * self.e, factor * self.px, factor * self.py, factor * self.pz
        )

    def __mul__(self, other):
        # p * q is the Minkowski product, p * 2.0 scales the components.
        if isinstance(other, FourMomentum):
            return self.minkowski(other)
        return self.scale(other)

    def __rmul__(self, other):
        return self.scale(other)

    def __truediv__(self, factor) -> "FourMomentum":
        return self.scale(1.0 / np.asarray(factor, dtype=float))

    def minkowski(self, other: "FourMomentum"):
        """Minkowski product with metric (+, -, -, -)."""

        return self.e * other.e - self.dot(other)

    def dot(self, other: "FourMomentum"):
        """Product of the spatial components only."""

        return self.px * other.px + self.py * other.py + self.pz * other.pz

    def cross(self, other: "FourMomentum") -> "FourMomentum":
        """Spatial cross product; the energy component is zero."""

        return FourMomentum(
            np.zeros_like(np.asarray(self.e, dtype=float)),
            self.py * other.pz - self.pz * other.py,
            self.pz * other.px - self.px * other.pz,
            self.px * other.py - self.py * other.px,
        )

    def mass2(self):
        return self.minkowski(self)

    def mass(self):
        return np.sqrt(self.mass2())

    def p3mag(self):
        return np.sqrt(self.dot(self))

    def boost_to_rest_frame(self, frame: "FourMomentum") -> "FourMomentum":
        """Return this momentum as seen in the rest frame of ``frame``."""

        e_f = np.asarray(frame.e, dtype=float)
        bx, by, bz = frame.px / e_f, frame.py / e_f, frame.pz / e_f
        beta2 = bx * bx + by * by + bz * bz
        gamma = 1.0 / np.sqrt(1.0 - beta2)
        bp = bx * self.px + by * self.py + bz * self.pz

        with np.errstate(invalid="ignore", divide="ignore"):
            gamma2 = np.where(beta2 > 0.0, (gamma - 1.0) / beta2, 0.0)
        coeff = gamma2 * bp - gamma * self.e

        return FourMomentum(
            gamma * (self.e - bp),
            self.px + coeff * bx,
            self.py + coeff * by,
            self.pz + coeff * bz,
        )


def cos_decay_angle(p: FourMomentum, q: FourMomentum, d: FourMomentum):
    """Cosine of the helicity angle of ``d`` in the rest frame of ``q``.

    The angle is measured between the flight direction of the daughter ``d``
    in the rest frame of its parent ``q`` and the flight direction of ``q``
    in the rest frame of its own parent ``p`` (for example ``p = B_s``,
    ``q = J/psi``, ``d = mu+``).  It is computed from Lorentz invariants only,
    so no explicit boost is needed.
    """

    pd = p.minkowski(d)
    pq = p.minkowski(q)
    qd = q.minkowski(d)
    mp2 = p.mass2()
    mq2 = q.mass2()
    md2 = d.mass2()

    with np.errstate(invalid="ignore", divide="ignore"):
        return (pd * mq2 - pq * qd) / np.sqrt((pq * pq - mq2 * mp2) * (qd * qd - mq2 * md2))


def phi_plane_angle(
    d2: FourMomentum, d3: FourMomentum, h1: FourMomentum, h2: FourMomentum
):
    """Angle between the (d2, d3) and (h1, h2) decay planes, in ``[0, 2*pi)``.

    The angle is evaluated in the rest frame of ``d2 + d3 + h1 + h2``.  It is
    the azimuth of the projection of ``h1`` on the plane orthogonal to
    ``d2 + d3``, measured from the projection of ``d2``.  For
    ``B0 -> h+ h- mu+ mu-`` in the LHCb convention ``d2 = h-``, ``d3 = h+``,
    ``h1 = mu+`` and ``h2 = mu-``.
    """

    mother = d2 + d3 + h1 + h2
    d2 = d2.boost_to_rest_frame(mother)
    d3 = d3.boost_to_rest_frame(mother)
    h1 = h1.boost_to_rest_frame(mother)

    D = d2 + d3
    DD = D.dot(D)

    with np.errstate(invalid="ignore", divide="ignore"):
        d1_perp = d2 - D.scale(D.dot(d2) / DD)
        h1_perp = h1 - D.scale(D.dot(h1) / DD)

        # orthogonal to both D and d1_perp
        d1_prime = d1_perp.cross(D)

        d1_perp = d1_perp / d1_perp.p3mag()
        d1_prime = d1_prime / d1_prime.p3mag()

    cos_phi = d1_perp.dot(h1_perp)
    sin_phi = d1_prime.dot(h1_perp)

    phi = np.arctan2(sin_phi, cos_phi)
    return np.where(phi >= 0.0, phi, phi + 2.0 * np.pi)
