"""Derivation of the angular/time coefficients of the signal model.

:func:`derive_coefficients` turns a :class:`ModelParameters` value into an
immutable :class:`CoefficientSnapshot` holding

* ``A``, ``B``, ``C``, ``D``: the coefficients a_k, b_k, c_k, d_k of the
  cosh, sinh, cos and sin time dependence (arXiv:1906.08356v4, Table 3);
* ``N``: the polarisation factors N_k built from the amplitude fractions.

Conventions: ``delta_0 = 0``; ``lambda_i = lambda_0 * lambda_i0``;
``phi_i = phi_0 + phi_i0``; ``delta_S = delta_Sperp + delta_perp``.

When ``A_par2 = 1 - A_02 - A_perp2`` is negative the parameter point lies
outside the physical simplex.  ``N`` is then ``None`` and every density
built from the snapshot is zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .parameters import ModelParameters

__all__ = [
    "AngularTimeCoefficients",
    "CoefficientSnapshot",
    "derive_coefficients",
    "polarization_factors",
]


@dataclass(frozen=True)
class AngularTimeCoefficients:
    """a_k, b_k, c_k, d_k for the ten angular terms."""

    A: np.ndarray
    B: np.ndarray
    C: np.ndarray
    D: np.ndarray

    def __post_init__(self):
        for name in ("A", "B", "C", "D"):
            arr = np.array(getattr(self, name), dtype=float)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)


@dataclass(frozen=True)
class CoefficientSnapshot:
    """Everything the density needs for one parameter point."""

    parameters: ModelParameters
    coefficients: AngularTimeCoefficients
    N: Optional[np.ndarray]

    @property
    def A_par2(self) -> float:
        return self.parameters.A_par2

    @property
    def is_physical(self) -> bool:
        return self.N is not None

    @property
    def A(self) -> np.ndarray:
        return self.coefficients.A

    @property
    def B(self) -> np.ndarray:
        return self.coefficients.B

    @property
    def C(self) -> np.ndarray:
        return self.coefficients.C

    @property
    def D(self) -> np.ndarray:
        return self.coefficients.D


def _angular_time_coefficients(p: ModelParameters) -> AngularTimeCoefficients:
    l0 = p.lambda_0
    lpa = p.lambda_par0 * l0
    lpe = p.lambda_perp0 * l0
    lS = p.lambda_S0 * l0

    f0 = p.phi_0
    fpa = p.phi_par0 + f0
    fpe = p.phi_perp0 + f0
    fS = p.phi_S0 + f0

    d0 = 0.0
    dpa = p.delta_par0
    dpe = p.delta_perp0
    dS = p.delta_Sperp + dpe

    sin, cos = math.sin, math.cos

    A = (
        0.5 * (1 + l0 * l0),
        0.5 * (1 + lpa * lpa),
        0.5 * (1 + lpe * lpe),
        0.5 * (sin(dpe - dpa) - lpe * lpa * sin(dpe - dpa - fpe + fpa)),
        0.5 * (cos(d0 - dpa) + l0 * lpa * cos(d0 - dpa - f0 + fpa)),
        -0.5 * (sin(d0 - dpe) - l0 * lpe * sin(d0 - dpe - f0 + fpe)),
        0.5 * (1 + lS * lS),
        0.5 * (cos(dS - dpa) - lS * lpa * cos(dS - dpa - fS + fpa)),
        -0.5 * (sin(dS - dpe) + lS * lpe * sin(dS - dpe - fS + fpe)),
        0.5 * (cos(d0 - dS) - l0 * lS * cos(d0 - dS - f0 + fS)),
    )
    B = (
        -l0 * cos(f0),
        -lpa * cos(fpa),
        lpe * cos(fpe),
        0.5 * (lpe * sin(dpe - dpa - fpe) + lpa * sin(dpa - dpe - fpa)),
        -0.5 * (l0 * cos(d0 - dpa - f0) + lpa * cos(dpa - d0 - fpa)),
        0.5 * (l0 * sin(d0 - dpe - f0) + lpe * sin(dpe - d0 - fpe)),
        lS * cos(fS),
        0.5 * (lS * cos(dS - dpa - fS) - lpa * cos(dpa - dS - fpa)),
        -0.5 * (lS * sin(dS - dpe - fS) - lpe * sin(dpe - dS - fpe)),
        -0.5 * (l0 * cos(d0 - dS - f0) - lS * cos(dS - d0 - fS)),
    )
    C = (
        0.5 * (1 - l0 * l0),
        0.5 * (1 - lpa * lpa),
        0.5 * (1 - lpe * lpe),
        0.5 * (sin(dpe - dpa) + lpe * lpa * sin(dpe - dpa - fpe + fpa)),
        0.5 * (cos(d0 - dpa) - l0 * lpa * cos(d0 - dpa - f0 + fpa)),
        -0.5 * (sin(d0 - dpe) + l0 * lpe * sin(d0 - dpe - f0 + fpe)),
        0.5 * (1 - lS * lS),
        0.5 * (cos(dS - dpa) + lS * lpa * cos(dS - dpa - fS + fpa)),
        -0.5 * (sin(dS - dpe) - lS * lpe * sin(dS - dpe - fS + fpe)),
        0.5 * (cos(d0 - dS) + l0 * lS * cos(d0 - dS - f0 + fS)),
    )
    D = (
        l0 * sin(f0),
        lpa * sin(fpa),
        -lpe * sin(fpe),
        -0.5 * (lpe * cos(dpe - dpa - fpe) + lpa * cos(dpa - dpe - fpa)),
        -0.5 * (l0 * sin(d0 - dpa - f0) + lpa * sin(dpa - d0 - fpa)),
        -0.5 * (l0 * cos(d0 - dpe - f0) + lpe * cos(dpe - d0 - fpe)),
        -lS * sin(fS),
        0.5 * (lS * sin(dS - dpa - fS) - lpa * sin(dpa - dS - fpa)),
        0.5 * (lS * cos(dS - dpe - fS) - lpe * cos(dpe - dS - fpe)),
        -0.5 * (l0 * sin(d0 - dS - f0) - lS * sin(dS - d0 - fS)),
    )
    return AngularTimeCoefficients(A, B, C, D)


def polarization_factors(p: ModelParameters) -> Optional[np.ndarray]:
    """N_k from the amplitude fractions, or ``None`` when ``A_par2 < 0``."""

    A_02, A_perp2, A_S2 = p.A_02, p.A_perp2, p.A_S2
    A_par2 = p.A_par2
    if A_par2 < 0:
        return None

    # negative fractions give nan here, reported by the density NaN check
    with np.errstate(invalid="ignore"):
        N = np.array(
            [
                A_02,                        # A_0 * A_0
                A_par2,                      # A_par * A_par
                A_perp2,                     # A_perp * A_perp
                np.sqrt(A_perp2 * A_par2),   # A_perp * A_par
                np.sqrt(A_02 * A_par2),      # A_0 * A_par
                np.sqrt(A_02 * A_perp2),     # A_0 * A_perp
                A_S2,                        # A_S * A_S
                np.sqrt(A_S2 * A_par2),      # A_S * A_par
                np.sqrt(A_S2 * A_perp2),     # A_S * A_perp
                np.sqrt(A_S2 * A_02),        # A_S * A_0
            ]
        )
    N.setflags(write=False)
    return N


def derive_coefficients(parameters: ModelParameters) -> CoefficientSnapshot:
    """Pure derivation of the coefficient snapshot for ``parameters``."""

    return CoefficientSnapshot(
        parameters=parameters,
        coefficients=_angular_time_coefficients(parameters),
        N=polarization_factors(parameters),
    )
