"""Time-dependent angular signal model."""

from .angular import AngularBasis, AngularBasisProvider
from .coefficients import (
    AngularTimeCoefficients,
    CoefficientSnapshot,
    derive_coefficients,
    polarization_factors,
)
from .density import SignalDensity
from .parameters import CPState, ModelParameters, TimeResolution

__all__ = [
    "AngularBasis",
    "AngularBasisProvider",
    "AngularTimeCoefficients",
    "CoefficientSnapshot",
    "CPState",
    "ModelParameters",
    "SignalDensity",
    "TimeResolution",
    "derive_coefficients",
    "polarization_factors",
]
