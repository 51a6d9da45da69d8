"""Decay-time and angular signal model for B_s -> J/psi K+ K-.

The public entry points are :class:`~phismodel.signal.SignalDensity` with
:func:`~phismodel.signal.derive_coefficients`, the resolution kernels in
:mod:`phismodel.convolution`, the spline efficiency in
:mod:`phismodel.efficiency` and the decay angles in
:mod:`phismodel.kinematics`.
"""

from .config import build_model, configure_logging, load_config
from .efficiency import CubicSpline
from .kinematics import FourMomentum, cos_decay_angle, phi_plane_angle
from .likelihood import nll_unbinned
from .signal import (
    CPState,
    CoefficientSnapshot,
    ModelParameters,
    SignalDensity,
    TimeResolution,
    derive_coefficients,
)

__version__ = "0.1.0"

__all__ = [
    "CPState",
    "CoefficientSnapshot",
    "CubicSpline",
    "FourMomentum",
    "ModelParameters",
    "SignalDensity",
    "TimeResolution",
    "build_model",
    "configure_logging",
    "cos_decay_angle",
    "derive_coefficients",
    "load_config",
    "nll_unbinned",
    "phi_plane_angle",
]
