"""Resolution-convolved decay kernels and their closed-form integrals."""

from .faddeeva import erf_primitive, exp_erfc, gauss_primitive, scaled_erfc
from .kernels import (
    convoluted_exp_sincos,
    convoluted_exp_sinhcosh,
    hyperbolic_rates,
    integrated_convoluted_exp_sincos,
    integrated_convoluted_exp_sinhcosh,
    integrated_exp_sincos,
    integrated_exp_sinhcosh,
    tag_sign,
    trigonometric_rates,
)

__all__ = [
    "erf_primitive",
    "exp_erfc",
    "gauss_primitive",
    "scaled_erfc",
    "convoluted_exp_sincos",
    "convoluted_exp_sinhcosh",
    "hyperbolic_rates",
    "integrated_convoluted_exp_sincos",
    "integrated_convoluted_exp_sinhcosh",
    "integrated_exp_sincos",
    "integrated_exp_sinhcosh",
    "tag_sign",
    "trigonometric_rates",
]
