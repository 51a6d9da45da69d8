# constants.py
"""Shared physics and numerical constants for the signal model."""

import math

# Normalisation of the time factors h_k(t), f = 3/(4*pi)
# (arXiv:1906.08356, Eq. (9)).
TIME_FACTOR_NORM = 3.0 / (4.0 * math.pi)

# B0 decay width in ps^-1.  The model fits DeltaGamma_sd = Gamma_s - Gamma_d,
# so the B_s width entering the exponential is GAMMA_D + DeltaGamma_sd
# (arXiv:1906.08356, Eq. (10)).
GAMMA_D = 0.65789

# Value returned by the efficiency spline past the point where its linear
# extrapolation turns negative.  Zero would be the physical choice but a small
# positive number keeps the likelihood finite for the minimiser.
SPLINE_NEGATIVE_FLOOR = 1e-3

# Power-basis spline coefficients smaller than this are rounded to zero.
SPLINE_COEFF_THRESHOLD = 1e-9

SQRT2 = math.sqrt(2.0)
SQRT_PI = math.sqrt(math.pi)

# Number of terms in the angular expansion of the decay rate.
N_ANGULAR_TERMS = 10

# Field order of the 17 model parameters.  This order is the contract with
# any external fit driver and must never change.
PARAMETER_NAMES = (
    "A_02",
    "A_perp2",
    "A_S2",
    "DeltaGamma_sd",
    "DeltaGamma",
    "DeltaM",
    "phi_0",
    "phi_par0",
    "phi_perp0",
    "phi_S0",
    "lambda_0",
    "lambda_par0",
    "lambda_perp0",
    "lambda_S0",
    "delta_par0",
    "delta_perp0",
    "delta_Sperp",
)

N_PARAMETERS = len(PARAMETER_NAMES)

__all__ = [
    "TIME_FACTOR_NORM",
    "GAMMA_D",
    "SPLINE_NEGATIVE_FLOOR",
    "SPLINE_COEFF_THRESHOLD",
    "SQRT2",
    "SQRT_PI",
    "N_ANGULAR_TERMS",
    "PARAMETER_NAMES",
    "N_PARAMETERS",
]
