"""Unbinned negative log-likelihood of the signal density.

For events ``x_i`` in the time window ``domain = (t_min, t_max)``

    NLL = -sum_i ln( pdf(x_i) / norm )

with ``norm`` the analytic integral of the density over the window and the
full angular range.  Parameter points that give a non-positive or
non-finite normalisation, or a non-positive density for any event, return
``inf`` so that a minimiser steps away from them.
"""

from __future__ import annotations

import logging

import numpy as np

from .io_utils import events_to_arrays
from .signal import ModelParameters, SignalDensity, derive_coefficients

logger = logging.getLogger(__name__)

__all__ = ["nll_unbinned"]


def nll_unbinned(density: SignalDensity, parameters, events, domain) -> float:
    """Unbinned negative log-likelihood.

    Parameters
    ----------
    density : SignalDensity
        Density model (flavour, resolution and efficiency already set).
    parameters : ModelParameters or sequence of float
        Parameter point; a plain sequence is read in contract order.
    events : DataFrame, mapping or sequence of arrays
        Observed ``time``, ``cos_theta_h``, ``cos_theta_l``, ``phi``.
    domain : tuple of float
        ``(t_min, t_max)`` integration window of the decay time.

    Returns
    -------
    float
        ``-sum(log(pdf / norm))``, or ``inf`` for unusable parameter points.
    """
    if not isinstance(parameters, ModelParameters):
        parameters = ModelParameters.from_sequence(parameters)

    t, ch, cl, phi = events_to_arrays(events)
    if t.size == 0:
        return np.inf

    lower, upper = domain
    snapshot = derive_coefficients(parameters)

    norm = density.integrate(snapshot, lower, upper)
    if not np.isfinite(norm) or norm <= 0:
        logger.debug("normalisation %s rejected for %s", norm, parameters.describe())
        return np.inf

    pdf = np.asarray(density.evaluate(snapshot, t, ch, cl, phi), dtype=float)
    if np.any(pdf <= 0) or not np.isfinite(pdf).all():
        return np.inf

    return float(-np.sum(np.log(pdf)) + t.size * np.log(norm))
