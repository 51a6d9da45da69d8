"""Parameter containers for the time-dependent signal model."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import astuple, dataclass, fields
from enum import Enum
from typing import Any

import numpy as np

from ..constants import N_PARAMETERS, PARAMETER_NAMES

__all__ = ["CPState", "ModelParameters", "TimeResolution"]


class CPState(Enum):
    """Flavour of the decaying meson; the value is the CP sign of the C, D terms."""

    PARTICLE = 1
    ANTIPARTICLE = -1

    @property
    def sign(self) -> int:
        return self.value

    @classmethod
    def from_config(cls, value: Any) -> "CPState":
        """Accept ``"particle"``/``"antiparticle"``, ``+1``/``-1`` or an instance."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            aliases = {
                "particle": cls.PARTICLE,
                "b0s": cls.PARTICLE,
                "antiparticle": cls.ANTIPARTICLE,
                "b0sbar": cls.ANTIPARTICLE,
            }
            if key in aliases:
                return aliases[key]
            raise ValueError(f"Unknown CP state: {value!r}")
        if value in (1, -1):
            return cls(int(value))
        raise ValueError(f"Unknown CP state: {value!r}")


@dataclass(frozen=True)
class ModelParameters:
    """The 17 physics parameters of the signal model, in contract order.

    ``A_02``, ``A_perp2`` and ``A_S2`` are squared amplitude fractions;
    ``DeltaGamma_sd = Gamma_s - Gamma_d``, ``DeltaGamma`` and ``DeltaM`` are
    in ps^-1; the ``phi_*``, ``delta_*`` phases are in radians; the
    ``lambda_*`` parameters are |lambda| moduli.  Polarisation-dependent
    parameters are given relative to the longitudinal ones (``phi_par0 =
    phi_par - phi_0``, ``lambda_par0 = |lambda_par / lambda_0|``, ...).
    """

    A_02: float
    A_perp2: float
    A_S2: float
    DeltaGamma_sd: float
    DeltaGamma: float
    DeltaM: float
    phi_0: float
    phi_par0: float
    phi_perp0: float
    phi_S0: float
    lambda_0: float
    lambda_par0: float
    lambda_perp0: float
    lambda_S0: float
    delta_par0: float
    delta_perp0: float
    delta_Sperp: float

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, float(getattr(self, f.name)))

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "ModelParameters":
        """Build from exactly 17 values ordered as :data:`PARAMETER_NAMES`."""

        values = list(values)
        if len(values) != N_PARAMETERS:
            raise ValueError(
                f"expected {N_PARAMETERS} model parameters, got {len(values)}"
            )
        return cls(*values)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ModelParameters":
        """Build from a name -> value mapping; every name is required."""

        missing = [name for name in PARAMETER_NAMES if name not in mapping]
        if missing:
            raise KeyError(f"Missing model parameters: {', '.join(missing)}")
        unknown = sorted(set(mapping) - set(PARAMETER_NAMES))
        if unknown:
            raise ValueError(f"Unknown model parameters: {', '.join(unknown)}")
        return cls(**{name: mapping[name] for name in PARAMETER_NAMES})

    def as_array(self) -> np.ndarray:
        return np.array(astuple(self), dtype=float)

    def as_dict(self) -> dict[str, float]:
        return dict(zip(PARAMETER_NAMES, astuple(self)))

    def replace(self, **changes: float) -> "ModelParameters":
        data = self.as_dict()
        data.update(changes)
        return type(self).from_mapping(data)

    @property
    def A_par2(self) -> float:
        """``1 - A_0^2 - A_perp^2``; negative outside the physical simplex."""

        return 1.0 - self.A_02 - self.A_perp2

    def describe(self) -> str:
        """Comma separated ``name=value`` dump used in diagnostics."""

        return ", ".join(f"{k}={v:.6g}" for k, v in self.as_dict().items())


@dataclass(frozen=True)
class TimeResolution:
    """Gaussian decay-time resolution with mean ``mu`` and width ``sigma`` (ps)."""

    mu: float = 0.0
    sigma: float = 0.045

    def __post_init__(self):
        sigma = float(self.sigma)
        if not math.isfinite(sigma) or sigma <= 0:
            raise ValueError("resolution sigma must be positive and finite")
        object.__setattr__(self, "sigma", sigma)
        object.__setattr__(self, "mu", float(self.mu))
