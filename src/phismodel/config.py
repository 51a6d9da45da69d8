"""Configuration loading for the signal model.

A configuration is a YAML file (or an equivalent mapping) such as::

    pipeline:
      log_level: INFO
    model:
      cp: particle
      gamma_d: 0.65789
      parameters:
        A_02: 0.52
        A_perp2: 0.25
        ...
    resolution:
      mu: 0.0
      sigma: 0.045
    efficiency:
      knots: [0.3, 0.91, 1.96, 9.0]
      coefficients: [1.0, 1.0, 1.0, 1.0, 1.0, 1.0]
    integration:
      lower: 0.3
      upper: 15.0

Only ``model`` (with all 17 named parameters) and ``integration`` are
required.  :func:`build_model` turns a loaded configuration into a
:class:`~phismodel.signal.SignalDensity` and the parameter point.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import numpy as np
import yaml

from .constants import GAMMA_D, PARAMETER_NAMES, SPLINE_COEFF_THRESHOLD, SPLINE_NEGATIVE_FLOOR
from .efficiency import CubicSpline
from .signal import CPState, ModelParameters, SignalDensity, TimeResolution

logger = logging.getLogger(__name__)

__all__ = ["CONFIG_SCHEMA", "load_config", "build_model", "configure_logging"]

_NUMBER_LIST = {"type": "array", "items": {"type": "number"}}

CONFIG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "pipeline": {
            "type": "object",
            "additionalProperties": False,
            "properties": {"log_level": {"type": "string"}},
        },
        "model": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "cp": {
                    "enum": ["particle", "antiparticle", "b0s", "b0sbar", 1, -1],
                },
                "gamma_d": {"type": "number", "exclusiveMinimum": 0},
                "parameters": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {name: {"type": "number"} for name in PARAMETER_NAMES},
                    "required": list(PARAMETER_NAMES),
                },
            },
            "required": ["parameters"],
        },
        "resolution": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "mu": {"type": "number"},
                "sigma": {"type": "number", "exclusiveMinimum": 0},
            },
            "required": ["sigma"],
        },
        "efficiency": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "knots": dict(_NUMBER_LIST, minItems=2),
                "coefficients": dict(_NUMBER_LIST, minItems=4),
                "floor": {"type": "number", "exclusiveMinimum": 0},
                "threshold": {"type": "number", "minimum": 0},
            },
            "required": ["knots", "coefficients"],
        },
        "integration": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "lower": {"type": "number"},
                "upper": {"type": "number"},
            },
            "required": ["lower", "upper"],
        },
    },
    "required": ["model", "integration"],
}


class _UniqueKeyLoader(yaml.SafeLoader):
    pass


def _construct_mapping(loader, node, deep=False):
    mapping = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ValueError(f"Duplicate key '{key}' in configuration")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


_UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_mapping
)


def _check_consistency(cfg: Mapping[str, Any]) -> None:
    integ = cfg["integration"]
    if not integ["lower"] < integ["upper"]:
        raise ValueError("integration.lower must be smaller than integration.upper")

    eff = cfg.get("efficiency")
    if eff is None:
        return
    if "resolution" not in cfg:
        raise ValueError("efficiency requires a resolution section")
    knots = np.asarray(eff["knots"], dtype=float)
    if np.any(np.diff(knots) <= 0):
        raise ValueError("efficiency.knots must be strictly increasing")
    if len(eff["coefficients"]) != knots.size + 2:
        raise ValueError(
            f"efficiency.coefficients needs {knots.size + 2} values for "
            f"{knots.size} knots, got {len(eff['coefficients'])}"
        )


def load_config(config_path):
    """Load a configuration mapping or YAML file and validate it.

    Missing optional entries are filled with their defaults.  Missing
    required keys raise ``ValueError`` listing all of them; other schema
    violations raise :class:`jsonschema.exceptions.ValidationError`.
    """

    if isinstance(config_path, Mapping):
        cfg = copy.deepcopy(dict(config_path))
    else:
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        if path.suffix not in {".yaml", ".yml"}:
            raise ValueError("Config file must be YAML")
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.load(f, Loader=_UniqueKeyLoader) or {}

    validator = jsonschema.Draft7Validator(CONFIG_SCHEMA)
    missing = []
    for err in validator.iter_errors(cfg):
        if err.validator == "required":
            key = err.message.split("'")[1]
            dotted = ".".join([str(p) for p in err.absolute_path] + [key])
            missing.append(dotted)
    if missing:
        raise ValueError("Missing required keys: " + ", ".join(missing))

    jsonschema.validate(cfg, CONFIG_SCHEMA)
    _check_consistency(cfg)

    pipeline = cfg.setdefault("pipeline", {})
    pipeline.setdefault("log_level", "INFO")

    model = cfg["model"]
    model.setdefault("cp", "particle")
    model.setdefault("gamma_d", GAMMA_D)

    if "efficiency" in cfg:
        cfg["efficiency"].setdefault("floor", SPLINE_NEGATIVE_FLOOR)
        cfg["efficiency"].setdefault("threshold", SPLINE_COEFF_THRESHOLD)
    if "resolution" in cfg:
        cfg["resolution"].setdefault("mu", 0.0)

    return cfg


def build_model(cfg: Mapping[str, Any]) -> tuple[SignalDensity, ModelParameters]:
    """Create the density and parameter point described by a loaded config."""

    model = cfg["model"]
    parameters = ModelParameters.from_mapping(model["parameters"])

    resolution = None
    res_cfg = cfg.get("resolution")
    if res_cfg is not None:
        resolution = TimeResolution(mu=res_cfg.get("mu", 0.0), sigma=res_cfg["sigma"])

    efficiency = None
    eff_cfg = cfg.get("efficiency")
    if eff_cfg is not None:
        efficiency = CubicSpline(
            eff_cfg["knots"],
            eff_cfg["coefficients"],
            floor=eff_cfg.get("floor", SPLINE_NEGATIVE_FLOOR),
            threshold=eff_cfg.get("threshold", SPLINE_COEFF_THRESHOLD),
        )

    density = SignalDensity(
        CPState.from_config(model.get("cp", "particle")),
        resolution=resolution,
        efficiency=efficiency,
        gamma_d=model.get("gamma_d", GAMMA_D),
    )
    logger.debug("built %r", density)
    return density, parameters


def configure_logging(cfg: Mapping[str, Any]) -> None:
    """Configure logging based on ``pipeline.log_level``."""

    log_level = cfg.get("pipeline", {}).get("log_level", "INFO")
    numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level, format="%(levelname)s:%(name)s:%(message)s"
    )
