# io_utils.py
"""Reading candidate tables for the signal density."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

__all__ = ["EVENT_COLUMNS", "load_events", "events_to_arrays"]

EVENT_COLUMNS = ("time", "cos_theta_h", "cos_theta_l", "phi")

_ALIASES = {
    "t": "time",
    "decay_time": "time",
    "costheta_h": "cos_theta_h",
    "cos_th_h": "cos_theta_h",
    "costheta_l": "cos_theta_l",
    "cos_th_l": "cos_theta_l",
    "chi": "phi",
}


def load_events(csv_path, *, column_map=None) -> pd.DataFrame:
    """
    Read a candidate CSV into a DataFrame with columns
    ``['time', 'cos_theta_h', 'cos_theta_l', 'phi']``.

    Common aliases (``decay_time``, ``costheta_h``, ``chi``, ...) are renamed
    to the canonical names.  ``column_map`` maps canonical names to the actual
    CSV headers for anything else.  Rows with non-numeric or non-finite
    values are dropped and counted in the log.
    """
    path = Path(csv_path)
    if not path.is_file():
        raise FileNotFoundError(f"Input CSV not found: {csv_path}")

    df = pd.read_csv(path, sep=",", engine="c", dtype=str)

    if column_map:
        cfg_rename = {v: k for k, v in column_map.items() if v in df.columns}
        if cfg_rename:
            df = df.rename(columns=cfg_rename)

    df = df.rename(columns={k: v for k, v in _ALIASES.items() if v not in df.columns})

    missing = [c for c in EVENT_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Input CSV is missing required columns: {missing}")

    df = df[list(EVENT_COLUMNS)].apply(pd.to_numeric, errors="coerce")

    start_len = len(df)
    df = df[np.isfinite(df.to_numpy()).all(axis=1)].reset_index(drop=True)
    discarded = start_len - len(df)

    logger.info(
        "Loaded %d events from %s (%d discarded)", len(df), csv_path, discarded
    )
    return df


def events_to_arrays(events) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(time, cos_theta_h, cos_theta_l, phi)`` float arrays.

    ``events`` is a DataFrame or mapping with the :data:`EVENT_COLUMNS`, or a
    sequence of four arrays in that order.
    """
    if isinstance(events, (pd.DataFrame, Mapping)):
        missing = [c for c in EVENT_COLUMNS if c not in events]
        if missing:
            raise KeyError(f"Events are missing required columns: {missing}")
        columns = [events[c] for c in EVENT_COLUMNS]
    else:
        columns = list(events)
        if len(columns) != len(EVENT_COLUMNS):
            raise ValueError(
                f"expected {len(EVENT_COLUMNS)} event arrays, got {len(columns)}"
            )
    return tuple(np.asarray(c, dtype=float) for c in columns)
