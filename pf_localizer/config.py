#!/usr/bin/env python3
# config.py — tunables for the landmark-map particle filter
#
# Edit TUNE here OR override per run:
#   load_tune("my_tune.json", particles=500)
# JSON keys must match TUNE names; values are coerced to the default's type.

import json
import copy
from pathlib import Path

# ╔═══════════════════════════════════════════════════════════════════════╗
# ║                         TUNING CONSTANTS (TOP)                        ║
# ╚═══════════════════════════════════════════════════════════════════════╝
TUNE = {
    # Particles
    "particles":                 1000,     # fixed set size N
    "seed":                      -1,       # <0 → fresh entropy

    # Init (GPS-like first fix)
    "init_sigma_xy_m":           0.3,
    "init_sigma_yaw_rad":        0.01,

    # Motion (constant turn rate)
    "proc_sigma_xy_m":           0.3,
    "proc_sigma_yaw_rad":        0.01,
    "yaw_rate_eps":              1e-5,     # |ω| below this is clamped to it

    # Measurement model
    "meas_sigma_xy_m":           0.3,      # σ of landmark x/y in map frame
    "sensor_range_m":            50.0,     # inclusive
    "spatial_index":             "kdtree", # "kdtree" | "linear"

    # Weighting / resampling
    "zero_weight_policy":        "raise",  # "raise" | "uniform" | "carry"
    "resample_method":           "wheel",  # "wheel" | "systematic"
    "record_associations":       False,    # keep per-particle ids/sense xy
}


def _coerce(default, value):
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def load_tune(json_path=None, **overrides):
    """Return a copy of TUNE merged with a JSON file and keyword overrides."""
    tune = copy.deepcopy(TUNE)
    layers = []
    if json_path is not None:
        with open(Path(json_path), "r") as f:
            layers.append(json.load(f))
    layers.append(overrides)
    for layer in layers:
        for k, v in layer.items():
            if k not in TUNE:
                raise KeyError(f"unknown tunable '{k}'")
            tune[k] = _coerce(TUNE[k], v)
    return tune
