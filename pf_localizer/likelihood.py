#!/usr/bin/env python3
# likelihood.py — per-particle observation likelihood
#
# For one particle (xp, yp, θp):
#   1) car → map:  xm = xp + xc cosθ − yc sinθ,  ym = yp + xc sinθ + yc cosθ
#   2) candidates: map landmarks with |lm − (xp,yp)| ≤ sensor_range
#   3) NN association (association.nearest_neighbor)
#   4) w = Π_k N2(xm_k − μx, ym_k − μy; σx, σy)   (axis-aligned, ρ = 0)
# No candidates or no observations → w = 1.0 (empty product).

import math
import numpy as np

from .association import SpatialIndex, nearest_neighbor


def rot2d(theta):
    c, s = math.cos(theta), math.sin(theta)
    return np.array([[c, -s], [s, c]], float)


def to_map_frame(pose, obs_xy):
    """(K,2) car-frame points → (K,2) map-frame points for pose [x, y, θ]."""
    xp, yp, th = pose
    obs_xy = np.asarray(obs_xy, float).reshape(-1, 2)
    return obs_xy @ rot2d(th).T + np.array([xp, yp])


def gaussian_2d(dx, dy, sx, sy):
    norm = 1.0 / (2.0 * math.pi * sx * sy)
    return norm * np.exp(-(dx**2 / (2.0 * sx**2) + dy**2 / (2.0 * sy**2)))


def particle_likelihood(pose, obs_xy, index: SpatialIndex, sensor_range, std_landmark):
    """Unnormalized weight for one particle.

    Returns (weight, assoc_ids, obs_map_xy, n_candidates). assoc_ids is empty
    when the particle has no landmark in range.
    """
    sx, sy = float(std_landmark[0]), float(std_landmark[1])
    obs_m = to_map_frame(pose, obs_xy)
    rows = index.in_range(pose[0], pose[1], sensor_range)
    if rows.size == 0 or obs_m.shape[0] == 0:
        return 1.0, np.zeros(0, int), obs_m, int(rows.size)

    lmap = index.lmap
    cand_ids = lmap.ids[rows]
    ids, _ = nearest_neighbor(lmap.xy[rows], cand_ids, obs_m)
    mu = lmap.xy[[lmap.row_of(i) for i in ids]]
    L = gaussian_2d(obs_m[:, 0] - mu[:, 0], obs_m[:, 1] - mu[:, 1], sx, sy)
    return float(np.prod(L)), ids, obs_m, int(rows.size)


def normalize_weights(w):
    """w / Σw. Returns None when the total is zero or not finite."""
    total = float(np.sum(w))
    if not np.isfinite(total) or total <= 0.0:
        return None
    return np.asarray(w, float) / total
