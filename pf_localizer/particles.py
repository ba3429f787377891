#!/usr/bin/env python3
# particles.py — belief state: N weighted pose hypotheses [x, y, yaw]
#
# State is kept column-wise (numpy) so motion + weighting can run over the
# whole set at once. Particle objects are snapshots for reporting only.

from dataclasses import dataclass, field
from typing import List

import numpy as np


@dataclass
class Particle:
    id: int
    x: float
    y: float
    theta: float
    weight: float = 1.0
    associations: List[int] = field(default_factory=list)
    sense_x: List[float] = field(default_factory=list)
    sense_y: List[float] = field(default_factory=list)


class ParticleSet:
    """Fixed-size set of pose hypotheses.

    poses   (N,3) float  [x, y, theta] in map frame
    weights (N,)  float  non-negative, normalized after each weighting pass
    ids     (N,)  int    1-based labels, cosmetic (never used as an index)
    """

    def __init__(self, poses, weights=None, ids=None):
        self.poses = np.array(poses, dtype=float).reshape(-1, 3)
        n = self.poses.shape[0]
        if n < 1:
            raise ValueError("particle set needs at least one particle")
        self.weights = np.ones(n, float) if weights is None else np.array(weights, dtype=float).reshape(n)
        self.ids = np.arange(1, n + 1, dtype=int) if ids is None else np.array(ids, dtype=int).reshape(n)
        # diagnostics, written only when associations are recorded
        self.associations = [[] for _ in range(n)]
        self.sense_x = [[] for _ in range(n)]
        self.sense_y = [[] for _ in range(n)]

    def __len__(self):
        return self.poses.shape[0]

    def __getitem__(self, i) -> Particle:
        """Copy of particle i. Edits to it stay on the copy; use record() to
        store associations on the set."""
        x, y, th = self.poses[i]
        return Particle(id=int(self.ids[i]), x=float(x), y=float(y), theta=float(th),
                        weight=float(self.weights[i]),
                        associations=list(self.associations[i]),
                        sense_x=list(self.sense_x[i]), sense_y=list(self.sense_y[i]))

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    @property
    def x(self): return self.poses[:, 0]

    @property
    def y(self): return self.poses[:, 1]

    @property
    def theta(self): return self.poses[:, 2]

    def record(self, i, ids, sense_x, sense_y):
        self.associations[i] = [int(v) for v in ids]
        self.sense_x[i] = [float(v) for v in sense_x]
        self.sense_y[i] = [float(v) for v in sense_y]

    def clear_records(self):
        for i in range(len(self)):
            self.associations[i] = []; self.sense_x[i] = []; self.sense_y[i] = []

    def take(self, indexes):
        """New set built from copies of the selected rows, with fresh ids."""
        idx = np.asarray(indexes, dtype=int)
        return ParticleSet(self.poses[idx].copy(), self.weights[idx].copy())


def init_particles(x, y, theta, std, n, rng: np.random.Generator) -> ParticleSet:
    """Draw n poses around (x, y, theta) with per-axis std [σx, σy, σθ]; weights = 1."""
    if n < 1:
        raise ValueError(f"num_particles must be >= 1 (got {n})")
    sx, sy, sth = (float(s) for s in std)
    if min(sx, sy, sth) < 0.0:
        raise ValueError("standard deviations must be non-negative")
    P = np.empty((n, 3), float)
    P[:, 0] = rng.normal(x, sx, size=n)
    P[:, 1] = rng.normal(y, sy, size=n)
    P[:, 2] = rng.normal(theta, sth, size=n)
    return ParticleSet(P)
