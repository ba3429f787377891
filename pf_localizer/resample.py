#!/usr/bin/env python3
# resample.py — draw N indexes with replacement, P(i) ∝ w_i
#
# Both return None when there is nothing to resample on (max weight 0 or
# non-finite); the caller then keeps the current set.

import numpy as np


def resampling_wheel(weights, rng: np.random.Generator):
    """Stochastic wheel: random start, β += U[0, 2·w_max), walk while β > w."""
    w = np.asarray(weights, float)
    N = w.shape[0]
    w_max = float(np.max(w)) if N else 0.0
    if not np.isfinite(w_max) or w_max <= 0.0:
        return None

    steps = rng.uniform(0.0, 2.0 * w_max, size=N)
    index = int(rng.integers(0, N))
    beta = 0.0
    out = np.empty(N, dtype=int)
    for j in range(N):
        beta += steps[j]
        while beta > w[index]:
            beta -= w[index]
            index = (index + 1) % N
        out[j] = index
    return out


def systematic_resample(weights, rng: np.random.Generator):
    w = np.asarray(weights, float)
    N = w.shape[0]
    total = float(np.sum(w)) if N else 0.0
    if not np.isfinite(total) or total <= 0.0:
        return None
    positions = (np.arange(N) + rng.random()) / N
    cumulative_sum = np.cumsum(w / total)
    cumulative_sum[-1] = 1.0  # guard round-off at the tail
    return np.searchsorted(cumulative_sum, positions, side="right")


def effective_sample_size(weights):
    w = np.asarray(weights, float)
    s = float(np.sum(w))
    if s <= 0.0:
        return 0.0
    w = w / s
    return 1.0 / (float(np.sum(w**2)) + 1e-12)


RESAMPLERS = {
    "wheel": resampling_wheel,
    "systematic": systematic_resample,
}
