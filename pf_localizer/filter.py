#!/usr/bin/env python3
# filter.py — Monte Carlo localization against a fixed landmark map
#
# Cycle (after one init):  predict → update_weights → resample
#   init           : N Gaussian draws around a first fix, weights = 1
#   predict        : constant turn-rate motion + process noise (in place)
#   update_weights : car→map transform, range crop, NN DA, Gaussian product,
#                    normalize to Σw = 1
#   resample       : wheel (default) or systematic; replaces the set
#
# Randomness comes from one owned numpy Generator (seed= / rng=).

import logging
import math
import time

import numpy as np

from .config import TUNE
from .particles import init_particles
from .motion import ctrv_predict, YAW_RATE_EPS
from .landmarks import LandmarkMap, observations_array
from .association import INDEX_KINDS, SpatialIndex, make_index
from .likelihood import particle_likelihood, normalize_weights
from .resample import RESAMPLERS, effective_sample_size

log = logging.getLogger(__name__)

ZERO_WEIGHT_POLICIES = ("raise", "uniform", "carry")


class FilterNotInitialized(RuntimeError):
    pass


class FilterAlreadyInitialized(RuntimeError):
    pass


class WeightingFailure(RuntimeError):
    pass


class ParticleFilter:
    def __init__(self, num_particles=1000, seed=None, rng=None,
                 spatial_index="kdtree", resample_method="wheel",
                 zero_weight_policy="raise", record_associations=False,
                 yaw_rate_eps=YAW_RATE_EPS):
        if int(num_particles) < 1:
            raise ValueError(f"num_particles must be >= 1 (got {num_particles})")
        if spatial_index not in INDEX_KINDS:
            raise ValueError(f"unknown spatial index '{spatial_index}'")
        if resample_method not in RESAMPLERS:
            raise ValueError(f"unknown resample method '{resample_method}'")
        if zero_weight_policy not in ZERO_WEIGHT_POLICIES:
            raise ValueError(f"unknown zero-weight policy '{zero_weight_policy}'")
        self.num_particles = int(num_particles)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.spatial_index = spatial_index
        self.resample_method = resample_method
        self.zero_weight_policy = zero_weight_policy
        self.record_associations = bool(record_associations)
        self.yaw_rate_eps = float(yaw_rate_eps)

        self.particles = None
        self.initialized = False
        self._index = None  # (map, SpatialIndex) cache
        self.last_update = {}

    @classmethod
    def from_tune(cls, tune=None, rng=None):
        t = TUNE if tune is None else tune
        seed = None if int(t["seed"]) < 0 else int(t["seed"])
        return cls(num_particles=t["particles"], seed=seed, rng=rng,
                   spatial_index=t["spatial_index"],
                   resample_method=t["resample_method"],
                   zero_weight_policy=t["zero_weight_policy"],
                   record_associations=t["record_associations"],
                   yaw_rate_eps=t["yaw_rate_eps"])

    # ── Lifecycle ────────────────────────────────────────────────────────
    def _require_init(self, op):
        if not self.initialized:
            raise FilterNotInitialized(f"{op}() called before init()")

    def init(self, x, y, theta, std):
        if self.initialized:
            raise FilterAlreadyInitialized("init() already ran; call reset() first")
        self.particles = init_particles(x, y, theta, std, self.num_particles, self.rng)
        self.initialized = True
        log.info("pf init: N=%d at (%.3f, %.3f, %.4f) std=%s",
                 self.num_particles, x, y, theta, list(std))

    def reset(self):
        self.particles = None
        self.initialized = False
        self.last_update = {}

    # ── Predict ──────────────────────────────────────────────────────────
    def predict(self, delta_t, std_pos, velocity, yaw_rate):
        self._require_init("predict")
        t0 = time.perf_counter()
        ctrv_predict(self.particles.poses, delta_t, std_pos, velocity, yaw_rate,
                     rng=self.rng, eps=self.yaw_rate_eps)
        log.debug("predict: dt=%.3f v=%.3f yr=%.5f (%.2f ms)",
                  delta_t, velocity, yaw_rate, (time.perf_counter()-t0)*1000.0)

    # ── Update ───────────────────────────────────────────────────────────
    def _index_for(self, map_landmarks):
        if isinstance(map_landmarks, SpatialIndex):
            return map_landmarks
        if not isinstance(map_landmarks, LandmarkMap):
            map_landmarks = LandmarkMap.from_rows(map_landmarks)
        if self._index is None or self._index[0] is not map_landmarks:
            self._index = (map_landmarks, make_index(map_landmarks, self.spatial_index))
        return self._index[1]

    def update_weights(self, sensor_range, std_landmark, observations, map_landmarks):
        """Weight every particle by its observation likelihood, then normalize.

        observations: car-frame points (LandmarkObs list, (x, y) pairs or (K,2) array)
        map_landmarks: LandmarkMap, (id, x, y) rows, or a prebuilt SpatialIndex
        """
        self._require_init("update_weights")
        if sensor_range < 0.0:
            raise ValueError(f"sensor_range must be >= 0 (got {sensor_range})")
        if float(std_landmark[0]) <= 0.0 or float(std_landmark[1]) <= 0.0:
            raise ValueError("landmark std must be > 0")

        t0 = time.perf_counter()
        index = self._index_for(map_landmarks)
        obs = observations_array(observations)
        P = self.particles
        prev = P.weights.copy()
        w = np.empty(len(P), float)
        n_blind = 0
        if self.record_associations:
            P.clear_records()

        for k in range(len(P)):
            w[k], ids, obs_m, n_cand = particle_likelihood(P.poses[k], obs, index, sensor_range, std_landmark)
            if n_cand == 0:
                n_blind += 1
            if self.record_associations and ids.size:
                P.record(k, ids, obs_m[:, 0], obs_m[:, 1])

        if n_blind and obs.shape[0]:
            log.warning("update: %d/%d particles have no landmark within %.1f m (weight factor 1.0)",
                        n_blind, len(P), sensor_range)

        # set before normalizing; a failed batch reports its own stats
        self.last_update = {
            "n_obs": int(obs.shape[0]),
            "n_blind": n_blind,
            "update_ms": (time.perf_counter()-t0)*1000.0,
        }
        log.debug("update: n_obs=%d blind=%d (%.2f ms)", obs.shape[0], n_blind, self.last_update["update_ms"])

        wn = normalize_weights(w)
        if wn is None:
            self._zero_weight(prev)
        else:
            P.weights = wn

    def _zero_weight(self, prev):
        N = len(self.particles)
        if self.zero_weight_policy == "raise":
            log.error("update: total particle weight is zero; cannot normalize")
            self.particles.weights = prev
            raise WeightingFailure("all particles have zero likelihood for this observation batch")
        if self.zero_weight_policy == "uniform":
            log.warning("update: total weight is zero; falling back to uniform weights")
            self.particles.weights = np.full(N, 1.0/N)
        else:
            log.warning("update: total weight is zero; observation batch rejected")
            self.particles.weights = prev

    # ── Resample ─────────────────────────────────────────────────────────
    def resample(self):
        self._require_init("resample")
        idx = RESAMPLERS[self.resample_method](self.particles.weights, self.rng)
        if idx is None:
            log.warning("resample: max weight is zero; keeping predicted set")
            return
        self.particles = self.particles.take(idx)

    # ── Estimates ────────────────────────────────────────────────────────
    def best_particle(self):
        self._require_init("best_particle")
        return self.particles[int(np.argmax(self.particles.weights))]

    def estimate(self):
        """Weighted mean pose (x, y, yaw); yaw is the circular mean in [-π, π]."""
        self._require_init("estimate")
        P = self.particles
        w = P.weights
        s = float(np.sum(w))
        w = w / s if s > 0.0 else np.full(len(P), 1.0/len(P))
        mx = float(np.sum(w * P.x)); my = float(np.sum(w * P.y))
        cy = float(np.sum(w * np.cos(P.theta))); sy = float(np.sum(w * np.sin(P.theta)))
        return mx, my, math.atan2(sy, cy)

    def neff(self):
        self._require_init("neff")
        return effective_sample_size(self.particles.weights)
