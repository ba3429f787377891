#!/usr/bin/env python3
# motion.py — constant turn-rate ("bicycle") prediction over the whole set
#
#   x' = x + (v/ω)(sin(θ+ωΔt) − sin θ)
#   y' = y + (v/ω)(cos θ − cos(θ+ωΔt))
#   θ' = θ + ωΔt
# then + N(0, σ) on each axis. Rows are independent; weights untouched.

import math
import numpy as np

YAW_RATE_EPS = 1e-5


def wrap_angle(a): return (a + math.pi) % (2*math.pi) - math.pi


def clamp_yaw_rate(yaw_rate, eps=YAW_RATE_EPS):
    # |ω| < eps → eps (straight-line limit, keeps v/ω finite)
    return eps if abs(yaw_rate) < eps else float(yaw_rate)


def ctrv_predict(poses, dt, std, velocity, yaw_rate, rng: np.random.Generator = None, eps=YAW_RATE_EPS):
    """Advance (N,3) poses in place by one control interval and return them."""
    sx, sy, sth = (float(s) for s in std)
    if min(sx, sy, sth) < 0.0:
        raise ValueError("process noise std must be non-negative")
    noisy = sx > 0.0 or sy > 0.0 or sth > 0.0
    if noisy and rng is None:
        raise ValueError("process noise requested but no rng given")
    w = clamp_yaw_rate(yaw_rate, eps)
    k = velocity / w
    th0 = poses[:, 2].copy()
    th1 = th0 + w*dt
    poses[:, 0] += k * (np.sin(th1) - np.sin(th0))
    poses[:, 1] += k * (np.cos(th0) - np.cos(th1))
    poses[:, 2] = th1

    if noisy:
        n = poses.shape[0]
        poses[:, 0] += rng.normal(0.0, sx, size=n)
        poses[:, 1] += rng.normal(0.0, sy, size=n)
        poses[:, 2] += rng.normal(0.0, sth, size=n)
    return poses
