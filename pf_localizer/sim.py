#!/usr/bin/env python3
# sim.py — synthetic drive + replay of the particle filter, with CSV run logs
#
# Ground truth follows the constant turn-rate model; the filter sees:
#   - a noisy first fix (GPS-like) for init
#   - noisy (v, yaw_rate) controls every step
#   - car-frame landmark points within sensor range, + N(0, σ_meas)
#
# Logs (one dir per run under --log-root):
#   pose_est.csv  t,x,y,yaw          pose_gt.csv  t,x,y,yaw
#   errors.csv    t,ex,ey,eyaw       assoc.csv    t,n_obs,n_blind,best_weight,neff
#   timing.csv    t,predict_ms,update_ms,resample_ms
#
# Run:
#   pf_sim --steps 200 --particles 500 --seed 3 --plot run.png

import argparse
import csv
import logging
import math
import time
from pathlib import Path

import numpy as np

from .config import load_tune
from .filter import ParticleFilter, WeightingFailure
from .landmarks import LandmarkMap, load_known_map
from .motion import clamp_yaw_rate, wrap_angle

log = logging.getLogger(__name__)


def random_map(n, extent, rng: np.random.Generator) -> LandmarkMap:
    xy = rng.uniform(-extent, extent, size=(n, 2))
    return LandmarkMap(np.arange(1, n + 1), xy)


def car_frame(pose, pts_xy):
    # map → car: R(θ)ᵀ (p − t)
    xp, yp, th = pose
    c, s = math.cos(th), math.sin(th)
    d = np.asarray(pts_xy, float).reshape(-1, 2) - np.array([xp, yp])
    return np.column_stack([c*d[:, 0] + s*d[:, 1], -s*d[:, 0] + c*d[:, 1]])


def simulate(lmap: LandmarkMap, steps, dt, rng: np.random.Generator, speed=4.0,
             yaw_amp=0.15, yaw_period_s=20.0, start=(0.0, 0.0, 0.0),
             sensor_range=50.0, meas_sigma=(0.3, 0.3), ctrl_sigma=(0.05, 0.002)):
    """Yield one dict per step: t, gt (x,y,yaw), control (v, yaw_rate), obs (K,2)."""
    x, y, th = (float(v) for v in start)
    for k in range(steps):
        t = k * dt
        yr = yaw_amp * math.sin(2.0*math.pi*t / yaw_period_s)
        if k > 0:
            w = clamp_yaw_rate(yr)
            x += speed / w * (math.sin(th + w*dt) - math.sin(th))
            y += speed / w * (math.cos(th) - math.cos(th + w*dt))
            th += w*dt

        d = np.hypot(lmap.xy[:, 0] - x, lmap.xy[:, 1] - y) if len(lmap) else np.zeros(0)
        seen = lmap.xy[d <= sensor_range]
        obs = car_frame((x, y, th), seen)
        if obs.shape[0]:
            obs[:, 0] += rng.normal(0.0, meas_sigma[0], size=obs.shape[0])
            obs[:, 1] += rng.normal(0.0, meas_sigma[1], size=obs.shape[0])

        yield {
            "t": t,
            "gt": (x, y, th),
            # control that moved gt from the previous step to this one
            "control": (speed + rng.normal(0.0, ctrl_sigma[0]), yr + rng.normal(0.0, ctrl_sigma[1])),
            "obs": obs,
        }


class RunLog:
    FILES = {
        "est":    ("pose_est.csv", ["t", "x", "y", "yaw"]),
        "gt":     ("pose_gt.csv",  ["t", "x", "y", "yaw"]),
        "err":    ("errors.csv",   ["t", "ex", "ey", "eyaw"]),
        "assoc":  ("assoc.csv",    ["t", "n_obs", "n_blind", "best_weight", "neff"]),
        "timing": ("timing.csv",   ["t", "predict_ms", "update_ms", "resample_ms"]),
    }

    def __init__(self, log_root):
        ts = time.strftime("%Y%m%d_%H%M%S")
        self.log_dir = Path(log_root) / ts
        n = 1
        while self.log_dir.exists():
            self.log_dir = Path(log_root) / f"{ts}_{n}"; n += 1
        self.log_dir.mkdir(parents=True)
        self._fp = {}
        self._w = {}
        for key, (name, header) in self.FILES.items():
            self._fp[key] = open(self.log_dir / name, "w", newline="")
            self._w[key] = csv.writer(self._fp[key])
            self._w[key].writerow(header)

    def row(self, key, *values):
        self._w[key].writerow([f"{v:.6f}" if isinstance(v, float) else v for v in values])

    def close(self):
        for f in self._fp.values():
            f.close()

    def __enter__(self): return self

    def __exit__(self, *exc): self.close()


def run(tune=None, lmap=None, steps=200, dt=0.1, log_root=None, plot=None, n_landmarks=40, extent=60.0):
    """Drive the filter over a synthetic run. Returns a summary dict."""
    tune = load_tune() if tune is None else tune
    pf = ParticleFilter.from_tune(tune)
    sim_rng = np.random.default_rng(None if tune["seed"] < 0 else tune["seed"] + 1)
    if lmap is None:
        lmap = random_map(n_landmarks, extent, sim_rng)

    init_std = (tune["init_sigma_xy_m"], tune["init_sigma_xy_m"], tune["init_sigma_yaw_rad"])
    proc_std = (tune["proc_sigma_xy_m"], tune["proc_sigma_xy_m"], tune["proc_sigma_yaw_rad"])
    meas_std = (tune["meas_sigma_xy_m"], tune["meas_sigma_xy_m"])
    rng_range = tune["sensor_range_m"]

    runlog = RunLog(log_root) if log_root else None
    sq_xy = []; sq_yaw = []; failures = 0
    try:
        for step in simulate(lmap, steps, dt, sim_rng, sensor_range=rng_range, meas_sigma=meas_std):
            t = step["t"]; gx, gy, gyaw = step["gt"]
            t_pred = time.perf_counter()
            if not pf.initialized:
                gps = (gx + sim_rng.normal(0.0, init_std[0]), gy + sim_rng.normal(0.0, init_std[1]),
                       gyaw + sim_rng.normal(0.0, init_std[2]))
                pf.init(*gps, init_std)
            else:
                pf.predict(dt, proc_std, *step["control"])
            predict_ms = (time.perf_counter() - t_pred)*1000.0

            weighted = True
            try:
                pf.update_weights(rng_range, meas_std, step["obs"], lmap)
            except WeightingFailure as e:
                # skip resampling; the predicted set carries over
                failures += 1; weighted = False
                log.warning("t=%.2f: %s", t, e)
            update_ms = pf.last_update.get("update_ms", 0.0)

            best = pf.best_particle()
            neff = pf.neff()
            t_res = time.perf_counter()
            if weighted:
                pf.resample()
            resample_ms = (time.perf_counter() - t_res)*1000.0

            mx, my, myaw = pf.estimate()
            ex, ey, eyaw = gx - mx, gy - my, wrap_angle(gyaw - myaw)
            sq_xy.append(ex*ex + ey*ey); sq_yaw.append(eyaw*eyaw)

            if runlog:
                runlog.row("est", t, mx, my, myaw)
                runlog.row("gt", t, gx, gy, gyaw)
                runlog.row("err", t, ex, ey, eyaw)
                runlog.row("assoc", t, int(step["obs"].shape[0]), pf.last_update.get("n_blind", 0), best.weight, neff)
                runlog.row("timing", t, predict_ms, update_ms, resample_ms)
    finally:
        if runlog:
            runlog.close()

    summary = {
        "steps": steps,
        "particles": pf.num_particles,
        "rmse_xy": math.sqrt(float(np.mean(sq_xy))) if sq_xy else float("nan"),
        "rmse_yaw": math.sqrt(float(np.mean(sq_yaw))) if sq_yaw else float("nan"),
        "weighting_failures": failures,
        "log_dir": str(runlog.log_dir) if runlog else None,
    }
    log.info("run done: N=%d steps=%d rmse_xy=%.3f m rmse_yaw=%.4f rad failures=%d",
             pf.num_particles, steps, summary["rmse_xy"], summary["rmse_yaw"], failures)

    if plot:
        from .viz import plot_state_file
        plot_state_file(pf, lmap, plot)
        if runlog:
            from .viz import plot_run
            plot_run(runlog.log_dir, Path(plot).with_name(Path(plot).stem + "_run.png"))
    return summary


def main(argv=None):
    ap = argparse.ArgumentParser(description="Synthetic run of the landmark-map particle filter")
    ap.add_argument("--map", default=None, help="known map CSV (default: random map)")
    ap.add_argument("--tune", default=None, help="JSON overrides for TUNE")
    ap.add_argument("--steps", type=int, default=200)
    ap.add_argument("--dt", type=float, default=0.1)
    ap.add_argument("--particles", type=int, default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--index", choices=["kdtree", "linear"], default=None)
    ap.add_argument("--landmarks", type=int, default=40, help="random map size")
    ap.add_argument("--log-root", default="logs/pf_localizer")
    ap.add_argument("--plot", default=None, help="save final-state PNG here")
    ap.add_argument("--log-level", default="INFO")
    a = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, a.log_level.upper(), logging.INFO),
                        format="[%(levelname)s] %(name)s: %(message)s")

    over = {}
    if a.particles is not None: over["particles"] = a.particles
    if a.seed is not None: over["seed"] = a.seed
    if a.index is not None: over["spatial_index"] = a.index
    tune = load_tune(a.tune, **over)
    lmap = load_known_map(a.map) if a.map else None

    s = run(tune, lmap=lmap, steps=a.steps, dt=a.dt, log_root=a.log_root,
            plot=a.plot, n_landmarks=a.landmarks)
    print(f"rmse_xy={s['rmse_xy']:.3f} m  rmse_yaw={s['rmse_yaw']:.4f} rad  logs={s['log_dir']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
