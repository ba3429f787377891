#!/usr/bin/env python3
# viz.py — matplotlib views of the filter (offline, file output)
#
#   plot_state(ax, pf, lmap)      map landmarks + particles + estimate
#   plot_run(log_dir, out_png)    XY (est vs GT) + error-vs-time from run logs
#
# Run:
#   pf_plot logs/pf_localizer/<run> --out run.png

import argparse
import csv
from pathlib import Path

import numpy as np

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


def plot_state(ax, pf, lmap, max_particles=2000):
    P = pf.particles
    if lmap is not None and len(lmap):
        ax.scatter(lmap.xy[:, 0], lmap.xy[:, 1], s=30, marker="^", c="tab:blue", label="Landmarks")
    if P is not None:
        step = max(1, len(P) // max_particles)
        w = P.weights[::step]
        sz = 2.0 + 30.0 * (w / w.max()) if w.max() > 0 else 4.0
        ax.scatter(P.x[::step], P.y[::step], s=sz, c="tab:red", alpha=0.4, label="Particles")
        mx, my, myaw = pf.estimate()
        ax.quiver([mx], [my], [np.cos(myaw)], [np.sin(myaw)], color="k", scale=20, label="Estimate")
    ax.set_xlabel("X (m)"); ax.set_ylabel("Y (m)")
    ax.set_aspect("equal", adjustable="box")
    ax.grid(True, ls="--", alpha=0.3)
    ax.legend(loc="upper right")
    return ax


def plot_state_file(pf, lmap, out_png):
    fig, ax = plt.subplots(figsize=(7, 7))
    ax.set_title(f"Particle filter state (N={pf.num_particles})")
    plot_state(ax, pf, lmap)
    fig.savefig(out_png, dpi=120, bbox_inches="tight")
    plt.close(fig)
    return Path(out_png)


def _read_csv(path: Path):
    with open(path, "r", newline="") as f:
        rows = list(csv.DictReader(f))
    if not rows:
        return {}
    return {k: np.array([float(r[k]) for r in rows]) for k in rows[0]}


def plot_run(log_dir, out_png):
    log_dir = Path(log_dir)
    est = _read_csv(log_dir / "pose_est.csv")
    gt = _read_csv(log_dir / "pose_gt.csv")
    err = _read_csv(log_dir / "errors.csv")

    fig = plt.figure(figsize=(11, 6))
    ax_xy = fig.add_subplot(1, 2, 1)
    ax_e = fig.add_subplot(2, 2, 2)
    ax_yaw = fig.add_subplot(2, 2, 4)

    if gt:
        ax_xy.plot(gt["x"], gt["y"], label="GT XY")
    if est:
        ax_xy.plot(est["x"], est["y"], label="PF XY", linestyle="--")
    ax_xy.set_title("XY Trajectory")
    ax_xy.set_aspect("equal", adjustable="box")
    ax_xy.grid(True, ls="--", alpha=0.3)
    ax_xy.legend(loc="best")

    if err:
        ax_e.plot(err["t"], np.hypot(err["ex"], err["ey"]), label="|e_xy| (m)")
        ax_yaw.plot(err["t"], err["eyaw"], label="e_yaw (rad)")
    ax_e.set_title("Position error"); ax_e.grid(True, ls="--", alpha=0.3); ax_e.legend(loc="best")
    ax_yaw.set_title("Yaw error"); ax_yaw.set_xlabel("time (s)")
    ax_yaw.grid(True, ls="--", alpha=0.3); ax_yaw.legend(loc="best")

    fig.tight_layout()
    fig.savefig(out_png, dpi=120)
    plt.close(fig)
    return Path(out_png)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Plot a pf_sim run directory")
    ap.add_argument("log_dir")
    ap.add_argument("--out", default=None, help="PNG path (default: <log_dir>/run.png)")
    a = ap.parse_args(argv)
    out = a.out or str(Path(a.log_dir) / "run.png")
    plot_run(a.log_dir, out)
    print(out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
