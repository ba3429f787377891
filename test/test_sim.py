import csv

import numpy as np
import pytest

from pf_localizer import LandmarkMap, load_tune
from pf_localizer.likelihood import to_map_frame
from pf_localizer.sim import RunLog, car_frame, main, run, simulate
from pf_localizer.viz import plot_run


def test_car_frame_inverts_map_frame():
    pose = (3.0, -1.0, 0.7)
    pts = np.array([[5.0, 2.0], [-1.0, 4.0]])
    assert to_map_frame(pose, car_frame(pose, pts)) == pytest.approx(pts)


def test_simulate_observes_only_in_range():
    lmap = LandmarkMap([1, 2], [[5.0, 0.0], [500.0, 0.0]])
    steps = list(simulate(lmap, 3, 0.1, np.random.default_rng(0), sensor_range=50.0, meas_sigma=(1e-9, 1e-9)))
    assert len(steps) == 3
    assert steps[0]["gt"] == (0.0, 0.0, 0.0)
    assert steps[0]["obs"] == pytest.approx(np.array([[5.0, 0.0]]), abs=1e-6)


def test_short_run_tracks_and_logs(tmp_path):
    tune = load_tune(particles=300, seed=2)
    s = run(tune, steps=40, dt=0.1, log_root=tmp_path, n_landmarks=30, extent=40.0)
    assert s["rmse_xy"] < 1.0
    assert s["weighting_failures"] == 0
    with open(f"{s['log_dir']}/pose_est.csv", newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 40 and set(rows[0]) == {"t", "x", "y", "yaw"}
    with open(f"{s['log_dir']}/assoc.csv", newline="") as f:
        assoc = list(csv.DictReader(f))
    assert list(assoc[0]) == ["t", "n_obs", "n_blind", "best_weight", "neff"]
    assert all(int(r["n_blind"]) >= 0 for r in assoc)


def test_run_plots(tmp_path):
    tune = load_tune(particles=50, seed=1)
    out = tmp_path / "state.png"
    s = run(tune, steps=5, log_root=tmp_path / "logs", plot=out, n_landmarks=10, extent=20.0)
    assert out.exists() and out.stat().st_size > 0
    assert (tmp_path / "state_run.png").exists()
    assert plot_run(s["log_dir"], tmp_path / "again.png").exists()


def test_runlog_context_manager(tmp_path):
    with RunLog(tmp_path) as rl:
        rl.row("est", 0.5, 1.0, 2.0, 0.1)
    text = (rl.log_dir / "pose_est.csv").read_text().splitlines()
    assert text == ["t,x,y,yaw", "0.500000,1.000000,2.000000,0.100000"]


def test_cli(tmp_path, capsys):
    m = tmp_path / "map.csv"
    m.write_text("id,x,y\n1,10,0\n2,0,10\n3,-10,0\n4,0,-10\n5,20,5\n")
    assert main(["--map", str(m), "--steps", "10", "--particles", "100", "--seed", "5",
                 "--index", "linear", "--log-root", str(tmp_path / "logs")]) == 0
    assert "rmse_xy=" in capsys.readouterr().out
