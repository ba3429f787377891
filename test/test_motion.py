import math

import numpy as np
import pytest

from pf_localizer.motion import ctrv_predict, clamp_yaw_rate, wrap_angle, YAW_RATE_EPS
from pf_localizer.particles import init_particles


def test_zero_noise_is_deterministic():
    P = np.array([[1.0, 2.0, 0.3], [1.0, 2.0, 0.3]])
    ctrv_predict(P, 0.1, [0, 0, 0], 5.0, 0.2, rng=np.random.default_rng(0))
    assert np.array_equal(P[0], P[1])


def test_turning_motion_matches_closed_form():
    x, y, th, dt, v, w = 1.0, -2.0, 0.5, 0.7, 3.0, 0.4
    P = np.array([[x, y, th]])
    ctrv_predict(P, dt, [0, 0, 0], v, w)
    assert P[0, 0] == pytest.approx(x + v/w*(math.sin(th + w*dt) - math.sin(th)))
    assert P[0, 1] == pytest.approx(y + v/w*(math.cos(th) - math.cos(th + w*dt)))
    assert P[0, 2] == pytest.approx(th + w*dt)


@pytest.mark.parametrize("theta", [0.0, 0.8, -2.5])
def test_straight_line_limit(theta):
    P = np.array([[0.0, 0.0, theta]])
    ctrv_predict(P, 1.0, [0, 0, 0], 2.0, 0.0)
    assert P[0, 0] == pytest.approx(2.0*math.cos(theta), abs=1e-4)
    assert P[0, 1] == pytest.approx(2.0*math.sin(theta), abs=1e-4)
    assert P[0, 2] == pytest.approx(theta, abs=1e-4)


def test_yaw_rate_clamp():
    assert clamp_yaw_rate(0.0) == YAW_RATE_EPS
    assert clamp_yaw_rate(-1e-7) == YAW_RATE_EPS
    assert clamp_yaw_rate(-0.5) == -0.5


def test_noise_is_applied_per_axis():
    rng = np.random.default_rng(4)
    P = np.zeros((20000, 3))
    ctrv_predict(P, 1.0, [0.5, 0.2, 0.05], 0.0, 0.0, rng=rng)
    assert np.std(P[:, 0]) == pytest.approx(0.5, rel=0.05)
    assert np.std(P[:, 1]) == pytest.approx(0.2, rel=0.05)
    assert np.std(P[:, 2]) == pytest.approx(0.05, rel=0.05)


def test_negative_noise_rejected():
    with pytest.raises(ValueError):
        ctrv_predict(np.zeros((1, 3)), 1.0, [-1, 0, 0], 1.0, 0.1)


def test_noise_without_rng_rejected():
    P = np.zeros((2, 3))
    with pytest.raises(ValueError):
        ctrv_predict(P, 1.0, [0.1, 0.0, 0.0], 1.0, 0.1)
    assert np.all(P == 0.0)


def test_init_particles_spread_and_ids():
    ps = init_particles(3.0, 4.0, 0.1, [0.0, 0.0, 0.0], 7, np.random.default_rng(1))
    assert len(ps) == 7
    assert list(ps.ids) == [1, 2, 3, 4, 5, 6, 7]
    assert np.all(ps.weights == 1.0)
    assert np.all(ps.x == 3.0) and np.all(ps.y == 4.0) and np.all(ps.theta == 0.1)


def test_init_particles_rejects_bad_size():
    with pytest.raises(ValueError):
        init_particles(0, 0, 0, [1, 1, 1], 0, np.random.default_rng(1))


def test_wrap_angle():
    assert wrap_angle(2*math.pi + 0.5) == pytest.approx(0.5)
    assert wrap_angle(-4.0) == pytest.approx(2*math.pi - 4.0)
    assert wrap_angle(0.25) == pytest.approx(0.25)
