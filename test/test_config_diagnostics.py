import json

import pytest

from pf_localizer import (
    TUNE, Particle, get_associations, get_sense_coord, load_tune, set_associations,
)


def test_load_tune_defaults_are_a_copy():
    t = load_tune()
    t["particles"] = 1
    assert TUNE["particles"] == 1000


def test_load_tune_json_then_overrides(tmp_path):
    p = tmp_path / "tune.json"
    p.write_text(json.dumps({"particles": "250", "sensor_range_m": 30, "record_associations": "true"}))
    t = load_tune(p, particles=100)
    assert t["particles"] == 100
    assert t["sensor_range_m"] == 30.0 and isinstance(t["sensor_range_m"], float)
    assert t["record_associations"] is True


def test_load_tune_rejects_unknown_keys():
    with pytest.raises(KeyError):
        load_tune(num_particle=3)


def test_set_and_get_associations():
    p = Particle(id=1, x=0.0, y=0.0, theta=0.0)
    set_associations(p, [3, 12, 5], [1.5, 2.25, -3.0], [0.1, 0.0, 7.0])
    assert get_associations(p) == "3 12 5"
    assert get_sense_coord(p, "X") == "1.5 2.25 -3"
    assert get_sense_coord(p, "Y") == "0.1 0 7"


def test_empty_associations_give_empty_text():
    p = Particle(id=1, x=0.0, y=0.0, theta=0.0)
    assert get_associations(p) == ""
    assert get_sense_coord(p, "X") == ""


def test_set_associations_length_mismatch():
    with pytest.raises(ValueError):
        set_associations(Particle(1, 0.0, 0.0, 0.0), [1, 2], [0.0], [0.0, 1.0])


def test_sense_coord_axis():
    with pytest.raises(ValueError):
        get_sense_coord(Particle(1, 0.0, 0.0, 0.0), "Z")
