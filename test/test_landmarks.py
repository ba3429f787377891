import numpy as np
import pytest

from pf_localizer.landmarks import LandmarkMap, LandmarkObs, load_known_map, observations_array


def test_csv_with_ids_and_comments(tmp_path):
    p = tmp_path / "map.csv"
    p.write_text("# known map\nID,X_m,Y_m\n\n3,1.5,2.0\n1,-4,0.25\n2,0,7\n")
    lmap = load_known_map(p)
    assert list(lmap.ids) == [1, 2, 3]
    assert lmap.lookup(3) == (1.5, 2.0)
    assert lmap.xy[0] == pytest.approx([-4.0, 0.25])


def test_csv_without_ids_numbers_in_file_order(tmp_path):
    p = tmp_path / "map.csv"
    p.write_text("x,y\n5,5\n6,6\n")
    lmap = load_known_map(p)
    assert list(lmap) == [(1, 5.0, 5.0), (2, 6.0, 6.0)]


def test_whitespace_map_format(tmp_path):
    p = tmp_path / "map_data.txt"
    p.write_text("92.064\t-34.777\t1\n61.109\t-47.132\t2\n")
    lmap = load_known_map(p)
    assert len(lmap) == 2
    assert lmap.lookup(2) == pytest.approx((61.109, -47.132))


def test_headerless_map_needs_three_fields(tmp_path):
    p = tmp_path / "map.csv"
    p.write_text("10.0,0.0\n0.0,10.0\n")
    with pytest.raises(ValueError, match="10.0,0.0"):
        load_known_map(p)


def test_missing_columns(tmp_path):
    p = tmp_path / "map.csv"
    p.write_text("id,color\n1,blue\n")
    with pytest.raises(KeyError):
        load_known_map(p)


def test_empty_file(tmp_path):
    p = tmp_path / "map.csv"
    p.write_text("# nothing here\n")
    assert len(load_known_map(p)) == 0


def test_map_is_read_only_and_ids_unique():
    lmap = LandmarkMap([2, 1], [[1, 1], [0, 0]])
    with pytest.raises(ValueError):
        lmap.xy[0, 0] = 5.0
    with pytest.raises(ValueError):
        LandmarkMap([1, 1], [[0, 0], [1, 1]])
    with pytest.raises(KeyError):
        lmap.lookup(99)


def test_observations_array_inputs():
    a = observations_array([LandmarkObs(1.0, 2.0), LandmarkObs(3.0, 4.0, id=7)])
    assert a == pytest.approx(np.array([[1, 2], [3, 4]]))
    assert observations_array([(1, 2)]).shape == (1, 2)
    assert observations_array([]).shape == (0, 2)
    assert observations_array(np.array([1.0, 2.0])).shape == (1, 2)
