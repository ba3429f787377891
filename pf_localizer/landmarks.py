#!/usr/bin/env python3
# landmarks.py — known landmark map + vehicle-frame observations
#
# Map CSV (comments '#', blank lines ok; column names case-insensitive):
#   id,x,y            or   landmark_id,x_m,y_m   or   x,y  (ids 1..M in file order)
# Whitespace map files ("x y id" per line) are read as well.

import csv
from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass
class LandmarkObs:
    x: float
    y: float
    id: int = -1  # unknown until associated


class LandmarkMap:
    """Read-only landmark set, rows sorted by id so candidate order is pinned."""

    def __init__(self, ids, xy):
        ids = np.asarray(ids, dtype=int).reshape(-1)
        xy = np.asarray(xy, dtype=float).reshape(-1, 2)
        if ids.shape[0] != xy.shape[0]:
            raise ValueError("ids and xy length mismatch")
        if np.unique(ids).size != ids.size:
            raise ValueError("duplicate landmark ids in map")
        order = np.argsort(ids, kind="stable")
        self._ids = ids[order]
        self._xy = xy[order]
        self._ids.setflags(write=False)
        self._xy.setflags(write=False)
        self._row = {int(i): r for r, i in enumerate(self._ids)}

    @classmethod
    def from_rows(cls, rows):
        """rows: iterable of (id, x, y)."""
        rows = list(rows)
        if not rows:
            return cls(np.zeros(0, int), np.zeros((0, 2)))
        ids = [int(r[0]) for r in rows]
        xy = [[float(r[1]), float(r[2])] for r in rows]
        return cls(ids, xy)

    @property
    def ids(self): return self._ids

    @property
    def xy(self): return self._xy

    def __len__(self): return self._ids.shape[0]

    def __iter__(self):
        for i, (x, y) in zip(self._ids, self._xy):
            yield int(i), float(x), float(y)

    def row_of(self, landmark_id):
        return self._row[int(landmark_id)]

    def lookup(self, landmark_id):
        x, y = self._xy[self._row[int(landmark_id)]]
        return float(x), float(y)


def observations_array(observations):
    """LandmarkObs list / (x,y) pairs / (K,2) array → (K,2) float array."""
    if isinstance(observations, np.ndarray):
        return observations.astype(float).reshape(-1, 2)
    pts = []
    for o in observations:
        if isinstance(o, LandmarkObs):
            pts.append([o.x, o.y])
        else:
            pts.append([float(o[0]), float(o[1])])
    if not pts:
        return np.zeros((0, 2), float)
    return np.asarray(pts, float)


def _read_whitespace_map(lines):
    rows = []
    for ln in lines:
        parts = ln.replace(",", " ").split()
        if len(parts) < 3:
            raise ValueError(f"map line needs 'x y id' (got {ln.strip()!r})")
        x, y, i = float(parts[0]), float(parts[1]), int(float(parts[2]))
        rows.append((i, x, y))
    return rows


def load_known_map(path) -> LandmarkMap:
    path = Path(path)
    with open(path, "r", newline="") as f:
        clean = [ln for ln in f if not ln.lstrip().startswith("#") and ln.strip()]
    if not clean:
        return LandmarkMap.from_rows([])

    # headerless numeric file → "x y id"
    first = clean[0].replace(",", " ").split()
    try:
        [float(t) for t in first]
        headerless = True
    except ValueError:
        headerless = False
    if headerless:
        return LandmarkMap.from_rows(_read_whitespace_map(clean))

    rdr = csv.DictReader(clean)
    lk = {k.strip().lower(): k for k in rdr.fieldnames}
    def pick(*cands):
        for c in cands:
            if c in lk: return lk[c]
        return None
    ik = pick("id", "landmark_id", "id_i")
    xk = pick("x", "x_m", "xmeter", "x_f"); yk = pick("y", "y_m", "ymeter", "y_f")
    if xk is None or yk is None:
        raise KeyError(f"{path}: map needs x and y columns (got {rdr.fieldnames})")
    rows = []
    for n, r in enumerate(rdr, start=1):
        i = int(float(r[ik])) if ik is not None else n
        rows.append((i, float(r[xk]), float(r[yk])))
    return LandmarkMap.from_rows(rows)
