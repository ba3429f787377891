#!/usr/bin/env python3
# association.py — range query over the known map + nearest-neighbour DA
#
# SpatialIndex.in_range() returns candidate map rows (ascending, i.e. id order)
# within r of a point, inclusive. Two backends with identical results:
#   linear : O(M) scan per query
#   kdtree : scipy KD-tree ball query
# nearest_neighbor() gives each observation the id of the closest candidate;
# ties go to the first candidate in enumeration order.

import numpy as np
from scipy.spatial import cKDTree

from .landmarks import LandmarkMap

NO_MATCH = -1


class SpatialIndex:
    name = "base"

    def __init__(self, lmap: LandmarkMap):
        self.lmap = lmap

    def in_range(self, x, y, r):
        raise NotImplementedError


class LinearScanIndex(SpatialIndex):
    name = "linear"

    def in_range(self, x, y, r):
        xy = self.lmap.xy
        if xy.shape[0] == 0:
            return np.zeros(0, int)
        d = np.hypot(xy[:, 0] - x, xy[:, 1] - y)
        return np.flatnonzero(d <= r)


class KDTreeIndex(SpatialIndex):
    name = "kdtree"

    def __init__(self, lmap: LandmarkMap):
        super().__init__(lmap)
        self._tree = cKDTree(lmap.xy) if len(lmap) else None

    def in_range(self, x, y, r):
        if self._tree is None:
            return np.zeros(0, int)
        # ball query compares squared distances; pad, then apply the same
        # hypot <= r test as the linear scan
        rows = np.asarray(self._tree.query_ball_point([x, y], r*(1.0 + 1e-9) + 1e-12), dtype=int)
        xy = self.lmap.xy[rows]
        rows = rows[np.hypot(xy[:, 0] - x, xy[:, 1] - y) <= r]
        return np.sort(rows)


_INDEXES = {c.name: c for c in (LinearScanIndex, KDTreeIndex)}
INDEX_KINDS = tuple(sorted(_INDEXES))


def make_index(lmap: LandmarkMap, kind="kdtree") -> SpatialIndex:
    try:
        return _INDEXES[kind](lmap)
    except KeyError:
        raise ValueError(f"unknown spatial index '{kind}' (use one of {sorted(_INDEXES)})") from None


def nearest_neighbor(cand_xy, cand_ids, obs_xy):
    """(K,) ids of the nearest candidate per observation, and the distances.

    Empty candidate set → every id is NO_MATCH, distances inf.
    """
    obs_xy = np.asarray(obs_xy, float).reshape(-1, 2)
    cand_xy = np.asarray(cand_xy, float).reshape(-1, 2)
    K = obs_xy.shape[0]
    if cand_xy.shape[0] == 0 or K == 0:
        return np.full(K, NO_MATCH, int), np.full(K, np.inf)
    D = np.hypot(obs_xy[:, None, 0] - cand_xy[None, :, 0],
                 obs_xy[:, None, 1] - cand_xy[None, :, 1])  # (K, C)
    j = np.argmin(D, axis=1)  # first minimum wins
    return np.asarray(cand_ids, int)[j], D[np.arange(K), j]
