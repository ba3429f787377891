#!/usr/bin/env python3
# diagnostics.py — per-particle association text for external reporting
# (space-separated, no trailing space; never read back by the filter)

from .particles import Particle


def set_associations(particle: Particle, associations, sense_x, sense_y):
    """Attach matched landmark ids and their map-frame x/y to a particle."""
    if not (len(associations) == len(sense_x) == len(sense_y)):
        raise ValueError("associations, sense_x and sense_y must have equal length")
    particle.associations = [int(v) for v in associations]
    particle.sense_x = [float(v) for v in sense_x]
    particle.sense_y = [float(v) for v in sense_y]
    return particle


def get_associations(particle: Particle) -> str:
    return " ".join(str(v) for v in particle.associations)


def get_sense_coord(particle: Particle, coord: str) -> str:
    if coord == "X":
        v = particle.sense_x
    elif coord == "Y":
        v = particle.sense_y
    else:
        raise ValueError(f"coord must be 'X' or 'Y' (got {coord!r})")
    # 6 significant digits
    return " ".join(f"{x:.6g}" for x in v)
