from .particles import Particle, ParticleSet, init_particles
from .landmarks import LandmarkObs, LandmarkMap, load_known_map
from .filter import ParticleFilter, FilterAlreadyInitialized, FilterNotInitialized, WeightingFailure
from .diagnostics import set_associations, get_associations, get_sense_coord
from .config import TUNE, load_tune

__all__ = [
    "Particle", "ParticleSet", "init_particles",
    "LandmarkObs", "LandmarkMap", "load_known_map",
    "ParticleFilter", "FilterAlreadyInitialized", "FilterNotInitialized", "WeightingFailure",
    "set_associations", "get_associations", "get_sense_coord",
    "TUNE", "load_tune",
]
