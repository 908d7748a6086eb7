"""Fault-line displacement."""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from terr.config import FAULT_PROFILES, ConfigurationError, FaultConfig, FaultDiamondSquareConfig
from terr.displacement import build_diamond_square
from terr.heightfield import HeightField
from terr.rng import RandomSource

logger = logging.getLogger(__name__)

Profile = Callable[[np.ndarray], np.ndarray]


def bump_profile(height: float, width: float) -> Profile:
    """Smooth bump on the positive side, zero slope where it meets the plain."""

    def displacement(d: np.ndarray) -> np.ndarray:
        inside = (d >= 0.0) & (d < width)
        return np.where(inside, height * (1.0 - (d / width) ** 2) ** 2, 0.0)

    return displacement


def exponential_profile(height: float, width: float) -> Profile:
    """Cliff on the fault line decaying as exp(-d / width)."""

    def displacement(d: np.ndarray) -> np.ndarray:
        return np.where(d >= 0.0, height * np.exp(-np.maximum(d, 0.0) / width), 0.0)

    return displacement


_PROFILES = {"bump": bump_profile, "exponential": exponential_profile}


def fault_displacement(field: HeightField, rng: np.random.Generator, displacement: Profile) -> None:
    """Raise `field` along one random fault line.

    The line passes through a random point of the unit square in a random
    direction. Every cell is raised by `displacement(d)`, `d` being its signed
    distance from the line in normalized grid units. The fault plane is
    vertical, straight and uniform along its length.
    """

    if field.frozen:
        raise ValueError("height field is frozen")
    px, py = rng.uniform(0.0, 1.0, size=2)
    angle = rng.uniform(0.0, 2.0 * np.pi)
    xs = np.arange(field.width, dtype=np.float64) / field.width - px
    ys = np.arange(field.height, dtype=np.float64) / field.height - py
    d = xs[None, :] * np.cos(angle) + ys[:, None] * np.sin(angle)
    field.values[...] += displacement(d)


def apply_faults(field: HeightField, config: FaultConfig, rng: np.random.Generator) -> None:
    """Apply `config.fault_count` faults of log-normal width."""

    if config.profile not in _PROFILES:
        raise ConfigurationError(f"profile must be one of {', '.join(FAULT_PROFILES)} (got {config.profile!r})")
    make_profile = _PROFILES[config.profile]
    for index in range(config.fault_count):
        width = float(rng.lognormal(config.width_log_mean, config.width_log_sigma))
        height = config.height_factor * width
        logger.debug(f"fault {index}: width={width:.4g} height={height:.4g}")
        fault_displacement(field, rng, make_profile(height, width))


def generate_fault(config: FaultConfig, seed: int) -> HeightField:
    logger.info(f"Faults {config.width}x{config.height} (seed {seed}, {config.fault_count} faults)")
    rng = RandomSource(seed).fork("fault").generator()
    field = HeightField(config.width, config.height)
    apply_faults(field, config, rng)
    return field.freeze()


def generate_fault_diamond_square(config: FaultDiamondSquareConfig, seed: int) -> HeightField:
    """Faults applied on top of diamond-square terrain."""

    logger.info(f"Faults + diamond-square {config.size}x{config.size} (seed {seed})")
    source = RandomSource(seed).fork("fault-ds")
    field = build_diamond_square(config.fractal, source.fork("fractal").generator())
    apply_faults(field, config.fault, source.fork("fault").generator())
    return field.freeze()
