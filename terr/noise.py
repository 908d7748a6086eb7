"""Baseline generators: flat terrain and uncorrelated noise."""

from __future__ import annotations

import logging

import numpy as np

from terr.config import FlatConfig, NoiseConfig
from terr.heightfield import HeightField
from terr.rng import RandomSource, draw

logger = logging.getLogger(__name__)


def add_noise(
    field: HeightField,
    rng: np.random.Generator,
    *,
    scale: float,
    distribution: str = "normal",
) -> None:
    """Add one independent sample per cell, `width * height` draws in total."""

    if field.frozen:
        raise ValueError("height field is frozen")
    field.values[...] += scale * draw(rng, distribution, field.shape)


def generate_flat(config: FlatConfig, seed: int) -> HeightField:
    """Constant-elevation terrain. The seed is accepted for uniformity only."""

    logger.info(f"Flat {config.width}x{config.height} at elevation {config.elevation}")
    return HeightField(config.width, config.height, fill=config.elevation).freeze()


def generate_noise(config: NoiseConfig, seed: int) -> HeightField:
    logger.info(f"Noise {config.width}x{config.height} (seed {seed}, {config.distribution} x {config.scale})")
    rng = RandomSource(seed).fork("noise").generator()
    field = HeightField(config.width, config.height, fill=config.base)
    add_noise(field, rng, scale=config.scale, distribution=config.distribution)
    return field.freeze()
