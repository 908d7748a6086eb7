"""Procedural height-field generation."""

from .config import (
    DEFAULT_SIZE,
    ConfigurationError,
    DiamondSquareConfig,
    FaultConfig,
    FaultDiamondSquareConfig,
    FlatConfig,
    MidpointConfig,
    NoiseConfig,
    PerlinConfig,
    PerlinOctavesConfig,
    VoronoiConfig,
    VoronoiDiamondSquareConfig,
)
from .generators import GENERATOR_KINDS, default_config, generate
from .heightfield import HeightField
from .rng import RandomSource

__all__ = [
    "DEFAULT_SIZE",
    "ConfigurationError",
    "DiamondSquareConfig",
    "FaultConfig",
    "FaultDiamondSquareConfig",
    "FlatConfig",
    "GENERATOR_KINDS",
    "HeightField",
    "MidpointConfig",
    "NoiseConfig",
    "PerlinConfig",
    "PerlinOctavesConfig",
    "RandomSource",
    "VoronoiConfig",
    "VoronoiDiamondSquareConfig",
    "default_config",
    "generate",
]
