"""Generator registry and dispatch by configuration type."""

from __future__ import annotations

from typing import Any, Callable

from terr.config import (
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
from terr.displacement import generate_diamond_square, generate_midpoint
from terr.fault import generate_fault, generate_fault_diamond_square
from terr.heightfield import HeightField
from terr.noise import generate_flat, generate_noise
from terr.perlin import generate_perlin, generate_perlin_octaves
from terr.voronoi import generate_voronoi, generate_voronoi_diamond_square

GeneratorFn = Callable[[Any, int], HeightField]

GENERATOR_KINDS: dict[str, tuple[type, GeneratorFn]] = {
    "flat": (FlatConfig, generate_flat),
    "noise": (NoiseConfig, generate_noise),
    "fractal-md": (MidpointConfig, generate_midpoint),
    "fractal-ds": (DiamondSquareConfig, generate_diamond_square),
    "voronoi": (VoronoiConfig, generate_voronoi),
    "voronoi-ds": (VoronoiDiamondSquareConfig, generate_voronoi_diamond_square),
    "perlin": (PerlinConfig, generate_perlin),
    "perlin-octaves": (PerlinOctavesConfig, generate_perlin_octaves),
    "fault": (FaultConfig, generate_fault),
    "fault-ds": (FaultDiamondSquareConfig, generate_fault_diamond_square),
}


def default_config(kind: str) -> Any:
    """Return the default configuration for a generator kind."""

    return _lookup(kind)[0]()


def kind_of(config: Any) -> str:
    """Name of the generator kind that accepts `config`."""

    for kind, (config_type, _) in GENERATOR_KINDS.items():
        if type(config) is config_type:
            return kind
    raise ConfigurationError(f"no generator accepts {type(config).__name__}")


def generate(config: Any, seed: int) -> HeightField:
    """Run the generator selected by the type of `config`."""

    return GENERATOR_KINDS[kind_of(config)][1](config, seed)


def _lookup(kind: str) -> tuple[type, GeneratorFn]:
    try:
        return GENERATOR_KINDS[kind]
    except KeyError:
        raise ConfigurationError(
            f"unknown generator kind {kind!r}; expected one of {', '.join(GENERATOR_KINDS)}"
        ) from None
