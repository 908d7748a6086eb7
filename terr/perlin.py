"""Perlin gradient noise."""

from __future__ import annotations

import logging

import numpy as np

from terr.config import ConfigurationError, PerlinConfig, PerlinOctavesConfig
from terr.heightfield import HeightField
from terr.rng import RandomSource

logger = logging.getLogger(__name__)

# PCG output permutation (XSH-RR) applied to lattice keys.
_PCG_MULTIPLIER = np.uint64(14647171131086947261)
_ROW_STRIDE = np.uint64(1 << 32)


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * (3.0 - 2.0 * t)


def _lerp(t: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def _hash(keys: np.ndarray, mask: int) -> np.ndarray:
    x = keys * _PCG_MULTIPLIER
    rot = (x >> np.uint64(59)).astype(np.uint32)
    xsh = (((x >> np.uint64(18)) ^ x) >> np.uint64(27)).astype(np.uint32)
    rotated = (xsh >> rot) | (xsh << ((np.uint32(32) - rot) & np.uint32(31)))
    return (rotated & np.uint32(mask)).astype(np.intp)


class Perlin:
    """Gradient noise over an infinite plane.

    Coordinates are multiplied by `frequency` before sampling. Each lattice
    corner picks one of the `n` gradients (n a power of two) through a PCG
    hash of its integer coordinates.
    """

    def __init__(self, frequency: float, gradients: np.ndarray) -> None:
        gradients = np.asarray(gradients, dtype=np.float64)
        count = gradients.shape[0] if gradients.ndim == 2 else 0
        if count == 0 or gradients.shape[1] != 2:
            raise ConfigurationError("gradients must be a non-empty (n, 2) array")
        if count & (count - 1):
            raise ConfigurationError(f"gradient count must be a power of two (got {count})")
        self.frequency = float(frequency)
        self.gradients = gradients
        self._mask = count - 1

    @classmethod
    def random(
        cls,
        frequency: float,
        count: int,
        rng: np.random.Generator,
        *,
        exponential: bool = False,
    ) -> "Perlin":
        """Sample `count` unit gradients.

        With `exponential` each gradient is scaled by an Exp(1) sample, which
        gives steeper, more varied slopes than classic Perlin noise.
        """

        angles = rng.uniform(0.0, 2.0 * np.pi, size=count)
        gradients = np.column_stack((np.cos(angles), np.sin(angles)))
        if exponential:
            gradients *= rng.standard_exponential(size=count)[:, None]
        return cls(frequency, gradients)

    def sample(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        px = np.asarray(x, dtype=np.float64) * self.frequency
        py = np.asarray(y, dtype=np.float64) * self.frequency
        x0 = np.floor(px)
        y0 = np.floor(py)
        rx = px - x0
        ry = py - y0

        key = x0.astype(np.int64).astype(np.uint64) + y0.astype(np.int64).astype(np.uint64) * _ROW_STRIDE
        g00 = self.gradients[_hash(key, self._mask)]
        g01 = self.gradients[_hash(key + np.uint64(1), self._mask)]
        g10 = self.gradients[_hash(key + _ROW_STRIDE, self._mask)]
        g11 = self.gradients[_hash(key + _ROW_STRIDE + np.uint64(1), self._mask)]

        sx = _fade(rx)
        sy = _fade(ry)
        top = _lerp(sx, rx * g00[..., 0] + ry * g00[..., 1], (rx - 1.0) * g01[..., 0] + ry * g01[..., 1])
        bottom = _lerp(
            sx,
            rx * g10[..., 0] + (ry - 1.0) * g10[..., 1],
            (rx - 1.0) * g11[..., 0] + (ry - 1.0) * g11[..., 1],
        )
        return _lerp(sy, top, bottom)


def shape_slopes(values: np.ndarray, exponent: float) -> np.ndarray:
    """Sign-preserving power curve; exponents above 1 flatten lowlands."""

    if exponent == 1.0:
        return values
    return np.sign(values) * np.abs(values) ** exponent


def generate_perlin(config: PerlinConfig, seed: int) -> HeightField:
    logger.info(f"Perlin {config.width}x{config.height} (seed {seed}, frequency {config.frequency})")
    rng = RandomSource(seed).fork("perlin").generator()
    surface = Perlin.random(
        config.frequency,
        config.gradient_count,
        rng,
        exponential=config.exponential_gradients,
    )
    field = HeightField(config.width, config.height)
    field.add_surface(surface, config.amplitude)
    return field.freeze()


def generate_perlin_octaves(config: PerlinOctavesConfig, seed: int) -> HeightField:
    """Sum Perlin layers of rising frequency and falling amplitude."""

    logger.info(f"Perlin octaves {config.width}x{config.height} (seed {seed}, {config.octaves} octaves)")
    rng = RandomSource(seed).fork("perlin-octaves").generator()
    field = HeightField(config.width, config.height)
    amplitude = config.amplitude
    frequency = config.frequency
    for octave in range(config.octaves):
        logger.debug(f"octave {octave}: frequency={frequency:.6g} amplitude={amplitude:.6g}")
        surface = Perlin.random(
            frequency,
            config.gradient_count,
            rng,
            exponential=config.exponential_gradients,
        )
        field.add_surface(surface, amplitude)
        amplitude *= config.persistence
        frequency *= config.lacunarity
    field.values[...] = shape_slopes(field.values, config.exponent)
    return field.freeze()
