"""Fractal subdivision: midpoint displacement and diamond-square.

Both algorithms refine a square grid of side `2**k + 1` level by level.
At level `i` the current quads have side `2**(k - i)` and every new point is
the mean of already-known neighbours plus a random perturbation scaled by
`displacement * roughness**i`. Levels must run in order; the points created
within one pass only read points from earlier passes, so each pass is
computed as a single vectorized step.
"""

from __future__ import annotations

import logging

import numpy as np

from terr.config import (
    ConfigurationError,
    DiamondSquareConfig,
    DisplacementConfig,
    MidpointConfig,
    subdivision_levels,
)
from terr.heightfield import HeightField
from terr.rng import RandomSource, draw

logger = logging.getLogger(__name__)


def level_amplitudes(levels: int, displacement: float, roughness: float) -> list[float]:
    """Perturbation amplitude used at each subdivision level."""

    return [displacement * roughness**level for level in range(levels)]


def midpoint_displacement(
    field: HeightField,
    rng: np.random.Generator,
    *,
    displacement: float,
    roughness: float = 0.5,
    distribution: str = "uniform",
    skip_levels: int = 0,
) -> None:
    """Refine `field` in place by midpoint displacement.

    The four corners must already hold their heights. Each level first sets
    every edge midpoint to the mean of the edge's endpoints, then every quad
    centre to the mean of its four edge midpoints, perturbing each new point.
    `skip_levels` leaves the coarsest levels untouched, for fields whose
    coarse points were set by another source.
    """

    levels = _check_square(field, skip_levels)
    h = field.values
    last = field.width - 1
    amplitudes = level_amplitudes(levels, displacement, roughness)

    for level in range(skip_levels, levels):
        step = 2 ** (levels - level)
        half = step // 2
        amp = amplitudes[level]
        logger.debug(f"midpoint level {level}: step={step} amplitude={amp:.6g}")

        rows = h[0::step, 0:last:step] + h[0::step, step::step]
        h[0::step, half::step] = rows * 0.5 + amp * draw(rng, distribution, rows.shape)

        cols = h[0:last:step, 0::step] + h[step::step, 0::step]
        h[half::step, 0::step] = cols * 0.5 + amp * draw(rng, distribution, cols.shape)

        centres = (
            h[half::step, 0:last:step]
            + h[half::step, step::step]
            + h[0:last:step, half::step]
            + h[step::step, half::step]
        )
        h[half::step, half::step] = centres * 0.25 + amp * draw(rng, distribution, centres.shape)


def diamond_square(
    field: HeightField,
    rng: np.random.Generator,
    *,
    displacement: float,
    roughness: float = 0.5,
    distribution: str = "uniform",
    skip_levels: int = 0,
) -> None:
    """Refine `field` in place by the diamond-square algorithm.

    The square pass sets each quad centre from its four corners. The diamond
    pass then sets each edge midpoint from its four neighbours (two corners
    and two centres), or three along the border.
    """

    levels = _check_square(field, skip_levels)
    h = field.values
    last = field.width - 1
    amplitudes = level_amplitudes(levels, displacement, roughness)

    for level in range(skip_levels, levels):
        step = 2 ** (levels - level)
        half = step // 2
        amp = amplitudes[level]
        logger.debug(f"diamond-square level {level}: step={step} amplitude={amp:.6g}")

        corners = (
            h[0:last:step, 0:last:step]
            + h[0:last:step, step::step]
            + h[step::step, 0:last:step]
            + h[step::step, step::step]
        )
        h[half::step, half::step] = corners * 0.25 + amp * draw(rng, distribution, corners.shape)

        edge_rows = np.arange(0, last + 1, step)
        mid_cols = np.arange(half, last, step)
        mean = _diamond_mean(h, edge_rows, mid_cols, half)
        h[np.ix_(edge_rows, mid_cols)] = mean + amp * draw(rng, distribution, mean.shape)

        mid_rows = np.arange(half, last, step)
        edge_cols = np.arange(0, last + 1, step)
        mean = _diamond_mean(h, mid_rows, edge_cols, half)
        h[np.ix_(mid_rows, edge_cols)] = mean + amp * draw(rng, distribution, mean.shape)


def generate_midpoint(config: MidpointConfig, seed: int) -> HeightField:
    """Generate a midpoint-displacement terrain."""

    logger.info(f"Midpoint displacement {config.size}x{config.size} (seed {seed}, roughness {config.roughness})")
    rng = RandomSource(seed).fork("fractal-md").generator()
    field = _cornered_field(config, rng)
    midpoint_displacement(
        field,
        rng,
        displacement=config.displacement,
        roughness=config.roughness,
        distribution=config.distribution,
        skip_levels=config.skip_levels,
    )
    return field.freeze()


def generate_diamond_square(config: DiamondSquareConfig, seed: int) -> HeightField:
    """Generate a diamond-square terrain."""

    logger.info(f"Diamond-square {config.size}x{config.size} (seed {seed}, roughness {config.roughness})")
    rng = RandomSource(seed).fork("fractal-ds").generator()
    return build_diamond_square(config, rng).freeze()


def build_diamond_square(config: DisplacementConfig, rng: np.random.Generator) -> HeightField:
    """Unfrozen diamond-square field, for composite generators to build on."""

    field = _cornered_field(config, rng)
    diamond_square(
        field,
        rng,
        displacement=config.displacement,
        roughness=config.roughness,
        distribution=config.distribution,
        skip_levels=config.skip_levels,
    )
    return field


def _cornered_field(config: DisplacementConfig, rng: np.random.Generator) -> HeightField:
    field = HeightField(config.size, config.size)
    if config.corners is not None:
        corners = [float(value) for value in config.corners]
    else:
        corners = rng.lognormal(config.corner_log_mean, config.corner_log_sigma, size=4).tolist()
    last = config.size - 1
    for (x, y), value in zip(((0, 0), (last, 0), (0, last), (last, last)), corners):
        field.set(x, y, value)
    logger.debug(f"corner heights: {', '.join(f'{value:.4g}' for value in corners)}")
    return field


def _check_square(field: HeightField, skip_levels: int) -> int:
    if field.width != field.height:
        raise ConfigurationError(f"height field must be square (got {field.width}x{field.height})")
    if field.frozen:
        raise ValueError("height field is frozen")
    levels = subdivision_levels(field.width)
    if not 0 <= skip_levels <= levels:
        raise ConfigurationError(f"skip_levels must lie in [0, {levels}] (got {skip_levels})")
    return levels


def _diamond_mean(h: np.ndarray, rows: np.ndarray, cols: np.ndarray, half: int) -> np.ndarray:
    """Mean of the up/down/left/right neighbours at distance `half` that exist."""

    size = h.shape[0]
    total = np.zeros((rows.size, cols.size), dtype=np.float64)
    count = np.zeros((rows.size, cols.size), dtype=np.float64)
    for dy, dx in ((-half, 0), (half, 0), (0, -half), (0, half)):
        ny = rows + dy
        nx = cols + dx
        valid = ((ny >= 0) & (ny < size))[:, None] & ((nx >= 0) & (nx < size))[None, :]
        neighbours = h[np.ix_(np.clip(ny, 0, size - 1), np.clip(nx, 0, size - 1))]
        total += np.where(valid, neighbours, 0.0)
        count += valid
    return total / count
