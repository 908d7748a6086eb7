"""Voronoi cell features."""

from __future__ import annotations

import logging

import numpy as np
from scipy.spatial.distance import cdist

from terr.config import METRICS, ConfigurationError, VoronoiConfig, VoronoiDiamondSquareConfig
from terr.displacement import build_diamond_square
from terr.heightfield import HeightField
from terr.rng import RandomSource

logger = logging.getLogger(__name__)

_CDIST_METRICS = {
    "euclidean": "euclidean",
    "squared": "sqeuclidean",
    "manhattan": "cityblock",
    "chebyshev": "chebyshev",
}


class Voronoi:
    """A set of seed points in the unit square.

    Grid cells are mapped onto the unit square with `HeightField.coords`, so
    the same points describe the same diagram at any resolution.
    """

    def __init__(self, points: np.ndarray) -> None:
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2 or points.shape[0] == 0:
            raise ConfigurationError("points must be a non-empty (n, 2) array")
        self.points = points

    @classmethod
    def random(cls, count: int, rng: np.random.Generator) -> "Voronoi":
        if count <= 0:
            raise ConfigurationError(f"count must be positive (got {count})")
        return cls(rng.uniform(0.0, 1.0, size=(count, 2)))

    def distances(self, field: HeightField, metric: str = "euclidean") -> np.ndarray:
        """Distance from every cell to every point, shaped (height, width, n)."""

        if metric not in _CDIST_METRICS:
            raise ConfigurationError(f"metric must be one of {', '.join(METRICS)} (got {metric!r})")
        xx, yy = field.coords()
        cells = np.column_stack((xx.ravel(), yy.ravel()))
        dist = cdist(cells, self.points, metric=_CDIST_METRICS[metric])
        return dist.reshape(field.height, field.width, len(self.points))

    def nearest(self, field: HeightField, metric: str = "euclidean") -> np.ndarray:
        """Index of the nearest point per cell; ties go to the lowest index."""

        return np.argmin(self.distances(field, metric), axis=-1)

    def apply_to(
        self,
        field: HeightField,
        weights: tuple[float, ...] | list[float] | np.ndarray,
        metric: str = "euclidean",
    ) -> None:
        """Add `sum(weights[i] * d[i])` to every cell, `d` sorted ascending.

        Weights beyond the number of points are ignored.
        """

        if field.frozen:
            raise ValueError("height field is frozen")
        w = np.asarray(weights, dtype=np.float64)
        used = min(w.size, len(self.points))
        ordered = np.sort(self.distances(field, metric), axis=-1)[..., :used]
        field.values[...] += ordered @ w[:used]


def generate_voronoi(config: VoronoiConfig, seed: int) -> HeightField:
    logger.info(f"Voronoi {config.width}x{config.height} (seed {seed}, {config.num_points} points)")
    rng = RandomSource(seed).fork("voronoi").generator()
    field = HeightField(config.width, config.height)
    Voronoi.random(config.num_points, rng).apply_to(field, config.weights, config.metric)
    return field.freeze()


def generate_voronoi_diamond_square(config: VoronoiDiamondSquareConfig, seed: int) -> HeightField:
    """Voronoi base heights with diamond-square detail added on top."""

    logger.info(f"Voronoi + diamond-square {config.size}x{config.size} (seed {seed})")
    source = RandomSource(seed).fork("voronoi-ds")
    field = build_diamond_square(config.fractal, source.fork("fractal").generator())
    diagram = Voronoi.random(config.voronoi.num_points, source.fork("voronoi").generator())
    diagram.apply_to(field, config.voronoi.weights, config.voronoi.metric)
    return field.freeze()
