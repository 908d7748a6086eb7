"""Preview rasters for finished height fields."""

from __future__ import annotations

import numpy as np


def surface_normals(heights: np.ndarray, cell_size: float, z_factor: float = 1.0) -> np.ndarray:
    """Unit normals shaped (rows, cols, 3) with x east, y north and z up.

    Row 0 is the northern edge, so the north component flips the row
    gradient.
    """

    d_rows, d_cols = np.gradient(np.asarray(heights, dtype=np.float64), cell_size)
    normals = np.stack(
        (-z_factor * d_cols, z_factor * d_rows, np.ones_like(d_cols)),
        axis=-1,
    )
    return normals / np.linalg.norm(normals, axis=-1, keepdims=True)


def hillshade(
    heights: np.ndarray,
    *,
    cell_size: float = 1.0,
    azimuth_deg: float = 315.0,
    altitude_deg: float = 45.0,
    z_factor: float = 1.0,
) -> np.ndarray:
    """8-bit Lambertian shading lit from `azimuth_deg` (clockwise from north).

    A flat field shades to `255 * sin(altitude)`.
    """

    if heights.ndim != 2:
        raise ValueError("heights must be a 2D array")
    if min(heights.shape) < 2:
        raise ValueError("hillshade needs at least 2 cells along each axis")
    if cell_size <= 0:
        raise ValueError("cell_size must be positive")

    azimuth = np.deg2rad(azimuth_deg)
    altitude = np.deg2rad(altitude_deg)
    light = np.array(
        [
            np.sin(azimuth) * np.cos(altitude),
            np.cos(azimuth) * np.cos(altitude),
            np.sin(altitude),
        ]
    )
    lit = surface_normals(heights, cell_size, z_factor) @ light
    return np.round(np.clip(lit, 0.0, 1.0) * 255.0).astype(np.uint8)


def height_preview_u16(heights: np.ndarray) -> np.ndarray:
    """Stretch heights linearly from their minimum to maximum over 0..65535."""

    lo = float(np.min(heights))
    span = float(np.max(heights)) - lo
    if span <= 0.0:
        return np.zeros(np.shape(heights), dtype=np.uint16)
    return np.round((heights - lo) / span * 65535.0).astype(np.uint16)
