from __future__ import annotations

import numpy as np
import pytest

from terr.derive import height_preview_u16, hillshade, surface_normals


def test_flat_surface_is_uniformly_lit() -> None:
    shade = hillshade(np.full((8, 8), 5.0))
    assert shade.dtype == np.uint8
    # sin(45 degrees) * 255
    assert np.all(shade == 180)


def test_z_factor_exaggerates_relief() -> None:
    rng = np.random.default_rng(0)
    heights = np.cumsum(rng.normal(size=(32, 32)), axis=1)
    plain = hillshade(heights, cell_size=4.0)
    steep = hillshade(heights, cell_size=4.0, z_factor=5.0)
    assert steep.astype(np.int16).std() > plain.astype(np.int16).std()


def test_hillshade_validates_input() -> None:
    with pytest.raises(ValueError):
        hillshade(np.zeros(5))
    with pytest.raises(ValueError):
        hillshade(np.zeros((1, 5)))
    with pytest.raises(ValueError):
        hillshade(np.zeros((4, 4)), cell_size=0.0)


def test_previews_span_full_range() -> None:
    heights = np.linspace(-3.0, 9.0, 64).reshape(8, 8)
    wide = height_preview_u16(heights)
    assert wide.dtype == np.uint16
    assert wide.min() == 0 and wide.max() == 65535
    assert np.all(np.diff(wide.ravel().astype(np.int64)) >= 0)


def test_constant_preview_does_not_divide_by_zero() -> None:
    assert np.all(height_preview_u16(np.full((3, 3), 2.0)) == 0)


def test_slope_facing_the_light_is_brighter() -> None:
    # Heights rise to the east, so the surface faces the north-western light.
    east_rising = np.tile(np.arange(6, dtype=np.float64), (6, 1))
    west_rising = east_rising[:, ::-1].copy()
    assert hillshade(east_rising).mean() > hillshade(west_rising).mean()


def test_normals_tilt_away_from_rising_ground() -> None:
    north_rising = np.tile(np.arange(4, dtype=np.float64)[::-1, None], (1, 4))
    normals = surface_normals(north_rising, 1.0)
    # Row 0 is north; ground rising northwards tilts normals south.
    assert np.all(normals[..., 1] < 0.0)
    np.testing.assert_allclose(np.linalg.norm(normals, axis=-1), 1.0)
