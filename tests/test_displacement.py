from __future__ import annotations

import hashlib

import numpy as np
import pytest

from terr.config import ConfigurationError, DiamondSquareConfig, MidpointConfig
from terr.displacement import (
    diamond_square,
    generate_diamond_square,
    generate_midpoint,
    level_amplitudes,
    midpoint_displacement,
)
from terr.heightfield import HeightField
from terr.rng import RandomSource


def _cornered(size: int, corners: tuple[float, float, float, float]) -> HeightField:
    field = HeightField(size, size)
    last = size - 1
    for (x, y), value in zip(((0, 0), (last, 0), (0, last), (last, last)), corners):
        field.set(x, y, value)
    return field


def _reference_diamond_square(
    corners: tuple[float, float, float, float],
    *,
    roughness: float,
    displacement: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Cell-by-cell diamond-square on a 5x5 grid drawing the same samples."""

    n = 5
    h = np.zeros((n, n))
    h[0, 0], h[0, 4], h[4, 0], h[4, 4] = corners
    for level, step in enumerate((4, 2)):
        half = step // 2
        amp = displacement * roughness**level

        centres = list(range(half, n, step))
        noise = rng.uniform(-1.0, 1.0, size=(len(centres), len(centres)))
        for i, y in enumerate(centres):
            for j, x in enumerate(centres):
                mean = (h[y - half, x - half] + h[y - half, x + half] + h[y + half, x - half] + h[y + half, x + half]) * 0.25
                h[y, x] = mean + amp * noise[i, j]

        for rows, cols in (
            (list(range(0, n, step)), list(range(half, n - 1, step))),
            (list(range(half, n - 1, step)), list(range(0, n, step))),
        ):
            noise = rng.uniform(-1.0, 1.0, size=(len(rows), len(cols)))
            for i, y in enumerate(rows):
                for j, x in enumerate(cols):
                    total = 0.0
                    count = 0
                    for dy, dx in ((-half, 0), (half, 0), (0, -half), (0, half)):
                        if 0 <= y + dy < n and 0 <= x + dx < n:
                            total += h[y + dy, x + dx]
                            count += 1
                    h[y, x] = total / count + amp * noise[i, j]
    return h


GOLDEN_5X5_SEED_42 = np.array(
    [
        [1.0, 1.53679742, 1.8087545, 1.85216724, 2.0],
        [1.17660927, 1.46536107, 2.43004649, 2.60556597, 3.02416196],
        [2.09886672, 2.21705948, 2.17576233, 2.7169245, 3.41583838],
        [2.008541, 1.94204367, 2.42892038, 2.98933324, 3.71392278],
        [3.0, 2.90312776, 2.31201356, 3.44836745, 4.0],
    ]
)


def test_diamond_square_golden_5x5_seed_42() -> None:
    corners = (1.0, 2.0, 3.0, 4.0)
    config = DiamondSquareConfig(size=5, roughness=0.5, displacement=1.0, corners=corners)

    field = generate_diamond_square(config, 42)
    np.testing.assert_allclose(field.values, GOLDEN_5X5_SEED_42, rtol=0.0, atol=1e-8)


def test_diamond_square_matches_cell_by_cell_reference() -> None:
    corners = (1.0, 2.0, 3.0, 4.0)
    config = DiamondSquareConfig(size=5, roughness=0.5, displacement=1.0, corners=corners)

    field = generate_diamond_square(config, 42)
    expected = _reference_diamond_square(
        corners,
        roughness=0.5,
        displacement=1.0,
        rng=RandomSource(42).fork("fractal-ds").generator(),
    )

    np.testing.assert_allclose(field.values, expected, rtol=1e-12, atol=1e-12)
    again = generate_diamond_square(config, 42)
    assert hashlib.sha256(field.values.tobytes()).hexdigest() == hashlib.sha256(again.values.tobytes()).hexdigest()


def test_diamond_square_without_displacement_averages_exactly() -> None:
    field = _cornered(5, (0.0, 4.0, 8.0, 12.0))
    diamond_square(field, np.random.default_rng(0), displacement=0.0)

    expected = np.array(
        [
            [0.0, 41 / 18, 10 / 3, 25 / 6, 4.0],
            [49 / 18, 3.5, 4.5, 31 / 6, 5.5],
            [14 / 3, 5.25, 6.0, 6.75, 22 / 3],
            [6.5, 41 / 6, 7.5, 8.5, 167 / 18],
            [8.0, 47 / 6, 26 / 3, 175 / 18, 12.0],
        ]
    )
    np.testing.assert_allclose(field.values, expected, rtol=1e-12)


def test_midpoint_without_displacement_averages_exactly() -> None:
    field = _cornered(3, (0.0, 4.0, 8.0, 12.0))
    midpoint_displacement(field, np.random.default_rng(0), displacement=0.0)

    expected = np.array(
        [
            [0.0, 2.0, 4.0],
            [4.0, 6.0, 8.0],
            [8.0, 10.0, 12.0],
        ]
    )
    np.testing.assert_allclose(field.values, expected, rtol=1e-12)


@pytest.mark.parametrize("size", [2, 3, 5, 9, 17, 33, 65])
def test_configured_corners_survive_any_grid_size(size: int) -> None:
    corners = (0.25, -1.5, 3.0, 7.75)
    for generate, config_type in ((generate_midpoint, MidpointConfig), (generate_diamond_square, DiamondSquareConfig)):
        field = generate(config_type(size=size, corners=corners), 9)
        last = size - 1
        assert field.get(0, 0) == corners[0]
        assert field.get(last, 0) == corners[1]
        assert field.get(0, last) == corners[2]
        assert field.get(last, last) == corners[3]


def test_random_corners_are_drawn_when_not_configured() -> None:
    field = generate_diamond_square(DiamondSquareConfig(size=9), 5)
    last = 8
    corners = [field.get(0, 0), field.get(last, 0), field.get(0, last), field.get(last, last)]
    # Log-normal draws are strictly positive and almost surely distinct.
    assert all(value > 0.0 for value in corners)
    assert len(set(corners)) == 4


def test_level_amplitudes_strictly_decrease_below_unit_roughness() -> None:
    for roughness in (0.3, 0.5, 0.9, 0.999):
        amps = level_amplitudes(8, 2.0, roughness)
        assert amps[0] == 2.0
        assert all(later < earlier for earlier, later in zip(amps, amps[1:]))


def test_unit_roughness_keeps_amplitude_constant() -> None:
    assert level_amplitudes(5, 0.7, 1.0) == [0.7] * 5


def test_uniform_perturbation_is_bounded_by_level_amplitude() -> None:
    config = DiamondSquareConfig(size=3, displacement=0.5, corners=(0.0, 0.0, 0.0, 0.0))
    for seed in range(20):
        field = generate_diamond_square(config, seed)
        assert abs(field.get(1, 1)) <= 0.5


@pytest.mark.parametrize("size", [1, 4, 6, 10, 100, 128])
def test_sizes_not_power_of_two_plus_one_are_rejected(size: int) -> None:
    with pytest.raises(ConfigurationError):
        DiamondSquareConfig(size=size)
    with pytest.raises(ConfigurationError):
        MidpointConfig(size=size)


def test_non_square_field_is_rejected() -> None:
    field = HeightField(5, 9)
    with pytest.raises(ConfigurationError):
        diamond_square(field, np.random.default_rng(0), displacement=1.0)
    with pytest.raises(ConfigurationError):
        midpoint_displacement(field, np.random.default_rng(0), displacement=1.0)


def test_non_conforming_square_field_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        diamond_square(HeightField(6, 6), np.random.default_rng(0), displacement=1.0)


def test_skipping_every_level_leaves_only_corners() -> None:
    config = DiamondSquareConfig(size=5, corners=(1.0, 2.0, 3.0, 4.0), skip_levels=2)
    values = generate_diamond_square(config, 3).values
    interior = values.copy()
    interior[[0, 0, 4, 4], [0, 4, 0, 4]] = 0.0
    assert np.count_nonzero(interior) == 0


def test_skipped_levels_keep_preset_points() -> None:
    field = _cornered(5, (0.0, 0.0, 0.0, 0.0))
    field.set(2, 2, 10.0)
    field.set(2, 0, 5.0)
    field.set(0, 2, 5.0)
    field.set(4, 2, 5.0)
    field.set(2, 4, 5.0)
    diamond_square(field, np.random.default_rng(1), displacement=0.1, skip_levels=1)
    assert field.get(2, 2) == 10.0
    assert field.get(2, 0) == 5.0
    assert 0.0 < field.get(1, 1) < 10.0


def test_frozen_field_cannot_be_refined() -> None:
    field = _cornered(3, (0.0, 0.0, 0.0, 0.0)).freeze()
    with pytest.raises(ValueError):
        diamond_square(field, np.random.default_rng(0), displacement=1.0)


def test_normal_distribution_is_supported_and_deterministic() -> None:
    config = MidpointConfig(size=33, distribution="normal")
    a = generate_midpoint(config, 77)
    b = generate_midpoint(config, 77)
    assert np.array_equal(a.values, b.values)
    assert np.isfinite(a.values).all()


def test_midpoint_and_diamond_square_differ_for_same_seed() -> None:
    corners = (0.0, 0.0, 0.0, 0.0)
    md = generate_midpoint(MidpointConfig(size=17, corners=corners), 1)
    ds = generate_diamond_square(DiamondSquareConfig(size=17, corners=corners), 1)
    assert not np.array_equal(md.values, ds.values)


def test_fractional_skip_levels_are_rejected_up_front() -> None:
    with pytest.raises(ConfigurationError):
        DiamondSquareConfig(size=5, skip_levels=1.5)
