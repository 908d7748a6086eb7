"""Summary statistics of generated height fields."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from terr.heightfield import HeightField


@dataclass(frozen=True)
class HeightStats:
    """Elevation range and texture of one field."""

    min_height: float
    max_height: float
    mean_height: float
    std_height: float
    mean_abs_slope: float
    relief: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def height_stats(field: HeightField) -> HeightStats:
    """Compute statistics; slope is the mean absolute neighbour difference."""

    values = field.values
    diffs: list[np.ndarray] = []
    if field.width > 1:
        diffs.append(np.abs(np.diff(values, axis=1)).ravel())
    if field.height > 1:
        diffs.append(np.abs(np.diff(values, axis=0)).ravel())
    mean_abs_slope = float(np.mean(np.concatenate(diffs))) if diffs else 0.0

    lo = float(values.min())
    hi = float(values.max())
    return HeightStats(
        min_height=lo,
        max_height=hi,
        mean_height=float(values.mean()),
        std_height=float(values.std()),
        mean_abs_slope=mean_abs_slope,
        relief=hi - lo,
    )
