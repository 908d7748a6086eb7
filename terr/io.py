"""Writers for generated height fields and their previews."""

from __future__ import annotations

import json
from pathlib import Path
import shutil
from typing import Any

import numpy as np
from PIL import Image

from terr.mesh import TriMesh


def prepare_output_dir(out_root: str | Path, kind: str, seed: int, shape: tuple[int, int], *, overwrite: bool) -> Path:
    """Return an empty `<out_root>/<kind>/seed-<seed>/<w>x<h>` directory.

    Leftover files from an earlier run are removed only with `overwrite`;
    otherwise a non-empty directory raises FileExistsError.
    """

    rows, cols = shape
    target = Path(out_root) / kind / f"seed-{seed}" / f"{cols}x{rows}"
    if target.is_dir():
        leftovers = list(target.iterdir())
        if leftovers and not overwrite:
            raise FileExistsError(f"{target} is not empty; pass --overwrite to replace its contents")
        for child in leftovers:
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
    target.mkdir(parents=True, exist_ok=True)
    return target


def write_height_npy(path: str | Path, heights: np.ndarray) -> None:
    np.save(Path(path), np.asarray(heights, dtype=np.float64), allow_pickle=False)


def write_png(path: str | Path, raster: np.ndarray) -> None:
    """Save an 8-bit or 16-bit grayscale raster."""

    if raster.dtype not in (np.uint8, np.uint16):
        raise ValueError(f"PNG rasters must be uint8 or uint16 (got {raster.dtype})")
    Image.fromarray(raster).save(Path(path))


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    Path(path).write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def write_obj(path: str | Path, mesh: TriMesh) -> None:
    """Wavefront OBJ with positions, texture coordinates and normals."""

    lines = [f"v {x:.6f} {y:.6f} {z:.6f}" for x, y, z in mesh.vertices]
    lines += [f"vt {u:.6f} {v:.6f}" for u, v in mesh.tex_coords]
    lines += [f"vn {x:.6f} {y:.6f} {z:.6f}" for x, y, z in mesh.normals]
    # 1-based, one index shared by position, uv and normal.
    for a, b, c in mesh.triangles.astype(np.int64) + 1:
        lines.append(f"f {a}/{a}/{a} {b}/{b}/{b} {c}/{c}/{c}")
    Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
