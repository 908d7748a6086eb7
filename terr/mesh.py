"""Triangle meshes sampled from height fields."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from terr.heightfield import HeightField


@dataclass(frozen=True)
class TriMesh:
    """Indexed triangle mesh with per-vertex normals and texture coordinates."""

    vertices: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray
    tex_coords: np.ndarray


def to_trimesh(field: HeightField, width: float = 100.0, height: float = 100.0) -> TriMesh:
    """Convert a field into a mesh centred on the origin.

    One vertex per cell with z holding the elevation, two triangles per quad.
    No vertices are culled, so the triangle count is `2 * (w - 1) * (h - 1)`.
    """

    cols, rows = field.width, field.height
    if cols < 2 or rows < 2:
        raise ValueError("a mesh needs at least 2x2 cells")
    if width <= 0 or height <= 0:
        raise ValueError("mesh width and height must be positive")

    tx = np.linspace(0.0, 1.0, cols)
    ty = np.linspace(0.0, 1.0, rows)
    gx, gy = np.meshgrid(tx, ty)
    vertices = np.column_stack(
        (
            (gx * width - 0.5 * width).ravel(),
            (gy * height - 0.5 * height).ravel(),
            field.values.ravel(),
        )
    )
    tex_coords = np.column_stack(((1.0 - gx).ravel(), (1.0 - gy).ravel()))

    iy, ix = np.indices((rows - 1, cols - 1))
    top = (iy * cols + ix).ravel()
    bottom = top + cols
    lower_left = np.column_stack((bottom, top, bottom + 1))
    upper_right = np.column_stack((top, top + 1, bottom + 1))
    triangles = np.stack((lower_left, upper_right), axis=1).reshape(-1, 3).astype(np.uint32)

    return TriMesh(
        vertices=vertices,
        triangles=triangles,
        normals=vertex_normals(vertices, triangles),
        tex_coords=tex_coords,
    )


def vertex_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Area-weighted average of adjacent face normals, unit length."""

    a = vertices[triangles[:, 0]]
    b = vertices[triangles[:, 1]]
    c = vertices[triangles[:, 2]]
    faces = np.cross(b - a, c - a)
    normals = np.zeros_like(vertices)
    for corner in range(3):
        np.add.at(normals, triangles[:, corner], faces)
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    return normals / np.maximum(lengths, 1e-12)
