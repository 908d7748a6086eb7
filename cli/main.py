"""CLI entry point for height-field generation."""

from __future__ import annotations

import argparse
from dataclasses import fields, is_dataclass, replace
from datetime import datetime, timezone
import hashlib
import logging
import math
import platform
import time
from typing import Any

import numpy as np

from terr.config import ConfigurationError
from terr.derive import height_preview_u16, hillshade
from terr.generators import GENERATOR_KINDS, default_config, generate
from terr.io import prepare_output_dir, write_height_npy, write_json, write_obj, write_png
from terr.mesh import to_trimesh
from terr.metrics import height_stats

# CLI flag -> config field, applied wherever the field exists.
_OVERRIDES = {
    "roughness": "roughness",
    "displacement": "displacement",
    "octaves": "octaves",
    "persistence": "persistence",
    "exponent": "exponent",
    "points": "num_points",
    "faults": "fault_count",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Procedural height-field generator")
    parser.add_argument("kind", choices=tuple(GENERATOR_KINDS), help="Generator to run")
    parser.add_argument("--seed", type=int, default=0, help="Integer random seed")
    parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Grid side in cells; fractal kinds need 2**k + 1 (default: per generator)",
    )
    parser.add_argument("--out", default="out", help="Output root directory")
    parser.add_argument("--extent", type=float, default=100.0, help="World width of the grid for shading and meshes")
    parser.add_argument("--roughness", type=float, default=None, help="Amplitude decay per fractal level, in (0, 1]")
    parser.add_argument("--displacement", type=float, default=None, help="Fractal perturbation scale")
    parser.add_argument("--octaves", type=int, default=None, help="Perlin octave count")
    parser.add_argument("--persistence", type=float, default=None, help="Perlin amplitude decay per octave")
    parser.add_argument("--exponent", type=float, default=None, help="Slope-shaping exponent for Perlin octaves")
    parser.add_argument("--points", type=int, default=None, help="Voronoi seed point count")
    parser.add_argument("--faults", type=int, default=None, help="Fault line count")
    parser.add_argument("--mesh", action="store_true", help="Also write a Wavefront OBJ mesh")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def build_config(args: argparse.Namespace) -> Any:
    """Default config for `args.kind` with command-line overrides applied."""

    overrides = {
        field_name: getattr(args, flag)
        for flag, field_name in _OVERRIDES.items()
        if getattr(args, flag) is not None
    }
    return _with_overrides(default_config(args.kind), args.size, overrides)


def _with_overrides(config: Any, size: int | None, overrides: dict[str, Any]) -> Any:
    names = {f.name for f in fields(config)}
    changes: dict[str, Any] = {}
    for name in names:
        value = getattr(config, name)
        if is_dataclass(value):
            changes[name] = _with_overrides(value, size, overrides)
    if size is not None:
        if "size" in names:
            changes["size"] = size
        if "width" in names:
            changes["width"] = size
            changes["height"] = size
    changes.update({name: value for name, value in overrides.items() if name in names})
    return replace(config, **changes)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not math.isfinite(args.extent) or args.extent <= 0:
        parser.error(f"--extent must be a positive number (got {args.extent})")
    try:
        config = build_config(args)
    except ConfigurationError as exc:
        parser.error(str(exc))

    generation_start = time.perf_counter()
    field = generate(config, args.seed)
    generation_seconds = time.perf_counter() - generation_start
    stats = height_stats(field)

    out_dir = prepare_output_dir(args.out, args.kind, args.seed, field.shape, overwrite=args.overwrite)

    write_height_npy(out_dir / "height.npy", field.values)
    write_png(out_dir / "height_16.png", height_preview_u16(field.values))
    if min(field.shape) >= 2:
        cell_size = args.extent / (field.width - 1)
        write_png(out_dir / "hillshade.png", hillshade(field.values, cell_size=cell_size))
        if args.mesh:
            extent_y = args.extent * (field.height - 1) / (field.width - 1)
            write_obj(out_dir / "terrain.obj", to_trimesh(field, args.extent, extent_y))

    if args.json:
        deterministic_meta = {
            "kind": args.kind,
            "seed": args.seed,
            "width": field.width,
            "height": field.height,
            "config": config.to_dict(),
            "metrics": stats.to_dict(),
            "height_sha256": hashlib.sha256(field.values.tobytes()).hexdigest(),
        }
        meta = {
            **deterministic_meta,
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "generation_seconds": generation_seconds,
            "python_version": platform.python_version(),
            "numpy_version": np.__version__,
        }
        write_json(out_dir / "deterministic_meta.json", deterministic_meta)
        write_json(out_dir / "meta.json", meta)

    print(f"Generated {args.kind} terrain: {out_dir}")
    print(
        "Heights: "
        f"min={stats.min_height:.3f}, "
        f"max={stats.max_height:.3f}, "
        f"mean={stats.mean_height:.3f}, "
        f"mean slope={stats.mean_abs_slope:.4f}"
    )
    print(f"Generation time: {generation_seconds:.3f} s ({field.width}x{field.height})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
