"""Configuration models for height-field generators."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import math
from typing import Any


DEFAULT_SIZE = 129

DISTRIBUTIONS = ("uniform", "normal")
METRICS = ("euclidean", "squared", "manhattan", "chebyshev")
FAULT_PROFILES = ("bump", "exponential")


class ConfigurationError(ValueError):
    """Raised when a generator is given parameters it cannot work with."""


def is_power_of_two_plus_one(size: int) -> bool:
    """Return True when `size` is `2**k + 1` for some integer k >= 0."""

    span = size - 1
    return span >= 1 and (span & (span - 1)) == 0


def subdivision_levels(size: int) -> int:
    """Number of subdivision levels `k` for a grid side of `2**k + 1`."""

    if not is_power_of_two_plus_one(size):
        raise ConfigurationError(f"grid size must be 2**k + 1 (got {size})")
    return (size - 1).bit_length() - 1


def _require_positive_int(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer (got {value!r})")


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite (got {value!r})")


def _require_positive(name: str, value: float) -> None:
    _require_finite(name, value)
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive (got {value!r})")


def _require_unit_interval(name: str, value: float) -> None:
    _require_finite(name, value)
    if not 0.0 < value <= 1.0:
        raise ConfigurationError(f"{name} must lie in (0, 1] (got {value!r})")


def _require_choice(name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)} (got {value!r})")


@dataclass(frozen=True)
class FlatConfig:
    """Constant elevation everywhere."""

    width: int = DEFAULT_SIZE
    height: int = DEFAULT_SIZE
    elevation: float = 0.0

    def __post_init__(self) -> None:
        _require_positive_int("width", self.width)
        _require_positive_int("height", self.height)
        _require_finite("elevation", self.elevation)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NoiseConfig:
    """Spatially uncorrelated noise around a base elevation."""

    width: int = DEFAULT_SIZE
    height: int = DEFAULT_SIZE
    base: float = 0.0
    scale: float = 0.2
    distribution: str = "normal"

    def __post_init__(self) -> None:
        _require_positive_int("width", self.width)
        _require_positive_int("height", self.height)
        _require_finite("base", self.base)
        _require_positive("scale", self.scale)
        _require_choice("distribution", self.distribution, DISTRIBUTIONS)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DisplacementConfig:
    """Shared parameters of the fractal subdivision generators.

    `corners` holds the heights of the (0, 0), (N-1, 0), (0, N-1) and
    (N-1, N-1) cells. When it is None the corners are drawn from a log-normal
    distribution with `corner_log_mean` and `corner_log_sigma`.
    """

    size: int = DEFAULT_SIZE
    roughness: float = 0.5
    displacement: float = 0.135
    distribution: str = "uniform"
    corners: tuple[float, float, float, float] | None = None
    corner_log_mean: float = 0.5
    corner_log_sigma: float = 1.5
    skip_levels: int = 0

    def __post_init__(self) -> None:
        _require_positive_int("size", self.size)
        if not is_power_of_two_plus_one(self.size):
            raise ConfigurationError(f"size must be 2**k + 1 (got {self.size})")
        _require_unit_interval("roughness", self.roughness)
        _require_positive("displacement", self.displacement)
        _require_choice("distribution", self.distribution, DISTRIBUTIONS)
        if self.corners is not None:
            if len(self.corners) != 4:
                raise ConfigurationError("corners must hold exactly four heights")
            for value in self.corners:
                _require_finite("corner height", float(value))
        _require_finite("corner_log_mean", self.corner_log_mean)
        _require_positive("corner_log_sigma", self.corner_log_sigma)
        if isinstance(self.skip_levels, bool) or not isinstance(self.skip_levels, int):
            raise ConfigurationError(f"skip_levels must be an integer (got {self.skip_levels!r})")
        if self.skip_levels < 0 or self.skip_levels > subdivision_levels(self.size):
            raise ConfigurationError(
                f"skip_levels must lie in [0, {subdivision_levels(self.size)}] (got {self.skip_levels})"
            )

    @property
    def levels(self) -> int:
        return subdivision_levels(self.size)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MidpointConfig(DisplacementConfig):
    """Midpoint displacement parameters."""


@dataclass(frozen=True)
class DiamondSquareConfig(DisplacementConfig):
    """Diamond-square parameters."""


@dataclass(frozen=True)
class VoronoiConfig:
    """Voronoi feature parameters.

    Each cell receives `sum(weights[i] * d[i])` where `d` holds the distances
    to the seed points in ascending order.
    """

    width: int = DEFAULT_SIZE
    height: int = DEFAULT_SIZE
    num_points: int = 24
    weights: tuple[float, ...] = (-80.0, 20.0, 50.0)
    metric: str = "euclidean"

    def __post_init__(self) -> None:
        _require_positive_int("width", self.width)
        _require_positive_int("height", self.height)
        _require_positive_int("num_points", self.num_points)
        if not self.weights:
            raise ConfigurationError("weights must not be empty")
        for value in self.weights:
            _require_finite("weight", float(value))
        _require_choice("metric", self.metric, METRICS)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VoronoiDiamondSquareConfig:
    """Voronoi base heights with diamond-square detail layered on top."""

    voronoi: VoronoiConfig = field(
        default_factory=lambda: VoronoiConfig(metric="squared")
    )
    fractal: DiamondSquareConfig = field(
        default_factory=lambda: DiamondSquareConfig(displacement=0.1, corner_log_sigma=1.0)
    )

    def __post_init__(self) -> None:
        size = self.fractal.size
        if self.voronoi.width != size or self.voronoi.height != size:
            raise ConfigurationError(
                f"voronoi grid {self.voronoi.width}x{self.voronoi.height} "
                f"does not match fractal grid {size}x{size}"
            )

    @property
    def size(self) -> int:
        return self.fractal.size

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PerlinConfig:
    """Single Perlin noise layer."""

    width: int = DEFAULT_SIZE
    height: int = DEFAULT_SIZE
    frequency: float = 0.08615
    amplitude: float = 1.0
    gradient_count: int = 256
    exponential_gradients: bool = False

    def __post_init__(self) -> None:
        _require_positive_int("width", self.width)
        _require_positive_int("height", self.height)
        _require_positive("frequency", self.frequency)
        _require_positive("amplitude", self.amplitude)
        _require_gradient_count(self.gradient_count)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PerlinOctavesConfig:
    """Summed Perlin layers.

    `base_frequency` defaults to one lattice cell across the whole width.
    `exponent` shapes the summed value as `sign(v) * |v| ** exponent`.
    """

    width: int = 256
    height: int = 256
    octaves: int = 7
    base_frequency: float | None = None
    amplitude: float = 20.0
    persistence: float = 0.5
    lacunarity: float = 2.0
    gradient_count: int = 1024
    exponential_gradients: bool = True
    exponent: float = 1.0

    def __post_init__(self) -> None:
        _require_positive_int("width", self.width)
        _require_positive_int("height", self.height)
        _require_positive_int("octaves", self.octaves)
        if self.base_frequency is not None:
            _require_positive("base_frequency", self.base_frequency)
        _require_positive("amplitude", self.amplitude)
        _require_unit_interval("persistence", self.persistence)
        _require_positive("lacunarity", self.lacunarity)
        _require_gradient_count(self.gradient_count)
        _require_positive("exponent", self.exponent)

    @property
    def frequency(self) -> float:
        if self.base_frequency is not None:
            return self.base_frequency
        return 1.0 / self.width

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FaultConfig:
    """Random fault-line displacement.

    Fault widths are log-normal in normalized grid units; each fault is
    `height_factor` times as tall as it is wide.
    """

    width: int = DEFAULT_SIZE
    height: int = DEFAULT_SIZE
    fault_count: int = 50
    width_log_mean: float = -2.5
    width_log_sigma: float = 0.5
    height_factor: float = 10.0
    profile: str = "bump"

    def __post_init__(self) -> None:
        _require_positive_int("width", self.width)
        _require_positive_int("height", self.height)
        _require_positive_int("fault_count", self.fault_count)
        _require_finite("width_log_mean", self.width_log_mean)
        _require_positive("width_log_sigma", self.width_log_sigma)
        _require_positive("height_factor", self.height_factor)
        _require_choice("profile", self.profile, FAULT_PROFILES)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FaultDiamondSquareConfig:
    """A few broad faults applied atop diamond-square terrain."""

    fractal: DiamondSquareConfig = field(
        default_factory=lambda: DiamondSquareConfig(displacement=0.08, corner_log_sigma=1.0)
    )
    fault: FaultConfig = field(
        default_factory=lambda: FaultConfig(
            fault_count=4,
            width_log_mean=-1.5,
            width_log_sigma=0.5,
            height_factor=0.1,
        )
    )

    def __post_init__(self) -> None:
        size = self.fractal.size
        if self.fault.width != size or self.fault.height != size:
            raise ConfigurationError(
                f"fault grid {self.fault.width}x{self.fault.height} "
                f"does not match fractal grid {size}x{size}"
            )

    @property
    def size(self) -> int:
        return self.fractal.size

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _require_gradient_count(count: int) -> None:
    _require_positive_int("gradient_count", count)
    if count & (count - 1):
        raise ConfigurationError(f"gradient_count must be a power of two (got {count})")
