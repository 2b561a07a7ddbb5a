"""Immutable value types shared by the pipeline stages.

Each type validates itself on construction and knows how to express itself
as the Earth Engine object or parameter dictionary the platform expects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import ee

from hurricaneviewer.exceptions import ConfigurationError

HEX_COLOR_PATTERN = re.compile(r"^[0-9a-fA-F]{6}$")


def normalize_hex_color(value: str) -> str:
    """Return a 6-digit lowercase hex colour without a leading ``#``.

    Raises:
        ConfigurationError: If the value is not a 6-digit hex colour.
    """
    candidate = value.strip().lstrip("#") if isinstance(value, str) else ""
    if not HEX_COLOR_PATTERN.match(candidate):
        raise ConfigurationError(f"Invalid colour {value!r}; expected 6 hex digits")
    return candidate.lower()


@dataclass(frozen=True)
class BoundingBox:
    """A geographic rectangle in degrees, stored with west < east and south < north."""

    west: float
    south: float
    east: float
    north: float

    def __post_init__(self) -> None:
        if not self.west < self.east or not self.south < self.north:
            raise ConfigurationError(
                f"Bounding box must have positive area: west={self.west} east={self.east} "
                f"south={self.south} north={self.north}"
            )
        if self.south < -90 or self.north > 90:
            raise ConfigurationError(f"Latitude out of range in bounding box ({self.south}, {self.north})")

    @classmethod
    def from_corners(cls, x0: float, y0: float, x1: float, y1: float) -> "BoundingBox":
        """Build a box from any two opposite corners, like ``ee.Geometry.Rectangle``."""
        return cls(
            west=min(x0, x1),
            south=min(y0, y1),
            east=max(x0, x1),
            north=max(y0, y1),
        )

    def as_list(self) -> list[float]:
        return [self.west, self.south, self.east, self.north]

    def to_ee(self) -> Any:
        return ee.Geometry.Rectangle(self.as_list())


@dataclass(frozen=True)
class PointOfInterest:
    """A named location used to sample charts and centre the map."""

    lon: float
    lat: float
    name: str = ""

    def __post_init__(self) -> None:
        if not -90 <= self.lat <= 90 or not -180 <= self.lon <= 180:
            raise ConfigurationError(f"Point of interest out of range: lon={self.lon} lat={self.lat}")

    def to_ee(self) -> Any:
        return ee.Geometry.Point([self.lon, self.lat])


@dataclass(frozen=True)
class VisParams:
    """Visualization parameters: a value range stretched over a colour palette."""

    min: float
    max: float
    palette: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.min >= self.max:
            raise ConfigurationError(f"Visualization min ({self.min}) must be below max ({self.max})")
        object.__setattr__(self, "palette", tuple(normalize_hex_color(c) for c in self.palette))

    def to_ee(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"min": self.min, "max": self.max}
        if self.palette:
            params["palette"] = list(self.palette)
        return params


@dataclass(frozen=True)
class AnimationSpec:
    """Parameters for an animated GIF thumbnail."""

    region: BoundingBox
    dimensions: int = 768
    frames_per_second: int = 7
    crs: str = "EPSG:3857"

    def __post_init__(self) -> None:
        if self.dimensions <= 0:
            raise ConfigurationError(f"Animation dimensions must be positive, got {self.dimensions}")
        if self.frames_per_second <= 0:
            raise ConfigurationError(f"Frames per second must be positive, got {self.frames_per_second}")


@dataclass(frozen=True)
class ChartSpec:
    """Sampling and styling options for a time-series line chart."""

    title: str
    h_axis_title: str
    v_axis_title: str
    x_property: str = "system:time_start"
    reducer: str = "mean"
    # 0 means the native resolution of the sampled band
    scale: float = 0.0
    line_color: str = "577590"
    line_width: float = 3
    point_size: float = 4
    gridline_color: str = "ffffff"
    background_color: str = "ebebeb"

    def __post_init__(self) -> None:
        for name in ("line_color", "gridline_color", "background_color"):
            object.__setattr__(self, name, normalize_hex_color(getattr(self, name)))
        if self.scale < 0:
            raise ConfigurationError(f"Chart sampling scale must not be negative, got {self.scale}")


@dataclass(frozen=True)
class WindStyle:
    """How a best-track point of a given wind speed is drawn."""

    color: str
    point_size: int
    point_shape: str = "circle"

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", normalize_hex_color(self.color))
        if self.point_size <= 0:
            raise ConfigurationError(f"Point size must be positive, got {self.point_size}")

    def to_ee(self) -> Dict[str, Any]:
        return {"color": self.color, "pointSize": self.point_size, "pointShape": self.point_shape}


@dataclass(frozen=True)
class LegendEntry:
    color: str
    label: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", normalize_hex_color(self.color))
