"""Typed configuration for a viewer run.

The raw TOML dictionary from :mod:`hurricaneviewer.utils.config` is turned
into one immutable :class:`ViewerConfig` tree at the entry point and passed
explicitly to every pipeline stage.
"""

from __future__ import annotations

import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from hurricaneviewer.core.models import (
    AnimationSpec,
    BoundingBox,
    ChartSpec,
    LegendEntry,
    PointOfInterest,
    VisParams,
    WindStyle,
    normalize_hex_color,
)
from hurricaneviewer.exceptions import ConfigurationError, HurricaneViewerError
from hurricaneviewer.pipeline.styles import WindStyleTable
from hurricaneviewer.utils import config as config_loader
from hurricaneviewer.utils import log
from hurricaneviewer.utils.date_utils import DateRange

LOGGER = log.get_logger(__name__)


@dataclass(frozen=True)
class EarthEngineSettings:
    project: Optional[str] = None
    service_account: Optional[str] = None
    key_file: Optional[pathlib.Path] = None
    allow_interactive_auth: bool = True


@dataclass(frozen=True)
class ImageDatasetConfig:
    """An hourly or daily raster dataset and how to display it."""

    collection: str
    band: str
    date_range: DateRange
    vis: VisParams
    layer_name: str
    show_layer: bool = False
    scale_factor: float = 1.0
    offset: float = 0.0


@dataclass(frozen=True)
class BestTrackConfig:
    collection: str
    date_range: DateRange
    storm_name: str
    name_property: str = "name"
    wind_property: str = "max_wind_kts"
    layer_name: str = "HURDAT2 Max Wind Speed (kts)"
    show_layer: bool = True
    drop_unstyled: bool = True


@dataclass(frozen=True)
class BordersConfig:
    collection: str
    property: str
    value: str
    width: int = 1


@dataclass(frozen=True)
class AnimationConfig:
    title: str
    spec: AnimationSpec
    outline_color: str
    filename: str


@dataclass(frozen=True)
class ChartConfig:
    spec: ChartSpec
    filename: str


@dataclass(frozen=True)
class LegendConfig:
    title: str
    entries: tuple[LegendEntry, ...]
    filename: str


@dataclass(frozen=True)
class ViewerConfig:
    """Everything a run needs; there is no module-level mutable configuration."""

    output_dir: pathlib.Path
    log_level: str
    earth_engine: EarthEngineSettings
    download_timeout: float
    point_of_interest: PointOfInterest
    zoom: int
    regions: Mapping[str, BoundingBox]
    precipitation: ImageDatasetConfig
    sea_surface_temperature: ImageDatasetConfig
    best_track: BestTrackConfig
    borders: BordersConfig
    animations: Mapping[str, AnimationConfig]
    charts: Mapping[str, ChartConfig]
    legend: LegendConfig
    wind_styles: WindStyleTable
    layers_filename: str


def _optional_str(value: Any) -> Optional[str]:
    return value or None


def _region(raw: Any, name: str) -> BoundingBox:
    if not config_loader.is_corner_list(raw):
        raise ConfigurationError(f"regions.{name} must be a list of four numbers [x0, y0, x1, y1]")
    return BoundingBox.from_corners(*(float(v) for v in raw))


def _vis(raw: Dict[str, Any]) -> VisParams:
    return VisParams(min=float(raw["min"]), max=float(raw["max"]), palette=tuple(raw.get("palette", ())))


def _image_dataset(raw: Dict[str, Any]) -> ImageDatasetConfig:
    return ImageDatasetConfig(
        collection=raw["collection"],
        band=raw["band"],
        date_range=DateRange.parse(raw["start"], raw["end"]),
        vis=_vis(raw["vis"]),
        layer_name=raw["layer_name"],
        show_layer=raw["show_layer"],
        scale_factor=float(raw.get("scale_factor", 1.0)),
        offset=float(raw.get("offset", 0.0)),
    )


def build_viewer_config(data: Dict[str, Any]) -> ViewerConfig:
    """Convert a validated config dictionary into a :class:`ViewerConfig`.

    Raises:
        ConfigurationError: If a value is semantically invalid (bad colour,
            empty box, unknown region reference and so on), or a key or
            value the loader did not validate is missing or malformed.
        InvalidDateRangeError: If a configured date range is empty or reversed.
    """
    try:
        return _build_viewer_config(data)
    except HurricaneViewerError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ConfigurationError(f"Invalid configuration value: {type(exc).__name__}: {exc}") from exc


def _build_viewer_config(data: Dict[str, Any]) -> ViewerConfig:
    regions = {name: _region(raw, name) for name, raw in data["regions"].items()}

    poi_raw = data["point_of_interest"]
    point = PointOfInterest(lon=float(poi_raw["lon"]), lat=float(poi_raw["lat"]), name=poi_raw["name"])

    style_raw = data["chart_style"]
    charts = {
        name: ChartConfig(
            spec=ChartSpec(
                title=raw["title"],
                h_axis_title=raw["h_axis_title"],
                v_axis_title=raw["v_axis_title"],
                x_property=raw["x_property"],
                reducer=raw["reducer"],
                scale=float(raw["scale"]),
                line_color=style_raw["line_color"],
                line_width=float(style_raw["line_width"]),
                point_size=float(style_raw["point_size"]),
                gridline_color=style_raw["gridline_color"],
                background_color=style_raw["background_color"],
            ),
            filename=raw["filename"],
        )
        for name, raw in data["charts"].items()
    }

    animations = {
        name: AnimationConfig(
            title=raw["title"],
            spec=AnimationSpec(
                region=regions[raw["region"]],
                dimensions=int(raw["dimensions"]),
                frames_per_second=int(raw["frames_per_second"]),
                crs=raw["crs"],
            ),
            outline_color=normalize_hex_color(raw["outline_color"]),
            filename=raw["filename"],
        )
        for name, raw in data["animations"].items()
    }

    track_raw = data["best_track"]
    best_track = BestTrackConfig(
        collection=track_raw["collection"],
        date_range=DateRange.parse(track_raw["start"], track_raw["end"]),
        storm_name=track_raw["storm_name"].upper(),
        name_property=track_raw["name_property"],
        wind_property=track_raw["wind_property"],
        layer_name=track_raw["layer_name"],
        show_layer=track_raw["show_layer"],
        drop_unstyled=track_raw["drop_unstyled"],
    )

    borders_raw = data["borders"]
    ee_raw = data["earth_engine"]
    legend_raw = data["legend"]

    log_level = data["logging"]["level"].upper()
    if log_level not in log.LOG_LEVEL_MAP:
        raise ConfigurationError(
            f"logging.level {data['logging']['level']!r} must be one of {', '.join(log.LOG_LEVEL_MAP)}"
        )

    return ViewerConfig(
        output_dir=pathlib.Path(data["output_dir"]).expanduser(),
        log_level=log_level,
        earth_engine=EarthEngineSettings(
            project=_optional_str(ee_raw["project"]),
            service_account=_optional_str(ee_raw["service_account"]),
            key_file=pathlib.Path(ee_raw["key_file"]).expanduser() if ee_raw["key_file"] else None,
            allow_interactive_auth=ee_raw["allow_interactive_auth"],
        ),
        download_timeout=float(data["download"]["timeout_seconds"]),
        point_of_interest=point,
        zoom=int(poi_raw["zoom"]),
        regions=regions,
        precipitation=_image_dataset(data["precipitation"]),
        sea_surface_temperature=_image_dataset(data["sea_surface_temperature"]),
        best_track=best_track,
        borders=BordersConfig(
            collection=borders_raw["collection"],
            property=borders_raw["property"],
            value=borders_raw["value"],
            width=int(borders_raw["width"]),
        ),
        animations=animations,
        charts=charts,
        legend=LegendConfig(
            title=legend_raw["title"],
            entries=tuple(LegendEntry(color=e["color"], label=e["label"]) for e in legend_raw["entries"]),
            filename=legend_raw["filename"],
        ),
        wind_styles=WindStyleTable(
            {
                s["speed"]: WindStyle(
                    color=s["color"],
                    point_size=int(s["point_size"]),
                    point_shape=s.get("point_shape", "circle"),
                )
                for s in data["wind_styles"]
            }
        ),
        layers_filename=data["layers"]["filename"],
    )


def load_viewer_config(path: Optional[pathlib.Path] = None) -> ViewerConfig:
    """Load, merge, validate and type the configuration in one step."""
    data = config_loader.load_config(path)
    viewer_config = build_viewer_config(data)
    LOGGER.debug("Loaded configuration (storm=%s, output=%s)", viewer_config.best_track.storm_name, viewer_config.output_dir)
    return viewer_config
