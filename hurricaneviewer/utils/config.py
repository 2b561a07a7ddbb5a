# pylint: disable=too-many-branches
"""hurricaneviewer.utils.config – user paths and TOML config loader"""

from __future__ import annotations

import copy
import datetime
import os
import pathlib
import tomllib
from functools import lru_cache
from typing import Any, Dict, Optional, cast

from hurricaneviewer.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = pathlib.Path.home() / ".config" / "hurricaneviewer"
# Allow overriding the config directory at import time via environment variable
CONFIG_DIR = pathlib.Path(os.getenv("HURRICANEVIEWER_CONFIG_DIR", str(DEFAULT_CONFIG_DIR))).expanduser()
CONFIG_FILE = CONFIG_DIR / "config.toml"


def get_config_path() -> pathlib.Path:
    """Return config file path honoring environment variables."""
    env_file = os.getenv("HURRICANEVIEWER_CONFIG_FILE")
    if env_file:
        return pathlib.Path(env_file).expanduser()
    env_dir = os.getenv("HURRICANEVIEWER_CONFIG_DIR")
    if env_dir:
        return pathlib.Path(env_dir).expanduser() / "config.toml"
    return CONFIG_FILE


WIND_STYLE_DEFAULTS: list[Dict[str, Any]] = [
    {"speed": 30, "color": "577590", "point_size": 9, "point_shape": "circle"},
    {"speed": 35, "color": "577590", "point_size": 9, "point_shape": "circle"},
    {"speed": 40, "color": "4d908e", "point_size": 9, "point_shape": "circle"},
    {"speed": 45, "color": "4d908e", "point_size": 9, "point_shape": "circle"},
    {"speed": 50, "color": "43aa8b", "point_size": 9, "point_shape": "circle"},
    {"speed": 55, "color": "43aa8b", "point_size": 12, "point_shape": "circle"},
    {"speed": 60, "color": "43aa8b", "point_size": 12, "point_shape": "circle"},
    {"speed": 65, "color": "90be6d", "point_size": 12, "point_shape": "circle"},
    {"speed": 70, "color": "90be6d", "point_size": 12, "point_shape": "circle"},
    {"speed": 75, "color": "90be6d", "point_size": 12, "point_shape": "circle"},
    {"speed": 80, "color": "f9c74f", "point_size": 14, "point_shape": "circle"},
    {"speed": 85, "color": "f9c74f", "point_size": 14, "point_shape": "circle"},
    {"speed": 90, "color": "f9c74f", "point_size": 14, "point_shape": "circle"},
    {"speed": 95, "color": "f9844a", "point_size": 14, "point_shape": "circle"},
    {"speed": 100, "color": "f9844a", "point_size": 14, "point_shape": "circle"},
    {"speed": 105, "color": "f9844a", "point_size": 17, "point_shape": "circle"},
    {"speed": 110, "color": "f8961e", "point_size": 17, "point_shape": "circle"},
    {"speed": 115, "color": "f8961e", "point_size": 17, "point_shape": "circle"},
    {"speed": 120, "color": "f8961e", "point_size": 17, "point_shape": "circle"},
    {"speed": 125, "color": "f3722c", "point_size": 17, "point_shape": "circle"},
    {"speed": 130, "color": "f3722c", "point_size": 20, "point_shape": "circle"},
    {"speed": 135, "color": "f3722c", "point_size": 20, "point_shape": "circle"},
    {"speed": 140, "color": "f94144", "point_size": 20, "point_shape": "circle"},
    {"speed": 145, "color": "f94144", "point_size": 20, "point_shape": "circle"},
    {"speed": 150, "color": "f94144", "point_size": 20, "point_shape": "circle"},
]

LEGEND_ENTRY_DEFAULTS: list[Dict[str, Any]] = [
    {"color": "577590", "label": "30 - 39"},
    {"color": "4d908e", "label": "40 - 49"},
    {"color": "43aa8b", "label": "50 - 64"},
    {"color": "90be6d", "label": "65 - 79"},
    {"color": "f9c74f", "label": "80 - 94"},
    {"color": "f9844a", "label": "95 - 109"},
    {"color": "f8961e", "label": "110 - 124"},
    {"color": "f3722c", "label": "125 - 139"},
    {"color": "f94144", "label": "140 - 150"},
]

# Hurricane Maria (2017) over San Juan, Puerto Rico
DEFAULTS: Dict[str, Any] = {
    "output_dir": str(pathlib.Path.home() / "Documents/hurricaneviewer"),
    "logging": {
        "level": "INFO",
    },
    "earth_engine": {
        "project": "",
        "service_account": "",
        "key_file": "",
        "allow_interactive_auth": True,
    },
    "download": {
        "timeout_seconds": 120.0,
    },
    "point_of_interest": {
        "name": "San Juan, PR",
        "lon": -66.1136,
        "lat": 18.474,
        "zoom": 4,
    },
    # Any two opposite corners: [x0, y0, x1, y1]
    "regions": {
        "precipitation": [-73.716, 21.604, -57.449, 12.148],
        "sea_surface_temperature": [-78.836, 37.892, -57.954, 12.491],
    },
    "precipitation": {
        "collection": "JAXA/GPM_L3/GSMaP/v6/operational",
        "band": "hourlyPrecipRate",
        "start": "2017-09-19",
        "end": "2017-09-21",
        "layer_name": "GSMaP Precipitation (mm/hr)",
        "show_layer": False,
        "vis": {
            "min": 0.0,
            "max": 20.0,
            "palette": ["1621a2", "ffffff", "03ffff", "13ff03", "efff00", "ffb103", "ff2300"],
        },
    },
    "sea_surface_temperature": {
        "collection": "HYCOM/sea_temp_salinity",
        "band": "water_temp_0",
        "start": "2017-09-16",
        "end": "2017-09-24",
        # Stored values are scaled integers; value * 0.001 + 20 gives degrees Celsius
        "scale_factor": 0.001,
        "offset": 20.0,
        "layer_name": "HYCOM Sea Surface Temperature (°C)",
        "show_layer": False,
        "vis": {
            "min": 16.0,
            "max": 32.0,
            "palette": ["000000", "005aff", "43c8c8", "fff700", "ff0000"],
        },
    },
    "best_track": {
        "collection": "NOAA/NHC/HURDAT2/atlantic",
        "start": "2017-09-01",
        "end": "2017-10-02",
        "storm_name": "MARIA",
        "name_property": "name",
        "wind_property": "max_wind_kts",
        "layer_name": "HURDAT2 Max Wind Speed (kts)",
        "show_layer": True,
        "drop_unstyled": True,
    },
    "borders": {
        "collection": "USDOS/LSIB_SIMPLE/2017",
        "property": "wld_rgn",
        "value": "Caribbean",
        "width": 1,
    },
    "animations": {
        "precipitation": {
            "title": "GSMaP Hourly Precipitation Over San Juan, PR (mm/hr)",
            "region": "precipitation",
            "dimensions": 768,
            "frames_per_second": 7,
            "crs": "EPSG:3857",
            "outline_color": "ffffff",
            "filename": "precipitation.gif",
        },
        "sea_surface_temperature": {
            "title": "HYCOM Sea Surface Temperature Near San Juan (°C)",
            "region": "sea_surface_temperature",
            "dimensions": 768,
            "frames_per_second": 5,
            "crs": "EPSG:3857",
            "outline_color": "000000",
            "filename": "sea_surface_temperature.gif",
        },
    },
    "charts": {
        "precipitation": {
            "title": "Hourly Precipitation Over San Juan, PR",
            "h_axis_title": "Time (hr)",
            "v_axis_title": "Precipitation (mm/hr)",
            "x_property": "system:time_start",
            "reducer": "mean",
            # 0 samples at the band's native resolution
            "scale": 0.0,
            "filename": "precipitation_chart.png",
        },
        "sea_surface_temperature": {
            "title": "Sea Surface Temperature Near San Juan, PR",
            "h_axis_title": "Day (YYYYMMDDHH)",
            "v_axis_title": "Sea Surface Temperature (°C)",
            "x_property": "system:index",
            "reducer": "mean",
            "scale": 0.0,
            "filename": "sea_surface_temperature_chart.png",
        },
    },
    "chart_style": {
        "line_color": "577590",
        "line_width": 3,
        "point_size": 4,
        "gridline_color": "ffffff",
        "background_color": "ebebeb",
    },
    "legend": {
        "title": "Max Wind Speed (kts)",
        "filename": "wind_speed_legend.png",
        "entries": LEGEND_ENTRY_DEFAULTS,
    },
    "wind_styles": WIND_STYLE_DEFAULTS,
    "layers": {
        "filename": "layers.json",
    },
}

# Leaves that may be written as bare TOML dates instead of strings
_DATE_KEYS = {"start", "end"}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; tables merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _type_matches(value: Any, expected: Any, key: str) -> bool:
    if key in _DATE_KEYS and isinstance(value, (datetime.date, datetime.datetime)):
        return True
    if isinstance(expected, bool):
        return isinstance(value, bool)
    if isinstance(expected, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if isinstance(expected, int):
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, type(expected))


def _validate_against(data: Dict[str, Any], schema: Dict[str, Any], prefix: str, errors: list[str]) -> None:
    for key, expected in schema.items():
        path = f"{prefix}{key}"
        if key not in data:
            errors.append(f"missing '{path}'")
            continue
        value = data[key]
        if isinstance(expected, dict):
            # Tables keyed by the user (regions, animations, charts) may add entries
            if not isinstance(value, dict):
                errors.append(f"section '{path}' must be a table")
                continue
            _validate_against(value, expected, f"{path}.", errors)
        elif not _type_matches(value, expected, key):
            errors.append(f"'{path}' must be {type(expected).__name__}, got {type(value).__name__}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_corner_list(value: Any) -> bool:
    """True for ``[x0, y0, x1, y1]``: a list of exactly four numbers."""
    return isinstance(value, list) and len(value) == 4 and all(_is_number(v) for v in value)


def _table(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _list(data: Dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _validate_config(data: Dict[str, Any]) -> None:
    errors: list[str] = []
    _validate_against(data, DEFAULTS, "", errors)

    # Entries added by the user must carry the same keys as the built-in ones
    for section in ("animations", "charts"):
        template = next(iter(DEFAULTS[section].values()))
        for name, entry in _table(data, section).items():
            if name in DEFAULTS[section]:
                continue
            if not isinstance(entry, dict):
                errors.append(f"section '{section}.{name}' must be a table")
                continue
            _validate_against(entry, template, f"{section}.{name}.", errors)

    for name, corners in _table(data, "regions").items():
        if not is_corner_list(corners):
            errors.append(f"regions.{name} must be a list of four numbers [x0, y0, x1, y1]")

    for index, style in enumerate(_list(data, "wind_styles")):
        if not isinstance(style, dict) or not {"speed", "color", "point_size"} <= set(style):
            errors.append(f"wind_styles[{index}] needs speed, color and point_size")
        elif not _is_number(style["speed"]) or not isinstance(style["point_size"], int):
            errors.append(f"wind_styles[{index}] speed must be a number and point_size an integer")
        elif not isinstance(style["color"], str) or not isinstance(style.get("point_shape", ""), str):
            errors.append(f"wind_styles[{index}] color and point_shape must be strings")
    for index, entry in enumerate(_list(_table(data, "legend"), "entries")):
        if not isinstance(entry, dict) or not {"color", "label"} <= set(entry):
            errors.append(f"legend.entries[{index}] needs color and label")
        elif not isinstance(entry["color"], str) or not isinstance(entry["label"], str):
            errors.append(f"legend.entries[{index}] color and label must be strings")

    regions = _table(data, "regions")
    for name, animation in _table(data, "animations").items():
        if isinstance(animation, dict) and "region" in animation and animation["region"] not in regions:
            errors.append(f"animations.{name}.region {animation['region']!r} is not a configured region")

    if errors:
        raise ConfigurationError("Invalid configuration: " + "; ".join(errors))


def load_config(path: Optional[pathlib.Path] = None) -> Dict[str, Any]:
    """Load configuration from TOML, merge over DEFAULTS and validate.

    Args:
        path: Explicit config file. When omitted the environment-aware
            default location is used; a missing default file is not an error.

    Raises:
        ConfigurationError: If an explicit file is missing, the TOML is
            malformed, or a value has the wrong type.
    """
    data: Dict[str, Any] = copy.deepcopy(DEFAULTS)

    cfg_path = path if path is not None else get_config_path()
    if path is not None and not cfg_path.exists():
        raise ConfigurationError(f"Config file not found: {cfg_path}")

    if cfg_path.exists():
        with cfg_path.open("rb") as fp:
            try:
                loaded_data = tomllib.load(fp)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigurationError(f"Invalid TOML in {cfg_path}: {exc}") from exc
        data = _deep_merge(data, loaded_data)

    _validate_config(data)
    return data


@lru_cache(maxsize=1)
def _load_config() -> Dict[str, Any]:
    """Cached load of the default config location."""
    return load_config()


# public helpers -----------------------------------------------------------


def get_logging_level() -> str:
    logging_config = _load_config().get("logging", {})
    level = logging_config.get("level", DEFAULTS["logging"]["level"])
    return cast(str, level)

