"""Time-series charts sampled at a point of interest.

Every frame of a collection is reduced over the point on the platform, the
resulting (x, value) pairs are fetched in one request, and the series is
drawn locally with matplotlib.
"""

from __future__ import annotations

import pathlib
from typing import Any, Iterable, Mapping

import ee
import numpy as np
import pandas as pd

from hurricaneviewer.core.models import ChartSpec, PointOfInterest
from hurricaneviewer.earth_engine.error_converter import platform_call
from hurricaneviewer.exceptions import ConfigurationError, EmptyResultError
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)

TIME_START_PROPERTY = "system:time_start"
X_KEY = "x"
SUPPORTED_REDUCERS = ("mean", "median", "min", "max", "sum", "first")

CHART_SIZE_INCHES = (10.0, 4.5)
CHART_DPI = 120


def resolve_reducer(name: str) -> Any:
    """Return the ``ee.Reducer`` called ``name``.

    Raises:
        ConfigurationError: If the reducer is not supported.
    """
    key = name.strip().lower()
    if key not in SUPPORTED_REDUCERS:
        raise ConfigurationError(f"Unsupported reducer {name!r}; choose one of {', '.join(SUPPORTED_REDUCERS)}")
    return getattr(ee.Reducer, key)()


def series_from_features(features: Iterable[Mapping[str, Any]], x_property: str, band: str) -> pd.Series:
    """Convert sampled features into a sorted series named ``band``.

    Each feature contributes exactly one row; a missing value (the frame was
    masked at the point) becomes NaN rather than being dropped. A
    ``system:time_start`` axis becomes a UTC DatetimeIndex.
    """
    xs: list[Any] = []
    values: list[float] = []
    for feature in features:
        properties = feature.get("properties") or {}
        xs.append(properties.get(X_KEY))
        value = properties.get(band)
        values.append(float(value) if value is not None else np.nan)

    if x_property == TIME_START_PROPERTY:
        index: pd.Index = pd.to_datetime(pd.Series(xs, dtype="float64"), unit="ms", utc=True)
        index = pd.DatetimeIndex(index, name=x_property)
    else:
        index = pd.Index(xs, name=x_property)

    series = pd.Series(values, index=index, name=band, dtype="float64")
    return series.sort_index(kind="stable")


def sample_series(collection: Any, point: PointOfInterest, spec: ChartSpec, band: str) -> pd.Series:
    """Reduce every frame of ``collection`` at ``point``.

    The returned series has one entry per frame.
    """
    reducer = resolve_reducer(spec.reducer)
    geometry = point.to_ee()
    x_property = spec.x_property
    fixed_scale = spec.scale

    def _sample(image: Any) -> Any:
        image = ee.Image(image)
        scale = fixed_scale or image.projection().nominalScale()
        stats = image.reduceRegion(reducer=reducer, geometry=geometry, scale=scale)
        return ee.Feature(None, {X_KEY: image.get(x_property), band: stats.get(band)})

    samples = ee.FeatureCollection(collection.map(_sample))
    with platform_call("sample time series", band=band, point=(point.lon, point.lat), reducer=spec.reducer):
        info = samples.getInfo() or {}

    series = series_from_features(info.get("features", []), x_property, band)
    LOGGER.info(
        "Sampled %d values of %s at %s (%d missing)",
        len(series),
        band,
        point.name or f"{point.lon},{point.lat}",
        int(series.isna().sum()),
    )
    return series


def render_chart(series: pd.Series, spec: ChartSpec, destination: pathlib.Path) -> pathlib.Path:
    """Draw ``series`` as a styled line chart and save it as PNG.

    Raises:
        EmptyResultError: If the series has no points at all.
    """
    import matplotlib.pyplot as plt
    from matplotlib import dates as mdates
    from matplotlib import ticker

    if series.empty:
        raise EmptyResultError(message=f"Nothing to chart for {spec.title!r}")

    grid_color = f"#{spec.gridline_color}"
    fig, ax = plt.subplots(figsize=CHART_SIZE_INCHES, dpi=CHART_DPI)
    try:
        ax.set_facecolor(f"#{spec.background_color}")
        x_values = series.index if isinstance(series.index, pd.DatetimeIndex) else np.arange(len(series))
        ax.plot(
            x_values,
            series.to_numpy(),
            color=f"#{spec.line_color}",
            linewidth=spec.line_width,
            marker="o",
            markersize=spec.point_size,
        )

        ax.set_title(spec.title)
        title_font = {"fontweight": "bold", "fontstyle": "normal"}
        ax.set_xlabel(spec.h_axis_title, **title_font)
        ax.set_ylabel(spec.v_axis_title, **title_font)
        ax.grid(True, color=grid_color)
        ax.set_axisbelow(True)
        ax.yaxis.set_major_formatter(ticker.EngFormatter(sep=""))

        if isinstance(series.index, pd.DatetimeIndex):
            locator = mdates.AutoDateLocator()
            ax.xaxis.set_major_locator(locator)
            ax.xaxis.set_major_formatter(mdates.ConciseDateFormatter(locator))
        else:
            step = max(1, len(series) // 10)
            ax.set_xticks(x_values[::step])
            ax.set_xticklabels([str(x) for x in series.index[::step]], rotation=45, ha="right")

        low, high = np.nanmin(series.to_numpy(), initial=np.inf), np.nanmax(series.to_numpy(), initial=-np.inf)
        if low <= 0 <= high:
            ax.axhline(0, color=grid_color, linewidth=1.5)

        fig.tight_layout()
        destination.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(destination)
    finally:
        plt.close(fig)

    LOGGER.info("Saved chart %r to %s", spec.title, destination)
    return destination
