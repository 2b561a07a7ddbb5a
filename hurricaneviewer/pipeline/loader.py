"""Dataset loading from Earth Engine.

Builds the filtered precipitation, sea-surface-temperature, best-track and
country-border collections. Building a collection is lazy; nothing is
evaluated on the platform until :func:`ensure_not_empty`,
:func:`frame_timestamps` or a rendering request forces it.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any, Iterable

import ee

from hurricaneviewer.earth_engine.error_converter import platform_call
from hurricaneviewer.exceptions import EmptyResultError, InvalidDateRangeError
from hurricaneviewer.utils.date_utils import DateRange, find_out_of_range, millis_to_datetime
from hurricaneviewer.utils.log import get_logger

if TYPE_CHECKING:
    from hurricaneviewer.core.configuration import BestTrackConfig, BordersConfig, ImageDatasetConfig

LOGGER = get_logger(__name__)

TIME_START_PROPERTY = "system:time_start"


def load_precipitation(source: "ImageDatasetConfig", date_range: DateRange | None = None) -> Any:
    """Return the precipitation band of every frame in the window."""
    window = date_range or source.date_range
    LOGGER.debug("Loading %s/%s for %s", source.collection, source.band, window)
    return ee.ImageCollection(source.collection).filterDate(*window.as_ee_args()).select(source.band)


def load_sea_surface_temperature(source: "ImageDatasetConfig", date_range: DateRange | None = None) -> Any:
    """Return surface water temperature frames scaled to physical units.

    Each frame becomes ``value * scale_factor + offset``; frame properties
    (including ``system:time_start`` and ``system:index``) are kept.
    """
    window = date_range or source.date_range
    scale_factor = source.scale_factor
    offset = source.offset
    LOGGER.debug(
        "Loading %s/%s for %s (x%s + %s)", source.collection, source.band, window, scale_factor, offset
    )

    def _scale_and_offset(image: Any) -> Any:
        image = ee.Image(image)
        scaled = image.multiply(scale_factor).add(offset)
        return ee.Image(scaled.copyProperties(image, image.propertyNames()))

    return (
        ee.ImageCollection(source.collection)
        .filterDate(*window.as_ee_args())
        .select(source.band)
        .map(_scale_and_offset)
    )


def load_best_track(
    source: "BestTrackConfig", date_range: DateRange | None = None, storm_name: str | None = None
) -> Any:
    """Return the best-track records of one storm inside the track window."""
    window = date_range or source.date_range
    name = (storm_name or source.storm_name).upper()
    LOGGER.debug("Loading %s track for %s in %s", source.collection, name, window)
    return (
        ee.FeatureCollection(source.collection)
        .filterDate(*window.as_ee_args())
        .filter(ee.Filter.eq(source.name_property, name))
        .select([source.wind_property])
    )


def load_borders(source: "BordersConfig") -> Any:
    """Return the country features used to paint the border outline."""
    return ee.FeatureCollection(source.collection).filter(ee.Filter.eq(source.property, source.value))


def ensure_not_empty(collection: Any, label: str) -> int:
    """Evaluate the collection size and fail if nothing matched.

    Returns:
        The number of frames or features.

    Raises:
        EmptyResultError: If the collection has no elements.
    """
    with platform_call(f"count {label}"):
        size = int(collection.size().getInfo())
    if size == 0:
        raise EmptyResultError(
            message=f"No {label} matched the query",
            technical_details="Check the dataset id, the date range and any property filters.",
        )
    LOGGER.info("Loaded %d %s", size, label)
    return size


def frame_timestamps(collection: Any) -> list[datetime.datetime]:
    """Return the sorted UTC start times of every frame."""
    with platform_call("read frame timestamps"):
        millis = collection.aggregate_array(TIME_START_PROPERTY).getInfo() or []
    return sorted(millis_to_datetime(value) for value in millis)


def check_frames_in_range(timestamps: Iterable[datetime.datetime], date_range: DateRange) -> None:
    """Raise if any timestamp falls outside the half-open window.

    Raises:
        InvalidDateRangeError: Listing the first offending timestamps.
    """
    outside = find_out_of_range(timestamps, date_range)
    if outside:
        shown = ", ".join(ts.isoformat() for ts in outside[:5])
        raise InvalidDateRangeError(f"{len(outside)} frames fall outside {date_range}: {shown}")
