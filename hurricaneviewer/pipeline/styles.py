"""Wind-speed styling for best-track points.

A :class:`WindStyleTable` is an explicit mapping from an exact wind speed
(knots) to the colour, size and shape used to draw a track point. Looking
up a speed that has no entry yields ``None`` (or
:class:`~hurricaneviewer.exceptions.StyleNotFoundError` from
:meth:`WindStyleTable.require`), never a silent default.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Iterable, Optional

import ee

from hurricaneviewer.core.models import WindStyle
from hurricaneviewer.earth_engine.error_converter import platform_call
from hurricaneviewer.exceptions import ConfigurationError, StyleNotFoundError
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)

STYLE_PROPERTY = "style"


def _as_exact_key(speed: Any) -> Optional[int]:
    """Return ``speed`` as an int key, or None if it is not integral."""
    if isinstance(speed, bool):
        return None
    if isinstance(speed, int):
        return speed
    if isinstance(speed, float) and speed.is_integer():
        return int(speed)
    return None


class WindStyleTable(Mapping[int, WindStyle]):
    """Immutable wind speed → :class:`WindStyle` table."""

    def __init__(self, styles: Mapping[int, WindStyle]) -> None:
        table: dict[int, WindStyle] = {}
        for speed, style in styles.items():
            key = _as_exact_key(speed)
            if key is None:
                raise ConfigurationError(f"Wind style speeds must be whole knots, got {speed!r}")
            table[key] = style
        if not table:
            raise ConfigurationError("Wind style table must have at least one entry")
        self._styles = dict(sorted(table.items()))

    def __getitem__(self, speed: int) -> WindStyle:
        return self.require(speed)

    def __iter__(self) -> Iterator[int]:
        return iter(self._styles)

    def __len__(self) -> int:
        return len(self._styles)

    def __repr__(self) -> str:
        return f"WindStyleTable({len(self)} entries, {min(self)}-{max(self)} kts)"

    def lookup(self, speed: Any) -> Optional[WindStyle]:
        """Return the style configured for exactly ``speed``, or None."""
        key = _as_exact_key(speed)
        if key is None:
            return None
        return self._styles.get(key)

    def require(self, speed: Any) -> WindStyle:
        style = self.lookup(speed)
        if style is None:
            raise StyleNotFoundError([speed])
        return style

    def missing(self, speeds: Iterable[Any]) -> list[Any]:
        """Return the distinct speeds from ``speeds`` that have no style."""
        return sorted({s for s in speeds if self.lookup(s) is None}, key=float)

    def to_ee_dictionary(self) -> Any:
        """Server-side dictionary keyed by the speed formatted as an integer string."""
        return ee.Dictionary({str(speed): style.to_ee() for speed, style in self._styles.items()})


def style_track(points: Any, table: WindStyleTable, wind_property: str, drop_unstyled: bool = True) -> Any:
    """Attach a style to every best-track point and render them as an image.

    Points whose speed has no entry in ``table``, and points with no speed
    at all, are unstyled.

    Args:
        points: Best-track FeatureCollection carrying ``wind_property``.
        table: Wind speed to style table.
        wind_property: Name of the wind speed property (knots).
        drop_unstyled: Drop unstyled points instead of failing.

    Returns:
        The styled image from ``FeatureCollection.style``.

    Raises:
        StyleNotFoundError: If some points are unstyled and ``drop_unstyled`` is False.
    """
    with platform_call("read track wind speeds", property=wind_property):
        # aggregate_* skip records where the property is null
        speeds = points.aggregate_array(wind_property).distinct().getInfo() or []
        unrated = int(points.size().subtract(points.aggregate_count(wind_property)).getInfo() or 0)

    missing = table.missing(s for s in speeds if s is not None)
    if missing or unrated:
        if not drop_unstyled:
            raise StyleNotFoundError(missing, unrated=unrated)
        if unrated:
            LOGGER.warning("Dropping %d track points with no %s value", unrated, wind_property)
            points = points.filter(ee.Filter.notNull([wind_property]))
        if missing:
            LOGGER.warning("Dropping track points with unstyled wind speeds: %s kts", ", ".join(map(str, missing)))
            points = points.filter(ee.Filter.inList(wind_property, list(table)))

    styles = table.to_ee_dictionary()

    def _attach(feature: Any) -> Any:
        key = ee.Number(feature.get(wind_property)).format("%d")
        return feature.set(STYLE_PROPERTY, styles.get(key))

    return points.map(_attach).style(styleProperty=STYLE_PROPERTY)
