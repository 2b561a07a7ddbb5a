"""Frame visualization and border-outline compositing.

Both stages are server-side transforms: every function returns a new
Earth Engine object and never mutates its input.
"""

from __future__ import annotations

from typing import Any

import ee

from hurricaneviewer.core.models import VisParams, normalize_hex_color
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)


def visualize_collection(collection: Any, vis: VisParams) -> Any:
    """Map every frame to a three-band RGB rendering with ``vis``."""
    params = vis.to_ee()

    def _visualize(image: Any) -> Any:
        return ee.Image(image).visualize(**params)

    return collection.map(_visualize)


def paint_outline(features: Any, line_color: str, width: int = 1) -> Any:
    """Paint feature edges onto an empty image and colour them ``line_color``."""
    color = normalize_hex_color(line_color)
    return (
        ee.Image()
        .byte()
        .paint(featureCollection=features, color=1, width=width)
        .visualize(palette=[color])
    )


def overlay_outline(collection: Any, outline: Any) -> Any:
    """Blend the precomputed ``outline`` over every frame of ``collection``.

    The outline is opaque where painted and masked elsewhere, so blending it
    a second time leaves every pixel unchanged.
    """

    def _blend(image: Any) -> Any:
        return ee.Image(image).blend(outline)

    return collection.map(_blend)


def composite_frames(collection: Any, vis: VisParams, outline: Any) -> Any:
    """Visualize each frame, then draw the border outline on top."""
    LOGGER.debug("Compositing frames with palette of %d colours", len(vis.palette))
    return overlay_outline(visualize_collection(collection, vis), outline)
