"""Map tile layers.

Each visualized dataset becomes a named XYZ tile layer that any web map can
display, plus a flag saying whether it starts visible. The layers are
written to a JSON manifest together with the map centre.
"""

from __future__ import annotations

import json
import pathlib
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional

from hurricaneviewer.core.models import PointOfInterest, VisParams
from hurricaneviewer.earth_engine.error_converter import platform_call
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class MapLayer:
    name: str
    tile_url: str
    shown: bool = True


def build_layer(ee_object: Any, vis: Optional[VisParams], name: str, shown: bool = True) -> MapLayer:
    """Request map tiles for ``ee_object`` rendered with ``vis``.

    ``vis`` may be None for objects that are already RGB, such as a styled
    FeatureCollection.
    """
    params = vis.to_ee() if vis is not None else {}
    with platform_call(f"create map tiles for {name}"):
        map_id = ee_object.getMapId(params)
    tile_url = map_id["tile_fetcher"].url_format
    LOGGER.debug("Layer %r tiles: %s", name, tile_url)
    return MapLayer(name=name, tile_url=tile_url, shown=shown)


def write_layer_manifest(
    layers: Iterable[MapLayer], center: PointOfInterest, zoom: int, destination: pathlib.Path
) -> pathlib.Path:
    """Write the map centre and layer list as JSON."""
    manifest = {
        "center": {"lon": center.lon, "lat": center.lat, "name": center.name},
        "zoom": zoom,
        "layers": [asdict(layer) for layer in layers],
    }
    destination.parent.mkdir(parents=True, exist_ok=True)
    with open(destination, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
    LOGGER.info("Wrote %d map layers to %s", len(manifest["layers"]), destination)
    return destination
