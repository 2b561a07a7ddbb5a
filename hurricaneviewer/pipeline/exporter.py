"""Animated GIF export.

Earth Engine encodes the animation; this module requests its URL, downloads
the bytes and checks that they are a readable GIF before writing them out.
The animation is only rendered when its URL is fetched, so large areas or
long time ranges that exceed the platform's limits make the download fail
with :class:`~hurricaneviewer.exceptions.ResourceLimitExceededError`. The
request is not retried.
"""

from __future__ import annotations

import io
import json
import pathlib
from dataclasses import dataclass
from typing import Any, Dict

import ee
import requests
from PIL import Image, UnidentifiedImageError

from hurricaneviewer.core.models import AnimationSpec
from hurricaneviewer.earth_engine.error_converter import EarthEngineErrorConverter, platform_call
from hurricaneviewer.exceptions import DownloadError, PlatformError
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)

GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
DEFAULT_TIMEOUT_SECONDS = 120.0
MAX_ERROR_BODY_BYTES = 4096


@dataclass(frozen=True)
class AnimationExport:
    """A rendered animation: its title, shareable URL and local copy."""

    title: str
    url: str
    path: pathlib.Path
    frame_count: int


def animation_params(spec: AnimationSpec) -> Dict[str, Any]:
    """Build the ``getVideoThumbURL`` parameter dictionary."""
    return {
        "dimensions": spec.dimensions,
        "region": spec.region.to_ee(),
        "framesPerSecond": spec.frames_per_second,
        "crs": spec.crs,
    }


def request_animation_url(collection: Any, spec: AnimationSpec) -> str:
    """Ask Earth Engine to render ``collection`` and return the GIF URL."""
    params = animation_params(spec)
    with platform_call(
        "request animation URL",
        region=spec.region.as_list(),
        dimensions=spec.dimensions,
        fps=spec.frames_per_second,
    ):
        url = collection.getVideoThumbURL(params)
    LOGGER.debug("Animation URL: %s", url)
    return str(url)


def _count_frames(payload: bytes) -> int:
    try:
        with Image.open(io.BytesIO(payload)) as img:
            return int(getattr(img, "n_frames", 1))
    except (UnidentifiedImageError, OSError) as exc:
        raise DownloadError(
            message="Downloaded animation is not a readable GIF",
            technical_details=str(exc),
            original_exception=exc,
        ) from exc


def _platform_message(payload: bytes) -> str:
    """Extract the error message from an Earth Engine error body.

    Bodies are JSON (``{"error": {"message": ...}}`` or ``{"message": ...}``)
    or, behind some proxies, plain text or HTML.
    """
    text = payload[:MAX_ERROR_BODY_BYTES].decode("utf-8", errors="replace").strip()
    try:
        body = json.loads(text)
    except ValueError:
        return text
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return text


def _render_failure(url: str, response: requests.Response) -> PlatformError:
    """Classify a failed render the way client errors are classified.

    Earth Engine only evaluates the animation when its URL is fetched, so
    memory and pixel limits are reported in the download response.
    """
    message = _platform_message(response.content)
    converted = EarthEngineErrorConverter.from_exception(
        ee.EEException(message),
        "render animation",
        {"url": url, "status": response.status_code},
    )
    if type(converted) is PlatformError:
        return DownloadError(
            message="Animation URL did not return a GIF",
            technical_details=converted.technical_details,
        )
    return converted


def download_animation(
    url: str, destination: pathlib.Path, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> tuple[pathlib.Path, int]:
    """Download a rendered GIF to ``destination``.

    Returns:
        The written path and the number of frames in the GIF.

    Raises:
        ResourceLimitExceededError: If rendering hit a platform limit.
        DownloadError: On connection failure or if the payload is not a GIF.
    """
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise DownloadError(
            message=f"Failed to download animation from {url}",
            technical_details=str(exc),
            original_exception=exc,
        ) from exc

    payload = response.content
    if not response.ok or not payload.startswith(GIF_SIGNATURES):
        raise _render_failure(url, response)
    frame_count = _count_frames(payload)

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(payload)
    LOGGER.info("Saved %d-frame animation to %s", frame_count, destination)
    return destination, frame_count


def export_animation(
    collection: Any,
    spec: AnimationSpec,
    destination: pathlib.Path,
    title: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> AnimationExport:
    """Request, download and save one animation."""
    url = request_animation_url(collection, spec)
    LOGGER.info("%s: %s", title, url)
    path, frame_count = download_animation(url, destination, timeout=timeout)
    return AnimationExport(title=title, url=url, path=path, frame_count=frame_count)
