"""Earth Engine session initialization."""

from __future__ import annotations

from typing import TYPE_CHECKING

import ee

from hurricaneviewer.earth_engine.error_converter import EarthEngineErrorConverter
from hurricaneviewer.exceptions import PlatformAuthenticationError
from hurricaneviewer.utils.log import get_logger

if TYPE_CHECKING:
    from hurricaneviewer.core.configuration import EarthEngineSettings

LOGGER = get_logger(__name__)


def _initialize(settings: "EarthEngineSettings") -> None:
    if settings.service_account and settings.key_file:
        credentials = ee.ServiceAccountCredentials(settings.service_account, str(settings.key_file))
        ee.Initialize(credentials, project=settings.project)
    elif settings.project:
        ee.Initialize(project=settings.project)
    else:
        ee.Initialize()


def initialize(settings: "EarthEngineSettings") -> None:
    """Initialize the Earth Engine client.

    Service-account credentials are used when both an account and a key file
    are configured. Otherwise the user's stored credentials are used, and when
    they are missing and interactive auth is allowed the browser flow is
    launched once before retrying.

    Raises:
        PlatformAuthenticationError: If the client cannot be initialized.
    """
    try:
        _initialize(settings)
    except Exception as exc:  # pylint: disable=broad-except
        if not settings.allow_interactive_auth or settings.service_account:
            raise PlatformAuthenticationError(
                message="Could not initialize Earth Engine",
                technical_details=str(exc),
                original_exception=exc,
            ) from exc
        LOGGER.info("Earth Engine authentication required. Launching flow ...")
        try:
            ee.Authenticate()
            _initialize(settings)
        except Exception as retry_exc:  # pylint: disable=broad-except
            converted = EarthEngineErrorConverter.from_exception(retry_exc, "initialize Earth Engine")
            raise PlatformAuthenticationError(
                message="Could not initialize Earth Engine after authenticating",
                technical_details=converted.technical_details,
                original_exception=retry_exc,
            ) from retry_exc

    LOGGER.info("Earth Engine initialized (project=%s)", settings.project or "default")
