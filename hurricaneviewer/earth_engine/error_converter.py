"""Earth Engine error conversion utilities.

This module converts failures raised by the ``earthengine-api`` client into
the appropriate :class:`~hurricaneviewer.exceptions.PlatformError`
subclasses with user-friendly messages.
"""

from __future__ import annotations

import contextlib
from typing import Any, Iterator, Optional

import ee

from hurricaneviewer.exceptions import (
    InvalidQueryError,
    PlatformAuthenticationError,
    PlatformError,
    ResourceLimitExceededError,
)
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)

# Substrings of platform messages, checked in order of precedence
RESOURCE_LIMIT_MARKERS = (
    "memory limit",
    "too many pixels",
    "too many concurrent",
    "timed out",
    "too large",
    "quota",
    "capacity exceeded",
)
AUTHENTICATION_MARKERS = (
    "credentials",
    "authenticate",
    "not signed up",
    "permission",
    "not authorized",
    "access denied",
)
INVALID_QUERY_MARKERS = (
    "not found",
    "does not exist",
    "invalid",
    "unrecognized",
    "parameter",
    "no band named",
)


class EarthEngineErrorConverter:
    """Converts Earth Engine client errors to PlatformError subclasses."""

    @staticmethod
    def _build_technical_details(operation: str, message: str, context: dict[str, Any]) -> str:
        details = [f"Operation: {operation}", f"Platform message: {message}"]
        for key, value in context.items():
            details.append(f"{key}: {value}")
        return "\n".join(details)

    @staticmethod
    def from_exception(
        error: Exception,
        operation: str,
        additional_context: Optional[dict[str, Any]] = None,
    ) -> PlatformError:
        """Convert an exception raised during ``operation``.

        Args:
            error: The exception raised by the Earth Engine client
            operation: Description of the operation (e.g., "request animation URL")
            additional_context: Optional additional context (asset id, region, ...)

        Returns:
            Appropriate PlatformError subclass
        """
        message = str(error)
        lowered = message.lower()
        technical_details = EarthEngineErrorConverter._build_technical_details(
            operation, message, additional_context or {}
        )

        if any(marker in lowered for marker in RESOURCE_LIMIT_MARKERS):
            return ResourceLimitExceededError(
                message=f"Earth Engine resource limit exceeded while trying to {operation}",
                technical_details=technical_details
                + "\nReduce the area, the time range or the output dimensions and try again.",
                original_exception=error,
            )
        if any(marker in lowered for marker in AUTHENTICATION_MARKERS):
            return PlatformAuthenticationError(
                message=f"Earth Engine rejected the credentials while trying to {operation}",
                technical_details=technical_details + "\nRun `earthengine authenticate` or check the project id.",
                original_exception=error,
            )
        if isinstance(error, ee.EEException) and any(marker in lowered for marker in INVALID_QUERY_MARKERS):
            return InvalidQueryError(
                message=f"Earth Engine could not {operation}: {message}",
                technical_details=technical_details,
                original_exception=error,
            )
        return PlatformError(
            message=f"Earth Engine failed to {operation}: {message}",
            technical_details=technical_details,
            original_exception=error,
        )


@contextlib.contextmanager
def platform_call(operation: str, **context: Any) -> Iterator[None]:
    """Translate any client error raised in the block into a PlatformError.

    Errors that are already PlatformErrors pass through unchanged.
    """
    try:
        yield
    except PlatformError:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        converted = EarthEngineErrorConverter.from_exception(exc, operation, context)
        LOGGER.debug("Converted %s into %s", type(exc).__name__, type(converted).__name__)
        raise converted from exc
