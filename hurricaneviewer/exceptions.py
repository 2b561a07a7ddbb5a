"""exceptions.py

Defines custom exception classes for hurricaneviewer, providing clear error
types for configuration, date handling, wind styling and Earth Engine
requests.

All exceptions inherit from HurricaneViewerError, allowing for unified error
handling at the command line entry point.
"""

from typing import Optional


class HurricaneViewerError(Exception):  # pylint: disable=too-few-public-methods
    """Base class for all hurricaneviewer application-specific errors."""


class ConfigurationError(HurricaneViewerError):  # pylint: disable=too-few-public-methods
    """Exception raised for errors related to application configuration.

    This error is used when configuration values are missing, invalid, or inconsistent.
    """


class InvalidDateRangeError(HurricaneViewerError):  # pylint: disable=too-few-public-methods
    """Raised when a time window is empty or reversed, or a frame falls outside it."""


class StyleNotFoundError(HurricaneViewerError, KeyError):
    """Raised when wind speeds have no entry in the wind style table, or track points have no wind speed."""

    def __init__(self, speeds: list[float], unrated: int = 0) -> None:
        self.speeds = sorted(speeds)
        self.unrated = unrated
        problems = []
        if self.speeds:
            listed = ", ".join(str(s) for s in self.speeds)
            problems.append(f"No wind style configured for {listed} kts")
        if unrated:
            problems.append(f"{unrated} track points have no wind speed")
        super().__init__("; ".join(problems))

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class PlatformError(HurricaneViewerError):
    """Base exception for failures reported by Earth Engine."""

    def __init__(
        self,
        message: str,
        technical_details: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: A short, user-facing description.
            technical_details: Operation name and raw platform message, if known.
            original_exception: The exception raised by the platform client.
        """
        super().__init__(message)
        self.message = message
        self.technical_details = technical_details
        self.original_exception = original_exception

    def get_user_message(self) -> str:
        """Get a user-friendly error message."""
        return self.message


class PlatformAuthenticationError(PlatformError):
    """Earth Engine credentials are missing, expired or not authorized."""


class InvalidQueryError(PlatformError):
    """A query referenced an unknown asset or passed malformed parameters."""


class EmptyResultError(PlatformError):
    """A query matched no images or features."""


class ResourceLimitExceededError(PlatformError):
    """The platform hit a memory, pixel or time limit evaluating a request.

    Typically raised when an animation covers too large an area or too long
    a time range.
    """


class DownloadError(PlatformError):
    """Fetching a rendered artifact from its URL failed."""
