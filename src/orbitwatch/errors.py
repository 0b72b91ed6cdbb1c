"""Error handling utilities for pass prediction."""

import sys
from typing import Optional


class OrbitWatchError(Exception):
    """Base exception for orbitwatch-specific errors."""

    def __init__(self, message: str, suggestions: Optional[list[str]] = None):
        """Initialize with message and optional suggestions.

        Args:
            message: Error description
            suggestions: Optional list of actionable suggestions
        """
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with suggestions."""
        formatted = f"{self.message}"
        if self.suggestions:
            formatted += "\n\nSuggestions:"
            for suggestion in self.suggestions:
                formatted += f"\n  - {suggestion}"
        return formatted


class InvalidObserverError(OrbitWatchError, ValueError):
    """Raised when observer coordinates are out of range."""

    def __init__(self, latitude: float, longitude: float, altitude_km: float):
        self.latitude = latitude
        self.longitude = longitude
        self.altitude_km = altitude_km
        message = (
            f"Invalid observer location: lat={latitude}, lon={longitude}, "
            f"alt={altitude_km} km"
        )
        suggestions = [
            "Latitude must be within [-90, 90] degrees",
            "Longitude must be within [-180, 180] degrees",
            "Altitude must be zero or positive (kilometres above sea level)",
        ]
        super().__init__(message, suggestions)


class NoEphemerisSolutionError(OrbitWatchError):
    """Raised by a propagator that cannot resolve a state for a time."""

    def __init__(self, when: str, reason: str = ""):
        message = f"No ephemeris solution at {when}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UpstreamUnavailableError(OrbitWatchError):
    """Raised when an ephemeris, cloud-cover or launch source fails."""

    def __init__(self, source: str, reason: str = ""):
        message = f"Upstream source unavailable: {source}"
        if reason:
            message += f" ({reason})"
        suggestions = [
            "The last known value is kept; ratings fall back to 'Unknown'",
            "Check network connectivity or the source's API key",
        ]
        super().__init__(message, suggestions)


class TimeParseError(OrbitWatchError):
    """Raised when a UTC time cannot be parsed."""

    def __init__(self, utc_time: str):
        message = f"Invalid UTC time format: '{utc_time}'"
        suggestions = [
            "Use ISO-8601 format with 'Z' suffix for UTC (e.g., '2026-01-15T08:00:00Z')",
            "Omit the option to use the current time",
        ]
        super().__init__(message, suggestions)


class TLEParseError(OrbitWatchError):
    """Raised when two-line element data cannot be read."""

    def __init__(self, detail: str):
        message = f"Could not read two-line element set: {detail}"
        suggestions = [
            "Pass --tle with a file holding an optional name line and two element lines",
            "Or pass both --line1 and --line2",
        ]
        super().__init__(message, suggestions)


def print_error(error: Exception) -> None:
    """Print error to stderr with formatted output.

    Args:
        error: Exception to print
    """
    print(f"Error: {error}", file=sys.stderr)

    if isinstance(error, OrbitWatchError):
        if error.suggestions:
            print(file=sys.stderr)


def handle_error(error: Exception, context: Optional[str] = None) -> int:
    """Handle an error with optional context and return exit code.

    Args:
        error: Exception that occurred
        context: Optional description of what was being attempted

    Returns:
        Exit code (1 for error)
    """
    if context:
        print(f"Error while {context}:", file=sys.stderr)

    print_error(error)

    import traceback

    if not isinstance(error, OrbitWatchError):
        traceback.print_exc()

    return 1
