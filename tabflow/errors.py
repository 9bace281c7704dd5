"""Exception types raised by the extraction pipeline.

Only the startup errors (`ConfigError`, `ProfileNotFoundError`,
`InputDirectoryError`) are fatal.  Everything else is reported through the
runner's error channel and the run carries on.
"""

from __future__ import annotations


class TabflowError(Exception):
    """Base class for all tabflow errors."""


class ConfigError(TabflowError):
    """The profile document is missing, unreadable or invalid."""


class ProfileNotFoundError(ConfigError):
    """The requested profile is not defined in the profile document."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = sorted(available or [])
        message = f"profile '{name}' not found"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class InputDirectoryError(TabflowError):
    """The input directory does not exist or cannot be listed."""


class DecodeError(TabflowError):
    """A file is neither valid UTF-8 nor valid UTF-16."""


class JsonParseError(TabflowError):
    """A file does not hold a JSON object with a ``value`` array."""


class PathResolveError(TabflowError):
    """A dotted JSON path could not be followed."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(f"{message} (path '{path}')" if path else message)


class KeyNotFoundError(PathResolveError):
    """A mapping step names a key that is not present."""


class IndexParseError(PathResolveError):
    """An array step is not of the form ``[n]``."""


class IndexRangeError(PathResolveError):
    """An array step is outside the bounds of the array."""


class HtmlParseError(TabflowError):
    """An HTML body could not be parsed."""


class RecordError(TabflowError):
    """A record cannot be turned into a row; aborts the current file."""


class WriteError(TabflowError):
    """A row could not be written to the output table."""
