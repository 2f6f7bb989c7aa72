"""Exceptions for the short URL service layer.

Each exception carries the process exit code the CLI terminates with,
so every kind of failure is distinguishable by callers scripting the CLI.
"""

from typing import Dict, List


class ShortUrlError(Exception):
    """Base exception for all service-level errors."""

    exit_code = 1


class ShortUrlValidationError(ShortUrlError):
    """Path or destination failed validation checks."""

    exit_code = 3

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        messages = [
            f"{field}: {message}"
            for field, field_errors in errors.items()
            for message in field_errors
        ]
        super().__init__("; ".join(messages) or "Validation failed.")


class PathAlreadyInUse(ShortUrlError):
    """The requested path is already mapped to a destination."""

    exit_code = 4

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Shortened URL with path '{path}' already exists.")


class NotFound(ShortUrlError):
    """No short URL exists for the requested path."""

    exit_code = 5

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Shortened URL with path '{path}' does not exist.")


class PersistenceFailure(ShortUrlError):
    """The backing store did not apply or answer an operation."""

    exit_code = 6


class DeletionFailure(PersistenceFailure):
    """The backing store did not delete an existing entry."""


class InvalidCursor(ShortUrlError):
    """A listing cursor was not issued by the store it was passed to."""

    exit_code = 3

    def __init__(self, cursor: str):
        self.cursor = cursor
        super().__init__(f"Invalid listing cursor '{cursor}'.")


class ConfigurationError(ShortUrlError):
    """Required configuration is missing or invalid."""

    exit_code = 7


class MissingConnectionString(ConfigurationError):
    """No store connection string was supplied."""

    def __init__(self, message: str = "Missing connection string"):
        super().__init__(message)


class InvalidConnectionString(ConfigurationError):
    """The store connection string could not be parsed."""


class MissingForwarderBaseUrl(ConfigurationError):
    """A forwarder base URL is required but not configured."""

    def __init__(self, message: str = "Missing forwarder base URL"):
        super().__init__(message)
