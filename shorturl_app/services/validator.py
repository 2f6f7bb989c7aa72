"""
Validation rules for short URL paths and destinations.

Validators never raise for malformed input. They return the list of
human readable error messages for a field; an empty list means valid.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urlsplit

MAX_PATH_LENGTH = 10

PATH_PATTERN = re.compile(r"[A-Za-z0-9_]*")

PATH_NULL = "Path cannot be null."
PATH_EMPTY = "Path cannot be empty."
PATH_TOO_LONG = f"Path cannot be longer than {MAX_PATH_LENGTH} characters."
PATH_INVALID_CHARACTERS = "Path can only contain alphanumeric characters and underscores."
DESTINATION_NULL = "Destination cannot be null."
DESTINATION_EMPTY = "Destination cannot be empty."
DESTINATION_INVALID = "Destination has to be a valid absolute URL."


@dataclass
class ValidationResult:
    """Per-field validation errors for a short URL."""

    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not any(self.errors.values())


def strip_slashes(path: Optional[str]) -> Optional[str]:
    """Remove leading and trailing '/' so '/foo/' and 'foo' are the same path"""
    if path is None:
        return None
    return path.strip("/")


def validate_path(path: Optional[str]) -> List[str]:
    """
    Validate a short path.

    Length and charset errors are not exclusive: a path that is both too
    long and contains bad characters reports both messages.
    """
    if path is None:
        return [PATH_NULL]
    if path == "":
        return [PATH_EMPTY]

    errors = []
    if len(path) > MAX_PATH_LENGTH:
        errors.append(PATH_TOO_LONG)
    if not PATH_PATTERN.fullmatch(path):
        errors.append(PATH_INVALID_CHARACTERS)
    return errors


def is_valid_path(path: Optional[str]) -> bool:
    return not validate_path(path)


def _is_absolute_url(value: str) -> bool:
    if value != value.strip() or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    if not parts.scheme or not parts.netloc:
        return False
    return bool(parts.hostname)


def validate_destination(destination: Optional[str]) -> List[str]:
    """Validate that the destination is a well-formed absolute URL"""
    if destination is None:
        return [DESTINATION_NULL]
    if destination == "":
        return [DESTINATION_EMPTY]
    if not _is_absolute_url(destination):
        return [DESTINATION_INVALID]
    return []


def validate(short_url) -> ValidationResult:
    """
    Run both field checks and collect the results by field name.

    Accepts a ShortUrl or any request object exposing `path` and
    `destination`, which may be None.
    """
    return ValidationResult(
        errors={
            "path": validate_path(short_url.path),
            "destination": validate_destination(short_url.destination),
        }
    )
