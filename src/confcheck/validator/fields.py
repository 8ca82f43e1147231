"""
Single-value field validators.

Structural checks on individual config values: presence, enumerations,
URL/hostname shape, durations and file paths.
"""

import re
from pathlib import Path
from typing import Any, Optional, Sequence
from urllib.parse import urlsplit

from confcheck.validator.types import ErrorKind, Outcome, failed, passed


HOSTNAME_PATTERN = re.compile(r"^[a-zA-Z\-0-9.]+(:[0-9]+)?$")
TIME_PATTERN = re.compile(r"^[0-9]+(w|m|d|h|s)$")


def validate_required_string(value: str, field: str, field_group: str) -> Outcome:
    """Fail if the string is empty."""
    if value == "":
        return failed([field], field_group, f"{field} is required", ErrorKind.MISSING_VALUE)
    return passed()


def validate_required_object(value: Optional[Any], field: str, field_group: str) -> Outcome:
    """Fail if the value is None."""
    if value is None:
        return failed([field], field_group, f"{field} is required", ErrorKind.MISSING_VALUE)
    return passed()


def validate_at_least_one_of_bool(
    values: Sequence[bool],
    fields: Sequence[str],
    field_group: str,
) -> Outcome:
    """Fail unless at least one of the flags is set."""
    if not any(values):
        return _none_present(fields, field_group)
    return passed()


def validate_at_least_one_of_string(
    values: Sequence[str],
    fields: Sequence[str],
    field_group: str,
) -> Outcome:
    """Fail unless at least one of the strings is non-empty."""
    if not any(v != "" for v in values):
        return _none_present(fields, field_group)
    return passed()


def _none_present(fields: Sequence[str], field_group: str) -> Outcome:
    return failed(
        fields,
        field_group,
        f"At least one of {','.join(fields)} must be present",
        ErrorKind.MISSING_VALUE,
    )


def validate_is_one_of_string(
    value: str,
    options: Sequence[str],
    field: str,
    field_group: str,
) -> Outcome:
    if value not in options:
        return failed(
            [field],
            field_group,
            f"{field} must be one of {','.join(options)}.",
            ErrorKind.INVALID_VALUE,
        )
    return passed()


def validate_is_url(value: str, field: str, field_group: str) -> Outcome:
    """A URL needs at least a scheme and a host."""
    try:
        parts = urlsplit(value)
        parts.port  # raises on a malformed port
    except ValueError:
        parts = None

    if parts is None or not parts.scheme or not parts.netloc:
        return failed([field], field_group, f"{field} must be of type URL", ErrorKind.INVALID_VALUE)
    return passed()


def validate_is_hostname(value: str, field: str, field_group: str) -> Outcome:
    if not HOSTNAME_PATTERN.fullmatch(value.strip(" ")):
        return failed([field], field_group, f"{field} must be of type Hostname", ErrorKind.INVALID_VALUE)
    return passed()


def validate_time_pattern(value: str, field: str, field_group: str) -> Outcome:
    """Durations look like ``30s``, ``5m``, ``12h``, ``7d`` or ``2w``."""
    if not TIME_PATTERN.fullmatch(value):
        return failed(
            [field],
            field_group,
            f"{field} must have the regex pattern {TIME_PATTERN.pattern}",
            ErrorKind.INVALID_VALUE,
        )
    return passed()


def validate_file_exists(path: str | Path, field: str, field_group: str) -> Outcome:
    if not Path(path).exists():
        return failed([field], field_group, f"Cannot access the file {path}", ErrorKind.FILE_NOT_FOUND)
    return passed()
