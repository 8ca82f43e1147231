"""
Shared types for the validator module.

Every validator returns ``(ok, ValidationError)``. Callers check the flag,
never the emptiness of the error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ErrorKind(Enum):
    """Kind of validation failure."""
    MISSING_VALUE = "missing_value"
    INVALID_VALUE = "invalid_value"
    MISSING_CERTIFICATE_SET = "missing_certificate_set"
    CERTIFICATE_NOT_FOUND = "certificate_not_found"
    KEY_PAIR_MISMATCH = "key_pair_mismatch"
    HOSTNAME_VERIFICATION_FAILED = "hostname_verification_failed"
    DIAL_FAILED = "dial_failed"
    TLS_HANDSHAKE_FAILED = "tls_handshake_failed"
    TLS_CONFIG_INVALID = "tls_config_invalid"
    UNSUPPORTED_SCHEME = "unsupported_scheme"
    FILE_NOT_FOUND = "file_not_found"
    DATASTORE_UNREACHABLE = "datastore_unreachable"
    OAUTH_REJECTED = "oauth_rejected"


@dataclass(frozen=True)
class ValidationError:
    """A single validation failure. The zero value means "no error"."""
    tags: tuple[str, ...] = ()
    field_group: str = ""
    message: str = ""
    kind: ErrorKind | None = None


Outcome = tuple[bool, ValidationError]


def passed() -> Outcome:
    return True, ValidationError()


def failed(tags: Iterable[str], field_group: str, message: str, kind: ErrorKind) -> Outcome:
    return False, ValidationError(
        tags=tuple(tags),
        field_group=field_group,
        message=message,
        kind=kind,
    )
