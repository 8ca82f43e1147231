"""
Pre-flight validation of service configuration.

Each validator checks one thing and returns ``(ok, ValidationError)``:
- Field shape (required values, enumerations, URLs, hostnames, durations)
- Certificates (presence per feature, key pairing, hostname binding)
- Reachability (TCP for http, TCP + TLS handshake for https)
- External services (OAuth credentials, Redis)
"""

from confcheck.validator.types import ErrorKind, ValidationError, passed, failed
from confcheck.validator.options import Options
from confcheck.validator.tls import TLSConfigError, build_tls_context
from confcheck.validator.certs import (
    KeyPair,
    KeyPairError,
    load_key_pair,
    validate_all_certs_present,
    validate_cert_pair_with_hostname,
    validate_certs_present,
)
from confcheck.validator.hostport import strip_port
from confcheck.validator.reachability import validate_host_is_reachable
from confcheck.validator.fields import (
    validate_at_least_one_of_bool,
    validate_at_least_one_of_string,
    validate_file_exists,
    validate_is_hostname,
    validate_is_one_of_string,
    validate_is_url,
    validate_required_object,
    validate_required_string,
    validate_time_pattern,
)
from confcheck.validator.services import validate_oauth_credentials, validate_redis_connection
from confcheck.validator.core import (
    CHECK_TYPES,
    ValidationResults,
    format_results,
    validate_config,
)

__all__ = [
    # Error model
    "ErrorKind",
    "ValidationError",
    "passed",
    "failed",
    "Options",
    # TLS
    "TLSConfigError",
    "build_tls_context",
    # Certificates
    "KeyPair",
    "KeyPairError",
    "load_key_pair",
    "strip_port",
    "validate_certs_present",
    "validate_all_certs_present",
    "validate_cert_pair_with_hostname",
    # Reachability
    "validate_host_is_reachable",
    # Fields
    "validate_required_string",
    "validate_required_object",
    "validate_at_least_one_of_bool",
    "validate_at_least_one_of_string",
    "validate_is_one_of_string",
    "validate_is_url",
    "validate_is_hostname",
    "validate_time_pattern",
    "validate_file_exists",
    # Services
    "validate_oauth_credentials",
    "validate_redis_connection",
    # Runner
    "CHECK_TYPES",
    "ValidationResults",
    "format_results",
    "validate_config",
]
