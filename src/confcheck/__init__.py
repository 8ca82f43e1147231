"""
confcheck: Pre-flight configuration validation.

Checks config values and the hosts, certificates and services they point at
before a service starts.
"""

__version__ = "0.1.0"

from confcheck.validator import Options, ValidationError, validate_config
from confcheck.config import load_preflight

__all__ = [
    "Options",
    "ValidationError",
    "validate_config",
    "load_preflight",
]
