"""
Config loading for confcheck.

Reads pre-flight files (TOML or YAML) into Options plus a list of checks.
"""

from confcheck.config.loader import CheckSpec, ConfigError, PreflightConfig, load_preflight

__all__ = [
    "CheckSpec",
    "ConfigError",
    "PreflightConfig",
    "load_preflight",
]
