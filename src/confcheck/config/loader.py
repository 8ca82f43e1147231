"""
Pre-flight file loading.

A pre-flight file lists the certificate set and the checks to run. TOML and
YAML are both accepted:

    [certificates]
    "ca.crt" = "certs/ca.pem"

    [[checks]]
    type = "reachable"
    field = "API_URL"
    group = "Upstream"
    value = "https://api.internal:8443"

Certificate paths are relative to the file's directory.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli
import yaml

from confcheck.validator.options import Options

DEFAULT_GROUP = "General"
YAML_SUFFIXES = {".yaml", ".yml"}


class ConfigError(Exception):
    """The pre-flight file cannot be read or has the wrong shape."""


@dataclass
class CheckSpec:
    """One ``[[checks]]`` entry."""
    type: str
    field: str
    group: str = DEFAULT_GROUP
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class PreflightConfig:
    """A loaded pre-flight file."""
    options: Options
    checks: list[CheckSpec]
    base_dir: Path

    def resolve(self, path: str | Path) -> Path:
        """Resolve a path from the file relative to its directory."""
        return self.base_dir / Path(path).expanduser()


def load_preflight(path: Path) -> PreflightConfig:
    """
    Load a pre-flight file.

    Args:
        path: Path to a .toml, .yaml or .yml file

    Returns:
        PreflightConfig with certificate material already read from disk

    Raises:
        ConfigError: If the file is missing, unparseable or malformed
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    data = _parse(path)
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a table at the top level")

    base_dir = path.parent
    certificates = _load_certificates(data.get("certificates"), base_dir)

    raw_checks = data.get("checks", [])
    if not isinstance(raw_checks, list):
        raise ConfigError(f"{path}: 'checks' must be a list")

    return PreflightConfig(
        options=Options(certificates=certificates),
        checks=[_parse_check(i, entry) for i, entry in enumerate(raw_checks)],
        base_dir=base_dir,
    )


def _parse(path: Path) -> Any:
    try:
        if path.suffix in YAML_SUFFIXES:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        with open(path, "rb") as f:
            return tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def _load_certificates(raw: Any, base_dir: Path) -> dict[str, bytes] | None:
    """Read every certificate file; ``None`` when the section is absent."""
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError("'certificates' must map names to file paths")

    certificates = {}
    for name, cert_path in raw.items():
        full_path = base_dir / Path(str(cert_path)).expanduser()
        try:
            certificates[str(name)] = full_path.read_bytes()
        except OSError as e:
            raise ConfigError(f"Cannot access the file {full_path} for certificate {name}: {e.strerror}") from e

    return certificates


def _parse_check(index: int, entry: Any) -> CheckSpec:
    if not isinstance(entry, dict) or "type" not in entry:
        raise ConfigError(f"checks[{index}]: every check needs a 'type'")

    params = dict(entry)
    check_type = str(params.pop("type"))
    return CheckSpec(
        type=check_type,
        field=str(params.pop("field", check_type)),
        group=str(params.pop("group", DEFAULT_GROUP)),
        params=params,
    )
