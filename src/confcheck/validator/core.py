"""
Runs the checks listed in a pre-flight file and collects the outcomes.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import requests
from rich.console import Console
from rich.text import Text

from confcheck.validator.certs import (
    validate_all_certs_present,
    validate_cert_pair_with_hostname,
    validate_certs_present,
)
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
from confcheck.validator.reachability import validate_host_is_reachable
from confcheck.validator.services import validate_oauth_credentials, validate_redis_connection
from confcheck.validator.types import ErrorKind, Outcome, ValidationError

if TYPE_CHECKING:
    from confcheck.config.loader import CheckSpec, PreflightConfig


class CheckParamError(Exception):
    """A check entry is missing a parameter it needs, or has one of the wrong type."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.MISSING_VALUE):
        super().__init__(message)
        self.kind = kind


SCALAR = (str, int, float)

TYPE_NAMES = {
    SCALAR: "a string or number",
    list: "a list",
    bool: "true or false",
    str: "a string",
}


@dataclass
class CheckOutcome:
    """Result of one check."""
    check: str
    field: str
    group: str
    ok: bool
    error: ValidationError = field(default_factory=ValidationError)


@dataclass
class ValidationResults:
    """Collection of check outcomes."""
    outcomes: list[CheckOutcome] = field(default_factory=list)
    config_path: Path | None = None

    @property
    def has_errors(self) -> bool:
        return any(not o.ok for o in self.outcomes)

    @property
    def errors(self) -> list[ValidationError]:
        return [o.error for o in self.outcomes if not o.ok]

    def add(self, check: str, field: str, group: str, ok: bool, error: ValidationError) -> None:
        self.outcomes.append(CheckOutcome(check=check, field=field, group=group, ok=ok, error=error))

    def add_error(self, check: str, field: str, group: str, message: str, kind: ErrorKind) -> None:
        error = ValidationError(tags=(field,), field_group=group, message=message, kind=kind)
        self.add(check, field, group, False, error)

    def by_group(self) -> dict[str, list[CheckOutcome]]:
        """Outcomes keyed by field group, in first-seen order."""
        groups: dict[str, list[CheckOutcome]] = {}
        for o in self.outcomes:
            groups.setdefault(o.group, []).append(o)
        return groups


CheckRunner = Callable[["CheckSpec", "PreflightConfig", bool], Outcome]


def _param(check: "CheckSpec", name: str, expected: type | tuple[type, ...] = SCALAR) -> Any:
    if name not in check.params:
        raise CheckParamError(f"Check {check.type!r} for {check.field} needs a '{name}' parameter")
    return _typed(check, name, check.params[name], expected)


def _optional_param(check: "CheckSpec", name: str, default: Any, expected: type | tuple[type, ...]) -> Any:
    if name not in check.params:
        return default
    return _typed(check, name, check.params[name], expected)


def _typed(check: "CheckSpec", name: str, value: Any, expected: type | tuple[type, ...]) -> Any:
    if not isinstance(value, expected):
        raise CheckParamError(
            f"Check {check.type!r} for {check.field}: '{name}' must be {TYPE_NAMES[expected]}, "
            f"got {type(value).__name__}",
            ErrorKind.INVALID_VALUE,
        )
    return value


def _string_list(check: "CheckSpec", name: str, values: list) -> list[str]:
    for value in values:
        _typed(check, name + " entries", value, SCALAR)
    return [str(v) for v in values]


def _run_required(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    value = check.params.get("value")
    if value is None:
        return validate_required_object(value, check.field, check.group)
    return validate_required_string(str(value), check.field, check.group)


def _run_one_of(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    options = _string_list(check, "options", _param(check, "options", list))
    return validate_is_one_of_string(str(_param(check, "value")), options, check.field, check.group)


def _run_at_least_one_of(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    values = _param(check, "values", list)
    fields = _string_list(check, "fields", _optional_param(check, "fields", [check.field], list))
    if values and all(isinstance(v, bool) for v in values):
        return validate_at_least_one_of_bool(values, fields, check.group)
    strings = _string_list(check, "values", [v or "" for v in values])
    return validate_at_least_one_of_string(strings, fields, check.group)


def _run_url(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    return validate_is_url(str(_param(check, "value")), check.field, check.group)


def _run_hostname(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    return validate_is_hostname(str(_param(check, "value")), check.field, check.group)


def _run_time_pattern(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    return validate_time_pattern(str(_param(check, "value")), check.field, check.group)


def _run_file_exists(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    path = config.resolve(_param(check, "path", str))
    return validate_file_exists(path, check.field, check.group)


def _run_reachable(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    return validate_host_is_reachable(
        config.options,
        _param(check, "value", str),
        check.field,
        check.group,
        strict_scheme=strict,
    )


def _run_certs_present(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    names = _string_list(check, "names", _param(check, "names", list))
    if _optional_param(check, "aggregate", False, bool):
        return validate_all_certs_present(config.options, names, check.group)
    return validate_certs_present(config.options, names, check.group)


def _run_cert_pair(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    cert_name = _param(check, "cert", str)
    key_name = _param(check, "key", str)
    hostname = _param(check, "hostname", str)

    # Presence comes first so a missing name is reported as such
    ok, err = validate_certs_present(config.options, [cert_name, key_name], check.group)
    if not ok:
        return ok, err

    return validate_cert_pair_with_hostname(
        config.options.certificates[cert_name],
        config.options.certificates[key_name],
        hostname,
        check.group,
    )


def _run_redis(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    # Every parameter except "value" is a redis.Redis keyword; "value" is a URL
    options = {k: v for k, v in check.params.items() if k != "value"}
    if "value" in check.params:
        options["url"] = _param(check, "value", str)
    return validate_redis_connection(options, check.field, check.group)


def _run_oauth(check: "CheckSpec", config: "PreflightConfig", strict: bool) -> Outcome:
    extra = {"url": _param(check, "url", str)} if "url" in check.params else {}
    client_id = str(_param(check, "client_id"))
    client_secret = str(_param(check, "client_secret"))
    with requests.Session() as session:
        return validate_oauth_credentials(
            client_id,
            client_secret,
            check.field,
            check.group,
            session=session,
            **extra,
        )


CHECK_TYPES: dict[str, CheckRunner] = {
    "required": _run_required,
    "one_of": _run_one_of,
    "at_least_one_of": _run_at_least_one_of,
    "url": _run_url,
    "hostname": _run_hostname,
    "time_pattern": _run_time_pattern,
    "file_exists": _run_file_exists,
    "reachable": _run_reachable,
    "certs_present": _run_certs_present,
    "cert_pair": _run_cert_pair,
    "redis": _run_redis,
    "oauth": _run_oauth,
}


def validate_config(config_path: Path, strict: bool = False) -> ValidationResults:
    """
    Run every check in a pre-flight file.

    Checks run in file order; a failing check never stops the ones after it.

    Args:
        config_path: Path to the pre-flight .toml/.yaml file
        strict: Fail reachability checks whose URL scheme cannot be checked

    Returns:
        ValidationResults with one outcome per check
    """
    # Lazy import to avoid circular dependency
    from confcheck.config.loader import ConfigError, load_preflight

    results = ValidationResults(config_path=config_path)

    try:
        config = load_preflight(config_path)
    except ConfigError as e:
        results.add_error("config", "config", "Config", str(e), ErrorKind.INVALID_VALUE)
        return results

    for check in config.checks:
        runner = CHECK_TYPES.get(check.type)
        if runner is None:
            results.add_error(
                check.type,
                check.field,
                check.group,
                f"Unknown check type {check.type!r} (expected one of {', '.join(CHECK_TYPES)})",
                ErrorKind.INVALID_VALUE,
            )
            continue

        try:
            ok, err = runner(check, config, strict)
        except CheckParamError as e:
            results.add_error(check.type, check.field, check.group, str(e), e.kind)
            continue

        results.add(check.type, check.field, check.group, ok, err)

    return results


def format_results(results: ValidationResults, console: Console) -> None:
    """Format validation results for display, grouped by field group."""
    for group, outcomes in results.by_group().items():
        console.print(f"[bold]{group}[/bold]")
        for o in outcomes:
            if o.ok:
                console.print(f"  [green]✓[/green] {o.field} ({o.check})")
            else:
                console.print(f"  [red]✗[/red] {o.field} ({o.check})")
                console.print(Text(f"    {o.error.message}", style="dim"))

    failures = sum(1 for o in results.outcomes if not o.ok)
    if failures > 0:
        console.print(f"\n[red]{failures} check(s) failed[/red]")
    else:
        console.print("\n[green]All checks passed[/green]")
