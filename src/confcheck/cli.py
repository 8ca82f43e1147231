"""
confcheck CLI - Pre-flight configuration validation.

Commands:
    validate    Run every check in a pre-flight file
    reach       Check that a single URL is reachable
    cert-pair   Check a certificate/key pair against a hostname
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="confcheck",
    help="Pre-flight validation of service configuration",
    no_args_is_help=True,
)

console = Console()


def _print_outcome(ok: bool, message: str, success: str) -> None:
    if ok:
        console.print(f"[green]✓[/green] {success}")
    else:
        console.print("[red]✗[/red] ", end="")
        console.print(message, markup=False, highlight=False)
        raise typer.Exit(1)


@app.command()
def validate(
    config_path: Path = typer.Argument(..., help="Path to pre-flight .toml or .yaml file"),
    strict: bool = typer.Option(False, "--strict", "-s", help="Fail on URL schemes that cannot be checked"),
) -> None:
    """
    Pre-flight validation of a service configuration.

    Runs the checks listed in the file: field shape, certificate presence,
    key pairs and hostnames, host reachability, Redis and OAuth.

    Example:
        confcheck validate preflight.toml
    """
    from confcheck.validator import validate_config, format_results

    console.print(f"[bold]Validating[/bold] {config_path}")

    results = validate_config(config_path, strict=strict)
    format_results(results, console)

    if results.has_errors:
        raise typer.Exit(1)


@app.command()
def reach(
    url: str = typer.Argument(..., help="URL to dial, e.g. https://api.internal:8443"),
    ca: Optional[Path] = typer.Option(None, "--ca", exists=True, dir_okay=False, help="Extra trusted root CA (PEM)"),
    timeout: float = typer.Option(3.0, "--timeout", "-t", help="Seconds for connect and handshake"),
    strict: bool = typer.Option(False, "--strict", "-s", help="Fail on URL schemes that cannot be checked"),
) -> None:
    """
    Check that a host accepts a TCP (http) or TLS (https) connection.

    Example:
        confcheck reach https://api.internal:8443 --ca ca.pem
    """
    from confcheck.validator import Options, validate_host_is_reachable
    from confcheck.validator.options import ROOT_CA_CERT

    certificates = {ROOT_CA_CERT: ca.read_bytes()} if ca else None
    ok, err = validate_host_is_reachable(
        Options(certificates=certificates),
        url,
        "url",
        "cli",
        timeout=timeout,
        strict_scheme=strict,
    )
    _print_outcome(ok, err.message, f"{url} is reachable")


@app.command("cert-pair")
def cert_pair(
    cert: Path = typer.Argument(..., exists=True, dir_okay=False, help="PEM certificate (chain, leaf first)"),
    key: Path = typer.Argument(..., exists=True, dir_okay=False, help="PEM private key"),
    hostname: str = typer.Argument(..., help="Hostname the certificate must cover (port optional)"),
) -> None:
    """
    Check that a certificate matches its key and covers a hostname.

    Example:
        confcheck cert-pair server.crt server.key svc.internal:8443
    """
    from confcheck.validator import validate_cert_pair_with_hostname

    ok, err = validate_cert_pair_with_hostname(cert.read_bytes(), key.read_bytes(), hostname, "cli")
    _print_outcome(ok, err.message, f"{cert} is a valid pair for {hostname}")


def _show_version(value: bool) -> None:
    if value:
        from confcheck import __version__
        console.print(f"confcheck {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version", is_eager=True, callback=_show_version
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log every check attempt"),
) -> None:
    """confcheck: Pre-flight validation of service configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


if __name__ == "__main__":
    app()
