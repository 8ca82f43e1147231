"""
Host reachability checks.

Dials the host named by a URL once: a plain TCP connect for ``http`` and a
TCP connect plus TLS handshake for ``https``. Nothing is kept open and
nothing is retried.
"""

import logging
import socket
import ssl
import time
from urllib.parse import urlsplit

from confcheck.validator.hostport import MissingPortError, parse_port, split_host_port
from confcheck.validator.options import Options
from confcheck.validator.tls import TLSConfigError, build_tls_context
from confcheck.validator.types import ErrorKind, Outcome, failed, passed

logger = logging.getLogger(__name__)

DIAL_TIMEOUT = 3.0

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
}


def dial_address(url: str) -> str:
    """Strip the scheme prefix, leaving the ``host[:port]`` to dial."""
    address = url.removeprefix("https://")
    return address.removeprefix("http://")


def resolve_target(address: str, scheme: str) -> tuple[str, int]:
    """
    Turn a dial address into a (host, port) pair.

    A missing port falls back to the scheme's default.

    Raises:
        ValueError: If the address cannot be parsed.
    """
    try:
        host, port = split_host_port(address)
    except MissingPortError:
        return address.strip("[]"), DEFAULT_PORTS[scheme]

    return host, parse_port(port)


def validate_host_is_reachable(
    options: Options,
    url: str,
    field: str,
    field_group: str,
    *,
    timeout: float = DIAL_TIMEOUT,
    strict_scheme: bool = False,
) -> Outcome:
    """
    Check that the host in ``url`` accepts a connection.

    Schemes other than http and https are not checked and pass, unless
    ``strict_scheme`` is set, in which case they fail.

    Args:
        options: Validated options; source of TLS trust material.
        url: URL of the host, e.g. ``https://api.internal:8443``.
        field: Config field holding the URL.
        field_group: Config section the field belongs to.
        timeout: Seconds allowed for connect and handshake together.
        strict_scheme: Fail on schemes that cannot be checked.
    """
    try:
        scheme = urlsplit(url).scheme
    except ValueError as e:
        return failed([field], field_group, f"Cannot parse {url}: {e}", ErrorKind.INVALID_VALUE)

    if scheme not in DEFAULT_PORTS:
        if strict_scheme:
            return failed(
                [field],
                field_group,
                f"Cannot check reachability of {url}: unsupported scheme {scheme!r}",
                ErrorKind.UNSUPPORTED_SCHEME,
            )
        logger.debug("Skipping reachability check for %s (scheme %r)", url, scheme)
        return passed()

    try:
        host, port = resolve_target(dial_address(url), scheme)
    except ValueError as e:
        return failed([field], field_group, str(e), ErrorKind.DIAL_FAILED)

    if scheme == "http":
        return _check_tcp(host, port, field, field_group, timeout)

    try:
        context = build_tls_context(options)
    except TLSConfigError as e:
        return failed([field], field_group, str(e), ErrorKind.TLS_CONFIG_INVALID)

    return _check_tls(context, url, host, port, field, field_group, timeout)


def _connect(host: str, port: int, deadline: float) -> socket.socket:
    """
    Open a TCP connection to the first address of ``host`` that accepts one.

    Every resolved address is tried in order, and all attempts share
    ``deadline`` (a ``time.monotonic()`` value).

    Raises:
        OSError: Resolution failed, every address failed, or time ran out.
    """
    errors: list[OSError] = []
    for family, type_, proto, _, sockaddr in socket.getaddrinfo(host, port, type=socket.SOCK_STREAM):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        sock = socket.socket(family, type_, proto)
        try:
            sock.settimeout(remaining)
            sock.connect(sockaddr)
        except OSError as e:
            sock.close()
            errors.append(e)
            continue
        return sock

    if errors:
        raise errors[0]
    raise TimeoutError("timed out")


def _check_tcp(host: str, port: int, field: str, field_group: str, timeout: float) -> Outcome:
    logger.debug("Dialing tcp %s:%d", host, port)
    deadline = time.monotonic() + timeout
    try:
        with _connect(host, port, deadline):
            pass
    except (OSError, ValueError) as e:
        logger.info("Could not reach %s:%d: %s", host, port, e)
        return failed([field], field_group, _error_text(e), ErrorKind.DIAL_FAILED)

    return passed()


def _check_tls(
    context: ssl.SSLContext,
    url: str,
    host: str,
    port: int,
    field: str,
    field_group: str,
    timeout: float,
) -> Outcome:
    logger.debug("Dialing tls %s:%d", host, port)
    deadline = time.monotonic() + timeout
    try:
        with _connect(host, port, deadline) as sock:
            # Connect and handshake share a single deadline
            sock.settimeout(max(deadline - time.monotonic(), 0.001))
            with context.wrap_socket(sock, server_hostname=host):
                pass
    except (OSError, ValueError) as e:
        kind = ErrorKind.TLS_HANDSHAKE_FAILED if isinstance(e, ssl.SSLError) else ErrorKind.DIAL_FAILED
        logger.info("Could not reach %s: %s", url, e)
        return failed(
            [field],
            field_group,
            f"Cannot reach {url}. Error: {_error_text(e)}",
            kind,
        )

    return passed()


def _error_text(e: Exception) -> str:
    return str(e) or type(e).__name__
