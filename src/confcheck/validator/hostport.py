"""
Host/port splitting for dial addresses and certificate hostnames.
"""


class MissingPortError(ValueError):
    """The address has no port component."""


def split_host_port(hostport: str) -> tuple[str, str]:
    """
    Split ``host:port`` or ``[v6-host]:port`` into host and port.

    Raises:
        MissingPortError: If no port is present.
        ValueError: If the address is otherwise malformed.
    """
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"address {hostport}: missing ']' in address")
        host = hostport[1:end]
        rest = hostport[end + 1:]
        if not rest:
            raise MissingPortError(f"address {hostport}: missing port in address")
        if not rest.startswith(":") or ":" in rest[1:]:
            raise ValueError(f"address {hostport}: unexpected characters after ']'")
        return host, rest[1:]

    colons = hostport.count(":")
    if colons == 0:
        raise MissingPortError(f"address {hostport}: missing port in address")
    if colons > 1:
        raise ValueError(f"address {hostport}: too many colons in address")

    host, port = hostport.split(":")
    return host, port


def parse_port(port: str) -> int:
    """Parse a decimal TCP port."""
    if not port.isdigit() or not 0 <= int(port) <= 65535:
        raise ValueError(f"invalid port {port!r}")
    return int(port)


def strip_port(hostname: str) -> str:
    """
    Remove a ``:port`` suffix from a hostname if there is one.

    A hostname without a port is returned unchanged, apart from the brackets
    around a bare IPv6 literal.
    """
    try:
        host, _ = split_host_port(hostname)
    except ValueError:
        host = hostname

    if len(host) >= 3 and host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host
