"""
TLS client configuration built from the certificate set in Options.
"""

import logging
import ssl
import tempfile
from pathlib import Path

from confcheck.validator.options import CLIENT_CERT, CLIENT_KEY, ROOT_CA_CERT, Options

logger = logging.getLogger(__name__)

PEM_MARKER = b"-----BEGIN"


class TLSConfigError(Exception):
    """Certificate material in Options cannot be turned into a TLS context."""


def build_tls_context(options: Options) -> ssl.SSLContext:
    """
    Build a client-side TLS context for the given options.

    Starts from the system trust store. A ``ca.crt`` entry is added as an
    extra trusted root, and ``client.crt`` + ``client.key`` are loaded as the
    client identity for mutual TLS.

    Args:
        options: Options whose certificate set supplies the material.

    Returns:
        A context with hostname checking and certificate verification enabled.

    Raises:
        TLSConfigError: If any of the material is malformed or incomplete.
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    certificates = options.certificates or {}

    ca = certificates.get(ROOT_CA_CERT)
    if ca:
        try:
            if ca.lstrip().startswith(PEM_MARKER):
                context.load_verify_locations(cadata=ca.decode("ascii"))
            else:
                context.load_verify_locations(cadata=ca)
        except (ssl.SSLError, ValueError) as e:
            raise TLSConfigError(f"Could not load certificate {ROOT_CA_CERT}: {e}") from e
        logger.debug("Loaded %s as trusted root", ROOT_CA_CERT)

    client_cert = certificates.get(CLIENT_CERT)
    client_key = certificates.get(CLIENT_KEY)
    if bool(client_cert) != bool(client_key):
        raise TLSConfigError(f"Certificates {CLIENT_CERT} and {CLIENT_KEY} must be provided together")

    if client_cert and client_key:
        _load_client_identity(context, client_cert, client_key)
        logger.debug("Loaded client identity from %s", CLIENT_CERT)

    return context


def _no_password() -> str:
    # Encrypted keys fail instead of prompting on the terminal
    return ""


def _load_client_identity(context: ssl.SSLContext, cert: bytes, key: bytes) -> None:
    """ssl only loads key pairs from disk, so stage them in a private temp dir."""
    with tempfile.TemporaryDirectory(prefix="confcheck-") as tmpdir:
        cert_path = Path(tmpdir) / CLIENT_CERT
        key_path = Path(tmpdir) / CLIENT_KEY
        cert_path.write_bytes(cert)
        key_path.touch(mode=0o600)
        key_path.write_bytes(key)

        try:
            context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path), password=_no_password)
        except ssl.SSLError as e:
            raise TLSConfigError(f"Could not load certificate {CLIENT_CERT}: {e}") from e
