"""
Certificate checks.

- Presence: every certificate a feature needs is in the certificate set
- Pairing: a public certificate and private key belong together
- Hostname binding: the certificate is valid for the host it will serve
"""

import ipaddress
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from service_identity import CertificateError, VerificationError
from service_identity.cryptography import (
    verify_certificate_hostname,
    verify_certificate_ip_address,
)

from confcheck.validator.hostport import strip_port
from confcheck.validator.options import Options
from confcheck.validator.types import ErrorKind, Outcome, failed, passed

logger = logging.getLogger(__name__)

CERTIFICATES_TAG = "Certificates"


class KeyPairError(ValueError):
    """Certificate and private key cannot be loaded as a matching pair."""


@dataclass
class KeyPair:
    """A parsed certificate chain plus the private key for its leaf."""
    chain: list[x509.Certificate]
    private_key: Any

    @property
    def leaf(self) -> x509.Certificate:
        return self.chain[0]


def validate_certs_present(
    options: Options,
    required_cert_names: Sequence[str],
    field_group: str,
) -> Outcome:
    """
    Check that all required certificates are present in the options.

    Stops at the first missing name so the error points at a single cause.
    Says nothing about whether the certificates themselves are valid.

    Args:
        options: Options carrying the certificate set.
        required_cert_names: Names the feature needs, checked in order.
        field_group: Config section the feature belongs to.
    """
    if options.certificates is None:
        return _missing_certificate_set(field_group)

    for name in required_cert_names:
        if name not in options.certificates:
            logger.info("Certificate %s missing for %s", name, field_group)
            return failed(
                [CERTIFICATES_TAG],
                field_group,
                f"Certificate {name} is required for {field_group}.",
                ErrorKind.CERTIFICATE_NOT_FOUND,
            )

    return passed()


def validate_all_certs_present(
    options: Options,
    required_cert_names: Sequence[str],
    field_group: str,
) -> Outcome:
    """Like validate_certs_present, but reports every missing name at once."""
    if options.certificates is None:
        return _missing_certificate_set(field_group)

    missing = [name for name in required_cert_names if name not in options.certificates]
    if missing:
        return failed(
            [CERTIFICATES_TAG],
            field_group,
            f"Certificates {', '.join(missing)} are required for {field_group}.",
            ErrorKind.CERTIFICATE_NOT_FOUND,
        )

    return passed()


def _missing_certificate_set(field_group: str) -> Outcome:
    return failed(
        [CERTIFICATES_TAG],
        field_group,
        "Certificates are required for SSL but are not present",
        ErrorKind.MISSING_CERTIFICATE_SET,
    )


def load_key_pair(cert: bytes, key: bytes) -> KeyPair:
    """
    Load a PEM certificate chain and its PEM private key.

    The first certificate in ``cert`` is the leaf; its public key must be the
    public half of ``key``.

    Raises:
        KeyPairError: If either input cannot be parsed or they do not match.
    """
    try:
        chain = x509.load_pem_x509_certificates(cert)
    except ValueError as e:
        raise KeyPairError(f"failed to parse certificate: {e}") from e

    try:
        private_key = serialization.load_pem_private_key(key, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyPairError(f"failed to parse private key: {e}") from e

    try:
        matches = _spki(chain[0].public_key()) == _spki(private_key.public_key())
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyPairError(f"unsupported key algorithm: {e}") from e

    if not matches:
        raise KeyPairError("private key does not match public key")

    return KeyPair(chain=chain, private_key=private_key)


def _spki(public_key: Any) -> bytes:
    return public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def verify_hostname(certificate: x509.Certificate, hostname: str) -> None:
    """
    Verify the certificate's subjectAltNames cover ``hostname``.

    IP literals are matched against IP SANs, everything else against DNS SANs.

    Raises:
        VerificationError: No SAN matches.
        CertificateError: The certificate carries no SANs.
        ValueError: The hostname is not a valid DNS name.
    """
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        verify_certificate_hostname(certificate, hostname)
    else:
        verify_certificate_ip_address(certificate, hostname)


def validate_cert_pair_with_hostname(
    cert: bytes,
    key: bytes,
    hostname: str,
    field_group: str,
) -> Outcome:
    """
    Check that a certificate/key pair match and are valid for a hostname.

    Args:
        cert: PEM certificate chain, leaf first.
        key: PEM private key.
        hostname: Target host, optionally with a ``:port`` suffix.
        field_group: Config section being validated.
    """
    try:
        pair = load_key_pair(cert, key)
    except KeyPairError as e:
        logger.info("Key pair rejected for %s: %s", field_group, e)
        return failed([CERTIFICATES_TAG], field_group, str(e), ErrorKind.KEY_PAIR_MISMATCH)

    clean_host = strip_port(hostname)

    try:
        verify_hostname(pair.leaf, clean_host)
    except (VerificationError, CertificateError, ValueError) as e:
        logger.info("Certificate for %s is not valid for %s", field_group, clean_host)
        return failed(
            [CERTIFICATES_TAG],
            field_group,
            str(e) or f"certificate is not valid for {clean_host}",
            ErrorKind.HOSTNAME_VERIFICATION_FAILED,
        )

    return passed()
