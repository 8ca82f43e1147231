"""
The configuration object under test.
"""

from dataclasses import dataclass
from typing import Mapping

# Well-known certificate names
ROOT_CA_CERT = "ca.crt"
CLIENT_CERT = "client.crt"
CLIENT_KEY = "client.key"


@dataclass(frozen=True)
class Options:
    """
    Read-only view of the configuration being validated.

    Attributes:
        certificates: Certificate name -> raw PEM/DER bytes. ``None`` means no
            certificate set was supplied at all, which is distinct from an
            empty mapping.
    """
    certificates: Mapping[str, bytes] | None = None
