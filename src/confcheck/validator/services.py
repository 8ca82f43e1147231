"""
Smoke tests against external services named in the config.

Each check makes exactly one request: an authenticated GET for OAuth
credentials, a PING for Redis.
"""

import logging
from typing import Any, Mapping

import redis
import requests

from confcheck.validator.types import ErrorKind, Outcome, failed, passed

logger = logging.getLogger(__name__)

SERVICE_TIMEOUT = 3.0
GITHUB_API_URL = "https://api.github.com/"


def validate_oauth_credentials(
    client_id: str,
    client_secret: str,
    field: str,
    field_group: str,
    *,
    session: requests.Session,
    url: str = GITHUB_API_URL,
    timeout: float = SERVICE_TIMEOUT,
) -> Outcome:
    """
    Check that OAuth client credentials are accepted by the provider API.

    The caller owns ``session``, so proxies, CA bundles and test doubles are
    configured there rather than through process-wide defaults.
    """
    try:
        response = session.get(url, auth=(client_id, client_secret), timeout=timeout)
    except requests.RequestException as e:
        logger.info("OAuth check against %s failed: %s", url, e)
        return failed(
            [field],
            field_group,
            f"Could not verify OAuth credentials in {field} against {url}. Error: {e}",
            ErrorKind.OAUTH_REJECTED,
        )

    if response.status_code != 200:
        return failed(
            [field],
            field_group,
            f"OAuth credentials in {field} were rejected by {url} (HTTP {response.status_code})",
            ErrorKind.OAUTH_REJECTED,
        )

    return passed()


def validate_redis_connection(
    redis_options: Mapping[str, Any],
    field: str,
    field_group: str,
    *,
    timeout: float = SERVICE_TIMEOUT,
) -> Outcome:
    """
    Check that Redis answers a PING with the given connection options.

    Args:
        redis_options: Keyword arguments for ``redis.Redis`` (host, port,
            password, ssl, ...). A ``url`` key is passed to ``Redis.from_url``.
        field: Config field holding the connection settings.
        field_group: Config section the field belongs to.
        timeout: Seconds allowed for connect and PING.
    """
    options = dict(redis_options)
    options.setdefault("socket_connect_timeout", timeout)
    options.setdefault("socket_timeout", timeout)

    url = options.pop("url", None)
    client = None

    try:
        client = redis.Redis.from_url(url, **options) if url else redis.Redis(**options)
        client.ping()
    except (redis.RedisError, ValueError, TypeError) as e:
        logger.info("Redis PING for %s failed: %s", field, e)
        return failed(
            [field],
            field_group,
            f"Could not connect to Redis with values provided in {field}. Error: {e}",
            ErrorKind.DATASTORE_UNREACHABLE,
        )
    finally:
        if client is not None:
            client.close()

    return passed()
