"""HTTP transport for registry GET requests, built on a requests session."""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException, Timeout

from registry_api.logging_config import configure_module_logging
from .exceptions import (
    RegistryConnectionError,
    RegistryError,
    RegistryNotFoundError,
    RegistryResponseError,
)
from .models import DEFAULT_HEADERS, RegistryConfig

logger = configure_module_logging("transport")

USER_AGENT = "registry-api-client/0.1.0"
DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class ConnectionOptions:
    """Everything the transport needs, resolved from a RegistryConfig"""

    base_url: str
    verify: bool = True
    auth: Optional[Tuple[str, str]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: int = 10


def strip_default_port(url: str) -> str:
    """Drop :80 from http and :443 from https URLs."""
    parts = urlsplit(url)
    if parts.port is not None and DEFAULT_PORTS.get(parts.scheme) == parts.port:
        netloc = parts.netloc.rsplit(":", 1)[0]
        parts = parts._replace(netloc=netloc)
    return urlunsplit(parts)


def connection_options(config: RegistryConfig) -> ConnectionOptions:
    """Merge connection defaults with the config; config values win."""
    base_url = config.url
    if config.omit_default_port:
        base_url = strip_default_port(base_url)

    headers = {**DEFAULT_HEADERS, **config.headers}

    auth = None
    if config.user:
        auth = (config.user, config.password or "")

    return ConnectionOptions(
        base_url=base_url,
        verify=config.verify_ssl,
        auth=auth,
        headers=headers,
        timeout=config.timeout,
    )


class RegistryTransport:
    """Issues GET requests against one registry base URL"""

    def __init__(self, options: ConnectionOptions):
        self.options = options
        self._session = self._create_session()

    @classmethod
    def from_config(cls, config: RegistryConfig) -> "RegistryTransport":
        return cls(connection_options(config))

    def _create_session(self) -> requests.Session:
        """Create configured requests session"""
        session = requests.session()
        session.headers.update({"User-Agent": USER_AGENT})
        session.headers.update(self.options.headers)
        session.verify = self.options.verify
        if self.options.auth:
            session.auth = self.options.auth
        return session

    def get(self, path: str, params: Optional[Mapping[str, str]] = None) -> str:
        """
        GET base_url + path and return the body text

        Raises:
            RegistryNotFoundError: Registry answered 404
            RegistryConnectionError: Network, TLS or timeout failure
            RegistryResponseError: Any other non-success status
            RegistryError: Any other transport fault
        """
        url = f"{self.options.base_url}{path}"
        logger.debug(f"GET {url} params={dict(params) if params else {}}")

        try:
            response = self._session.get(
                url, params=params, timeout=self.options.timeout
            )
        except (RequestsConnectionError, Timeout) as e:
            raise RegistryConnectionError(f"Connection to {url} failed: {e}") from e
        except RequestException as e:
            raise RegistryError(f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            raise RegistryNotFoundError(f"Not found: {url}")
        if not response.ok:
            raise RegistryResponseError(
                f"GET {url} returned {response.status_code}",
                status_code=response.status_code,
            )

        return response.text

    def close(self):
        """Close the underlying session"""
        self._session.close()
