"""Shared fixtures for tests."""

import json
from typing import Any, Dict
from unittest.mock import Mock

import pytest

from registry_api.registry.client import RegistryApi
from registry_api.registry.exceptions import RegistryNotFoundError
from registry_api.registry.transport import RegistryTransport


def make_transport(routes: Dict[str, Any]) -> Mock:
    """Mock transport answering GETs from a path -> body table.

    Bodies that are exceptions are raised, strings are returned verbatim and
    anything else is JSON encoded. Unknown paths raise RegistryNotFoundError.
    """
    transport = Mock(spec=RegistryTransport)

    def _get(path, params=None):
        if path not in routes:
            raise RegistryNotFoundError(f"Not found: {path}")
        body = routes[path]
        if isinstance(body, Exception):
            raise body
        if isinstance(body, str):
            return body
        return json.dumps(body)

    transport.get.side_effect = _get
    return transport


@pytest.fixture
def registry_with():
    """Build a RegistryApi backed by a mock transport for the given routes."""

    def _registry(routes: Dict[str, Any]) -> RegistryApi:
        return RegistryApi(transport=make_transport(routes))

    return _registry
