"""
Registry-related exceptions

Provides a hierarchy of exceptions for the failure modes a registry call can
hit, so the client can decide per error kind whether to fall back to the
other protocol generation.
"""

from typing import Optional


class RegistryError(Exception):
    """Base exception for registry operations"""

    pass


class RegistryConnectionError(RegistryError):
    """Registry could not be reached (network, TLS or timeout)"""

    pass


class RegistryNotFoundError(RegistryError):
    """Registry answered 404 for the endpoint or resource"""

    pass


class RegistryResponseError(RegistryError):
    """Registry answered with a non-success status other than 404"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RegistryParseError(RegistryError):
    """Response body was not valid JSON"""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class RegistryValidationError(RegistryError):
    """Response validation failed"""

    pass
