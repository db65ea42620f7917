import json
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_URL = "http://localhost:5000"
DEFAULT_HEADERS = {"Content-Type": "application/json"}


class TagEntry(BaseModel):
    """A single tag of a repository, whichever protocol listed it"""
    model_config = ConfigDict(frozen=True)

    name: str


class SearchHit(BaseModel):
    """Search result entry; v1 registries add description, star count etc."""
    model_config = ConfigDict(extra="allow")

    name: str


class SearchResult(BaseModel):
    """Registry search response"""
    model_config = ConfigDict(extra="allow")

    results: List[SearchHit]


class CatalogResponse(BaseModel):
    """OCI registry catalog response"""
    repositories: List[str]


class TagsResponse(BaseModel):
    """OCI registry tags list response; tags is null for an empty repository"""
    name: Optional[str] = None
    tags: Optional[List[str]] = None


class RegistryConfig(BaseModel):
    """Registry client configuration"""
    model_config = ConfigDict(frozen=True)

    url: str = Field(default=DEFAULT_URL)
    verify_ssl: bool = True
    user: Optional[str] = None
    password: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    omit_default_port: bool = True
    timeout: int = Field(default=10, gt=0)

    @field_validator("url")
    @classmethod
    def check_url(cls, v):
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"registry url must be http(s)://host[:port], got {v!r}")
        return v.rstrip("/")

    @classmethod
    def from_env(cls, **overrides) -> "RegistryConfig":
        """Build a config from REGISTRY_API_* environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: Dict[str, Any] = {}
        env_map = {
            "url": "REGISTRY_API_URL",
            "verify_ssl": "REGISTRY_API_VERIFY_SSL",
            "user": "REGISTRY_API_USER",
            "password": "REGISTRY_API_PASSWORD",
            "timeout": "REGISTRY_API_TIMEOUT",
        }
        for field, var in env_map.items():
            value = os.getenv(var)
            if value is not None and value != "":
                values[field] = value
        if "verify_ssl" in values:
            values["verify_ssl"] = values["verify_ssl"].lower() not in ("0", "false", "no")
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class ResponseKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"
    UNPARSED = "unparsed"


@dataclass(frozen=True)
class ParsedResponse:
    """Registry response body, tagged by the JSON shape it decoded to.

    UNPARSED keeps the raw text as its value.
    """

    kind: ResponseKind
    value: Any

    @classmethod
    def from_text(cls, text: str) -> "ParsedResponse":
        try:
            value = json.loads(text)
        except ValueError:
            return cls(ResponseKind.UNPARSED, text)
        if isinstance(value, dict):
            return cls(ResponseKind.OBJECT, value)
        if isinstance(value, list):
            return cls(ResponseKind.ARRAY, value)
        return cls(ResponseKind.SCALAR, value)

    @property
    def is_object(self) -> bool:
        return self.kind is ResponseKind.OBJECT


@dataclass(frozen=True)
class Outcome:
    """Result of one registry GET: either a parsed body or the error raised"""

    raw: Optional[str] = None
    response: Optional[ParsedResponse] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
