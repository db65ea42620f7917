import re
import threading
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from registry_api.logging_config import configure_module_logging
from .exceptions import RegistryNotFoundError, RegistryParseError, RegistryValidationError
from .models import (
    CatalogResponse,
    Outcome,
    ParsedResponse,
    RegistryConfig,
    ResponseKind,
    SearchHit,
    SearchResult,
    TagEntry,
    TagsResponse,
)
from .transport import RegistryTransport

logger = configure_module_logging("client")

DOCKER_HUB = "https://index.docker.io/"
V1_PING_MARKER = "Docker Registry API"


def prefix_pattern(query: str) -> "re.Pattern":
    """Compile query as a regular expression anchored at the start.

    The query is not escaped, so metacharacters keep their regex meaning.
    """
    return re.compile(f"^{query}")


def _entry_name(entry: Any) -> str:
    if isinstance(entry, TagEntry):
        return entry.name
    if isinstance(entry, dict):
        return str(entry.get("name", ""))
    return str(entry)


class RegistryApi:
    """Registry client that negotiates between the v1 and v2 APIs.

    Every operation tries the preferred protocol first and, on any failure,
    retries once through the other generation, returning the same shape
    either way.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        transport: Optional[RegistryTransport] = None,
        **params,
    ):
        if config is None:
            config = RegistryConfig(**params)
        elif params:
            config = RegistryConfig(**{**config.model_dump(), **params})
        self.config = config
        self.url = config.url
        self._transport = transport
        self._transport_lock = threading.Lock()

    @property
    def transport(self) -> RegistryTransport:
        """Connection to the registry, created on first use"""
        if self._transport is None:
            with self._transport_lock:
                if self._transport is None:
                    self._transport = RegistryTransport.from_config(self.config)
        return self._transport

    def _get(self, path: str, params: Optional[dict] = None) -> ParsedResponse:
        return ParsedResponse.from_text(self.transport.get(path, params))

    def _attempt(self, path: str, params: Optional[dict] = None) -> Outcome:
        """GET path, capturing any failure in the outcome instead of raising"""
        try:
            raw = self.transport.get(path, params)
        except Exception as e:
            return Outcome(error=e)
        return Outcome(raw=raw, response=ParsedResponse.from_text(raw))

    def search(self, query: str) -> Union[SearchResult, Any]:
        """
        Search repositories

        The v2 API has no search endpoint, so v1 search is tried first and
        newer registries fall back to filtering the v2 catalog.

        Returns:
            SearchResult. When v1 answers with something else, the parsed
            JSON (or the raw text, if it is not JSON) is passed through.
        """
        outcome = self._attempt("/v1/search", {"q": query})
        if not outcome.ok:
            logger.warning(f"API v1 - Search failed, using v2 catalog: {outcome.error}")
            return SearchResult(results=self.catalog(query))

        response = outcome.response
        if response.kind is ResponseKind.UNPARSED:
            logger.warning("API v1 - Search returned non-JSON body, passing it through")
            return outcome.raw
        try:
            return SearchResult.model_validate(response.value)
        except ValidationError as e:
            logger.warning(
                f"API v1 - Search returned unexpected {response.kind.value}, passing it through: {e}"
            )
            return response.value

    def catalog(self, query: str) -> List[SearchHit]:
        """
        List catalog repositories whose name matches query as a prefix

        Some registries have this endpoint disabled; errors propagate.

        Raises:
            RegistryError: If the catalog request fails
            RegistryParseError: If the body is not JSON
            RegistryValidationError: If the body has no repositories list
        """
        response = self._get("/v2/_catalog")
        if response.kind is ResponseKind.UNPARSED:
            raise RegistryParseError("Catalog response is not JSON", raw=response.value)
        try:
            catalog = CatalogResponse.model_validate(response.value)
        except ValidationError as e:
            raise RegistryValidationError(f"Invalid catalog format: {e}") from e

        pattern = prefix_pattern(query)
        return [
            SearchHit(name=name) for name in catalog.repositories if pattern.match(name)
        ]

    def tags(self, image_name: str, query: Optional[str] = None):
        """
        List tags of a repository

        Args:
            image_name: Repository name (e.g., "library/nginx")
            query: Optional tag name prefix (regex)

        Returns:
            List of TagEntry. A v1 registry answering with something other
            than an object gets its body passed through unchanged.
        """
        result = self._get_tags(image_name)
        if query is not None:
            result = self._filter_tags(result, query)
        return result

    def ok(self) -> bool:
        """Check the registry answers on either API root"""
        outcome = self._attempt("/v1/")
        if outcome.ok:
            return V1_PING_MARKER in outcome.raw

        logger.warning(f"API v1 - Ping failed: {outcome.error}")
        fallback = self._attempt("/v2/")
        if not fallback.ok:
            logger.warning(f"API v2 - Ping failed: {fallback.error}")
            return False
        return fallback.response.is_object

    def _get_tags(self, image_name: str):
        outcome = self._attempt(f"/v1/repositories/{image_name}/tags")
        if not outcome.ok:
            logger.warning(
                f"API v1 - Repository tags request for {image_name} failed: {outcome.error}"
            )
            return self._tags_v2(image_name)

        response = outcome.response
        if response.is_object:
            return [TagEntry(name=str(tag)) for tag in response.value]

        logger.warning(
            f"API v1 - Tags for {image_name} returned {response.kind.value}, passing through"
        )
        return response.value

    def _tags_v2(self, image_name: str) -> List[TagEntry]:
        try:
            response = self._get(f"/v2/{image_name}/tags/list")
        except RegistryNotFoundError:
            logger.warning(f"API v2 - Repository {image_name} not found")
            return []

        try:
            tags = TagsResponse.model_validate(response.value)
        except ValidationError as e:
            raise RegistryValidationError(f"Invalid tags format: {e}") from e
        return [TagEntry(name=tag) for tag in tags.tags or []]

    def _filter_tags(self, result, query: str):
        if not isinstance(result, list):
            logger.warning(f"Cannot filter {type(result).__name__} tags response by {query!r}")
            return result
        pattern = prefix_pattern(query)
        return [entry for entry in result if pattern.match(_entry_name(entry))]

    def close(self):
        """Close the connection if one was opened"""
        if self._transport is not None:
            self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exec_type, exec_val, exec_tb):
        self.close()


_docker_hub: Optional[RegistryApi] = None
_docker_hub_lock = threading.Lock()


def docker_hub() -> RegistryApi:
    """Shared client for Docker Hub, created on first call and never replaced"""
    global _docker_hub
    if _docker_hub is None:
        with _docker_hub_lock:
            if _docker_hub is None:
                _docker_hub = RegistryApi(url=DOCKER_HUB)
    return _docker_hub
