"""Collection metadata provider client.

Submissions snapshot a collection's name, artwork and market figures from a
third-party indexer at nomination time. The indexer is optional: when it is
disabled or failing, callers fall back to placeholder metadata so a
submission is never blocked by a metadata outage.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from collection_ballot.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_OK = 200
UNKNOWN_COLLECTION_NAME = "Unknown Collection"
FALLBACK_DESCRIPTION = "NFT Collection"


class MetadataProviderError(RuntimeError):
    """Raised when collection metadata cannot be fetched."""


@dataclass(frozen=True)
class CollectionMetadata:
    """Metadata snapshot stored on a submission."""

    name: str
    thumbnail: str
    description: str
    floor_price: float
    volume_24h: float
    total_items: int


class MetadataProvider(Protocol):
    """Anything that can look up metadata for a contract address."""

    async def fetch(self, contract_address: str) -> CollectionMetadata:
        ...


def fallback_metadata(
    contract_address: str,
    placeholder_thumbnail: str | None = None,
) -> CollectionMetadata:
    """Return deterministic placeholder metadata for ``contract_address``."""
    thumbnail = placeholder_thumbnail or settings.placeholder_thumbnail_url
    return CollectionMetadata(
        name=f"Collection {contract_address[:8]}",
        thumbnail=f"{thumbnail}?text={contract_address[:4]}",
        description=FALLBACK_DESCRIPTION,
        floor_price=0.0,
        volume_24h=0.0,
        total_items=0,
    )


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def parse_collection_payload(
    payload: Mapping[str, Any],
    placeholder_thumbnail: str,
) -> CollectionMetadata:
    """Map an indexer response body onto :class:`CollectionMetadata`."""
    return CollectionMetadata(
        name=str(payload.get("name") or UNKNOWN_COLLECTION_NAME),
        thumbnail=str(payload.get("image") or placeholder_thumbnail),
        description=str(payload.get("description") or ""),
        floor_price=_as_float(payload.get("floorPrice")),
        volume_24h=_as_float(payload.get("volume24h")),
        total_items=_as_int(payload.get("totalSupply")),
    )


class CollectionMetadataClient:
    """HTTP client for the collection indexer."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout_seconds: float | None = None,
        placeholder_thumbnail: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url if base_url is not None else settings.metadata_base_url
        self.api_key = api_key if api_key is not None else settings.metadata_api_key
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.metadata_timeout_seconds
        )
        self.placeholder_thumbnail = placeholder_thumbnail or settings.placeholder_thumbnail_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.enabled:
            raise MetadataProviderError("Metadata provider is not configured")

        async with self._client_lock:
            if self._client is None:
                headers = {}
                if self.api_key:
                    headers["Authorization"] = f"Bearer {self.api_key}"
                self._client = httpx.AsyncClient(
                    base_url=self.base_url or "",
                    timeout=httpx.Timeout(self.timeout_seconds),
                    headers=headers,
                    transport=self._transport,
                )
        return self._client

    async def fetch(self, contract_address: str) -> CollectionMetadata:
        """Fetch metadata for ``contract_address`` from the indexer.

        Raises:
            MetadataProviderError: If the provider is disabled, unreachable,
                or answers with anything other than a JSON object.
        """
        client = await self._ensure_client()
        try:
            response = await client.get(f"/collections/{contract_address}")
        except httpx.HTTPError as exc:
            raise MetadataProviderError(f"Metadata request failed: {exc}") from exc

        if response.status_code != HTTP_OK:
            raise MetadataProviderError(
                f"Metadata provider responded with {response.status_code}",
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise MetadataProviderError("Metadata provider returned invalid JSON") from exc
        if not isinstance(payload, Mapping):
            raise MetadataProviderError("Metadata provider returned an unexpected body")
        return parse_collection_payload(payload, self.placeholder_thumbnail)

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


async def resolve_metadata(
    provider: MetadataProvider,
    contract_address: str,
) -> CollectionMetadata:
    """Return provider metadata, or placeholder metadata if the provider fails."""
    try:
        return await provider.fetch(contract_address)
    except MetadataProviderError as exc:
        logger.warning(
            "Using placeholder metadata for %s: %s",
            contract_address,
            exc,
        )
        return fallback_metadata(contract_address)


class _MetadataClientSingleton:
    """Singleton wrapper for CollectionMetadataClient."""

    _instance: CollectionMetadataClient | None = None

    @classmethod
    def get_instance(cls) -> CollectionMetadataClient:
        """Get or create the singleton client instance."""
        if cls._instance is None:
            cls._instance = CollectionMetadataClient()
        return cls._instance


def get_metadata_client() -> CollectionMetadataClient:
    """Return the process-wide metadata client."""
    return _MetadataClientSingleton.get_instance()
