"""Tests for the collection metadata provider client."""

import httpx
import pytest

from collection_ballot.services.metadata import (
    CollectionMetadataClient,
    MetadataProviderError,
    fallback_metadata,
    resolve_metadata,
)

ADDRESS = "0x" + "ab" * 20
PLACEHOLDER = "https://placeholder.example/200"


def _client(handler) -> CollectionMetadataClient:
    return CollectionMetadataClient(
        "https://indexer.example/api",
        "indexer-key",
        timeout_seconds=1.0,
        placeholder_thumbnail=PLACEHOLDER,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_maps_indexer_fields() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "name": "Pixel Cats",
                "image": "https://img.example/cats.png",
                "description": "Cats, but pixels",
                "floorPrice": "0.42",
                "volume24h": 12.5,
                "totalSupply": 10000,
            },
        )

    client = _client(handler)
    try:
        metadata = await client.fetch(ADDRESS)
    finally:
        await client.close()

    assert metadata.name == "Pixel Cats"
    assert metadata.thumbnail == "https://img.example/cats.png"
    assert metadata.description == "Cats, but pixels"
    assert metadata.floor_price == pytest.approx(0.42)
    assert metadata.volume_24h == pytest.approx(12.5)
    assert metadata.total_items == 10000
    assert seen[0].url.path == f"/api/collections/{ADDRESS}"
    assert seen[0].headers["Authorization"] == "Bearer indexer-key"


@pytest.mark.asyncio
async def test_fetch_defaults_missing_fields() -> None:
    client = _client(lambda request: httpx.Response(200, json={}))
    try:
        metadata = await client.fetch(ADDRESS)
    finally:
        await client.close()

    assert metadata.name == "Unknown Collection"
    assert metadata.thumbnail == PLACEHOLDER
    assert metadata.description == ""
    assert metadata.floor_price == 0
    assert metadata.total_items == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"error": "not found"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["unexpected"]),
    ],
)
async def test_fetch_rejects_bad_responses(response) -> None:
    client = _client(lambda request: response)
    try:
        with pytest.raises(MetadataProviderError):
            await client.fetch(ADDRESS)
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_fetch_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(MetadataProviderError):
            await client.fetch(ADDRESS)
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_disabled_client_raises() -> None:
    client = CollectionMetadataClient("", None)

    assert client.enabled is False
    with pytest.raises(MetadataProviderError):
        await client.fetch(ADDRESS)


@pytest.mark.asyncio
async def test_resolve_metadata_falls_back() -> None:
    client = _client(lambda request: httpx.Response(500))
    try:
        metadata = await resolve_metadata(client, ADDRESS)
    finally:
        await client.close()

    assert metadata == fallback_metadata(ADDRESS)
    assert metadata.name == f"Collection {ADDRESS[:8]}"


def test_fallback_metadata_is_deterministic() -> None:
    first = fallback_metadata(ADDRESS, PLACEHOLDER)

    assert first == fallback_metadata(ADDRESS, PLACEHOLDER)
    assert first.thumbnail == f"{PLACEHOLDER}?text={ADDRESS[:4]}"
    assert first.description == "NFT Collection"
