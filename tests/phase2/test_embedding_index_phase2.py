from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from services.common.errors import ProviderError
from services.embedding.config import EmbeddingConfig, build_embedding_gateway, load_embedding_config
from services.embedding.models import (
    EmbeddingDatum,
    EmbeddingResponse,
    listing_id_from_vector,
    parse_embedding_response,
    vector_id_for,
)
from services.embedding.providers import OpenAIEmbeddingProvider
from services.embedding.service import EmbeddingGateway, create_searchable_text
from services.listings.models import Listing, Location
from services.vector_index.models import VectorRecord
from services.vector_index.repository import InMemoryVectorIndex, cosine_similarity


FIXED_TIME = datetime(2026, 1, 28, tzinfo=timezone.utc)


class StubProvider:
    def __init__(self, dimensions: int = 3, shuffle: bool = False) -> None:
        self.dimensions = dimensions
        self.shuffle = shuffle
        self.calls: List[List[str]] = []

    def create(self, inputs: List[str]) -> EmbeddingResponse:
        self.calls.append(list(inputs))
        data = [
            EmbeddingDatum(index=i, embedding=[float(i + 1)] * self.dimensions)
            for i in range(len(inputs))
        ]
        if self.shuffle:
            data = list(reversed(data))
        return EmbeddingResponse(data=data, model="stub")


class StubTransport:
    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.requests: List[Dict[str, Any]] = []

    def post(self, *, url: str, json_body: Dict[str, Any], headers: Dict[str, str] | None = None) -> Any:
        self.requests.append({"url": url, "json_body": json_body, "headers": headers})
        return self.payload


def _listing(listing_id: str = "l1", **overrides) -> Listing:
    fields = dict(
        id=listing_id,
        user_id="owner-1",
        title="Green Valley Farm",
        description="Organic vegetables and eggs",
        category="farm",
        location=Location(latitude=52.52, longitude=13.405, address="Hauptstraße 1", city="Berlin", country="DE"),
        created_at=FIXED_TIME,
        tags=["organic", "eggs"],
    )
    fields.update(overrides)
    return Listing(**fields)


def test_searchable_text_joins_non_empty_parts():
    listing = _listing(description="", tags=["organic", " "])
    assert create_searchable_text(listing) == "Green Valley Farm farm Berlin Hauptstraße 1 organic"


def test_batch_embedding_is_reordered_by_index():
    provider = StubProvider(shuffle=True)
    gateway = EmbeddingGateway(provider)
    vectors = gateway.embed_batch(["a", "b", "c"])
    assert vectors == [[1.0] * 3, [2.0] * 3, [3.0] * 3]
    assert gateway.embed_batch([]) == []
    assert len(provider.calls) == 1


def test_incomplete_batch_is_a_provider_error():
    response = EmbeddingResponse(data=[EmbeddingDatum(index=0, embedding=[1.0]), EmbeddingDatum(index=2, embedding=[1.0])])
    with pytest.raises(ProviderError):
        response.ordered_vectors(2)


def test_dimension_mismatch_is_a_provider_error():
    gateway = EmbeddingGateway(StubProvider(dimensions=2), dimensions=3)
    with pytest.raises(ProviderError) as excinfo:
        gateway.embed("hello")
    assert excinfo.value.details == {"expected": 3, "received": 2}


def test_parse_embedding_response_rejects_empty_and_malformed_payloads():
    with pytest.raises(ProviderError):
        parse_embedding_response({"data": []})
    with pytest.raises(ProviderError):
        parse_embedding_response({"data": [{"embedding": "nope"}]})
    with pytest.raises(ProviderError):
        parse_embedding_response(["not", "a", "dict"])
    response = parse_embedding_response(
        {"data": [{"index": 0, "embedding": [1, 2]}], "model": "m", "usage": {"total_tokens": 4}}
    )
    assert response.ordered_vectors(1) == [[1.0, 2.0]]
    assert response.usage.total_tokens == 4


def test_openai_provider_request_shape():
    transport = StubTransport({"data": [{"index": 0, "embedding": [0.1, 0.2]}]})
    provider = OpenAIEmbeddingProvider(
        api_url="https://embeddings.local/v1/embeddings",
        api_key="secret",
        model="text-embedding-3-small",
        transport=transport,
    )
    provider.create(["one"])
    provider.create(["one", "two"])
    first, second = transport.requests
    assert first["json_body"] == {"input": "one", "model": "text-embedding-3-small", "encoding_format": "float"}
    assert second["json_body"]["input"] == ["one", "two"]
    assert first["headers"] == {"Authorization": "Bearer secret"}


def test_openai_provider_without_key_fails_fast():
    transport = StubTransport({})
    provider = OpenAIEmbeddingProvider(api_url="https://embeddings.local", api_key=None, transport=transport)
    with pytest.raises(ProviderError) as excinfo:
        provider.create(["x"])
    assert excinfo.value.code == "PROVIDER_NOT_CONFIGURED"
    assert transport.requests == []


def test_index_listing_builds_metadata_and_upserts():
    index = InMemoryVectorIndex()
    gateway = EmbeddingGateway(StubProvider(), vector_index=index)
    vector = gateway.index_listing(_listing())
    assert vector.id == "listing_l1"
    stored = index.get("listing_l1")
    assert stored is not None
    assert stored.metadata["listing_id"] == "l1"
    assert stored.metadata["location"] == "Berlin, Hauptstraße 1"
    assert stored.metadata["created_at"] == FIXED_TIME.isoformat()
    assert stored.metadata["updated_at"] == FIXED_TIME.isoformat()
    assert gateway.index_stats().vector_count == 1


def test_index_listings_uses_one_batch_call_and_remove_is_idempotent():
    provider = StubProvider()
    index = InMemoryVectorIndex()
    gateway = EmbeddingGateway(provider, vector_index=index)
    gateway.index_listings([_listing("a"), _listing("b")])
    assert len(provider.calls) == 1
    assert index.describe().vector_count == 2

    gateway.remove_listing("a")
    gateway.remove_listing("a")
    assert index.describe().vector_count == 1
    assert [event.event_type for event in gateway.observability.events()] == ["embed", "index", "delete", "delete"]


def test_vector_id_helpers_round_trip_listing_ids():
    assert vector_id_for("abc") == "listing_abc"
    assert listing_id_from_vector("listing_abc") == "abc"
    assert listing_id_from_vector("listing_abc", {"listing_id": "xyz"}) == "xyz"


def test_vector_index_query_filter_and_ordering():
    index = InMemoryVectorIndex(dimensions=2)
    index.upsert("b", [1.0, 0.0], {"category": "farm"})
    index.upsert("a", [1.0, 0.0], {"category": "farm"})
    index.upsert("c", [0.0, 1.0], {"category": "market"})
    matches = index.query([1.0, 0.0], top_k=5, filter={"category": "farm"})
    assert [match.id for match in matches] == ["a", "b"]
    assert matches[0].score == pytest.approx(1.0)
    assert index.query([1.0, 0.0], top_k=0) == []
    assert len(index.query([1.0, 0.0], top_k=2)) == 2


def test_vector_index_upsert_overwrites_and_checks_dimensions():
    index = InMemoryVectorIndex()
    index.upsert("a", [1.0, 0.0], {"v": 1})
    index.upsert_batch([VectorRecord(id="a", values=[0.0, 1.0], metadata={"v": 2})])
    assert index.get("a").metadata == {"v": 2}
    with pytest.raises(ValueError):
        index.upsert("b", [1.0, 0.0, 0.0], {})
    stats = index.describe()
    assert (stats.vector_count, stats.dimensions) == (1, 2)


def test_cosine_similarity_edge_cases():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    assert cosine_similarity([1.0], [1.0, 2.0]) == 0.0


def test_embedding_config_from_environment(monkeypatch):
    monkeypatch.setenv("EMBEDDING_API_URL", "https://embeddings.local/v1/embeddings")
    monkeypatch.setenv("OPENAI_API_KEY", "key")
    monkeypatch.setenv("EMBEDDING_DIMENSIONS", "8")
    monkeypatch.delenv("EMBEDDING_MODEL", raising=False)
    config = load_embedding_config()
    assert config.api_url == "https://embeddings.local/v1/embeddings"
    assert config.api_key == "key"
    assert config.dimensions == 8
    assert config.model == "text-embedding-3-small"

    gateway, index = build_embedding_gateway(config=EmbeddingConfig(dimensions=4))
    assert isinstance(gateway, EmbeddingGateway)
    assert index.describe().dimensions == 4
