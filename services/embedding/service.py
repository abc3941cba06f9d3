from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from services.common.errors import ProviderError
from services.common.observability import Observability
from services.embedding.models import EmbeddingVector, vector_id_for
from services.embedding.providers import EmbeddingProvider
from services.listings.models import Listing
from services.vector_index.models import IndexStats, VectorRecord
from services.vector_index.repository import VectorIndex


logger = logging.getLogger(__name__)


def create_searchable_text(listing: Any) -> str:
    """Canonical text embedded for a listing; queries for similar listings reuse it."""
    location = getattr(listing, "location", None)
    parts = [
        getattr(listing, "title", "") or "",
        getattr(listing, "description", "") or "",
        getattr(listing, "category", "") or "",
        getattr(location, "city", "") if location else "",
        getattr(location, "address", "") if location else "",
        *(getattr(listing, "tags", None) or []),
    ]
    return " ".join(part.strip() for part in parts if part and part.strip())


class EmbeddingGateway:
    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        vector_index: Optional[VectorIndex] = None,
        dimensions: Optional[int] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._provider = provider
        self._vector_index = vector_index
        self._dimensions = dimensions
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    def embed(self, text: str) -> List[float]:
        response = self._provider.create([text])
        vector = response.ordered_vectors(1)[0]
        self._check_dimensions([vector])
        self._observability.record("embed", count=1, total_tokens=response.usage.total_tokens)
        return vector

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        response = self._provider.create(list(texts))
        vectors = response.ordered_vectors(len(texts))
        self._check_dimensions(vectors)
        self._observability.record("embed", count=len(texts), total_tokens=response.usage.total_tokens)
        return vectors

    def _check_dimensions(self, vectors: List[List[float]]) -> None:
        if self._dimensions is None:
            return
        for vector in vectors:
            if len(vector) != self._dimensions:
                raise ProviderError(
                    "Embedding has unexpected dimensionality",
                    details={"expected": self._dimensions, "received": len(vector)},
                )

    def build_vector(self, listing: Listing, values: List[float]) -> EmbeddingVector:
        now = datetime.now(tz=timezone.utc)
        created_at = listing.created_at or now
        updated_at = listing.updated_at or created_at
        metadata: Dict[str, Any] = {
            "listing_id": listing.id,
            "title": listing.title or "",
            "description": listing.description or "",
            "category": listing.category or "",
            "location": f"{listing.location.city or ''}, {listing.location.address or ''}".strip(),
            "tags": list(listing.tags),
            "created_at": created_at.isoformat(),
            "updated_at": updated_at.isoformat(),
        }
        return EmbeddingVector(id=vector_id_for(listing.id), values=values, metadata=metadata)

    def _require_index(self) -> VectorIndex:
        if self._vector_index is None:
            raise RuntimeError("EmbeddingGateway has no vector index configured")
        return self._vector_index

    def index_listing(self, listing: Listing) -> EmbeddingVector:
        index = self._require_index()
        vector = self.build_vector(listing, self.embed(create_searchable_text(listing)))
        index.upsert(vector.id, vector.values, vector.metadata)
        self._observability.record("index", listing_ids=[listing.id])
        logger.info("Stored embedding for listing %s", listing.id)
        return vector

    def index_listings(self, listings: Sequence[Listing]) -> List[EmbeddingVector]:
        if not listings:
            return []
        index = self._require_index()
        values = self.embed_batch([create_searchable_text(listing) for listing in listings])
        vectors = [self.build_vector(listing, vector) for listing, vector in zip(listings, values)]
        index.upsert_batch(VectorRecord(id=v.id, values=v.values, metadata=v.metadata) for v in vectors)
        self._observability.record("index", listing_ids=[listing.id for listing in listings])
        logger.info("Stored %d listing embeddings", len(vectors))
        return vectors

    def remove_listing(self, listing_id: str) -> None:
        self.remove_listings([listing_id])

    def remove_listings(self, listing_ids: Iterable[str]) -> None:
        ids = [vector_id_for(listing_id) for listing_id in listing_ids]
        if not ids:
            return
        self._require_index().delete_by_ids(ids)
        self._observability.record("delete", vector_ids=ids)

    def index_stats(self) -> IndexStats:
        return self._require_index().describe()
