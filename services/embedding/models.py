from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from services.common.errors import ProviderError


@dataclass(frozen=True)
class EmbeddingDatum:
    index: int
    embedding: List[float]


@dataclass(frozen=True)
class EmbeddingUsage:
    prompt_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class EmbeddingResponse:
    data: List[EmbeddingDatum]
    model: Optional[str] = None
    usage: EmbeddingUsage = field(default_factory=EmbeddingUsage)

    def ordered_vectors(self, expected: int) -> List[List[float]]:
        ordered = sorted(self.data, key=lambda item: item.index)
        indices = [item.index for item in ordered]
        if indices != list(range(expected)):
            raise ProviderError(
                "Embedding provider returned an incomplete batch",
                details={"expected": expected, "indices": indices},
            )
        return [item.embedding for item in ordered]


@dataclass(frozen=True)
class EmbeddingVector:
    id: str
    values: List[float]
    metadata: Dict[str, Any]


def vector_id_for(listing_id: str) -> str:
    return f"listing_{listing_id}"


def listing_id_from_vector(vector_id: str, metadata: Optional[Dict[str, Any]] = None) -> str:
    if metadata and metadata.get("listing_id"):
        return str(metadata["listing_id"])
    if vector_id.startswith("listing_"):
        return vector_id[len("listing_") :]
    return vector_id


def parse_embedding_response(payload: Any) -> EmbeddingResponse:
    if not isinstance(payload, dict):
        raise ProviderError("Embedding provider returned a malformed payload")
    raw_data = payload.get("data")
    if not raw_data:
        raise ProviderError("No embedding data received from provider")
    data: List[EmbeddingDatum] = []
    for position, item in enumerate(raw_data):
        if not isinstance(item, dict) or not isinstance(item.get("embedding"), list):
            raise ProviderError("Embedding provider returned a malformed item", details={"position": position})
        try:
            values = [float(value) for value in item["embedding"]]
            index = int(item.get("index", position))
        except (TypeError, ValueError) as exc:
            raise ProviderError("Embedding provider returned non-numeric data", details={"position": position}) from exc
        data.append(EmbeddingDatum(index=index, embedding=values))
    usage_raw = payload.get("usage") or {}
    usage = EmbeddingUsage(
        prompt_tokens=int(usage_raw.get("prompt_tokens", 0) or 0),
        total_tokens=int(usage_raw.get("total_tokens", 0) or 0),
    )
    return EmbeddingResponse(data=data, model=payload.get("model"), usage=usage)
