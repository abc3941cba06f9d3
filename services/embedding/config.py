from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from services.common.observability import Observability
from services.embedding.providers import JsonHttpTransport, OpenAIEmbeddingProvider
from services.embedding.service import EmbeddingGateway
from services.vector_index.repository import InMemoryVectorIndex, VectorIndex


@dataclass(frozen=True)
class EmbeddingConfig:
    api_url: str = "https://api.openai.com/v1/embeddings"
    api_key: Optional[str] = None
    model: str = "text-embedding-3-small"
    dimensions: int = 1536
    timeout_s: float = 10.0


def load_embedding_config() -> EmbeddingConfig:
    return EmbeddingConfig(
        api_url=os.getenv("EMBEDDING_API_URL", EmbeddingConfig.api_url),
        api_key=os.getenv("OPENAI_API_KEY") or None,
        model=os.getenv("EMBEDDING_MODEL", EmbeddingConfig.model),
        dimensions=int(os.getenv("EMBEDDING_DIMENSIONS", str(EmbeddingConfig.dimensions))),
        timeout_s=float(os.getenv("EMBEDDING_TIMEOUT_S", str(EmbeddingConfig.timeout_s))),
    )


def build_embedding_gateway(
    *,
    config: Optional[EmbeddingConfig] = None,
    vector_index: Optional[VectorIndex] = None,
    observability: Optional[Observability] = None,
) -> tuple[EmbeddingGateway, VectorIndex]:
    cfg = config or load_embedding_config()
    provider = OpenAIEmbeddingProvider(
        api_url=cfg.api_url,
        api_key=cfg.api_key,
        model=cfg.model,
        transport=JsonHttpTransport(timeout_s=cfg.timeout_s),
    )
    index = vector_index or InMemoryVectorIndex(dimensions=cfg.dimensions)
    gateway = EmbeddingGateway(
        provider,
        vector_index=index,
        dimensions=cfg.dimensions,
        observability=observability,
    )
    return gateway, index
