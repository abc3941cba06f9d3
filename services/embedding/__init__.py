from services.embedding.models import EmbeddingResponse, EmbeddingVector, parse_embedding_response, vector_id_for
from services.embedding.providers import EmbeddingProvider, JsonHttpTransport, OpenAIEmbeddingProvider
from services.embedding.service import EmbeddingGateway, create_searchable_text

__all__ = [
    "EmbeddingGateway",
    "EmbeddingProvider",
    "EmbeddingResponse",
    "EmbeddingVector",
    "JsonHttpTransport",
    "OpenAIEmbeddingProvider",
    "create_searchable_text",
    "parse_embedding_response",
    "vector_id_for",
]
