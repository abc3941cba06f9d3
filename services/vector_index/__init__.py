from services.vector_index.models import IndexStats, VectorMatch, VectorRecord
from services.vector_index.repository import InMemoryVectorIndex, VectorIndex, cosine_similarity

__all__ = [
    "InMemoryVectorIndex",
    "IndexStats",
    "VectorIndex",
    "VectorMatch",
    "VectorRecord",
    "cosine_similarity",
]
