from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from services.vector_index.models import IndexStats, VectorMatch, VectorRecord


class VectorIndex(Protocol):
    def upsert(self, id: str, values: List[float], metadata: Dict[str, Any]) -> None: ...

    def upsert_batch(self, records: Iterable[VectorRecord]) -> None: ...

    def query(
        self,
        vector: List[float],
        top_k: int,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorMatch]: ...

    def delete_by_ids(self, ids: Iterable[str]) -> None: ...

    def describe(self) -> IndexStats: ...


class InMemoryVectorIndex:
    """Cosine-similarity index keyed by vector id; used locally and in tests."""

    def __init__(self, dimensions: Optional[int] = None) -> None:
        self._dimensions = dimensions
        self._records: Dict[str, VectorRecord] = {}

    def _check_dimensions(self, values: List[float]) -> None:
        if self._dimensions is None:
            self._dimensions = len(values)
            return
        if len(values) != self._dimensions:
            raise ValueError(f"Vector dimension {len(values)} does not match index dimension {self._dimensions}")

    def upsert(self, id: str, values: List[float], metadata: Dict[str, Any]) -> None:
        self._check_dimensions(values)
        self._records[id] = VectorRecord(id=id, values=list(values), metadata=dict(metadata))

    def upsert_batch(self, records: Iterable[VectorRecord]) -> None:
        records = list(records)
        for record in records:
            self._check_dimensions(record.values)
        for record in records:
            self._records[record.id] = VectorRecord(id=record.id, values=list(record.values), metadata=dict(record.metadata))

    def query(
        self,
        vector: List[float],
        top_k: int,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorMatch]:
        if top_k <= 0 or not vector:
            return []
        matches: List[VectorMatch] = []
        for record in self._records.values():
            if filter and not _matches_filter(record.metadata, filter):
                continue
            matches.append(
                VectorMatch(
                    id=record.id,
                    score=cosine_similarity(vector, record.values),
                    metadata=dict(record.metadata),
                )
            )
        matches.sort(key=lambda item: (-item.score, item.id))
        return matches[:top_k]

    def delete_by_ids(self, ids: Iterable[str]) -> None:
        for vector_id in ids:
            self._records.pop(vector_id, None)

    def describe(self) -> IndexStats:
        return IndexStats(vector_count=len(self._records), dimensions=self._dimensions)

    def get(self, id: str) -> Optional[VectorRecord]:
        return self._records.get(id)


def _matches_filter(metadata: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    return all(metadata.get(key) == value for key, value in filter.items())


def cosine_similarity(left: List[float], right: List[float]) -> float:
    if not left or not right or len(left) != len(right):
        return 0.0
    dot = sum(l * r for l, r in zip(left, right))
    left_norm = math.sqrt(sum(l * l for l in left))
    right_norm = math.sqrt(sum(r * r for r in right))
    if left_norm == 0 or right_norm == 0:
        return 0.0
    return dot / (left_norm * right_norm)
