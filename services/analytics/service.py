from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Callable, Dict, Optional

from services.analytics.repository import AnalyticsSink
from services.common.enums import InteractionType, SearchType


logger = logging.getLogger(__name__)


class AnalyticsRecorder:
    """Fire-and-forget wrapper around an analytics sink.

    Recording never raises and never blocks the caller when an executor is given.
    """

    def __init__(self, sink: Optional[AnalyticsSink], *, executor: Optional[Executor] = None) -> None:
        self._sink = sink
        self._executor = executor

    def record_search(
        self,
        *,
        user_id: Optional[str],
        query: str,
        search_type: SearchType,
        result_count: int,
        filters: Dict[str, Any],
    ) -> None:
        if self._sink is None:
            return
        sink = self._sink
        self._dispatch(
            "record_search",
            lambda: sink.record_search(
                user_id=user_id,
                query=query,
                search_type=search_type,
                result_count=result_count,
                filters=filters,
            ),
        )

    def record_interaction(
        self,
        *,
        user_id: str,
        listing_id: str,
        interaction_type: InteractionType,
        duration_seconds: Optional[float] = None,
    ) -> None:
        if self._sink is None:
            return
        sink = self._sink
        self._dispatch(
            "record_interaction",
            lambda: sink.record_interaction(
                user_id=user_id,
                listing_id=listing_id,
                interaction_type=interaction_type,
                duration_seconds=duration_seconds,
            ),
        )

    def _dispatch(self, name: str, call: Callable[[], None]) -> None:
        if self._executor is None:
            _run_safely(name, call)
            return
        try:
            self._executor.submit(_run_safely, name, call)
        except RuntimeError:
            logger.warning("Analytics executor unavailable; dropped %s", name)


def _run_safely(name: str, call: Callable[[], None]) -> None:
    try:
        call()
    except Exception:
        logger.exception("Analytics %s failed", name)
