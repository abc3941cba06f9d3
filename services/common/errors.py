from __future__ import annotations

from typing import Any, Dict, Optional


class SearchError(RuntimeError):
    def __init__(self, message: str, *, code: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class InvalidQuery(SearchError):
    def __init__(self, message: str, *, code: str = "INVALID_QUERY", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)


class NotFound(SearchError):
    def __init__(self, message: str, *, code: str = "NOT_FOUND", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)


class UpstreamTimeout(SearchError):
    def __init__(self, message: str, *, code: str = "UPSTREAM_TIMEOUT", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)


class ProviderError(SearchError):
    def __init__(self, message: str, *, code: str = "PROVIDER_ERROR", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)


class SearchCancelled(SearchError):
    def __init__(self, message: str = "Search cancelled", *, code: str = "CANCELLED", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)
