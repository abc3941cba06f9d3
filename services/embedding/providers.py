from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from services.common.errors import ProviderError, UpstreamTimeout
from services.embedding.models import EmbeddingResponse, parse_embedding_response


class EmbeddingProvider(Protocol):
    def create(self, inputs: List[str]) -> EmbeddingResponse: ...


class JsonHttpTransport:
    def __init__(self, *, timeout_s: float = 10.0) -> None:
        self._timeout_s = timeout_s

    def post(self, *, url: str, json_body: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        request_headers = {"Content-Type": "application/json"}
        request_headers.update(headers or {})
        data = json.dumps(json_body).encode("utf-8")
        request = Request(url, data=data, headers=request_headers, method="POST")
        try:
            with urlopen(request, timeout=self._timeout_s) as response:  # nosec B310 - URL comes from config
                payload = response.read()
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
            raise ProviderError(
                f"Embedding provider error: {exc.code}",
                details={"status": exc.code, "body": body[:500]},
            ) from exc
        except URLError as exc:
            if isinstance(exc.reason, TimeoutError):
                raise UpstreamTimeout("Embedding provider timed out", details={"url": url}) from exc
            raise ProviderError("Embedding provider unreachable", details={"reason": str(exc.reason)}) from exc
        except TimeoutError as exc:
            raise UpstreamTimeout("Embedding provider timed out", details={"url": url}) from exc
        if not payload:
            return {}
        try:
            return json.loads(payload)
        except ValueError as exc:
            raise ProviderError("Embedding provider returned invalid JSON") from exc


class OpenAIEmbeddingProvider:
    def __init__(
        self,
        *,
        api_url: str,
        api_key: Optional[str],
        model: str = "text-embedding-3-small",
        transport: Optional[JsonHttpTransport] = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._model = model
        self._transport = transport or JsonHttpTransport()

    def create(self, inputs: List[str]) -> EmbeddingResponse:
        if not self._api_key:
            raise ProviderError("Embedding API key not configured", code="PROVIDER_NOT_CONFIGURED")
        payload = self._transport.post(
            url=self._api_url,
            json_body={
                "input": inputs if len(inputs) != 1 else inputs[0],
                "model": self._model,
                "encoding_format": "float",
            },
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        return parse_embedding_response(payload)
