from __future__ import annotations

import time
from typing import Any

import httpx

from clients.wms_backend_sdk.config import SDKConfig
from clients.wms_backend_sdk.errors import BackendError, ErrorKind

# Only reads are retried.
_RETRYABLE_METHODS = frozenset({"GET"})


class HttpClient:
    """Thin httpx wrapper that speaks the backend's key + bearer convention.

    Every request carries the ``apikey`` header. The bearer is the caller's
    access token when one is given, otherwise the key itself. Failures surface
    as ``BackendError`` with a classified ``ErrorKind``.
    """

    def __init__(
        self,
        config: SDKConfig | None = None,
        client: httpx.Client | None = None,
        api_key: str | None = None,
    ) -> None:
        self.config = config or SDKConfig.from_env()
        self._client = client or httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
        )
        self._api_key = api_key if api_key is not None else self.config.anon_key
        self._max_attempts = max(1, self.config.retry_max_attempts)
        self._backoff_ms = max(0, self.config.retry_backoff_ms)

    def request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        json_body: dict[str, Any] | list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        method = method.upper()
        url = path if path.startswith("/") else f"/{path}"
        retryable = method in _RETRYABLE_METHODS
        request_headers = self._headers(token, headers)

        attempt = 0
        while True:
            attempt += 1
            can_retry = retryable and attempt < self._max_attempts
            try:
                response = self._client.request(method, url, json=json_body, headers=request_headers, params=params)
            except httpx.TransportError as exc:
                if not can_retry:
                    raise BackendError.network(exc) from exc
                self._sleep(attempt)
                continue

            if response.is_success:
                return _decode(response)

            error = BackendError.from_http_response(response)
            if can_retry and error.kind is ErrorKind.NETWORK and response.status_code >= 500:
                self._sleep(attempt)
                continue
            raise error

    def close(self) -> None:
        self._client.close()

    def _headers(self, token: str | None, extra: dict[str, str] | None) -> dict[str, str]:
        headers = dict(extra or {})
        if self._api_key:
            headers.setdefault("apikey", self._api_key)
        bearer = token or self._api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    def _sleep(self, attempt: int) -> None:
        time.sleep(self._backoff_ms * attempt / 1000)


def _decode(response: httpx.Response) -> dict[str, Any]:
    """JSON objects pass through; arrays are wrapped under ``data``; empty bodies read as ``{}``."""
    if response.status_code == 204 or not response.content:
        return {}
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {"data": payload}
