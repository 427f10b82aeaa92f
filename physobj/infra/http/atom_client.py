from __future__ import annotations

import time
from typing import Any

import httpx

from physobj.common.sanitize import truncateText
from physobj.errors import AppError


class ApiError(AppError):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body_snippet: str | None = None,
        code: str | None = None,
    ):
        super().__init__(
            category="api",
            code=code or (f"HTTP_{status_code}" if status_code else "API_ERROR"),
            message=message,
            details={"body_snippet": body_snippet} if body_snippet else {},
        )
        self.status_code = status_code
        self.body_snippet = body_snippet


class AtomApiClient:
    """
    Назначение/ответственность:
        HTTP-клиент REST API архивной системы (описания, таксономии).

    Поведение:
        - Повтор с экспоненциальной задержкой на 429/5xx и сетевых ошибках.
        - 404 возвращается вызывающему как (404, None), остальные ошибки -> ApiError.
    """

    def __init__(
        self,
        baseUrl: str,
        apiKey: str | None = None,
        timeoutSeconds: float = 20.0,
        retries: int = 3,
        retryBackoffSeconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ):
        self.baseUrl = baseUrl.rstrip("/")
        self.apiKey = apiKey
        self.retries = retries
        self.retryBackoffSeconds = retryBackoffSeconds
        self.retry_attempts = 0

        self.client = httpx.Client(
            base_url=self.baseUrl,
            timeout=timeoutSeconds,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def getRetryAttempts(self) -> int:
        return self.retry_attempts

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        if self.apiKey:
            headers["REST-API-Key"] = self.apiKey
        return headers

    def _should_retry(self, resp: httpx.Response) -> bool:
        return resp.status_code == 429 or 500 <= resp.status_code <= 599

    def _sleep_backoff(self, attempt: int) -> None:
        time.sleep(self.retryBackoffSeconds * (2 ** attempt))

    def getJson(self, path: str, params: dict[str, Any] | None = None) -> tuple[int, Any]:
        """
        Назначение:
            GET с повторами. Возвращает (status_code, json | None).
        """
        params = params or {}
        attempt = 0
        while True:
            try:
                resp = self.client.get(path, params=params, headers=self._headers())
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt >= self.retries:
                    raise ApiError("Network error") from exc
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if resp.status_code == 200:
                try:
                    return resp.status_code, resp.json()
                except ValueError as exc:
                    raise ApiError("Invalid JSON response", status_code=resp.status_code, code="INVALID_JSON") from exc

            if resp.status_code == 404:
                return resp.status_code, None

            if self._should_retry(resp) and attempt < self.retries:
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            raise ApiError(
                f"HTTP {resp.status_code}",
                status_code=resp.status_code,
                body_snippet=truncateText(resp.text) if resp.text else None,
            )


class ApiDescriptionResolver:
    """
    Назначение:
        Поиск id описания по slug через REST API.

    Контракт:
        - 404 или ответ без id -> None (предупреждение на уровне строки).
        - Прочие ошибки API пробрасываются как ApiError.
        - Результаты кэшируются на время запуска.
    """

    def __init__(self, client: AtomApiClient) -> None:
        self.client = client
        self._cache: dict[str, int | None] = {}

    def resolve(self, slug: str) -> int | None:
        if slug in self._cache:
            return self._cache[slug]
        status, data = self.client.getJson(f"/api/informationobjects/{slug}")
        resolved: int | None = None
        if status == 200 and isinstance(data, dict) and data.get("id") is not None:
            try:
                resolved = int(data["id"])
            except (TypeError, ValueError):
                resolved = None
        self._cache[slug] = resolved
        return resolved
