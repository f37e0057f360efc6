from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from lessonshop.config import settings

logger = logging.getLogger(__name__)


class NetworkFailure(Exception):
    """Non-2xx answer or transport error from the lessons backend."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class LessonsApi:
    """Thin async client for the lessons backend.

    GET /lessons, POST /orders, PUT /lessons/{_id}. Every call either
    returns the decoded JSON body or raises NetworkFailure.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.http_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LessonsApi":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise NetworkFailure(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            raise NetworkFailure(
                f"HTTP error! status: {response.status_code} ({method} {path})",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise NetworkFailure(f"{method} {path}: response is not JSON", status=response.status_code) from e

    async def fetch_lessons(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/lessons")
        if not isinstance(data, list):
            raise NetworkFailure("GET /lessons: expected a JSON array")
        return data

    async def create_order(self, order: Dict[str, Any]) -> Any:
        return await self._request("POST", "/orders", json=order)

    async def update_lesson_spaces(self, remote_id: Any, spaces: int) -> Any:
        return await self._request("PUT", f"/lessons/{remote_id}", json={"spaces": spaces})
