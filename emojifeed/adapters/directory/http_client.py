"""HTTP client for the external identity service."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx

from emojifeed.adapters.directory.base import AbstractAuthorDirectory, batched, unique_ids
from emojifeed.core.errors import UpstreamTimeoutAppError, UpstreamUnavailableAppError
from emojifeed.domain.models import AuthorRecord

logger = logging.getLogger(__name__)


class HttpAuthorDirectory(AbstractAuthorDirectory):
    """Author directory backed by the identity service's REST API.

    Endpoints:
        GET  /v1/users?user_id=..&user_id=..&limit=N -> [{id, username, profile_image_url}]
        GET  /v1/users?username=..&limit=1          -> [{id, username, profile_image_url}]
        POST /v1/sessions/verify {"token": ...}      -> {"user_id": ...}
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        batch_size: int = 100,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._batch_size = batch_size
        self.timeout = httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 5.0))
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        """Initialize HTTP client"""
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        self.client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.info("directory.client_started", extra={"batch_size": self._batch_size})

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("directory.client_closed")

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if not self.client:
            raise RuntimeError("HttpAuthorDirectory.start() was not awaited")

        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("directory.timeout", extra={"url": url})
            raise UpstreamTimeoutAppError(
                code="upstream_timeout",
                message="The identity service did not respond in time.",
                details={"upstream": "identity"},
            ) from exc
        except httpx.TransportError as exc:
            raise self._unavailable(url, str(exc)) from exc

    def _unavailable(self, url: str, reason: str) -> UpstreamUnavailableAppError:
        logger.error("directory.request_failed", extra={"url": url, "reason": reason})
        return UpstreamUnavailableAppError(
            code="identity_unavailable",
            message="The identity service is unavailable.",
            details={"upstream": "identity"},
        )

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise self._unavailable(str(response.request.url), "invalid_json") from exc

    @staticmethod
    def _to_record(item: dict[str, Any]) -> AuthorRecord:
        return AuthorRecord(
            id=str(item["id"]),
            display_name=item.get("username") or None,
            profile_image_url=item.get("profile_image_url") or item.get("image_url"),
        )

    async def _list_users(self, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        response = await self._request("GET", "/v1/users", params=params)
        if response.status_code != httpx.codes.OK:
            raise self._unavailable("/v1/users", f"status_{response.status_code}")

        payload = self._json(response)
        if isinstance(payload, dict):
            payload = payload.get("data", [])
        if not isinstance(payload, list):
            raise self._unavailable("/v1/users", "unexpected_payload")
        return payload

    async def _resolve_batch(self, batch: list[str]) -> list[dict[str, Any]]:
        params = [("user_id", author_id) for author_id in batch]
        params.append(("limit", str(len(batch))))
        return await self._list_users(params)

    async def resolve_many(self, author_ids: Iterable[str]) -> dict[str, AuthorRecord]:
        ids = unique_ids(author_ids)
        resolved: dict[str, AuthorRecord] = {}

        for batch in batched(ids, self._batch_size):
            wanted = set(batch)
            for item in await self._resolve_batch(batch):
                if not isinstance(item, dict) or "id" not in item:
                    continue
                record = self._to_record(item)
                if record.id in wanted:
                    resolved[record.id] = record

        logger.debug(
            "directory.batch_resolved",
            extra={"requested": len(ids), "resolved": len(resolved)},
        )
        return resolved

    async def resolve_by_username(self, username: str) -> AuthorRecord | None:
        for item in await self._list_users([("username", username), ("limit", "1")]):
            if not isinstance(item, dict) or "id" not in item:
                continue
            record = self._to_record(item)
            if record.display_name == username:
                return record
        return None

    async def verify_session(self, token: str) -> str | None:
        response = await self._request("POST", "/v1/sessions/verify", json={"token": token})
        if response.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.NOT_FOUND):
            return None
        if response.status_code != httpx.codes.OK:
            raise self._unavailable("/v1/sessions/verify", f"status_{response.status_code}")

        payload = self._json(response)
        user_id = payload.get("user_id") if isinstance(payload, dict) else None
        return str(user_id) if user_id else None
