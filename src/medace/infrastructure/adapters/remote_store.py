"""
Remote Card Store: Infrastructure adapter for a hosted REST backend.

Implements CardRecordStore over HTTP with httpx. Every transport error or
non-success response is surfaced as StoreUnavailable; retry policy belongs
to the caller.

Endpoints (relative to the base URL):
    GET  /users/{uid}/review-states/{wordId}      -> state | 404
    PUT  /users/{uid}/review-states/{wordId}
    GET  /users/{uid}/review-states?bookId=&dueBefore=
    GET  /books/{bookId}/words
    GET  /words
    GET  /words/{wordId}                          -> word | 404
    GET  /users/{uid}/gamification                -> state | 404
    PUT  /users/{uid}/gamification
    GET  /gamification                            -> {uid: state}
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from medace.domain.constants import REQUEST_TIMEOUT
from medace.domain.errors import StoreUnavailable
from medace.domain.models import GamificationState, ReviewFilter, ReviewState, Word
from medace.domain.ports import CardRecordStore
from medace.infrastructure.codec import (
    gamification_from_json,
    gamification_to_json,
    review_state_from_json,
    review_state_to_json,
    word_from_json,
)

T = TypeVar("T")


class RemoteCardStore(CardRecordStore):
    """Adapter for a remote card record service (JSON over HTTP)."""

    def __init__(
        self,
        url: str = "http://127.0.0.1:8787",
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.logger.debug(f"RemoteCardStore initialized with url={self.url}")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.url, timeout=self.timeout, transport=self._transport
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        allow_missing: bool = False,
    ) -> Any:
        """
        Send one request and decode the JSON body.

        Returns None for 404 when ``allow_missing`` is set, and for empty bodies.
        """
        try:
            resp = await self._get_client().request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            self.logger.warning(f"{method} {path} failed: {e}")
            raise StoreUnavailable(f"{method} {path} failed: {e}") from e

        if allow_missing and resp.status_code == 404:
            return None
        if resp.is_error:
            raise StoreUnavailable(f"{method} {path} returned HTTP {resp.status_code}")
        if not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise StoreUnavailable(f"{method} {path} returned invalid JSON") from e

    @staticmethod
    def _seg(value: str) -> str:
        return quote(value, safe="")

    def _decode(self, path: str, decode: Callable[[Any], T], data: Any) -> T:
        """Run a codec over a response body, reporting malformed records as StoreUnavailable."""
        try:
            return decode(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Malformed record from {path}: {e}")
            raise StoreUnavailable(f"{path} returned a malformed record: {e}") from e

    def _decode_list(self, path: str, decode: Callable[[Any], T], data: Any) -> list[T]:
        return self._decode(path, lambda items: [decode(item) for item in items or []], data)

    async def get_review_state(self, user_id: str, word_id: str) -> ReviewState | None:
        path = f"/users/{self._seg(user_id)}/review-states/{self._seg(word_id)}"
        data = await self._request("GET", path, allow_missing=True)
        return self._decode(path, review_state_from_json, data) if data else None

    async def put_review_state(self, user_id: str, word_id: str, state: ReviewState) -> None:
        await self._request(
            "PUT",
            f"/users/{self._seg(user_id)}/review-states/{self._seg(word_id)}",
            json=review_state_to_json(state),
        )

    async def list_review_states(
        self, user_id: str, review_filter: ReviewFilter | None = None
    ) -> list[ReviewState]:
        params: dict[str, Any] = {}
        if review_filter is not None:
            if review_filter.book_id is not None:
                params["bookId"] = review_filter.book_id
            if review_filter.due_before is not None:
                params["dueBefore"] = review_filter.due_before

        path = f"/users/{self._seg(user_id)}/review-states"
        data = await self._request("GET", path, params=params or None)
        return self._decode_list(path, review_state_from_json, data)

    async def list_words(self, book_id: str) -> list[Word]:
        path = f"/books/{self._seg(book_id)}/words"
        words = self._decode_list(path, word_from_json, await self._request("GET", path))
        return sorted(words, key=lambda w: w.number)

    async def list_catalog(self) -> list[Word]:
        return self._decode_list("/words", word_from_json, await self._request("GET", "/words"))

    async def get_word(self, word_id: str) -> Word | None:
        path = f"/words/{self._seg(word_id)}"
        data = await self._request("GET", path, allow_missing=True)
        return self._decode(path, word_from_json, data) if data else None

    async def get_gamification_state(self, user_id: str) -> GamificationState | None:
        path = f"/users/{self._seg(user_id)}/gamification"
        data = await self._request("GET", path, allow_missing=True)
        return self._decode(path, gamification_from_json, data) if data else None

    async def put_gamification_state(self, user_id: str, state: GamificationState) -> None:
        await self._request(
            "PUT",
            f"/users/{self._seg(user_id)}/gamification",
            json=gamification_to_json(state),
        )

    async def list_gamification_states(self) -> dict[str, GamificationState]:
        data = await self._request("GET", "/gamification")
        return self._decode(
            "/gamification",
            lambda items: {uid: gamification_from_json(item) for uid, item in (items or {}).items()},
            data,
        )
