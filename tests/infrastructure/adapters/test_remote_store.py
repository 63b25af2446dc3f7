"""Tests for the HTTP card store, driven through httpx.MockTransport."""

import json

import httpx
import pytest

from medace.domain.errors import StoreUnavailable
from medace.domain.models import GamificationState, ReviewFilter
from medace.infrastructure.adapters.remote_store import RemoteCardStore

STATE = {
    "wordId": "duo_1",
    "bookId": "duo",
    "status": "graduated",
    "interval": 25,
    "easeFactor": 2.5,
    "nextReviewDate": 1,
    "lastStudiedAt": 0,
    "correctCount": 3,
    "attemptCount": 4,
}


def _store(handler):
    return RemoteCardStore("http://cards.test/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_review_state():
    def handler(request):
        assert request.url.raw_path == b"/users/u%201/review-states/duo_1"
        return httpx.Response(200, json=STATE)

    state = await _store(handler).get_review_state("u 1", "duo_1")

    assert state.interval == 25
    assert state.status.value == "graduated"


@pytest.mark.asyncio
async def test_missing_record_is_none():
    store = _store(lambda request: httpx.Response(404))
    assert await store.get_review_state("u1", "duo_1") is None
    assert await store.get_word("duo_1") is None
    assert await store.get_gamification_state("u1") is None


@pytest.mark.asyncio
async def test_put_sends_camel_case_json(make_word, make_state):
    sent = {}

    def handler(request):
        sent["method"] = request.method
        sent["body"] = json.loads(request.content)
        return httpx.Response(204)

    word = make_word(1)
    await _store(handler).put_review_state("u1", word.id, make_state(word, interval=6))

    assert sent["method"] == "PUT"
    assert sent["body"]["wordId"] == word.id
    assert sent["body"]["interval"] == 6


@pytest.mark.asyncio
async def test_list_review_states_sends_filter():
    def handler(request):
        assert request.url.params["bookId"] == "duo"
        assert request.url.params["dueBefore"] == "99"
        return httpx.Response(200, json=[STATE])

    states = await _store(handler).list_review_states("u1", ReviewFilter("duo", 99))

    assert [s.word_id for s in states] == ["duo_1"]


@pytest.mark.asyncio
async def test_list_words_sorted_by_number():
    words = [
        {"id": "duo_2", "bookId": "duo", "number": 2, "word": "b", "definition": "B"},
        {"id": "duo_1", "bookId": "duo", "number": 1, "word": "a", "definition": "A"},
    ]
    store = _store(lambda request: httpx.Response(200, json=words))

    assert [w.id for w in await store.list_words("duo")] == ["duo_1", "duo_2"]


@pytest.mark.asyncio
async def test_gamification_round_trip():
    def handler(request):
        if request.url.path == "/gamification":
            return httpx.Response(
                200, json={"u1": {"xp": 5, "level": 2, "currentStreak": 1, "lastLoginDate": None}}
            )
        return httpx.Response(204)

    store = _store(handler)
    await store.put_gamification_state("u1", GamificationState(xp=5, level=2))
    states = await store.list_gamification_states()

    assert states["u1"].level == 2
    assert states["u1"].last_login_date is None


@pytest.mark.asyncio
async def test_server_error_raises_store_unavailable():
    store = _store(lambda request: httpx.Response(500))
    with pytest.raises(StoreUnavailable, match="HTTP 500"):
        await store.get_review_state("u1", "duo_1")


@pytest.mark.asyncio
async def test_connection_error_raises_store_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(StoreUnavailable):
        await _store(handler).list_catalog()


@pytest.mark.asyncio
async def test_invalid_json_raises_store_unavailable():
    store = _store(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(StoreUnavailable):
        await store.list_catalog()


@pytest.mark.asyncio
async def test_aclose_is_idempotent():
    store = _store(lambda request: httpx.Response(200, json=[]))
    await store.list_catalog()
    await store.aclose()
    await store.aclose()


@pytest.mark.asyncio
async def test_unknown_status_raises_store_unavailable():
    record = {"wordId": "w", "bookId": "b", "status": "learned"}
    store = _store(lambda request: httpx.Response(200, json=[record]))

    with pytest.raises(StoreUnavailable, match="malformed record"):
        await store.list_review_states("u1")


@pytest.mark.asyncio
async def test_record_missing_ids_raises_store_unavailable():
    store = _store(lambda request: httpx.Response(200, json={"bookId": "duo"}))

    with pytest.raises(StoreUnavailable):
        await store.get_review_state("u1", "duo_1")
    with pytest.raises(StoreUnavailable):
        await store.get_word("duo_1")


@pytest.mark.asyncio
async def test_wrong_payload_shape_raises_store_unavailable():
    store = _store(lambda request: httpx.Response(200, json=[1, 2]))

    with pytest.raises(StoreUnavailable):
        await store.list_catalog()
    with pytest.raises(StoreUnavailable):
        await store.list_gamification_states()
