"""Testes do ResyncPoller."""

from __future__ import annotations

import asyncio
import logging

import pytest

from brainmate_chat.application.message_store import MessageStore
from brainmate_chat.application.negotiator import SessionNegotiator
from brainmate_chat.application.notice_board import NoticeBoard
from brainmate_chat.application.resync_poller import ResyncPoller
from brainmate_chat.domain.errors import ShapeError
from brainmate_chat.infra.http import HttpError
from tests.helpers.builders import make_message


def _poller(api, interval: float = 60.0) -> tuple[ResyncPoller, MessageStore, SessionNegotiator, NoticeBoard]:
    board = NoticeBoard()
    store = MessageStore()
    negotiator = SessionNegotiator(api, 7, board)
    return ResyncPoller(api, store, negotiator, interval=interval), store, negotiator, board


class TestPollOnce:
    @pytest.mark.asyncio
    async def test_merges_server_list_keeping_pending(self, api) -> None:
        poller, store, negotiator, _ = _poller(api)
        await negotiator.load()
        store.append(make_message(1, minute=0))
        store.append(make_message("temp-3", "pending", optimistic=True))
        api.list_messages.return_value = [make_message(1, minute=0), make_message(2, minute=1)]

        assert await poller.poll_once() is True

        assert [m.id for m in store.messages] == [1, 2, "temp-3"]
        api.list_messages.assert_awaited_once_with("tok-1")

    @pytest.mark.asyncio
    async def test_failure_is_silent(self, api, caplog) -> None:
        poller, store, negotiator, board = _poller(api)
        await negotiator.load()
        store.append(make_message(1, minute=0))
        api.list_messages.side_effect = HttpError("HTTP 500", status_code=500)

        with caplog.at_level(logging.WARNING):
            assert await poller.poll_once() is False

        assert [m.id for m in store.messages] == [1]
        assert board.records == ()
        assert any(r.getMessage() == "resync_failed" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_shape_error_is_silent(self, api) -> None:
        poller, _, negotiator, board = _poller(api)
        await negotiator.load()
        api.list_messages.side_effect = ShapeError("bad")

        assert await poller.poll_once() is False
        assert board.records == ()

    @pytest.mark.asyncio
    async def test_stale_list_does_not_erase_confirmed_send(self, api) -> None:
        poller, store, negotiator, _ = _poller(api)
        await negotiator.load()
        store.append(make_message("temp-1", optimistic=True))
        gate = asyncio.Event()

        async def slow_list(token):
            await gate.wait()
            return []

        api.list_messages.side_effect = slow_list
        poll = asyncio.create_task(poller.poll_once())
        await asyncio.sleep(0)

        store.replace_optimistic("temp-1", [make_message(10, minute=0), make_message(11, minute=1)])
        gate.set()

        assert await poll is False
        assert [m.id for m in store.messages] == [10, 11]

    @pytest.mark.asyncio
    async def test_inactive_session_does_not_fetch(self, api) -> None:
        poller, _, _, _ = _poller(api)
        assert await poller.poll_once() is False
        api.list_messages.assert_not_awaited()


class TestLifecycle:
    def test_invalid_interval(self, api) -> None:
        with pytest.raises(ValueError):
            ResyncPoller(api, MessageStore(), SessionNegotiator(api, 7, NoticeBoard()), interval=0)

    @pytest.mark.asyncio
    async def test_start_refused_before_active(self, api) -> None:
        poller, _, _, _ = _poller(api)
        assert poller.start() is False
        assert poller.is_running is False

    @pytest.mark.asyncio
    async def test_polls_on_interval_and_stops(self, api) -> None:
        poller, _, negotiator, _ = _poller(api, interval=0.01)
        await negotiator.load()

        assert poller.start() is True
        await asyncio.sleep(0.05)
        await poller.stop()

        calls = api.list_messages.await_count
        assert calls >= 2
        await asyncio.sleep(0.03)
        assert api.list_messages.await_count == calls
        assert poller.is_running is False

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_loop_alive(self, api) -> None:
        poller, _, negotiator, _ = _poller(api, interval=0.01)
        await negotiator.load()
        calls = {"count": 0}

        async def flaky(token):
            calls["count"] += 1
            if calls["count"] == 1:
                raise RuntimeError("boom")
            return []

        api.list_messages.side_effect = flaky

        poller.start()
        await asyncio.sleep(0.05)
        assert poller.is_running is True
        await poller.stop()
        assert api.list_messages.await_count >= 2

    @pytest.mark.asyncio
    async def test_stop_without_start(self, api) -> None:
        poller, _, _, _ = _poller(api)
        await poller.stop()
