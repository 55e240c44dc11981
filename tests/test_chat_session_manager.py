"""
Unit tests for the chat session manager: caching, ordering and the
partial-failure behaviour of append and delete.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from cropdoctor.core.errors import NotFound, PartialWriteError, RemoteStoreError, Unauthenticated
from cropdoctor.models.chat import MessageCreate, Sender


def _hold_first_listing(store):
    """Pause the first store.list_sessions after it has read, until released."""
    original = store.list_sessions
    fetched, release = asyncio.Event(), asyncio.Event()

    async def held(user_id):
        sessions = await original(user_id)
        if not release.is_set():
            fetched.set()
            await release.wait()
        return sessions

    store.list_sessions = held
    return fetched, release


class TestListSessions:
    """Caching behaviour of list_sessions."""

    @pytest.mark.asyncio
    async def test_second_call_within_ttl_is_cached(self, manager, store):
        await store.create_session("u1", "a")
        store.list_sessions = AsyncMock(wraps=store.list_sessions)

        first = await manager.list_sessions("u1")
        second = await manager.list_sessions("u1")

        assert second is first
        assert store.list_sessions.await_count == 1

    @pytest.mark.asyncio
    async def test_refetch_after_ttl(self, manager, store, cache, clock):
        await store.create_session("u1", "a")
        store.list_sessions = AsyncMock(wraps=store.list_sessions)

        await manager.list_sessions("u1")
        fetched_at = cache.entry.fetched_at
        clock.advance(301)
        await manager.list_sessions("u1")

        assert store.list_sessions.await_count == 2
        assert cache.entry.fetched_at > fetched_at

    @pytest.mark.asyncio
    async def test_cache_not_shared_between_users(self, manager):
        await manager.create_session("u1", "mine")
        await manager.list_sessions("u1")
        assert await manager.list_sessions("u2") == []

    @pytest.mark.asyncio
    async def test_created_session_appears_in_cached_list(self, manager):
        await manager.list_sessions("u1")
        session_id = await manager.create_session("u1", "new")
        assert [s.id for s in await manager.list_sessions("u1")] == [session_id]

    @pytest.mark.asyncio
    async def test_create_during_refresh_is_not_lost(self, manager, store):
        fetched, release = _hold_first_listing(store)

        async def create_mid_fetch():
            await fetched.wait()
            session_id = await manager.create_session("u1", "new")
            release.set()
            return session_id

        listed, session_id = await asyncio.gather(manager.list_sessions("u1"), create_mid_fetch())

        assert [s.id for s in listed] == [session_id]
        assert [s.id for s in await manager.list_sessions("u1")] == [session_id]

    @pytest.mark.asyncio
    async def test_delete_during_refresh_is_not_resurrected(self, manager, store):
        keep = await manager.create_session("u1", "keep")
        drop = await manager.create_session("u1", "drop")
        fetched, release = _hold_first_listing(store)

        async def delete_mid_fetch():
            await fetched.wait()
            await manager.delete_session("u1", drop)
            release.set()

        listed, _ = await asyncio.gather(manager.list_sessions("u1"), delete_mid_fetch())

        assert [s.id for s in listed] == [keep]
        assert [s.id for s in await manager.list_sessions("u1")] == [keep]

    @pytest.mark.asyncio
    async def test_append_moves_session_to_front(self, manager):
        older = await manager.create_session("u1", "older")
        await manager.create_session("u1", "newer")
        await manager.list_sessions("u1")

        await manager.append_message("u1", older, MessageCreate(text="bump"))
        sessions = await manager.list_sessions("u1")
        assert sessions[0].id == older
        assert sessions[0].last_message_at >= sessions[0].created_at


class TestMessages:
    """Create, append and read messages."""

    @pytest.mark.asyncio
    async def test_new_session_has_no_messages(self, manager):
        session_id = await manager.create_session("u1", "t")
        assert await manager.get_messages("u1", session_id) == []

    @pytest.mark.asyncio
    async def test_messages_in_append_order(self, manager):
        session_id = await manager.create_session("u1", "t")
        m1 = await manager.append_message("u1", session_id, MessageCreate(text="m1"))
        m2 = await manager.append_message(
            "u1", session_id, MessageCreate(text="m2", sender=Sender.ASSISTANT)
        )

        messages = await manager.get_messages("u1", session_id)
        assert [m.id for m in messages] == [m1.id, m2.id]
        assert [m.text for m in messages] == ["m1", "m2"]
        assert m1.timestamp < m2.timestamp

    @pytest.mark.asyncio
    async def test_append_updates_last_message_at(self, manager, store):
        session_id = await manager.create_session("u1", "t")
        message = await manager.append_message("u1", session_id, MessageCreate(text="hi"))
        session = await store.get_session("u1", session_id)
        assert session.last_message_at == message.timestamp

    @pytest.mark.asyncio
    async def test_append_to_missing_session(self, manager, store):
        with pytest.raises(NotFound):
            await manager.append_message("u1", "missing", MessageCreate(text="hi"))
        assert await store.list_message_ids("u1", "missing") == []

    @pytest.mark.asyncio
    async def test_append_partial_failure_keeps_message(self, manager, store, storage):
        session_id = await manager.create_session("u1", "t")
        before = await store.get_session("u1", session_id)
        storage.fail_save_on = f"chats/{session_id}.json"

        with pytest.raises(PartialWriteError) as exc_info:
            await manager.append_message("u1", session_id, MessageCreate(text="kept"))

        assert isinstance(exc_info.value, RemoteStoreError)
        assert exc_info.value.completed.text == "kept"
        storage.fail_save_on = None
        assert [m.text for m in await manager.get_messages("u1", session_id)] == ["kept"]
        after = await store.get_session("u1", session_id)
        assert after.last_message_at == before.last_message_at

    @pytest.mark.asyncio
    async def test_get_messages_of_missing_session(self, manager):
        with pytest.raises(NotFound):
            await manager.get_messages("u1", "missing")


class TestDeleteSession:
    """Deletion ordering and failure handling."""

    @pytest.mark.asyncio
    async def test_delete_removes_session_and_messages(self, manager, store):
        session_id = await manager.create_session("u1", "t")
        await manager.append_message("u1", session_id, MessageCreate(text="a"))
        await manager.append_message("u1", session_id, MessageCreate(text="b"))
        await manager.list_sessions("u1")

        await manager.delete_session("u1", session_id)

        with pytest.raises(NotFound):
            await manager.get_messages("u1", session_id)
        assert await store.list_message_ids("u1", session_id) == []
        assert session_id not in [s.id for s in await manager.list_sessions("u1")]

    @pytest.mark.asyncio
    async def test_delete_uses_cache_without_refetch(self, manager, store):
        keep = await manager.create_session("u1", "keep")
        drop = await manager.create_session("u1", "drop")
        await manager.list_sessions("u1")
        store.list_sessions = AsyncMock(wraps=store.list_sessions)

        await manager.delete_session("u1", drop)

        assert [s.id for s in await manager.list_sessions("u1")] == [keep]
        store.list_sessions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_message_deletion_keeps_session(self, manager, store, storage):
        session_id = await manager.create_session("u1", "t")
        await manager.append_message("u1", session_id, MessageCreate(text="a"))
        await manager.list_sessions("u1")
        storage.fail_delete_on = "/messages/"

        with pytest.raises(RemoteStoreError):
            await manager.delete_session("u1", session_id)

        assert await store.get_session("u1", session_id) is not None
        assert session_id in [s.id for s in await manager.list_sessions("u1")]

    @pytest.mark.asyncio
    async def test_one_failed_message_deletion_keeps_session(self, manager, store, storage):
        session_id = await manager.create_session("u1", "t")
        for text in ("a", "b", "c"):
            await manager.append_message("u1", session_id, MessageCreate(text=text))
        stuck = (await store.list_message_ids("u1", session_id))[1]
        storage.fail_delete_on = f"/messages/{stuck}"

        with pytest.raises(RemoteStoreError):
            await manager.delete_session("u1", session_id)

        assert await store.get_session("u1", session_id) is not None
        assert await store.list_message_ids("u1", session_id) == [stuck]

    @pytest.mark.asyncio
    async def test_delete_missing_session(self, manager):
        with pytest.raises(NotFound):
            await manager.delete_session("u1", "missing")


class TestAuthentication:
    """Every operation requires a user id."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("call", [
        lambda m: m.create_session("", "t"),
        lambda m: m.append_message("", "s", MessageCreate(text="x")),
        lambda m: m.list_sessions(""),
        lambda m: m.get_messages("", "s"),
        lambda m: m.delete_session("", "s"),
    ])
    async def test_missing_user_fails_fast(self, manager, store, call):
        store.storage = None  # any store access would blow up
        with pytest.raises(Unauthenticated):
            await call(manager)

    def test_reset_cache(self, manager, cache):
        cache.put("u1", [])
        manager.reset_cache()
        assert cache.entry is None
