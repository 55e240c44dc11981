"""
Unit tests for the response generator and the send-message flow.
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from cropdoctor.core.errors import GenerationError, RemoteStoreError
from cropdoctor.llm.base import LLMProvider, LLMResponse
from cropdoctor.models.chat import MessageStatus, Sender
from cropdoctor.services.chat_service import ChatService, make_title
from cropdoctor.services.response_generator import DEFAULT_FALLBACK_REPLY, ResponseGenerator

FALLBACK = "I'm sorry, I didn't understand your request. Could you rephrase it?"


def _provider(content="Apply neem oil weekly.", error=None):
    provider = AsyncMock(spec=LLMProvider)
    if error is not None:
        provider.chat_completion.side_effect = error
    else:
        provider.chat_completion.return_value = LLMResponse(content=content, model="test")
    return provider


class TestResponseGenerator:
    """Tests for ResponseGenerator."""

    def test_default_fallback_text(self):
        assert DEFAULT_FALLBACK_REPLY == FALLBACK

    @pytest.mark.asyncio
    async def test_generate_returns_reply(self):
        provider = _provider("  Water early in the morning.  ")
        generator = ResponseGenerator(provider)
        assert await generator.generate("When to water?") == "Water early in the morning."

        messages = provider.chat_completion.call_args.args[0]
        assert [(m.role, m.content) for m in messages] == [("user", "When to water?")]

    @pytest.mark.asyncio
    async def test_system_prompt_sent_first(self):
        provider = _provider()
        generator = ResponseGenerator(provider, system_prompt="You are a crop doctor.")
        await generator.generate("Leaves are yellow")
        roles = [m.role for m in provider.chat_completion.call_args.args[0]]
        assert roles == ["system", "user"]

    @pytest.mark.asyncio
    async def test_transport_failure_raises_generation_error(self):
        generator = ResponseGenerator(_provider(error=httpx.ConnectError("down")))
        with pytest.raises(GenerationError):
            await generator.generate("hi")

    @pytest.mark.asyncio
    async def test_empty_reply_raises_generation_error(self):
        generator = ResponseGenerator(_provider(content="   "))
        with pytest.raises(GenerationError):
            await generator.generate("hi")

    @pytest.mark.asyncio
    async def test_unconfigured_provider_raises_generation_error(self):
        with pytest.raises(GenerationError, match="not configured"):
            await ResponseGenerator(None).generate("hi")

    @pytest.mark.asyncio
    async def test_fallback_substituted_on_failure(self):
        generator = ResponseGenerator(_provider(error=RuntimeError("boom")))
        assert await generator.generate_or_fallback("hi") == FALLBACK


class TestChatService:
    """Tests for the send-message flow."""

    def test_make_title(self):
        assert make_title("short") == "short"
        long_text = "x" * 60
        assert make_title(long_text) == "x" * 50 + "..."

    @pytest.mark.asyncio
    async def test_first_message_opens_session(self, manager):
        service = ChatService(manager, ResponseGenerator(_provider("Use drip irrigation.")))
        turn = await service.send_message("u1", "  How do I save water on my maize field?  ")

        assert turn.title == "How do I save water on my maize field?"
        assert turn.user_message.sender == Sender.USER
        assert turn.user_message.status == MessageStatus.SENT
        assert turn.reply.sender == Sender.ASSISTANT
        assert turn.reply.status == MessageStatus.DELIVERED
        assert turn.reply.text == "Use drip irrigation."

        messages = await manager.get_messages("u1", turn.session_id)
        assert [m.text for m in messages] == [
            "How do I save water on my maize field?", "Use drip irrigation.",
        ]

    @pytest.mark.asyncio
    async def test_follow_up_uses_existing_session(self, manager):
        service = ChatService(manager, ResponseGenerator(_provider()))
        first = await service.send_message("u1", "first")
        second = await service.send_message("u1", "second", session_id=first.session_id)

        assert second.session_id == first.session_id
        assert second.title is None
        assert len(await manager.get_messages("u1", first.session_id)) == 4
        assert len(await manager.list_sessions("u1")) == 1

    @pytest.mark.asyncio
    async def test_generation_failure_stores_fallback(self, manager):
        service = ChatService(manager, ResponseGenerator(_provider(error=httpx.ReadTimeout("slow"))))
        turn = await service.send_message("u1", "???")
        assert turn.reply.text == FALLBACK
        assert turn.reply.status == MessageStatus.DELIVERED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "x" * 501])
    async def test_invalid_input_rejected(self, manager, text):
        service = ChatService(manager, ResponseGenerator(_provider()))
        with pytest.raises(ValueError):
            await service.send_message("u1", text)
        assert await manager.list_sessions("u1") == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, manager, storage):
        service = ChatService(manager, ResponseGenerator(_provider()))
        storage.fail_save_on = "users/"
        with pytest.raises(RemoteStoreError):
            await service.send_message("u1", "hello")
