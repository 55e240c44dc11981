"""
Response Generator - single-call adapter around the configured LLM provider.
"""

import logging
from typing import List, Optional

from ..core.errors import GenerationError
from ..llm.base import LLMMessage, LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_REPLY = "I'm sorry, I didn't understand your request. Could you rephrase it?"


class ResponseGenerator:
    """
    Turns one prompt into one reply. Each call is independent; no
    conversation history is sent.

    Args:
        provider: LLM provider, or None when no API key is configured
        fallback_reply: Text substituted by ``generate_or_fallback`` on failure
        system_prompt: Optional instruction sent ahead of the prompt
    """

    def __init__(
        self,
        provider: Optional[LLMProvider],
        fallback_reply: str = DEFAULT_FALLBACK_REPLY,
        system_prompt: Optional[str] = None,
    ):
        self.provider = provider
        self.fallback_reply = fallback_reply
        self.system_prompt = system_prompt

    def _messages(self, prompt: str) -> List[LLMMessage]:
        messages = []
        if self.system_prompt:
            messages.append(LLMMessage.text("system", self.system_prompt))
        messages.append(LLMMessage.text("user", prompt))
        return messages

    async def generate(self, prompt: str) -> str:
        """
        Send ``prompt`` to the generation endpoint and return the reply text.

        Raises:
            GenerationError: No provider is configured, the call failed, or
                the reply was empty
        """
        if self.provider is None:
            raise GenerationError("LLM not configured. Set LLM_API_KEY and LLM_PROVIDER.")

        try:
            response = await self.provider.chat_completion(self._messages(prompt))
        except Exception as e:
            raise GenerationError("Failed to generate response") from e

        text = (response.content or "").strip()
        if not text:
            raise GenerationError("Empty response from generation endpoint")
        return text

    async def generate_or_fallback(self, prompt: str) -> str:
        """Like ``generate`` but returns the fallback reply instead of raising."""
        try:
            return await self.generate(prompt)
        except GenerationError as e:
            logger.warning(f"Generation failed, using fallback reply: {e}")
            return self.fallback_reply
