"""
TextGenerator interface. generate() never raises: any backend failure degrades
to FALLBACK_REPLY so the voice pipeline always has something to speak.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I'm having trouble responding right now."

PROMPT_TEMPLATE = "Reply in short to the user: {user_input}"


def build_prompt(user_input: str) -> str:
    return PROMPT_TEMPLATE.format(user_input=user_input.strip())


class TextGenerator(ABC):
    """Subclasses implement _complete(); callers use generate()."""

    @abstractmethod
    async def _complete(self, prompt: str) -> str:
        """Send prompt to the model and return its text. May raise."""
        ...

    async def generate(self, user_input: str) -> str:
        logger.info("User input to AI: %s", user_input)
        try:
            text = (await self._complete(build_prompt(user_input))).strip()
        except Exception as e:
            logger.error("Text generation failed (%s): %s", type(self).__name__, e)
            return FALLBACK_REPLY
        if not text:
            logger.warning("Text generation returned empty reply (%s)", type(self).__name__)
            return FALLBACK_REPLY
        logger.info("AI response: %s", text)
        return text
