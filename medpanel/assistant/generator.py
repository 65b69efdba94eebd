import logging
from functools import lru_cache
from typing import Optional, Protocol

from google import genai

from medpanel.config import get_settings


logger = logging.getLogger(__name__)


class TextGenerator(Protocol):

    async def generate(self, prompt: str) -> str:
        ...


class GeminiGenerator:

    def __init__(self, api_key: str, model: str) -> None:
        self._client = genai.Client(api_key=api_key)
        self.model = model

    async def generate(self, prompt: str) -> str:
        response = await self._client.aio.models.generate_content(model=self.model, contents=prompt)
        text = response.text
        if not text:
            raise RuntimeError("Gemini returned an empty response")
        return text


@lru_cache
def get_generator() -> Optional[TextGenerator]:
    settings = get_settings()
    if not settings.google_api_key:
        logger.error("GOOGLE_API_KEY is not configured; assistant replies are disabled")
        return None
    logger.info("Gemini generator ready (model %s)", settings.gemini_model)
    return GeminiGenerator(settings.google_api_key, settings.gemini_model)
