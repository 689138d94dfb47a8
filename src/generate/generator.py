# Generation Client: maps (credential, prompt) to generated text.
# - accepts any model client (Gemini, OpenAI, Echo)
# - keeps no state between calls
# - every failure surfaces as GenerationError, never as a process exit

from __future__ import annotations
import logging
from typing import Optional

from .types import ModelParams
from src.errors import GenerationError

logger = logging.getLogger("storybot.generate")

DEFAULT_MODELS = {
    "gemini": "gemini-1.5-flash",
    "openai": "gpt-4o-mini",
    "echo": "echo-dev",
}


class TextGenerator:
    def __init__(self, model_client, params: Optional[ModelParams] = None):
        self.model_client = model_client
        self.params = params or ModelParams()

    def generate(self, credential: str, prompt_text: str) -> str:
        """Run one blocking backend call and return the generated text.

        Raises GenerationError with the backend exception chained as its cause.
        """
        if not prompt_text or not prompt_text.strip():
            raise GenerationError("prompt text must not be empty")
        try:
            text, meta = self.model_client.generate(credential, prompt_text, self.params)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{type(e).__name__}: {e}") from e
        if not text or not text.strip():
            raise GenerationError(f"backend returned no text (meta={meta})")
        logger.debug("Generated %d chars meta=%s", len(text), meta)
        return text


def build_model_client(backend: str, model: Optional[str] = None):
    """Pick the model client for a GENERATION_BACKEND value."""
    backend = backend.lower()
    model = model or DEFAULT_MODELS.get(backend)
    if backend == "gemini":
        from src.generate.clients.gemini_client import GeminiClient
        return GeminiClient(model=model)
    if backend == "openai":
        from src.generate.clients.openai_client import OpenAIClient
        return OpenAIClient(model=model)
    if backend == "echo":
        from src.generate.clients.echo_dev_client import EchoDevClient
        return EchoDevClient()
    raise ValueError(f"unknown generation backend: {backend}")


def build_generator(settings, model_client=None) -> TextGenerator:
    client = model_client or build_model_client(settings.GENERATION_BACKEND, settings.GENERATION_MODEL)
    params = ModelParams(
        temperature=settings.TEMPERATURE,
        max_tokens=settings.MAX_TOKENS,
        timeout=settings.GENERATION_TIMEOUT,
    )
    return TextGenerator(model_client=client, params=params)
