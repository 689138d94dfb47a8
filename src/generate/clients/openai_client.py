# Client for the OpenAI Chat Completions API.
# Same interface as GeminiClient; the key comes with each call.

from typing import Tuple, Dict, Any
from openai import OpenAI
from ..types import ModelParams

class OpenAIClient:
    def __init__(self, model: str = "gpt-4o-mini"):
        self.model = model

    def generate(self, credential: str, prompt: str, params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        client = OpenAI(api_key=credential, timeout=params.timeout, max_retries=0)
        kwargs: Dict[str, Any] = {}
        if params.temperature is not None:
            kwargs["temperature"] = params.temperature
        if params.max_tokens is not None:
            kwargs["max_tokens"] = params.max_tokens
        resp = client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        if not resp.choices:
            raise ValueError("OpenAI returned no choices")
        text = (resp.choices[0].message.content or "").strip()
        if not text:
            raise ValueError(f"OpenAI returned no text (finish_reason={resp.choices[0].finish_reason})")
        meta = {"engine": "openai", "model": self.model}
        return text, meta
