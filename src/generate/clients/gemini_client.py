# Client for the Gemini generateContent REST endpoint.
# Same interface as OpenAIClient: generate(credential, prompt, params).
#
# Multi-part answers: only the first candidate is used and all of its text
# parts are joined in order.

import os
import requests
from typing import Any, Dict, List, Tuple
from ..types import ModelParams

GEMINI_HOST = os.getenv("GEMINI_HOST", "https://generativelanguage.googleapis.com")


class GeminiClient:
    def __init__(self, model: str = "gemini-1.5-flash", host: str = GEMINI_HOST):
        self.model = model
        self.host = host.rstrip("/")

    def generate(self, credential: str, prompt: str, params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        config = self._generation_config(params)
        if config:
            payload["generationConfig"] = config

        url = f"{self.host}/v1beta/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": credential}
        resp = requests.post(url, json=payload, headers=headers, timeout=params.timeout)
        resp.raise_for_status()
        data = resp.json()

        text = self._extract_text(data)
        meta = {
            "engine": "gemini",
            "model": self.model,
            "finish_reason": (data.get("candidates") or [{}])[0].get("finishReason"),
        }
        return text, meta

    def _generation_config(self, params: ModelParams) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        if params.temperature is not None:
            config["temperature"] = float(params.temperature)
        if params.max_tokens is not None:
            config["maxOutputTokens"] = int(params.max_tokens)
        return config

    def _extract_text(self, data: Dict[str, Any]) -> str:
        candidates: List[Dict[str, Any]] = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise ValueError(f"Gemini returned no candidates ({reason})")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [p["text"] for p in parts if isinstance(p.get("text"), str)]
        text = "".join(texts).strip()
        if not text:
            reason = candidates[0].get("finishReason", "empty content")
            raise ValueError(f"Gemini returned no text ({reason})")
        return text
