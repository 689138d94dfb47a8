# Dummy model client for local dev and testing without API calls.

from typing import Tuple, Dict, Any
from ..types import ModelParams

class EchoDevClient:
    def __init__(self):
        self.model = "echo-dev"

    def generate(self, credential: str, prompt: str, params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        text = f"[ECHO RESPONSE]\n{prompt}"
        meta = {"engine": "echo", "model": self.model, "temp": params.temperature, "max_tokens": params.max_tokens}
        return text, meta
