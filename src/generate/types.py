# Typed dataclasses shared across generator modules.

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass
class ModelParams:
    """LLM parameters per request."""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    timeout: float = 60.0  # seconds allowed for one backend call
