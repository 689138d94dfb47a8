# Units of work flowing through the pipeline, and the lifecycle states.

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class RequestUnit:
    """One pending generation job tied to an origin message and conversation."""
    origin_message_id: int
    conversation_id: int
    prompt_text: str
    credential: str = field(repr=False)


@dataclass(frozen=True)
class ResponseUnit:
    """One completed generation result, addressed back to its origin."""
    origin_message_id: int
    conversation_id: int
    response_text: str
    is_error: bool = False

    @classmethod
    def for_request(cls, request: RequestUnit, text: str, is_error: bool = False) -> "ResponseUnit":
        return cls(
            origin_message_id=request.origin_message_id,
            conversation_id=request.conversation_id,
            response_text=text,
            is_error=is_error,
        )


class PipelineState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    DRAINING_WORKERS = "draining_workers"
    DRAINING_DISPATCHERS = "draining_dispatchers"
    STOPPED = "stopped"
