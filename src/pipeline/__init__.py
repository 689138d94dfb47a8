# Pipeline package: intake -> workers -> dispatchers, with graceful drain.

from .types import RequestUnit, ResponseUnit, PipelineState
from .queues import ClosableQueue, QueueClosed
from .prompts import CommandRule, build_rules, parse_command, compose_prompt, MISSING_ARGUMENT_NOTICE, GENERATION_APOLOGY
from .workers import WorkerPool
from .dispatch import DispatchPool
from .intake import IntakeController
from .lifecycle import Pipeline
from .stats import PipelineStats

__all__ = [
    "RequestUnit",
    "ResponseUnit",
    "PipelineState",
    "ClosableQueue",
    "QueueClosed",
    "CommandRule",
    "build_rules",
    "parse_command",
    "compose_prompt",
    "MISSING_ARGUMENT_NOTICE",
    "GENERATION_APOLOGY",
    "WorkerPool",
    "DispatchPool",
    "IntakeController",
    "Pipeline",
    "PipelineStats",
]
