"""
Worker Pool

Each worker takes RequestUnits from the intake queue, calls the generator and
puts exactly one ResponseUnit on the outtake queue. A failed generation turns
into an apology ResponseUnit so the requester still hears back.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.errors import GenerationError
from src.pipeline.pool import ThreadGroup
from src.pipeline.prompts import GENERATION_APOLOGY
from src.pipeline.queues import ClosableQueue
from src.pipeline.stats import PipelineStats
from src.pipeline.types import RequestUnit, ResponseUnit

logger = logging.getLogger("storybot.workers")


class WorkerPool(ThreadGroup):
    name = "worker"

    def __init__(
        self,
        generator,
        intake: ClosableQueue[RequestUnit],
        outtake: ClosableQueue[ResponseUnit],
        size: int,
        annotate: bool = False,
        stats: Optional[PipelineStats] = None,
        apology_text: str = GENERATION_APOLOGY,
    ) -> None:
        super().__init__(size)
        self.generator = generator
        self.intake = intake
        self.outtake = outtake
        self.annotate = annotate
        self.stats = stats or PipelineStats()
        self.apology_text = apology_text

    def _run(self, worker_id: int) -> None:
        logger.debug("Worker %d started", worker_id)
        for request in self.intake:
            response = self.process(worker_id, request)
            self.outtake.put(response)
        logger.debug("Worker %d drained intake and stopped", worker_id)

    def process(self, worker_id: int, request: RequestUnit) -> ResponseUnit:
        # Never let one request take the worker down.
        try:
            text = self.generator.generate(request.credential, request.prompt_text)
        except GenerationError as exc:
            logger.warning(
                "Generation failed chat=%s message=%s: %s",
                request.conversation_id,
                request.origin_message_id,
                exc,
            )
            self.stats.incr("generation_failures")
            return ResponseUnit.for_request(request, self.apology_text, is_error=True)
        except Exception:
            logger.exception(
                "Unexpected error generating chat=%s message=%s",
                request.conversation_id,
                request.origin_message_id,
            )
            self.stats.incr("generation_failures")
            return ResponseUnit.for_request(request, self.apology_text, is_error=True)

        if self.annotate:
            text += f"\n\nProcessed by worker {worker_id}"
        self.stats.incr("responses_generated")
        return ResponseUnit.for_request(request, text)
