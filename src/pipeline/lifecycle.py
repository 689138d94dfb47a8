"""
Lifecycle Coordinator

Owns the intake and outtake queues and the two thread pools:

    intake queue -> WorkerPool -> outtake queue -> DispatchPool -> chat platform

Shutdown drains front to back, so nothing already queued is lost:

    RUNNING -> close intake -> DRAINING_WORKERS -> join workers
            -> close outtake -> DRAINING_DISPATCHERS -> join dispatchers -> STOPPED
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict

from src.errors import PipelineClosed
from src.pipeline.dispatch import DispatchPool
from src.pipeline.queues import ClosableQueue, QueueClosed
from src.pipeline.stats import PipelineStats
from src.pipeline.types import PipelineState, RequestUnit, ResponseUnit
from src.pipeline.workers import WorkerPool

logger = logging.getLogger("storybot.pipeline")


class Pipeline:
    def __init__(
        self,
        generator,
        chat_client,
        worker_count: int = 10,
        dispatcher_count: int = 10,
        intake_size: int = 100,
        outtake_size: int = 100,
        annotate: bool = False,
    ) -> None:
        self.stats = PipelineStats()
        self.intake: ClosableQueue[RequestUnit] = ClosableQueue(maxsize=intake_size)
        self.outtake: ClosableQueue[ResponseUnit] = ClosableQueue(maxsize=outtake_size)
        self.workers = WorkerPool(
            generator,
            self.intake,
            self.outtake,
            size=worker_count,
            annotate=annotate,
            stats=self.stats,
        )
        self.dispatchers = DispatchPool(
            chat_client,
            self.outtake,
            size=dispatcher_count,
            annotate=annotate,
            stats=self.stats,
        )
        self._state = PipelineState.CREATED
        self._state_lock = threading.Lock()
        self._shutdown_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings, generator, chat_client) -> "Pipeline":
        return cls(
            generator,
            chat_client,
            worker_count=settings.WORKER_COUNT,
            dispatcher_count=settings.DISPATCHER_COUNT,
            intake_size=settings.INTAKE_QUEUE_SIZE,
            outtake_size=settings.OUTTAKE_QUEUE_SIZE,
            annotate=settings.ANNOTATE_RESPONSES,
        )

    # -------------------------
    # State
    # -------------------------
    @property
    def state(self) -> PipelineState:
        with self._state_lock:
            return self._state

    def _transition(self, new_state: PipelineState) -> None:
        with self._state_lock:
            old_state, self._state = self._state, new_state
        logger.info("Pipeline %s -> %s", old_state.value, new_state.value)

    def start(self) -> "Pipeline":
        with self._state_lock:
            if self._state is not PipelineState.CREATED:
                raise RuntimeError(f"cannot start a pipeline in state {self._state.value}")
            # consumers first, so nothing queued waits for a missing stage
            self.dispatchers.start()
            self.workers.start()
            self._state = PipelineState.RUNNING
        logger.info(
            "Pipeline running with %d workers and %d dispatchers",
            self.workers.size,
            self.dispatchers.size,
        )
        return self

    # -------------------------
    # Producers
    # -------------------------
    def submit(self, request: RequestUnit) -> None:
        """Queue a request for the workers. Blocks while the intake queue is full."""
        if self.state is not PipelineState.RUNNING:
            raise PipelineClosed(f"pipeline is {self.state.value}")
        try:
            self.intake.put(request)
        except QueueClosed as e:
            raise PipelineClosed("pipeline is shutting down") from e

    def notify(self, conversation_id: int, origin_message_id: int, text: str) -> None:
        """Queue a direct reply that needs no generation (e.g. usage notices)."""
        if self.state is not PipelineState.RUNNING:
            raise PipelineClosed(f"pipeline is {self.state.value}")
        response = ResponseUnit(
            origin_message_id=origin_message_id,
            conversation_id=conversation_id,
            response_text=text,
        )
        try:
            self.outtake.put(response)
        except QueueClosed as e:
            raise PipelineClosed("pipeline is shutting down") from e

    # -------------------------
    # Shutdown
    # -------------------------
    def shutdown(self) -> None:
        """Drain both stages and stop. Safe to call more than once and from any thread."""
        with self._shutdown_lock:
            if self.state is PipelineState.STOPPED:
                return
            started = self.state is not PipelineState.CREATED

            self.intake.close()
            self._transition(PipelineState.DRAINING_WORKERS)
            if started:
                self.workers.join()

            self.outtake.close()
            self._transition(PipelineState.DRAINING_DISPATCHERS)
            if started:
                self.dispatchers.join()

            self._transition(PipelineState.STOPPED)
            logger.info("Pipeline stopped: %s", self.stats.snapshot())

    def status(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "workers": {"size": self.workers.size, "alive": self.workers.alive()},
            "dispatchers": {"size": self.dispatchers.size, "alive": self.dispatchers.alive()},
            "intake_depth": self.intake.qsize(),
            "outtake_depth": self.outtake.qsize(),
            "counters": self.stats.snapshot(),
        }

    def __enter__(self) -> "Pipeline":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
