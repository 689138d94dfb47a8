"""
Dispatch Pool

Each dispatcher takes ResponseUnits from the outtake queue and sends them as
replies threaded to the origin message. Failed deliveries are logged and
counted, not retried.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.errors import DeliveryError
from src.pipeline.pool import ThreadGroup
from src.pipeline.queues import ClosableQueue
from src.pipeline.stats import PipelineStats
from src.pipeline.types import ResponseUnit

logger = logging.getLogger("storybot.dispatch")


class DispatchPool(ThreadGroup):
    name = "dispatcher"

    def __init__(
        self,
        chat_client,
        outtake: ClosableQueue[ResponseUnit],
        size: int,
        annotate: bool = False,
        stats: Optional[PipelineStats] = None,
    ) -> None:
        super().__init__(size)
        self.chat_client = chat_client
        self.outtake = outtake
        self.annotate = annotate
        self.stats = stats or PipelineStats()

    def _run(self, dispatcher_id: int) -> None:
        logger.debug("Dispatcher %d started", dispatcher_id)
        for response in self.outtake:
            self.deliver(dispatcher_id, response)
        logger.debug("Dispatcher %d drained outtake and stopped", dispatcher_id)

    def deliver(self, dispatcher_id: int, response: ResponseUnit) -> bool:
        text = response.response_text
        if self.annotate:
            text += f"\n\nSent by dispatcher {dispatcher_id}"
        try:
            self.chat_client.send_reply(
                response.conversation_id,
                text,
                reply_to_message_id=response.origin_message_id,
            )
        except DeliveryError as exc:
            logger.error("Delivery failed: %s", exc)
            self.stats.incr("delivery_failures")
            return False
        except Exception:
            logger.exception(
                "Unexpected error delivering to chat=%s message=%s",
                response.conversation_id,
                response.origin_message_id,
            )
            self.stats.incr("delivery_failures")
            return False
        self.stats.incr("replies_delivered")
        if response.is_error:
            logger.info(
                "Delivered apology for failed request chat=%s message=%s",
                response.conversation_id,
                response.origin_message_id,
            )
            self.stats.incr("apologies_delivered")
        return True
