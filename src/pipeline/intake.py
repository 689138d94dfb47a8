"""
Intake Controller

Single producer of the pipeline. Turns each inbound ChatEvent into zero or one
RequestUnit:
  - no recognised command      -> ignored, no reply
  - command for another @bot    -> ignored, no reply
  - command with empty argument -> missing-argument notice sent back
  - command with argument       -> one RequestUnit submitted
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Sequence

from src.chat.types import ChatEvent
from src.errors import PipelineClosed
from src.pipeline.prompts import MISSING_ARGUMENT_NOTICE, CommandRule, compose_prompt, parse_command
from src.pipeline.stats import PipelineStats
from src.pipeline.types import RequestUnit

logger = logging.getLogger("storybot.intake")

SubmitFn = Callable[[RequestUnit], None]
NotifyFn = Callable[[int, int, str], None]


class IntakeController:
    def __init__(
        self,
        rules: Sequence[CommandRule],
        preamble: str,
        credential: str,
        submit: SubmitFn,
        notify: NotifyFn,
        stats: Optional[PipelineStats] = None,
        bot_username: Optional[str] = None,
    ) -> None:
        self.rules = list(rules)
        self.bot_username = bot_username
        self.preamble = preamble
        self._credential = credential
        self.submit = submit
        self.notify = notify
        self.stats = stats or PipelineStats()

    def handle(self, event: Optional[ChatEvent]) -> Optional[RequestUnit]:
        """Process one event. Returns the submitted RequestUnit, if any."""
        if event is None or not event.text:
            return None
        match = parse_command(event.text, self.rules, self.bot_username)
        if match is None:
            return None
        rule, argument = match

        if not argument:
            logger.info("Missing argument for %s in chat=%s", rule.prefix, event.conversation_id)
            self.notify(event.conversation_id, event.message_id, MISSING_ARGUMENT_NOTICE)
            self.stats.incr("notices_sent")
            return None

        request = RequestUnit(
            origin_message_id=event.message_id,
            conversation_id=event.conversation_id,
            prompt_text=compose_prompt(self.preamble, rule.label, argument),
            credential=self._credential,
        )
        self.submit(request)
        self.stats.incr("requests_submitted")
        logger.info("Queued %s request chat=%s message=%s", rule.label, event.conversation_id, event.message_id)
        return request

    def run(self, events: Iterable[ChatEvent]) -> int:
        """Feed events until the source ends or the pipeline stops accepting work."""
        submitted = 0
        for event in events:
            try:
                if self.handle(event) is not None:
                    submitted += 1
            except PipelineClosed:
                logger.info("Pipeline closed, intake stops reading events")
                break
        return submitted
