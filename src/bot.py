# ============================================================
# Story Bot long-poll runner
# ------------------------------------------------------------
#   - load settings once (config.yaml + environment)
#   - log in to Telegram, drop any webhook, start the pipeline
#   - feed getUpdates events to the intake controller
#   - on SIGINT/SIGTERM drain everything and exit
# ============================================================

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

from src.chat.telegram_client import TelegramClient
from src.errors import AuthError, ConfigError
from src.generate import build_generator
from src.logging_setup import setup_logging
from src.pipeline import IntakeController, Pipeline, build_rules
from src.settings import Settings, load_settings

logger = logging.getLogger("storybot.bot")

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_AUTH = 3


def build_telegram_client(settings: Settings) -> TelegramClient:
    return TelegramClient(
        token=settings.TELEGRAM_TOKEN,
        base_url=settings.TELEGRAM_API_URL,
        timeout=settings.DELIVERY_TIMEOUT,
        poll_timeout=settings.POLL_TIMEOUT,
    )


def build_intake(settings: Settings, pipeline: Pipeline, bot_username: Optional[str] = None) -> IntakeController:
    return IntakeController(
        rules=build_rules(settings.COMMANDS),
        preamble=settings.PREAMBLE,
        credential=settings.GENERATION_API_KEY or "",
        submit=pipeline.submit,
        notify=pipeline.notify,
        stats=pipeline.stats,
        bot_username=bot_username,
    )


def run(
    settings: Settings,
    chat_client,
    generator,
    stop: Optional[threading.Event] = None,
    bot_username: Optional[str] = None,
) -> int:
    """Run until `stop` is set or the event source ends. Returns the number of queued requests."""
    stop = stop or threading.Event()
    pipeline = Pipeline.from_settings(settings, generator, chat_client)
    intake = build_intake(settings, pipeline, bot_username)
    with pipeline:
        submitted = intake.run(chat_client.iter_events(stop))
        logger.info("Event source closed after %d requests, shutting down", submitted)
    return submitted


def _install_signal_handlers(stop: threading.Event) -> None:
    def _handler(signum, frame):
        logger.info("Received %s, stopping after the current poll", signal.Signals(signum).name)
        stop.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Telegram bot that writes stories for /topic and /phrase commands.")
    ap.add_argument("--config", default=None, help="Path to config.yaml (default: $STORYBOT_CONFIG or ./config.yaml)")
    ap.add_argument("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, ...)")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr, flush=True)
        return EXIT_CONFIG

    setup_logging(args.log_level or settings.LOG_LEVEL)
    chat_client = build_telegram_client(settings)
    try:
        me = chat_client.get_me()
    except AuthError as e:
        logger.error("%s", e)
        return EXIT_AUTH
    # getUpdates is refused while a webhook is set
    chat_client.delete_webhook()

    stop = threading.Event()
    _install_signal_handlers(stop)
    run(settings, chat_client, build_generator(settings), stop=stop, bot_username=me.get("username"))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
