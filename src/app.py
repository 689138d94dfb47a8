# ============================================================
# Story Bot FastAPI App
# ------------------------------------------------------------
# Webhook alternative to the long-poll runner:
#   - Telegram POSTs updates to /telegram/webhook
#   - the intake controller queues them on the shared pipeline
#   - /health and /healthz expose liveness and pipeline status
# The pipeline starts with the app and drains on shutdown.
# ============================================================

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Header, HTTPException, Request
from pydantic import BaseModel

from src.bot import build_intake, build_telegram_client
from src.chat.types import ChatEvent
from src.errors import PipelineClosed
from src.generate import build_generator
from src.logging_setup import setup_logging
from src.pipeline import Pipeline, PipelineState
from src.settings import Settings, load_settings

logger = logging.getLogger("storybot.app")

# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class WebhookAck(BaseModel):
    ok: bool
    queued: bool


class PipelineStatus(BaseModel):
    state: str
    workers: Dict[str, int]
    dispatchers: Dict[str, int]
    intake_depth: int
    outtake_depth: int
    counters: Dict[str, int]


# ------------------------------------------------------------
# 🚀 App factory
# ------------------------------------------------------------
def create_app(settings: Optional[Settings] = None, chat_client=None, model_client=None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = chat_client or build_telegram_client(settings)
        pipeline = Pipeline.from_settings(settings, build_generator(settings, model_client), client)
        app.state.pipeline = pipeline
        me = client.get_me()
        app.state.intake = build_intake(settings, pipeline, me.get("username"))
        pipeline.start()
        registered = False
        try:
            if settings.WEBHOOK_URL:
                client.set_webhook(settings.WEBHOOK_URL, settings.WEBHOOK_SECRET)
                registered = True
            yield
        finally:
            if registered:
                client.delete_webhook()
            pipeline.shutdown()

    app = FastAPI(title=settings.app_name, version="0.3", lifespan=lifespan)
    app.state.settings = settings

    # ------------------------------------------------------------
    # 💬 Telegram webhook
    # ------------------------------------------------------------
    @app.post("/telegram/webhook", response_model=WebhookAck)
    def telegram_webhook(
        request: Request,
        update: Dict[str, Any] = Body(...),
        x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
    ):
        if settings.WEBHOOK_SECRET and x_telegram_bot_api_secret_token != settings.WEBHOOK_SECRET:
            raise HTTPException(status_code=403, detail="bad secret token")
        event = ChatEvent.from_update(update)
        try:
            queued = request.app.state.intake.handle(event) is not None
        except PipelineClosed:
            raise HTTPException(status_code=503, detail="shutting down")
        return WebhookAck(ok=True, queued=queued)

    # ------------------------------------------------------------
    # 🧭 Health checks
    # ------------------------------------------------------------
    @app.get("/healthz", response_model=PipelineStatus)
    def healthz(request: Request):
        return request.app.state.pipeline.status()

    @app.get("/health")
    def health(request: Request):
        state = request.app.state.pipeline.state
        return {
            "status": "ok" if state is PipelineState.RUNNING else state.value,
            "env": settings.ENV,
        }

    @app.get("/")
    def hello():
        return {"message": f"{settings.app_name} service running."}

    return app


def create_app_from_env() -> FastAPI:
    """uvicorn factory: settings from config.yaml and the environment."""
    settings = load_settings()
    setup_logging(settings.LOG_LEVEL)
    return create_app(settings)
