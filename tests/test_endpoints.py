# ===============================================
# tests/test_endpoints.py
# FastAPI app: health checks and the webhook intake.
# ===============================================

import time

from fastapi.testclient import TestClient

from fakes import FakeChatClient, ScriptedModelClient, make_settings
from src.app import create_app
from src.pipeline import MISSING_ARGUMENT_NOTICE


def _update(message_id, text, chat_id=77):
    return {"update_id": message_id, "message": {"message_id": message_id, "chat": {"id": chat_id}, "text": text}}


def _client(chat, **overrides):
    settings = make_settings(**overrides)
    return TestClient(create_app(settings, chat_client=chat, model_client=ScriptedModelClient()))


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_root_ok():
    with _client(FakeChatClient()) as client:
        r = client.get("/")
        assert r.status_code == 200
        assert "message" in r.json()


def test_health_ok():
    with _client(FakeChatClient()) as client:
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


def test_healthz_reports_pipeline():
    with _client(FakeChatClient()) as client:
        data = client.get("/healthz").json()
        assert data["state"] == "running"
        assert data["workers"]["size"] == 3
        assert data["dispatchers"]["size"] == 2


def test_webhook_queues_command_and_reply_is_delivered():
    chat = FakeChatClient()
    with _client(chat) as client:
        r = client.post("/telegram/webhook", json=_update(5, "/topic cats"))
        assert r.status_code == 200
        assert r.json() == {"ok": True, "queued": True}
        assert _wait_for(lambda: len(chat.sent) == 1)

    conversation_id, text, reply_to = chat.sent[0]
    assert (conversation_id, reply_to) == (77, 5)
    assert "TOPIC: cats" in text


def test_webhook_ignores_chatter_and_answers_empty_commands():
    chat = FakeChatClient()
    with _client(chat) as client:
        assert client.post("/telegram/webhook", json=_update(1, "hello")).json()["queued"] is False
        assert client.post("/telegram/webhook", json={"update_id": 2}).json()["queued"] is False
        assert client.post("/telegram/webhook", json=_update(3, "/phrase")).json()["queued"] is False

    # lifespan exit drained the pipeline
    assert chat.sent == [(77, MISSING_ARGUMENT_NOTICE, 3)]


def test_webhook_checks_secret_token():
    chat = FakeChatClient()
    with _client(chat, WEBHOOK_SECRET="s3cret", WEBHOOK_URL="https://example.org/telegram/webhook") as client:
        assert client.post("/telegram/webhook", json=_update(1, "/topic x")).status_code == 403
        r = client.post(
            "/telegram/webhook",
            json=_update(1, "/topic x"),
            headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
        )
        assert r.status_code == 200
    assert chat.webhooks == [("https://example.org/telegram/webhook", "s3cret")]


def test_registered_webhook_is_removed_on_shutdown():
    chat = FakeChatClient()
    with _client(chat, WEBHOOK_URL="https://example.org/telegram/webhook") as client:
        assert client.get("/health").status_code == 200
        assert chat.webhook_deletions == 0
    assert chat.webhook_deletions == 1


def test_no_webhook_configured_means_nothing_to_remove():
    chat = FakeChatClient()
    with _client(chat) as client:
        client.get("/health")
    assert chat.webhooks == []
    assert chat.webhook_deletions == 0


def test_webhook_ignores_commands_for_other_bots():
    chat = FakeChatClient()
    with _client(chat) as client:
        assert client.post("/telegram/webhook", json=_update(1, "/topic@other_bot owls")).json()["queued"] is False
        assert client.post("/telegram/webhook", json=_update(2, "/topic@Story_Bot owls")).json()["queued"] is True
    assert [m for _, _, m in chat.sent] == [2]
