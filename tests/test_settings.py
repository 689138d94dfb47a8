# ===============================================
# tests/test_settings.py
# config.yaml loading, legacy keys, env precedence.
# ===============================================

import pytest

from src.errors import ConfigError
from src.settings import load_settings

ENV_KEYS = [
    "TELEGRAM_TOKEN",
    "GENERATION_API_KEY",
    "PREAMBLE",
    "GENERATION_BACKEND",
    "WORKER_COUNT",
    "DISPATCHER_COUNT",
    "STORYBOT_CONFIG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # keep a developer's .env out of the way
    monkeypatch.chdir(tmp_path)


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_legacy_keys_are_understood(tmp_path):
    path = write_config(tmp_path, 'tgToken: "1:abc"\ngptToken: "g-key"\npreamble: "Write a short story. "\n')
    settings = load_settings(path)
    assert settings.TELEGRAM_TOKEN == "1:abc"
    assert settings.GENERATION_API_KEY == "g-key"
    assert settings.PREAMBLE == "Write a short story. "
    assert settings.WORKER_COUNT == 10
    assert settings.DISPATCHER_COUNT == 10
    assert settings.COMMANDS == {"/topic": "TOPIC", "/phrase": "PHRASE"}


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = write_config(tmp_path, "tgToken: file-token\ngptToken: k\nworker_count: 4\n")
    monkeypatch.setenv("TELEGRAM_TOKEN", "env-token")
    monkeypatch.setenv("WORKER_COUNT", "2")
    settings = load_settings(path)
    assert settings.TELEGRAM_TOKEN == "env-token"
    assert settings.WORKER_COUNT == 2


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = write_config(tmp_path, "tgToken: t\ngptToken: k\ncommands:\n  /poem: POEM\n")
    monkeypatch.setenv("STORYBOT_CONFIG", path)
    assert load_settings().COMMANDS == {"/poem": "POEM"}


def test_missing_file_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("TELEGRAM_TOKEN", "t")
    monkeypatch.setenv("GENERATION_BACKEND", "echo")
    settings = load_settings(str(tmp_path / "absent.yaml"))
    assert settings.GENERATION_API_KEY is None


@pytest.mark.parametrize(
    "text",
    [
        "gptToken: k\n",
        "tgToken: t\n",
        "tgToken: t\ngptToken: k\ngeneration_backend: llama\n",
        "tgToken: t\ngptToken: k\nworker_count: 0\n",
        "- just\n- a list\n",
        "tgToken: [unclosed\n",
    ],
)
def test_bad_configuration_is_a_config_error(tmp_path, text):
    with pytest.raises(ConfigError):
        load_settings(write_config(tmp_path, text))
