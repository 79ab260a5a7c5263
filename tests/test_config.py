"""
Tests for MathBotSettings environment handling.
"""

import pytest

from mathbot.config import MathBotSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "OLLAMA_URL", "OLLAMA_MODEL", "OLLAMA_VISION_MODEL",
        "MATHBOT_OLLAMA_BASE_URL", "MATHBOT_OLLAMA_MODEL", "MATHBOT_OLLAMA_VISION_MODEL",
        "MATHBOT_LOG_LEVEL", "MATHBOT_API_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        settings = MathBotSettings(_env_file=None)
        assert settings.ollama_base_url == "http://localhost:11434"
        assert settings.ollama_model == "qwen2.5:7b"
        assert settings.ollama_vision_model == "llava"
        assert settings.api_port == 3000
        assert settings.log_level == "INFO"


class TestEnvironmentOverrides:
    """MATHBOT_ variables and the plain OLLAMA_ aliases."""

    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("MATHBOT_OLLAMA_MODEL", "qwen2.5:14b")
        monkeypatch.setenv("MATHBOT_API_PORT", "8080")
        monkeypatch.setenv("MATHBOT_LOG_LEVEL", "debug")

        settings = MathBotSettings(_env_file=None)

        assert settings.ollama_model == "qwen2.5:14b"
        assert settings.api_port == 8080
        assert settings.log_level == "DEBUG"

    def test_plain_ollama_aliases(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_URL", "http://gpu-box:11434/")
        monkeypatch.setenv("OLLAMA_MODEL", "llama3")
        monkeypatch.setenv("OLLAMA_VISION_MODEL", "llava:13b")

        settings = MathBotSettings(_env_file=None)

        assert settings.ollama_base_url == "http://gpu-box:11434"
        assert settings.ollama_model == "llama3"
        assert settings.ollama_vision_model == "llava:13b"

    def test_keyword_construction(self):
        settings = MathBotSettings(_env_file=None, ollama_model="m", ollama_base_url="http://x/")
        assert settings.ollama_model == "m"
        assert settings.ollama_base_url == "http://x"
