from visa_core.config.settings import VisaSettings

import pytest


def test_defaults(monkeypatch):
    for key in ("MAX_MESSAGE_LENGTH", "CAPABILITY_FIRST_MESSAGE_ONLY", "SESSION_KEY"):
        monkeypatch.delenv(key, raising=False)
    s = VisaSettings(_env_file=None)
    assert s.max_message_length == 2000
    assert s.capability_first_message_only is True
    assert s.session_key == "chat-messages"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CAPABILITY_FIRST_MESSAGE_ONLY", "false")
    monkeypatch.setenv("DEFAULT_PROVIDER", "kimi")
    s = VisaSettings(_env_file=None)
    assert s.capability_first_message_only is False
    assert s.default_provider == "kimi"


def test_yaml_config(monkeypatch, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("ai_name: Visa Buddy\nhttp_timeout: 12\n", encoding="utf-8")
    monkeypatch.setenv("VISA_CONFIG_FILE", str(cfg))
    monkeypatch.delenv("AI_NAME", raising=False)
    s = VisaSettings(_env_file=None)
    assert s.ai_name == "Visa Buddy"
    assert s.http_timeout == 12.0


def test_rejects_path_like_session_key():
    with pytest.raises(ValueError):
        VisaSettings(_env_file=None, session_key="../escape")
