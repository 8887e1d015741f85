import pytest

from visa_core.providers import create_provider
from visa_core.providers.glm_client import GlmClient
from visa_core.providers.kimi_client import KimiClient


def test_create_provider_default(monkeypatch):
    class DummySettings:
        default_provider = "glm"
        glm_api_key = "g"
        http_timeout = 1.0
        glm_base_url = "https://open.bigmodel.cn/api/paas/v4"
        kimi_api_key = None

    monkeypatch.setattr("visa_core.providers.settings", DummySettings())
    provider = create_provider()
    assert isinstance(provider, GlmClient)


def test_create_provider_explicit(monkeypatch):
    class DummySettings:
        default_provider = "glm"
        kimi_api_key = "k"
        http_timeout = 1.0
        kimi_base_url = "https://api.moonshot.cn/v1"
        glm_api_key = None

    monkeypatch.setattr("visa_core.providers.settings", DummySettings())
    provider = create_provider("KIMI")
    assert isinstance(provider, KimiClient)


def test_create_provider_unknown(monkeypatch):
    class DummySettings:
        default_provider = "openai"

    monkeypatch.setattr("visa_core.providers.settings", DummySettings())
    with pytest.raises(KeyError):
        create_provider()


def test_clients_are_built_from_explicit_settings():
    cfg = object()
    for cls in (KimiClient, GlmClient):
        client = cls(cfg)
        assert client._settings is cfg
