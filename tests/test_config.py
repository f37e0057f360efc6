import pytest

from lessonshop import config
from lessonshop.config import API_TARGETS, load_settings

ENV_KEYS = ("STORE_TARGET", "STORE_API_URL", "API_URL", "CATALOG_SOURCE", "STORE_HTTP_TIMEOUT", "BOT_TOKEN", "TELEGRAM_BOT_TOKEN")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_defaults():
    s = load_settings()
    assert s.api_target == "local"
    assert s.api_url == API_TARGETS["local"]
    assert s.catalog_source == "remote"
    assert s.http_timeout is None


def test_deployed_target(monkeypatch):
    monkeypatch.setenv("STORE_TARGET", "deployed")
    assert load_settings().api_url == API_TARGETS["deployed"]


def test_explicit_url_wins(monkeypatch):
    monkeypatch.setenv("STORE_TARGET", "deployed")
    monkeypatch.setenv("API_URL", "http://example.test/api/")
    assert load_settings().api_url == "http://example.test/api"


def test_bad_target(monkeypatch):
    monkeypatch.setenv("STORE_TARGET", "staging")
    with pytest.raises(RuntimeError):
        load_settings()


def test_timeout(monkeypatch):
    monkeypatch.setenv("STORE_HTTP_TIMEOUT", "2.5")
    assert load_settings().http_timeout == 2.5


def test_bot_token_required(monkeypatch):
    monkeypatch.setattr(config, "settings", load_settings())
    with pytest.raises(RuntimeError):
        config.require_bot_token()
