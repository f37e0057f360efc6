from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../lesson-shop
load_dotenv(dotenv_path=ROOT_DIR / ".env")

API_TARGETS = {
    "local": "http://localhost:3000",
    "deployed": "https://cst3144-backend-1-niop.onrender.com",
}


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_float(*keys: str, default: float | None = None) -> float | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


def _get_path(*keys: str, default: str) -> str:
    v = _get_env(*keys, default=default)
    return str(v)


@dataclass(frozen=True)
class Settings:
    api_target: str
    api_url: str
    catalog_source: str  # remote / static
    http_timeout: float | None
    bot_token: str
    export_dir: str
    currency: str
    decimals: int


def load_settings() -> Settings:
    target = (_get_env("STORE_TARGET", default="local") or "local").lower()
    if target not in API_TARGETS:
        raise RuntimeError(f"STORE_TARGET must be one of {', '.join(API_TARGETS)}, got {target!r}")

    source = (_get_env("CATALOG_SOURCE", default="remote") or "remote").lower()
    if source not in ("remote", "static"):
        raise RuntimeError(f"CATALOG_SOURCE must be 'remote' or 'static', got {source!r}")

    api_url = _get_env("STORE_API_URL", "API_URL", default=API_TARGETS[target]) or API_TARGETS[target]

    return Settings(
        api_target=target,
        api_url=api_url.rstrip("/"),
        catalog_source=source,
        http_timeout=_get_float("STORE_HTTP_TIMEOUT", default=None),
        bot_token=_get_env("BOT_TOKEN", "TELEGRAM_BOT_TOKEN", default="") or "",
        export_dir=_get_path("EXPORT_DIR", default=str(ROOT_DIR / "exports")),
        currency=_get_env("CURRENCY", default="GBP") or "GBP",
        decimals=_get_int("DECIMALS", default=2) or 2,
    )


settings = load_settings()


def require_bot_token() -> str:
    if not settings.bot_token:
        raise RuntimeError("BOT_TOKEN is empty. Set BOT_TOKEN in .env")
    return settings.bot_token
