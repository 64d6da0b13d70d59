"""Centralized configuration helpers for the sourcing assistant services."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from openai import AsyncOpenAI
else:  # pragma: no cover
    AsyncOpenAI = Any  # type: ignore[assignment]


ROOT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_FILE = ROOT_DIR / "config.json"
_ENV_LOADED = False


class ConfigError(RuntimeError):
    """Base exception for configuration issues."""


class MissingSettingError(ConfigError):
    """Raised when a required environment variable is missing."""


def _load_env_file() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    try:
        from dotenv import load_dotenv
    except ImportError as exc:  # pragma: no cover
        raise ConfigError(
            "python-dotenv is required. Install it via `pip install python-dotenv`."
        ) from exc

    try:
        load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)
    except PermissionError:  # pragma: no cover - filesystem specific
        pass
    _ENV_LOADED = True


@cache
def _load_config_file() -> dict[str, Any]:
    config_path = Path(os.getenv("SOURCING_ASSISTANT_CONFIG", DEFAULT_CONFIG_FILE))
    if not config_path.exists():
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:  # pragma: no cover - invalid user config
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc


def _float_setting(raw: Any, *, name: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class OpenAISettings:
    api_key: str
    default_model: str
    temperature: float = 0.7
    max_tokens: int = 1000


@dataclass(frozen=True)
class ChatSettings:
    history_limit: int = 50
    context_turns: int = 10
    request_timeout: float = 30.0
    instructions: str | None = None


@cache
def get_openai_settings() -> OpenAISettings:
    """Load OpenAI configuration from config.json + env overrides."""
    _load_env_file()
    cfg = _load_config_file().get("openai", {})
    key_name = cfg.get("api_key_name", "OPENAI_API_KEY")

    api_key = cfg.get("api_key") or os.getenv(key_name)
    if not api_key:
        raise MissingSettingError(
            f"Set {key_name} or provide openai.api_key in config.json to run chat completions."
        )

    default_model = cfg.get("model") or os.getenv("OPENAI_MODEL", "gpt-4o-2024-08-06")
    temperature = _float_setting(cfg.get("temperature", 0.7), name="openai.temperature")
    max_tokens = int(cfg.get("max_tokens", 1000))
    return OpenAISettings(
        api_key=api_key,
        default_model=default_model,
        temperature=temperature,
        max_tokens=max_tokens,
    )


@cache
def get_chat_settings() -> ChatSettings:
    """Load dialogue limits and the optional instruction override."""
    _load_env_file()
    cfg = _load_config_file().get("chat", {})
    timeout_raw = cfg.get("request_timeout")
    if timeout_raw is None:
        timeout_raw = os.getenv("SOURCING_REQUEST_TIMEOUT", "30")
    request_timeout = _float_setting(timeout_raw, name="chat.request_timeout")
    if request_timeout <= 0:
        raise ConfigError(f"chat.request_timeout must be positive, got {timeout_raw!r}")
    return ChatSettings(
        history_limit=int(cfg.get("history_limit", 50)),
        context_turns=int(cfg.get("context_turns", 10)),
        request_timeout=request_timeout,
        instructions=cfg.get("instructions"),
    )


def get_async_openai_client() -> AsyncOpenAI:
    """Return a ready-to-use AsyncOpenAI client.

    Retries are disabled: a failed or timed-out call degrades to a fallback turn instead.
    """
    try:
        from openai import AsyncOpenAI
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ConfigError(
            "Install the openai package to use the sourcing assistant, or supply your own AsyncOpenAI client."
        ) from exc

    settings = get_openai_settings()
    return AsyncOpenAI(api_key=settings.api_key, max_retries=0)


__all__ = [
    "ConfigError",
    "MissingSettingError",
    "OpenAISettings",
    "ChatSettings",
    "get_chat_settings",
    "get_openai_settings",
    "get_async_openai_client",
]
