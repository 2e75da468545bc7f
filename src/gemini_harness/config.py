"""Configuration management for Gemini Harness."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from gemini_harness.errors import ConfigurationError
from gemini_harness.llm.transport import BASE_URL

API_KEY_ENV = "GOOGLE_API_KEY"


def _api_key_from_env() -> str | None:
    return os.environ.get(API_KEY_ENV) or None


class ClientConfig(BaseModel):
    api_key: str | None = Field(default_factory=_api_key_from_env)
    default_model: str = "gemini-pro"
    image_model: str = "gemini-2.5-flash-image"
    timeout: float = Field(default=30, gt=0)  # seconds, per attempt
    retry_count: int = Field(default=3, ge=0)  # extra attempts after the first
    base_url: str = BASE_URL

    def validate_credentials(self) -> None:
        if not self.api_key:
            raise ConfigurationError(
                f"API key is required. Set it via configure() or {API_KEY_ENV}."
            )


def build_config(base: ClientConfig | None = None, **overrides: Any) -> ClientConfig:
    """Copy *base* (or fresh defaults) with non-None *overrides* applied.

    Invalid values raise ``ConfigurationError``.
    """
    data = base.model_dump() if base is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ClientConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


# ---------------------------------------------------------------------------
# Process-wide default (optional)
# ---------------------------------------------------------------------------

_default_config: ClientConfig | None = None


def configure(**overrides: Any) -> ClientConfig:
    """Create or update the process-wide default configuration.

    Clients copy the default when constructed, so later calls never affect
    clients that already exist.
    """
    global _default_config
    _default_config = build_config(_default_config, **overrides)
    return _default_config


def get_default_config() -> ClientConfig | None:
    return _default_config


def reset_configuration() -> None:
    global _default_config
    _default_config = None


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

CONFIG_FILENAME = "gemini_harness.yaml"


def load_config(
    config_path: str | Path | None = None,
) -> tuple[ClientConfig, Path | None]:
    """Load configuration from a YAML file.

    Returns (config, resolved_path).  *resolved_path* is ``None`` when
    no file was found and built-in defaults are used.

    Search order (first match wins):
      1. Explicit ``--config`` path
      2. Current working directory: ``./gemini_harness.yaml``
      3. User config dir: ``~/.gemini_harness/gemini_harness.yaml``

    A key left out of the file keeps its default; ``api_key`` falls back
    to ``$GOOGLE_API_KEY``.
    """
    if config_path is None:
        for d in (Path.cwd(), Path.home() / ".gemini_harness"):
            candidate = d / CONFIG_FILENAME
            if candidate.exists():
                config_path = candidate
                break
        else:
            return ClientConfig(), None

    resolved = Path(config_path)
    if not resolved.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(resolved) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {resolved}")
    return build_config(None, **raw), resolved.resolve()
