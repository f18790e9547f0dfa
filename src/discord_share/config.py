from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from discord_share.types import (
    DEFAULT_EMBED_COLOR,
    EMBED_MAX_LENGTH,
    MESSAGE_MAX_LENGTH,
    SHARE_MODE_EMBED,
    SHARE_MODE_MESSAGE,
    ShareOptions,
)

WEBHOOK_URL_ENV = "DISCORD_SHARE_WEBHOOK_URL"

# Regex for ${VAR_NAME} substitution
_ENV_RE = re.compile(r"\$\{([^}]+)\}")


class ConfigurationError(ValueError):
    """Raised when a required option is missing or an option value is unusable."""


def _substitute(value: Any) -> Any:
    """Recursively replace ${VAR} with environment variable values in strings."""
    if isinstance(value, str):
        return _ENV_RE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    if isinstance(value, dict):
        return {k: _substitute(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict:
    """Load a YAML config with ${ENV_VAR} substitution from the environment."""
    load_dotenv()
    raw = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return _substitute(data)


def _section(config: dict) -> dict:
    section = config.get("discord_share") or {}
    if not isinstance(section, dict):
        raise ConfigurationError("discord_share must be a mapping")
    return section


def webhook_url_from_config(config: dict) -> str:
    """Return the configured webhook URL or raise ``ConfigurationError``.

    An unresolved ``${VAR}`` placeholder counts as missing.
    """
    url = str(_section(config).get("webhook_url") or "").strip()
    if not url or _ENV_RE.fullmatch(url):
        url = os.environ.get(WEBHOOK_URL_ENV, "").strip()
    if not url:
        raise ConfigurationError(
            "Discord webhook URL not configured. Please set it in the settings."
        )
    return url


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "yes", "on", "1"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "no", "off", "0", ""}:
        return False
    raise ConfigurationError(f"discord_share.{key} must be a boolean, got {value!r}")


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"discord_share.{key} must be an integer, got {value!r}")
    try:
        return int(value, 0) if isinstance(value, str) else int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"discord_share.{key} must be an integer, got {value!r}") from exc


def options_from_config(config: dict, *, mode: str | None = None) -> ShareOptions:
    """Build ``ShareOptions`` from the ``discord_share`` config section.

    *mode* overrides the configured mode (used by the CLI ``--mode`` flag).
    The payload limit is picked per mode from ``limits.embed`` /
    ``limits.message``.
    """
    section = _section(config)

    mode = str(mode or section.get("mode", SHARE_MODE_EMBED)).strip().lower()
    if mode not in {SHARE_MODE_EMBED, SHARE_MODE_MESSAGE}:
        raise ConfigurationError(f"discord_share.mode must be 'embed' or 'message', got {mode!r}")

    limits = section.get("limits") or {}
    if not isinstance(limits, dict):
        raise ConfigurationError("discord_share.limits must be a mapping")
    if mode == SHARE_MODE_EMBED:
        max_length = _to_int("limits.embed", limits.get("embed", EMBED_MAX_LENGTH))
    else:
        max_length = _to_int("limits.message", limits.get("message", MESSAGE_MAX_LENGTH))
    if max_length <= 0:
        raise ConfigurationError(f"discord_share.limits.{mode} must be > 0")

    overhead = section.get("wrapper_overhead")
    wrapper_overhead = None if overhead is None else _to_int("wrapper_overhead", overhead)
    if wrapper_overhead is not None and wrapper_overhead < 0:
        raise ConfigurationError("discord_share.wrapper_overhead must be >= 0")

    author_name = str(section.get("author_name") or "").strip() or None

    return ShareOptions(
        mode=mode,  # type: ignore[arg-type]
        show_line_numbers=_to_bool("show_line_numbers", section.get("show_line_numbers", False)),
        show_author=_to_bool("show_author", section.get("show_author", False)),
        author_name=author_name,
        max_payload_length=max_length,
        wrapper_overhead_length=wrapper_overhead,
        show_file_name=_to_bool("show_file_name", section.get("show_file_name", True)),
        color=_to_int("color", section.get("color", DEFAULT_EMBED_COLOR)),
        ask_for_comment=_to_bool("ask_for_comment", section.get("ask_for_comment", False)),
    )
