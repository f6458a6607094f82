"""Configuration helpers for the ledger-shell CLI."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ledger_shell.cli.context import DEFAULT_TAA_MECHANISM
from ledger_shell.sdk.local import default_home

HISTORY_FILE_NAME = "history"


@dataclass(frozen=True)
class ShellConfig:
    logger_config: str | None = None
    taa_acceptance_mechanism: str = DEFAULT_TAA_MECHANISM


class ConfigError(ValueError):
    """Raised when shell config is invalid."""


def _optional_str(source: dict[str, Any], field_name: str) -> str | None:
    value = source.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{field_name} must be a string")
    return value.strip() or None


def load_shell_config(path: str | Path | None = None) -> ShellConfig:
    if path is None:
        return ShellConfig()
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"can't read config file {config_path}: {exc.strerror or exc}") from exc
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {config_path}: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise ConfigError("config must be a JSON object")

    logger_config = _optional_str(parsed, "loggerConfig")
    mechanism = _optional_str(parsed, "taaAcceptanceMechanism") or DEFAULT_TAA_MECHANISM
    return ShellConfig(logger_config=logger_config, taa_acceptance_mechanism=mechanism)


def history_path(home: Path | None = None) -> Path:
    return (home or default_home()) / HISTORY_FILE_NAME
