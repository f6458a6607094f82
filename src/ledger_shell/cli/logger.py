"""Logging bootstrap from a dictConfig JSON document or a fileConfig INI file."""

from __future__ import annotations

import json
import logging
import logging.config
from pathlib import Path

logger = logging.getLogger(__name__)


class LoggerConfigError(ValueError):
    """Raised when a logging config file can't be applied."""


def init_logger(path: str | Path) -> None:
    config_path = Path(path)
    if not config_path.is_file():
        raise LoggerConfigError(f"logger config file not found: {config_path}")
    try:
        if config_path.suffix.lower() == ".json":
            document = json.loads(config_path.read_text(encoding="utf-8"))
            if not isinstance(document, dict):
                raise LoggerConfigError("logger config must be a JSON object")
            document.setdefault("version", 1)
            logging.config.dictConfig(document)
        else:
            logging.config.fileConfig(config_path, disable_existing_loggers=False)
    except LoggerConfigError:
        raise
    except Exception as exc:
        raise LoggerConfigError(f"can't apply logger config {config_path}: {exc}") from exc
    logger.debug("logging configured from %s", config_path)
