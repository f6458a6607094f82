from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ledger_shell.cli.config import ConfigError, history_path, load_shell_config
from ledger_shell.cli.logger import LoggerConfigError, init_logger
from ledger_shell.sdk.local import HOME_ENV_VAR, default_home


def test_defaults_without_config_file() -> None:
    config = load_shell_config(None)
    assert config.logger_config is None
    assert config.taa_acceptance_mechanism == "for_session"


def test_reads_known_fields_and_ignores_unknown(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "loggerConfig": "/etc/ledger/logger.json",
                "taaAcceptanceMechanism": "on_file",
                "somethingElse": 1,
            }
        ),
        encoding="utf-8",
    )
    config = load_shell_config(path)
    assert config.logger_config == "/etc/ledger/logger.json"
    assert config.taa_acceptance_mechanism == "on_file"


@pytest.mark.parametrize(
    "content",
    ["{not json", "[1, 2]", '{"loggerConfig": 5}', '{"taaAcceptanceMechanism": true}'],
)
def test_invalid_config_raises(tmp_path, content: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_shell_config(path)


def test_missing_config_file_raises(tmp_path) -> None:
    with pytest.raises(ConfigError, match="can't read config file"):
        load_shell_config(tmp_path / "missing.json")


def test_home_env_var_overrides_default(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(HOME_ENV_VAR, str(tmp_path))
    assert default_home() == tmp_path
    assert history_path() == tmp_path / "history"


def test_default_home_is_under_user_home(monkeypatch) -> None:
    monkeypatch.delenv(HOME_ENV_VAR, raising=False)
    assert default_home() == Path.home() / ".ledger_shell"


def test_init_logger_file_config(tmp_path) -> None:
    path = tmp_path / "logger.ini"
    path.write_text(
        "[loggers]\nkeys=root\n\n"
        "[handlers]\nkeys=null\n\n"
        "[formatters]\nkeys=\n\n"
        "[logger_root]\nlevel=WARNING\nhandlers=null\n\n"
        "[handler_null]\nclass=NullHandler\nargs=()\n",
        encoding="utf-8",
    )
    init_logger(path)
    assert logging.getLogger().level == logging.WARNING


def test_init_logger_missing_file(tmp_path) -> None:
    with pytest.raises(LoggerConfigError, match="not found"):
        init_logger(tmp_path / "nope.json")


def test_init_logger_invalid_dict_config(tmp_path) -> None:
    path = tmp_path / "logger.json"
    path.write_text('{"handlers": {"h": {"class": "no.such.Handler"}}}', encoding="utf-8")
    with pytest.raises(LoggerConfigError, match="can't apply logger config"):
        init_logger(path)
