from pathlib import Path

import pytest
from pydantic import ValidationError

from mnemo.application.config import AppConfig, resolve_config


def test_defaults(mock_home):
    config = resolve_config()

    assert config.backend == "json"
    assert config.default_card_limit == 20
    assert config.seconds_per_card == 30
    assert config.data_dir == (mock_home / ".local/share/mnemo")


def test_env_overrides_defaults(mock_home, monkeypatch):
    monkeypatch.setenv("MNEMO_BACKEND", "memory")
    monkeypatch.setenv("MNEMO_DEFAULT_CARD_LIMIT", "5")

    config = resolve_config()

    assert config.backend == "memory"
    assert config.default_card_limit == 5


def test_toml_file_is_read(mock_home, monkeypatch):
    cfg = mock_home / ".config/mnemo/config.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text('seconds_per_card = 45\nbackend = "memory"\n')
    monkeypatch.setenv("MNEMO_BACKEND", "json")

    config = resolve_config()

    assert config.seconds_per_card == 45
    # Environment wins over the file
    assert config.backend == "json"


def test_cli_overrides_win_and_none_is_ignored(mock_home, tmp_path, monkeypatch):
    monkeypatch.setenv("MNEMO_SECONDS_PER_CARD", "10")

    config = resolve_config(
        {"data_dir": tmp_path / "data", "seconds_per_card": 12, "backend": None}
    )

    assert config.data_dir == (tmp_path / "data").resolve()
    assert config.seconds_per_card == 12
    assert config.backend == "json"


def test_data_dir_expands_user(mock_home):
    config = AppConfig(data_dir="~/cards")
    assert config.data_dir == Path(mock_home / "cards").resolve()


def test_rejects_unknown_backend(mock_home):
    with pytest.raises(ValidationError):
        AppConfig(backend="sqlite")
