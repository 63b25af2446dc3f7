"""Tests for configuration layering and store selection."""

import pytest
from pydantic import ValidationError

from medace.application.config import resolve_config
from medace.application.factory import get_card_store
from medace.infrastructure.adapters import LocalCardStore, RemoteCardStore


def test_defaults(mock_home):
    config = resolve_config()

    assert config.backend == "local"
    assert config.data_file == mock_home / ".local/share/medace/store.json"
    assert config.remote_url == "http://127.0.0.1:8787"
    assert config.session_limit == 20
    assert config.activity_window_days == 365


def test_env_overrides_defaults(mock_home, monkeypatch):
    monkeypatch.setenv("MEDACE_BACKEND", "remote")
    monkeypatch.setenv("MEDACE_REMOTE_URL", "http://cards.example:9000/")

    config = resolve_config()

    assert config.backend == "remote"
    assert config.remote_url == "http://cards.example:9000"


def test_toml_file_is_read(mock_home):
    config_dir = mock_home / ".config/medace"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text('session_limit = 7\nremote_url = "http://x:1"\n')

    config = resolve_config()

    assert config.session_limit == 7
    assert config.remote_url == "http://x:1"


def test_overrides_win_and_none_is_ignored(mock_home, monkeypatch, tmp_path):
    monkeypatch.setenv("MEDACE_BACKEND", "remote")

    config = resolve_config({"backend": "local", "data_file": tmp_path / "s.json", "verbose": None})

    assert config.backend == "local"
    assert config.data_file == (tmp_path / "s.json").resolve()
    assert config.verbose == 1


def test_empty_data_file_means_memory(mock_home):
    assert resolve_config({"data_file": ""}).data_file is None


def test_invalid_limit_rejected(mock_home):
    with pytest.raises(ValidationError):
        resolve_config({"session_limit": 0})


def test_factory_selects_local(mock_home, tmp_path):
    store = get_card_store(resolve_config({"data_file": tmp_path / "s.json"}))
    assert isinstance(store, LocalCardStore)
    assert store.data_file == (tmp_path / "s.json").resolve()


def test_factory_selects_remote(mock_home):
    store = get_card_store(resolve_config({"backend": "remote", "remote_url": "http://h:2"}))
    assert isinstance(store, RemoteCardStore)
    assert store.url == "http://h:2"
