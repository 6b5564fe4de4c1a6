"""Tests for the YAML + environment configuration loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fileproof.clients.starknet import DEFAULT_CONTRACT_ADDRESS, DEFAULT_RPC_URL
from fileproof.config import CONFIG_PATH, WORKSPACE, Settings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "FILEPROOF_RPC_URL",
        "FILEPROOF_CONTRACT_ADDRESS",
        "FILEPROOF_DB_PATH",
        "FILEPROOF_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("fileproof.config.load_dotenv", lambda: False)


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")
        assert settings.rpc_url == DEFAULT_RPC_URL
        assert settings.contract_address == DEFAULT_CONTRACT_ADDRESS
        assert settings.max_file_size_bytes == 10 * 1024 * 1024
        assert settings.cross_check_attempts == 1

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "fileproof.yaml"
        path.write_text(
            "rpc_url: http://localhost:5050/rpc\n"
            "timeout_seconds: 3\n"
            "max_file_size_bytes: 2048\n"
            "cross_check_on_verify: false\n"
        )
        settings = load_settings(path)
        assert settings.rpc_url == "http://localhost:5050/rpc"
        assert settings.timeout_seconds == 3.0
        assert settings.max_file_size_bytes == 2048
        assert settings.cross_check_on_verify is False

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "fileproof.yaml"
        path.write_text("")
        assert load_settings(path) == Settings()

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "fileproof.yaml"
        path.write_text("rpc_url: http://from-yaml\ntimeout_seconds: 3\n")
        monkeypatch.setenv("FILEPROOF_RPC_URL", "http://from-env")
        monkeypatch.setenv("FILEPROOF_TIMEOUT_SECONDS", "1.5")
        monkeypatch.setenv("FILEPROOF_DB_PATH", str(tmp_path / "env.db"))

        settings = load_settings(path)
        assert settings.rpc_url == "http://from-env"
        assert settings.timeout_seconds == 1.5
        assert settings.db_path == tmp_path / "env.db"

    def test_relative_db_path_anchored_to_workspace(self, tmp_path):
        path = tmp_path / "fileproof.yaml"
        path.write_text("db_path: state/test.db\n")
        assert load_settings(path).db_path == WORKSPACE / "state" / "test.db"

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "fileproof.yaml"
        path.write_text("timeout_seconds: 0\n")
        with pytest.raises(ValidationError):
            load_settings(path)

    def test_shipped_config_loads(self):
        assert CONFIG_PATH.exists()
        settings = load_settings()
        assert settings.contract_address == DEFAULT_CONTRACT_ADDRESS
        assert isinstance(settings.db_path, Path)
