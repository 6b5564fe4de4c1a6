"""Configuration loader for fileproof.

Loads config/fileproof.yaml, then applies FILEPROOF_* environment
overrides (a .env file in the working directory is honoured).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from fileproof.clients.starknet import DEFAULT_CONTRACT_ADDRESS, DEFAULT_RPC_URL

WORKSPACE = Path(__file__).resolve().parent.parent
CONFIG_DIR = WORKSPACE / "config"
CONFIG_PATH = CONFIG_DIR / "fileproof.yaml"

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

_ENV_OVERRIDES = {
    "FILEPROOF_RPC_URL": "rpc_url",
    "FILEPROOF_CONTRACT_ADDRESS": "contract_address",
    "FILEPROOF_DB_PATH": "db_path",
    "FILEPROOF_TIMEOUT_SECONDS": "timeout_seconds",
}


class Settings(BaseModel):
    rpc_url: str = DEFAULT_RPC_URL
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    timeout_seconds: float = Field(default=10.0, gt=0)
    rate_limit: float = Field(default=10.0, gt=0)
    max_file_size_bytes: int = Field(default=MAX_FILE_SIZE, gt=0)
    db_path: Path = WORKSPACE / "state" / "fileproof.db"
    cross_check_on_verify: bool = True
    cross_check_attempts: int = Field(default=1, ge=1)
    cross_check_backoff_seconds: float = Field(default=0.5, ge=0)

    @field_validator("db_path")
    @classmethod
    def _anchor_db_path(cls, v: Path) -> Path:
        # Relative paths in the YAML are relative to the repo root
        return v if v.is_absolute() else WORKSPACE / v


def load_yaml_config(path: Path | None = None) -> dict[str, Any]:
    """Load config/fileproof.yaml (empty dict if absent)."""
    path = path or CONFIG_PATH
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text()) or {}


def load_settings(path: Path | None = None) -> Settings:
    """YAML file, then environment overrides, validated into Settings."""
    load_dotenv()
    raw = load_yaml_config(path)
    for env_key, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_key)
        if value:
            raw[field_name] = value
    return Settings(**raw)
