"""
Runtime configuration for the TeamHub client.

Priority for every value:
1. Environment variables (a local ``.env`` is loaded first)
2. teamhub/config.json
3. Defaults below
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

# env var -> (settings field, config.json key)
_ENV_KEYS = {
    "TEAMHUB_API_BASE_URL": ("api_base_url", "api_base_url"),
    "TEAMHUB_PROJECT_ID": ("project_id", "project_id"),
    "TEAMHUB_PUBLIC_KEY": ("public_key", "public_key"),
    "TEAMHUB_BACKEND": ("backend", "backend"),
    "TEAMHUB_CURRENT_USER": ("current_user", "current_user"),
    "TEAMHUB_MOCK_LATENCY_MIN": ("mock_latency_min", "mock_latency_min"),
    "TEAMHUB_MOCK_LATENCY_MAX": ("mock_latency_max", "mock_latency_max"),
    "TEAMHUB_LOG_LEVEL": ("log_level", "log_level"),
}


class Settings(BaseModel):
    """Values needed to address the record API and run the desktop client."""

    api_base_url: str = Field(default="http://127.0.0.1:8000")
    project_id: str = Field(default="")
    public_key: str = Field(default="")
    # auto | remote | mock
    backend: str = Field(default="auto")
    current_user: str = Field(default="Current User")
    mock_latency_min: float = Field(default=0.2, ge=0)
    mock_latency_max: float = Field(default=0.4, ge=0)
    log_level: str = Field(default="INFO")

    model_config = {
        "extra": "ignore",
    }

    @property
    def remote_configured(self) -> bool:
        return bool(self.project_id and self.public_key)

    @property
    def use_remote(self) -> bool:
        """Resolve the ``backend`` switch to remote (True) or mock (False)."""
        mode = self.backend.strip().lower()
        if mode == "remote":
            return True
        if mode == "mock":
            return False
        return self.remote_configured


def _load_config_file(path: Path = CONFIG_PATH) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        # A broken config.json falls back to env + defaults
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(config_path: Path = CONFIG_PATH) -> Settings:
    """Build Settings from env vars, config.json and defaults (in that order)."""

    file_data = _load_config_file(config_path)
    values: Dict[str, Any] = {}
    for env_name, (field_name, file_key) in _ENV_KEYS.items():
        env_value = os.getenv(env_name)
        if env_value not in (None, ""):
            values[field_name] = env_value
        elif file_data.get(file_key) not in (None, ""):
            values[field_name] = file_data[file_key]
    if "api_base_url" in values:
        values["api_base_url"] = str(values["api_base_url"]).rstrip("/")
    return Settings(**values)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return load_settings()
