"""Runtime settings read from the environment (and `.env` at the repo root)."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = ROOT / "data"
DEFAULT_COPILOT_URL = "https://api.github.com/copilot/chat/completions"


class Settings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    cloud_url: str = ""
    cloud_prefix: str = "dolmenwood"
    health_timeout: float = 5.0
    health_interval: float = 30.0
    github_token: str = ""
    copilot_agent_name: str = "dolmenwood"
    copilot_model: str = "gpt-4"
    copilot_url: str = DEFAULT_COPILOT_URL
    cors_origin: str = "http://localhost:3000"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build settings from environment variables. Empty values fall back to defaults."""
    load_dotenv(ROOT / ".env")
    env = {
        "data_dir": os.getenv("DATA_DIR"),
        "cloud_url": os.getenv("CLOUD_URL"),
        "cloud_prefix": os.getenv("CLOUD_PREFIX"),
        "health_timeout": os.getenv("HEALTH_TIMEOUT"),
        "health_interval": os.getenv("HEALTH_INTERVAL"),
        "github_token": os.getenv("GITHUB_TOKEN"),
        "copilot_agent_name": os.getenv("COPILOT_AGENT_NAME"),
        "copilot_model": os.getenv("COPILOT_MODEL"),
        "copilot_url": os.getenv("COPILOT_URL"),
        "cors_origin": os.getenv("CORS_ORIGIN"),
        "host": os.getenv("HOST"),
        "port": os.getenv("PORT"),
        "log_level": os.getenv("LOG_LEVEL"),
    }
    return Settings(**{k: v for k, v in env.items() if v})
