# config.py
# Runtime settings, read from the environment (and .env if present).

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from agent_harness.provider import OPENROUTER_BASE_URL


class Settings(BaseModel):
    """Everything the CLI needs to wire up a run."""

    api_key: str | None = Field(default=None, description="OpenRouter (or compatible) API key.")
    model: str = "anthropic/claude-3.5-haiku"
    base_url: str = OPENROUTER_BASE_URL
    work_dir: Path = Field(default_factory=Path.cwd)
    max_steps: int = Field(default=10, ge=1)
    shell_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env_file: str | os.PathLike[str] | None = None) -> "Settings":
        """
        Build settings from AGENT_* variables and OPENROUTER_API_KEY.

        Unset variables fall back to the field defaults. Malformed values
        raise pydantic.ValidationError.
        """
        load_dotenv(env_file)
        mapping = {
            "api_key": "OPENROUTER_API_KEY",
            "model": "AGENT_MODEL",
            "base_url": "AGENT_BASE_URL",
            "work_dir": "AGENT_WORK_DIR",
            "max_steps": "AGENT_MAX_STEPS",
            "shell_timeout": "AGENT_SHELL_TIMEOUT",
            "log_level": "AGENT_LOG_LEVEL",
        }
        values = {field: os.environ[var] for field, var in mapping.items() if os.environ.get(var)}
        return cls.model_validate(values)
