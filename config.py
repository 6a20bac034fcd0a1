"""
Runtime settings, read from the environment (and a local .env file).

Variables:
    OPENAI_API_KEY            key for the analysis endpoint (optional; analysis fails without it)
    OPENAI_MODEL              chat model name
    OPENAI_TIMEOUT            request timeout in seconds
    SYMPTOM_CHECKER_BACKEND   base URL the Streamlit UI posts to
    LOG_LEVEL / LOG_FILE      see logging_config.setup_logging
"""
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

load_dotenv()


class Settings(BaseModel):
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"
    openai_timeout: float = 15.0
    backend_url: str = "http://127.0.0.1:5000"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("openai_api_key", "log_file")
    @classmethod
    def _blank_is_none(cls, value):
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value):
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


_ENV_NAMES = {
    "openai_api_key": "OPENAI_API_KEY",
    "openai_model": "OPENAI_MODEL",
    "openai_timeout": "OPENAI_TIMEOUT",
    "backend_url": "SYMPTOM_CHECKER_BACKEND",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
}


def get_settings() -> Settings:
    values = {field: os.environ[env] for field, env in _ENV_NAMES.items() if env in os.environ}
    return Settings(**values)
