"""Runtime configuration.

Settings are resolved once at process start from environment variables
(``.env`` files are loaded by the CLI) and passed explicitly to the
components that need them.
"""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .mood import RewardRule
from .store.factory import SUPPORTED_BACKENDS

DEFAULT_PREFIX = "!toodles"


class Settings(BaseModel):
    """Configuration for one toodles process."""

    store_backend: str = Field(default="memory", description="memory, sqlite or postgres")
    sqlite_path: str = Field(default="./toodles.db")

    postgres_dsn: str | None = Field(default=None, description="Overrides the discrete fields")
    postgres_host: str = "localhost"
    postgres_port: int = Field(default=5432, ge=1, le=65535)
    postgres_db: str = "toodles"
    postgres_user: str = "toodles"
    postgres_password: str = "toodles_dev"

    store_timeout: float = Field(default=10.0, gt=0, description="Per-call store deadline in seconds")

    prefix: str = Field(default=DEFAULT_PREFIX, min_length=1)
    reward_rule: RewardRule = RewardRule.MARGIN

    openai_api_key: str | None = None
    openai_chat_model: str = "gpt-3.5-turbo"
    openai_base_url: str | None = None
    llm_timeout: float = Field(default=30.0, gt=0, description="LLM request timeout in seconds")
    max_tokens: int = Field(default=200, ge=1)

    log_level: str = "INFO"

    @field_validator("store_backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Validate the store backend name."""
        v = v.lower()
        if v not in SUPPORTED_BACKENDS:
            raise ValueError(f"store_backend must be one of {', '.join(SUPPORTED_BACKENDS)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level name."""
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Environment variables:
            TOODLES_STORE_BACKEND: memory, sqlite or postgres (default: memory)
            TOODLES_SQLITE_PATH: SQLite database file (default: ./toodles.db)
            POSTGRES_DSN: Full connection string (overrides the fields below)
            POSTGRES_HOST: Database host (default: localhost)
            POSTGRES_PORT: Database port (default: 5432)
            POSTGRES_DB: Database name (default: toodles)
            POSTGRES_USER: Database user (default: toodles)
            POSTGRES_PASSWORD: Database password (default: toodles_dev)
            TOODLES_STORE_TIMEOUT: Per-call store deadline in seconds (default: 10)
            TOODLES_PREFIX: Command prefix (default: !toodles)
            TOODLES_REWARD_RULE: margin or literal (default: margin)
            OPENAI_API_KEY: OpenAI API key
            OPENAI_CHAT_MODEL: Chat model (default: gpt-3.5-turbo)
            OPENAI_BASE_URL: OpenAI-compatible API base URL
            TOODLES_LLM_TIMEOUT: LLM request timeout in seconds (default: 30)
            TOODLES_MAX_TOKENS: Reply token cap (default: 200)
            TOODLES_LOG_LEVEL: Log level (default: INFO)

        Raises:
            ValueError: If a value is malformed
        """
        env = os.environ if environ is None else environ
        mapping = {
            "store_backend": "TOODLES_STORE_BACKEND",
            "sqlite_path": "TOODLES_SQLITE_PATH",
            "postgres_dsn": "POSTGRES_DSN",
            "postgres_host": "POSTGRES_HOST",
            "postgres_port": "POSTGRES_PORT",
            "postgres_db": "POSTGRES_DB",
            "postgres_user": "POSTGRES_USER",
            "postgres_password": "POSTGRES_PASSWORD",
            "store_timeout": "TOODLES_STORE_TIMEOUT",
            "prefix": "TOODLES_PREFIX",
            "reward_rule": "TOODLES_REWARD_RULE",
            "openai_api_key": "OPENAI_API_KEY",
            "openai_chat_model": "OPENAI_CHAT_MODEL",
            "openai_base_url": "OPENAI_BASE_URL",
            "llm_timeout": "TOODLES_LLM_TIMEOUT",
            "max_tokens": "TOODLES_MAX_TOKENS",
            "log_level": "TOODLES_LOG_LEVEL",
        }
        values = {field: env[var] for field, var in mapping.items() if env.get(var)}
        if "reward_rule" in values:
            values["reward_rule"] = values["reward_rule"].lower()
        return cls(**values)

    def store_config(self) -> dict[str, Any]:
        """Keyword arguments for ``create_state_store`` for this backend."""
        if self.store_backend == "sqlite":
            return {"path": self.sqlite_path}
        if self.store_backend == "postgres":
            return {
                "dsn": self.postgres_dsn,
                "host": self.postgres_host,
                "port": self.postgres_port,
                "database": self.postgres_db,
                "user": self.postgres_user,
                "password": self.postgres_password,
            }
        return {}
