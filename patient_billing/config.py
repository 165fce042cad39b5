"""Runtime configuration: database URL, log level, SQL echo."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping

ENV_PREFIX = "PATIENT_BILLING_"

DEFAULT_DATABASE_URL = "sqlite:///patient_billing.db"
DEFAULT_LOG_LEVEL = "INFO"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings for one process.

    Built from environment variables by ``from_env``; every field has a
    default so an empty environment yields a working local SQLite setup.
    """

    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = DEFAULT_LOG_LEVEL
    sql_echo: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Read settings from ``PATIENT_BILLING_*`` environment variables.

        Raises:
            ValueError: If the log level is not a known logging level name.
        """
        env = os.environ if environ is None else environ

        log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if log_level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {log_level!r}")

        return cls(
            database_url=env.get(f"{ENV_PREFIX}DATABASE_URL", DEFAULT_DATABASE_URL),
            log_level=log_level,
            sql_echo=_env_flag(env.get(f"{ENV_PREFIX}SQL_ECHO")),
        )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]
