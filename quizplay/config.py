"""Environment-driven configuration for the quiz client."""

from __future__ import annotations

import os
from pathlib import Path

from quizplay.constants.network_constants import DEFAULT_API_URL, REQUEST_TIMEOUT_SECONDS


def _optional_int(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    # Backend
    API_URL = os.getenv("QUIZPLAY_API_URL", DEFAULT_API_URL)
    REQUEST_TIMEOUT = float(os.getenv("QUIZPLAY_REQUEST_TIMEOUT", REQUEST_TIMEOUT_SECONDS))

    # Identity handed over by the auth collaborator
    USER_ID = os.getenv("QUIZPLAY_USER_ID", "")
    API_TOKEN = os.getenv("QUIZPLAY_TOKEN", "")

    # Submissions that could not be delivered are kept here until the next launch
    PENDING_SUBMISSIONS_PATH = Path(
        os.getenv(
            "QUIZPLAY_PENDING_PATH",
            str(Path.home() / ".quizplay" / "pending_submissions.json"),
        )
    )

    LOG_LEVEL = os.getenv("QUIZPLAY_LOG_LEVEL", "INFO").upper()

    # Fixed seed makes question/option order reproducible (support sessions only)
    SHUFFLE_SEED = _optional_int(os.getenv("QUIZPLAY_SHUFFLE_SEED"))

    # Show correct/incorrect after each non-final question
    REVEAL_FEEDBACK = os.getenv("QUIZPLAY_REVEAL_FEEDBACK", "True").lower() == "true"


class DevelopmentConfig(Config):
    LOG_LEVEL = os.getenv("QUIZPLAY_LOG_LEVEL", "DEBUG").upper()


class ProductionConfig(Config):
    LOG_LEVEL = os.getenv("QUIZPLAY_LOG_LEVEL", "WARNING").upper()


_CONFIGS: dict[str, type[Config]] = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
}


def get_config(environment: str | None = None) -> type[Config]:
    """Config class for ``environment`` (default ``QUIZPLAY_ENV``); unknown names give the base Config."""
    name = environment if environment is not None else os.getenv("QUIZPLAY_ENV", "")
    return _CONFIGS.get(name.strip().lower(), Config)
