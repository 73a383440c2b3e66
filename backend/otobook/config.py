"""Configuration for the Otobook RPA backend."""

from __future__ import annotations

import os


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return float(value)


class Config:
    """Base configuration for the Flask application."""

    SQLALCHEMY_DATABASE_URI: str = os.getenv("DATABASE_URL", "sqlite:///otobook.db")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    JSONIFY_PRETTYPRINT_REGULAR: bool = False
    CORS_ALLOWED_ORIGINS: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173")
    DB_INIT_MAX_RETRIES: int = int(os.getenv("DB_INIT_MAX_RETRIES", "30"))
    DB_INIT_RETRY_DELAY: float = float(os.getenv("DB_INIT_RETRY_DELAY", "2"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Workflow and run storage backend: "memory" or "sql".
    RPA_STORE: str = os.getenv("RPA_STORE", "memory")

    # Simulated executor latency per step, in seconds.
    RPA_STEP_LATENCY_MIN: float = float(os.getenv("RPA_STEP_LATENCY_MIN", "0.1"))
    RPA_STEP_LATENCY_MAX: float = float(os.getenv("RPA_STEP_LATENCY_MAX", "0.5"))

    RPA_CONNECTION_DELAY_MIN: float = float(os.getenv("RPA_CONNECTION_DELAY_MIN", "1.0"))
    RPA_CONNECTION_DELAY_MAX: float = float(os.getenv("RPA_CONNECTION_DELAY_MAX", "1.5"))
    RPA_CONNECTION_SUCCESS_RATE: float = float(os.getenv("RPA_CONNECTION_SUCCESS_RATE", "0.9"))
    RPA_RANDOM_SEED: int | None = _optional_int("RPA_RANDOM_SEED")
    # How long an HTTP request waits for its run; runs themselves are never cut short.
    RPA_EXECUTION_TIMEOUT: float | None = _optional_float("RPA_EXECUTION_TIMEOUT")

    RPA_HISTORY_DEFAULT_LIMIT: int = int(os.getenv("RPA_HISTORY_DEFAULT_LIMIT", "50"))
    RPA_HISTORY_MAX_LIMIT: int = int(os.getenv("RPA_HISTORY_MAX_LIMIT", "500"))

    RATELIMIT_ENABLED: bool = os.getenv("RATELIMIT_ENABLED", "true").lower() in {"1", "true", "yes"}
    RPA_EXECUTE_RATE_LIMIT: str = os.getenv("RPA_EXECUTE_RATE_LIMIT", "30 per minute")

    ENABLE_DEMO_API: bool = os.getenv("ENABLE_DEMO_API", "true").lower() in {"1", "true", "yes"}
