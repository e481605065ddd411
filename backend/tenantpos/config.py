# backend/tenantpos/config.py
from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///tenantpos.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Password hashing cost (bcrypt accepts 4..31)
    BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 12)
    MIN_PASSWORD_LENGTH = 6

    # Session lifetime
    SESSION_ABSOLUTE_TIMEOUT_HOURS = _env_int("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24)
    SESSION_IDLE_TIMEOUT_HOURS = _env_int("SESSION_IDLE_TIMEOUT_HOURS", 2)

    # Collection listings
    DEFAULT_PAGE_LIMIT = _env_int("DEFAULT_PAGE_LIMIT", 10)
    MAX_PAGE_LIMIT = _env_int("MAX_PAGE_LIMIT", 100)

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    }


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BCRYPT_ROUNDS = 4
