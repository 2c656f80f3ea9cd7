# backend/catcoin/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/catcoin.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///catcoin.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Register settings
    TAX_RATE = os.environ.get("CATCOIN_TAX_RATE", "0.08")
    LOW_STOCK_THRESHOLD = int(os.environ.get("CATCOIN_LOW_STOCK_THRESHOLD", "10"))

    # False restores the legacy register behaviour (stock may go negative)
    ENFORCE_STOCK_CHECK = _env_bool("CATCOIN_ENFORCE_STOCK_CHECK", True)

    # How a sale contributes to daily_stats.treats_eaten: floor_total | per_order | none
    TREATS_RULE = os.environ.get("CATCOIN_TREATS_RULE", "floor_total")

    SEED_ON_INIT = _env_bool("CATCOIN_SEED_ON_INIT", True)

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:4173",
        "http://127.0.0.1:4173",
    }
