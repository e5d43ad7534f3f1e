"""Configuration objects loaded by the application factory."""
from __future__ import annotations

import os


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///styledecor.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Stripe Checkout
    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY")
    CHECKOUT_CURRENCY = os.environ.get("CHECKOUT_CURRENCY", "usd")
    SITE_DOMAIN = os.environ.get("SITE_DOMAIN", "http://localhost:5173")

    # "signed" (itsdangerous tokens issued by this backend) or "firebase"
    IDENTITY_PROVIDER = os.environ.get("IDENTITY_PROVIDER", "signed")
    FIREBASE_PROJECT_ID = os.environ.get("FIREBASE_PROJECT_ID")
    FIREBASE_CREDENTIALS = os.environ.get("FIREBASE_CREDENTIALS")
    TOKEN_MAX_AGE = int(os.environ.get("TOKEN_MAX_AGE", 86400))

    CORS_ORIGINS = _env_list("CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STRIPE_SECRET_KEY = "sk_test_fake"
    SITE_DOMAIN = "http://localhost:5173"
    IDENTITY_PROVIDER = "signed"
    LOG_LEVEL = "DEBUG"
