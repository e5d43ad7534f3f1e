"""Bearer-token identity verification.

Two verifiers are available and selected by ``IDENTITY_PROVIDER``:

* ``signed``: tokens signed with ``SECRET_KEY`` via itsdangerous. The backend
  (or ``scripts/set_user_role.py``) issues them.
* ``firebase``: Firebase ID tokens minted by the frontend's Firebase Auth
  session, verified with the Admin SDK.

Both yield the verified email address or raise :class:`Unauthenticated`.
"""
from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from flask import Flask
from itsdangerous import BadData, URLSafeTimedSerializer

from .errors import ServerMisconfigured, Unauthenticated

logger = logging.getLogger(__name__)

TOKEN_SALT = "auth-token"


class SignedTokenVerifier:
    def __init__(self, secret_key: str, max_age: int = 86400) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self._max_age = max_age

    def issue(self, email: str) -> str:
        return self._serializer.dumps({"email": email.strip().lower()})

    def verify(self, token: str) -> str:
        try:
            payload = self._serializer.loads(token, max_age=self._max_age)
        except BadData as exc:
            # Covers bad signatures, expiry and undecodable payloads.
            raise Unauthenticated("invalid or expired token") from exc

        email = payload.get("email") if isinstance(payload, dict) else None
        if not email:
            raise Unauthenticated("token carries no email")
        return email


class FirebaseTokenVerifier:
    def __init__(self, project_id: str | None, credentials_path: str | None = None) -> None:
        try:
            self._app = firebase_admin.get_app()
        except ValueError:
            cred = (
                credentials.Certificate(credentials_path)
                if credentials_path
                else credentials.ApplicationDefault()
            )
            options = {"projectId": project_id} if project_id else None
            self._app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase Admin initialized for project %s", project_id)

    def verify(self, token: str) -> str:
        try:
            decoded = firebase_auth.verify_id_token(token, app=self._app)
        except (ValueError, firebase_auth.InvalidIdTokenError) as exc:
            # ExpiredIdTokenError and RevokedIdTokenError derive from InvalidIdTokenError.
            raise Unauthenticated("invalid or expired token") from exc

        email = decoded.get("email")
        if not email:
            raise Unauthenticated("token carries no email")
        return email.lower()


def init_identity(app: Flask) -> None:
    """Build the configured verifier once and park it on ``app.extensions``."""
    provider = app.config.get("IDENTITY_PROVIDER", "signed")
    if provider == "firebase":
        verifier = FirebaseTokenVerifier(
            app.config.get("FIREBASE_PROJECT_ID"),
            app.config.get("FIREBASE_CREDENTIALS"),
        )
    elif provider == "signed":
        verifier = SignedTokenVerifier(
            app.config["SECRET_KEY"], app.config.get("TOKEN_MAX_AGE", 86400)
        )
    else:
        raise ServerMisconfigured(f"unknown identity provider: {provider}")

    app.extensions["identity_verifier"] = verifier
