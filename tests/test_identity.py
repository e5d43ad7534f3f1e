"""Tests for bearer token verification and the role guard."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from styledecor.errors import Unauthenticated
from styledecor.identity import FirebaseTokenVerifier, SignedTokenVerifier


def test_signed_token_round_trip() -> None:
    verifier = SignedTokenVerifier("secret")

    token = verifier.issue(" Casey@Example.com ")

    assert verifier.verify(token) == "casey@example.com"


def test_signed_token_rejects_other_secret() -> None:
    token = SignedTokenVerifier("secret").issue("casey@example.com")

    with pytest.raises(Unauthenticated):
        SignedTokenVerifier("another-secret").verify(token)


def test_signed_token_rejects_expired() -> None:
    token = SignedTokenVerifier("secret").issue("casey@example.com")

    with pytest.raises(Unauthenticated):
        SignedTokenVerifier("secret", max_age=-1).verify(token)


class FakeInvalidIdTokenError(Exception):
    pass


@pytest.fixture
def firebase_mocks():
    with patch("styledecor.identity.firebase_admin") as mock_admin, \
            patch("styledecor.identity.firebase_auth") as mock_auth:
        mock_admin.get_app.return_value = MagicMock()
        mock_auth.InvalidIdTokenError = FakeInvalidIdTokenError
        yield mock_auth


def test_firebase_verifier_returns_email(firebase_mocks) -> None:
    firebase_mocks.verify_id_token.return_value = {"uid": "abc", "email": "Casey@Example.com"}

    verifier = FirebaseTokenVerifier("styledecor-test")

    assert verifier.verify("id-token") == "casey@example.com"


def test_firebase_verifier_rejects_invalid_token(firebase_mocks) -> None:
    firebase_mocks.verify_id_token.side_effect = FakeInvalidIdTokenError("bad token")

    verifier = FirebaseTokenVerifier("styledecor-test")

    with pytest.raises(Unauthenticated):
        verifier.verify("id-token")


def test_missing_bearer_prefix_is_unauthorized(client) -> None:
    response = client.get("/payment-history", headers={"Authorization": "Token abc"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"


def test_garbage_token_is_unauthorized(client) -> None:
    response = client.get("/payment-history", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_role_guard_rejects_unknown_user(client, auth_headers) -> None:
    # A valid token for an email with no stored user record.
    response = client.get("/admin/analytics", headers=auth_headers("ghost@example.com"))

    assert response.status_code == 403
    assert response.get_json()["error"] == "forbidden"


def test_role_guard_rejects_wrong_role(client, make_user, auth_headers) -> None:
    make_user("dana@example.com", role="decorator")

    response = client.get("/admin/analytics", headers=auth_headers("dana@example.com"))

    assert response.status_code == 403
