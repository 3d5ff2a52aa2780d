# tests/v1/test_auth_dependencies.py
"""Tests for bearer-token validation on mutating endpoints."""

from datetime import UTC, datetime, timedelta

from fastapi import status
from jose import jwt

from token_studio.core.security import create_access_token, decode_access_token
from token_studio.core.settings import settings

ENDPOINT = "/api/v1/metadata/session"
BODY = {"sessionId": "draft-1"}


class TestBearerValidation:
    """Requests without a valid wallet token are rejected."""

    def test_missing_authorization_header(self, client):
        response = client.post(ENDPOINT, json=BODY)
        assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}

    def test_malformed_token(self, client):
        response = client.post(ENDPOINT, json=BODY, headers={"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_wrong_secret(self, client):
        token = jwt.encode({"sub": "0x" + "a" * 40}, "wrong_secret_key", algorithm=settings.jwt_algorithm)
        response = client.post(ENDPOINT, json=BODY, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_expired_token(self, client):
        token = jwt.encode(
            {"sub": "0x" + "a" * 40, "exp": datetime.now(UTC) - timedelta(minutes=1)},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        response = client.post(ENDPOINT, json=BODY, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_without_subject(self, client):
        token = jwt.encode({"role": "anyone"}, settings.secret_key, algorithm=settings.jwt_algorithm)
        response = client.post(ENDPOINT, json=BODY, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_caller_address_is_canonicalized(self, client):
        mixed = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
        response = client.post(
            ENDPOINT,
            json=BODY,
            headers={"Authorization": f"Bearer {create_access_token(mixed)}"},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["creatorAddress"] == mixed.lower()


def test_access_token_round_trip():
    payload = decode_access_token(create_access_token("0x" + "e" * 40, {"scope": "metadata"}))
    assert payload["sub"] == "0x" + "e" * 40
    assert payload["scope"] == "metadata"
    assert "exp" in payload
