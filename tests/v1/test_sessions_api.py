# tests/v1/test_sessions_api.py
"""Tests for pre-deployment draft sessions and linking them to deployed tokens."""

import base64
from datetime import timedelta

from fastapi import status

from tests.conftest import OTHER_ADDRESS, OWNER_ADDRESS, PNG_BYTES, TOKEN_ADDRESS
from token_studio.db.time import as_utc, utcnow
from token_studio.models import TemporaryMetadata, TokenMetadataHistory

DRAFT = {
    "sessionId": "draft-1",
    "name": "Test Token",
    "symbol": "TEST",
    "description": "Launching soon",
    "websiteUrl": "https://example.com",
    "tags": ["defi", "meme"],
}


def _link(client, headers, session_id="draft-1"):
    return client.post(
        "/api/v1/metadata/session/link",
        json={"tokenAddress": TOKEN_ADDRESS, "sessionId": session_id},
        headers=headers,
    )


def test_create_session(client, owner_headers) -> None:
    response = client.post("/api/v1/metadata/session", json=DRAFT, headers=owner_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["sessionId"] == "draft-1"
    assert data["creatorAddress"] == OWNER_ADDRESS.lower()
    assert data["tags"] == ["defi", "meme"]

    fetched = client.get("/api/v1/metadata/session/draft-1", headers=owner_headers)
    assert fetched.status_code == status.HTTP_200_OK
    assert fetched.json()["name"] == "Test Token"


def test_session_expiry_is_refreshed_on_every_upsert(client, owner_headers, db_session) -> None:
    client.post("/api/v1/metadata/session", json=DRAFT, headers=owner_headers)
    draft = db_session.query(TemporaryMetadata).filter_by(session_id="draft-1").one()
    draft.expires_at = utcnow() + timedelta(minutes=5)
    db_session.commit()

    client.post(
        "/api/v1/metadata/session",
        json={"sessionId": "draft-1", "description": "Updated"},
        headers=owner_headers,
    )
    db_session.expire_all()
    draft = db_session.query(TemporaryMetadata).filter_by(session_id="draft-1").one()
    assert as_utc(draft.expires_at) > utcnow() + timedelta(hours=23)
    assert draft.name == "Test Token"
    assert draft.description == "Updated"


def test_session_cannot_be_taken_over_by_another_creator(client, owner_headers, other_headers) -> None:
    client.post("/api/v1/metadata/session", json=DRAFT, headers=owner_headers)

    response = client.post(
        "/api/v1/metadata/session",
        json={"sessionId": "draft-1", "name": "Mine now"},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/api/v1/metadata/session/draft-1", headers=other_headers).status_code == 404
    assert client.get("/api/v1/metadata/session/draft-1", headers=owner_headers).json()["name"] == "Test Token"


def test_expired_session_is_invisible(client, owner_headers, db_session) -> None:
    db_session.add(
        TemporaryMetadata(
            session_id="stale",
            creator_address=OWNER_ADDRESS.lower(),
            name="Old",
            tags=[],
            expires_at=utcnow() - timedelta(minutes=1),
        )
    )
    db_session.commit()

    assert client.get("/api/v1/metadata/session/stale", headers=owner_headers).status_code == 404


def test_expired_session_id_starts_fresh(client, owner_headers, other_headers, db_session) -> None:
    db_session.add(
        TemporaryMetadata(
            session_id="stale",
            creator_address=OWNER_ADDRESS.lower(),
            name="Old",
            description="Old description",
            tags=["meme"],
            expires_at=utcnow() - timedelta(minutes=1),
        )
    )
    db_session.commit()

    response = client.post(
        "/api/v1/metadata/session",
        json={"sessionId": "stale", "name": "Fresh"},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["creatorAddress"] == OTHER_ADDRESS.lower()
    assert data["name"] == "Fresh"
    assert data["description"] is None
    assert data["tags"] == []


def test_session_rejects_invalid_input(client, owner_headers) -> None:
    too_long = {"sessionId": "s" * 65}
    assert client.post("/api/v1/metadata/session", json=too_long, headers=owner_headers).status_code == 400
    assert client.post("/api/v1/metadata/session", json={"name": "x"}, headers=owner_headers).status_code == 400
    bad_link = {"sessionId": "draft-1", "discordUrl": "ftp://example.com"}
    assert client.post("/api/v1/metadata/session", json=bad_link, headers=owner_headers).status_code == 400


def test_session_rejects_invalid_inline_logo(client, owner_headers) -> None:
    not_an_image = base64.b64encode(b"GIF89a" + b"\x00" * 16).decode()
    for logo_data in ("not base64!", not_an_image):
        response = client.post(
            "/api/v1/metadata/session",
            json={"sessionId": "draft-1", "logoData": logo_data},
            headers=owner_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["kind"] == "validation"


def test_link_session_creates_metadata_and_consumes_draft(client, token, owner_headers) -> None:
    client.post("/api/v1/metadata/session", json=DRAFT, headers=owner_headers)

    response = _link(client, owner_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["tokenAddress"] == TOKEN_ADDRESS.lower()
    assert data["name"] == "Test Token"
    assert data["websiteUrl"] == "https://example.com"
    assert data["tags"] == ["defi", "meme"]
    assert data["updateCount"] == 1
    assert data["lastUpdatedBy"] == OWNER_ADDRESS.lower()

    assert client.get("/api/v1/metadata/session/draft-1", headers=owner_headers).status_code == 404
    assert client.get(f"/api/v1/metadata/{TOKEN_ADDRESS.lower()}").json()["name"] == "Test Token"


def test_link_onto_existing_metadata_counts_as_update(client, token, owner_headers, db_session) -> None:
    client.post(
        "/api/v1/metadata",
        json={"tokenAddress": TOKEN_ADDRESS, "description": "Before link"},
        headers=owner_headers,
    )
    client.post("/api/v1/metadata/session", json=DRAFT, headers=owner_headers)

    data = _link(client, owner_headers).json()
    assert data["updateCount"] == 2
    assert data["description"] == "Launching soon"
    history = db_session.query(TokenMetadataHistory).all()
    assert len(history) == 1
    assert history[0].previous_data["description"] == "Before link"


def test_link_with_inline_logo_stores_it(client, token, owner_headers, asset_config) -> None:
    logo_data = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
    client.post(
        "/api/v1/metadata/session",
        json={**DRAFT, "logoData": logo_data},
        headers=owner_headers,
    )

    data = _link(client, owner_headers).json()
    assert data["logoUrl"].startswith("http://test/uploads/")
    assert data["logoUrl"].endswith(".png")
    stored = list(asset_config.upload_dir.iterdir())
    assert len(stored) == 1
    assert stored[0].read_bytes() == PNG_BYTES


def test_link_requires_token_ownership(client, token, other_headers) -> None:
    client.post("/api/v1/metadata/session", json=DRAFT, headers=other_headers)

    response = _link(client, other_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"/api/v1/metadata/{TOKEN_ADDRESS}").status_code == 404
    assert client.get("/api/v1/metadata/session/draft-1", headers=other_headers).status_code == 200


def test_link_missing_or_expired_session_returns_404(client, token, owner_headers, db_session) -> None:
    assert _link(client, owner_headers, "never-created").status_code == 404

    db_session.add(
        TemporaryMetadata(
            session_id="stale",
            creator_address=OWNER_ADDRESS.lower(),
            name="Old",
            tags=[],
            expires_at=utcnow() - timedelta(seconds=1),
        )
    )
    db_session.commit()
    assert _link(client, owner_headers, "stale").status_code == 404


def test_link_to_unknown_token_returns_404(client, owner_headers) -> None:
    client.post("/api/v1/metadata/session", json=DRAFT, headers=owner_headers)
    assert _link(client, owner_headers).status_code == status.HTTP_404_NOT_FOUND
