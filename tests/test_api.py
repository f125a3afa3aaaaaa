"""HTTP surface tests running the FastAPI app against the in-memory database."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from kinfolk.core.security import DEV_ACCOUNT_HEADER, AuthenticatedAccount, get_security_provider
from kinfolk.main import create_app
from kinfolk.models import PersonShare
from kinfolk.routers.dependencies import get_db_session


@pytest.fixture()
def client(session):
    app = create_app()

    def _session_override():
        yield session

    app.dependency_overrides[get_db_session] = _session_override
    with TestClient(app) as test_client:
        yield test_client


def _headers(account) -> dict[str, str]:
    token = get_security_provider().create_access_token(
        AuthenticatedAccount(account_id=account.id, email=account.email)
    )
    return {"Authorization": f"Bearer {token}", DEV_ACCOUNT_HEADER: str(account.id)}


def test_requests_without_credentials_are_rejected(client) -> None:
    response = client.get("/people")

    assert response.status_code == 401


def test_provision_is_idempotent(client, alice) -> None:
    first = client.post("/me/provision", headers=_headers(alice))
    second = client.post("/me/provision", headers=_headers(alice))

    assert first.status_code == 200
    assert first.json()["self_profile"]["id"] == second.json()["self_profile"]["id"]
    assert first.json()["self_profile"]["relation"] == "Self"

    people = client.get("/people", headers=_headers(alice)).json()
    assert [person["name"] for person in people] == ["Alice"]


def test_missing_email_is_rendered_as_actionable_error(client, alice) -> None:
    created = client.post("/people", json={"name": "Grandpa"}, headers=_headers(alice))
    assert created.status_code == 201

    response = client.post(
        f"/people/{created.json()['id']}/invite-link", headers=_headers(alice)
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "MissingEmail"
    assert "add an email" in body["detail"]


def test_invite_accept_and_share_flow(client, alice, bob) -> None:
    mom = client.post(
        "/people",
        json={"name": "Mom", "relation": "Mother", "email": "mom@example.com"},
        headers=_headers(alice),
    ).json()

    created = client.post(
        f"/people/{mom['id']}/collaboration-requests",
        json={"target_email": "b@x.com"},
        headers=_headers(alice),
    )
    assert created.status_code == 201
    token = created.json()["invite_token"]

    preview = client.get(f"/collaboration-requests/invites/{token}")
    assert preview.status_code == 200
    assert preview.json()["person"]["name"] == "Mom"

    incoming = client.get("/collaboration-requests/incoming", headers=_headers(bob)).json()
    assert [row["person_name"] for row in incoming] == ["Mom"]

    accepted = client.post(
        f"/collaboration-requests/{incoming[0]['id']}/accept",
        json={"create_new": True},
        headers=_headers(bob),
    )
    assert accepted.status_code == 200
    bobs_mom_id = accepted.json()["person_id"]

    again = client.post(
        f"/collaboration-requests/{incoming[0]['id']}/decline", headers=_headers(bob)
    )
    assert again.status_code == 409
    assert again.json()["error"] == "RequestAlreadyResolved"

    note = client.post(
        f"/people/{mom['id']}/records/NOTE",
        json={"title": "Allergic to nuts", "tags": ["health"]},
        headers=_headers(alice),
    )
    assert note.status_code == 201
    assert note.json()["tags"] == ["health"]

    view = client.get(f"/people/{bobs_mom_id}", headers=_headers(bob)).json()
    assert [row["title"] for row in view["notes"]] == ["Allergic to nuts"]
    assert view["notes"][0]["attribution"] == "Shared by Alice"

    collaborators = client.get(f"/people/{mom['id']}/collaborators", headers=_headers(alice))
    assert [row["name"] for row in collaborators.json()] == ["Bob"]

    removed = client.delete(
        f"/people/{mom['id']}/collaborators/{collaborators.json()[0]['account_id']}",
        headers=_headers(alice),
    )
    assert removed.status_code == 200
    assert removed.json()["links_revoked"] == 1

    after = client.get(f"/people/{bobs_mom_id}", headers=_headers(bob)).json()
    assert after["notes"] == []


def test_invalid_record_payload_is_rejected(client, alice) -> None:
    mom = client.post("/people", json={"name": "Mom"}, headers=_headers(alice)).json()

    response = client.post(
        f"/people/{mom['id']}/records/FINANCE",
        json={"title": "No amount"},
        headers=_headers(alice),
    )

    assert response.status_code == 422


def test_item_shares_endpoint(client, session, alice, bob) -> None:
    mom = client.post("/people", json={"name": "Mom"}, headers=_headers(alice)).json()
    share = PersonShare(person_id=mom["id"], account_id=bob.id)
    session.add(share)
    session.commit()
    task = client.post(
        f"/people/{mom['id']}/records/TODO",
        json={"title": "Call", "share_with": []},
        headers=_headers(alice),
    ).json()

    response = client.put(
        f"/records/TODO/{task['id']}/shares",
        json={"person_share_ids": [share.id, share.id]},
        headers=_headers(alice),
    )
    missing = client.put(
        "/records/TODO/999/shares", json={"person_share_ids": []}, headers=_headers(alice)
    )

    assert task["record_type"] == "TODO"
    assert response.json()["person_share_ids"] == [share.id]
    assert missing.status_code == 404
    assert missing.json()["error"] == "RecordNotFound"
