from __future__ import annotations

from app.application.dto.auth import ClientMeta

from conftest import make_user


META = ClientMeta(ip_address=None, user_agent=None)


def test_get_profile_returns_user_and_session(client, auth_port, session_store):
    user = auth_port.add_user(make_user())
    issued = session_store.issue(user_id=user.id, client_meta=META)

    response = client.get("/profile", headers={"Authorization": f"Bearer {issued.token}"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["user"]["id"] == user.id
    assert payload["session"]["id"] == issued.session.id
    assert "timestamp" in payload


def test_update_profile_changes_name(client, auth_port, session_store):
    user = auth_port.add_user(make_user(image="https://img/a.png"))
    issued = session_store.issue(user_id=user.id, client_meta=META)

    response = client.put(
        "/profile",
        json={"name": "Alice L."},
        headers={"Authorization": f"Bearer {issued.token}"},
    )

    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Alice L."
    assert response.json()["user"]["image"] == "https://img/a.png"
    assert auth_port.users[user.id].name == "Alice L."


def test_update_profile_without_fields_is_invalid(client, auth_port, session_store):
    user = auth_port.add_user(make_user())
    issued = session_store.issue(user_id=user.id, client_meta=META)

    response = client.put("/profile", json={}, headers={"Authorization": f"Bearer {issued.token}"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_request"
