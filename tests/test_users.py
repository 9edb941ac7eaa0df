"""用户管理接口的集成测试。"""

import uuid

from fastapi.testclient import TestClient

API = "/api/v1"


def test_admin_user_crud_flow(client: TestClient, admin_headers):
    username = f"managed_{uuid.uuid4().hex[:6]}"
    create_resp = client.post(
        f"{API}/users",
        headers=admin_headers,
        json={"username": username, "password": "secret123", "email": f"{username}@example.com"},
    )
    assert create_resp.status_code == 200
    user_id = create_resp.json()["data"]["id"]
    assert create_resp.json()["data"]["roles"] == []

    list_resp = client.get(f"{API}/users", headers=admin_headers, params={"search": username})
    assert list_resp.status_code == 200
    assert [item["id"] for item in list_resp.json()["data"]] == [user_id]
    assert list_resp.json()["meta"]["total"] == 1

    update_resp = client.put(f"{API}/users/{user_id}", headers=admin_headers, json={"full_name": "Managed"})
    assert update_resp.status_code == 200
    assert update_resp.json()["data"]["full_name"] == "Managed"

    delete_resp = client.delete(f"{API}/users/{user_id}", headers=admin_headers)
    assert delete_resp.status_code == 200

    detail_resp = client.get(f"{API}/users/{user_id}", headers=admin_headers)
    assert detail_resp.status_code == 404


def test_block_and_unblock_user(client: TestClient, admin_headers, register_user):
    user, headers = register_user()

    block_resp = client.post(f"{API}/users/{user['id']}/block", headers=admin_headers)
    assert block_resp.status_code == 200
    assert block_resp.json()["data"]["is_active"] is False

    assert client.get(f"{API}/auth/me", headers=headers).status_code == 403
    login_resp = client.post(f"{API}/auth/login", json={"username": user["username"], "password": "secret123"})
    assert login_resp.status_code == 403

    unblock_resp = client.post(f"{API}/users/{user['id']}/unblock", headers=admin_headers)
    assert unblock_resp.status_code == 200
    assert client.get(f"{API}/auth/me", headers=headers).status_code == 200


def test_admin_cannot_block_or_delete_self(client: TestClient, admin_headers):
    me = client.get(f"{API}/auth/me", headers=admin_headers).json()["data"]

    assert client.post(f"{API}/users/{me['id']}/block", headers=admin_headers).status_code == 400
    assert client.delete(f"{API}/users/{me['id']}", headers=admin_headers).status_code == 400


def test_user_management_requires_permission(client: TestClient, register_user):
    _, headers = register_user()

    response = client.get(f"{API}/users", headers=headers)
    assert response.status_code == 403


def test_share_candidates_exclude_current_user(client: TestClient, register_user):
    user, headers = register_user()
    other, _ = register_user()

    response = client.get(f"{API}/users/share-candidates", headers=headers)
    assert response.status_code == 200
    ids = [item["id"] for item in response.json()["data"]]
    assert other["id"] in ids
    assert user["id"] not in ids
