"""角色与权限管理接口的集成测试。"""

from __future__ import annotations

import io
import uuid

from fastapi.testclient import TestClient
from openpyxl import load_workbook

API = "/api/v1"


def _permission_id(client: TestClient, headers: dict[str, str], slug: str) -> int:
    resp = client.get(f"{API}/permissions", headers=headers, params={"search": slug})
    assert resp.status_code == 200
    matches = [item["id"] for item in resp.json()["data"] if item["slug"] == slug]
    assert matches, slug
    return matches[0]


def _role_id(client: TestClient, headers: dict[str, str], slug: str) -> int:
    resp = client.get(f"{API}/roles", headers=headers, params={"search": slug})
    return next(item["id"] for item in resp.json()["data"] if item["slug"] == slug)


def test_role_crud_flow_and_export(client: TestClient, admin_headers):
    """验证角色管理接口的增删改查与导出能力。"""
    suffix = uuid.uuid4().hex[:8]
    approve_id = _permission_id(client, admin_headers, "posts:approve")

    create_resp = client.post(
        f"{API}/roles",
        headers=admin_headers,
        json={
            "name": "审核员",
            "slug": f"Reviewer-{suffix}",
            "description": "负责内容审核",
            "sort_order": 3,
            "permission_ids": [approve_id, approve_id],
        },
    )
    assert create_resp.status_code == 200, create_resp.text
    role = create_resp.json()["data"]
    assert role["slug"] == f"reviewer-{suffix}"
    assert role["permission_ids"] == [approve_id]
    assert role["is_builtin"] is False
    assert role["status_label"] == "正常"

    duplicate = client.post(
        f"{API}/roles",
        headers=admin_headers,
        json={"name": "重复", "slug": f"reviewer-{suffix}"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["msg"] == "角色标识已存在"

    list_resp = client.get(f"{API}/roles", headers=admin_headers, params={"search": suffix})
    assert list_resp.json()["meta"]["total"] == 1

    update_resp = client.put(
        f"{API}/roles/{role['id']}",
        headers=admin_headers,
        json={"name": "高级审核员", "sort_order": 5},
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["data"]["name"] == "高级审核员"

    status_resp = client.put(f"{API}/roles/{role['id']}/status", headers=admin_headers, json={"status": "停用"})
    assert status_resp.status_code == 200
    assert status_resp.json()["data"]["status"] == "disabled"

    disabled_only = client.get(f"{API}/roles", headers=admin_headers, params={"statuses": ["disabled"]}).json()
    assert role["id"] in [item["id"] for item in disabled_only["data"]]

    export_resp = client.get(f"{API}/roles/export", headers=admin_headers, params={"search": suffix})
    assert export_resp.status_code == 200
    assert (
        export_resp.headers["Content-Type"]
        == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "roles-" in export_resp.headers["Content-Disposition"]
    workbook = load_workbook(io.BytesIO(export_resp.content))
    sheet = workbook.active
    assert sheet.title == "角色列表"
    header = [cell.value for cell in sheet[1]]
    assert header == ["角色名称", "角色标识", "显示顺序", "状态", "权限", "用户数", "创建时间"]
    rows = list(sheet.iter_rows(min_row=2, values_only=True))
    assert len(rows) == 1
    assert rows[0][0] == "高级审核员"
    assert rows[0][3] == "停用"
    assert rows[0][4] == "posts:approve"

    delete_resp = client.delete(f"{API}/roles/{role['id']}", headers=admin_headers)
    assert delete_resp.status_code == 200
    assert delete_resp.json()["data"]["role_id"] == role["id"]

    missing = client.get(f"{API}/roles/{role['id']}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["msg"] == "角色不存在或已删除"


def test_builtin_roles_are_protected(client: TestClient, admin_headers):
    author_id = _role_id(client, admin_headers, "author")

    delete_resp = client.delete(f"{API}/roles/{author_id}", headers=admin_headers)
    assert delete_resp.status_code == 403
    assert delete_resp.json()["msg"] == "系统内置角色不允许删除"

    rename_slug = client.put(f"{API}/roles/{author_id}", headers=admin_headers, json={"slug": "writer"})
    assert rename_slug.status_code == 403
    assert rename_slug.json()["msg"] == "系统内置角色不允许修改标识"

    disable = client.put(f"{API}/roles/{author_id}/status", headers=admin_headers, json={"status": "disabled"})
    assert disable.status_code == 403
    assert disable.json()["msg"] == "系统内置角色不允许停用"


def test_role_with_users_cannot_be_deleted(client: TestClient, admin_headers, register_user):
    user, _ = register_user()
    role = client.post(
        f"{API}/roles",
        headers=admin_headers,
        json={"name": "临时", "slug": f"temp-{uuid.uuid4().hex[:8]}"},
    ).json()["data"]
    author_id = _role_id(client, admin_headers, "author")
    client.put(f"{API}/users/{user['id']}", headers=admin_headers, json={"role_ids": [author_id, role["id"]]})

    resp = client.delete(f"{API}/roles/{role['id']}", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["msg"] == "存在关联用户，无法删除该角色"

    detail = client.get(f"{API}/roles/{role['id']}", headers=admin_headers).json()["data"]
    assert detail["user_count"] == 1


def test_assign_permissions_grants_access(client: TestClient, admin_headers, register_user):
    user, headers = register_user()
    nav_permission = _permission_id(client, admin_headers, "nav-links:manage")
    role = client.post(
        f"{API}/roles",
        headers=admin_headers,
        json={"name": "导航维护", "slug": f"nav-{uuid.uuid4().hex[:8]}"},
    ).json()["data"]

    payload = {"label": "文档", "route": "/docs"}
    assert client.post(f"{API}/nav-links", headers=headers, json=payload).status_code == 403

    bad = client.post(f"{API}/roles/{role['id']}/permissions", headers=admin_headers, json={"permission_ids": 5})
    assert bad.status_code == 400
    assert bad.json()["msg"] == "permission_ids 必须是数组"

    missing = client.post(
        f"{API}/roles/{role['id']}/permissions", headers=admin_headers, json={"permission_ids": [999999]}
    )
    assert missing.status_code == 404

    assigned = client.post(
        f"{API}/roles/{role['id']}/permissions",
        headers=admin_headers,
        json={"permission_ids": [nav_permission]},
    )
    assert assigned.status_code == 200
    assert assigned.json()["data"] == {"role_id": role["id"], "permission_ids": [nav_permission]}

    author_id = _role_id(client, admin_headers, "author")
    client.put(f"{API}/users/{user['id']}", headers=admin_headers, json={"role_ids": [author_id, role["id"]]})

    created = client.post(f"{API}/nav-links", headers=headers, json=payload)
    assert created.status_code == 200, created.text


def test_role_management_requires_permission(client: TestClient, register_user):
    _, headers = register_user()
    resp = client.get(f"{API}/roles", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["msg"] == "缺少权限：roles:manage"

    permissions = client.get(f"{API}/permissions", headers=headers)
    assert permissions.status_code == 403
    assert permissions.json()["msg"] == "需要管理员权限"


def test_permission_crud(client: TestClient, admin_headers):
    slug = f"reports:view-{uuid.uuid4().hex[:8]}"
    created = client.post(
        f"{API}/permissions",
        headers=admin_headers,
        json={"name": "查看报表", "slug": slug, "description": "仪表盘报表"},
    )
    assert created.status_code == 200, created.text
    permission = created.json()["data"]
    assert permission["slug"] == slug

    duplicate = client.post(f"{API}/permissions", headers=admin_headers, json={"name": "重复", "slug": slug})
    assert duplicate.status_code == 409
    assert duplicate.json()["msg"] == "权限标识已存在"

    updated = client.put(
        f"{API}/permissions/{permission['id']}",
        headers=admin_headers,
        json={"name": "查看全部报表"},
    )
    assert updated.json()["data"]["name"] == "查看全部报表"

    detail = client.get(f"{API}/permissions/{permission['id']}", headers=admin_headers)
    assert detail.json()["data"]["description"] == "仪表盘报表"

    deleted = client.delete(f"{API}/permissions/{permission['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    missing = client.get(f"{API}/permissions/{permission['id']}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["msg"] == "权限不存在"
