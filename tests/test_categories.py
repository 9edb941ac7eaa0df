"""分类与子分类接口测试。"""

from fastapi.testclient import TestClient

API = "/api/v1"


def _create_subcategory(client: TestClient, headers, slug: str, category_ids=None) -> dict:
    resp = client.post(
        f"{API}/subcategories",
        headers=headers,
        json={"name": slug.title(), "slug": slug, "category_ids": category_ids},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_seeded_categories_are_public(client: TestClient):
    resp = client.get(f"{API}/categories")
    assert resp.status_code == 200
    body = resp.json()
    assert body["msg"] == "获取分类列表成功"
    slugs = [item["slug"] for item in body["data"]]
    for slug in ("videos", "audios", "photos", "infographics", "documents", "other"):
        assert slug in slugs

    detail = client.get(f"{API}/categories/slug/videos")
    assert detail.status_code == 200
    assert detail.json()["data"]["name"] == "Videos"

    missing = client.get(f"{API}/categories/slug/not-a-category")
    assert missing.status_code == 404
    assert missing.json()["msg"] == "分类不存在"


def test_create_category_with_subcategories(client: TestClient, admin_headers, unique_name):
    sub = _create_subcategory(client, admin_headers, unique_name("tutorials"))
    slug = unique_name("Podcasts")

    resp = client.post(
        f"{API}/categories",
        headers=admin_headers,
        json={"name": "Podcasts", "slug": slug, "menu_order": 9, "subcategory_ids": [sub["id"]]},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert resp.json()["msg"] == "创建分类成功"
    assert data["slug"] == slug.lower()
    assert [item["id"] for item in data["subcategories"]] == [sub["id"]]

    conflict = client.post(
        f"{API}/categories",
        headers=admin_headers,
        json={"name": "Another", "slug": slug.upper()},
    )
    assert conflict.status_code == 409
    assert conflict.json()["msg"] == "分类别名已存在"

    sub_detail = client.get(f"{API}/subcategories/{sub['id']}").json()["data"]
    assert sub_detail["category_ids"] == [data["id"]]


def test_update_category_syncs_subcategories(client: TestClient, admin_headers, unique_name):
    first = _create_subcategory(client, admin_headers, unique_name("first"))
    second = _create_subcategory(client, admin_headers, unique_name("second"))
    category = client.post(
        f"{API}/categories",
        headers=admin_headers,
        json={"name": "Lectures", "slug": unique_name("lectures"), "subcategory_ids": [first["id"]]},
    ).json()["data"]

    resp = client.put(
        f"{API}/categories/{category['id']}",
        headers=admin_headers,
        json={"name": "Lectures 2", "show_on_menu": False, "subcategory_ids": [second["id"]]},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["name"] == "Lectures 2"
    assert data["show_on_menu"] is False
    assert [item["id"] for item in data["subcategories"]] == [second["id"]]

    on_menu = client.get(f"{API}/categories", params={"showOnMenu": "true"}).json()["data"]
    assert category["id"] not in [item["id"] for item in on_menu]

    filtered = client.get(f"{API}/subcategories", params={"categoryId": category["id"]}).json()["data"]
    assert [item["id"] for item in filtered] == [second["id"]]

    missing_sub = client.put(
        f"{API}/categories/{category['id']}",
        headers=admin_headers,
        json={"subcategory_ids": [999999]},
    )
    assert missing_sub.status_code == 404
    assert "999999" in missing_sub.json()["msg"]


def test_category_management_requires_permission(client: TestClient, register_user, unique_name):
    _, headers = register_user()
    resp = client.post(
        f"{API}/categories",
        headers=headers,
        json={"name": "Nope", "slug": unique_name("nope")},
    )
    assert resp.status_code == 403
    assert resp.json()["msg"].startswith("缺少权限")

    anonymous = client.post(f"{API}/categories", json={"name": "Nope", "slug": unique_name("nope")})
    assert anonymous.status_code == 401


def test_delete_category_blocked_by_publications(client: TestClient, admin_headers, unique_name):
    category = client.post(
        f"{API}/categories",
        headers=admin_headers,
        json={"name": "Temp", "slug": unique_name("temp")},
    ).json()["data"]
    publication = client.post(
        f"{API}/publications",
        headers=admin_headers,
        json={"title": "Linked", "slug": unique_name("linked"), "category_id": category["id"], "status": "draft"},
    )
    assert publication.status_code == 200, publication.text

    blocked = client.delete(f"{API}/categories/{category['id']}", headers=admin_headers)
    assert blocked.status_code == 400
    assert blocked.json()["msg"] == "该分类下存在发布内容，无法删除"

    client.delete(f"{API}/publications/{publication.json()['data']['id']}", headers=admin_headers)
    deleted = client.delete(f"{API}/categories/{category['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json()["msg"] == "删除分类成功"
    assert client.get(f"{API}/categories/{category['id']}").status_code == 404


def test_subcategory_crud(client: TestClient, admin_headers, unique_name):
    slug = unique_name("howto")
    created = _create_subcategory(client, admin_headers, slug, category_ids=[1])
    assert created["slug"] == slug
    assert created["category_ids"] == [1]

    conflict = client.post(f"{API}/subcategories", headers=admin_headers, json={"name": "Dup", "slug": slug})
    assert conflict.status_code == 409
    assert conflict.json()["msg"] == "子分类别名已存在"

    updated = client.put(
        f"{API}/subcategories/{created['id']}",
        headers=admin_headers,
        json={"description": "步骤讲解", "category_ids": [1, 2]},
    ).json()["data"]
    assert updated["description"] == "步骤讲解"
    assert updated["category_ids"] == [1, 2]

    deleted = client.delete(f"{API}/subcategories/{created['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get(f"{API}/subcategories/{created['id']}").status_code == 404

    reused = client.post(f"{API}/subcategories", headers=admin_headers, json={"name": "Again", "slug": slug})
    assert reused.status_code == 200
