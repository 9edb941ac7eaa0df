"""发布内容测试：创建、状态流转、审核、可见范围以及公开访问。"""

from fastapi.testclient import TestClient

API = "/api/v1"
VIDEOS_CATEGORY_ID = 1


def _create(client: TestClient, headers, slug: str, **fields) -> dict:
    payload = {"title": fields.pop("title", slug.replace("-", " ").title()), "slug": slug}
    payload.setdefault("category_id", VIDEOS_CATEGORY_ID)
    payload.update(fields)
    resp = client.post(f"{API}/publications", headers=headers, json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def _approve(client: TestClient, headers, publication_id: int) -> dict:
    resp = client.post(f"{API}/publications/{publication_id}/approve", headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_author_creates_pending_publication(client: TestClient, register_user, unique_name):
    user, headers = register_user()
    slug = unique_name("first-post")

    data = _create(client, headers, slug, description="简介", is_featured=True)
    assert data["status"] == "pending"
    assert data["creator"]["id"] == user["id"]
    assert [author["id"] for author in data["authors"]] == [user["id"]]
    assert data["category"]["slug"] == "videos"
    assert data["is_featured"] is True
    assert data["has_comments"] is True
    assert data["views"] == 0

    duplicate = client.post(
        f"{API}/publications",
        headers=headers,
        json={"title": "Again", "slug": slug.upper(), "category_id": VIDEOS_CATEGORY_ID},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["msg"] == "发布内容别名已存在"


def test_author_cannot_create_approved_publication(client: TestClient, register_user, unique_name):
    _, headers = register_user()
    resp = client.post(
        f"{API}/publications",
        headers=headers,
        json={"title": "Sneaky", "slug": unique_name("sneaky"), "category_id": VIDEOS_CATEGORY_ID, "status": "approved"},
    )
    assert resp.status_code == 400
    assert resp.json()["msg"] == "新建内容只能保存为草稿或提交审核"

    unknown_category = client.post(
        f"{API}/publications",
        headers=headers,
        json={"title": "Lost", "slug": unique_name("lost"), "category_id": 999999},
    )
    assert unknown_category.status_code == 404
    assert unknown_category.json()["msg"] == "分类不存在"


def test_publication_workflow(client: TestClient, admin_headers, register_user, unique_name):
    _, headers = register_user()
    item = _create(client, headers, unique_name("workflow"), status="draft")
    assert item["status"] == "draft"
    url = f"{API}/publications/{item['id']}"

    early = client.post(f"{url}/approve", headers=admin_headers)
    assert early.status_code == 400
    assert early.json()["msg"] == "不允许的状态流转：draft -> approved"

    submitted = client.put(url, headers=headers, json={"status": "pending"}).json()["data"]
    assert submitted["status"] == "pending"

    approved = _approve(client, admin_headers, item["id"])
    assert approved["status"] == "approved"
    assert approved["approved_by"]["username"] == "admin"
    assert approved["publication_date"] is not None

    again = client.post(f"{url}/approve", headers=admin_headers)
    assert again.status_code == 400
    assert again.json()["msg"] == "该内容已审核通过"

    edited = client.put(url, headers=headers, json={"title": "Edited title"}).json()["data"]
    assert edited["title"] == "Edited title"
    assert edited["status"] == "pending"

    no_reason = client.post(f"{url}/reject", headers=admin_headers, json={"reason": "  "})
    assert no_reason.status_code == 400
    assert no_reason.json()["msg"] == "请填写拒绝原因"

    rejected = client.post(f"{url}/reject", headers=admin_headers, json={"reason": "封面不清晰"})
    assert rejected.status_code == 200
    assert rejected.json()["data"]["status"] == "rejected"
    assert rejected.json()["data"]["rejection_reason"] == "封面不清晰"

    resubmitted = client.put(url, headers=headers, json={"status": "pending"}).json()["data"]
    assert resubmitted["status"] == "pending"

    approved = _approve(client, admin_headers, item["id"])
    assert approved["rejection_reason"] is None

    withdrawn = client.post(f"{url}/reject", headers=admin_headers, json={"reason": "内容过期"})
    assert withdrawn.json()["data"]["status"] == "rejected"


def test_review_restrictions(client: TestClient, admin_headers, register_user, unique_name):
    _, headers = register_user()
    item = _create(client, headers, unique_name("review"))
    url = f"{API}/publications/{item['id']}"

    forbidden = client.post(f"{url}/approve", headers=headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["msg"] == "缺少权限：posts:approve"

    self_approve = client.put(url, headers=headers, json={"status": "approved"})
    assert self_approve.status_code == 403
    assert self_approve.json()["msg"] == "只有审核人员可以审核发布内容"

    reject_via_update = client.put(url, headers=admin_headers, json={"status": "rejected"})
    assert reject_via_update.status_code == 400
    assert reject_via_update.json()["msg"] == "请使用拒绝接口并填写拒绝原因"

    approve_via_update = client.put(url, headers=admin_headers, json={"status": "approved"})
    assert approve_via_update.status_code == 200
    assert approve_via_update.json()["data"]["status"] == "approved"

    back_to_draft = client.put(url, headers=admin_headers, json={"status": "draft"})
    assert back_to_draft.status_code == 400


def test_publications_are_scoped_to_their_authors(client: TestClient, admin_headers, register_user, unique_name):
    owner, owner_headers = register_user("owner")
    co_author, co_headers = register_user("coauthor")
    _, stranger_headers = register_user("stranger")

    shared = _create(client, owner_headers, unique_name("shared"), author_ids=[owner["id"], co_author["id"]])
    _create(client, owner_headers, unique_name("solo"), status="draft")

    assert client.get(f"{API}/publications/{shared['id']}", headers=co_headers).status_code == 200
    hidden = client.get(f"{API}/publications/{shared['id']}", headers=stranger_headers)
    assert hidden.status_code == 403
    assert hidden.json()["msg"] == "无权查看该发布内容"

    listing = client.get(f"{API}/publications", headers=owner_headers).json()
    assert listing["meta"]["total"] == 2
    assert {item["creator"]["id"] for item in listing["data"]} == {owner["id"]}

    drafts = client.get(f"{API}/publications", headers=owner_headers, params={"status": "draft"}).json()
    assert drafts["meta"]["total"] == 1

    counts = client.get(f"{API}/publications/counts", headers=owner_headers).json()["data"]
    assert counts == {"draft": 1, "pending": 1, "approved": 0, "rejected": 0, "total": 2}

    assert client.get(f"{API}/publications", headers=stranger_headers).json()["meta"]["total"] == 0

    edit = client.put(f"{API}/publications/{shared['id']}", headers=stranger_headers, json={"title": "Mine"})
    assert edit.status_code == 403

    everything = client.get(f"{API}/publications/counts", headers=admin_headers).json()["data"]
    assert everything["total"] >= 2

    bad_status = client.get(f"{API}/publications", headers=owner_headers, params={"status": "archived"})
    assert bad_status.status_code == 400
    assert bad_status.json()["msg"] == "未知的发布状态"


def test_attachments_require_file_access(client: TestClient, register_user, upload, unique_name):
    _, headers = register_user()
    _, other_headers = register_user()
    mine = upload(headers, ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"))[0]
    theirs = upload(other_headers, ("secret.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"))[0]

    item = _create(client, headers, unique_name("with-media"), attachment_ids=[mine["id"]])
    assert [attachment["file_id"] for attachment in item["attachments"]] == [mine["id"]]
    assert item["attachments"][0]["file"]["mime_type"] == "video/mp4"

    resp = client.post(
        f"{API}/publications",
        headers=headers,
        json={
            "title": "Borrowed",
            "slug": unique_name("borrowed"),
            "category_id": VIDEOS_CATEGORY_ID,
            "attachment_ids": [theirs["id"]],
        },
    )
    assert resp.status_code == 403
    assert resp.json()["msg"] == "无权使用文件：secret.mp4"


def test_public_listing_only_shows_approved(client: TestClient, admin_headers, register_user, unique_name):
    _, headers = register_user()
    keyword = unique_name("zebra")
    item = _create(client, headers, unique_name("public"), title=f"About {keyword}")

    search = client.get(f"{API}/public/publications/search", params={"q": keyword})
    assert search.status_code == 200
    assert search.json()["data"] == []

    assert client.get(f"{API}/public/publications/{item['slug']}").status_code == 404

    _approve(client, admin_headers, item["id"])

    found = client.get(f"{API}/public/publications/search", params={"q": keyword}).json()
    assert [entry["id"] for entry in found["data"]] == [item["id"]]
    assert found["meta"]["total"] == 1

    by_category = client.get(f"{API}/public/publications", params={"category": "videos", "limit": 100}).json()
    assert item["id"] in [entry["id"] for entry in by_category["data"]]

    unknown = client.get(f"{API}/public/publications", params={"category": "nope"})
    assert unknown.status_code == 404

    empty = client.get(f"{API}/public/publications/search", params={"q": "  "})
    assert empty.status_code == 400
    assert empty.json()["msg"] == "搜索关键字不能为空"


def test_public_listing_cache_is_evicted_on_change(client: TestClient, admin_headers, unique_name):
    keyword = unique_name("cached")
    item = _create(client, admin_headers, unique_name("cached-post"), title=f"Cached {keyword}", status="approved")

    first = client.get(f"{API}/public/publications/search", params={"q": keyword}).json()["data"]
    assert first[0]["title"] == f"Cached {keyword}"

    client.put(f"{API}/publications/{item['id']}", headers=admin_headers, json={"title": f"Renamed {keyword}"})

    second = client.get(f"{API}/public/publications/search", params={"q": keyword}).json()["data"]
    assert second[0]["title"] == f"Renamed {keyword}"


def test_featured_and_leaderboard(client: TestClient, admin_headers, unique_name):
    featured = _create(client, admin_headers, unique_name("featured"), status="approved", is_featured=True)
    ranked = _create(client, admin_headers, unique_name("ranked"), status="approved", is_leaderboard=True)

    featured_ids = [entry["id"] for entry in client.get(f"{API}/public/publications/featured?limit=100").json()["data"]]
    assert featured["id"] in featured_ids
    assert ranked["id"] not in featured_ids

    for _ in range(3):
        client.get(f"{API}/public/publications/{ranked['slug']}")
    board = client.get(f"{API}/public/publications/leaderboard?limit=100").json()["data"]
    assert ranked["id"] in [entry["id"] for entry in board]
    assert featured["id"] not in [entry["id"] for entry in board]
    views = [entry["views"] for entry in board]
    assert views == sorted(views, reverse=True)


def test_views_and_unique_hits(client: TestClient, admin_headers, register_user, unique_name):
    item = _create(client, admin_headers, unique_name("counted"), status="approved")
    url = f"{API}/public/publications/{item['slug']}"
    _, reader_headers = register_user("reader")

    first = client.get(url, headers=reader_headers).json()["data"]
    assert first["views"] == 1
    assert first["unique_hits"] == 1

    second = client.get(url, headers=reader_headers).json()["data"]
    assert second["views"] == 2
    assert second["unique_hits"] == 1

    anonymous = client.get(url, headers={"User-Agent": "pytest-browser"}).json()["data"]
    assert anonymous["views"] == 3
    assert anonymous["unique_hits"] == 2


def test_delete_publication(client: TestClient, admin_headers, register_user, unique_name):
    _, headers = register_user()
    _, other_headers = register_user()
    item = _create(client, headers, unique_name("to-delete"))

    forbidden = client.delete(f"{API}/publications/{item['id']}", headers=other_headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["msg"] == "只能删除自己创建的发布内容"

    deleted = client.delete(f"{API}/publications/{item['id']}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"{API}/publications/{item['id']}", headers=admin_headers).status_code == 404
