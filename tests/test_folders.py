"""文件夹接口集成测试：目录树、可见性、移动与共享。"""

from fastapi.testclient import TestClient

API = "/api/v1"


def _create_folder(client: TestClient, headers, name: str, parent_id=None, **extra) -> dict:
    resp = client.post(f"{API}/folders", headers=headers, json={"name": name, "parent_id": parent_id, **extra})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_public_folder_seeded_and_listed_first(client: TestClient, register_user):
    _, headers = register_user()

    resp = client.get(f"{API}/folders", headers=headers)
    assert resp.status_code == 200
    folders = resp.json()["data"]
    assert folders[0]["name"] == "Public"
    assert folders[0]["is_public"] is True
    assert folders[0]["access_type"] == "public"


def test_create_nested_folders_and_tree(client: TestClient, register_user, unique_name):
    _, headers = register_user()
    root = _create_folder(client, headers, unique_name("projects"))
    child = _create_folder(client, headers, "drafts", parent_id=root["id"])

    assert child["parent_id"] == root["id"]
    assert root["is_owner"] is True
    assert root["access_type"] == "private"

    tree = client.get(f"{API}/folders/tree", headers=headers)
    assert tree.status_code == 200
    nodes = {node["id"]: node for node in tree.json()["data"]["folders"]}
    assert [sub["id"] for sub in nodes[root["id"]]["subfolders"]] == [child["id"]]

    subtree = client.get(f"{API}/folders/tree", headers=headers, params={"parentId": root["id"]})
    assert subtree.json()["data"]["folder"]["id"] == root["id"]
    assert [node["id"] for node in subtree.json()["data"]["folders"]] == [child["id"]]

    detail = client.get(f"{API}/folders/{child['id']}", headers=headers)
    assert [item["id"] for item in detail.json()["data"]["breadcrumb"]] == [root["id"], child["id"]]


def test_folder_name_validation(client: TestClient, register_user, unique_name):
    _, headers = register_user()

    blank = client.post(f"{API}/folders", headers=headers, json={"name": "   "})
    assert blank.status_code == 400
    assert blank.json()["msg"] == "文件夹名称不能为空"

    illegal = client.post(f"{API}/folders", headers=headers, json={"name": "a/b"})
    assert illegal.status_code == 400
    assert illegal.json()["msg"] == "文件夹名称包含非法字符"

    name = unique_name("dup")
    _create_folder(client, headers, name)
    duplicate = client.post(f"{API}/folders", headers=headers, json={"name": name})
    assert duplicate.status_code == 409

    too_long = client.post(f"{API}/folders", headers=headers, json={"name": "a" * 256})
    assert too_long.status_code == 400
    assert too_long.json()["msg"] == "文件夹名称不能超过 255 个字符"


def test_sibling_names_are_case_insensitive(client: TestClient, register_user, unique_name):
    _, headers = register_user()
    parent = _create_folder(client, headers, unique_name("cases"))
    original = _create_folder(client, headers, "Foo", parent_id=parent["id"])

    duplicate = client.post(f"{API}/folders", headers=headers, json={"name": "foo", "parent_id": parent["id"]})
    assert duplicate.status_code == 409
    assert duplicate.json()["msg"] == "同级目录下已存在同名文件夹"

    same_name = client.put(f"{API}/folders/{original['id']}", headers=headers, json={"name": "Foo"})
    assert same_name.status_code == 200, same_name.text
    recased = client.put(f"{API}/folders/{original['id']}", headers=headers, json={"name": "FOO"})
    assert recased.status_code == 200
    assert recased.json()["data"]["name"] == "FOO"

    sibling = _create_folder(client, headers, "Bar", parent_id=parent["id"])
    clash = client.put(f"{API}/folders/{sibling['id']}", headers=headers, json={"name": "foo"})
    assert clash.status_code == 409


def test_private_folders_hidden_from_other_users(client: TestClient, register_user, unique_name):
    _, owner_headers = register_user()
    _, other_headers = register_user()
    folder = _create_folder(client, owner_headers, unique_name("secret"))

    listing = client.get(f"{API}/folders", headers=other_headers)
    assert folder["id"] not in [item["id"] for item in listing.json()["data"]]

    assert client.get(f"{API}/folders/{folder['id']}", headers=other_headers).status_code == 403


def test_share_folder_grants_visibility(client: TestClient, register_user, unique_name):
    _, owner_headers = register_user()
    other, other_headers = register_user()
    folder = _create_folder(client, owner_headers, unique_name("team"))

    share = client.post(
        f"{API}/folders/{folder['id']}/share",
        headers=owner_headers,
        json={"user_ids": [other["id"]], "access_level": "read"},
    )
    assert share.status_code == 200
    assert share.json()["data"]["shared_with"][0]["access_level"] == "read"

    listing = client.get(f"{API}/folders", headers=other_headers).json()["data"]
    shared = next(item for item in listing if item["id"] == folder["id"])
    assert shared["access_type"] == "shared"
    assert shared["access_level"] == "read"

    shared_with_me = client.get(f"{API}/folders/shared-with-me", headers=other_headers).json()["data"]
    assert folder["id"] in [item["id"] for item in shared_with_me]

    read_only = client.post(
        f"{API}/folders", headers=other_headers, json={"name": "inside", "parent_id": folder["id"]}
    )
    assert read_only.status_code == 403


def test_owner_sees_subfolders_created_by_writers(client: TestClient, register_user, upload, unique_name):
    _, owner_headers = register_user("owner")
    writer, writer_headers = register_user("writer")
    folder = _create_folder(client, owner_headers, unique_name("inbox"))
    client.post(
        f"{API}/folders/{folder['id']}/share",
        headers=owner_headers,
        json={"user_ids": [writer["id"]], "access_level": "write"},
    )

    sub = _create_folder(client, writer_headers, "from-writer", parent_id=folder["id"])
    upload(writer_headers, ("w.txt", b"w", "text/plain"), folder_id=folder["id"])

    listing = client.get(f"{API}/folders", headers=owner_headers, params={"parentId": folder["id"]}).json()["data"]
    assert [item["id"] for item in listing] == [sub["id"]]
    assert client.get(f"{API}/folders/{sub['id']}", headers=owner_headers).status_code == 200

    tree = client.get(f"{API}/folders/tree", headers=owner_headers).json()["data"]
    node = next(item for item in tree["folders"] if item["id"] == folder["id"])
    assert [item["id"] for item in node["subfolders"]] == [sub["id"]]
    assert [item["original_name"] for item in node["files"]] == ["w.txt"]

    blocked = client.delete(f"{API}/folders/{folder['id']}", headers=owner_headers)
    assert blocked.json()["msg"] == "文件夹包含子文件夹，无法删除"
    assert client.delete(f"{API}/folders/{sub['id']}", headers=owner_headers).status_code == 200


def test_share_requires_owner_and_targets(client: TestClient, register_user, unique_name):
    _, owner_headers = register_user()
    other, other_headers = register_user()
    folder = _create_folder(client, owner_headers, unique_name("mine"))

    empty = client.post(f"{API}/folders/{folder['id']}/share", headers=owner_headers, json={"user_ids": []})
    assert empty.status_code == 400

    missing = client.post(f"{API}/folders/{folder['id']}/share", headers=owner_headers, json={"user_ids": [999999]})
    assert missing.status_code == 404

    not_owner = client.post(
        f"{API}/folders/{folder['id']}/share", headers=other_headers, json={"user_ids": [other["id"]]}
    )
    assert not_owner.status_code == 403


def test_move_folder_rejects_cycles(client: TestClient, register_user, unique_name):
    _, headers = register_user()
    parent = _create_folder(client, headers, unique_name("parent"))
    child = _create_folder(client, headers, unique_name("child"), parent_id=parent["id"])
    other = _create_folder(client, headers, unique_name("other"))

    cycle = client.put(f"{API}/folders/{parent['id']}", headers=headers, json={"parent_id": child["id"]})
    assert cycle.status_code == 400

    moved = client.put(f"{API}/folders/{child['id']}", headers=headers, json={"parent_id": other["id"]})
    assert moved.status_code == 200
    assert moved.json()["data"]["parent_id"] == other["id"]

    to_root = client.put(f"{API}/folders/{child['id']}", headers=headers, json={"parent_id": None})
    assert to_root.status_code == 200
    assert to_root.json()["data"]["parent_id"] is None

    renamed = client.put(f"{API}/folders/{other['id']}", headers=headers, json={"name": unique_name("renamed")})
    assert renamed.status_code == 200
    assert renamed.json()["data"]["parent_id"] is None


def test_delete_folder_only_when_empty(client: TestClient, register_user, unique_name, upload):
    _, headers = register_user()
    parent = _create_folder(client, headers, unique_name("full"))
    child = _create_folder(client, headers, "nested", parent_id=parent["id"])

    has_child = client.delete(f"{API}/folders/{parent['id']}", headers=headers)
    assert has_child.status_code == 400
    assert has_child.json()["msg"] == "文件夹包含子文件夹，无法删除"

    upload(headers, ("note.txt", b"hello", "text/plain"), folder_id=child["id"])
    has_files = client.delete(f"{API}/folders/{child['id']}", headers=headers)
    assert has_files.status_code == 400
    assert has_files.json()["msg"] == "文件夹不为空，无法删除"

    empty = _create_folder(client, headers, unique_name("empty"))
    assert client.delete(f"{API}/folders/{empty['id']}", headers=headers).status_code == 200
    assert client.get(f"{API}/folders/{empty['id']}", headers=headers).status_code == 404


def test_folder_listing_is_cached_per_user(client: TestClient, register_user, unique_name, fresh_cache):
    user, headers = register_user()
    client.get(f"{API}/folders", headers=headers)

    key = fresh_cache.build_key("folders", "root", user_id=user["id"])
    assert fresh_cache.get(key) is not None

    _create_folder(client, headers, unique_name("evict"))
    assert fresh_cache.get(key) is None
