"""文件接口集成测试：上传、缩略图、访问控制、重命名、移动、共享与删除。"""

from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.main import app
from app.packages.mediahub.core.config import get_settings
from app.packages.mediahub.core.mime import mime_allowed
from app.packages.mediahub.models.file import MediaFile
from app.packages.mediahub.services.file_service import sanitize_file_name

API = "/api/v1"


def _create_folder(client: TestClient, headers, name: str, parent_id=None) -> dict:
    resp = client.post(f"{API}/folders", headers=headers, json={"name": name, "parent_id": parent_id})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_mime_allowed_supports_wildcards():
    assert mime_allowed("image/png", ["image/*"])
    assert mime_allowed("application/pdf", ["image/*", "application/pdf"])
    assert not mime_allowed("video/mp4", ["image/*"])
    assert mime_allowed("anything/else", [])


def test_sanitize_file_name_keeps_extension():
    assert sanitize_file_name("  holiday \n", original_name="IMG_01.JPG") == "holiday.JPG"
    assert sanitize_file_name("report.pdf", original_name="draft.pdf") == "report.pdf"


def test_upload_image_creates_thumbnail(client: TestClient, register_user, upload, png_bytes):
    _, headers = register_user()

    files = upload(headers, ("photo.png", png_bytes, "image/png"))
    assert len(files) == 1
    item = files[0]
    assert item["original_name"] == "photo.png"
    assert item["mime_type"] == "image/png"
    assert item["is_image"] is True
    assert item["filename"].endswith(".png") and item["filename"] != "photo.png"
    assert item["thumbnail_url"] == f"/api/v1/files/{item['id']}/thumbnail"

    thumb = client.get(item["thumbnail_url"], headers=headers)
    assert thumb.status_code == 200
    assert thumb.headers["content-type"] == "image/jpeg"

    download = client.get(item["download_url"], headers=headers)
    assert download.status_code == 200
    assert download.content == png_bytes
    assert "attachment" in download.headers["content-disposition"]

    preview = client.get(f"{API}/files/{item['id']}/preview", headers=headers)
    assert "inline" in preview.headers["content-disposition"]


def test_upload_into_folder_stores_under_folder_dir(client: TestClient, register_user, upload, unique_name):
    _, headers = register_user()
    folder = _create_folder(client, headers, unique_name("docs"))

    item = upload(headers, ("readme.txt", b"hi", "text/plain"), folder_id=folder["id"])[0]
    assert item["folder_id"] == folder["id"]
    assert item["thumbnail_url"] is None
    assert item["file_path"].startswith(f"{folder['id']}/")
    assert (Path(get_settings().upload_directory) / item["file_path"]).exists()

    no_thumb = client.get(f"{API}/files/{item['id']}/thumbnail", headers=headers)
    assert no_thumb.status_code == 404
    assert no_thumb.json()["msg"] == "该文件没有缩略图"


def test_upload_rejects_disallowed_type_and_large_files(client: TestClient, register_user):
    _, headers = register_user()

    bad_type = client.post(
        f"{API}/files/upload",
        headers=headers,
        files=[("files", ("tool.exe", b"MZ", "application/x-msdownload"))],
    )
    assert bad_type.status_code == 415

    too_big = client.post(
        f"{API}/files/upload",
        headers=headers,
        files=[("files", ("big.txt", b"x" * (get_settings().max_file_size + 1), "text/plain"))],
    )
    assert too_big.status_code == 413


def test_file_listing_and_search_scoped_to_user(client: TestClient, register_user, upload, unique_name):
    _, owner_headers = register_user()
    _, other_headers = register_user()
    name = unique_name("quarterly") + ".txt"
    item = upload(owner_headers, (name, b"numbers", "text/plain"))[0]

    own = client.get(f"{API}/files", headers=owner_headers).json()["data"]
    assert item["id"] in [entry["id"] for entry in own["items"]]
    assert own["page"] == 1

    others = client.get(f"{API}/files", headers=other_headers).json()["data"]
    assert item["id"] not in [entry["id"] for entry in others["items"]]

    found = client.get(f"{API}/files/search", headers=owner_headers, params={"q": name[:12]}).json()["data"]
    assert [entry["id"] for entry in found["items"]] == [item["id"]]
    hidden = client.get(f"{API}/files/search", headers=other_headers, params={"q": name[:12]}).json()["data"]
    assert hidden["total"] == 0

    assert client.get(f"{API}/files/search", headers=owner_headers, params={"q": " "}).status_code == 400
    assert client.get(f"{API}/files/{item['id']}", headers=other_headers).status_code == 403


def test_files_in_public_folder_visible_to_everyone(client: TestClient, register_user, upload):
    _, owner_headers = register_user()
    _, other_headers = register_user()
    public = client.get(f"{API}/folders", headers=owner_headers).json()["data"][0]
    item = upload(owner_headers, ("flyer.txt", b"open", "text/plain"), folder_id=public["id"])[0]

    resp = client.get(f"{API}/files/{item['id']}", headers=other_headers)
    assert resp.status_code == 200

    listing = client.get(f"{API}/files", headers=other_headers, params={"folderId": public["id"]}).json()["data"]
    assert item["id"] in [entry["id"] for entry in listing["items"]]


def test_rename_file_owner_only(client: TestClient, register_user, upload, admin_headers):
    _, owner_headers = register_user()
    item = upload(owner_headers, ("old.txt", b"text", "text/plain"))[0]

    renamed = client.put(f"{API}/files/{item['id']}/rename", headers=owner_headers, json={"name": "fresh"})
    assert renamed.status_code == 200
    assert renamed.json()["data"]["original_name"] == "fresh.txt"

    denied = client.put(f"{API}/files/{item['id']}/rename", headers=admin_headers, json={"name": "admin"})
    assert denied.status_code == 403
    assert denied.json()["msg"] == "只能重命名自己上传的文件"


def test_move_files_between_folders(client: TestClient, register_user, upload, unique_name):
    _, headers = register_user()
    _, other_headers = register_user()
    target = _create_folder(client, headers, unique_name("target"))
    first, second = upload(headers, ("a.txt", b"a", "text/plain"), ("b.txt", b"b", "text/plain"))

    moved = client.post(
        f"{API}/files/move", headers=headers, json={"file_ids": [first["id"], second["id"]], "folder_id": target["id"]}
    )
    assert moved.status_code == 200
    assert moved.json()["data"] == {"moved": 2}

    detail = client.get(f"{API}/files/{first['id']}", headers=headers).json()["data"]
    assert detail["folder_id"] == target["id"]
    assert (Path(get_settings().upload_directory) / detail["file_path"]).exists()

    back = client.post(f"{API}/files/move", headers=headers, json={"file_ids": [first["id"]], "folder_id": None})
    assert back.json()["data"] == {"moved": 1}

    missing = client.post(f"{API}/files/move", headers=headers, json={"file_ids": [999999], "folder_id": None})
    assert missing.status_code == 404

    foreign = client.post(f"{API}/files/move", headers=other_headers, json={"file_ids": [second["id"]], "folder_id": None})
    assert foreign.status_code == 403


def test_share_file_and_shared_with_me(client: TestClient, register_user, upload):
    _, owner_headers = register_user()
    other, other_headers = register_user()
    item = upload(owner_headers, ("shared.txt", b"s", "text/plain"))[0]

    resp = client.post(f"{API}/files/{item['id']}/share", headers=owner_headers, json={"user_ids": [other["id"]]})
    assert resp.status_code == 200
    assert resp.json()["data"]["shared_with"] == [
        {"user_id": other["id"], "username": other["username"], "access_level": "read"}
    ]

    shared = client.get(f"{API}/files/shared-with-me", headers=other_headers).json()["data"]
    assert [entry["id"] for entry in shared] == [item["id"]]
    assert shared[0]["access_level"] == "read"
    assert client.get(f"{API}/files/{item['id']}", headers=other_headers).status_code == 200


def test_files_in_shared_folder_are_accessible(client: TestClient, register_user, upload, unique_name):
    _, owner_headers = register_user()
    other, other_headers = register_user()
    folder = _create_folder(client, owner_headers, unique_name("shared-folder"))
    item = upload(owner_headers, ("inside.txt", b"i", "text/plain"), folder_id=folder["id"])[0]

    assert client.get(f"{API}/files/{item['id']}", headers=other_headers).status_code == 403
    client.post(f"{API}/folders/{folder['id']}/share", headers=owner_headers, json={"user_ids": [other["id"]]})
    assert client.get(f"{API}/files/{item['id']}", headers=other_headers).status_code == 200

    # 默认 write 级别的文件夹共享允许上传
    upload(other_headers, ("guest.txt", b"g", "text/plain"), folder_id=folder["id"])


def test_folder_owner_manages_uploads_from_writers(client: TestClient, register_user, upload, unique_name):
    _, owner_headers = register_user("owner")
    writer, writer_headers = register_user("writer")
    _, stranger_headers = register_user("stranger")
    folder = _create_folder(client, owner_headers, unique_name("dropbox"))
    client.post(f"{API}/folders/{folder['id']}/share", headers=owner_headers, json={"user_ids": [writer["id"]]})
    item = upload(writer_headers, ("w.txt", b"w", "text/plain"), folder_id=folder["id"])[0]

    listing = client.get(f"{API}/files", headers=owner_headers, params={"folderId": folder["id"]}).json()["data"]
    assert [entry["id"] for entry in listing["items"]] == [item["id"]]
    assert client.get(f"{API}/files/{item['id']}", headers=owner_headers).status_code == 200
    assert client.get(f"{API}/files/{item['id']}/download", headers=owner_headers).content == b"w"

    assert client.get(f"{API}/files/{item['id']}", headers=stranger_headers).status_code == 403
    assert client.delete(f"{API}/files/{item['id']}", headers=stranger_headers).status_code == 403

    assert client.delete(f"{API}/files/{item['id']}", headers=owner_headers).status_code == 200
    assert client.delete(f"{API}/folders/{folder['id']}", headers=owner_headers).status_code == 200


def test_delete_file_removes_disk_content(client: TestClient, register_user, upload, png_bytes, admin_headers):
    _, owner_headers = register_user()
    _, other_headers = register_user()
    item = upload(owner_headers, ("gone.png", png_bytes, "image/png"))[0]
    stored = Path(get_settings().upload_directory) / item["file_path"]
    assert stored.exists()

    assert client.delete(f"{API}/files/{item['id']}", headers=other_headers).status_code == 403

    resp = client.delete(f"{API}/files/{item['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert not stored.exists()
    assert client.get(f"{API}/files/{item['id']}", headers=owner_headers).status_code == 404


def _stored_files() -> set[Path]:
    settings = get_settings()
    roots = (Path(settings.upload_directory), Path(settings.thumbnail_directory))
    return {path for root in roots if root.exists() for path in root.rglob("*") if path.is_file()}


def test_failed_commit_removes_written_files(client: TestClient, register_user, png_bytes, unique_name, monkeypatch):
    _, headers = register_user()
    name = unique_name("rollback")
    before = _stored_files()
    original_commit = Session.commit

    def failing_commit(session):
        if any(isinstance(obj, MediaFile) for obj in session.new):
            raise OperationalError("INSERT INTO files", {}, Exception("database is locked"))
        return original_commit(session)

    monkeypatch.setattr(Session, "commit", failing_commit)
    failing_client = TestClient(app, raise_server_exceptions=False)
    resp = failing_client.post(
        f"{API}/files/upload",
        headers=headers,
        files=[("files", (f"{name}.png", png_bytes, "image/png")), ("files", (f"{name}.txt", b"hi", "text/plain"))],
    )
    assert resp.status_code == 500
    assert resp.json()["msg"] == "服务器内部错误"
    assert _stored_files() == before

    monkeypatch.setattr(Session, "commit", original_commit)
    found = client.get(f"{API}/files/search", headers=headers, params={"q": name}).json()["data"]
    assert found["total"] == 0
