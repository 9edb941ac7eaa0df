"""文件管理器视图状态测试。"""

import pytest

from app.packages.mediahub.client import FileManagerView


def test_folder_navigation_and_search(register_user, api_client, unique_name):
    _, headers = register_user()
    view = FileManagerView(api_client(headers))
    assert view.load()

    name = unique_name("albums")
    folder = view.create_folder(name)
    assert folder["name"] == name
    assert view.notifications[-1].message == "文件夹创建成功"
    assert name in [item["name"] for item in view.visible_folders()]

    view.set_search(name.upper())
    assert [item["name"] for item in view.visible_folders()] == [name]

    view.open_folder(folder["id"])
    assert view.search_query == ""
    assert view.current_folder == folder["id"]

    sub = view.create_folder("summer")
    assert sub["parent_id"] == folder["id"]
    view.open_folder(sub["id"])
    assert [item["name"] for item in view.breadcrumb] == [name, "summer"]

    view.navigate_breadcrumb(0)
    assert view.current_folder == folder["id"]
    view.go_up()
    assert view.current_folder is None
    view.open_folder(sub["id"])
    view.navigate_breadcrumb(-1)
    assert view.current_folder is None

    view.set_view_mode("list")
    assert view.view_mode == "list"
    with pytest.raises(ValueError):
        view.set_view_mode("cards")


def test_upload_selects_new_files(register_user, api_client, unique_name):
    _, headers = register_user()
    view = FileManagerView(api_client(headers))
    view.load()
    folder = view.create_folder(unique_name("uploads"))
    view.open_folder(folder["id"])

    created = view.upload([("a.txt", b"a", "text/plain"), ("b.txt", b"b", "text/plain")])
    assert len(created) == 2
    assert view.notifications[-1].message == "已上传 2 个文件"
    assert view.selection.selected_ids == [item["id"] for item in created]
    assert {item["original_name"] for item in view.visible_files()} == {"a.txt", "b.txt"}

    view.set_search("B.TXT")
    assert [item["original_name"] for item in view.visible_files()] == ["b.txt"]


def test_single_picker_keeps_first_upload(register_user, api_client):
    _, headers = register_user()
    view = FileManagerView(api_client(headers), mode="picker", mime_filters=["image/*"])
    view.load()

    created = view.upload([("doc.txt", b"x", "text/plain"), ("one.gif", b"GIF89a", "image/gif")])
    assert len(created) == 2
    assert view.selection.selected_ids == [created[1]["id"]]

    assert not view.click_file(created[0])
    assert view.click_file(created[1])


def test_rename_and_move_selected(register_user, api_client, unique_name):
    _, headers = register_user()
    view = FileManagerView(api_client(headers))
    view.load()
    target = view.create_folder(unique_name("archive"))
    created = view.upload([("draft.txt", b"d", "text/plain")])
    file_id = created[0]["id"]

    renamed = view.rename_file(file_id, "final")
    assert renamed["original_name"] == "final.txt"
    assert view.selection.selected_files[0]["original_name"] == "final.txt"

    assert view.move_selected(target["id"])
    assert view.selection.count == 0
    assert [item["id"] for item in view.tree.files_in(target["id"])] == [file_id]
    assert view.tree.files_in() == []

    assert not view.move_selected(None)
    assert view.notifications[-1].message == "请先选择要移动的文件"

    assert view.rename_folder(target["id"], "archive-renamed")["name"] == "archive-renamed"


def test_move_folder_refuses_cycles(register_user, api_client, unique_name):
    _, headers = register_user()
    view = FileManagerView(api_client(headers))
    view.load()
    outer = view.create_folder(unique_name("outer"))
    inner = view.create_folder(unique_name("inner"))

    assert view.move_folder(inner["id"], outer["id"])
    assert [item["id"] for item in view.tree.children(outer["id"])] == [inner["id"]]
    assert inner["id"] not in [item["id"] for item in view.tree.children()]

    assert not view.move_folder(outer["id"], inner["id"])
    assert view.error == "不能将文件夹移动到自身或其子文件夹中"

    assert view.move_folder(inner["id"], None)
    assert inner["id"] in [item["id"] for item in view.tree.children()]


def test_errors_become_notifications(register_user, api_client, unique_name):
    _, headers = register_user()
    view = FileManagerView(api_client(headers))
    view.load()
    name = unique_name("dup")
    folder = view.create_folder(name)

    assert view.create_folder(name) is None
    assert view.error == "同级目录下已存在同名文件夹"
    assert view.notifications[-1].level == "error"
    assert not view.loading

    view.open_folder(folder["id"])
    view.upload([("keep.txt", b"k", "text/plain")])
    view.go_up()
    assert not view.delete_folder(folder["id"])
    assert view.error == "文件夹不为空，无法删除"

    view.clear_notifications()
    assert view.notifications == [] and view.error is None


def test_delete_files_reports_partial_failures(register_user, api_client):
    _, headers = register_user()
    view = FileManagerView(api_client(headers))
    view.load()
    created = view.upload([("one.txt", b"1", "text/plain"), ("two.txt", b"2", "text/plain")])
    ids = [item["id"] for item in created]

    deleted = view.delete_files([ids[0], 999999])
    assert deleted == [ids[0]]
    assert view.selection.selected_ids == [ids[1]]
    assert view.error.startswith("部分文件删除失败：999999")
    assert [item.level for item in view.notifications[-2:]] == ["success", "error"]
    assert [item["id"] for item in view.tree.files_in()] == [ids[1]]

    assert view.delete_selected() == [ids[1]]
    assert view.tree.files_in() == []


def test_share_with_another_user(register_user, api_client, unique_name):
    _, headers = register_user()
    friend, friend_headers = register_user("friend")
    view = FileManagerView(api_client(headers))
    view.load()
    folder = view.create_folder(unique_name("shared"))
    file = view.upload([("note.txt", b"n", "text/plain")])[0]

    assert view.share_folder(folder["id"], [friend["id"]], "read")
    assert view.share_file(file["id"], [friend["id"]])
    assert view.notifications[-1].message == "文件共享成功"

    friend_view = FileManagerView(api_client(friend_headers))
    friend_view.load()
    assert folder["id"] in [item["id"] for item in friend_view.visible_folders()]

    assert not view.share_file(file["id"], [])
    assert view.notifications[-1].level == "error"
