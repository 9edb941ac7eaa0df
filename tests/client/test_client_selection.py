"""文件选择状态的单元测试。"""

import pytest

from app.packages.mediahub.client import FileSelection


def _file(file_id: int, mime_type: str = "image/png") -> dict:
    return {"id": file_id, "original_name": f"file-{file_id}", "mime_type": mime_type}


def test_manager_click_replaces_selection():
    selection = FileSelection()
    assert selection.click(_file(1))
    assert selection.click(_file(2))
    assert selection.selected_ids == [2]
    assert selection.selection_limit is None


def test_single_picker_is_limited_to_one():
    selection = FileSelection("picker", selection_limit=5)
    assert selection.selection_limit == 1
    selection.click(_file(1))
    selection.click(_file(2))
    assert selection.selected_ids == [2]
    assert selection.is_full
    assert not selection.add(_file(3))


def test_multi_picker_toggles_within_limit():
    selection = FileSelection("picker", multiple=True, selection_limit=2)
    assert selection.click(_file(1))
    assert selection.click(_file(2))
    assert not selection.click(_file(3))
    assert selection.selected_ids == [1, 2]

    assert selection.click(_file(1))
    assert selection.selected_ids == [2]
    assert selection.click(_file(3))
    assert selection.selected_ids == [2, 3]


def test_mime_filters_reject_other_types():
    selection = FileSelection("picker", multiple=True, mime_filters=["audio/*", " application/pdf "])
    assert selection.accepts(_file(1, "audio/mpeg"))
    assert selection.accepts(_file(2, "application/pdf"))
    assert not selection.click(_file(3, "video/mp4"))
    assert selection.count == 0


def test_add_uploaded_replaces_for_single_selection():
    selection = FileSelection("picker", mime_filters=["image/*"])
    selection.click(_file(1))
    added = selection.add_uploaded([_file(2, "text/plain"), _file(3), _file(4)])
    assert [item["id"] for item in added] == [3]
    assert selection.selected_ids == [3]


def test_add_uploaded_respects_limit_for_multiple_selection():
    selection = FileSelection("picker", multiple=True, selection_limit=3)
    selection.click(_file(1))
    added = selection.add_uploaded([_file(2), _file(3), _file(4)])
    assert [item["id"] for item in added] == [2, 3]
    assert selection.selected_ids == [1, 2, 3]
    assert selection.add_uploaded([]) == []


def test_picker_session_cancel_restores_previous_selection():
    selection = FileSelection("picker", multiple=True)
    selection.replace([_file(1), _file(2)])
    selection.begin()
    selection.remove([1])
    selection.click(_file(5))
    selection.cancel()
    assert selection.selected_ids == [1, 2]

    selection.begin()
    selection.click(_file(7))
    confirmed = selection.confirm()
    assert [item["id"] for item in confirmed] == [1, 2, 7]
    selection.cancel()
    assert selection.selected_ids == [1, 2, 7]

    selection.clear()
    assert selection.count == 0


def test_invalid_configuration():
    with pytest.raises(ValueError):
        FileSelection(selection_limit=0)
    with pytest.raises(ValueError):
        FileSelection("gallery")
