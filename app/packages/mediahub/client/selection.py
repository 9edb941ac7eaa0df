"""文件选择状态：管理模式与选择器模式下的点击、多选和数量限制。"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from app.packages.mediahub.core.enums import SelectionModeEnum
from app.packages.mediahub.core.mime import mime_allowed


class FileSelection:
    """按选中顺序保存文件；选择器单选模式下数量上限固定为 1。"""

    def __init__(
        self,
        mode: str = SelectionModeEnum.MANAGER.value,
        *,
        multiple: bool = False,
        selection_limit: Optional[int] = None,
        mime_filters: Optional[Sequence[str]] = None,
    ) -> None:
        self.mode = SelectionModeEnum(mode).value
        if selection_limit is not None and selection_limit < 1:
            raise ValueError("selection_limit must be at least 1")
        self.multiple = multiple
        if self.is_picker and not multiple:
            selection_limit = 1
        self.selection_limit = selection_limit
        self.mime_filters = [item.strip().lower() for item in (mime_filters or []) if item.strip()]
        self._selected: dict[int, dict[str, Any]] = {}
        self._snapshot: Optional[dict[int, dict[str, Any]]] = None

    @property
    def is_picker(self) -> bool:
        return self.mode == SelectionModeEnum.PICKER.value

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    @property
    def selected_ids(self) -> list[int]:
        return list(self._selected)

    @property
    def selected_files(self) -> list[dict[str, Any]]:
        return list(self._selected.values())

    @property
    def count(self) -> int:
        return len(self._selected)

    @property
    def is_full(self) -> bool:
        return self.selection_limit is not None and self.count >= self.selection_limit

    def is_selected(self, file_id: int) -> bool:
        return file_id in self._selected

    def accepts(self, file: dict[str, Any]) -> bool:
        return mime_allowed(file.get("mime_type") or "", self.mime_filters)

    # ------------------------------------------------------------------
    # 变更
    # ------------------------------------------------------------------

    def click(self, file: dict[str, Any]) -> bool:
        """单击文件：管理模式和选择器单选替换选中项，选择器多选切换选中。"""
        if not self.accepts(file):
            return False
        if self.is_picker and self.multiple:
            return self.toggle(file)
        self._selected = {file["id"]: file}
        return True

    def toggle(self, file: dict[str, Any]) -> bool:
        """加入或移出选中集合，返回选中状态是否发生了变化。"""
        if file["id"] in self._selected:
            del self._selected[file["id"]]
            return True
        return self.add(file)

    def add(self, file: dict[str, Any]) -> bool:
        if not self.accepts(file) or file["id"] in self._selected or self.is_full:
            return False
        self._selected[file["id"]] = file
        return True

    def replace(self, files: Iterable[dict[str, Any]]) -> None:
        self._selected = {}
        for file in files:
            self.add(file)

    def add_uploaded(self, files: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        """上传完成后自动选中新文件；单选时替换为第一个可接受的文件。"""
        accepted = [file for file in files if self.accepts(file)]
        if not accepted:
            return []
        if self.selection_limit == 1:
            self._selected = {accepted[0]["id"]: accepted[0]}
            return [accepted[0]]
        return [file for file in accepted if self.add(file)]

    def remove(self, file_ids: Iterable[int]) -> None:
        for file_id in file_ids:
            self._selected.pop(file_id, None)

    def clear(self) -> None:
        self._selected = {}

    # ------------------------------------------------------------------
    # 选择器会话
    # ------------------------------------------------------------------

    def begin(self) -> None:
        self._snapshot = dict(self._selected)

    def cancel(self) -> None:
        if self._snapshot is not None:
            self._selected = self._snapshot
        self._snapshot = None

    def confirm(self) -> list[dict[str, Any]]:
        self._snapshot = None
        return self.selected_files
