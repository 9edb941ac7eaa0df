"""文件管理器视图状态：把界面操作分发给 REST API，并在变更后刷新目录树。

接口错误不会向外抛出，而是写入 ``error`` 并追加一条错误通知，
与前端 toast 提示的行为保持一致。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from app.packages.mediahub.core.enums import SelectionModeEnum, ViewModeEnum
from app.packages.mediahub.core.logger import get_logger

from .api_client import ApiError, MediaHubClient, UploadItem
from .folder_tree import FolderTreeStore
from .selection import FileSelection

logger = get_logger("client.file_manager")

T = TypeVar("T")


@dataclass
class Notification:
    level: str
    message: str


class FileManagerView:
    def __init__(
        self,
        api: MediaHubClient,
        *,
        mode: str = SelectionModeEnum.MANAGER.value,
        multiple: bool = False,
        selection_limit: Optional[int] = None,
        mime_filters: Optional[Sequence[str]] = None,
    ) -> None:
        self.api = api
        self.tree = FolderTreeStore(api)
        self.selection = FileSelection(
            mode, multiple=multiple, selection_limit=selection_limit, mime_filters=mime_filters
        )
        self.view_mode = ViewModeEnum.GRID.value
        self.search_query = ""
        self.loading = False
        self.error: Optional[str] = None
        self.notifications: list[Notification] = []

    # ------------------------------------------------------------------
    # 状态
    # ------------------------------------------------------------------

    @property
    def current_folder(self) -> Optional[int]:
        return self.tree.current_folder_id

    @property
    def breadcrumb(self) -> list[dict[str, Any]]:
        return self.tree.current_path

    def set_view_mode(self, mode: str) -> None:
        self.view_mode = ViewModeEnum(mode).value

    def set_search(self, query: Optional[str]) -> None:
        self.search_query = (query or "").strip()

    def visible_folders(self) -> list[dict[str, Any]]:
        folders = self.tree.children(self.current_folder)
        needle = self.search_query.casefold()
        if not needle:
            return folders
        return [item for item in folders if needle in item["name"].casefold()]

    def visible_files(self) -> list[dict[str, Any]]:
        files = self.tree.files_in(self.current_folder)
        needle = self.search_query.casefold()
        if not needle:
            return files
        return [item for item in files if needle in item["original_name"].casefold()]

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))

    def clear_notifications(self) -> None:
        self.notifications = []
        self.error = None

    # ------------------------------------------------------------------
    # 导航
    # ------------------------------------------------------------------

    def load(self) -> bool:
        return self._run(self.tree.load) is not None

    def open_folder(self, folder_id: int) -> None:
        """双击文件夹进入，并清空搜索条件。"""
        self.tree.navigate(folder_id)
        self.search_query = ""

    def navigate_breadcrumb(self, index: int) -> None:
        """``-1`` 回到根目录，其余为面包屑中的下标。"""
        if index < 0:
            self.tree.navigate(None)
            return
        self.tree.navigate(self.breadcrumb[index]["id"])

    def go_up(self) -> None:
        self.tree.navigate_up()

    def click_file(self, file: dict[str, Any]) -> bool:
        return self.selection.click(file)

    # ------------------------------------------------------------------
    # 变更
    # ------------------------------------------------------------------

    def upload(self, uploads: Sequence[UploadItem]) -> list[dict[str, Any]]:
        created = self._run(
            lambda: self.api.upload_files(uploads, self.current_folder),
            success=f"已上传 {len(uploads)} 个文件",
        )
        if created is None:
            return []
        self._refresh()
        self.selection.add_uploaded(created)
        return created

    def create_folder(self, name: str, *, is_public: bool = False) -> Optional[dict[str, Any]]:
        folder = self._run(
            lambda: self.api.create_folder(name, self.current_folder, is_public=is_public),
            success="文件夹创建成功",
        )
        if folder is not None:
            self._refresh()
        return folder

    def rename_file(self, file_id: int, name: str) -> Optional[dict[str, Any]]:
        renamed = self._run(lambda: self.api.rename_file(file_id, name), success="文件重命名成功")
        if renamed is not None:
            self._refresh()
            if self.selection.is_selected(file_id):
                self.selection.remove([file_id])
                self.selection.add(renamed)
        return renamed

    def rename_folder(self, folder_id: int, name: str) -> Optional[dict[str, Any]]:
        renamed = self._run(lambda: self.api.rename_folder(folder_id, name), success="文件夹重命名成功")
        if renamed is not None:
            self._refresh()
        return renamed

    def move_folder(self, folder_id: int, parent_id: Optional[int]) -> bool:
        """拖拽文件夹到另一个文件夹下，``parent_id`` 为 ``None`` 表示移到根目录。"""
        result = self._run(lambda: self.api.move_folder(folder_id, parent_id), success="文件夹移动成功")
        if result is None:
            return False
        self._refresh()
        return True

    def move_files(self, file_ids: Iterable[int], folder_id: Optional[int]) -> bool:
        ids = list(file_ids)
        result = self._run(lambda: self.api.move_files(ids, folder_id), success="文件移动成功")
        if result is None:
            return False
        self.selection.remove(ids)
        self._refresh()
        return True

    def move_selected(self, folder_id: Optional[int]) -> bool:
        if not self.selection.count:
            self.notify("error", "请先选择要移动的文件")
            return False
        return self.move_files(self.selection.selected_ids, folder_id)

    def share_file(self, file_id: int, user_ids: Iterable[int], access_level: Optional[str] = None) -> bool:
        ids = list(user_ids)
        return self._run(lambda: self.api.share_file(file_id, ids, access_level), success="文件共享成功") is not None

    def share_folder(self, folder_id: int, user_ids: Iterable[int], access_level: Optional[str] = None) -> bool:
        ids = list(user_ids)
        return (
            self._run(lambda: self.api.share_folder(folder_id, ids, access_level), success="文件夹共享成功")
            is not None
        )

    def delete_files(self, file_ids: Iterable[int]) -> list[int]:
        """逐个删除，部分失败不影响其余文件；返回删除成功的 ID。"""
        deleted: list[int] = []
        failures: list[str] = []
        for file_id in file_ids:
            try:
                self.api.delete_file(file_id)
            except ApiError as exc:
                failures.append(f"{file_id}: {exc.msg}")
                continue
            deleted.append(file_id)
        self.selection.remove(deleted)
        self._refresh()
        if deleted:
            self.notify("success", f"已删除 {len(deleted)} 个文件")
        if failures:
            self.error = "部分文件删除失败：" + "；".join(failures)
            self.notify("error", self.error)
        return deleted

    def delete_selected(self) -> list[int]:
        return self.delete_files(self.selection.selected_ids)

    def delete_folder(self, folder_id: int) -> bool:
        result = self._run(lambda: self.api.delete_folder(folder_id), success="文件夹删除成功")
        if result is None:
            return False
        self._refresh()
        return True

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        self._run(self.tree.refresh)

    def _run(self, action: Callable[[], T], *, success: Optional[str] = None) -> Optional[T]:
        """执行一次接口调用；失败时记录错误通知并返回 ``None``。"""
        self.loading = True
        try:
            result = action()
        except ApiError as exc:
            logger.warning("File manager action failed: %s", exc.msg)
            self.error = exc.msg
            self.notify("error", exc.msg)
            return None
        finally:
            self.loading = False
        self.error = None
        if success:
            self.notify("success", success)
        return result if result is not None else True
