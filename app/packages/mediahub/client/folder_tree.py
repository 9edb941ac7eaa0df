"""目录树状态：缓存 ``GET /folders/tree`` 的结果以及展开、当前目录等界面状态。"""

from __future__ import annotations

from typing import Any, Optional

from .api_client import MediaHubClient


class FolderTreeStore:
    """持有嵌套目录树；变更后整体重新拉取，不做增量合并。"""

    def __init__(self, api: MediaHubClient, *, root_id: Optional[int] = None) -> None:
        self.api = api
        self.root_id = root_id
        self.folders: list[dict[str, Any]] = []
        self.root_files: list[dict[str, Any]] = []
        self.expanded: set[int] = set()
        self.current_folder_id: Optional[int] = None
        self.loaded = False
        self._index: dict[int, dict[str, Any]] = {}

    def load(self) -> None:
        self._apply(self.api.folder_tree(self.root_id))

    def refresh(self) -> None:
        """重新拉取目录树，仍然存在的文件夹保留展开状态。"""
        self.load()

    def _apply(self, data: Optional[dict[str, Any]]) -> None:
        data = data or {}
        self.folders = list(data.get("folders") or [])
        self.root_files = list(data.get("files") or [])
        self._index = {}
        stack = list(self.folders)
        while stack:
            node = stack.pop()
            self._index[node["id"]] = node
            stack.extend(node.get("subfolders") or [])
        self.expanded &= set(self._index)
        if self.current_folder_id is not None and self.current_folder_id not in self._index:
            self.current_folder_id = None
        self.loaded = True

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def find(self, folder_id: Optional[int]) -> Optional[dict[str, Any]]:
        if folder_id is None:
            return None
        return self._index.get(folder_id)

    def children(self, folder_id: Optional[int] = None) -> list[dict[str, Any]]:
        if folder_id is None:
            return self.folders
        node = self.find(folder_id)
        return list(node.get("subfolders") or []) if node else []

    def files_in(self, folder_id: Optional[int] = None) -> list[dict[str, Any]]:
        if folder_id is None:
            return self.root_files
        node = self.find(folder_id)
        return list(node.get("files") or []) if node else []

    def all_files(self) -> list[dict[str, Any]]:
        files = list(self.root_files)
        for node in self._index.values():
            files.extend(node.get("files") or [])
        return files

    def breadcrumb(self, folder_id: Optional[int]) -> list[dict[str, Any]]:
        """从根到目标文件夹的路径，每一项为 ``{id, name}``。"""
        path: list[dict[str, Any]] = []
        seen: set[int] = set()
        node = self.find(folder_id)
        while node is not None and node["id"] not in seen:
            seen.add(node["id"])
            path.append({"id": node["id"], "name": node["name"]})
            node = self.find(node.get("parent_id"))
        path.reverse()
        return path

    # ------------------------------------------------------------------
    # 展开与导航
    # ------------------------------------------------------------------

    def expand(self, folder_id: int) -> bool:
        if folder_id not in self._index:
            return False
        self.expanded.add(folder_id)
        return True

    def collapse(self, folder_id: int) -> None:
        self.expanded.discard(folder_id)

    def toggle(self, folder_id: int) -> bool:
        """切换展开状态，返回切换后的状态。"""
        if folder_id in self.expanded:
            self.collapse(folder_id)
            return False
        return self.expand(folder_id)

    def is_expanded(self, folder_id: int) -> bool:
        return folder_id in self.expanded

    def navigate(self, folder_id: Optional[int]) -> None:
        if folder_id is not None:
            if folder_id not in self._index:
                raise KeyError(folder_id)
            for item in self.breadcrumb(folder_id)[:-1]:
                self.expanded.add(item["id"])
        self.current_folder_id = folder_id

    def navigate_up(self) -> Optional[int]:
        current = self.current_folder
        self.current_folder_id = current.get("parent_id") if current else None
        if self.current_folder_id is not None and self.current_folder_id not in self._index:
            self.current_folder_id = None
        return self.current_folder_id

    @property
    def current_folder(self) -> Optional[dict[str, Any]]:
        return self.find(self.current_folder_id)

    @property
    def current_path(self) -> list[dict[str, Any]]:
        return self.breadcrumb(self.current_folder_id)
