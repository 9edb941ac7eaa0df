"""基于 httpx 的 REST 客户端，负责请求封装与错误转换。

调用方可以注入任意 ``httpx.Client``（测试中注入 FastAPI 的 ``TestClient``），
统一响应结构 ``{msg, data, code}`` 会被拆包，仅返回 ``data``。
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

import httpx

from app.packages.mediahub.core.logger import get_logger

logger = get_logger("client")

UploadItem = tuple[str, bytes, str]


class ApiError(Exception):
    """接口返回非 2xx 或网络失败时抛出，``status_code`` 为 0 表示请求未送达。"""

    def __init__(self, status_code: int, msg: str, data: Any = None) -> None:
        super().__init__(msg)
        self.status_code = status_code
        self.msg = msg
        self.data = data

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code!r}, msg={self.msg!r})"


class MediaHubClient:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        client: Optional[httpx.Client] = None,
        api_prefix: str = "/api/v1",
        token: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self.api_prefix = api_prefix.rstrip("/")
        self.token = token
        self.last_meta: Optional[dict[str, Any]] = None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "MediaHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # 底层请求
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        data: Optional[dict[str, Any]] = None,
        files: Optional[list[tuple[str, tuple[str, bytes, str]]]] = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        url = f"{self.api_prefix}{path}"
        try:
            response = self._client.request(
                method, url, params=params, json=json, data=data, files=files, headers=headers
            )
        except httpx.RequestError as exc:
            logger.warning("Request %s %s failed: %r", method, url, exc)
            raise ApiError(0, f"网络请求失败: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            envelope = body if isinstance(body, dict) else {}
            msg = envelope.get("msg") or response.text or response.reason_phrase
            raise ApiError(response.status_code, str(msg), envelope.get("data"))

        if isinstance(body, dict) and "data" in body:
            self.last_meta = body.get("meta")
            return body["data"]
        return body

    # ------------------------------------------------------------------
    # 认证与用户
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> dict:
        payload = self.request("POST", "/auth/login", json={"username": username, "password": password})
        self.token = payload["access_token"]
        return payload["user"]

    def me(self) -> dict:
        return self.request("GET", "/auth/me")

    def share_candidates(self) -> list[dict]:
        return self.request("GET", "/users/share-candidates")

    # ------------------------------------------------------------------
    # 文件夹
    # ------------------------------------------------------------------

    def folder_tree(self, parent_id: Optional[int] = None) -> dict:
        return self.request("GET", "/folders/tree", params={"parentId": parent_id})

    def folder_detail(self, folder_id: int) -> dict:
        return self.request("GET", f"/folders/{folder_id}")

    def create_folder(self, name: str, parent_id: Optional[int] = None, *, is_public: bool = False) -> dict:
        return self.request(
            "POST", "/folders", json={"name": name, "parent_id": parent_id, "is_public": is_public}
        )

    def rename_folder(self, folder_id: int, name: str) -> dict:
        return self.request("PUT", f"/folders/{folder_id}", json={"name": name})

    def move_folder(self, folder_id: int, parent_id: Optional[int]) -> dict:
        return self.request("PUT", f"/folders/{folder_id}", json={"parent_id": parent_id})

    def delete_folder(self, folder_id: int) -> dict:
        return self.request("DELETE", f"/folders/{folder_id}")

    def share_folder(self, folder_id: int, user_ids: Iterable[int], access_level: Optional[str] = None) -> dict:
        return self.request(
            "POST",
            f"/folders/{folder_id}/share",
            json={"user_ids": list(user_ids), "access_level": access_level},
        )

    # ------------------------------------------------------------------
    # 文件
    # ------------------------------------------------------------------

    def upload_files(self, uploads: Sequence[UploadItem], folder_id: Optional[int] = None) -> list[dict]:
        """``uploads`` 为 ``(文件名, 内容, MIME)`` 列表，一次请求提交。"""
        files = [("files", (name, content, mime)) for name, content, mime in uploads]
        data = {"folder_id": str(folder_id)} if folder_id is not None else None
        return self.request("POST", "/files/upload", data=data, files=files)

    def list_files(
        self,
        folder_id: Optional[int] = None,
        *,
        search: Optional[str] = None,
        mime_type: Optional[str] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> dict:
        return self.request(
            "GET",
            "/files",
            params={
                "folderId": folder_id,
                "search": search,
                "mimeType": mime_type,
                "page": page,
                "pageSize": page_size,
            },
        )

    def search_files(self, query: str, *, mime_type: Optional[str] = None) -> dict:
        return self.request("GET", "/files/search", params={"q": query, "mimeType": mime_type})

    def rename_file(self, file_id: int, name: str) -> dict:
        return self.request("PUT", f"/files/{file_id}/rename", json={"name": name})

    def move_files(self, file_ids: Iterable[int], folder_id: Optional[int]) -> dict:
        return self.request("POST", "/files/move", json={"file_ids": list(file_ids), "folder_id": folder_id})

    def delete_file(self, file_id: int) -> dict:
        return self.request("DELETE", f"/files/{file_id}")

    def share_file(self, file_id: int, user_ids: Iterable[int], access_level: Optional[str] = None) -> dict:
        return self.request(
            "POST",
            f"/files/{file_id}/share",
            json={"user_ids": list(user_ids), "access_level": access_level},
        )

    # ------------------------------------------------------------------
    # 分类与发布内容
    # ------------------------------------------------------------------

    def list_categories(self) -> list[dict]:
        return self.request("GET", "/categories")

    def get_publication(self, publication_id: int) -> dict:
        return self.request("GET", f"/publications/{publication_id}")

    def create_publication(self, payload: dict[str, Any]) -> dict:
        return self.request("POST", "/publications", json=payload)

    def update_publication(self, publication_id: int, payload: dict[str, Any]) -> dict:
        return self.request("PUT", f"/publications/{publication_id}", json=payload)
