"""发布向导：分四步收集发布内容，逐步校验后提交为待审核或草稿。"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Any, Optional

from app.packages.mediahub.core.enums import PUBLICATION_TRANSITIONS, PublicationStatusEnum, SelectionModeEnum

from .api_client import ApiError, MediaHubClient
from .selection import FileSelection


class WizardStep(IntEnum):
    BASIC_INFO = 1
    MEDIA = 2
    DESCRIPTION = 3
    SETTINGS = 4


FORM_DEFAULTS: dict[str, Any] = {
    "title": "",
    "slug": "",
    "category_id": None,
    "subcategory_ids": [],
    "description": "",
    "meta_title": "",
    "meta_description": "",
    "cover_image": "",
    "youtube_url": "",
    "author_ids": [],
    "publication_date": None,
    "has_comments": True,
    "is_featured": False,
    "is_leaderboard": False,
}

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return _SLUG_STRIP.sub("-", (text or "").lower()).strip("-")


def _media_kind(category: Optional[dict[str, Any]]) -> Optional[str]:
    """音频或视频分类返回 ``audio`` / ``video``，按名称和别名匹配。"""
    if not category:
        return None
    label = f"{category.get('name', '')} {category.get('slug', '')}".lower()
    if "audio" in label:
        return "audio"
    if "video" in label:
        return "video"
    return None


class PublicationWizard:
    def __init__(
        self,
        api: MediaHubClient,
        *,
        categories: Optional[list[dict[str, Any]]] = None,
        publication: Optional[dict[str, Any]] = None,
        attachment_limit: Optional[int] = None,
    ) -> None:
        self.api = api
        self.categories = categories
        self.step = WizardStep.BASIC_INFO
        self.form: dict[str, Any] = {
            key: list(value) if isinstance(value, list) else value for key, value in FORM_DEFAULTS.items()
        }
        self.attachments: list[dict[str, Any]] = []
        self.errors: dict[str, str] = {}
        self.publication_id: Optional[int] = None
        self.current_status: Optional[str] = None
        self.picker = FileSelection(
            SelectionModeEnum.PICKER.value, multiple=True, selection_limit=attachment_limit
        )
        self._slug_edited = False
        if publication is not None:
            self.load(publication)

    @property
    def is_editing(self) -> bool:
        return self.publication_id is not None

    def load(self, publication: dict[str, Any]) -> None:
        """以已有发布内容填充表单，进入编辑模式。"""
        self.publication_id = publication["id"]
        self.current_status = publication.get("status")
        for key in FORM_DEFAULTS:
            if key in publication and publication[key] is not None and key != "publication_date":
                self.form[key] = publication[key]
        self.form["subcategory_ids"] = [item["id"] for item in publication.get("subcategories") or []]
        self.form["author_ids"] = [item["id"] for item in publication.get("authors") or []]
        self.attachments = [
            item["file"]
            for item in sorted(publication.get("attachments") or [], key=lambda entry: entry["display_order"])
            if item.get("file")
        ]
        self._slug_edited = True

    def load_categories(self) -> list[dict[str, Any]]:
        if self.categories is None:
            self.categories = self.api.list_categories()
        return self.categories

    @property
    def category(self) -> Optional[dict[str, Any]]:
        category_id = self.form["category_id"]
        if category_id is None:
            return None
        return next((item for item in self.load_categories() if item["id"] == category_id), None)

    def update(self, **changes: Any) -> None:
        unknown = set(changes) - set(FORM_DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown publication fields: {', '.join(sorted(unknown))}")
        if "slug" in changes:
            self._slug_edited = bool(changes["slug"])
        self.form.update(changes)
        if "title" in changes and not self._slug_edited:
            self.form["slug"] = slugify(changes["title"])
        for key in changes:
            self.errors.pop(key, None)

    # ------------------------------------------------------------------
    # 校验与步骤切换
    # ------------------------------------------------------------------

    def validate_step(self, step: Optional[int] = None) -> bool:
        step = WizardStep(step or self.step)
        errors: dict[str, str] = {}
        if step == WizardStep.BASIC_INFO:
            if not (self.form["title"] or "").strip():
                errors["title"] = "请填写标题"
            if not (self.form["slug"] or "").strip():
                errors["slug"] = "请填写别名"
            if self.form["category_id"] is None:
                errors["category_id"] = "请选择分类"
        elif step == WizardStep.MEDIA:
            errors.update(self._media_errors())
        self.errors = errors
        return not errors

    def _media_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        has_youtube = bool((self.form["youtube_url"] or "").strip())
        if not (self.form["cover_image"] or "").strip() and not has_youtube:
            errors["cover_image"] = "请上传封面图片或填写 YouTube 链接"

        kind = _media_kind(self.category)
        if kind is None or (kind == "video" and has_youtube):
            return errors
        if not self.attachments:
            suffix = "或填写 YouTube 链接" if kind == "video" else ""
            errors["attachments"] = f"{kind} 分类至少需要一个{kind}附件{suffix}"
        elif not (self.attachments[0].get("mime_type") or "").startswith(f"{kind}/"):
            errors["attachments"] = f"第一个附件必须是 {kind} 文件"
        return errors

    def next(self) -> bool:
        if not self.validate_step():
            return False
        if self.step < WizardStep.SETTINGS:
            self.step = WizardStep(self.step + 1)
        return True

    def previous(self) -> None:
        self.errors = {}
        if self.step > WizardStep.BASIC_INFO:
            self.step = WizardStep(self.step - 1)

    def go_to(self, step: int) -> bool:
        """跳转到指定步骤；向前跳转需要途经的步骤全部通过校验。"""
        target = WizardStep(step)
        for current in range(self.step, target):
            if not self.validate_step(current):
                self.step = WizardStep(current)
                return False
        self.errors = {}
        self.step = target
        return True

    # ------------------------------------------------------------------
    # 附件
    # ------------------------------------------------------------------

    def open_attachment_picker(self) -> FileSelection:
        self.picker.replace(self.attachments)
        self.picker.begin()
        return self.picker

    def confirm_attachments(self) -> list[dict[str, Any]]:
        self.attachments = self.picker.confirm()
        self.errors.pop("attachments", None)
        return self.attachments

    def cancel_attachments(self) -> None:
        self.picker.cancel()

    def remove_attachment(self, file_id: int) -> None:
        self.attachments = [item for item in self.attachments if item["id"] != file_id]
        self.picker.remove([file_id])

    # ------------------------------------------------------------------
    # 提交
    # ------------------------------------------------------------------

    def build_payload(self, status: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.form["title"].strip(),
            "slug": self.form["slug"].strip(),
            "category_id": self.form["category_id"],
            "subcategory_ids": list(self.form["subcategory_ids"]),
            "description": self.form["description"] or None,
            "meta_title": self.form["meta_title"] or None,
            "meta_description": self.form["meta_description"] or None,
            "cover_image": self.form["cover_image"] or None,
            "youtube_url": self.form["youtube_url"] or None,
            "has_comments": self.form["has_comments"],
            "is_featured": self.form["is_featured"],
            "is_leaderboard": self.form["is_leaderboard"],
            "attachment_ids": [item["id"] for item in self.attachments],
            "status": status,
        }
        if self.form["author_ids"]:
            payload["author_ids"] = list(self.form["author_ids"])
        if self.form["publication_date"]:
            publication_date = self.form["publication_date"]
            payload["publication_date"] = (
                publication_date.isoformat() if hasattr(publication_date, "isoformat") else publication_date
            )
        return payload

    def submit(self, *, draft: bool = False) -> Optional[dict[str, Any]]:
        """提交审核（``pending``）或保存草稿；编辑模式下走更新接口。

        草稿只要求第一步的必填项。接口错误写入 ``errors["form"]`` 并返回 ``None``。
        """
        steps = [WizardStep.BASIC_INFO] if draft else [WizardStep.BASIC_INFO, WizardStep.MEDIA]
        for step in steps:
            if not self.validate_step(step):
                self.step = step
                return None

        status = (PublicationStatusEnum.DRAFT if draft else PublicationStatusEnum.PENDING).value
        payload = self.build_payload(status)
        if self.is_editing and not self._can_move_to(status):
            payload.pop("status")
        try:
            if self.is_editing:
                result = self.api.update_publication(self.publication_id, payload)
            else:
                result = self.api.create_publication(payload)
        except ApiError as exc:
            self.errors = {"form": exc.msg}
            return None
        self.publication_id = result["id"]
        self.current_status = result.get("status")
        self.errors = {}
        return result

    def _can_move_to(self, status: str) -> bool:
        """编辑时只提交合法的状态流转，其余情况由服务端决定状态。"""
        current = self.current_status
        return current is None or status == current or status in PUBLICATION_TRANSITIONS.get(current, set())
