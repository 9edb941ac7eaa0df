"""时区工具：所有写入数据库的时间均为配置时区下的带时区时间。

SQLite 不保存时区信息，读回的无时区时间按配置时区解释。
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from zoneinfo import ZoneInfo

from app.packages.mediahub.core.config import get_settings


def get_timezone() -> ZoneInfo:
    return get_settings().timezone_info


def now() -> datetime:
    """返回配置时区的当前时间。"""
    return datetime.now(get_timezone())


def to_local(value: Optional[datetime]) -> Optional[datetime]:
    """转换到配置时区；无时区对象视为已是本地时间。"""
    if value is None:
        return None
    tz = get_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def start_of_month(value: Optional[datetime] = None) -> datetime:
    """``value``（默认当前时间）所在月份的月初零点。"""
    current = to_local(value) if value is not None else now()
    return current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """格式化为 ``YYYY-MM-DD HH:MM:SS``，空值返回 ``None``。"""
    localized = to_local(value)
    if localized is None:
        return None
    return localized.strftime("%Y-%m-%d %H:%M:%S")
