"""业务包向主应用暴露的接口约定。"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import Logger
from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from fastapi import APIRouter


@dataclass(frozen=True)
class AppPackage:
    """主应用只通过该结构访问业务包：路由、配置、日志以及启动钩子。

    ``exception_handlers`` 以异常类型为键，``main`` 会逐一注册到 FastAPI 实例。
    """

    name: str
    api_router: APIRouter
    get_settings: Callable[[], Any]
    setup_logging: Callable[[], None]
    logger: Logger
    startup: Callable[[], None]
    create_response: Callable[..., dict]
    exception_handlers: Mapping[type, Callable[..., Any]] = field(default_factory=dict)
