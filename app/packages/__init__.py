"""可挂载到主应用的业务包集合。"""

from __future__ import annotations

import os
from importlib import import_module
from typing import Dict, Optional

from .types import AppPackage

DEFAULT_PACKAGE = "mediahub"

# 包名 -> 暴露 ``package`` 对象的模块路径；首次使用时才导入
PACKAGE_REGISTRY: Dict[str, str] = {
    "mediahub": "app.packages.mediahub.package",
}


def get_active_package(name: Optional[str] = None) -> AppPackage:
    """返回名为 ``name`` 的业务包；未指定时读取 ``APP_ACTIVE_PACKAGE``。"""
    package_name = name or os.getenv("APP_ACTIVE_PACKAGE") or DEFAULT_PACKAGE
    module_path = PACKAGE_REGISTRY.get(package_name)
    if module_path is None:
        choices = ", ".join(sorted(PACKAGE_REGISTRY))
        raise RuntimeError(f"业务包 '{package_name}' 未注册，可选：{choices}")
    return import_module(module_path).package


__all__ = ["AppPackage", "DEFAULT_PACKAGE", "PACKAGE_REGISTRY", "get_active_package"]
