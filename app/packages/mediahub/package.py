"""MediaHub 业务包的装配：路由、异常处理与启动钩子。"""

from app.packages.types import AppPackage

from .api.v1 import api_router
from .core.config import get_settings
from .core.exceptions import EXCEPTION_HANDLERS
from .core.logger import logger, setup_logging
from .core.responses import create_response
from .db.init_db import init_db
from .services.storage_service import get_thumbnail_storage, get_upload_storage


def startup() -> None:
    """确保上传与缩略图目录存在，再建表并写入种子数据。"""
    uploads = get_upload_storage().root
    thumbnails = get_thumbnail_storage().root
    logger.info("Storage ready: uploads=%s thumbnails=%s", uploads, thumbnails)
    init_db()


package = AppPackage(
    name="mediahub",
    api_router=api_router,
    get_settings=get_settings,
    setup_logging=setup_logging,
    logger=logger,
    startup=startup,
    create_response=create_response,
    exception_handlers=EXCEPTION_HANDLERS,
)

__all__ = ["package", "startup"]
