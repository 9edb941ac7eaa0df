"""FastAPI 应用实例：挂载业务包的路由、异常处理与启动钩子。"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from app.packages import get_active_package

package = get_active_package()
package.setup_logging()
settings = package.get_settings()
logger = package.logger

app = FastAPI(title=settings.project_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER, "Content-Disposition"],
)
app.add_middleware(RequestIdMiddleware)

for exc_class, handler in package.exception_handlers.items():
    app.add_exception_handler(exc_class, handler)


@app.on_event("startup")
async def startup_event() -> None:
    package.startup()
    logger.info("%s started on port %s", settings.project_name, settings.app_port)


@app.get("/health")
async def health_check() -> dict:
    """探活接口。"""
    return package.create_response("OK", {"status": "healthy", "package": package.name})


app.include_router(package.api_router, prefix=settings.api_v1_str)
