"""前端状态层的导入边界：只依赖 ``core``，不加载路由、服务与数据库层。"""

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]

SCRIPT = """
import sys
import app.packages.mediahub.client
loaded = sorted(
    name for name in sys.modules
    if name.startswith(("app.packages.mediahub.services", "app.packages.mediahub.api",
                        "app.packages.mediahub.db", "app.packages.mediahub.package"))
    or name == "sqlalchemy"
)
print(",".join(loaded))
"""


def test_client_import_does_not_load_server_layers():
    result = subprocess.run(
        [sys.executable, "-c", SCRIPT],
        cwd=ROOT,
        env=dict(os.environ),
        capture_output=True,
        text=True,
        check=True,
    )
    assert result.stdout.strip() == ""


def test_shared_helpers_come_from_core():
    from app.packages.mediahub.client import api_client, file_manager, publication_wizard, selection
    from app.packages.mediahub.core.enums import PUBLICATION_TRANSITIONS
    from app.packages.mediahub.core.mime import mime_allowed

    assert selection.mime_allowed is mime_allowed
    assert publication_wizard.PUBLICATION_TRANSITIONS is PUBLICATION_TRANSITIONS
    assert PUBLICATION_TRANSITIONS["approved"] == {"rejected"}
    assert file_manager.logger.name == "app.client.file_manager"
    assert file_manager.logger is not api_client.logger
