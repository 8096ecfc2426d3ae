"""libhub 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os
from typing import Any

import click

from libhub import __version__
from libhub.core.config import DEFAULT_CONFIG_FILE, init_config
from libhub.core.exceptions import LibHubError
from libhub.services.workspace_service import get_workspace_service, reset_workspace_service
from libhub.utils.logger import setup_logging


def _svc() -> Any:
    """获取全局工作空间服务的快捷方式"""
    return get_workspace_service()


class LibHubGroup(click.Group):
    """把业务异常转换为一行错误提示 + 非零退出码"""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except LibHubError as e:
            raise click.ClickException(str(e)) from e


@click.group(cls=LibHubGroup)
@click.version_option(version=__version__)
@click.option("--config", "-c", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
@click.option("--workspace", "-w", default=None, help="工作空间目录（覆盖配置）")
def main(config: str, workspace: str | None) -> None:
    """libhub - 库工作空间管理工具"""
    setup_logging(
        level=os.getenv("LIBHUB_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("LIBHUB_LOG_JSON", "") == "1",
    )
    cfg = init_config(config)
    if workspace:
        cfg.workspace_dir = workspace
    reset_workspace_service()


# 注册各领域子命令
from libhub.cli.cmd_lib import register as _reg_lib  # noqa: E402
from libhub.cli.cmd_repo import register as _reg_repo  # noqa: E402
from libhub.cli.cmd_pack import register as _reg_pack  # noqa: E402

_reg_lib(main)
_reg_repo(main)
_reg_pack(main)
