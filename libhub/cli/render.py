"""CLI — 操作结果输出"""

from __future__ import annotations

import click

from libhub.core.models import (
    STATUS_ALREADY_EXISTS,
    STATUS_NOOP,
    STATUS_NOTHING_TO_COMMIT,
    OperationResult,
)

_DONE = {
    "clone": "已克隆",
    "pull": "已更新",
    "push": "已推送",
    "commit": "已提交",
}

_SKIPPED = {
    STATUS_ALREADY_EXISTS: "已存在，跳过",
    STATUS_NOOP: "已是最新",
    STATUS_NOTHING_TO_COMMIT: "没有可提交的改动",
}


def echo_result(result: OperationResult) -> None:
    """单行输出一个仓库的操作结果；失败信息写到 stderr"""
    if not result.success:
        click.secho(f"  {result.name}: 失败 - {result.error}", fg="red", err=True)
        return
    text = _SKIPPED.get(result.status) or _DONE.get(result.kind, "完成")
    if result.summary:
        text = f"{text} ({result.summary})"
    elif result.commit:
        text = f"{text} [{result.branch} {result.commit}]"
    click.echo(f"  {result.name}: {text}")
