"""CLI — 工作空间批量 git 操作"""

from __future__ import annotations

from typing import Callable

import click

from libhub.cli import _svc
from libhub.cli.render import echo_result
from libhub.core.models import OperationResult


def register(group: click.Group) -> None:
    group.add_command(status)
    group.add_command(commit)
    group.add_command(pull)
    group.add_command(push)
    group.add_command(diff)


def _exit_on_failure(ctx: click.Context, results: list[OperationResult]) -> None:
    if any(not r.success for r in results):
        ctx.exit(1)


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """显示所有仓库的分支和改动"""
    results = _svc().status_all()
    if not results:
        click.echo("工作空间中没有仓库。")
        return
    for r in results:
        if not r.success:
            echo_result(r)
            continue
        click.echo(f"{r.name} [{r.branch}]")
        for line in r.changes:
            click.echo(f"    {line}")
    _exit_on_failure(ctx, results)


@click.command()
@click.option("--message", "-m", required=True, help="提交说明")
@click.pass_context
def commit(ctx: click.Context, message: str) -> None:
    """暂存并提交所有仓库的改动"""
    results = _svc().commit_all(message)
    for r in results:
        echo_result(r)
    _exit_on_failure(ctx, results)


def _drain(ctx: click.Context, step: Callable[[], OperationResult | None]) -> None:
    """逐个处理 sync 队列直到取空"""
    total = _svc().prepare_update()
    if not total:
        click.echo("工作空间中没有仓库。")
        return
    failed = 0
    while (result := step()) is not None:
        echo_result(result)
        failed += not result.success
    if failed:
        ctx.exit(1)


@click.command()
@click.pass_context
def pull(ctx: click.Context) -> None:
    """逐个拉取所有仓库的当前分支"""
    _drain(ctx, _svc().pull_next)


@click.command()
@click.pass_context
def push(ctx: click.Context) -> None:
    """逐个推送所有仓库的当前分支"""
    _drain(ctx, _svc().push_next)


@click.command()
@click.pass_context
def diff(ctx: click.Context) -> None:
    """输出所有仓库的合并补丁（路径以仓库目录为前缀）"""
    svc = _svc()
    results = svc.diff_all()
    for r in results:
        if not r.success:
            echo_result(r)
    click.echo(svc.combined_diff(results), nl=False)
    _exit_on_failure(ctx, results)
