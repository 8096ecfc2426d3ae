"""CLI — 注册表查询与库获取"""

from __future__ import annotations

import click

from libhub.cli import _svc
from libhub.cli.render import echo_result


def register(group: click.Group) -> None:
    group.add_command(list_libraries)
    group.add_command(get)


@click.command(name="list")
def list_libraries() -> None:
    """列出注册表中的所有库"""
    libraries = _svc().list_libraries()
    if not libraries:
        click.echo("注册表中没有库。")
        return
    for lib in libraries:
        deps = ",".join(lib.dependencies) or "-"
        click.echo(f"  {lib.machine_name:30s} {lib.version:10s} deps=[{deps}]")


@click.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def get(ctx: click.Context, names: tuple[str, ...]) -> None:
    """克隆指定库及其全部依赖到工作空间"""
    svc = _svc()
    resolution = svc.get(list(names))
    for err in resolution.errors:
        click.echo(f"  [跳过] {err}", err=True)

    total = len(svc.clone_queue)
    click.echo(f"共 {total} 个库待克隆")
    failed = 0
    while (result := svc.clone_next()) is not None:
        echo_result(result)
        failed += not result.success

    if failed or resolution.errors:
        ctx.exit(1)
