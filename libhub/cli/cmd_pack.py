"""CLI — 打包与版本号"""

from __future__ import annotations

import click

from libhub.cli import _svc


def register(group: click.Group) -> None:
    group.add_command(pack)
    group.add_command(increase_patch_version)


@click.command()
@click.argument("directories", nargs=-1, required=True)
@click.option("--output", "-o", default="", help="输出文件（默认取配置 pack_output）")
def pack(directories: tuple[str, ...], output: str) -> None:
    """把指定库目录打成一个包"""
    path = _svc().pack(list(directories), output)
    click.echo(f"已生成: {path}")


@click.command(name="increase-patch-version")
@click.argument("directories", nargs=-1, required=True)
def increase_patch_version(directories: tuple[str, ...]) -> None:
    """把指定库的补丁版本号加 1"""
    for name, patch in _svc().increase_patch_version(list(directories)).items():
        click.echo(f"  {name}: patchVersion -> {patch}")
