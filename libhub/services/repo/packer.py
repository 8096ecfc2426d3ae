"""库打包 — 把多个库目录打成一个 zip 包

每个库放在 <machineName>-<major>.<minor>/ 目录下，
隐藏文件和临时文件按可配置的正则跳过。
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import zipfile
from pathlib import Path

from libhub.services.repo.version_file import archive_name, load_version_file

logger = logging.getLogger(__name__)

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


def compile_ignore_pattern(pattern: str, flags: str = "") -> re.Pattern[str]:
    """编译忽略规则；flags 为 i/m/s 组合，未知字符忽略（如 JS 风格的 g）"""
    value = 0
    for ch in flags:
        value |= _FLAG_MAP.get(ch, 0)
    return re.compile(pattern, value)


def iter_files(directory: Path, alias: str, ignore: re.Pattern[str]):
    """递归产出 (文件路径, 包内路径)，被忽略的目录整体跳过"""
    for child in sorted(directory.iterdir()):
        if ignore.search(child.name):
            continue
        target = f"{alias}/{child.name}"
        if child.is_dir() and not child.is_symlink():
            yield from iter_files(child, target, ignore)
        else:
            yield child, target


def pack_libraries(
    directories: list[str] | list[Path],
    output: str | Path = "",
    *,
    ignore_pattern: str | None = None,
    ignore_flags: str | None = None,
    version_file: str = "",
) -> Path:
    """打包给定库目录，返回生成的包路径

    版本文件缺失或无效时抛 VersionFileError，且不会留下半成品文件。
    """
    from libhub.core.config import get_config
    cfg = get_config()
    output = Path(output or cfg.pack_output)
    ignore = compile_ignore_pattern(
        cfg.ignore_pattern if ignore_pattern is None else ignore_pattern,
        cfg.ignore_flags if ignore_flags is None else ignore_flags,
    )

    # 先读取全部版本文件，避免写到一半失败
    aliases = [(Path(d), archive_name(load_version_file(d, version_file))) for d in directories]

    # 先写同目录临时文件再 rename，中途失败不留下半成品
    output.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(output.parent), suffix=".tmp")
    os.close(fd)
    count = 0
    try:
        with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for directory, alias in aliases:
                for path, target in iter_files(directory, alias, ignore):
                    archive.write(path, target)
                    count += 1
        os.replace(tmp, str(output))
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    logger.info("已打包 %d 个库 (%d 个文件) -> %s", len(aliases), count, output)
    return output
