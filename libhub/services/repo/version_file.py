"""库版本文件（library.json）读写"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from libhub.core.exceptions import VersionFileError
from libhub.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("machineName", "majorVersion", "minorVersion", "patchVersion")


def version_file_path(directory: str | Path, filename: str = "") -> Path:
    if not filename:
        from libhub.core.config import get_config
        filename = get_config().version_file
    return Path(directory) / filename


def load_version_file(directory: str | Path, filename: str = "") -> dict[str, Any]:
    """读取并校验库目录下的版本文件"""
    path = version_file_path(directory, filename)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise VersionFileError(f"版本文件不存在: {path}") from e
    except (OSError, ValueError) as e:
        raise VersionFileError(f"无法读取版本文件 {path}: {e}") from e
    if not isinstance(data, dict):
        raise VersionFileError(f"版本文件内容不是对象: {path}")
    missing = [k for k in REQUIRED_FIELDS if k not in data]
    if missing:
        raise VersionFileError(f"版本文件缺少字段 {', '.join(missing)}: {path}")
    return data


def archive_name(data: dict[str, Any]) -> str:
    """打包时使用的目录名: <machineName>-<major>.<minor>"""
    return f"{data['machineName']}-{data['majorVersion']}.{data['minorVersion']}"


def increase_patch_version(directories: list[str] | list[Path], filename: str = "") -> dict[str, int]:
    """把每个库的 patchVersion 加 1，返回 {目录名: 新补丁版本号}

    先全部读取校验，任何一个失败都不写入。
    """
    loaded = []
    for d in directories:
        directory = Path(d)
        data = load_version_file(directory, filename)
        try:
            data["patchVersion"] = int(data["patchVersion"]) + 1
        except (TypeError, ValueError) as e:
            raise VersionFileError(f"patchVersion 无效 ({directory}): {e}") from e
        loaded.append((directory, data))

    result: dict[str, int] = {}
    for directory, data in loaded:
        atomic_write(
            version_file_path(directory, filename),
            json.dumps(data, indent=2, ensure_ascii=False) + "\n",
        )
        result[directory.name] = data["patchVersion"]
        logger.info("%s 补丁版本 -> %d", directory.name, data["patchVersion"])
    return result
