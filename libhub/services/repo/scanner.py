"""工作空间扫描 — 找出根目录下的 git 检出目录

每次调用都重新扫描，工作空间在两次操作之间可能发生变化。
"""

from __future__ import annotations

import logging
from pathlib import Path

from libhub.core.models import RepositoryRecord

logger = logging.getLogger(__name__)

# 判断检出目录的唯一依据
GIT_MARKER = Path(".git") / "config"


def is_repository(path: Path) -> bool:
    return (path / GIT_MARKER).is_file()


class RepositoryScanner:
    """检出目录扫描器"""

    def __init__(self, root: str | Path = "") -> None:
        if not root:
            from libhub.core.config import get_config
            root = get_config().workspace_dir
        self.root = Path(root)

    def scan(self, root: str | Path | None = None) -> list[RepositoryRecord]:
        """列出 root 下一级的检出目录，按名称排序

        普通文件和非检出目录直接跳过；根目录不存在返回空列表。
        """
        base = Path(root) if root is not None else self.root
        if not base.is_dir():
            logger.warning("工作空间不存在: %s", base)
            return []
        records = [
            RepositoryRecord(name=child.name, path=child)
            for child in sorted(base.iterdir())
            if child.is_dir() and is_repository(child)
        ]
        logger.debug("扫描 %s: %d 个仓库", base, len(records))
        return records
