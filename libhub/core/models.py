"""核心数据模型

工作空间中的仓库记录与单次 git 操作结果。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# =========================================================================
# 操作类型
# =========================================================================

OP_CLONE = "clone"
OP_STATUS = "status"
OP_COMMIT = "commit"
OP_PULL = "pull"
OP_PUSH = "push"
OP_DIFF = "diff"

OPERATIONS = (OP_CLONE, OP_STATUS, OP_COMMIT, OP_PULL, OP_PUSH, OP_DIFF)

# =========================================================================
# 结果状态 — 后三种在 git 原始输出里看起来像失败，实际是成功
# =========================================================================

STATUS_OK = "ok"
STATUS_ERROR = "error"
STATUS_ALREADY_EXISTS = "already_exists"
STATUS_NOOP = "noop"
STATUS_NOTHING_TO_COMMIT = "nothing_to_commit"


@dataclass(frozen=True)
class RepositoryRecord:
    """工作空间中的一个 git 检出目录，每次扫描重新生成"""

    name: str
    path: Path


@dataclass
class OperationResult:
    """单个仓库单次操作的结果

    载荷按操作类型填写:
      - status / commit: branch, changes (commit 另有 commit)
      - push: summary
      - diff: diff
    失败时 error 为归一化后的可读信息，error_code 取自异常体系。
    """

    name: str
    kind: str
    status: str = STATUS_OK
    branch: str = ""
    commit: str = ""
    changes: list[str] = field(default_factory=list)
    summary: str = ""
    diff: str = ""
    error: str = ""
    error_code: str = ""

    @property
    def success(self) -> bool:
        return self.status != STATUS_ERROR
