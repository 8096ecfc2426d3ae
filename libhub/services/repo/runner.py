"""单仓库 git 操作执行器

职责:
- 对一个仓库目录执行一次 clone / status / commit / pull / push / diff
- 固定非交互 ssh 命令，避免主机指纹提示挂起进程
- 把 git 输出经 git_output 翻译为 OperationResult，失败不抛异常
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Callable

from libhub.core.exceptions import RepoOperationError, ValidationError
from libhub.core.models import (
    OP_CLONE,
    OP_COMMIT,
    OP_DIFF,
    OP_PULL,
    OP_PUSH,
    OP_STATUS,
    OPERATIONS,
    STATUS_ALREADY_EXISTS,
    STATUS_ERROR,
    STATUS_NOOP,
    STATUS_NOTHING_TO_COMMIT,
    OperationResult,
)
from libhub.services.repo import git_output
from libhub.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)


class RepoOperationRunner:
    """git 操作执行器 — 每次调用执行一个操作"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        ssh_command: str | None = None,
        timeout: int | None = None,
    ) -> None:
        if ssh_command is None or timeout is None:
            from libhub.core.config import get_config
            cfg = get_config()
            ssh_command = cfg.ssh_command if ssh_command is None else ssh_command
            timeout = cfg.git_timeout if timeout is None else timeout
        self._executor = executor or get_executor()
        self.ssh_command = ssh_command
        self.timeout = timeout
        self._handlers: dict[str, Callable[..., OperationResult]] = {
            OP_CLONE: self.clone,
            OP_STATUS: self.status,
            OP_COMMIT: self.commit,
            OP_PULL: self.pull,
            OP_PUSH: self.push,
            OP_DIFF: self.diff,
        }

    def run(self, kind: str, directory: str | Path, **params: Any) -> OperationResult:
        """按操作类型分派"""
        if kind not in OPERATIONS:
            raise ValidationError(f"不支持的操作类型: {kind}")
        return self._handlers[kind](Path(directory), **params)

    # ---- 各操作 ----

    def clone(self, directory: Path, url: str) -> OperationResult:
        """git clone <url> <directory>；目标已存在视为 already_exists"""
        result = OperationResult(name=directory.name, kind=OP_CLONE)
        r = self._git(result, ["clone", url, directory.name], cwd=directory.parent)
        if r is None:
            return result
        output = git_output.skip_warnings(r.stderr)
        if git_output.is_already_exists(output):
            result.status = STATUS_ALREADY_EXISTS
        elif not r.success:
            self._fail(result, git_output.classify_error(output, url))
        return result

    def status(self, directory: Path) -> OperationResult:
        """git status --porcelain --branch"""
        result = OperationResult(name=directory.name, kind=OP_STATUS)
        r = self._git(result, ["status", "--porcelain", "--branch"], cwd=directory)
        if r is None:
            return result
        if not r.success:
            self._fail(result, git_output.classify_error(r.stderr))
            return result
        info = git_output.parse_status(r.stdout)
        result.branch = info.branch
        result.changes = info.changes
        return result

    def commit(self, directory: Path, message: str) -> OperationResult:
        """暂存全部改动后提交；暂存失败直接返回退出码"""
        result = OperationResult(name=directory.name, kind=OP_COMMIT)
        r = self._git(result, ["add", "--all"], cwd=directory)
        if r is None:
            return result
        if not r.success:
            self._fail(result, RepoOperationError(f"退出码 {r.returncode}"))
            return result

        r = self._git(result, ["commit", "-m", message], cwd=directory)
        if r is None:
            return result
        info = git_output.parse_commit(r.stdout)
        if info is None:
            self._fail(result, git_output.classify_error(r.stderr or r.stdout))
        elif info.nothing_to_commit:
            result.status = STATUS_NOTHING_TO_COMMIT
        else:
            result.branch = info.branch
            result.commit = info.commit
            result.changes = info.changes
        return result

    def pull(self, directory: Path) -> OperationResult:
        """git pull origin HEAD"""
        result = OperationResult(name=directory.name, kind=OP_PULL)
        r = self._git(result, ["pull", "origin", "HEAD"], cwd=directory)
        if r is None:
            return result
        output = git_output.skip_warnings(r.stderr)
        if not git_output.pull_succeeded(output, r.returncode):
            self._fail(result, git_output.classify_error(output))
        return result

    def push(self, directory: Path) -> OperationResult:
        """git push origin HEAD"""
        result = OperationResult(name=directory.name, kind=OP_PUSH)
        r = self._git(result, ["push", "origin", "HEAD"], cwd=directory)
        if r is None:
            return result
        output = git_output.skip_warnings(r.stderr)
        parsed = git_output.parse_push(output, r.returncode)
        if parsed is None:
            self._fail(result, git_output.classify_error(output))
        elif parsed[0] == git_output.PUSH_UP_TO_DATE:
            result.status = STATUS_NOOP
        else:
            result.summary = parsed[1]
        return result

    def diff(self, directory: Path) -> OperationResult:
        """git diff，路径改写到仓库目录名之下"""
        result = OperationResult(name=directory.name, kind=OP_DIFF)
        r = self._git(result, ["diff"], cwd=directory)
        if r is None:
            return result
        if not r.success:
            self._fail(result, git_output.classify_error(r.stderr))
            return result
        result.diff = git_output.prefix_diff_paths(r.stdout, directory.name)
        return result

    # ---- 内部方法 ----

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        env["GIT_SSH_COMMAND"] = self.ssh_command
        env["GIT_TERMINAL_PROMPT"] = "0"
        env["LC_ALL"] = "C"
        return env

    def _git(self, result: OperationResult, args: list[str], *, cwd: Path) -> CommandResult | None:
        """执行 git；进程无法启动或超时时写入错误结果并返回 None"""
        cmd = ["git", *args]
        logger.info("git %s", args[0], extra={"repo": result.name, "operation": result.kind})
        try:
            return self._executor.execute(
                cmd, cwd=str(cwd), env=self._env(), timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            self._fail(result, RepoOperationError(f"git {args[0]} 超时（{self.timeout}秒）"))
        except OSError as e:
            self._fail(result, RepoOperationError(f"无法执行 git: {e}"))
        return None

    @staticmethod
    def _fail(result: OperationResult, error: RepoOperationError) -> None:
        result.status = STATUS_ERROR
        result.error = str(error)
        result.error_code = error.code
        logger.warning("%s %s 失败: %s", result.kind, result.name, result.error)
