"""git 输出解析 — 把 git 的诊断文本翻译为结构化结果

这里的前缀判断依赖 git 输出的具体措辞（英文 locale），
git 版本或语言环境变化都可能使其失效，因此只在本模块中使用。
runner 调用 git 时固定 LC_ALL=C 以尽量稳定输出。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from libhub.core.exceptions import AuthError, HostVerificationError, RepoOperationError
from libhub.utils.net import ssh_host

# ssh 在多 IP 主机（如 github.com）上会输出无关的 Warning
_NOISE_PREFIXES = ("Warning:", "Cloning into")

_WS_RE = re.compile(r"\s{2,}")
_DIFF_FILE_RE = re.compile(r"\n(---|\+\+\+) (a|b)/")
_DIFF_HEADER_RE = re.compile(r"(^|\n)diff --git a/(.+) b/")


def skip_warnings(output: str) -> str:
    """去掉 ssh 警告和 clone 进度提示行"""
    lines = [
        line for line in output.splitlines()
        if not line.startswith(_NOISE_PREFIXES)
    ]
    return "\n".join(lines).strip()


def classify_error(output: str, url: str = "") -> RepoOperationError:
    """把 git/ssh 的失败输出归一化为简短、可操作的异常

    无法识别时保留原始输出。
    """
    host = ssh_host(url)
    if "Host key verification failed." in output:
        hint = f" 请手动执行 ssh -T {host} 确认主机指纹。" if host else ""
        return HostVerificationError(f"主机密钥校验失败。{hint}".strip())
    if "Permission denied" in output:
        hint = f" (ssh -T {host} 不应要求输入密码或口令)" if host else ""
        return AuthError(f"权限被拒绝。\n请确认 ssh-agent 正在运行。{hint}".rstrip())
    return RepoOperationError(output.strip() or "git 执行失败")


def is_already_exists(output: str) -> bool:
    return "already exists" in output


# =========================================================================
# status
# =========================================================================

@dataclass
class StatusInfo:
    branch: str = ""
    changes: list[str] = field(default_factory=list)


def parse_status(stdout: str) -> StatusInfo:
    """解析 git status --porcelain --branch

    ## main...origin/main [ahead 1]
     M library.json
    ?? new.js
    """
    lines = [line for line in stdout.split("\n") if line]
    info = StatusInfo()
    if lines and lines[0].startswith("## "):
        info.branch = lines.pop(0)[3:]
    info.changes = lines
    return info


# =========================================================================
# commit
# =========================================================================

@dataclass
class CommitInfo:
    nothing_to_commit: bool = False
    branch: str = ""
    commit: str = ""
    changes: list[str] = field(default_factory=list)


def parse_commit(stdout: str) -> CommitInfo | None:
    """解析 git commit 的摘要输出

    [master 1a2b3c4] message
     2 files changed, 3 insertions(+)

    无可提交内容时新版 git 输出 "On branch ..."，旧版以 "#" 开头。
    无法识别时返回 None。
    """
    lines = [line for line in stdout.split("\n") if line]
    if not lines:
        return None
    first = lines[0]
    if first.startswith("["):
        head = first.split("]", 1)[0].lstrip("[").split()
        return CommitInfo(
            branch=head[0] if head else "",
            commit=head[-1] if len(head) > 1 else "",
            changes=lines[1:],
        )
    if first.startswith(("#", "On branch")) or "nothing to commit" in stdout:
        return CommitInfo(nothing_to_commit=True)
    return None


# =========================================================================
# pull / push
# =========================================================================

def pull_succeeded(output: str, returncode: int) -> bool:
    """pull 成功: 退出码为 0，且 stderr 以 "From <remote>" 开头或为空

    合并失败（如分支分叉）时 stderr 同样以 "From" 开头，只能靠退出码区分。
    """
    if returncode != 0:
        return False
    return output.startswith("From") or not output


PUSH_UP_TO_DATE = "up_to_date"
PUSH_UPDATED = "updated"


def parse_push(output: str, returncode: int = 0) -> tuple[str, str] | None:
    """解析 git push 的 stderr

    返回 (PUSH_UP_TO_DATE, "") 或 (PUSH_UPDATED, 摘要)；"To" 开头但非零退出、或无法识别时返回 None。
    被拒绝的推送 stderr 也以 "To" 开头。

    To git@github.com:h5p/h5p-foo.git
       1a2b3c4..5d6e7f8  HEAD -> master
    """
    if output.startswith("Everything up-to-date"):
        return PUSH_UP_TO_DATE, ""
    if returncode == 0 and output.startswith("To"):
        lines = output.split("\n")
        line = lines[1] if len(lines) > 1 else lines[0]
        return PUSH_UPDATED, _WS_RE.sub(" ", line.strip())
    return None


# =========================================================================
# diff
# =========================================================================

def prefix_diff_paths(diff: str, repo: str) -> str:
    """把 diff 中的 a/ b/ 路径改写到仓库目录之下

    多个仓库的 diff 拼接后可作为一个补丁在工作空间根目录应用。
    """
    diff = _DIFF_FILE_RE.sub(lambda m: f"\n{m.group(1)} {m.group(2)}/{repo}/", diff)
    return _DIFF_HEADER_RE.sub(
        lambda m: f"{m.group(1)}diff --git a/{repo}/{m.group(2)} b/{repo}/", diff,
    )
