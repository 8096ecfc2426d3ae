"""统一异常体系

所有业务异常继承 LibHubError，CLI 层可据此输出友好提示。
already_exists / noop / nothing_to_commit 属于结果状态，不在此定义。
"""

from __future__ import annotations


class LibHubError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(LibHubError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(LibHubError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


# =========================================================================
# 注册表层: 对当前解析均为终止性错误
# =========================================================================


class RegistryError(LibHubError):
    """注册表获取失败"""

    code = "REGISTRY_ERROR"


class NetworkError(RegistryError):
    """无法连接注册表服务器"""

    code = "NETWORK_ERROR"


class ProtocolError(RegistryError):
    """服务器返回非成功的 HTTP 状态"""

    code = "PROTOCOL_ERROR"

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


class ParseError(RegistryError):
    """注册表内容不是合法的 JSON 结构"""

    code = "PARSE_ERROR"


class VersionMismatchError(RegistryError):
    """注册表 apiVersion 与本工具不一致"""

    code = "VERSION_MISMATCH"

    def __init__(self, expected: int, actual: object) -> None:
        super().__init__(
            f"API 版本不匹配 (期望 {expected}, 实际 {actual})。\n请确认本工具已更新到最新版本。"
        )
        self.expected = expected
        self.actual = actual


# =========================================================================
# 解析层 — 仅影响所在分支
# =========================================================================


class UnknownLibraryError(LibHubError):
    """注册表中不存在的库

    chain 为从请求根节点到该库父节点的路径，用于定位出错分支。
    """

    code = "UNKNOWN_LIBRARY"

    def __init__(self, name: str, chain: tuple[str, ...] = ()) -> None:
        prefix = " -> ".join((*chain, name))
        super().__init__(f"{prefix}: 注册表中没有该库")
        self.name = name
        self.chain = chain


# =========================================================================
# 仓库操作层 — 由 git 原始输出归一化而来
# =========================================================================


class RepoOperationError(LibHubError):
    """git 操作失败"""

    code = "GIT_ERROR"


class AuthError(RepoOperationError):
    """ssh 认证被拒绝"""

    code = "AUTH_ERROR"


class HostVerificationError(RepoOperationError):
    """ssh 主机密钥校验失败"""

    code = "HOST_VERIFICATION_ERROR"


class VersionFileError(LibHubError):
    """库版本文件缺失或格式错误"""

    code = "VERSION_FILE_ERROR"
