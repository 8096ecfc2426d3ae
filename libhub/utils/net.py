"""网络工具 — 注册表地址校验"""

from __future__ import annotations

from urllib.parse import urlparse

from libhub.core.exceptions import ValidationError

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内或缺少主机名
    """
    parsed = urlparse(url)
    label = f" ({context})" if context else ""
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )
    if not parsed.netloc:
        raise ValidationError(f"URL 缺少主机名{label}: {url}")


def ssh_host(url: str) -> str:
    """从 scp 风格的 git 地址中取出 ssh 主机部分

    git@github.com:h5p/h5p-foo.git -> git@github.com
    无法识别时返回空字符串。
    """
    if not url or "://" in url or ":" not in url:
        return ""
    return url.split(":", 1)[0]
