"""远程库注册表客户端

职责:
- 通过 HTTP 拉取注册表 JSON（每个客户端实例只拉取一次）
- 校验 apiVersion
- 按名称查询库
"""

from __future__ import annotations

import json
import logging
import threading
import urllib.error
import urllib.request

from libhub.core.exceptions import (
    NetworkError,
    ParseError,
    ProtocolError,
    VersionMismatchError,
)
from libhub.core.lib.models import LibraryDescriptor, Registry
from libhub.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)


def parse_registry(body: bytes | str, expected_version: int) -> Registry:
    """解析注册表 JSON 文档

    {"apiVersion": 1, "libraries": {"H5P.Foo": {...}}}
    """
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise ParseError(f"无法解析注册表信息: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("无法解析注册表信息: 顶层不是对象")

    api_version = data.get("apiVersion")
    # true / 1.0 与 1 相等，但不是同一个协议版本
    if type(api_version) is not int or api_version != expected_version:
        raise VersionMismatchError(expected_version, api_version)

    raw = data.get("libraries")
    if not isinstance(raw, dict):
        raise ParseError("无法解析注册表信息: 缺少 libraries")
    libraries = {
        name: LibraryDescriptor.from_dict(name, info) for name, info in raw.items()
    }
    return Registry(api_version=api_version, libraries=libraries)


class RegistryClient:
    """注册表客户端 — 首次 fetch 走网络，之后返回缓存

    只缓存成功结果；失败后再次 fetch 会重新请求。
    """

    def __init__(self, url: str = "", api_version: int | None = None, timeout: int | None = None) -> None:
        if not url or api_version is None or timeout is None:
            from libhub.core.config import get_config
            cfg = get_config()
            url = url or cfg.registry_url
            api_version = cfg.api_version if api_version is None else api_version
            timeout = cfg.registry_timeout if timeout is None else timeout
        self.url = url
        self.api_version = api_version
        self.timeout = timeout
        self._registry: Registry | None = None
        self._lock = threading.Lock()

    def fetch(self) -> Registry:
        """返回注册表快照

        Raises:
            NetworkError / ProtocolError / ParseError / VersionMismatchError
        """
        with self._lock:
            if self._registry is None:
                self._registry = parse_registry(self._read(), self.api_version)
                logger.info("注册表已加载: %d 个库 (%s)", len(self._registry), self.url)
            return self._registry

    def get(self, name: str) -> LibraryDescriptor | None:
        return self.fetch().get(name)

    def list_libraries(self) -> list[LibraryDescriptor]:
        """按名称排序列出所有库"""
        libraries = self.fetch().libraries
        return [libraries[k] for k in sorted(libraries)]

    def _read(self) -> bytes:
        validate_url_scheme(self.url, context="registry")
        logger.debug("请求注册表: %s", self.url)
        try:
            with urllib.request.urlopen(self.url, timeout=self.timeout) as resp:  # nosec B310
                status = getattr(resp, "status", 200)
                if status != 200:
                    raise ProtocolError(f"服务器返回 HTTP {status}。", status=status)
                return resp.read()
        except urllib.error.HTTPError as e:
            raise ProtocolError(f"服务器返回 HTTP {e.code}。", status=e.code) from e
        except (urllib.error.URLError, OSError) as e:
            reason = getattr(e, "reason", e)
            raise NetworkError(f"无法连接服务器: {reason}") from e
