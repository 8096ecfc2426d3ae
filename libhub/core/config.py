"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 环境变量覆盖 + 编程式覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import yaml

from libhub.core.exceptions import ConfigError
from libhub.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "libhub.yml"

# 环境变量 -> 配置字段
_ENV_OVERRIDES = {
    "LIBHUB_REGISTRY_URL": "registry_url",
    "LIBHUB_IGNORE_PATTERN": "ignore_pattern",
    "LIBHUB_IGNORE_FLAGS": "ignore_flags",
    "LIBHUB_SSH_COMMAND": "ssh_command",
}


@dataclass
class Config:
    """全局配置"""

    # 注册表
    registry_url: str = "http://h5p.org/registry.json"
    api_version: int = 1
    registry_timeout: int = 30

    # 工作空间
    workspace_dir: str = "."
    version_file: str = "library.json"

    # git
    ssh_command: str = "ssh -o BatchMode=yes"
    git_timeout: int = 600
    max_workers: int = 8

    # 打包
    pack_output: str = "libraries.h5p"
    ignore_pattern: str = r"^\.|~$"
    ignore_flags: str = "i"

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认；随后应用环境变量覆盖"""
        try:
            data = load_yaml(path)
        except yaml.YAMLError as e:
            raise ConfigError(f"配置文件格式错误: {path} - {e}") from e
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件无效: {path} - {e}") from e
        cfg.extra = extra
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """用 LIBHUB_* 环境变量覆盖对应字段"""
        for env_key, attr in _ENV_OVERRIDES.items():
            value = os.environ.get(env_key)
            if value is not None:
                setattr(self, attr, value)

    def to_dict(self) -> dict:
        from dataclasses import asdict
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
