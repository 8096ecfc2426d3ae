"""库注册表数据模型

数据类:
- LibraryDescriptor: 单个库的元信息（来自注册表，只读）
- Registry: 注册表快照
- Resolution: 一次依赖解析的结果
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from libhub.core.exceptions import ParseError, UnknownLibraryError


@dataclass(frozen=True)
class LibraryDescriptor:
    """单个库的元信息"""

    machine_name: str
    major_version: int = 0
    minor_version: int = 0
    patch_version: int = 0
    repository: str = ""                        # clone 地址
    dependencies: tuple[str, ...] = ()          # 依赖库 machineName，保持注册表顺序

    @property
    def version(self) -> str:
        return f"{self.major_version}.{self.minor_version}.{self.patch_version}"

    @classmethod
    def from_dict(cls, name: str, data: Any) -> LibraryDescriptor:
        """按注册表 JSON 字段构造，格式不符时抛 ParseError"""
        if not isinstance(data, dict):
            raise ParseError(f"库 '{name}' 的描述不是对象")
        deps = data.get("dependencies") or []
        if not isinstance(deps, list):
            raise ParseError(f"库 '{name}' 的 dependencies 不是数组")
        try:
            return cls(
                machine_name=str(data.get("machineName") or name),
                major_version=int(data.get("majorVersion", 0)),
                minor_version=int(data.get("minorVersion", 0)),
                patch_version=int(data.get("patchVersion", 0)),
                repository=str(data.get("repository", "")),
                dependencies=tuple(str(d) for d in deps),
            )
        except (TypeError, ValueError) as e:
            raise ParseError(f"库 '{name}' 的版本号无效: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return {
            "machineName": self.machine_name,
            "majorVersion": self.major_version,
            "minorVersion": self.minor_version,
            "patchVersion": self.patch_version,
            "repository": self.repository,
            "dependencies": list(self.dependencies),
        }


@dataclass(frozen=True)
class Registry:
    """注册表快照 — 进程生命周期内视为不可变"""

    api_version: int
    libraries: dict[str, LibraryDescriptor] = field(default_factory=dict)

    def get(self, name: str) -> LibraryDescriptor | None:
        return self.libraries.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.libraries

    def __len__(self) -> int:
        return len(self.libraries)


@dataclass
class Resolution:
    """一次依赖解析的结果

    collection 保持首次发现的顺序；errors 只包含未知库，
    其余分支照常解析。
    """

    collection: dict[str, LibraryDescriptor] = field(default_factory=dict)
    errors: list[UnknownLibraryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def names(self) -> list[str]:
        return list(self.collection)
