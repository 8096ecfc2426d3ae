"""库依赖解析器

职责:
- 从请求的库名出发，递归展开完整的传递依赖集合
- 去重 / 终止循环依赖：库在首次发现时即写入集合，之后再遇到视为空操作
- 按分支收集未知库错误，不影响其他分支
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from libhub.core.exceptions import UnknownLibraryError
from libhub.core.lib.models import LibraryDescriptor, Resolution

if TYPE_CHECKING:
    from libhub.core.lib.registry import RegistryClient

logger = logging.getLogger(__name__)

# (库名, 祖先链)
_Pending = tuple[str, tuple[str, ...]]


@dataclass
class ResolutionContext:
    """单次 resolve 调用的共享状态，随调用创建、随结果返回"""

    collection: dict[str, LibraryDescriptor] = field(default_factory=dict)
    errors: list[UnknownLibraryError] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def claim(self, name: str, library: LibraryDescriptor) -> bool:
        """首次出现时写入集合并返回 True，已存在返回 False"""
        with self.lock:
            if name in self.collection:
                return False
            self.collection[name] = library
            return True

    def seen(self, name: str) -> bool:
        with self.lock:
            return name in self.collection


class DependencyResolver:
    """依赖解析器

    按层展开依赖树：同一层的所有库并发查询注册表，整层完成后
    （join）再按请求顺序合并结果并进入下一层。合并在调用线程中
    顺序进行，因此集合顺序和错误顺序与线程完成顺序无关。
    """

    def __init__(self, client: RegistryClient, max_workers: int | None = None) -> None:
        if max_workers is None:
            from libhub.core.config import get_config
            max_workers = get_config().max_workers
        self.client = client
        self.max_workers = max(1, max_workers)

    def resolve(self, names: list[str] | tuple[str, ...]) -> Resolution:
        """解析给定库名及其全部依赖

        注册表层错误（网络 / 协议 / 解析 / 版本）直接抛出；
        未知库错误收集在 Resolution.errors 中。
        """
        # 注册表失败对整个解析是终止性的，先拉取一次
        self.client.fetch()

        ctx = ResolutionContext()
        frontier: list[_Pending] = [(name, ()) for name in names]
        depth = 0
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            while frontier:
                lookups = list(pool.map(lambda item: self._lookup(ctx, item[0]), frontier))
                frontier = self._merge(ctx, frontier, lookups)
                depth += 1

        logger.info(
            "依赖解析完成: 请求 %d 个, 得到 %d 个库, %d 个错误 (深度 %d)",
            len(names), len(ctx.collection), len(ctx.errors), depth,
        )
        return Resolution(collection=ctx.collection, errors=ctx.errors)

    def _lookup(self, ctx: ResolutionContext, name: str) -> LibraryDescriptor | None:
        """查询单个库；空名和已收集的库不需要查询"""
        if not name or ctx.seen(name):
            return None
        return self.client.get(name)

    @staticmethod
    def _merge(
        ctx: ResolutionContext,
        frontier: list[_Pending],
        lookups: list[LibraryDescriptor | None],
    ) -> list[_Pending]:
        """按请求顺序合并本层结果，返回下一层待解析的依赖"""
        next_frontier: list[_Pending] = []
        for (name, chain), library in zip(frontier, lookups):
            if not name:
                continue
            if library is None:
                if not ctx.seen(name):
                    err = UnknownLibraryError(name, chain)
                    logger.warning("%s", err, extra={"library": name})
                    ctx.errors.append(err)
                continue
            # 先写入再展开依赖，保证每个库最多展开一次
            if not ctx.claim(name, library):
                continue
            branch = (*chain, name)
            next_frontier.extend((dep, branch) for dep in library.dependencies)
        return next_frontier
