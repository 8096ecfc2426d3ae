"""工作空间服务 — 库获取 / 批量 git 操作 / 打包

两种批处理方式:
  - 队列方式（clone / pull / push）: 先填充队列，调用方每次取出并执行一项，
    便于逐项展示进度或中途停止
  - 并发方式（status / commit / diff）: 每个仓库一个 git 进程并发执行，
    全部完成后按扫描顺序返回结果

用法:
    svc = WorkspaceService()
    resolution = svc.get(["H5P.Foo"])
    while (result := svc.clone_next()) is not None:
        print(result.name, result.status)
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from libhub.core.batch_queue import BatchQueue
from libhub.core.lib.models import LibraryDescriptor, Resolution
from libhub.core.lib.resolver import DependencyResolver
from libhub.core.models import OperationResult, RepositoryRecord

if TYPE_CHECKING:
    from libhub.core.config import Config
    from libhub.core.lib.registry import RegistryClient
    from libhub.services.repo.runner import RepoOperationRunner
    from libhub.services.repo.scanner import RepositoryScanner

logger = logging.getLogger(__name__)


class WorkspaceService:
    """工作空间操作入口

    持有进程内唯一的注册表客户端（注册表只拉取一次）以及两个队列:
    clone 队列由依赖解析填充，sync 队列由扫描填充（pull / push 共用）。
    """

    def __init__(
        self,
        config: Config | None = None,
        client: RegistryClient | None = None,
        runner: RepoOperationRunner | None = None,
        scanner: RepositoryScanner | None = None,
    ) -> None:
        if config is None:
            from libhub.core.config import get_config
            config = get_config()
        self.config = config
        self.root = Path(config.workspace_dir)

        if client is None:
            from libhub.core.lib.registry import RegistryClient
            client = RegistryClient(
                config.registry_url, config.api_version, config.registry_timeout,
            )
        if runner is None:
            from libhub.services.repo.runner import RepoOperationRunner
            runner = RepoOperationRunner(
                ssh_command=config.ssh_command, timeout=config.git_timeout,
            )
        if scanner is None:
            from libhub.services.repo.scanner import RepositoryScanner
            scanner = RepositoryScanner(self.root)

        self.client = client
        self.runner = runner
        self.scanner = scanner
        self.resolver = DependencyResolver(client, max_workers=config.max_workers)
        self.clone_queue: BatchQueue[LibraryDescriptor] = BatchQueue("clone")
        self.sync_queue: BatchQueue[RepositoryRecord] = BatchQueue("sync")

    # ---- 注册表 ----

    def list_libraries(self) -> list[LibraryDescriptor]:
        return self.client.list_libraries()

    def get(self, names: list[str] | tuple[str, ...]) -> Resolution:
        """解析库及其依赖，并用结果重置 clone 队列

        未知库不入队，错误随 Resolution 返回。
        """
        resolution = self.resolver.resolve(names)
        self.clone_queue.init(resolution.collection.values())
        return resolution

    def clone_next(self) -> OperationResult | None:
        """克隆队列中的下一个库，队列为空返回 None"""
        library = self.clone_queue.next()
        if library is None:
            return None
        return self.runner.clone(self.root / library.machine_name, library.repository)

    # ---- pull / push ----

    def prepare_update(self) -> int:
        """扫描工作空间并重置 sync 队列，返回待处理仓库数"""
        self.sync_queue.init(self.scanner.scan())
        return len(self.sync_queue)

    def pull_next(self) -> OperationResult | None:
        record = self.sync_queue.next()
        if record is None:
            return None
        return self.runner.pull(record.path)

    def push_next(self) -> OperationResult | None:
        record = self.sync_queue.next()
        if record is None:
            return None
        return self.runner.push(record.path)

    # ---- 并发批量操作 ----

    def status_all(self) -> list[OperationResult]:
        return self._fan_out(self.runner.status)

    def commit_all(self, message: str) -> list[OperationResult]:
        return self._fan_out(lambda path: self.runner.commit(path, message))

    def diff_all(self) -> list[OperationResult]:
        return self._fan_out(self.runner.diff)

    @staticmethod
    def combined_diff(results: list[OperationResult]) -> str:
        """拼接各仓库的 diff（路径已改写到仓库目录下）"""
        return "".join(r.diff for r in results if r.success)

    def _fan_out(self, operation: Callable[[Path], OperationResult]) -> list[OperationResult]:
        """对每个仓库并发执行 operation，全部完成后按扫描顺序返回"""
        records = self.scanner.scan()
        if not records:
            return []
        workers = min(self.config.max_workers, len(records))
        with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
            futures = [executor.submit(operation, rec.path) for rec in records]
            results = [f.result() for f in futures]
        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning("批量操作: %d 成功, %d 失败", len(results) - failed, failed)
        return results

    # ---- 打包 / 版本 ----

    def pack(self, directories: list[str], output: str = "") -> Path:
        from libhub.services.repo.packer import pack_libraries
        return pack_libraries(
            [self.root / d for d in directories],
            output or self.config.pack_output,
            ignore_pattern=self.config.ignore_pattern,
            ignore_flags=self.config.ignore_flags,
            version_file=self.config.version_file,
        )

    def increase_patch_version(self, directories: list[str]) -> dict[str, int]:
        from libhub.services.repo.version_file import increase_patch_version
        return increase_patch_version(
            [self.root / d for d in directories], self.config.version_file,
        )


_global: WorkspaceService | None = None
_global_lock = threading.Lock()


def get_workspace_service() -> WorkspaceService:
    """获取全局 WorkspaceService 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = WorkspaceService()
        return _global


def reset_workspace_service() -> None:
    """重置全局服务（配置变更后或测试中使用）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
