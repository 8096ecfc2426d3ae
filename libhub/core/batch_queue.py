"""批处理队列 — 由调用方逐个取出待处理项

队列本身不执行任何操作：调用方取出一项、执行、展示结果，再取下一项。
取空时 next() 返回 None，这是调用方循环的结束信号而不是错误。
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BatchQueue(Generic[T]):
    """有序待处理队列，只允许从队首移除"""

    def __init__(self, name: str = "queue") -> None:
        self.name = name
        self._items: deque[T] = deque()

    def init(self, items: Iterable[T]) -> None:
        """重置队列内容，未取完的旧项直接丢弃"""
        if self._items:
            logger.debug("%s: 丢弃 %d 个未处理项", self.name, len(self._items))
        self._items = deque(items)
        logger.info("%s: 已加入 %d 项", self.name, len(self._items))

    def next(self) -> T | None:
        """取出并返回队首项，队列为空返回 None"""
        if not self._items:
            return None
        return self._items.popleft()

    def pending(self) -> list[T]:
        """剩余项快照（不修改队列）"""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
