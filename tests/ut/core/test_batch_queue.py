"""BatchQueue 单元测试"""

from __future__ import annotations

import pytest

from libhub.core.batch_queue import BatchQueue


class TestBatchQueue:
    @pytest.mark.parametrize("n", [0, 1, 5])
    def test_drains_each_item_once(self, n: int) -> None:
        q: BatchQueue[int] = BatchQueue()
        q.init(range(n))
        seen = [q.next() for _ in range(n)]
        assert seen == list(range(n))
        assert q.next() is None

    def test_empty_signal_repeats(self) -> None:
        q: BatchQueue[str] = BatchQueue()
        assert q.next() is None
        assert q.next() is None

    def test_reinit_discards_remaining(self) -> None:
        q: BatchQueue[str] = BatchQueue("sync")
        q.init(["a", "b", "c"])
        assert q.next() == "a"
        q.init(["x"])
        assert q.pending() == ["x"]
        assert q.next() == "x"
        assert q.next() is None

    def test_init_copies_input(self) -> None:
        items = ["a", "b"]
        q: BatchQueue[str] = BatchQueue()
        q.init(items)
        q.next()
        assert items == ["a", "b"]

    def test_len_and_bool(self) -> None:
        q: BatchQueue[str] = BatchQueue()
        assert not q
        q.init(["a", "b"])
        assert len(q) == 2
        assert q
        q.next()
        assert len(q) == 1

    def test_pending_does_not_consume(self) -> None:
        q: BatchQueue[str] = BatchQueue()
        q.init(["a", "b"])
        assert q.pending() == ["a", "b"]
        assert len(q) == 2

    def test_caller_may_stop_midway(self) -> None:
        q: BatchQueue[str] = BatchQueue()
        q.init(["a", "b", "c"])
        processed = []
        while (item := q.next()) is not None:
            processed.append(item)
            if item == "b":
                break
        assert processed == ["a", "b"]
        assert q.pending() == ["c"]
