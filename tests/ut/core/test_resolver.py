"""DependencyResolver 单元测试"""

from __future__ import annotations

import logging

import pytest

from libhub.core.exceptions import NetworkError, UnknownLibraryError, VersionMismatchError
from libhub.core.lib.resolver import DependencyResolver


class TestTransitiveClosure:
    def test_chain(self, make_client) -> None:
        """A -> B -> C 全部解析，无错误"""
        client = make_client({"A": ["B"], "B": ["C"], "C": []})
        res = DependencyResolver(client, max_workers=4).resolve(["A"])
        assert set(res.collection) == {"A", "B", "C"}
        assert res.errors == []
        assert res.ok

    def test_unrelated_libraries_not_included(self, make_client) -> None:
        client = make_client({"A": ["B"], "B": [], "Z": []})
        res = DependencyResolver(client).resolve(["A"])
        assert res.names == ["A", "B"]

    def test_order_is_discovery_order(self, make_client) -> None:
        client = make_client({"A": ["C", "B"], "B": ["D"], "C": [], "D": []})
        res = DependencyResolver(client, max_workers=8).resolve(["A"])
        assert res.names == ["A", "C", "B", "D"]

    def test_shared_dependency_appears_once(self, make_client) -> None:
        """A -> B, A -> C, B -> C"""
        client = make_client({"A": ["B", "C"], "B": ["C"], "C": []})
        res = DependencyResolver(client).resolve(["A"])
        assert res.names.count("C") == 1
        assert set(res.collection) == {"A", "B", "C"}

    @pytest.mark.parametrize("graph", [
        {"A": ["A"]},
        {"A": ["B"], "B": ["A"]},
        {"A": ["B"], "B": ["C"], "C": ["A"]},
    ])
    def test_cycles_terminate(self, make_client, graph) -> None:
        client = make_client(graph)
        res = DependencyResolver(client).resolve(["A"])
        assert set(res.collection) == set(graph)
        assert res.errors == []

    def test_collection_holds_registry_descriptors(self, make_client) -> None:
        client = make_client({"A": ["B"], "B": []})
        res = DependencyResolver(client).resolve(["A"])
        assert res.collection["A"].repository == "git@example.com:libs/A.git"
        assert res.collection["A"].dependencies == ("B",)

    def test_single_worker(self, make_client) -> None:
        client = make_client({"A": ["B", "C"], "B": ["D"], "C": ["D"], "D": []})
        res = DependencyResolver(client, max_workers=1).resolve(["A"])
        assert res.names == ["A", "B", "C", "D"]


class TestDuplicatesAndEmpty:
    def test_duplicate_roots(self, make_client) -> None:
        client = make_client({"A": []})
        res = DependencyResolver(client).resolve(["A", "A"])
        assert res.names == ["A"]
        assert res.errors == []

    def test_empty_name_is_noop(self, make_client) -> None:
        client = make_client({"A": ["", "B"], "B": []})
        res = DependencyResolver(client).resolve(["", "A"])
        assert res.names == ["A", "B"]
        assert res.errors == []

    def test_empty_request(self, make_client) -> None:
        client = make_client({"A": []})
        res = DependencyResolver(client).resolve([])
        assert res.collection == {}
        assert res.errors == []

    def test_new_collection_per_call(self, make_client) -> None:
        client = make_client({"A": [], "B": []})
        resolver = DependencyResolver(client)
        assert resolver.resolve(["A"]).names == ["A"]
        assert resolver.resolve(["B"]).names == ["B"]


class TestErrors:
    def test_missing_dependency_does_not_block_siblings(self, make_client) -> None:
        """A 依赖不存在的 X，B 正常"""
        client = make_client({"A": ["X"], "B": []})
        res = DependencyResolver(client).resolve(["A", "B"])
        assert set(res.collection) == {"A", "B"}
        assert len(res.errors) == 1
        err = res.errors[0]
        assert isinstance(err, UnknownLibraryError)
        assert err.name == "X"
        assert err.chain == ("A",)
        assert str(err).startswith("A -> X")

    def test_unknown_root(self, make_client) -> None:
        client = make_client({"B": []})
        res = DependencyResolver(client).resolve(["Nope", "B"])
        assert res.names == ["B"]
        assert [e.name for e in res.errors] == ["Nope"]
        assert res.errors[0].chain == ()
        assert not res.ok

    def test_missing_library_not_inserted(self, make_client) -> None:
        client = make_client({"A": ["X", "B"], "B": []})
        res = DependencyResolver(client).resolve(["A"])
        assert "X" not in res.collection
        assert "B" in res.collection

    def test_errors_reported_per_branch(self, make_client) -> None:
        client = make_client({"A": ["X"], "B": ["X"]})
        res = DependencyResolver(client).resolve(["A", "B"])
        assert [(e.name, e.chain) for e in res.errors] == [("X", ("A",)), ("X", ("B",))]

    def test_unknown_library_logged_with_context(self, make_client, caplog) -> None:
        client = make_client({"A": ["X"]})
        with caplog.at_level(logging.WARNING, logger="libhub.core.lib.resolver"):
            DependencyResolver(client).resolve(["A"])
        records = [r for r in caplog.records if getattr(r, "library", None) == "X"]
        assert len(records) == 1
        assert "A -> X" in records[0].getMessage()

    def test_deep_chain_in_error(self, make_client) -> None:
        client = make_client({"A": ["B"], "B": ["C"], "C": ["Gone"]})
        res = DependencyResolver(client).resolve(["A"])
        assert res.errors[0].chain == ("A", "B", "C")

    def test_registry_error_is_terminal(self, make_client) -> None:
        client = make_client({"A": []})

        def _fail() -> bytes:
            raise NetworkError("无法连接服务器: refused")

        client._read = _fail
        with pytest.raises(NetworkError):
            DependencyResolver(client).resolve(["A"])

    def test_version_mismatch_is_terminal(self, make_client) -> None:
        client = make_client({"A": []}, api_version=2)
        with pytest.raises(VersionMismatchError):
            DependencyResolver(client).resolve(["A"])
