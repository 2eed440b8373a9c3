"""Tests for betterbuild.dag: registration and acyclicity checks."""

import pytest

from betterbuild.dag import DependencyGraph, find_cycle
from betterbuild.dsl import target
from betterbuild.errors import CycleError, DuplicateTargetError, UnknownTargetError
from betterbuild.model import Target
from betterbuild.resolve import Resolver


class TestRegister:
    def test_register_target(self):
        g = DependencyGraph()
        t = g.register(Target(name="restore"))
        assert t.name == "restore"
        assert "restore" in g
        assert len(g) == 1

    def test_register_builder_freezes(self):
        g = DependencyGraph()
        t = g.register(target("compile").depends_on("restore"))
        assert isinstance(t, Target)
        assert t.depends_on == ("restore",)

    def test_duplicate_name_raises(self):
        g = DependencyGraph()
        g.register(Target(name="clean"))
        with pytest.raises(DuplicateTargetError, match="clean"):
            g.register(Target(name="clean"))

    def test_registration_order_kept(self):
        g = DependencyGraph()
        for name in ("c", "a", "b"):
            g.register(Target(name=name))
        assert g.names() == ["c", "a", "b"]
        assert g.index_of("a") == 1

    def test_register_after_build_rejected(self):
        g = DependencyGraph()
        g.register(Target(name="a"))
        g.build()
        with pytest.raises(RuntimeError):
            g.register(Target(name="b"))

    def test_getitem_unknown(self):
        g = DependencyGraph()
        with pytest.raises(UnknownTargetError, match="nope"):
            g["nope"]


class TestBuild:
    def test_acyclic_graph_builds(self):
        g = DependencyGraph()
        g.register(Target(name="restore"))
        g.register(Target(name="compile", depends_on=("restore",)))
        assert g.build() is g
        assert g.built

    def test_two_node_cycle(self):
        g = DependencyGraph()
        g.register(Target(name="a", depends_on=("b",)))
        g.register(Target(name="b", depends_on=("a",)))
        with pytest.raises(CycleError) as exc:
            g.build()
        assert exc.value.targets == {"a", "b"}

    def test_self_dependency_is_cycle(self):
        g = DependencyGraph()
        g.register(Target(name="a", depends_on=("a",)))
        with pytest.raises(CycleError) as exc:
            g.build()
        assert exc.value.targets == {"a"}

    def test_cycle_reports_only_participants(self):
        g = DependencyGraph()
        g.register(Target(name="root"))
        g.register(Target(name="x", depends_on=("root", "z")))
        g.register(Target(name="y", depends_on=("x",)))
        g.register(Target(name="z", depends_on=("y",)))
        with pytest.raises(CycleError) as exc:
            g.build()
        assert exc.value.targets == {"x", "y", "z"}
        assert exc.value.cycle[0] == exc.value.cycle[-1]

    def test_soft_cycle_is_not_fatal_at_build(self):
        g = DependencyGraph()
        g.register(Target(name="a", before=("b",)))
        g.register(Target(name="b", before=("a",)))
        g.build()

    def test_missing_dependency(self):
        g = DependencyGraph()
        g.register(Target(name="compile", depends_on=("restore",)))
        with pytest.raises(UnknownTargetError, match="compile"):
            g.build()


class TestFindCycle:
    def test_acyclic(self):
        assert find_cycle({"a": ["b"], "b": []}, ["a", "b"]) is None

    def test_first_revisited_node(self):
        adj = {"a": ["b"], "b": ["c"], "c": ["b"]}
        assert find_cycle(adj, ["a", "b", "c"]) == ["b", "c", "b"]

    def test_shared_successor_is_not_cycle(self):
        adj = {"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []}
        assert find_cycle(adj, ["a", "b", "c", "d"]) is None


class TestLongChains:
    def test_long_chain_builds_and_resolves(self):
        g = DependencyGraph()
        g.register(Target(name="t0"))
        for i in range(1, 2500):
            g.register(Target(name=f"t{i}", depends_on=(f"t{i - 1}",)))
        resolved = Resolver(g).resolve("t2499")
        assert [t.name for t in resolved] == [f"t{i}" for i in range(2500)]

    def test_cycle_at_end_of_long_chain(self):
        g = DependencyGraph()
        g.register(Target(name="t0", depends_on=("t2999",)))
        for i in range(1, 3000):
            g.register(Target(name=f"t{i}", depends_on=(f"t{i - 1}",)))
        with pytest.raises(CycleError) as exc:
            g.build()
        assert len(exc.value.targets) == 3000
