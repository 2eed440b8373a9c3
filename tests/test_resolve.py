"""Tests for betterbuild.resolve: closure, soft ordering and tie-breaks."""

import pytest

from betterbuild.dag import DependencyGraph
from betterbuild.errors import CycleError, UnknownTargetError
from betterbuild.model import Target
from betterbuild.resolve import OrderingMode, Resolver


def make_graph(*targets):
    g = DependencyGraph()
    for t in targets:
        g.register(t)
    return g


def names(seq):
    return [t.name for t in seq]


class TestClosure:
    def test_transitive(self):
        g = make_graph(
            Target(name="restore"),
            Target(name="compile", depends_on=("restore",)),
            Target(name="test", depends_on=("compile",)),
            Target(name="pack"),
        )
        assert Resolver(g).closure(["test"]) == {"restore", "compile", "test"}

    def test_unknown_requested(self):
        g = make_graph(Target(name="a"))
        with pytest.raises(UnknownTargetError, match="missing"):
            Resolver(g).resolve("missing")


class TestResolve:
    def test_dependencies_first(self):
        g = make_graph(
            Target(name="publish", depends_on=("compile",)),
            Target(name="compile", depends_on=("restore",)),
            Target(name="restore"),
        )
        assert names(Resolver(g).resolve("publish")) == ["restore", "compile", "publish"]

    def test_diamond_runs_shared_once(self):
        g = make_graph(
            Target(name="a"),
            Target(name="b"),
            Target(name="c", depends_on=("a", "b")),
        )
        order = names(Resolver(g).resolve("c"))
        assert order == ["a", "b", "c"]
        assert len(order) == len(set(order))

    def test_shared_deep_dependency(self):
        g = make_graph(
            Target(name="setup"),
            Target(name="lint", depends_on=("setup",)),
            Target(name="unit", depends_on=("setup",)),
            Target(name="package", depends_on=("lint", "unit")),
        )
        order = names(Resolver(g).resolve("package"))
        assert order.count("setup") == 1
        assert order.index("setup") < order.index("lint") < order.index("package")
        assert order.index("unit") < order.index("package")

    def test_registration_order_tie_break(self):
        g = make_graph(
            Target(name="zeta"),
            Target(name="alpha"),
            Target(name="all", depends_on=("alpha", "zeta")),
        )
        assert names(Resolver(g).resolve("all")) == ["zeta", "alpha", "all"]

    def test_multiple_requested(self):
        g = make_graph(
            Target(name="restore"),
            Target(name="test", depends_on=("restore",)),
            Target(name="pack", depends_on=("restore",)),
        )
        assert names(Resolver(g).resolve("pack", "test")) == ["restore", "test", "pack"]

    def test_deterministic(self):
        g = make_graph(
            Target(name="c"),
            Target(name="b"),
            Target(name="a", depends_on=("b", "c")),
        )
        r = Resolver(g)
        assert names(r.resolve("a")) == names(r.resolve("a"))

    def test_builds_graph_if_needed(self):
        g = make_graph(Target(name="a", depends_on=("b",)), Target(name="b", depends_on=("a",)))
        with pytest.raises(CycleError):
            Resolver(g)


class TestSoftOrdering:
    def test_before_applies_when_both_present(self):
        # clean is registered after restore but declares before(restore)
        g = make_graph(
            Target(name="restore"),
            Target(name="clean", before=("restore",)),
            Target(name="publish", depends_on=("restore", "clean")),
        )
        assert names(Resolver(g).resolve("publish")) == ["clean", "restore", "publish"]

    def test_after_applies_when_both_present(self):
        g = make_graph(
            Target(name="test", after=("lint",)),
            Target(name="lint"),
            Target(name="ci", depends_on=("test", "lint")),
        )
        assert names(Resolver(g).resolve("ci")) == ["lint", "test", "ci"]

    def test_before_does_not_force_inclusion(self):
        g = make_graph(
            Target(name="clean", before=("restore",)),
            Target(name="restore"),
            Target(name="compile", depends_on=("restore",)),
        )
        assert names(Resolver(g).resolve("compile")) == ["restore", "compile"]

    def test_reference_outside_run_is_noop(self):
        g = make_graph(
            Target(name="a", before=("y",)),
            Target(name="y"),
        )
        assert names(Resolver(g).resolve("a")) == ["a"]

    def test_unregistered_reference_ignored_in_soft_mode(self):
        g = make_graph(Target(name="a", after=("ghost",)))
        assert names(Resolver(g).resolve("a")) == ["a"]

    def test_unregistered_reference_rejected_in_strict_mode(self):
        g = make_graph(Target(name="a", after=("ghost",)))
        with pytest.raises(UnknownTargetError, match="ghost"):
            Resolver(g, OrderingMode.STRICT).resolve("a")

    def test_soft_edge_cycle_surfaces_before_execution(self):
        g = make_graph(
            Target(name="a", depends_on=("b",)),
            Target(name="b", after=("a",)),
        )
        with pytest.raises(CycleError) as exc:
            Resolver(g).resolve("a")
        assert exc.value.targets == {"a", "b"}

    def test_soft_cycle_outside_closure_ignored(self):
        g = make_graph(
            Target(name="a", before=("b",)),
            Target(name="b", before=("a",)),
        )
        assert names(Resolver(g).resolve("a")) == ["a"]
