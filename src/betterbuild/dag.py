# dag.py
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .errors import CycleError, DuplicateTargetError, UnknownTargetError
from .model import Target


def find_cycle(adj: Mapping[str, Iterable[str]], order: Sequence[str]) -> Optional[List[str]]:
    """
    Depth-first search over `adj` (node -> successors).

    Nodes are visited in `order`. Returns the first cycle found as a path that
    starts and ends with the node that was revisited while still in progress,
    or None if the graph is acyclic.
    """
    in_progress: set[str] = set()
    done: set[str] = set()

    for root in order:
        if root in done:
            continue
        # Explicit stack of (node, successor iterator); path mirrors the stack.
        path: List[str] = [root]
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(adj.get(root, ())))]
        in_progress.add(root)
        while stack:
            node, successors = stack[-1]
            nxt = next(successors, None)
            if nxt is None:
                stack.pop()
                path.pop()
                in_progress.discard(node)
                done.add(node)
            elif nxt in in_progress:
                start = path.index(nxt)
                return path[start:] + [nxt]
            elif nxt not in done:
                in_progress.add(nxt)
                path.append(nxt)
                stack.append((nxt, iter(adj.get(nxt, ()))))
    return None


class DependencyGraph:
    """
    All registered targets of one build, keyed by name.

    Usage:
        graph = DependencyGraph()
        graph.register(target("restore").executes(...))
        graph.register(target("compile").depends_on("restore").executes(...))
        graph.build()
    """

    def __init__(self) -> None:
        self._targets: Dict[str, Target] = {}
        self._built = False

    def register(self, target) -> Target:
        """Add a target (or an unfinished TargetBuilder, which is frozen here)."""
        if self._built:
            raise RuntimeError("Cannot register targets after build()")
        if not isinstance(target, Target):
            target = target.build()
        if target.name in self._targets:
            raise DuplicateTargetError(target.name)
        self._targets[target.name] = target
        return target

    def build(self) -> "DependencyGraph":
        """
        Validate and freeze the graph.

        Raises:
          - UnknownTargetError if a depends_on names an unregistered target
          - CycleError if depends_on edges form a cycle
        """
        if self._built:
            return self
        for t in self._targets.values():
            for dep in t.depends_on:
                if dep not in self._targets:
                    raise UnknownTargetError(dep, self._targets, referenced_by=t.name)

        # Edge dep -> target (dep must run before target)
        cycle = find_cycle(self.dependents(), list(self._targets))
        if cycle:
            raise CycleError(cycle)

        self._built = True
        return self

    # ---- queries ----

    @property
    def built(self) -> bool:
        return self._built

    def dependents(self) -> Dict[str, List[str]]:
        """Adjacency dep -> [targets that depend on it], in registration order."""
        adj: Dict[str, List[str]] = {name: [] for name in self._targets}
        for t in self._targets.values():
            for dep in t.depends_on:
                if dep in adj and t.name not in adj[dep]:
                    adj[dep].append(t.name)
        return adj

    def index_of(self, name: str) -> int:
        return list(self._targets).index(name)

    def names(self) -> List[str]:
        return list(self._targets)

    def get(self, name: str) -> Optional[Target]:
        return self._targets.get(name)

    def __getitem__(self, name: str) -> Target:
        try:
            return self._targets[name]
        except KeyError:
            raise UnknownTargetError(name, self._targets) from None

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)
