"""Resolver: turn requested target names into an ordered, deduplicated run sequence."""

from __future__ import annotations

import heapq
from collections import deque
from enum import Enum
from typing import Dict, Iterable, List, Set

from .dag import DependencyGraph, find_cycle
from .errors import CycleError, UnknownTargetError
from .model import Target


class OrderingMode(str, Enum):
    # before/after that name unknown targets are ignored
    SOFT = "soft"
    # before/after that name unknown targets are configuration errors
    STRICT = "strict"


class Resolver:
    def __init__(self, graph: DependencyGraph, ordering: OrderingMode = OrderingMode.SOFT):
        if not graph.built:
            graph.build()
        self.graph = graph
        self.ordering = ordering

    def closure(self, requested: Iterable[str]) -> Set[str]:
        """Requested targets plus everything they transitively depend on."""
        seen: Set[str] = set()
        queue = deque()
        for name in requested:
            if name not in self.graph:
                raise UnknownTargetError(name, self.graph.names())
            queue.append(name)

        while queue:
            name = queue.popleft()
            if name in seen:
                continue
            seen.add(name)
            queue.extend(self.graph[name].depends_on)
        return seen

    def ordering_edges(self, members: Set[str]) -> Dict[str, List[str]]:
        """
        Combined precedence graph (node -> successors) over `members`.

        depends_on edges always apply; before/after edges only when both
        ends are in `members`.
        """
        adj: Dict[str, List[str]] = {name: [] for name in self.graph.names() if name in members}

        def add(src: str, dst: str) -> None:
            if dst not in adj[src]:
                adj[src].append(dst)

        for name in adj:
            t: Target = self.graph[name]
            for dep in t.depends_on:
                add(dep, name)
            for other in t.before:
                self._check_soft_ref(t, other)
                if other in members:
                    add(name, other)
            for other in t.after:
                self._check_soft_ref(t, other)
                if other in members:
                    add(other, name)
        return adj

    def resolve(self, *requested: str) -> List[Target]:
        """
        Ordered run sequence for the requested target(s).

        Hard dependencies always precede their dependents; targets with no
        ordering relation keep their registration order.
        """
        members = self.closure(requested)
        adj = self.ordering_edges(members)

        indeg: Dict[str, int] = {n: 0 for n in adj}
        for succs in adj.values():
            for s in succs:
                indeg[s] += 1

        rank = {name: i for i, name in enumerate(self.graph.names())}
        ready = [(rank[n], n) for n, d in indeg.items() if d == 0]
        heapq.heapify(ready)

        order: List[str] = []
        while ready:
            _, node = heapq.heappop(ready)
            order.append(node)
            for child in adj[node]:
                indeg[child] -= 1
                if indeg[child] == 0:
                    heapq.heappush(ready, (rank[child], child))

        if len(order) != len(adj):
            cycle = find_cycle(adj, list(adj))
            if cycle is None:  # pragma: no cover
                cycle = sorted(n for n, d in indeg.items() if d > 0)
            raise CycleError(cycle)

        return [self.graph[n] for n in order]

    def _check_soft_ref(self, t: Target, other: str) -> None:
        if self.ordering is OrderingMode.STRICT and other not in self.graph:
            raise UnknownTargetError(other, self.graph.names(), referenced_by=t.name)
