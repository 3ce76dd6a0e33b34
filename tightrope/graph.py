# tightrope/graph.py
"""Adjacency maps over finish-to-start dependencies."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from tightrope.errors import UnknownTaskError
from tightrope.model import Dependency

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyGraph:
    task_ids: Tuple[str, ...]
    successors: Dict[str, Tuple[str, ...]]
    predecessors: Dict[str, Tuple[str, ...]]

    def successors_of(self, task_id: str) -> Tuple[str, ...]:
        return self.successors.get(task_id, ())

    def predecessors_of(self, task_id: str) -> Tuple[str, ...]:
        return self.predecessors.get(task_id, ())

    def roots(self) -> List[str]:
        return [u for u in self.task_ids if not self.predecessors_of(u)]

    def chain_ends(self) -> List[str]:
        return [u for u in self.task_ids if not self.successors_of(u)]

    def edge_count(self) -> int:
        return sum(len(v) for v in self.successors.values())

    def reachable_from(self, task_id: str) -> List[str]:
        """Ids downstream of `task_id` in BFS order.

        The start id itself is included only when a cycle leads back to it.
        """
        seen: set[str] = set()
        out: List[str] = []
        queue: deque[str] = deque(self.successors_of(task_id))
        while queue:
            cur = queue.popleft()
            if cur in seen:
                continue
            seen.add(cur)
            out.append(cur)
            queue.extend(self.successors_of(cur))
        return out


def build_graph(
    task_ids: Iterable[str],
    dependencies: Iterable[Dependency],
    *,
    strict: bool = False,
) -> DependencyGraph:
    """Build successor/predecessor maps.

    Self-loops are always dropped. Edges with an endpoint outside `task_ids`
    are dropped, or raise UnknownTaskError when `strict` is set.
    Duplicate edges collapse; neighbour order is first-seen edge order.
    """
    ids = tuple(dict.fromkeys(task_ids))
    known = set(ids)
    succ: Dict[str, Dict[str, None]] = {u: {} for u in ids}
    pred: Dict[str, Dict[str, None]] = {u: {} for u in ids}

    for dep in dependencies:
        p, s = dep.predecessor_id, dep.successor_id
        for u in (p, s):
            if u not in known:
                if strict:
                    raise UnknownTaskError(u, where="dependencies")
                logger.debug("dropping dependency %s -> %s: unknown id %s", p, s, u)
                break
        else:
            if p == s:
                logger.debug("dropping self-dependency on %s", p)
                continue
            succ[p][s] = None
            pred[s][p] = None

    return DependencyGraph(
        task_ids=ids,
        successors={u: tuple(v) for u, v in succ.items()},
        predecessors={u: tuple(v) for u, v in pred.items()},
    )


def find_cycle(graph: DependencyGraph, start: Optional[str] = None) -> Optional[List[str]]:
    """Return one cycle as a closed path (e.g. ["a", "b", "a"]) or None.

    With `start`, only the part of the graph reachable from it is searched.
    Iterative DFS so long chains do not hit the recursion limit.
    """
    roots = [start] if start is not None else list(graph.task_ids)
    done: set[str] = set()

    for root in roots:
        if root in done:
            continue
        path: List[str] = [root]
        on_path = {root}
        stack = [iter(graph.successors_of(root))]
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue
            if nxt in on_path:
                return path[path.index(nxt):] + [nxt]
            if nxt in done:
                continue
            path.append(nxt)
            on_path.add(nxt)
            stack.append(iter(graph.successors_of(nxt)))
    return None


def would_create_cycle(graph: DependencyGraph, predecessor_id: str, successor_id: str) -> bool:
    """True when adding predecessor -> successor would close a cycle."""
    if predecessor_id == successor_id:
        return True
    return predecessor_id in graph.reachable_from(successor_id)


__all__ = [
    "DependencyGraph",
    "build_graph",
    "find_cycle",
    "would_create_cycle",
]
