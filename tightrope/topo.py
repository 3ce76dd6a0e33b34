# tightrope/topo.py
"""Stable top-to-bottom ordering of a dependency chain (display helper)."""

from __future__ import annotations

import datetime as dt
import heapq
import logging
from typing import Dict, List, Sequence, Tuple

from tightrope.graph import build_graph
from tightrope.model import Dependency, Task

logger = logging.getLogger(__name__)

SortKey = Tuple[bool, int, dt.date, int]


def topo_sort(tasks: Sequence[Task], dependencies: Sequence[Dependency]) -> List[Task]:
    """Order tasks so every predecessor comes before its successors.

    Among tasks that are ready at the same time, those with a `sort_order`
    come first, lowest `sort_order` then earliest start_date; tasks without
    one follow in input order. Unrelated tasks therefore keep their manual
    order and repeated calls give the same output.

    Never raises on cycles: tasks that cannot be placed are appended in their
    original relative order.
    """
    if len(tasks) <= 1:
        return list(tasks)

    # First occurrence wins for duplicate ids; later copies are appended as-is.
    index: Dict[str, int] = {}
    for i, t in enumerate(tasks):
        index.setdefault(t.id, i)

    graph = build_graph(index.keys(), dependencies)

    def key(task_id: str) -> SortKey:
        i = index[task_id]
        t = tasks[i]
        if t.sort_order is None:
            return (True, i, t.start_date, i)
        return (False, t.sort_order, t.start_date, i)

    pending = {u: len(graph.predecessors_of(u)) for u in graph.task_ids}
    heap: List[Tuple[SortKey, str]] = [(key(u), u) for u in graph.task_ids if pending[u] == 0]
    heapq.heapify(heap)

    placed: set[int] = set()
    out: List[Task] = []
    while heap:
        _k, u = heapq.heappop(heap)
        out.append(tasks[index[u]])
        placed.add(index[u])
        for s in graph.successors_of(u):
            pending[s] -= 1
            if pending[s] == 0:
                heapq.heappush(heap, (key(s), s))

    if len(placed) < len(tasks):
        stuck = [t for i, t in enumerate(tasks) if i not in placed]
        if len(out) < len(index):
            logger.debug("topo_sort: cycle, appending %d unplaced task(s)", len(index) - len(out))
        out.extend(stuck)
    return out


__all__ = ["topo_sort"]
