"""Strongly connected components (Tarjan, iterative).

Single depth-first search with per-node discovery index and low-link and an
explicit stack of nodes on the active path. A node roots an SCC when its
low-link equals its index; the SCC is then popped off the stack down to and
including that node.

The recursion of the textbook formulation is replaced by a stack of frames
``(node, successor iterator)``. Successors are visited in the order the
``successors`` callable yields them, low-links are propagated to the parent
when a child frame finishes, and SCCs are emitted in the same post-order as
the recursive version.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator
from typing import TypeVar

N = TypeVar("N", bound=Hashable)


def strongly_connected_components(
    root: N,
    successors: Callable[[N], Iterable[N]],
) -> list[frozenset[N]]:
    """Compute the SCCs of the graph reachable from ``root``.

    Args:
        root: Start node of the search.
        successors: Returns the direct successors of a node.

    Returns:
        SCCs in emission order (reverse topological order of the
        condensation: every SCC appears before the SCCs that can reach it).
        Together they partition the nodes reachable from ``root``.
    """
    index: dict[N, int] = {}
    lowlink: dict[N, int] = {}
    on_stack: set[N] = set()
    stack: list[N] = []
    sccs: list[frozenset[N]] = []
    counter = 0

    def discover(node: N) -> None:
        nonlocal counter
        index[node] = counter
        lowlink[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)

    discover(root)
    frames: list[tuple[N, Iterator[N]]] = [(root, iter(successors(root)))]

    while frames:
        node, pending = frames[-1]

        descended = False
        for succ in pending:
            if succ not in index:
                discover(succ)
                frames.append((succ, iter(successors(succ))))
                descended = True
                break
            if succ in on_stack:
                lowlink[node] = min(lowlink[node], index[succ])
        if descended:
            continue

        # All successors handled: node is finished
        frames.pop()
        if frames:
            parent = frames[-1][0]
            lowlink[parent] = min(lowlink[parent], lowlink[node])

        if lowlink[node] == index[node]:
            component: set[N] = set()
            while True:
                member = stack.pop()
                on_stack.discard(member)
                component.add(member)
                if member == node:
                    break
            sccs.append(frozenset(component))

    return sccs


__all__ = [
    "strongly_connected_components",
]
