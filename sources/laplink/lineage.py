r"""
Traversal of the lineage forest formed by the mother/daughter links of tracks.

Links are plain track identifiers. A link to a track that does not exist (e.g.
because it was deleted) ends the traversal along that branch.
"""

from __future__ import annotations

import collections
import typing as T
from enum import Enum

__all__ = ["TraversalOrder", "traverse"]


class TraversalOrder(Enum):
    PREORDER = "preorder"
    BREADTHFIRST = "breadthfirst"
    BACKWARD = "backward"


class _Node(T.Protocol):
    mother_id: int | None
    daughter_ids: tuple[int, ...]


def traverse(
    lookup: T.Callable[[int], _Node | None],
    root_id: int,
    order: TraversalOrder | str = TraversalOrder.PREORDER,
) -> list[int]:
    """
    List the identifiers of the tracks reached from ``root_id``.

    Parameters
    ----------
    lookup
        Returns the track of an identifier, or ``None`` when it does not exist.
    root_id
        Identifier to start from, included in the result when it exists.
    order
        ``preorder`` visits a track, then the subtree of its first daughter,
        then the subtree of its second daughter. ``breadthfirst`` visits
        tracks by generation. ``backward`` walks up through the mothers until a
        track without a mother is reached.
    """
    order = TraversalOrder(order)
    visited: set[int] = set()
    result: list[int] = []

    if order is TraversalOrder.BACKWARD:
        current: int | None = root_id
        while current is not None and current not in visited:
            node = lookup(current)
            if node is None:
                break
            visited.add(current)
            result.append(current)
            current = node.mother_id
        return result

    pending: collections.deque[int] = collections.deque([root_id])
    while pending:
        if order is TraversalOrder.PREORDER:
            current = pending.pop()
        else:
            current = pending.popleft()
        if current in visited:
            continue
        node = lookup(current)
        if node is None:
            continue
        visited.add(current)
        result.append(current)

        daughters = list(node.daughter_ids)
        if order is TraversalOrder.PREORDER:
            daughters.reverse()
        pending.extend(daughters)

    return result
