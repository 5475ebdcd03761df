"""Iterative walks over parent-linked forests (lists and tags).

Parent relations are passed in as a lookup callable so the same walks
serve both entity kinds and run against whatever snapshot the caller
loaded. Every walk tracks visited ids and fails closed on a repeat.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from tasklistctl.domain.errors import IntegrityError

ParentLookup = Callable[[int], int | None]


def iter_ancestors(start_id: int | None, parent_of: ParentLookup) -> list[int]:
    """Return ancestor ids from *start_id* upward (inclusive), root last.

    Raises IntegrityError if an id repeats, i.e. the stored hierarchy
    already contains a cycle.
    """
    chain: list[int] = []
    visited: set[int] = set()
    current = start_id
    while current is not None:
        if current in visited:
            raise IntegrityError(
                "Circular reference detected in parent hierarchy", id=current
            )
        visited.add(current)
        chain.append(current)
        current = parent_of(current)
    return chain


def check_reparent(
    entity_id: int | None,
    proposed_parent: int | None,
    parent_of: ParentLookup,
) -> None:
    """Reject a parent assignment that would make *entity_id* its own ancestor.

    *entity_id* is None for entities not created yet; then only corrupt
    cycles above the proposed parent are detected.
    """
    if proposed_parent is None:
        return
    if entity_id is not None and proposed_parent == entity_id:
        raise IntegrityError("A list cannot be its own parent", id=entity_id)
    ancestors = iter_ancestors(proposed_parent, parent_of)
    if entity_id is not None and entity_id in ancestors:
        raise IntegrityError(
            "A list cannot be an ancestor of itself",
            id=entity_id,
            parent_id=proposed_parent,
        )


def collect_subtree(root_id: int, children_of: Mapping[int, list[int]]) -> list[int]:
    """Return the descendants of *root_id* in depth-first post-order (excluding the root)."""
    order: list[int] = []
    visited: set[int] = {root_id}
    stack: list[tuple[int, bool]] = [
        (child, False) for child in reversed(children_of.get(root_id, []))
    ]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        if node in visited:
            raise IntegrityError("Circular reference detected in parent hierarchy", id=node)
        visited.add(node)
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(children_of.get(node, [])))
    return order


def build_forest(
    rows: Iterable[dict[str, Any]],
    *,
    parent_key: str = "parent_list_id",
) -> list[dict[str, Any]]:
    """Group a flat ordered listing into a forest in one pass.

    Each row gains a ``children`` list (in input order); rows whose parent is
    absent from the listing are returned as roots.
    """
    items = [{**row, "children": []} for row in rows]
    by_id = {item["id"]: item for item in items}
    roots: list[dict[str, Any]] = []
    for item in items:
        parent = by_id.get(item.get(parent_key))  # type: ignore[arg-type]
        if parent is None:
            roots.append(item)
        else:
            parent["children"].append(item)
    return roots
