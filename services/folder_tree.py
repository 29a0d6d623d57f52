"""Pure functions over a snapshot of a project's folder parent pointers.

A snapshot is ``{folder_id: parent_id_or_None}``; nothing here touches the
database, so the same checks run identically on the server and in tests.
"""
from collections import defaultdict

from models.enums import FolderType

_TYPE_ORDER = {
    FolderType.ASSETS.value: 0,
    FolderType.DELIVERABLES.value: 1,
    FolderType.PROJECT.value: 2,
}


def children_map(parent_of: dict) -> dict:
    children = defaultdict(list)
    for folder_id, parent_id in parent_of.items():
        if parent_id is not None and parent_id in parent_of:
            children[parent_id].append(folder_id)
    return children


def ancestors(parent_of: dict, folder_id):
    """Yield the parent chain of ``folder_id`` up to the root (excluding itself)."""
    seen = {folder_id}
    current = parent_of.get(folder_id)
    while current is not None and current not in seen:
        yield current
        seen.add(current)
        current = parent_of.get(current)


def would_create_cycle(parent_of: dict, folder_id, new_parent_id) -> bool:
    """True when making ``new_parent_id`` the parent of ``folder_id`` closes a loop."""
    if new_parent_id is None:
        return False
    if new_parent_id == folder_id:
        return True
    return any(a == folder_id for a in ancestors(parent_of, new_parent_id))


def aggregate_counts(parent_of: dict, direct: dict) -> dict:
    """aggregate(F) = direct(F) + sum(aggregate(c) for c in children(F)).

    Computed bottom-up with an explicit stack so depth is not bounded by the
    recursion limit; every folder is evaluated once.
    """
    children = children_map(parent_of)
    memo = {}
    visiting = set()
    for start in parent_of:
        if start in memo:
            continue
        stack = [(start, False)]
        while stack:
            node, expanded = stack.pop()
            if node in memo:
                continue
            if expanded:
                memo[node] = direct.get(node, 0) + sum(memo.get(c, 0) for c in children.get(node, ()))
                visiting.discard(node)
                continue
            if node in visiting:
                continue
            visiting.add(node)
            stack.append((node, True))
            for child in children.get(node, ()):
                if child not in memo:
                    stack.append((child, False))
    return memo


def sort_key(node: dict):
    return (_TYPE_ORDER.get(node["type"], len(_TYPE_ORDER)), node["name"].lower())


def build_tree(nodes: list[dict]) -> list[dict]:
    """Nest flat folder dicts (each with ``id``/``parent_id``) under ``children``.

    Folders whose parent is missing from the list are treated as roots.
    """
    by_id = {n["id"]: {**n, "children": []} for n in nodes}
    roots = []
    for node in by_id.values():
        parent = by_id.get(node["parent_id"]) if node["parent_id"] else None
        if parent is not None:
            parent["children"].append(node)
        else:
            roots.append(node)

    stack = [roots]
    while stack:
        level = stack.pop()
        level.sort(key=sort_key)
        stack.extend(n["children"] for n in level)
    return roots
