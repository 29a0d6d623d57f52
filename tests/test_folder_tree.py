from services.folder_tree import (
    aggregate_counts,
    ancestors,
    build_tree,
    would_create_cycle,
)

# root -> a -> b -> c, plus a sibling d under root
PARENTS = {"root": None, "a": "root", "b": "a", "c": "b", "d": "root"}


def test_ancestors_walks_to_root():
    assert list(ancestors(PARENTS, "c")) == ["b", "a", "root"]
    assert list(ancestors(PARENTS, "root")) == []


def test_moving_into_descendant_is_a_cycle():
    assert would_create_cycle(PARENTS, "a", "c")
    assert would_create_cycle(PARENTS, "a", "b")
    assert would_create_cycle(PARENTS, "a", "a")


def test_moving_elsewhere_is_not_a_cycle():
    assert not would_create_cycle(PARENTS, "c", "d")
    assert not would_create_cycle(PARENTS, "b", "root")
    assert not would_create_cycle(PARENTS, "a", None)


def test_ancestors_stops_on_corrupt_loop():
    looped = {"x": "y", "y": "x"}
    assert list(ancestors(looped, "x")) == ["y"]


def test_aggregate_counts_include_all_descendants():
    direct = {"a": 1, "b": 2, "c": 4, "d": 8}
    agg = aggregate_counts(PARENTS, direct)
    assert agg == {"root": 15, "a": 7, "b": 6, "c": 4, "d": 8}


def test_aggregate_counts_handle_deep_chains():
    depth = 5000
    parents = {0: None}
    parents.update({i: i - 1 for i in range(1, depth)})
    agg = aggregate_counts(parents, {i: 1 for i in range(depth)})
    assert agg[0] == depth
    assert agg[depth - 1] == 1


def test_build_tree_orders_system_folders_first():
    nodes = [
        {"id": "p2", "parent_id": None, "type": "PROJECT", "name": "b-roll"},
        {"id": "del", "parent_id": None, "type": "DELIVERABLES", "name": "Deliverables"},
        {"id": "p1", "parent_id": None, "type": "PROJECT", "name": "Archive"},
        {"id": "assets", "parent_id": None, "type": "ASSETS", "name": "Shared Assets"},
        {"id": "child", "parent_id": "p1", "type": "PROJECT", "name": "2024"},
        {"id": "orphan", "parent_id": "gone", "type": "PROJECT", "name": "Zeta"},
    ]
    roots = build_tree(nodes)
    assert [n["id"] for n in roots] == ["assets", "del", "p1", "p2", "orphan"]
    archive = roots[2]
    assert [c["id"] for c in archive["children"]] == ["child"]
    assert archive["children"][0]["children"] == []
