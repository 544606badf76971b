"""
Test the per-query node workspace and its open set.

Usage:
    python test_workspace.py
    pytest test_workspace.py
"""
import math

import pytest

from spacetime_nav.navigation import NodeStatus, NodeWorkspace, TieBreak


def test_larger_g_tie_break():
    ws = NodeWorkspace(4, 4, TieBreak.LARGER_G)
    ws.push((0, 0), g=1.0, h=2.0)
    ws.push((1, 0), g=2.0, h=1.0)

    # Equal f: the node closer to the goal wins
    assert ws.pop() == (1, 0)
    assert ws.pop() == (0, 0)


def test_smaller_g_tie_break():
    ws = NodeWorkspace(4, 4, TieBreak.SMALLER_G)
    ws.push((0, 0), g=1.0, h=2.0)
    ws.push((1, 0), g=2.0, h=1.0)

    assert ws.pop() == (0, 0)
    assert ws.pop() == (1, 0)


def test_equal_keys_pop_in_insertion_order():
    ws = NodeWorkspace(4, 4)
    ws.push((2, 2), g=1.0, h=1.0)
    ws.push((0, 3), g=1.0, h=1.0)
    assert ws.pop() == (2, 2)
    assert ws.pop() == (0, 3)


def test_decrease_key_skips_stale_entries():
    ws = NodeWorkspace(4, 4)
    ws.push((0, 0), g=5.0, h=5.0)
    ws.push((1, 0), g=4.0, h=4.0)
    ws.push((0, 0), g=1.0, h=5.0)
    assert ws.open_count == 2

    assert ws.pop() == (0, 0)
    assert ws.open_count == 1
    assert ws.pop() == (1, 0)
    # The old (0, 0) entry is still in the heap but no longer counts
    assert ws.pop() is None
    assert ws.open_count == 0


def test_closed_cells_cannot_be_reopened():
    ws = NodeWorkspace(3, 3)
    ws.push((1, 1), g=0.0, h=1.0)
    assert ws.pop() == (1, 1)
    ws.close((1, 1))

    assert ws.is_closed((1, 1))
    with pytest.raises(ValueError):
        ws.push((1, 1), g=0.5, h=1.0)


def test_close_while_open_drops_entry():
    ws = NodeWorkspace(3, 3)
    ws.push((1, 1), g=0.0, h=1.0)
    ws.close((1, 1))
    assert ws.open_count == 0
    assert ws.pop() is None


def test_reset_forgets_cell():
    ws = NodeWorkspace(3, 3)
    ws.set_parent((2, 2), (1, 1), 1.5, 3.0)
    ws.push((2, 2), g=1.5, h=0.0)
    assert ws.is_visited((2, 2))

    ws.reset((2, 2))
    assert ws.open_count == 0
    assert ws.pop() is None
    assert not ws.is_visited((2, 2))
    assert ws.parent((2, 2)) is None
    assert math.isinf(ws.time((2, 2)))

    # A reset cell may be pushed again
    ws.push((2, 2), g=2.0, h=0.0)
    assert ws.pop() == (2, 2)


def test_node_snapshot():
    ws = NodeWorkspace(3, 3)
    ws.set_parent((1, 1), (0, 0), 1.4, 2.0)
    ws.push((1, 1), g=1.4, h=3.0)

    node = ws.node((1, 1))
    assert node.cell == (1, 1)
    assert node.parent == (0, 0)
    assert node.status == NodeStatus.OPEN
    assert node.t == 2.0
    assert math.isclose(node.f, 4.4)

    untouched = ws.node((2, 0))
    assert untouched.status == NodeStatus.UNVISITED
    assert untouched.parent is None
    assert math.isinf(untouched.g)


if __name__ == "__main__":
    for name, func in list(globals().items()):
        if name.startswith("test_") and callable(func):
            func()
            print(f"{name}: PASSED")
