"""Map-side projection of session progress.

Nodes are derived data: positions come from a layout formula, statuses come from
the session's `current_node`. Nothing here is persisted.
"""
from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

NODE_COUNT = 9

# Click radius around a node centre, in drawing units.
HIT_RADIUS = 30.0


class NodeStatus(StrEnum):
    locked = "locked"
    current = "current"
    completed = "completed"


class UnknownLayoutError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Bounds:
    width: float
    height: float
    padding: float = 100.0
    amplitude: float = 150.0


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Node:
    id: int
    x: float
    y: float
    status: NodeStatus


LayoutFormula = Callable[[float, Bounds], Point]


def _winding(progress: float, bounds: Bounds) -> Point:
    x = bounds.padding + progress * (bounds.width - bounds.padding * 2)
    y = bounds.height / 2 + math.sin(progress * math.pi * 3) * bounds.amplitude
    return Point(x=x, y=y)


def _circular(progress: float, bounds: Bounds) -> Point:
    angle = progress * math.pi * 2 - math.pi / 2
    x = bounds.width / 2 + math.cos(angle) * (bounds.width / 3)
    y = bounds.height / 2 + math.sin(angle) * (bounds.height / 3)
    return Point(x=x, y=y)


# New layout kinds only add an entry here.
LAYOUTS: dict[str, LayoutFormula] = {
    "winding": _winding,
    "circular": _circular,
}


def is_known_layout(kind: str) -> bool:
    return kind in LAYOUTS


def layout_path(kind: str, count: int, bounds: Bounds) -> list[Point]:
    formula = LAYOUTS.get(kind)
    if formula is None:
        raise UnknownLayoutError(f"Unknown layout kind: {kind}")
    if count < 1:
        raise ValueError("count must be >= 1")

    span = count - 1
    return [formula(i / span if span else 0.0, bounds) for i in range(count)]


def status_of(node_index: int, current_node: int, *, count: int = NODE_COUNT) -> NodeStatus:
    if not 0 <= node_index < count:
        raise ValueError(f"node index out of range: {node_index}")
    if node_index < current_node:
        return NodeStatus.completed
    if node_index == current_node:
        return NodeStatus.current
    return NodeStatus.locked


def build_nodes(kind: str, current_node: int, bounds: Bounds, *, count: int = NODE_COUNT) -> list[Node]:
    points = layout_path(kind, count, bounds)
    return [
        Node(id=i, x=p.x, y=p.y, status=status_of(i, current_node, count=count))
        for i, p in enumerate(points)
    ]


def hit_test(nodes: Sequence[Node], x: float, y: float, *, radius: float = HIT_RADIUS) -> Node | None:
    """Return the actionable node under (x, y), if any.

    Only the `current` node is actionable. After victory no node is current, so
    this always returns None rather than falling back to the last index.
    """

    for node in nodes:
        if node.status != NodeStatus.current:
            continue
        if math.hypot(x - node.x, y - node.y) < radius:
            return node
    return None


def node_position(nodes: Sequence[Node], node_id: int) -> Point:
    if 0 <= node_id < len(nodes):
        node = nodes[node_id]
        return Point(x=node.x, y=node.y)
    return Point(x=0.0, y=0.0)
