"""Node layout and curved edge routing for the path integration task."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from .cognitive_core import Attempt, SeededRng, try_n_times

logger = logging.getLogger(__name__)

Point2 = tuple[float, float]


@dataclass(frozen=True, slots=True)
class Node:
    id: int
    x: float
    y: float

    @property
    def position(self) -> Point2:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class CubicCurve:
    start: Point2
    control1: Point2
    control2: Point2
    end: Point2

    def point_at(self, t: float) -> Point2:
        u = 1.0 - t
        a, b, c, d = u * u * u, 3.0 * u * u * t, 3.0 * u * t * t, t * t * t
        return (
            a * self.start[0] + b * self.control1[0] + c * self.control2[0] + d * self.end[0],
            a * self.start[1] + b * self.control1[1] + c * self.control2[1] + d * self.end[1],
        )

    def svg_path(self) -> str:
        (sx, sy), (ax, ay), (bx, by), (ex, ey) = self.start, self.control1, self.control2, self.end
        return (
            f"M {sx:.2f} {sy:.2f} "
            f"C {ax:.2f} {ay:.2f}, {bx:.2f} {by:.2f}, {ex:.2f} {ey:.2f}"
        )


@dataclass(frozen=True, slots=True)
class Edge:
    source: int
    target: int
    curve: CubicCurve

    @property
    def svg_path(self) -> str:
        return self.curve.svg_path()


def distance(a: Point2, b: Point2) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def place_node(
    placed: Sequence[Node],
    *,
    rng: SeededRng,
    width: float,
    height: float,
    margin: float,
    min_separation: float,
    max_attempts: int,
) -> Attempt[Point2]:
    """Draw one position at least ``min_separation`` from every placed node."""

    def draw() -> Point2:
        return (
            rng.random() * (width - 2.0 * margin) + margin,
            rng.random() * (height - 2.0 * margin) + margin,
        )

    return try_n_times(
        max_attempts,
        draw,
        lambda p: all(distance(p, n.position) >= min_separation for n in placed),
    )


def place_nodes(
    count: int,
    *,
    rng: SeededRng,
    width: float = 600.0,
    height: float = 600.0,
    margin: float = 50.0,
    min_separation: float = 60.0,
    max_attempts: int = 200,
) -> list[Node]:
    """Scatter ``count`` nodes inside the inset rectangle.

    A node whose attempt budget runs out keeps its last draw, so the result may
    occasionally contain a pair closer than ``min_separation``.
    """

    if count < 0:
        raise ValueError("count must be >= 0")
    if width <= 2.0 * margin or height <= 2.0 * margin:
        raise ValueError("margin leaves no room for nodes")

    nodes: list[Node] = []
    for node_id in range(count):
        spot = place_node(
            nodes,
            rng=rng,
            width=width,
            height=height,
            margin=margin,
            min_separation=min_separation,
            max_attempts=max_attempts,
        )
        if not spot.satisfied:
            logger.debug("node %d placed without clearance after %d draws", node_id, spot.attempts)
        nodes.append(Node(id=node_id, x=spot.value[0], y=spot.value[1]))
    return nodes


def assign_targets(ids: Sequence[int], *, rng: SeededRng, derangement: bool = False) -> list[int]:
    """Pick one target per id with no id mapped to itself.

    The default shuffles the ids and bumps fixed points to the next slot, which
    can leave some ids with several incoming edges. ``derangement`` draws a
    bijection instead.
    """

    n = len(ids)
    if n < 2:
        raise ValueError("need at least two nodes to route edges")

    if derangement:
        return _derangement(ids, rng=rng)

    perm = list(ids)
    rng.shuffle(perm)
    targets = []
    for i, source in enumerate(ids):
        target = perm[i]
        if target == source:
            target = perm[(i + 1) % n]
        targets.append(target)
    return targets


def _derangement(ids: Sequence[int], *, rng: SeededRng, attempts: int = 100) -> list[int]:
    def shuffled() -> list[int]:
        perm = list(ids)
        rng.shuffle(perm)
        return perm

    result = try_n_times(
        attempts,
        shuffled,
        lambda perm: all(t != s for s, t in zip(ids, perm, strict=True)),
    )
    if result.satisfied:
        return result.value

    # Sattolo's algorithm: a single n-cycle, never a fixed point.
    order = list(range(len(ids)))
    for i in range(len(order) - 1, 0, -1):
        j = rng.randrange(i)
        order[i], order[j] = order[j], order[i]
    return [ids[k] for k in order]


def curve_between(
    start: Point2,
    target: Point2,
    *,
    side: int,
    node_radius: float,
    min_swing: float,
    swing_ratio: float,
    control_ratio: float,
) -> CubicCurve:
    """Bulging cubic from ``start`` that stops on the target's boundary circle."""

    dx = target[0] - start[0]
    dy = target[1] - start[1]
    dist = math.hypot(dx, dy)
    if dist > 0.0:
        nx, ny = -dy / dist, dx / dist
    else:
        nx, ny = 0.0, 1.0

    swing = max(min_swing, dist * swing_ratio) * side
    c1 = (start[0] + dx * control_ratio + nx * swing, start[1] + dy * control_ratio + ny * swing)
    c2 = (target[0] - dx * control_ratio + nx * swing, target[1] - dy * control_ratio + ny * swing)

    # Arrow approaches along control2 -> target; back off by the node radius.
    vx = target[0] - c2[0]
    vy = target[1] - c2[1]
    vlen = math.hypot(vx, vy)
    if vlen > 0.0:
        end = (target[0] - vx / vlen * node_radius, target[1] - vy / vlen * node_radius)
    else:
        end = target
    return CubicCurve(start=start, control1=c1, control2=c2, end=end)


def route_edges(
    nodes: Sequence[Node],
    *,
    rng: SeededRng,
    node_radius: float = 16.0,
    min_swing: float = 60.0,
    swing_ratio: float = 0.6,
    control_ratio: float = 0.2,
    derangement: bool = False,
) -> list[Edge]:
    """One outgoing curved edge per node, never a self-loop."""

    by_id = {n.id: n for n in nodes}
    targets = assign_targets([n.id for n in nodes], rng=rng, derangement=derangement)

    edges = []
    for node, target_id in zip(nodes, targets, strict=True):
        side = 1 if rng.random() > 0.5 else -1
        curve = curve_between(
            node.position,
            by_id[target_id].position,
            side=side,
            node_radius=node_radius,
            min_swing=min_swing,
            swing_ratio=swing_ratio,
            control_ratio=control_ratio,
        )
        edges.append(Edge(source=node.id, target=target_id, curve=curve))
    return edges
