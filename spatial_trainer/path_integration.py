from __future__ import annotations

from dataclasses import dataclass

from .cognitive_core import AnswerScorer, Problem, SeededRng, clamp01, lerp_int
from .path_graph import Edge, Node, place_nodes, route_edges


@dataclass(frozen=True, slots=True)
class PathIntegrationConfig:
    width: float = 600.0
    height: float = 600.0
    margin: float = 50.0
    node_count: int | None = None  # None: derived from difficulty (20 at 0.5)
    node_radius: float = 16.0
    min_separation: float = 60.0
    placement_attempts: int = 200
    min_swing: float = 60.0
    swing_ratio: float = 0.6
    control_ratio: float = 0.2
    derangement: bool = False


@dataclass(frozen=True, slots=True)
class PathIntegrationPayload:
    width: float
    height: float
    node_radius: float
    nodes: tuple[Node, ...]
    edges: tuple[Edge, ...]
    start_id: int
    answer_id: int

    def edge_from(self, node_id: int) -> Edge:
        for edge in self.edges:
            if edge.source == node_id:
                return edge
        raise KeyError(node_id)


class PathIntegrationScorer(AnswerScorer):
    """Only the exact destination node scores."""

    def score(self, *, problem: Problem, user_answer: int, raw: str) -> float:
        _ = raw
        return 1.0 if int(user_answer) == int(problem.answer) else 0.0


def build_path_puzzle(
    *,
    rng: SeededRng,
    node_count: int = 20,
    config: PathIntegrationConfig | None = None,
) -> PathIntegrationPayload:
    cfg = config or PathIntegrationConfig()
    nodes = place_nodes(
        node_count,
        rng=rng,
        width=cfg.width,
        height=cfg.height,
        margin=cfg.margin,
        min_separation=cfg.min_separation,
        max_attempts=cfg.placement_attempts,
    )
    edges = route_edges(
        nodes,
        rng=rng,
        node_radius=cfg.node_radius,
        min_swing=cfg.min_swing,
        swing_ratio=cfg.swing_ratio,
        control_ratio=cfg.control_ratio,
        derangement=cfg.derangement,
    )
    start_id = 0
    answer_id = next(e.target for e in edges if e.source == start_id)
    return PathIntegrationPayload(
        width=cfg.width,
        height=cfg.height,
        node_radius=cfg.node_radius,
        nodes=tuple(nodes),
        edges=tuple(edges),
        start_id=start_id,
        answer_id=answer_id,
    )


class PathIntegrationGenerator:
    """Deterministic generator for follow-the-arrow trials."""

    def __init__(self, *, seed: int, config: PathIntegrationConfig | None = None) -> None:
        self._rng = SeededRng(seed)
        self._cfg = config or PathIntegrationConfig()

    def next_problem(self, *, difficulty: float) -> Problem:
        d = clamp01(difficulty)
        node_count = self._cfg.node_count
        if node_count is None:
            node_count = lerp_int(12, 28, d)

        payload = build_path_puzzle(rng=self._rng.spawn(), node_count=node_count, config=self._cfg)
        return Problem(
            prompt=f"What # does the arrow coming out of {payload.start_id} point to?",
            answer=payload.answer_id,
            payload=payload,
        )
