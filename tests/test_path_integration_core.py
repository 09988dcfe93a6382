from __future__ import annotations

from collections import Counter
from typing import cast

import pytest

from spatial_trainer.cognitive_core import SeededRng
from spatial_trainer.path_integration import (
    PathIntegrationConfig,
    PathIntegrationGenerator,
    PathIntegrationPayload,
    PathIntegrationScorer,
    build_path_puzzle,
)


def test_generator_determinism_same_seed_same_sequence() -> None:
    seed = 913
    g1 = PathIntegrationGenerator(seed=seed)
    g2 = PathIntegrationGenerator(seed=seed)

    seq1 = [g1.next_problem(difficulty=0.5) for _ in range(10)]
    seq2 = [g2.next_problem(difficulty=0.5) for _ in range(10)]

    assert [(p.prompt, p.answer, p.payload) for p in seq1] == [
        (p.prompt, p.answer, p.payload) for p in seq2
    ]


def test_answer_is_destination_of_node_zero() -> None:
    gen = PathIntegrationGenerator(seed=41)
    for _ in range(20):
        problem = gen.next_problem(difficulty=0.5)
        payload = cast(PathIntegrationPayload, problem.payload)

        assert len(payload.nodes) == 20
        assert len(payload.edges) == 20
        assert payload.start_id == 0
        assert problem.answer == payload.answer_id
        assert payload.edge_from(0).target == payload.answer_id
        assert payload.answer_id != 0
        assert problem.prompt == "What # does the arrow coming out of 0 point to?"


def test_difficulty_scales_node_count() -> None:
    gen = PathIntegrationGenerator(seed=5)
    easy = cast(PathIntegrationPayload, gen.next_problem(difficulty=0.0).payload)
    hard = cast(PathIntegrationPayload, gen.next_problem(difficulty=1.0).payload)
    assert len(easy.nodes) == 12
    assert len(hard.nodes) == 28


def test_config_node_count_overrides_difficulty() -> None:
    gen = PathIntegrationGenerator(seed=5, config=PathIntegrationConfig(node_count=8))
    payload = cast(PathIntegrationPayload, gen.next_problem(difficulty=1.0).payload)
    assert len(payload.nodes) == 8


def test_derangement_config_gives_single_incoming_edges() -> None:
    payload = build_path_puzzle(
        rng=SeededRng(3),
        node_count=20,
        config=PathIntegrationConfig(derangement=True),
    )
    incoming = Counter(e.target for e in payload.edges)
    assert all(incoming[n.id] == 1 for n in payload.nodes)


def test_edge_from_unknown_node_raises() -> None:
    payload = build_path_puzzle(rng=SeededRng(3), node_count=5)
    with pytest.raises(KeyError):
        payload.edge_from(99)


def test_scoring_exact_destination_only() -> None:
    scorer = PathIntegrationScorer()
    problem = PathIntegrationGenerator(seed=17).next_problem(difficulty=0.5)

    assert scorer.score(problem=problem, user_answer=problem.answer, raw=str(problem.answer)) == 1.0
    assert scorer.score(problem=problem, user_answer=problem.answer + 1, raw="x") == 0.0
    assert scorer.score(problem=problem, user_answer=-1, raw="-1") == 0.0
