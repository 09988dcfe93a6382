"""Headless batch run: deal practice rounds and record an answer key.

Rounds arrive in random modality order, exactly as a player would see them;
rounds of a modality that already has enough puzzles are skipped.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from .answer_key import AnswerKeyEntry, puzzle_identifier, write_answer_key
from .practice import Modality, PracticeArena

logger = logging.getLogger(__name__)

ANSWER_KEY_NAME = "answers.txt"


def collect_answer_key(*, count: int, seed: int, difficulty: float = 0.5) -> list[AnswerKeyEntry]:
    """Deal rounds until each modality has ``count`` puzzles; sorted by modality then index."""

    if count < 0:
        raise ValueError("count must be >= 0")

    arena = PracticeArena(seed=seed, difficulty=difficulty)
    counts = {m: 0 for m in Modality}
    recorded: list[tuple[str, int, str]] = []

    while any(n < count for n in counts.values()):
        modality = arena.modality
        if counts[modality] < count:
            counts[modality] += 1
            recorded.append((modality.value, counts[modality], arena.answer_text()))
            logger.info("%s: %s", puzzle_identifier(modality.value, counts[modality]), arena.answer_text())
        arena.next_round()

    recorded.sort(key=lambda r: (r[0], r[1]))
    return [
        AnswerKeyEntry(identifier=puzzle_identifier(mode, index), answer=answer)
        for mode, index, answer in recorded
    ]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spatial_trainer",
        description="Generate spatial reasoning puzzles and write their answer key.",
    )
    parser.add_argument("--count", type=int, default=25, help="puzzles per modality (default: 25)")
    parser.add_argument("--seed", type=int, default=0, help="RNG seed (default: 0)")
    parser.add_argument("--difficulty", type=float, default=0.5, help="0.0-1.0 (default: 0.5)")
    parser.add_argument("--out", type=Path, default=Path("generated_tests"), help="output directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    entries = collect_answer_key(count=args.count, seed=args.seed, difficulty=args.difficulty)
    path = write_answer_key(args.out / ANSWER_KEY_NAME, entries)
    logger.info("Saved %s (%d puzzles)", path, len(entries))
    return 0
