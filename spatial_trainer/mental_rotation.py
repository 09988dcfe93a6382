from __future__ import annotations

import logging
from dataclasses import dataclass

from .cognitive_core import AnswerScorer, Problem, SeededRng, clamp01, lerp_int, try_n_times
from .viewpoint import REFERENCE_CAMERA, Viewpoint, sample_viewpoint
from .voxels import DEFAULT_BLOCK_COUNT, Structure, grow_structure, mutate_structure

logger = logging.getLogger(__name__)

OPTION_LABELS = "ABCDEFGH"


@dataclass(frozen=True, slots=True)
class MentalRotationConfig:
    block_count: int = DEFAULT_BLOCK_COUNT
    distractor_count: int = 3
    mutation_steps: int | None = None  # None: derived from difficulty (3 at 0.5)
    add_attempts: int = 50
    preserve_count: bool = True
    distractor_attempts: int = 20
    camera_radius: float = 14.0
    min_view_angle: float = 0.8
    view_attempts: int = 100
    reference_camera: tuple[float, float, float] = REFERENCE_CAMERA


@dataclass(frozen=True, slots=True)
class PuzzleOption:
    code: int
    label: str
    structure: Structure
    is_correct: bool
    viewpoint: Viewpoint


@dataclass(frozen=True, slots=True)
class MentalRotationPayload:
    reference: Structure
    reference_camera: tuple[float, float, float]
    options: tuple[PuzzleOption, ...]

    @property
    def correct_option(self) -> PuzzleOption:
        return next(o for o in self.options if o.is_correct)

    def option_for_label(self, label: str) -> PuzzleOption | None:
        key = label.strip().upper()
        for option in self.options:
            if option.label == key:
                return option
        return None


class MentalRotationScorer(AnswerScorer):
    """Full credit only for the option that wraps the reference structure."""

    def score(self, *, problem: Problem, user_answer: int, raw: str) -> float:
        _ = raw
        payload = problem.payload
        if not isinstance(payload, MentalRotationPayload):
            return 1.0 if int(user_answer) == int(problem.answer) else 0.0

        for option in payload.options:
            if option.code == int(user_answer):
                return 1.0 if option.is_correct else 0.0
        return 0.0


def _make_distractor(
    reference: Structure,
    taken: list[Structure],
    *,
    rng: SeededRng,
    steps: int,
    cfg: MentalRotationConfig,
) -> Structure:
    """Mutate ``reference`` until the result is not a rotated copy of anything taken."""

    result = try_n_times(
        cfg.distractor_attempts,
        lambda: mutate_structure(
            reference,
            steps=steps,
            rng=rng,
            add_attempts=cfg.add_attempts,
            preserve_count=cfg.preserve_count,
        ),
        lambda s: not any(s.same_shape(t) for t in taken),
    )
    if not result.satisfied:
        logger.debug("distractor still matches an existing option after %d tries", result.attempts)
    return result.value


def build_rotation_puzzle(
    *,
    rng: SeededRng,
    mutation_steps: int = 3,
    config: MentalRotationConfig | None = None,
) -> MentalRotationPayload:
    cfg = config or MentalRotationConfig()
    if not (1 <= cfg.distractor_count < len(OPTION_LABELS)):
        raise ValueError(f"distractor_count must be in [1, {len(OPTION_LABELS) - 1}]")

    reference = grow_structure(cfg.block_count, rng=rng)
    taken = [reference]
    for _ in range(cfg.distractor_count):
        taken.append(_make_distractor(reference, taken, rng=rng, steps=mutation_steps, cfg=cfg))

    raw = []
    for idx, structure in enumerate(taken):
        view = sample_viewpoint(
            cfg.reference_camera,
            rng=rng,
            radius=cfg.camera_radius,
            min_angle=cfg.min_view_angle,
            max_attempts=cfg.view_attempts,
        )
        raw.append((structure, idx == 0, view.value))
    rng.shuffle(raw)

    options = tuple(
        PuzzleOption(
            code=i + 1,
            label=OPTION_LABELS[i],
            structure=structure,
            is_correct=is_correct,
            viewpoint=view,
        )
        for i, (structure, is_correct, view) in enumerate(raw)
    )
    return MentalRotationPayload(
        reference=reference,
        reference_camera=cfg.reference_camera,
        options=options,
    )


class MentalRotationGenerator:
    """Deterministic generator for Shepard-Metzler style rotation trials."""

    def __init__(self, *, seed: int, config: MentalRotationConfig | None = None) -> None:
        self._rng = SeededRng(seed)
        self._cfg = config or MentalRotationConfig()

    def next_problem(self, *, difficulty: float) -> Problem:
        d = clamp01(difficulty)
        steps = self._cfg.mutation_steps
        if steps is None:
            # Fewer mutations leave distractors closer to the reference.
            steps = lerp_int(4, 2, d)

        payload = build_rotation_puzzle(rng=self._rng.spawn(), mutation_steps=steps, config=self._cfg)
        return Problem(
            prompt="Identify the rotated match.",
            answer=payload.correct_option.code,
            payload=payload,
        )
