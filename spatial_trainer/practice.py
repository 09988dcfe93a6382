"""Round dealer and answer validation for the mixed practice arena.

Each round picks a modality, builds a fresh puzzle and discards the previous
one. Rendering and score display belong to the UI; this module only decides
what the puzzle is and whether a guess matches it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from .cognitive_core import AnswerScorer, Problem, SeededRng, clamp01
from .mental_rotation import (
    MentalRotationConfig,
    MentalRotationGenerator,
    MentalRotationPayload,
    MentalRotationScorer,
)
from .path_integration import PathIntegrationConfig, PathIntegrationGenerator, PathIntegrationScorer

logger = logging.getLogger(__name__)


class Modality(StrEnum):
    ROTATION_3D = "3d"
    PATH_2D = "2d"


@dataclass(frozen=True, slots=True)
class Verdict:
    is_correct: bool
    feedback: str
    expected: str


class PracticeArena:
    """Deals one puzzle per round and judges a single guess for it."""

    def __init__(
        self,
        *,
        seed: int,
        difficulty: float = 0.5,
        modality: Modality | None = None,
        rotation_config: MentalRotationConfig | None = None,
        path_config: PathIntegrationConfig | None = None,
    ) -> None:
        if not (0.0 <= difficulty <= 1.0):
            raise ValueError("difficulty must be in [0.0, 1.0]")

        self._seed = int(seed)
        self._rng = SeededRng(seed)
        self._difficulty = clamp01(difficulty)
        self._fixed_modality = modality
        self._rotation = MentalRotationGenerator(seed=self._rng.randint(0, 2**31 - 1), config=rotation_config)
        self._path = PathIntegrationGenerator(seed=self._rng.randint(0, 2**31 - 1), config=path_config)
        self._scorers: dict[Modality, AnswerScorer] = {
            Modality.ROTATION_3D: MentalRotationScorer(),
            Modality.PATH_2D: PathIntegrationScorer(),
        }

        self._round = 0
        self._modality = Modality.ROTATION_3D
        self._problem: Problem | None = None
        self._verdict: Verdict | None = None
        self.next_round()

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def round(self) -> int:
        return self._round

    @property
    def modality(self) -> Modality:
        return self._modality

    @property
    def problem(self) -> Problem:
        assert self._problem is not None
        return self._problem

    @property
    def verdict(self) -> Verdict | None:
        return self._verdict

    def next_round(self) -> Problem:
        if self._fixed_modality is not None:
            self._modality = self._fixed_modality
        else:
            self._modality = Modality.ROTATION_3D if self._rng.random() > 0.5 else Modality.PATH_2D

        generator = self._rotation if self._modality is Modality.ROTATION_3D else self._path
        self._problem = generator.next_problem(difficulty=self._difficulty)
        self._verdict = None
        self._round += 1
        logger.debug("round %d: %s puzzle, answer %s", self._round, self._modality, self.answer_text())
        return self._problem

    def answer_text(self) -> str:
        """Answer as shown in an answer key: option label (3D) or node id (2D)."""

        payload = self.problem.payload
        if isinstance(payload, MentalRotationPayload):
            return payload.correct_option.label
        return str(self.problem.answer)

    def submit(self, raw: str) -> Verdict | None:
        """Judge a guess. Returns None if the input is unusable or already judged."""

        if self._verdict is not None:
            return None

        user_answer = self._parse(raw)
        if user_answer is None:
            return None

        score = self._scorers[self._modality].score(problem=self.problem, user_answer=user_answer, raw=raw)
        is_correct = score >= 1.0 - 1e-9
        expected = self.answer_text()

        if is_correct:
            feedback = "Correct"
        elif self._modality is Modality.ROTATION_3D:
            feedback = "Incorrect structure"
        else:
            feedback = f"Wrong destination. It was #{expected}"

        self._verdict = Verdict(is_correct=is_correct, feedback=feedback, expected=expected)
        return self._verdict

    def _parse(self, raw: str) -> int | None:
        text = raw.strip()
        if text == "":
            return None

        payload = self.problem.payload
        if isinstance(payload, MentalRotationPayload):
            option = payload.option_for_label(text)
            if option is not None:
                return option.code
            try:
                code = int(text)
            except ValueError:
                return None
            # Codes that name no option are unusable, like unknown labels.
            return code if any(o.code == code for o in payload.options) else None

        try:
            return int(text)
        except ValueError:
            return None
