"""Plain-text answer key: one ``<puzzle-identifier>: <answer>`` line per puzzle."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

SEPARATOR = ": "


@dataclass(frozen=True, slots=True)
class AnswerKeyEntry:
    identifier: str
    answer: str


def puzzle_identifier(modality: str, index: int) -> str:
    return f"{modality}_test_{int(index)}.png"


def _check(entry: AnswerKeyEntry) -> None:
    for field_name, value in (("identifier", entry.identifier), ("answer", entry.answer)):
        if value.strip() == "":
            raise ValueError(f"answer key {field_name} must not be empty")
        if "\n" in value or "\r" in value:
            raise ValueError(f"answer key {field_name} must be a single line: {value!r}")
    if ":" in entry.identifier:
        raise ValueError(f"answer key identifier must not contain ':': {entry.identifier!r}")


def format_answer_key(entries: Iterable[AnswerKeyEntry]) -> str:
    lines = []
    for entry in entries:
        _check(entry)
        lines.append(f"{entry.identifier}{SEPARATOR}{entry.answer}")
    return "\n".join(lines)


def parse_answer_key(text: str) -> list[AnswerKeyEntry]:
    entries = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if line.strip() == "":
            continue
        identifier, sep, answer = line.partition(SEPARATOR)
        if not sep or identifier.strip() == "" or answer.strip() == "":
            raise ValueError(f"line {lineno}: expected '<identifier>: <answer>', got {line!r}")
        entries.append(AnswerKeyEntry(identifier=identifier.strip(), answer=answer.strip()))
    return entries


def write_answer_key(path: Path, entries: Iterable[AnswerKeyEntry]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_answer_key(entries), encoding="utf-8")
    return path
