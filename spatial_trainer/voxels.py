"""Polycube generation for the mental rotation task.

Structures are keyed on an integer lattice and expose their cells re-centred
on the centroid (:attr:`Structure.points`) to camera framing and rendering.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from itertools import permutations

from .cognitive_core import SeededRng, try_n_times

logger = logging.getLogger(__name__)

Cell = tuple[int, int, int]
Point3 = tuple[float, float, float]

DIRECTIONS: tuple[Cell, ...] = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)

DEFAULT_BLOCK_COUNT = 10


def to_cell(p: Sequence[float]) -> Cell:
    """Key a coordinate triple by rounded integers."""
    return (int(round(p[0])), int(round(p[1])), int(round(p[2])))


def step(cell: Cell, direction: Cell) -> Cell:
    return (cell[0] + direction[0], cell[1] + direction[1], cell[2] + direction[2])


def neighbours(cell: Cell) -> tuple[Cell, ...]:
    return tuple(step(cell, d) for d in DIRECTIONS)


def _mean(cells: Sequence[Sequence[float]]) -> Point3:
    n = float(len(cells))
    if n == 0:
        return (0.0, 0.0, 0.0)
    return (
        sum(c[0] for c in cells) / n,
        sum(c[1] for c in cells) / n,
        sum(c[2] for c in cells) / n,
    )


@dataclass(frozen=True, slots=True)
class Structure:
    """Ordered, connected set of lattice cells.

    ``cells`` are integer lattice keys used for adjacency and comparison.
    ``points`` are the same cells with the centroid subtracted; that is the
    form handed to the rendering layer, so every structure sits on the origin
    the camera orbits.
    """

    cells: tuple[Cell, ...]
    points: tuple[Point3, ...] = field(init=False, compare=False)

    def __post_init__(self) -> None:
        cx, cy, cz = _mean(self.cells)
        object.__setattr__(
            self, "points", tuple((x - cx, y - cy, z - cz) for x, y, z in self.cells)
        )

    def __len__(self) -> int:
        return len(self.cells)

    def centroid(self) -> Point3:
        """Centroid of the exposed coordinates, (0, 0, 0) up to rounding."""
        return _mean(self.points)

    def lattice_centroid(self) -> Point3:
        return _mean(self.cells)

    def centered(self) -> tuple[Point3, ...]:
        return self.points

    def normalized(self) -> tuple[Cell, ...]:
        """Translation-free key: cells shifted so the bounding box starts at 0."""
        return normalize_cells(self.cells)

    def canonical(self) -> tuple[Cell, ...]:
        """Key that is equal for structures related by a proper rotation."""
        return canonical_cells(self.cells)

    def same_cells(self, other: Structure) -> bool:
        return self.normalized() == other.normalized()

    def same_shape(self, other: Structure) -> bool:
        return self.canonical() == other.canonical()


def is_connected(cells: Iterable[Sequence[float]]) -> bool:
    """True when every cell is reachable from every other by face-adjacent steps.

    An empty input counts as connected. Iterative so large inputs cannot hit
    the recursion limit.
    """

    present = {to_cell(c) for c in cells}
    if not present:
        return True

    start = next(iter(present))
    stack = [start]
    visited = {start}
    while stack:
        current = stack.pop()
        for n in neighbours(current):
            if n in present and n not in visited:
                visited.add(n)
                stack.append(n)
    return len(visited) == len(present)


def grow_structure(count: int = DEFAULT_BLOCK_COUNT, *, rng: SeededRng) -> Structure:
    """Random-walk growth from the origin until ``count`` cells are occupied.

    The returned structure exposes its cells re-centred on the centroid.
    """

    if count < 1:
        raise ValueError("count must be >= 1")

    cells: list[Cell] = [(0, 0, 0)]
    occupied = {cells[0]}
    while len(cells) < count:
        source = rng.choice(cells)
        candidate = step(source, rng.choice(DIRECTIONS))
        if candidate not in occupied:
            occupied.add(candidate)
            cells.append(candidate)
    return Structure(cells=tuple(cells))


def snap_to_lattice(points: Sequence[Sequence[float]]) -> list[Cell]:
    """Round coordinates relative to the first point."""

    if not points:
        return []
    ox, oy, oz = points[0][0], points[0][1], points[0][2]
    return [to_cell((p[0] - ox, p[1] - oy, p[2] - oz)) for p in points]


def removable_indices(cells: Sequence[Cell]) -> list[int]:
    """Indices of cells whose removal leaves the others connected."""

    cells = list(cells)
    if len(cells) <= 1:
        return []
    return [i for i in range(len(cells)) if is_connected(cells[:i] + cells[i + 1 :])]


def free_neighbours(cells: Iterable[Cell]) -> list[Cell]:
    occupied = set(cells)
    free = {n for c in occupied for n in neighbours(c) if n not in occupied}
    return sorted(free)


def mutate_structure(
    reference: Structure | Sequence[Sequence[float]],
    *,
    steps: int,
    rng: SeededRng,
    add_attempts: int = 50,
    preserve_count: bool = True,
) -> Structure:
    """Return a structure similar to ``reference`` built by remove/add rounds.

    Each round removes one cell that keeps the rest connected, then adds a free
    face-neighbour of a random cell. With ``preserve_count`` the addition falls
    back to an exhaustive pick when the random draws all collide, and is skipped
    when the removal was skipped, so the cell count never changes. The result
    is re-centred like every :class:`Structure`.
    """

    if steps < 0:
        raise ValueError("steps must be >= 0")

    points = reference.cells if isinstance(reference, Structure) else reference
    current = snap_to_lattice(points)

    for round_idx in range(steps):
        candidates = removable_indices(current)
        removed = False
        if candidates:
            current.pop(rng.choice(candidates))
            removed = True
        else:
            logger.debug("mutation round %d: no removable cell", round_idx)

        if not current or (preserve_count and not removed):
            continue

        occupied = set(current)
        added = try_n_times(
            add_attempts,
            lambda: step(rng.choice(current), rng.choice(DIRECTIONS)),
            lambda c: c not in occupied,
        )
        if added.satisfied:
            current.append(added.value)
        elif preserve_count:
            current.append(rng.choice(free_neighbours(current)))
        else:
            logger.debug("mutation round %d: no free neighbour in %d draws", round_idx, add_attempts)

    assert is_connected(current), "mutation produced a disconnected structure"
    return Structure(cells=tuple(current))


def normalize_cells(cells: Iterable[Cell]) -> tuple[Cell, ...]:
    cells = list(cells)
    if not cells:
        return ()
    minx = min(x for x, _, _ in cells)
    miny = min(y for _, y, _ in cells)
    minz = min(z for _, _, z in cells)
    return tuple(sorted((x - minx, y - miny, z - minz) for x, y, z in cells))


@lru_cache(maxsize=None)
def rotation_matrices() -> tuple[tuple[Cell, Cell, Cell], ...]:
    """The 24 proper rotations of the cube as signed permutation matrices."""

    mats = []
    for perm in permutations(range(3)):
        for signs in ((sx, sy, sz) for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)):
            rows = tuple(
                tuple(signs[r] if col == perm[r] else 0 for col in range(3)) for r in range(3)
            )
            if _det3(rows) == 1:
                mats.append(rows)
    return tuple(mats)


def _det3(m: Sequence[Sequence[int]]) -> int:
    return (
        m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
        - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
        + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
    )


def rotate_cell(m: Sequence[Sequence[int]], cell: Cell) -> Cell:
    x, y, z = cell
    return (
        m[0][0] * x + m[0][1] * y + m[0][2] * z,
        m[1][0] * x + m[1][1] * y + m[1][2] * z,
        m[2][0] * x + m[2][1] * y + m[2][2] * z,
    )


def canonical_cells(cells: Iterable[Cell]) -> tuple[Cell, ...]:
    cells = list(cells)
    return min(normalize_cells(rotate_cell(m, c) for c in cells) for m in rotation_matrices())
