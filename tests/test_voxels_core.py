from __future__ import annotations

import pytest

from spatial_trainer.cognitive_core import SeededRng
from spatial_trainer.voxels import (
    DIRECTIONS,
    Structure,
    free_neighbours,
    grow_structure,
    is_connected,
    mutate_structure,
    removable_indices,
    rotate_cell,
    rotation_matrices,
)


@pytest.mark.parametrize(
    ("cells", "expected"),
    [
        ([], True),
        ([(0, 0, 0)], True),
        ([(0, 0, 0), (1, 0, 0)], True),
        ([(0, 0, 0), (1, 1, 0)], False),
        ([(0, 0, 0), (1, 1, 1)], False),
        ([(0, 0, 0), (1, 0, 0), (1, 1, 0)], True),
        ([(0, 0, 0), (1, 0, 0), (3, 0, 0)], False),
    ],
)
def test_is_connected_fixtures(cells: list[tuple[int, int, int]], expected: bool) -> None:
    assert is_connected(cells) is expected


def test_is_connected_rounds_float_coordinates() -> None:
    cells = [(-0.4999, 0.0, 0.0), (0.50001, 0.0, 0.0000001), (1.5, 1.0, 0.0)]
    # Rounds to (0,0,0), (1,0,0), (2,1,0): the last one only touches diagonally.
    assert is_connected(cells) is False
    assert is_connected(cells[:2]) is True


def test_directions_are_six_unit_steps() -> None:
    assert len(set(DIRECTIONS)) == 6
    assert all(sum(abs(v) for v in d) == 1 for d in DIRECTIONS)


def test_grow_returns_connected_structure_of_exact_size() -> None:
    for seed in range(20):
        rng = SeededRng(seed)
        for n in (1, 2, 5, 10, 25):
            s = grow_structure(n, rng=rng)
            assert len(s) == n
            assert len(set(s.cells)) == n
            assert (0, 0, 0) in s.cells
            assert is_connected(s.cells)


def test_grow_rejects_non_positive_count() -> None:
    with pytest.raises(ValueError):
        grow_structure(0, rng=SeededRng(1))


def test_grow_determinism_same_seed_same_structure() -> None:
    assert grow_structure(10, rng=SeededRng(7)) == grow_structure(10, rng=SeededRng(7))


def test_centered_structure_has_zero_centroid() -> None:
    s = grow_structure(10, rng=SeededRng(3))
    centered = s.centered()
    for axis in range(3):
        assert sum(p[axis] for p in centered) == pytest.approx(0.0, abs=1e-9)


def test_removable_indices_of_a_line_are_its_ends() -> None:
    line = [(0, 0, 0), (1, 0, 0), (2, 0, 0)]
    assert removable_indices(line) == [0, 2]
    assert removable_indices([(0, 0, 0)]) == []


def test_free_neighbours_of_single_cell() -> None:
    assert len(free_neighbours([(0, 0, 0)])) == 6
    assert (1, 0, 0) not in free_neighbours([(0, 0, 0), (1, 0, 0)])


def test_mutation_preserves_connectivity_and_count() -> None:
    for seed in range(40):
        rng = SeededRng(seed)
        reference = grow_structure(10, rng=rng)
        for steps in range(6):
            mutated = mutate_structure(reference, steps=steps, rng=rng)
            assert is_connected(mutated.cells)
            assert len(mutated) == len(reference)
            assert len(set(mutated.cells)) == len(mutated)


def test_mutation_without_count_policy_stays_within_tolerance() -> None:
    for seed in range(40):
        rng = SeededRng(seed)
        reference = grow_structure(10, rng=rng)
        mutated = mutate_structure(reference, steps=3, rng=rng, add_attempts=1, preserve_count=False)
        assert is_connected(mutated.cells)
        assert abs(len(mutated) - len(reference)) <= 3


def test_mutation_with_zero_steps_keeps_the_shape() -> None:
    reference = grow_structure(10, rng=SeededRng(11))
    same = mutate_structure(reference, steps=0, rng=SeededRng(12))
    assert same.same_cells(reference)


def test_mutation_accepts_centered_float_coordinates() -> None:
    reference = grow_structure(10, rng=SeededRng(5))
    from_floats = mutate_structure(reference.centered(), steps=0, rng=SeededRng(6))
    assert from_floats.same_cells(reference)


def test_mutation_of_degenerate_structures_never_fails() -> None:
    single = Structure(cells=((0, 0, 0),))
    assert mutate_structure(single, steps=3, rng=SeededRng(1)).cells == ((0, 0, 0),)

    pair = Structure(cells=((0, 0, 0), (0, 0, 1)))
    mutated = mutate_structure(pair, steps=5, rng=SeededRng(2))
    assert len(mutated) == 2
    assert is_connected(mutated.cells)


def test_mutation_rejects_negative_steps() -> None:
    with pytest.raises(ValueError):
        mutate_structure(Structure(cells=((0, 0, 0),)), steps=-1, rng=SeededRng(1))


def test_there_are_24_distinct_proper_rotations() -> None:
    mats = rotation_matrices()
    assert len(mats) == 24
    assert len(set(mats)) == 24


def test_rotated_copy_has_same_shape_but_mirror_does_not() -> None:
    # Three mutually perpendicular steps: a chiral tetracube.
    screw = Structure(cells=((0, 0, 0), (1, 0, 0), (1, 1, 0), (1, 1, 1)))
    mirror = Structure(cells=tuple((-x, y, z) for x, y, z in screw.cells))

    for m in rotation_matrices():
        rotated = Structure(cells=tuple(rotate_cell(m, c) for c in screw.cells))
        assert rotated.same_shape(screw)

    assert not mirror.same_shape(screw)
    assert not mirror.same_cells(screw)


def test_translated_structure_compares_equal_by_cells() -> None:
    s = grow_structure(10, rng=SeededRng(9))
    shifted = Structure(cells=tuple((x + 5, y - 2, z + 7) for x, y, z in s.cells))
    assert shifted.same_cells(s)
    for a, b in zip(shifted.centered(), s.centered(), strict=True):
        assert a == pytest.approx(b)


def _assert_centred(s: Structure) -> None:
    for axis in range(3):
        assert s.centroid()[axis] == pytest.approx(0.0, abs=1e-9)
        assert sum(p[axis] for p in s.points) == pytest.approx(0.0, abs=1e-9)


def test_grown_and_mutated_structures_are_recentred() -> None:
    for seed in range(20):
        rng = SeededRng(seed)
        grown = grow_structure(10, rng=rng)
        _assert_centred(grown)
        mutated = mutate_structure(grown, steps=3, rng=rng)
        _assert_centred(mutated)
        assert len(mutated.points) == len(mutated.cells)


def test_points_are_cells_shifted_by_lattice_centroid() -> None:
    s = Structure(cells=((0, 0, 0), (1, 0, 0), (2, 0, 0), (2, 1, 0)))
    assert s.lattice_centroid() == pytest.approx((0.75, 0.25, 0.0))
    assert s.points[0] == pytest.approx((-0.75, -0.25, 0.0))
    assert s.centered() == s.points
