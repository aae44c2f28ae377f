"""
Tests for hex lattice helpers and the A* pathfinder.
"""
import pytest
from board_engine import (
    DIRECTIONS,
    Hex,
    are_adjacent,
    find_path,
    hex_distance,
    neighbors,
    parse_cell_id,
    rings,
)


def test_hex_distance():
    """Test axial distance on a few known pairs."""
    origin = Hex(0, 0)
    assert hex_distance(origin, origin) == 0
    assert hex_distance(origin, Hex(1, 0)) == 1
    assert hex_distance(origin, Hex(1, -1)) == 1
    assert hex_distance(origin, Hex(2, 1)) == 3
    assert hex_distance(origin, Hex(-3, 3)) == 3
    assert hex_distance(Hex(2, -5), Hex(-1, 4)) == 9


def test_neighbors_follow_direction_order():
    """Test that neighbors are listed E, NE, NW, W, SW, SE."""
    result = neighbors(Hex(2, 3))
    assert result == [Hex(2 + dq, 3 + dr) for dq, dr in DIRECTIONS]
    assert result[0] == Hex(3, 3)
    assert result[-1] == Hex(2, 4)
    assert all(hex_distance(Hex(2, 3), n) == 1 for n in result)


def test_parse_cell_id():
    """Test parsing "q,r" keys, including negatives and whitespace."""
    assert parse_cell_id("3,-2") == Hex(3, -2)
    assert parse_cell_id(" -1 , 4 ") == Hex(-1, 4)
    assert Hex(3, -2).cell_id == "3,-2"

    for bad in ["", "1", "1,2,3", "a,b", "1.5,2"]:
        with pytest.raises(ValueError):
            parse_cell_id(bad)
    with pytest.raises(ValueError):
        parse_cell_id(None)


def test_rings_sizes():
    """Test that BFS bands hold 1, 6, 12, 18 cells at the right distances."""
    center = Hex(4, -2)
    bands = rings(center, 3)
    assert [len(band) for band in bands] == [1, 6, 12, 18]
    for distance, band in enumerate(bands):
        assert all(hex_distance(center, cell) == distance for cell in band)
        assert len(set(band)) == len(band)


def test_find_path_same_cell():
    """Test that a path to the start cell is just the start cell."""
    start = Hex(5, -3)
    assert find_path(start, start) == [start]
    assert find_path(start, Hex(5, -3)) == [start]


def test_find_path_missing_endpoint():
    """Test that a missing endpoint yields an empty path."""
    assert find_path(None, Hex(1, 1)) == []
    assert find_path(Hex(1, 1), None) == []
    assert find_path(None, None) == []


def test_find_path_is_shortest_and_contiguous():
    """Test length == distance + 1 and neighbor steps for many pairs."""
    pairs = [
        (Hex(0, 0), Hex(1, 0)),
        (Hex(0, 0), Hex(3, -1)),
        (Hex(0, 0), Hex(-4, 2)),
        (Hex(2, 2), Hex(-3, -1)),
        (Hex(-5, 7), Hex(6, -2)),
        (Hex(0, 0), Hex(0, 8)),
    ]
    for start, end in pairs:
        path = find_path(start, end)
        assert path[0] == start
        assert path[-1] == end
        assert len(path) == hex_distance(start, end) + 1
        for a, b in zip(path, path[1:]):
            assert are_adjacent(a, b)


def test_find_path_tie_break_is_stable():
    """Test that ties go to the first-discovered frontier node."""
    # Two steps east-ish; both (1,0)->(2,-1) and (1,-1)->(2,-1) are shortest.
    # East is expanded before northeast, so the route goes through (1,0).
    path = find_path(Hex(0, 0), Hex(2, -1))
    assert path == [Hex(0, 0), Hex(1, 0), Hex(2, -1)]

    # Same search twice returns the same route.
    assert find_path(Hex(0, 0), Hex(3, -5)) == find_path(Hex(0, 0), Hex(3, -5))


def test_find_path_straight_line():
    """Test that a straight-line target is reached along the line."""
    path = find_path(Hex(0, 0), Hex(3, 0))
    assert path == [Hex(0, 0), Hex(1, 0), Hex(2, 0), Hex(3, 0)]


def _list_scan_path(start, end):
    """Plain-list A* that scans for the first lowest f-score, as clients do."""
    open_set = [start]
    came_from = {}
    g_score = {start: 0}
    f_score = {start: hex_distance(start, end)}
    while open_set:
        current_idx = 0
        for i in range(1, len(open_set)):
            if f_score[open_set[i]] < f_score[open_set[current_idx]]:
                current_idx = i
        current = open_set.pop(current_idx)
        if current == end:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            return path[::-1]
        for neighbor in neighbors(current):
            tentative_g = g_score[current] + 1
            if tentative_g < g_score.get(neighbor, float("inf")):
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                f_score[neighbor] = tentative_g + hex_distance(neighbor, end)
                if neighbor not in open_set:
                    open_set.append(neighbor)
    return []


@pytest.mark.parametrize("end", [
    Hex(2, -1), Hex(3, -5), Hex(-4, 2), Hex(5, 5), Hex(-6, -1), Hex(0, 7), Hex(7, -3),
])
def test_find_path_matches_list_scan_order(end):
    """Test that the heap search picks the same route among ties."""
    start = Hex(0, 0)
    assert find_path(start, end) == _list_scan_path(start, end)


def test_find_path_long_route():
    """Test that a distant target is still reached with a shortest path."""
    start, end = Hex(0, 0), Hex(150, 150)
    path = find_path(start, end)
    assert path[0] == start
    assert path[-1] == end
    assert len(path) == hex_distance(start, end) + 1
