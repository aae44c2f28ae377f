"""
Hex lattice primitives and the A* pathfinder.
Axial coordinates (q, r) on an unbounded board - every integer pair is a cell.
"""
import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Hex:
    """A cell on the hex lattice."""
    q: int
    r: int

    @property
    def cell_id(self) -> str:
        return f"{self.q},{self.r}"

    def to_dict(self) -> dict:
        return {"q": self.q, "r": self.r}


# Order matters: the pathfinder expands neighbors in this order, which
# decides which of several equal-length paths is returned.
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (1, 0),   # East
    (1, -1),  # Northeast
    (0, -1),  # Northwest
    (-1, 0),  # West
    (-1, 1),  # Southwest
    (0, 1),   # Southeast
)


def parse_cell_id(value: str) -> Hex:
    """
    Parse a "q,r" board key.

    Raises ValueError if the key is not two comma-separated integers.
    """
    if not isinstance(value, str):
        raise ValueError(f"Cell id must be a string, got {type(value).__name__}")
    parts = value.split(",")
    if len(parts) != 2:
        raise ValueError(f"Cell id must look like 'q,r', got {value!r}")
    return Hex(int(parts[0].strip()), int(parts[1].strip()))


def hex_distance(a: Hex, b: Hex) -> int:
    """Number of steps between two cells."""
    dq = a.q - b.q
    dr = a.r - b.r
    return (abs(dq) + abs(dq + dr) + abs(dr)) // 2


def neighbors(cell: Hex) -> List[Hex]:
    """The six adjacent cells, in DIRECTIONS order."""
    return [Hex(cell.q + dq, cell.r + dr) for dq, dr in DIRECTIONS]


def are_adjacent(a: Hex, b: Hex) -> bool:
    return hex_distance(a, b) == 1


def rings(center: Hex, radius: int) -> List[List[Hex]]:
    """
    Group cells around center by step distance, using a breadth-first walk.

    Returns a list where index d holds every cell exactly d steps away,
    for d in 0..radius, in discovery order.
    """
    bands: List[List[Hex]] = [[] for _ in range(radius + 1)]
    bands[0].append(center)
    visited = {center}
    frontier = [center]
    for distance in range(1, radius + 1):
        next_frontier = []
        for cell in frontier:
            for neighbor in neighbors(cell):
                if neighbor not in visited:
                    visited.add(neighbor)
                    next_frontier.append(neighbor)
        bands[distance] = next_frontier
        frontier = next_frontier
    return bands


def find_path(start: Optional[Hex], end: Optional[Hex]) -> List[Hex]:
    """
    Find a shortest path between two cells using A*.

    Among nodes with equal f-score, the one that entered the open set first
    is expanded first. A node keeps its place in that order when its score
    improves while it is still open, and gets a new place if it is reopened.
    Clients run the same search, so the tie-break has to stay exactly like
    this for previews to agree.

    Returns the path including both endpoints, [start] if they are equal,
    or [] if either endpoint is missing or the frontier runs dry.
    """
    if start is None or end is None:
        return []
    if start == end:
        return [start]

    came_from: Dict[Hex, Hex] = {}
    g_score: Dict[Hex, int] = {start: 0}
    f_score: Dict[Hex, int] = {start: hex_distance(start, end)}
    # Open set membership, mapped to each node's insertion sequence.
    open_seq: Dict[Hex, int] = {start: 0}
    heap: List[Tuple[int, int, Hex]] = [(f_score[start], 0, start)]
    counter = itertools.count(1)

    while heap:
        f, seq, current = heapq.heappop(heap)
        if open_seq.get(current) != seq or f != f_score[current]:
            continue  # stale

        if current == end:
            return _reconstruct(came_from, current)

        del open_seq[current]

        tentative_g = g_score[current] + 1
        for neighbor in neighbors(current):
            if tentative_g < g_score.get(neighbor, float("inf")):
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                f_score[neighbor] = tentative_g + hex_distance(neighbor, end)
                if neighbor not in open_seq:
                    open_seq[neighbor] = next(counter)
                heapq.heappush(heap, (f_score[neighbor], open_seq[neighbor], neighbor))

    return []


def _reconstruct(came_from: Dict[Hex, Hex], current: Hex) -> List[Hex]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def path_to_dicts(path: Iterable[Hex]) -> List[dict]:
    return [cell.to_dict() for cell in path]
