"""
Fog of war: per-cell opacity store and the reveal algorithm.

Opacity 0.0 is fully revealed, 1.0 fully hidden. Cells with no stored
opacity are fully hidden while dark mode is on.
"""
from typing import Dict, List, Tuple

from .hexgrid import Hex, rings

HIDDEN = 1.0

# Cells at or above this opacity can still be revealed from.
REVEALED_THRESHOLD = 0.1

# Target opacity for each step distance from the revealed cell.
REVEAL_BANDS: Tuple[float, ...] = (0.0, 0.0, 0.2, 0.8)

# A cell that would stay put at one of these opacities is pushed one
# notch lighter instead, so repeated reveals keep making progress.
SNAP_FORWARD: Dict[float, float] = {
    0.2: 0.0,
    0.8: 0.4,
}


class FogState:
    """Board-wide dark mode flag plus the stored cell opacities."""

    def __init__(self):
        self.dark_mode = False
        # cell_id -> opacity
        self.opacities: Dict[str, float] = {}

    def enable(self):
        """Turn dark mode on, keeping anything already revealed."""
        self.dark_mode = True

    def disable(self):
        """Turn dark mode off and forget every revealed cell."""
        self.dark_mode = False
        self.opacities.clear()

    def opacity(self, cell_id: str) -> float:
        return self.opacities.get(cell_id, HIDDEN)

    def is_revealed(self, cell_id: str) -> bool:
        return self.opacity(cell_id) < REVEALED_THRESHOLD

    def snapshot(self) -> Dict[str, float]:
        return dict(self.opacities)


def reveal_around(center: Hex, fog: FogState) -> List[Tuple[str, float]]:
    """
    Lighten the fog around center and return the cells that changed.

    Each cell within len(REVEAL_BANDS) - 1 steps moves to the lower of its
    current opacity and its band's target, except that a cell which would
    stay at a SNAP_FORWARD opacity moves to the snapped value. Bands are
    applied nearest first and the result is stored in fog.
    """
    updates: List[Tuple[str, float]] = []
    bands = rings(center, len(REVEAL_BANDS) - 1)
    for target, cells in zip(REVEAL_BANDS, bands):
        for cell in cells:
            existing = fog.opacity(cell.cell_id)
            new_opacity = min(existing, target)
            if new_opacity == existing and existing in SNAP_FORWARD:
                new_opacity = SNAP_FORWARD[existing]
            if new_opacity != existing:
                fog.opacities[cell.cell_id] = new_opacity
                updates.append((cell.cell_id, new_opacity))
    return updates
