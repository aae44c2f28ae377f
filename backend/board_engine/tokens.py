"""
Token store: the board cell map and the placement rules.

Colors double as token identity - a placement evicts whatever else on the
board carries the same color, whoever put it there.
"""
from enum import Enum
from typing import Dict, List, Optional
from dataclasses import dataclass


class Role(Enum):
    """Participant roles."""
    DEFAULT = "default"
    MJ = "MJ"


class TokenKind(Enum):
    """Kinds of occupied board cells."""
    ACTIVE = "active"  # A player's current token
    MJ_ACTIVE = "mj_active"  # Persistent marker placed by a game master
    DEBRIS = "debris"  # Last position a player's token moved away from


@dataclass(frozen=True)
class BoardCell:
    """An occupied board cell."""
    color: str
    kind: TokenKind

    def to_dict(self) -> dict:
        return {"color": self.color, "type": self.kind.value}


@dataclass(frozen=True)
class BoardMutation:
    """One change to the board; cell is None when the cell was cleared."""
    cell_id: str
    cell: Optional[BoardCell]

    def to_dict(self) -> dict:
        return {
            "cellId": self.cell_id,
            "data": self.cell.to_dict() if self.cell else None,
        }


def normalize_color(color: str) -> str:
    return color.strip().lower()


class TokenStore:
    """Owns the board cells and enforces one token per color."""

    def __init__(self):
        # cell_id -> BoardCell
        self.cells: Dict[str, BoardCell] = {}

    def get(self, cell_id: str) -> Optional[BoardCell]:
        return self.cells.get(cell_id)

    def cells_with_color(self, color: str) -> List[str]:
        """Cell ids whose token color matches, in board insertion order."""
        wanted = normalize_color(color)
        return [
            cell_id for cell_id, cell in self.cells.items()
            if normalize_color(cell.color) == wanted
        ]

    def place_token(self, cell_id: str, color: str, role: Role) -> List[BoardMutation]:
        """
        Place a token of the given color and return every resulting change,
        in the order it was applied.
        """
        if role == Role.MJ:
            return self._place_mj(cell_id, color)
        return self._place_active(cell_id, color)

    def _place_mj(self, cell_id: str, color: str) -> List[BoardMutation]:
        mutations = []
        for key in self.cells_with_color(color):
            del self.cells[key]
            mutations.append(BoardMutation(key, None))

        marker = BoardCell(color=color, kind=TokenKind.MJ_ACTIVE)
        self.cells[cell_id] = marker
        mutations.append(BoardMutation(cell_id, marker))
        return mutations

    def _place_active(self, cell_id: str, color: str) -> List[BoardMutation]:
        previous_active = None
        stale_debris = []
        for key in self.cells_with_color(color):
            kind = self.cells[key].kind
            if kind == TokenKind.ACTIVE:
                previous_active = key
            elif kind == TokenKind.DEBRIS:
                stale_debris.append(key)

        mutations = []
        if previous_active is not None:
            debris = BoardCell(color=color, kind=TokenKind.DEBRIS)
            self.cells[previous_active] = debris
            mutations.append(BoardMutation(previous_active, debris))

        # Only one debris trail per color survives.
        for key in stale_debris:
            del self.cells[key]
            mutations.append(BoardMutation(key, None))

        token = BoardCell(color=color, kind=TokenKind.ACTIVE)
        self.cells[cell_id] = token
        mutations.append(BoardMutation(cell_id, token))
        return mutations

    def snapshot(self) -> Dict[str, dict]:
        return {cell_id: cell.to_dict() for cell_id, cell in self.cells.items()}

    def __len__(self) -> int:
        return len(self.cells)
