"""
Board state and hex geometry for the shared tabletop.
This package contains no web framework dependencies.
"""

from board_engine.hexgrid import (
    DIRECTIONS,
    Hex,
    are_adjacent,
    find_path,
    hex_distance,
    neighbors,
    parse_cell_id,
    path_to_dicts,
    rings,
)
from board_engine.tokens import BoardCell, BoardMutation, Role, TokenKind, TokenStore, normalize_color
from board_engine.fog import FogState, REVEAL_BANDS, REVEALED_THRESHOLD, reveal_around
from board_engine.session import DEFAULT_COLOR, SessionRegistry, User

__all__ = [
    "DIRECTIONS",
    "Hex",
    "are_adjacent",
    "find_path",
    "hex_distance",
    "neighbors",
    "parse_cell_id",
    "path_to_dicts",
    "rings",
    "BoardCell",
    "BoardMutation",
    "Role",
    "TokenKind",
    "TokenStore",
    "normalize_color",
    "FogState",
    "REVEAL_BANDS",
    "REVEALED_THRESHOLD",
    "reveal_around",
    "DEFAULT_COLOR",
    "SessionRegistry",
    "User",
]
