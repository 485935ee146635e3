"""
state.py
Encode a chess position and its history as the Lc0/Maia 112-plane input.

Encoding scheme (112 planes of 8x8, flattened to 7168 floats):
- Planes 0-95: 8 time steps x 12 piece planes, current position first
    - Per step: ally P, N, B, R, Q, K then enemy P, N, B, R, Q, K
- Planes 96-99: Castling (ally O-O, ally O-O-O, enemy O-O, enemy O-O-O)
- Plane 100: Side to move (always 0, the board is already canonical)
- Planes 101-102: Repetition counters (not tracked, always 0)
- Plane 103: Fifty-move clock, halfmove_clock / 100 clamped to [0, 1]
- Planes 104-110: Reserved (0)
- Plane 111: Constant 1.0

Every square is expressed from the side to move's perspective; see
encoding.perspective.
"""

import logging
from typing import List, Optional, Sequence, Union

import chess
import numpy as np
import torch

from encoding.perspective import Relation, canonical_square, relative_color
from rules.engine import PositionParseError, PythonChessRules, RulesEngine
from rules.position import Position

logger = logging.getLogger(__name__)

NUM_PLANES = 112
BOARD_SIZE = 8
PLANE_SIZE = BOARD_SIZE * BOARD_SIZE
INPUT_SIZE = NUM_PLANES * PLANE_SIZE  # 7168

HISTORY_STEPS = 8
PLANES_PER_STEP = 12

CASTLING_PLANE = 96
SIDE_TO_MOVE_PLANE = 100
REPETITION_PLANE = 101
FIFTY_MOVE_PLANE = 103
BIAS_PLANE = 111

PIECE_TO_PLANE = {
    chess.PAWN: 0,
    chess.KNIGHT: 1,
    chess.BISHOP: 2,
    chess.ROOK: 3,
    chess.QUEEN: 4,
    chess.KING: 5,
}

HistoryEntry = Union[Position, str]

_default_rules: Optional[RulesEngine] = None


def _rules_or_default(rules: Optional[RulesEngine]) -> RulesEngine:
    global _default_rules
    if rules is not None:
        return rules
    if _default_rules is None:
        _default_rules = PythonChessRules()
    return _default_rules


def build_history(current: HistoryEntry, history: Sequence[HistoryEntry] = ()) -> List[HistoryEntry]:
    """
    Build the 8-entry history buffer.

    Args:
        current: Position (or FEN) at time step 0
        history: Prior positions, most recent first; only the first 7 are used

    Returns:
        List of exactly 8 entries; missing steps repeat the oldest known entry
    """
    steps = [current] + list(history[:HISTORY_STEPS - 1])
    while len(steps) < HISTORY_STEPS:
        steps.append(steps[-1])
    return steps


def encode_position(position: Position, history: Sequence[HistoryEntry] = (),
                    rules: Optional[RulesEngine] = None) -> np.ndarray:
    """
    Encode a position and its history as a flat 112x8x8 plane tensor.

    Args:
        position: Current position (time step 0)
        history: Up to 7 prior positions, most recent first, as Position
            objects or FEN strings
        rules: Rules engine used to parse FEN history entries

    Returns:
        Read-only np.ndarray of shape [7168], dtype float32

    Invariant:
        Output is deterministic for the same position and history
    """
    planes = np.zeros((NUM_PLANES, BOARD_SIZE, BOARD_SIZE), dtype=np.float32)
    mover = position.turn

    for step, entry in enumerate(build_history(position, history)):
        snapshot = _resolve(entry, step, rules)
        if snapshot is not None:
            _encode_pieces(snapshot, planes, step, mover)

    _encode_auxiliary(position, planes)

    flat = planes.reshape(INPUT_SIZE)
    flat.flags.writeable = False
    return flat


def encode_fen(fen: str, history: Sequence[str] = (), rules: Optional[RulesEngine] = None) -> np.ndarray:
    """
    Encode a FEN string and FEN history.

    Raises:
        PositionParseError: If the current FEN cannot be parsed
    """
    rules = _rules_or_default(rules)
    return encode_position(rules.parse(fen), history, rules)


def _resolve(entry: HistoryEntry, step: int, rules: Optional[RulesEngine]) -> Optional[Position]:
    """Parse a FEN history entry; None (logged) if it cannot be parsed."""
    if isinstance(entry, Position):
        return entry
    try:
        return _rules_or_default(rules).parse(entry)
    except PositionParseError as e:
        logger.warning(f"History step {step} left empty: {e}")
        return None


def _encode_pieces(snapshot: Position, planes: np.ndarray, step: int, mover: chess.Color) -> None:
    """
    Helper: Encode piece positions for one time step.

    Args:
        snapshot: Position at this time step
        planes: Array to fill (modified in-place)
        step: Time step, 0 = current
        mover: Side to move in the current position (sets the perspective)
    """
    base = step * PLANES_PER_STEP
    for square, piece in snapshot.pieces():
        plane_idx = base + PIECE_TO_PLANE[piece.piece_type]
        if relative_color(piece.color, mover) == Relation.ENEMY:
            plane_idx += 6

        target = canonical_square(square, mover)
        planes[plane_idx, chess.square_rank(target), chess.square_file(target)] = 1.0


def _encode_auxiliary(position: Position, planes: np.ndarray) -> None:
    """
    Helper: Encode castling, clock and bias planes.

    Args:
        position: Current position
        planes: Array to fill (modified in-place)
    """
    ally = position.turn
    enemy = not ally
    castling = position.castling

    flags = (
        castling.kingside(ally),
        castling.queenside(ally),
        castling.kingside(enemy),
        castling.queenside(enemy),
    )
    for offset, present in enumerate(flags):
        if present:
            planes[CASTLING_PLANE + offset, :, :] = 1.0

    # Planes 100-102 stay zero: canonical side to move, no repetition tracking

    clock = min(max(position.halfmove_clock / 100.0, 0.0), 1.0)
    planes[FIFTY_MOVE_PLANE, :, :] = clock

    planes[BIAS_PLANE, :, :] = 1.0


def plane(planes: np.ndarray, index: int) -> np.ndarray:
    """8x8 view of a single plane of a flat plane tensor."""
    return planes.reshape(NUM_PLANES, BOARD_SIZE, BOARD_SIZE)[index]


def planes_to_tensor(planes: np.ndarray) -> torch.Tensor:
    """
    Convert a flat plane tensor into network input.

    Returns:
        Tensor of shape [1, 112, 8, 8], dtype float32
    """
    array = np.array(planes, dtype=np.float32).reshape(NUM_PLANES, BOARD_SIZE, BOARD_SIZE)
    return torch.from_numpy(array).unsqueeze(0)
