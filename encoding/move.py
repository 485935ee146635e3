"""
move.py
Map chess moves to Lc0/Maia policy indices and back.

Encoding scheme (1858 entries, all from the mover's perspective):
- Source squares visited in python-chess order (a1, b1, ..., h1, a2, ..., h8)
- Per source square, in order:
    1. Sliding moves: N, NE, E, SE, S, SW, W, NW x distance 1..7
    2. Knight jumps: 8 fixed offsets
    3. Underpromotions (rank 7 -> 8 only): file delta -1, 0, +1 x N, B, R
- Off-board destinations are skipped, not reserved (dense indexing)
- Queen promotions share the sliding-move index of the same from/to pair

The table order is part of the network's wire format: reordering it
requires a network trained against the new order.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

import chess
import numpy as np

from encoding.perspective import canonical_move, needs_rotation
from rules.position import Position

logger = logging.getLogger(__name__)

POLICY_SIZE = 1858

# (file delta, rank delta)
SLIDING_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1),    # N
    (1, 1),    # NE
    (1, 0),    # E
    (1, -1),   # SE
    (0, -1),   # S
    (-1, -1),  # SW
    (-1, 0),   # W
    (-1, 1),   # NW
)
MAX_DISTANCE = 7

KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 2), (2, 1), (2, -1), (1, -2),
    (-1, -2), (-2, -1), (-2, 1), (-1, 2),
)

# Capture left, push, capture right
PROMOTION_FILE_DELTAS = (-1, 0, 1)
UNDERPROMOTION_PIECES = (chess.KNIGHT, chess.BISHOP, chess.ROOK)
PROMOTION_FROM_RANK = 6


def _on_board(file: int, rank: int) -> bool:
    return 0 <= file < 8 and 0 <= rank < 8


def _table_key(move: chess.Move) -> chess.Move:
    """Queen promotions are looked up under the plain sliding move."""
    if move.promotion == chess.QUEEN:
        return chess.Move(move.from_square, move.to_square)
    return move


class MoveIndexTable:
    """
    Immutable two-way association between canonical moves and policy indices.

    Build one with MoveIndexTable.build(), or share the process-wide
    instance returned by get_move_table().
    """

    def __init__(self, moves: Iterable[chess.Move]):
        self._moves: Tuple[chess.Move, ...] = tuple(moves)
        self._index: Dict[chess.Move, int] = {}
        for idx, move in enumerate(self._moves):
            if move in self._index:
                raise ValueError(f"Duplicate move {move.uci()} in move table")
            self._index[move] = idx

    @classmethod
    def build(cls) -> 'MoveIndexTable':
        """
        Enumerate every canonical move shape in table order.

        Returns:
            MoveIndexTable with POLICY_SIZE entries
        """
        moves: List[chess.Move] = []

        for from_square in chess.SQUARES:
            from_file = chess.square_file(from_square)
            from_rank = chess.square_rank(from_square)

            for df, dr in SLIDING_DIRECTIONS:
                for distance in range(1, MAX_DISTANCE + 1):
                    to_file = from_file + df * distance
                    to_rank = from_rank + dr * distance
                    if _on_board(to_file, to_rank):
                        moves.append(chess.Move(from_square, chess.square(to_file, to_rank)))

            for df, dr in KNIGHT_OFFSETS:
                to_file = from_file + df
                to_rank = from_rank + dr
                if _on_board(to_file, to_rank):
                    moves.append(chess.Move(from_square, chess.square(to_file, to_rank)))

            if from_rank == PROMOTION_FROM_RANK:
                for df in PROMOTION_FILE_DELTAS:
                    to_file = from_file + df
                    if not _on_board(to_file, from_rank + 1):
                        continue
                    to_square = chess.square(to_file, from_rank + 1)
                    for piece in UNDERPROMOTION_PIECES:
                        moves.append(chess.Move(from_square, to_square, promotion=piece))

        table = cls(moves)
        logger.debug(f"Built move table with {len(table)} entries (expected {POLICY_SIZE})")
        return table

    def __len__(self) -> int:
        return len(self._moves)

    def __contains__(self, move: chess.Move) -> bool:
        return _table_key(move) in self._index

    def index_of(self, move: chess.Move) -> Optional[int]:
        """
        Look up a canonical move.

        Args:
            move: Move already expressed in the mover's frame

        Returns:
            Table index, or None if the shape is not in the table
        """
        return self._index.get(_table_key(move))

    def move_at(self, index: int) -> chess.Move:
        """
        Canonical move stored at an index.

        Raises:
            IndexError: If index is outside [0, len(table))
        """
        if not 0 <= index < len(self._moves):
            raise IndexError(f"Policy index {index} out of range [0, {len(self._moves)})")
        return self._moves[index]

    def uci_at(self, index: int) -> str:
        return self.move_at(index).uci()

    def legal_move_mask(self, position: Position, legal_moves: Iterable[chess.Move]) -> np.ndarray:
        """
        Boolean mask over the policy vector marking the given legal moves.

        Args:
            position: Position the moves belong to (selects the perspective)
            legal_moves: Moves in native board coordinates

        Returns:
            np.ndarray of shape [len(table)], dtype bool
        """
        mask = np.zeros(len(self._moves), dtype=bool)
        for move in legal_moves:
            idx = self.index_of(canonical_move(move, position.turn))
            if idx is not None:
                mask[idx] = True
        return mask


_TABLE: Optional[MoveIndexTable] = None
_TABLE_LOCK = threading.Lock()


def get_move_table() -> MoveIndexTable:
    """Process-wide move table, built on first use."""
    global _TABLE
    if _TABLE is None:
        with _TABLE_LOCK:
            if _TABLE is None:
                _TABLE = MoveIndexTable.build()
    return _TABLE


def encode_move(move: chess.Move, mover: chess.Color,
                table: Optional[MoveIndexTable] = None) -> Optional[int]:
    """
    Map a native move to its policy index.

    Args:
        move: Move in board coordinates
        mover: Side making the move
        table: Move table (defaults to the shared instance)

    Returns:
        Policy index, or None if the move has no table entry

    Examples:
        encode_move(Move.from_uci("e2e4"), WHITE) == encode_move(Move.from_uci("d7d5"), BLACK)
    """
    if table is None:
        table = get_move_table()
    return table.index_of(canonical_move(move, mover))


def decode_move(index: int, mover: chess.Color, position: Optional[Position] = None,
                table: Optional[MoveIndexTable] = None) -> chess.Move:
    """
    Map a policy index back to a move in board coordinates.

    Args:
        index: Policy index in [0, len(table))
        mover: Side to move
        position: If given, a pawn reaching the back rank through a
            sliding index is decoded as a queen promotion
        table: Move table (defaults to the shared instance)

    Returns:
        chess.Move in board coordinates (legality is not checked)
    """
    if table is None:
        table = get_move_table()
    move = canonical_move(table.move_at(index), mover)

    if position is not None and move.promotion is None:
        piece = position.piece_at(move.from_square)
        back_rank = 0 if needs_rotation(mover) else 7
        if (piece is not None and piece.piece_type == chess.PAWN
                and chess.square_rank(move.to_square) == back_rank):
            move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
    return move
