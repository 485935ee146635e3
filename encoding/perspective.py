"""
perspective.py
Mover-relative coordinates shared by the state encoder and policy decoder.

The network sees every position as if the side to move plays "up" the
board. When Black is to move, both file and rank are reflected
(a 180 degree rotation), which on python-chess square indices is 63 - sq.
"""

import enum

import chess


class Relation(enum.IntEnum):
    """Piece color relative to the side to move."""
    ALLY = 0
    ENEMY = 1


def needs_rotation(mover: chess.Color) -> bool:
    """Black started on the far side, so its positions are rotated."""
    return mover == chess.BLACK


def canonical_square(square: chess.Square, mover: chess.Color) -> chess.Square:
    """
    Map a board square into the mover's frame.

    Args:
        square: python-chess square index [0, 63]
        mover: Side to move

    Returns:
        Square with file' = 7 - file and rank' = 7 - rank for Black,
        unchanged for White

    Examples:
        canonical_square(chess.E7, chess.BLACK) -> chess.D2
    """
    if needs_rotation(mover):
        return chess.square(7 - chess.square_file(square), 7 - chess.square_rank(square))
    return square


def relative_color(piece_color: chess.Color, mover: chess.Color) -> Relation:
    return Relation.ALLY if piece_color == mover else Relation.ENEMY


def canonical_move(move: chess.Move, mover: chess.Color) -> chess.Move:
    """Rotate a move's from/to squares into the mover's frame, keeping the promotion."""
    return chess.Move(
        canonical_square(move.from_square, mover),
        canonical_square(move.to_square, mover),
        promotion=move.promotion,
    )
