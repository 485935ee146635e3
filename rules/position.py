"""
position.py
Immutable position snapshot handed from the rules engine to the encoder.

Only the fields the 112-plane encoding reads are carried:
- Piece placement (square -> chess.Piece)
- Side to move
- Castling rights (four flags)
- Half-move clock and full-move number
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

import chess


@dataclass(frozen=True)
class CastlingRights:
    """Castling availability for both sides, in literal board colors."""

    white_kingside: bool = False
    white_queenside: bool = False
    black_kingside: bool = False
    black_queenside: bool = False

    def kingside(self, color: chess.Color) -> bool:
        return self.white_kingside if color == chess.WHITE else self.black_kingside

    def queenside(self, color: chess.Color) -> bool:
        return self.white_queenside if color == chess.WHITE else self.black_queenside


@dataclass(frozen=True)
class Position:
    """
    A single chess position.

    Attributes:
        piece_map: Occupied squares, python-chess square index -> piece
        turn: Side to move (chess.WHITE or chess.BLACK)
        castling: Castling rights
        halfmove_clock: Plies since the last capture or pawn move
        fullmove_number: Full-move counter, starting at 1
        ep_square: En passant target square, if any
        fen: Source FEN, empty when the position was built by hand
    """

    piece_map: Dict[chess.Square, chess.Piece]
    turn: chess.Color = chess.WHITE
    castling: CastlingRights = field(default_factory=CastlingRights)
    halfmove_clock: int = 0
    fullmove_number: int = 1
    ep_square: Optional[chess.Square] = None
    fen: str = ''

    def pieces(self) -> Iterator[Tuple[chess.Square, chess.Piece]]:
        """Iterate occupied squares in ascending square order."""
        for square in sorted(self.piece_map):
            yield square, self.piece_map[square]

    def piece_at(self, square: chess.Square) -> Optional[chess.Piece]:
        return self.piece_map.get(square)
