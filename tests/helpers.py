"""
helpers.py
Test doubles and position helpers shared across test modules.
"""

from typing import List, Optional

import chess

from rules.engine import PythonChessRules, RulesEngine
from rules.position import CastlingRights, Position

START_FEN = chess.STARTING_FEN
AFTER_E4_FEN = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"


class ScriptedRules(RulesEngine):
    """
    Rules double for tests that never need move generation.

    FENs are parsed and SAN is named with python-chess; legal_moves returns
    whatever list the test scripted; apply_move just relocates the piece.
    """

    def __init__(self, legal_moves: Optional[List[chess.Move]] = None):
        self.scripted = list(legal_moves or [])
        self._parser = PythonChessRules()
        self.parsed: List[str] = []

    def parse(self, fen: str) -> Position:
        self.parsed.append(fen)
        return self._parser.parse(fen)

    def legal_moves(self, position: Position) -> List[chess.Move]:
        return list(self.scripted)

    def apply_move(self, position: Position, move: chess.Move) -> Position:
        pieces = dict(position.piece_map)
        piece = pieces.pop(move.from_square)
        if move.promotion:
            piece = chess.Piece(move.promotion, piece.color)
        pieces[move.to_square] = piece
        return Position(
            piece_map=pieces,
            turn=not position.turn,
            castling=position.castling,
            halfmove_clock=position.halfmove_clock + 1,
            fullmove_number=position.fullmove_number + (1 if position.turn == chess.BLACK else 0),
        )

    def san(self, position: Position, move: chess.Move) -> str:
        return self._parser.san(position, move)


def rotate(position: Position) -> Position:
    """
    Rotate a position 180 degrees and swap colors.

    Castling flags are swapped between the sides so that mover-relative
    castling is unchanged.
    """
    castling = position.castling
    return Position(
        piece_map={63 - sq: chess.Piece(p.piece_type, not p.color) for sq, p in position.piece_map.items()},
        turn=not position.turn,
        castling=CastlingRights(
            white_kingside=castling.black_kingside,
            white_queenside=castling.black_queenside,
            black_kingside=castling.white_kingside,
            black_queenside=castling.white_queenside,
        ),
        halfmove_clock=position.halfmove_clock,
        fullmove_number=position.fullmove_number,
    )
