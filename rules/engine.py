"""
engine.py
Rules engine collaborator: parse positions, enumerate legal moves, apply and
name moves.

The encoder and decoder only ever talk to the abstract RulesEngine, so unit
tests can substitute a scripted double that never generates moves.
PythonChessRules is the production implementation backed by python-chess.
"""

from abc import ABC, abstractmethod
from typing import List

import chess

from rules.position import CastlingRights, Position


class RulesError(Exception):
    """Base class for rules engine failures."""


class PositionParseError(RulesError, ValueError):
    """Raised when a FEN string cannot be parsed into a Position."""

    def __init__(self, fen, reason: str):
        self.fen = fen
        self.reason = reason
        super().__init__(f"Cannot parse position {fen!r}: {reason}")


class IllegalMoveError(RulesError):
    """Raised when a move is not legal in the given position."""

    def __init__(self, move: chess.Move, fen: str):
        self.move = move
        self.fen = fen
        super().__init__(f"Illegal move {move.uci()} in {fen}")


class RulesEngine(ABC):
    """Minimal rules surface: parse, legal_moves, apply_move, san."""

    @abstractmethod
    def parse(self, fen: str) -> Position:
        """
        Parse a FEN string.

        Raises:
            PositionParseError: If the string is not a valid FEN
        """

    @abstractmethod
    def legal_moves(self, position: Position) -> List[chess.Move]:
        """Return every legal move in the position."""

    @abstractmethod
    def apply_move(self, position: Position, move: chess.Move) -> Position:
        """
        Play a move and return the resulting position.

        Raises:
            IllegalMoveError: If the move is not legal in the position
        """

    @abstractmethod
    def san(self, position: Position, move: chess.Move) -> str:
        """Standard algebraic notation of a legal move, e.g. "Nf3" or "e8=Q+"."""


def position_from_board(board: chess.Board) -> Position:
    """
    Snapshot a python-chess board into a Position.

    Args:
        board: Board to snapshot (not modified)

    Returns:
        Position carrying the board's FEN and encoding-relevant fields
    """
    castling = CastlingRights(
        white_kingside=board.has_kingside_castling_rights(chess.WHITE),
        white_queenside=board.has_queenside_castling_rights(chess.WHITE),
        black_kingside=board.has_kingside_castling_rights(chess.BLACK),
        black_queenside=board.has_queenside_castling_rights(chess.BLACK),
    )
    return Position(
        piece_map=board.piece_map(),
        turn=board.turn,
        castling=castling,
        halfmove_clock=board.halfmove_clock,
        fullmove_number=board.fullmove_number,
        ep_square=board.ep_square,
        fen=board.fen(),
    )


class PythonChessRules(RulesEngine):
    """RulesEngine backed by python-chess."""

    def parse(self, fen: str) -> Position:
        if not isinstance(fen, str):
            raise PositionParseError(fen, f"expected str, got {type(fen).__name__}")
        try:
            board = chess.Board(fen)
        except ValueError as e:
            raise PositionParseError(fen, str(e)) from e
        return position_from_board(board)

    def legal_moves(self, position: Position) -> List[chess.Move]:
        return list(self.to_board(position).legal_moves)

    def apply_move(self, position: Position, move: chess.Move) -> Position:
        board = self.to_board(position)
        if move not in board.legal_moves:
            raise IllegalMoveError(move, board.fen())
        board.push(move)
        return position_from_board(board)

    def san(self, position: Position, move: chess.Move) -> str:
        board = self.to_board(position)
        if move not in board.legal_moves:
            raise IllegalMoveError(move, board.fen())
        return board.san(move)

    def to_board(self, position: Position) -> chess.Board:
        """
        Rebuild a python-chess board from a Position.

        Uses the stored FEN when present, otherwise the individual fields.
        """
        if position.fen:
            return chess.Board(position.fen)

        board = chess.Board(None)
        board.set_piece_map(dict(position.piece_map))
        board.turn = position.turn

        rights = chess.BB_EMPTY
        if position.castling.white_kingside:
            rights |= chess.BB_H1
        if position.castling.white_queenside:
            rights |= chess.BB_A1
        if position.castling.black_kingside:
            rights |= chess.BB_H8
        if position.castling.black_queenside:
            rights |= chess.BB_A8
        board.castling_rights = rights

        board.ep_square = position.ep_square
        board.halfmove_clock = position.halfmove_clock
        board.fullmove_number = position.fullmove_number
        return board
