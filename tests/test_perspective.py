"""
test_perspective.py
Unit tests for mover-relative coordinates.
"""

import chess
import pytest

from encoding.perspective import Relation, canonical_move, canonical_square, relative_color


class TestCanonicalSquare:

    def test_white_is_identity(self):
        for square in chess.SQUARES:
            assert canonical_square(square, chess.WHITE) == square

    def test_black_rotates_180(self):
        assert canonical_square(chess.A1, chess.BLACK) == chess.H8
        assert canonical_square(chess.E7, chess.BLACK) == chess.D2
        assert canonical_square(chess.H2, chess.BLACK) == chess.A7

    def test_black_reflects_file_and_rank(self):
        for square in chess.SQUARES:
            rotated = canonical_square(square, chess.BLACK)
            assert chess.square_file(rotated) == 7 - chess.square_file(square)
            assert chess.square_rank(rotated) == 7 - chess.square_rank(square)

    def test_rotation_is_involution(self):
        for square in chess.SQUARES:
            assert canonical_square(canonical_square(square, chess.BLACK), chess.BLACK) == square


class TestRelativeColor:

    @pytest.mark.parametrize("piece_color, mover, expected", [
        (chess.WHITE, chess.WHITE, Relation.ALLY),
        (chess.BLACK, chess.WHITE, Relation.ENEMY),
        (chess.BLACK, chess.BLACK, Relation.ALLY),
        (chess.WHITE, chess.BLACK, Relation.ENEMY),
    ])
    def test_relation(self, piece_color, mover, expected):
        assert relative_color(piece_color, mover) == expected


class TestCanonicalMove:

    def test_black_move_keeps_promotion(self):
        move = canonical_move(chess.Move.from_uci("b2a1r"), chess.BLACK)
        assert move == chess.Move.from_uci("g7h8r")

    def test_white_move_unchanged(self):
        move = chess.Move.from_uci("g1f3")
        assert canonical_move(move, chess.WHITE) == move


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
