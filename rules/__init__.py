"""
rules package
Narrow chess rules interface consumed by the encoder, decoder and predictor.
"""

from rules.position import CastlingRights, Position
from rules.engine import (
    RulesEngine,
    PythonChessRules,
    RulesError,
    PositionParseError,
    IllegalMoveError,
    position_from_board,
)

__all__ = [
    'CastlingRights',
    'Position',
    'RulesEngine',
    'PythonChessRules',
    'RulesError',
    'PositionParseError',
    'IllegalMoveError',
    'position_from_board',
]
