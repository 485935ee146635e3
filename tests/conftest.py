"""
conftest.py
Shared fixtures.
"""

import pytest

from rules.engine import PythonChessRules
from rules.position import Position
from tests.helpers import AFTER_E4_FEN, START_FEN


@pytest.fixture
def rules() -> PythonChessRules:
    return PythonChessRules()


@pytest.fixture
def start_position(rules) -> Position:
    return rules.parse(START_FEN)


@pytest.fixture
def black_position(rules) -> Position:
    """Position after 1.e4, Black to move."""
    return rules.parse(AFTER_E4_FEN)
