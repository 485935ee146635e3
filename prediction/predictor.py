"""
predictor.py
Human-like move prediction: encode → run network → decode → filter.

Keeps a short history of previous positions so the encoder can fill its
history planes, mirroring how a game feeds positions in one at a time.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

import chess

from encoding.move import MoveIndexTable, get_move_table
from encoding.policy import decode_top_moves
from encoding.state import encode_position
from model.runner import PolicyRunner, load_policy_runner
from prediction import config
from rules.engine import PythonChessRules, RulesEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovePrediction:
    """A predicted move, in UCI, SAN and square-name form."""

    uci: str
    san: str
    from_square: str
    to_square: str
    probability: float
    promotion: Optional[str] = None

    @classmethod
    def from_move(cls, move: chess.Move, san: str, probability: float) -> 'MovePrediction':
        return cls(
            uci=move.uci(),
            san=san,
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            probability=probability,
            promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
        )


@dataclass
class PredictionResult:
    predictions: List[MovePrediction] = field(default_factory=list)
    rating: Optional[int] = None
    inference_time_ms: float = 0.0


class MovePredictor:
    """
    Predict the moves a player is likely to make.

    Usage:
        predictor = MovePredictor.from_rating(1500)
        result = predictor.predict(fen)
        predictor.update_history(fen)
    """

    def __init__(
        self,
        runner: PolicyRunner,
        rules: Optional[RulesEngine] = None,
        top_k: int = config.TOP_K,
        min_probability: float = config.MIN_PROBABILITY,
        rating: Optional[int] = None,
        table: Optional[MoveIndexTable] = None,
    ):
        """
        Args:
            runner: Network execution wrapper
            rules: Rules engine (python-chess by default)
            top_k: Maximum number of predictions returned
            min_probability: Predictions below this probability are dropped
            rating: Rating of the loaded model, reported in results
            table: Move table matching the network (shared instance by default)
        """
        self.runner = runner
        self.rules = rules or PythonChessRules()
        self.top_k = top_k
        self.min_probability = min_probability
        self.rating = rating
        self.table = table if table is not None else get_move_table()
        self.history: List[str] = []

    @classmethod
    def from_rating(cls, rating: int = config.DEFAULT_RATING, **kwargs) -> 'MovePredictor':
        """
        Load the model for the closest available rating.

        Raises:
            ModelLoadError: If the model file is missing or unreadable
        """
        rating = config.get_closest_rating(rating)
        runner = load_policy_runner(config.model_path(rating))
        return cls(runner, rating=rating, **kwargs)

    def update_history(self, fen: str) -> None:
        """Record a position that was just played through, most recent first."""
        self.history = [fen] + self.history[:config.HISTORY_LENGTH - 1]

    def clear_history(self) -> None:
        self.history = []

    def predict(self, fen: str) -> PredictionResult:
        """
        Predict moves for a position.

        Args:
            fen: Current position

        Returns:
            PredictionResult with at most top_k predictions, most likely first

        Raises:
            PositionParseError: If fen is not a valid position
            PolicySizeMismatchError: If the network's policy size does not
                match the move table
        """
        start = time.perf_counter()

        position = self.rules.parse(fen)
        planes = encode_position(position, self.history, self.rules)
        logits = self.runner.run(planes)

        ranked = decode_top_moves(logits, position, self.rules.legal_moves(position), self.top_k, self.table)
        predictions = [
            MovePrediction.from_move(r.move, self.rules.san(position, r.move), r.probability)
            for r in ranked
            if r.probability >= self.min_probability
        ]

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Predicted {len(predictions)} move(s) in {elapsed_ms:.1f}ms")
        return PredictionResult(predictions=predictions, rating=self.rating, inference_time_ms=elapsed_ms)

    def best_move(self, fen: str) -> Optional[MovePrediction]:
        """Most likely move, or None if nothing clears min_probability."""
        predictions = self.predict(fen).predictions
        return predictions[0] if predictions else None
