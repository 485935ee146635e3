"""
prediction package
Rating-specific move prediction built on the encoding package.
"""

from prediction.predictor import MovePrediction, MovePredictor, PredictionResult
from prediction.sampling import (
    PredictionReward,
    brier_score,
    brier_to_points,
    calculate_prediction_reward,
    log_score,
    prediction_difficulty,
    sample_move,
)

__all__ = [
    'MovePrediction', 'MovePredictor', 'PredictionResult',
    'PredictionReward', 'brier_score', 'brier_to_points', 'calculate_prediction_reward',
    'log_score', 'prediction_difficulty', 'sample_move',
]
