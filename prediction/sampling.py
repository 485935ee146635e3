"""
sampling.py
Temperature sampling and proper scoring rules over move predictions.

Scoring:
- Brier score: sum of squared errors, lower is better, 0 is perfect
- Log score: -log(p_actual), lower is better
- Difficulty: Shannon entropy of the predicted distribution
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from prediction import config
from prediction.predictor import MovePrediction

MIN_TEMPERATURE = 0.01
LOG_EPSILON = 1e-10
SCORE_FLOOR = 0.001


def sample_move(predictions: Sequence[MovePrediction], temperature: Union[float, str] = 1.0,
                rng: Optional[np.random.Generator] = None) -> Optional[MovePrediction]:
    """
    Sample a move with temperature scaling.

    Args:
        predictions: Predictions sorted by probability, most likely first
        temperature: ~0 picks the top move, 1 samples the true
            distribution, larger values flatten it. A name from
            config.TEMPERATURE_PRESETS is also accepted
        rng: Random generator (a fresh default_rng() if omitted)

    Returns:
        Selected prediction, or None if there are none

    Raises:
        ValueError: If temperature names an unknown preset
    """
    if isinstance(temperature, str):
        if temperature not in config.TEMPERATURE_PRESETS:
            raise ValueError(f"Unknown temperature preset {temperature!r}, expected one of {sorted(config.TEMPERATURE_PRESETS)}")
        temperature = config.TEMPERATURE_PRESETS[temperature]
    if not predictions:
        return None
    if len(predictions) == 1 or temperature < MIN_TEMPERATURE:
        return predictions[0]

    rng = rng or np.random.default_rng()
    log_probs = np.log(np.maximum([p.probability for p in predictions], LOG_EPSILON))
    scaled = np.exp((log_probs - log_probs.max()) / temperature)
    weights = scaled / scaled.sum()
    return predictions[int(rng.choice(len(predictions), p=weights))]


def brier_score(predictions: Sequence[MovePrediction], actual_move: str) -> float:
    """
    Brier score of a prediction set against the move actually played.

    A move missing from the predictions counts as predicted with 0%,
    adding a full error of 1.
    """
    score = 0.0
    found = False
    for pred in predictions:
        outcome = 1.0 if pred.uci == actual_move else 0.0
        found = found or pred.uci == actual_move
        score += (pred.probability - outcome) ** 2
    if not found:
        score += 1.0
    return score


def log_score(predictions: Sequence[MovePrediction], actual_move: str) -> float:
    for pred in predictions:
        if pred.uci == actual_move:
            return -math.log(max(pred.probability, SCORE_FLOOR))
    return -math.log(SCORE_FLOOR)


def brier_to_points(score: float) -> int:
    """Map a Brier score (0 best, 1 worst) to 0-100 points."""
    return round((1.0 - min(1.0, max(0.0, score))) * 100)


@dataclass(frozen=True)
class PredictionReward:
    base_points: int
    probability_bonus: int
    total_points: int
    is_correct: bool
    actual_probability: float
    pick_probability: float


def _probability_of(predictions: Sequence[MovePrediction], uci: str) -> float:
    return next((p.probability for p in predictions if p.uci == uci), 0.0)


def calculate_prediction_reward(predictions: Sequence[MovePrediction], user_pick: str,
                                actual_move: str) -> PredictionReward:
    """
    Reward a user's guess of the opponent's move.

    Args:
        predictions: Network predictions for the position
        user_pick: UCI move the user guessed
        actual_move: UCI move that was played

    Returns:
        PredictionReward: 50 base points when correct, plus a bonus scaled
        by the actual move's probability (or a small consolation scaled by
        the pick's probability when wrong)
    """
    is_correct = user_pick == actual_move
    actual_probability = _probability_of(predictions, actual_move)
    pick_probability = _probability_of(predictions, user_pick)

    base_points = 50 if is_correct else 0
    if is_correct:
        probability_bonus = round(actual_probability * 50)
    else:
        probability_bonus = round(pick_probability * 10)

    return PredictionReward(
        base_points=base_points,
        probability_bonus=probability_bonus,
        total_points=base_points + probability_bonus,
        is_correct=is_correct,
        actual_probability=actual_probability,
        pick_probability=pick_probability,
    )


def prediction_difficulty(predictions: Sequence[MovePrediction]) -> str:
    """
    Classify how hard a position is to predict.

    Returns:
        'easy' (entropy < 1 bit), 'medium' (< 1.8 bits) or 'hard'
    """
    if not predictions:
        return 'medium'

    entropy = -sum(p.probability * math.log2(p.probability) for p in predictions if p.probability > 0)
    if entropy < 1.0:
        return 'easy'
    if entropy < 1.8:
        return 'medium'
    return 'hard'
