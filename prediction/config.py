"""
config.py
Move prediction configuration.

Model files are looked up as <MODEL_DIR>/maia-<rating>.pkl; set the
MAIA_MODEL_DIR environment variable to point somewhere else.
"""

import os
from pathlib import Path

# Decoding
TOP_K = 5                 # Moves returned per prediction
MIN_PROBABILITY = 0.01    # Predictions below this are dropped
HISTORY_LENGTH = 7        # Prior positions fed to the encoder

# Rating-specific models
RATINGS = (1100, 1200, 1300, 1400, 1500, 1600, 1700, 1800, 1900)
DEFAULT_RATING = 1500
MODEL_DIR = Path(os.environ.get("MAIA_MODEL_DIR", "models"))
MODEL_SUFFIX = ".pkl"

# Sampling temperature presets
TEMPERATURE_PRESETS = {
    'deterministic': 0.1,  # Always the most likely move
    'conservative': 0.7,
    'realistic': 1.0,      # True distribution
    'exploratory': 1.3,
    'random': 2.0,
}


def get_closest_rating(target: int) -> int:
    """
    Closest available rating to a target.

    Args:
        target: Desired rating

    Returns:
        Rating from RATINGS; ties go to the lower rating
    """
    return min(RATINGS, key=lambda rating: (abs(rating - target), rating))


def model_path(rating: int) -> Path:
    """Model file for a rating in RATINGS."""
    if rating not in RATINGS:
        raise ValueError(f"No model for rating {rating}, expected one of {RATINGS}")
    return MODEL_DIR / f"maia-{rating}{MODEL_SUFFIX}"
