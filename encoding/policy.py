"""
policy.py
Turn raw policy logits into ranked legal moves.

Probabilities come from a softmax over the whole policy vector and are not
renormalised over the legal moves, so a returned list can sum to less
than 1 when the network puts mass on illegal moves.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import chess
import numpy as np

from encoding.errors import PolicySizeMismatchError
from encoding.move import MoveIndexTable, get_move_table
from encoding.perspective import canonical_move
from rules.position import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedMove:
    """A legal move with its policy probability."""

    move: chess.Move
    probability: float
    index: int

    @property
    def uci(self) -> str:
        return self.move.uci()


def softmax(logits) -> np.ndarray:
    """
    Numerically stable softmax.

    Args:
        logits: 1-D array-like of raw scores (numpy, list or torch tensor)

    Returns:
        np.ndarray of float64 probabilities summing to 1
    """
    values = _as_vector(logits)
    shifted = np.exp(values - values.max())
    return shifted / shifted.sum()


def _as_array(logits) -> np.ndarray:
    if hasattr(logits, 'detach'):
        logits = logits.detach().cpu().numpy()
    return np.asarray(logits, dtype=np.float64)


def _as_vector(logits) -> np.ndarray:
    return _as_array(logits).reshape(-1)


def _resolve_moves(probs: np.ndarray, position: Position, legal_moves: Iterable[chess.Move],
                   table: MoveIndexTable) -> List[Tuple[chess.Move, int]]:
    """Pair each legal move with its table index, dropping (and logging) misses."""
    resolved = []
    missed = []
    for move in legal_moves:
        idx = table.index_of(canonical_move(move, position.turn))
        if idx is None:
            missed.append(move.uci())
            continue
        resolved.append((move, idx))

    if missed:
        side = 'white' if position.turn == chess.WHITE else 'black'
        logger.warning(
            f"Policy lookup failed for {len(missed)} legal move(s) {missed} "
            f"({len(resolved)} resolved, {side} to move, table size {len(table)}, "
            f"policy size {len(probs)}, fen {position.fen or '<none>'})"
        )
    return resolved


def _checked_probabilities(logits, table: MoveIndexTable) -> np.ndarray:
    values = _as_array(logits)
    # A [1, N] batch of one is accepted, anything wider is not
    if any(dim != 1 for dim in values.shape[:-1]):
        raise PolicySizeMismatchError(values.size, len(table), shape=values.shape)
    values = values.reshape(-1)
    if len(values) != len(table):
        raise PolicySizeMismatchError(len(values), len(table))
    return softmax(values)


def policy_distribution(logits, position: Position, legal_moves: Iterable[chess.Move],
                        table: Optional[MoveIndexTable] = None) -> Dict[chess.Move, float]:
    """
    Probability of every resolvable legal move.

    Raises:
        PolicySizeMismatchError: If len(logits) != len(table), or logits
            hold more than one row
    """
    if table is None:
        table = get_move_table()
    probs = _checked_probabilities(logits, table)
    return {move: float(probs[idx]) for move, idx in _resolve_moves(probs, position, legal_moves, table)}


def decode_top_moves(logits, position: Position, legal_moves: Iterable[chess.Move], k: int,
                     table: Optional[MoveIndexTable] = None) -> List[RankedMove]:
    """
    Rank legal moves by policy probability.

    Args:
        logits: Raw policy head output, length must equal the table size
        position: Position the moves are played from (selects the perspective)
        legal_moves: Legal moves in board coordinates
        k: Maximum number of moves to return (>= 0)
        table: Move table (defaults to the shared instance)

    Returns:
        Up to k RankedMove, sorted by non-increasing probability, ties
        broken by ascending table index

    Raises:
        PolicySizeMismatchError: If len(logits) != len(table), or logits
            hold more than one row
        ValueError: If k is negative
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")

    if table is None:
        table = get_move_table()
    probs = _checked_probabilities(logits, table)

    ranked = [
        RankedMove(move=move, probability=float(probs[idx]), index=idx)
        for move, idx in _resolve_moves(probs, position, legal_moves, table)
    ]
    ranked.sort(key=lambda r: (-r.probability, r.index))
    return ranked[:k]
