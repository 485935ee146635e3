"""
test_policy.py
Unit tests for policy decoding into ranked legal moves.
"""

import logging

import chess
import numpy as np
import pytest
import torch

from encoding.errors import PolicySizeMismatchError
from encoding.move import POLICY_SIZE, encode_move
from encoding.policy import decode_top_moves, policy_distribution, softmax
from tests.helpers import ScriptedRules


def uniform_logits() -> np.ndarray:
    return np.zeros(POLICY_SIZE, dtype=np.float32)


def random_logits(seed: int = 0) -> np.ndarray:
    return np.random.default_rng(seed).normal(size=POLICY_SIZE).astype(np.float32)


class TestSoftmax:
    """Numerically stable softmax."""

    def test_sums_to_one(self):
        probs = softmax(random_logits())
        assert probs.sum() == pytest.approx(1.0)
        assert np.all(probs >= 0)

    def test_large_logits_are_stable(self):
        probs = softmax([1000.0, 1000.0, -1000.0])
        assert np.all(np.isfinite(probs))
        assert probs[0] == pytest.approx(0.5)
        assert probs[2] == pytest.approx(0.0)


class TestDecodeTopMoves:
    """Ranking, truncation and preconditions."""

    def test_starting_position_top_five(self, start_position, rules):
        ranked = decode_top_moves(random_logits(), start_position, rules.legal_moves(start_position), 5)
        assert len(ranked) == 5
        legal = set(rules.legal_moves(start_position))
        assert all(r.move in legal for r in ranked)

    def test_monotonic_ranking(self, black_position, rules):
        for seed in range(5):
            ranked = decode_top_moves(random_logits(seed), black_position, rules.legal_moves(black_position), 20)
            probs = [r.probability for r in ranked]
            assert probs == sorted(probs, reverse=True)

    @pytest.mark.parametrize("k", [0, 1, 5, 20, 100])
    def test_truncation(self, start_position, rules, k):
        ranked = decode_top_moves(random_logits(), start_position, rules.legal_moves(start_position), k)
        assert len(ranked) == min(k, 20)

    def test_uniform_ties_broken_by_index(self, start_position, rules):
        ranked = decode_top_moves(uniform_logits(), start_position, rules.legal_moves(start_position), 20)
        indices = [r.index for r in ranked]
        assert indices == sorted(indices)
        assert all(r.probability == pytest.approx(1.0 / POLICY_SIZE) for r in ranked)

    def test_probabilities_not_renormalised(self, start_position, rules):
        ranked = decode_top_moves(uniform_logits(), start_position, rules.legal_moves(start_position), 20)
        assert sum(r.probability for r in ranked) == pytest.approx(20.0 / POLICY_SIZE)

    def test_boosted_move_ranks_first_white(self, start_position, rules):
        logits = uniform_logits()
        logits[encode_move(chess.Move.from_uci("e2e4"), chess.WHITE)] = 10.0
        ranked = decode_top_moves(logits, start_position, rules.legal_moves(start_position), 3)
        assert ranked[0].uci == "e2e4"

    def test_boosted_move_ranks_first_black(self, black_position, rules):
        """The logit for canonical d2d4 belongs to Black's e7e5."""
        logits = uniform_logits()
        logits[encode_move(chess.Move.from_uci("d2d4"), chess.WHITE)] = 10.0
        ranked = decode_top_moves(logits, black_position, rules.legal_moves(black_position), 3)
        assert ranked[0].uci == "e7e5"

    def test_single_legal_move(self, black_position):
        only = chess.Move.from_uci("g8f6")
        rules = ScriptedRules([only])
        ranked = decode_top_moves(uniform_logits(), black_position, rules.legal_moves(black_position), 5)
        assert len(ranked) == 1
        assert ranked[0].move == only
        assert ranked[0].probability == max(r.probability for r in ranked)

    def test_empty_legal_moves(self, start_position):
        assert decode_top_moves(uniform_logits(), start_position, [], 5) == []

    def test_negative_k_rejected(self, start_position, rules):
        with pytest.raises(ValueError):
            decode_top_moves(uniform_logits(), start_position, rules.legal_moves(start_position), -1)

    @pytest.mark.parametrize("size", [0, POLICY_SIZE - 1, POLICY_SIZE + 1, 4096])
    def test_size_mismatch_fails_fast(self, start_position, rules, size):
        with pytest.raises(PolicySizeMismatchError) as excinfo:
            decode_top_moves(np.zeros(size), start_position, rules.legal_moves(start_position), 5)
        assert excinfo.value.expected == POLICY_SIZE
        assert excinfo.value.actual == size
        assert isinstance(excinfo.value, ValueError)

    def test_multi_row_policy_rejected(self, start_position, rules):
        """Two rows of 929 must not be read as one 1858-entry vector."""
        with pytest.raises(PolicySizeMismatchError) as excinfo:
            decode_top_moves(np.zeros((2, POLICY_SIZE // 2)), start_position, rules.legal_moves(start_position), 5)
        assert excinfo.value.shape == (2, POLICY_SIZE // 2)

    def test_batch_of_one_accepted(self, start_position, rules):
        logits = random_logits().reshape(1, POLICY_SIZE)
        ranked = decode_top_moves(logits, start_position, rules.legal_moves(start_position), 5)
        expected = decode_top_moves(random_logits(), start_position, rules.legal_moves(start_position), 5)
        assert [r.move for r in ranked] == [r.move for r in expected]

    def test_accepts_torch_logits(self, start_position, rules):
        logits = torch.from_numpy(random_logits())
        ranked = decode_top_moves(logits, start_position, rules.legal_moves(start_position), 5)
        expected = decode_top_moves(random_logits(), start_position, rules.legal_moves(start_position), 5)
        assert [r.move for r in ranked] == [r.move for r in expected]

    def test_unresolved_move_dropped_and_logged(self, start_position, caplog):
        bogus = chess.Move.from_uci("a1h2")
        good = chess.Move.from_uci("e2e4")
        rules = ScriptedRules([bogus, good])
        with caplog.at_level(logging.WARNING, logger="encoding.policy"):
            ranked = decode_top_moves(uniform_logits(), start_position, rules.legal_moves(start_position), 5)
        assert [r.move for r in ranked] == [good]
        assert "a1h2" in caplog.text


class TestPromotions:
    """Queen promotions and underpromotions for both colors."""

    def test_white_promotions(self, rules):
        position = rules.parse("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        legal = rules.legal_moves(position)
        probs = policy_distribution(random_logits(), position, legal)

        assert len(probs) == len(legal)
        for uci in ("e7e8q", "e7e8r", "e7e8b", "e7e8n"):
            assert chess.Move.from_uci(uci) in probs

        full = softmax(random_logits())
        queen_idx = encode_move(chess.Move.from_uci("e7e8"), chess.WHITE)
        assert probs[chess.Move.from_uci("e7e8q")] == pytest.approx(full[queen_idx])

    def test_black_promotions(self, rules):
        position = rules.parse("4k3/8/8/8/8/8/4p3/K7 b - - 0 1")
        legal = rules.legal_moves(position)
        ranked = decode_top_moves(uniform_logits(), position, legal, 100)

        assert len(ranked) == len(legal)
        ucis = {r.uci for r in ranked}
        assert {"e2e1q", "e2e1r", "e2e1b", "e2e1n"} <= ucis

    def test_underpromotion_uses_own_index(self, rules):
        position = rules.parse("4k3/8/8/8/8/8/4p3/K7 b - - 0 1")
        logits = uniform_logits()
        logits[encode_move(chess.Move.from_uci("e2e1n"), chess.BLACK)] = 8.0
        ranked = decode_top_moves(logits, position, rules.legal_moves(position), 1)
        assert ranked[0].uci == "e2e1n"


class TestPolicyDistribution:

    def test_covers_all_legal_moves(self, start_position, rules):
        legal = rules.legal_moves(start_position)
        probs = policy_distribution(uniform_logits(), start_position, legal)
        assert set(probs) == set(legal)
        assert sum(probs.values()) == pytest.approx(20.0 / POLICY_SIZE)

    def test_size_mismatch(self, start_position):
        with pytest.raises(PolicySizeMismatchError):
            policy_distribution(np.zeros(10), start_position, [])

    def test_batched_policy_rejected(self, start_position):
        with pytest.raises(PolicySizeMismatchError):
            policy_distribution(np.zeros((2, POLICY_SIZE)), start_position, [])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
