"""
Tests for the majority-zero guard
"""
from fractions import Fraction

from treasury.domain.threshold import is_amount_admissible, zero_vote_share


class TestZeroVoteShare:
    def test_empty(self):
        assert zero_vote_share([]) == 0

    def test_exact_fraction(self):
        assert zero_vote_share([0, 0, 5]) == Fraction(2, 3)


class TestIsAmountAdmissible:
    def test_first_positive_vote_allowed(self):
        assert is_amount_admissible([], 5) is True

    def test_first_vote_must_be_positive(self):
        assert is_amount_admissible([], 0) is False

    def test_majority_zero_rejects(self):
        """[0, 0, 0, 5]: 75% zeros"""
        assert is_amount_admissible([0, 0, 0, 5], 100) is False

    def test_exactly_half_zero_allows(self):
        assert is_amount_admissible([0, 5], 100) is True
        assert is_amount_admissible([0, 0, 5, 7], 1) is True

    def test_just_over_half_rejects(self):
        assert is_amount_admissible([0, 0, 5], 1) is False

    def test_all_zero_rejects(self):
        assert is_amount_admissible([0], 1) is False

    def test_no_zeros_allows(self):
        assert is_amount_admissible([1, 2, 3], 10**12) is True
