"""
Threshold guard - majority-zero veto

Once more than half of the existing votes on an item are zero ("do not
fund"), no positive amount is admissible. Zero votes are never checked.
"""
from fractions import Fraction
from typing import Sequence


def zero_vote_share(existing_votes: Sequence[int]) -> Fraction:
    """Share of zero votes, 0 for an empty set."""
    if not existing_votes:
        return Fraction(0)
    zeros = sum(1 for amount in existing_votes if amount == 0)
    return Fraction(zeros, len(existing_votes))


def is_amount_admissible(existing_votes: Sequence[int], proposed_amount: int) -> bool:
    """
    Is proposed_amount allowed given the votes already on the item?

    >>> is_amount_admissible([], 5)
    True
    >>> is_amount_admissible([0, 0, 0, 5], 100)
    False
    >>> is_amount_admissible([0, 5], 100)
    True
    """
    if not existing_votes:
        return proposed_amount > 0

    return zero_vote_share(existing_votes) <= Fraction(1, 2)
