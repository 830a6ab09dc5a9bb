"""
Vote aggregation - robust consensus amount for a budget item

Consensus is the median of all votes; once an item has more than
TRIM_MIN_VOTES votes the lowest and highest 1% are dropped first so
that a coordinated block of extreme votes cannot drag the result.
Integer arithmetic throughout.
"""
from typing import Iterable, List, NamedTuple

from treasury.utils.money import scaled_percentage

# Trimming kicks in strictly above this many votes
TRIM_MIN_VOTES = 100
# floor(n * 0.01) votes are dropped from each end
TRIM_DIVISOR = 100


class Consensus(NamedTuple):
    consensus: int
    percentage_of_suggested: int


def trimmed_votes(votes: Iterable[int]) -> List[int]:
    """Sorted amounts with outliers removed (no-op for <= 100 votes)."""
    amounts = sorted(votes)
    n = len(amounts)
    if n > TRIM_MIN_VOTES:
        trim = n // TRIM_DIVISOR
        amounts = amounts[trim:n - trim]
    return amounts


def median_floor(sorted_amounts: List[int]) -> int:
    """Median of an ascending list; even length -> floor of the two middles' mean."""
    m = len(sorted_amounts)
    if m == 0:
        return 0
    mid = m // 2
    if m % 2 == 0:
        return (sorted_amounts[mid - 1] + sorted_amounts[mid]) // 2
    return sorted_amounts[mid]


def compute_consensus(votes: Iterable[int], suggested_amount: int) -> Consensus:
    """
    Consensus amount and funded-vs-suggested percentage (×10000).

    >>> compute_consensus([10, 20, 30], 20)
    Consensus(consensus=20, percentage_of_suggested=10000)
    >>> compute_consensus([], 20)
    Consensus(consensus=0, percentage_of_suggested=0)
    """
    amounts = trimmed_votes(votes)
    if not amounts:
        return Consensus(0, 0)

    consensus = median_floor(amounts)
    # May exceed 10000 when the item is funded above its suggestion
    percentage = scaled_percentage(consensus, suggested_amount)
    return Consensus(consensus, percentage)
