"""
Error taxonomy shared by use cases; routers map these to HTTP status codes.
"""


class VotingError(Exception):
    """Base class for expected, caller-facing failures."""
    pass


class NotFoundError(VotingError, LookupError):
    """Referenced item, period or statistics row does not exist."""
    pass


class ForbiddenError(VotingError):
    """Caller is not an eligible delegate."""
    pass


class InvalidVoteError(VotingError, ValueError):
    """Vote rejected by validation or the threshold guard."""

    def __init__(self, reason: str, budget_item_id: int | None = None):
        super().__init__(reason)
        self.reason = reason
        self.budget_item_id = budget_item_id


class UpstreamFailureError(VotingError):
    """Transaction submission failed; nothing was written."""
    pass


class InvalidSentimentError(VotingError, ValueError):
    pass
