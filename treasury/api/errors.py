"""
Use-case errors -> HTTP responses
"""
from fastapi import HTTPException

from treasury.application.errors import (
    VotingError, NotFoundError, ForbiddenError, InvalidVoteError,
    UpstreamFailureError, InvalidSentimentError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (InvalidVoteError, 400),
    (InvalidSentimentError, 400),
    (UpstreamFailureError, 502),
)


def to_http_exception(exc: VotingError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
