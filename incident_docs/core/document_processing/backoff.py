"""
Retry policy: which failures are retried and when.

Delay after the n-th failed attempt is base_delay * 2^(n-1), uncapped.

Dependencies: incident_docs.boundary.db.models
System role: Exponential backoff and retry suppression
"""

from datetime import datetime, timedelta

from incident_docs.boundary.db.models.document_model import ErrorCode

# Failures that will not change on a later attempt.
NON_RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.AUTH_ERROR,
    ErrorCode.NOT_FOUND,
    ErrorCode.FILE_TOO_LARGE,
    ErrorCode.INVALID_URL,
    ErrorCode.MAX_RETRIES_EXCEEDED,
})


def is_retryable(error_code: ErrorCode) -> bool:
    return error_code not in NON_RETRYABLE_CODES


def backoff_delay(retry_count: int, base_delay_seconds: float) -> timedelta:
    """
    Delay before the next attempt.

    Args:
        retry_count: Failed attempts so far, already including the one just recorded
        base_delay_seconds: Delay after the first failure

    Returns:
        timedelta: base_delay * 2^(retry_count - 1)
    """
    exponent = max(retry_count - 1, 0)
    return timedelta(seconds=base_delay_seconds * (2 ** exponent))


def schedule_next_retry(
    error_code: ErrorCode,
    retry_count: int,
    max_retries: int,
    base_delay_seconds: float,
    now: datetime,
) -> datetime | None:
    """
    Compute next_retry_at for a failed attempt.

    Returns:
        datetime | None: None when the code is never retried or the budget
        is spent, otherwise now + backoff_delay(retry_count)
    """
    if not is_retryable(error_code) or retry_count >= max_retries:
        return None
    return now + backoff_delay(retry_count, base_delay_seconds)
