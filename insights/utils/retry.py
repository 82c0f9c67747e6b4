# ==============================================================================
# Retry Configuration
# ==============================================================================
"""
Shared retry configuration for Valkey access.

Provides the retry constants and a logging callback used with tenacity when
reading or writing snapshot history.

Standard retry: 5 attempts with exponential backoff capped at 8 seconds.
"""

import logging

from tenacity import RetryCallState

# ==============================================================================
# Retry Constants
# ==============================================================================

RETRY_ATTEMPTS = 5
RETRY_WAIT_MIN = 1  # seconds
RETRY_WAIT_MAX = 8  # seconds (cap for exponential backoff)

# Valkey retry configuration (used by redis-py client)
VALKEY_RETRIES = 5


# ==============================================================================
# Logging Callbacks
# ==============================================================================


def log_retry_attempt(logger: logging.Logger):
    """
    Create a callback that logs retry attempts.

    Args:
        logger: Logger instance to use for logging

    Returns:
        Callback function for tenacity's before_sleep parameter
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Retry attempt %d/%d after error: %s",
            retry_state.attempt_number,
            RETRY_ATTEMPTS,
            exception,
        )

    return _log_retry
