"""
Bounded retry for store calls, built on tenacity.

Only errors flagged ``transient`` (``UploadError``, ``ListingError``) are
retried. A set cancel event stops further attempts and the last error
is re-raised.
"""
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    stop_when_event_set,
    wait_exponential,
)

from ...utils.logger import get_logger

log = get_logger(__name__)


def is_transient(exc) -> bool:
    return bool(getattr(exc, "transient", False))


class RetryPolicy:
    """Bounded exponential backoff.

    Args:
        max_attempts: Total attempts per call, including the first
        base_delay: Delay before the second attempt, in seconds
        max_delay: Upper bound for any single delay
    """

    def __init__(self, max_attempts=3, base_delay=0.5, max_delay=8.0):
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay = float(base_delay)
        self.max_delay = float(max_delay)

    def delay_for(self, attempt):
        """Delay after failed attempt number ``attempt`` (1-based)."""
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))

    def retrying(self, label, sleep=None, cancel_event=None) -> Retrying:
        """Build a tenacity ``Retrying`` for one logical call.

        Args:
            label: Name of the call, for the retry warning
            sleep: Backoff sleep function (tenacity's default if None)
            cancel_event: ``threading.Event`` that stops further attempts
        """
        stop = stop_after_attempt(self.max_attempts)
        if cancel_event is not None:
            stop = stop | stop_when_event_set(cancel_event)

        kwargs = {}
        if sleep is not None:
            kwargs["sleep"] = sleep

        return Retrying(
            stop=stop,
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay),
            retry=retry_if_exception(is_transient),
            before_sleep=self._log_retry(label),
            reraise=True,
            **kwargs,
        )

    def _log_retry(self, label):
        def before_sleep(retry_state):
            log.warning(
                "Transient failure for %s (attempt %d/%d): %s; retrying in %.1fs",
                label, retry_state.attempt_number, self.max_attempts,
                retry_state.outcome.exception(), retry_state.next_action.sleep,
            )
        return before_sleep

    def __repr__(self):
        return (f"RetryPolicy(max_attempts={self.max_attempts}, "
                f"base_delay={self.base_delay}, max_delay={self.max_delay})")
