"""
Sync result model: per-object outcomes of an executor run.
"""
import threading
from typing import Dict, List


class UploadFailure:
    """A key that could not be uploaded, with the reason and attempt count."""

    def __init__(self, key, reason, attempts=1, transient=False):
        self.key = key
        self.reason = reason
        self.attempts = attempts
        self.transient = transient

    def to_dict(self):
        return {
            "key": self.key,
            "reason": self.reason,
            "attempts": self.attempts,
            "transient": self.transient,
        }

    def __repr__(self):
        return f"UploadFailure(key={self.key!r}, reason={self.reason!r}, attempts={self.attempts})"


class SyncResult:
    """
    Aggregate outcome of uploading a manifest.

    Workers record into it concurrently; the recording methods take an
    internal lock. Read the result only after all workers have finished.
    """

    def __init__(self):
        self.succeeded: List[str] = []
        self.failed: List[UploadFailure] = []
        self.skipped: List[str] = []
        self.attempts: Dict[str, int] = {}
        self.cancelled = False
        self._lock = threading.Lock()

    def record_success(self, key, attempts=1):
        with self._lock:
            self.succeeded.append(key)
            self.attempts[key] = attempts

    def record_failure(self, key, reason, attempts=1, transient=False):
        with self._lock:
            self.failed.append(UploadFailure(key, reason, attempts, transient))
            self.attempts[key] = attempts

    def record_skipped(self, key):
        with self._lock:
            self.skipped.append(key)

    @property
    def failed_keys(self) -> List[str]:
        return [failure.key for failure in self.failed]

    @property
    def success(self) -> bool:
        """True only if nothing failed and the run was not cancelled."""
        return not self.failed and not self.cancelled and not self.skipped

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.skipped)

    def sort(self):
        """Order all key lists for stable reporting."""
        with self._lock:
            self.succeeded.sort()
            self.skipped.sort()
            self.failed.sort(key=lambda f: f.key)

    def to_dict(self):
        """Serialize to dictionary"""
        return {
            "success": self.success,
            "cancelled": self.cancelled,
            "succeeded": list(self.succeeded),
            "failed": [failure.to_dict() for failure in self.failed],
            "skipped": list(self.skipped),
        }
