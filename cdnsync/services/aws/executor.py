"""
Sync executor: uploads a manifest with bounded retry on a worker pool.

Per-object failures are collected into a :class:`SyncResult`, never
raised, so one bad object cannot block the rest of the batch.
"""
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from ...exceptions import UploadError
from ...models.sync_result import SyncResult
from ...utils.logger import get_logger
from .operations import S3Operations
from .retry import RetryPolicy

log = get_logger(__name__)

__all__ = ["RetryPolicy", "SyncExecutor"]


class SyncExecutor:
    """Uploads every manifest entry to the target, retrying transient failures.

    Args:
        s3_client: boto3 S3 client
        retry_policy: :class:`RetryPolicy` (defaults to 3 attempts from 0.5s)
        workers: Maximum concurrent uploads
        cancel_event: ``threading.Event``; once set, no new uploads start
        sleep: Backoff sleep function; defaults to waiting on ``cancel_event``
            so a cancellation interrupts the backoff
    """

    def __init__(self, s3_client, retry_policy=None, workers=8, cancel_event=None, sleep=None):
        self.s3_client = s3_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.workers = max(1, int(workers))
        self.cancel_event = cancel_event or threading.Event()
        self._sleep = sleep or self.cancel_event.wait

    def cancel(self):
        """Stop dispatching new uploads; in-flight uploads finish."""
        self.cancel_event.set()

    def execute(self, manifest, target) -> SyncResult:
        """Upload the manifest to ``target``.

        Args:
            manifest: :class:`~cdnsync.models.manifest.SyncManifest`
            target: :class:`~cdnsync.models.environment.EnvironmentTarget`

        Returns:
            SyncResult, complete only after every worker has finished
        """
        result = SyncResult()
        if manifest.is_empty():
            return result

        operations = S3Operations(self.s3_client, target)
        pool_size = min(self.workers, len(manifest))
        log.info("Uploading %d object(s) to %s with %d worker(s)",
                 len(manifest), target.destination, pool_size)

        with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="cdnsync-upload") as pool:
            futures = {
                pool.submit(self._upload_one, operations, asset, result): asset
                for asset in manifest
            }
            for future in as_completed(futures):
                asset = futures[future]
                try:
                    future.result()
                except Exception as e:
                    log.error("Unexpected error uploading %s: %s", asset.key, e)
                    log.debug("Upload traceback:", exc_info=True)
                    result.record_failure(asset.key, f"unexpected error: {e}")

        result.cancelled = self.cancel_event.is_set() and bool(result.skipped or result.failed)
        result.sort()
        return result

    def _upload_one(self, operations, asset, result):
        """Upload a single asset with retry, recording the outcome."""
        if self.cancel_event.is_set():
            result.record_skipped(asset.key)
            return

        policy = self.retry_policy
        attempts = 0
        last_error = None

        def put():
            nonlocal attempts, last_error
            # A cancel that arrives during backoff ends the retry without a new attempt
            if last_error is not None and self.cancel_event.is_set():
                raise last_error
            attempts += 1
            try:
                operations.put_asset(asset)
            except UploadError as e:
                last_error = e
                raise

        retrying = policy.retrying(asset.key, sleep=self._sleep, cancel_event=self.cancel_event)
        try:
            retrying(put)
        except UploadError as e:
            reason = e.reason
            if e.transient and attempts < policy.max_attempts and self.cancel_event.is_set():
                reason = f"cancelled before retry ({reason})"
            log.error("Upload failed for %s after %d attempt(s): %s", asset.key, attempts, reason)
            result.record_failure(asset.key, reason, attempts, transient=e.transient)
            return

        result.record_success(asset.key, attempts)
