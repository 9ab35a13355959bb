"""
Sync planner: decides which built assets must be uploaded.

The planner only ever proposes uploads. Keys that exist remotely but not
locally are never part of a manifest.
"""
from typing import Callable, Dict, Iterable, Mapping, Optional

from ...models.asset import Asset, RemoteObject
from ...models.manifest import SyncManifest
from ...utils.file_utils import collect_assets
from ...utils.logger import get_logger
from .retry import RetryPolicy

log = get_logger(__name__)


def compute_manifest(local_assets: Iterable[Asset],
                     remote_objects: Mapping[str, RemoteObject],
                     stored_hash: Optional[Callable[[str], Optional[str]]] = None) -> SyncManifest:
    """Compute the upload manifest.

    An asset is included iff no remote object has its key, or the remote
    hash differs from the asset hash. When the remote ETag is not a plain
    MD5 (multipart or encrypted objects), ``stored_hash`` is asked for
    the MD5 recorded at upload time and a match counts as up to date.

    Args:
        local_assets: Full local asset set
        remote_objects: Remote listing keyed by prefix-relative key
        stored_hash: Optional ``key -> md5 or None`` metadata lookup

    Returns:
        SyncManifest ordered by key
    """
    entries = []
    new_keys = set()
    scanned = 0

    for asset in sorted(local_assets, key=lambda a: a.key):
        scanned += 1
        local_hash = asset.hash.lower()
        remote = remote_objects.get(asset.key)
        if remote is None:
            entries.append(asset)
            new_keys.add(asset.key)
            continue
        if remote.hash == local_hash:
            continue

        if not remote.has_md5_etag and stored_hash is not None:
            if stored_hash(asset.key) == local_hash:
                log.debug("%s matches its md5 metadata; ETag %s is not an MD5",
                          asset.key, remote.etag)
                continue
            log.debug("%s has a non-MD5 ETag and no matching md5 metadata; re-uploading",
                      asset.key)
        entries.append(asset)

    return SyncManifest(entries, scanned=scanned, new_keys=new_keys)


class SyncPlanner:
    """Plans a sync of a build output directory against a target.

    Args:
        operations: :class:`~cdnsync.services.aws.operations.S3Operations`
        exclude: Glob patterns for files that are never published
        retry_policy: :class:`~cdnsync.services.aws.retry.RetryPolicy` for store reads
        sleep: Backoff sleep function (tenacity's default if None)
        cancel_event: ``threading.Event`` that stops further read retries
    """

    def __init__(self, operations, exclude=None, retry_policy=None, sleep=None, cancel_event=None):
        self.operations = operations
        self.exclude = list(exclude or [])
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self.cancel_event = cancel_event

    def _retrying(self, label):
        return self.retry_policy.retrying(label, sleep=self._sleep, cancel_event=self.cancel_event)

    def list_remote(self) -> Dict[str, RemoteObject]:
        """Remote listing under the retry policy.

        Raises:
            ListingError: On a permanent error or once the retry budget is spent
        """
        return self._retrying("remote listing")(self.operations.list_remote_objects)

    def stored_hash(self, key) -> Optional[str]:
        """``md5`` metadata of a remote object, under the retry policy."""
        return self._retrying(f"metadata of {key}")(self.operations.stored_hash, key)

    def plan(self, output_dir) -> SyncManifest:
        """Collect local assets, list the remote prefix and diff them.

        The remote listing is fetched before local hashing so a listing
        failure aborts before any further work.

        Raises:
            ListingError: If the remote listing fails; no manifest is produced
            FileNotFoundError: If the output directory is missing
        """
        remote = self.list_remote()
        local_assets = collect_assets(output_dir, self.exclude)

        manifest = compute_manifest(local_assets, remote, stored_hash=self.stored_hash)

        orphaned = len(set(remote) - {a.key for a in local_assets})
        log.info(
            "Planned %d upload(s): %d new, %d changed, %d up to date",
            len(manifest), len(manifest.new_keys), len(manifest.changed_keys), manifest.skipped,
        )
        if orphaned:
            log.info("Keeping %d remote object(s) with no local counterpart", orphaned)

        return manifest
