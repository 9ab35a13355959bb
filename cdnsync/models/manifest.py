"""
Sync manifest model
"""
from typing import Iterator, List

from .asset import Asset


class SyncManifest:
    """
    The assets that must be uploaded in a given run.

    Computed fresh every run and discarded afterwards. Only ever lists
    uploads; deletions are not representable.
    """

    def __init__(self, entries: List[Asset], scanned: int = 0, new_keys=None):
        """
        Args:
            entries: Assets to upload, ordered by key
            scanned: Number of local assets considered
            new_keys: Keys with no remote counterpart (the rest are changed)
        """
        self.entries = list(entries)
        self.scanned = scanned
        self.new_keys = set(new_keys or ())

    @property
    def keys(self) -> List[str]:
        return [asset.key for asset in self.entries]

    @property
    def skipped(self) -> int:
        """Number of local assets already up to date remotely."""
        return self.scanned - len(self.entries)

    @property
    def changed_keys(self) -> List[str]:
        return [key for key in self.keys if key not in self.new_keys]

    @property
    def total_bytes(self) -> int:
        return sum(asset.size for asset in self.entries)

    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self):
        return len(self.entries)

    def __iter__(self) -> Iterator[Asset]:
        return iter(self.entries)

    def __contains__(self, key):
        return key in self.keys

    def to_dict(self):
        """Serialize to dictionary"""
        return {
            "scanned": self.scanned,
            "skipped": self.skipped,
            "entries": [
                dict(asset.to_dict(), status="new" if asset.key in self.new_keys else "changed")
                for asset in self.entries
            ],
        }
