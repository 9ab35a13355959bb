"""
Asset and remote object models.

An :class:`Asset` is one file produced by the build stage; a
:class:`RemoteObject` is the store's current record for a key.
"""
import re

_MD5_HEX = re.compile(r"[0-9a-f]{32}")


class Asset:
    """
    A single built file, identified by its POSIX path relative to the
    build output directory.
    """

    def __init__(self, key, path, hash, size, content_type=None):
        """
        Initialize an Asset.

        Args:
            key: Relative POSIX path (object key without environment prefix)
            path: Absolute local file path
            hash: Hex MD5 digest of the file content
            size: Size in bytes
            content_type: MIME type guessed from the extension (optional)
        """
        self.key = key
        self.path = path
        self.hash = hash
        self.size = size
        self.content_type = content_type

    def to_dict(self):
        """Serialize to dictionary"""
        data = {
            "key": self.key,
            "path": self.path,
            "hash": self.hash,
            "size": self.size,
        }
        if self.content_type:
            data["content_type"] = self.content_type
        return data

    @classmethod
    def from_dict(cls, data):
        """Deserialize from dictionary"""
        return cls(
            key=data.get("key"),
            path=data.get("path", ""),
            hash=data.get("hash", ""),
            size=data.get("size", 0),
            content_type=data.get("content_type"),
        )

    def __eq__(self, other):
        if not isinstance(other, Asset):
            return NotImplemented
        return self.key == other.key and self.hash == other.hash

    def __hash__(self):
        return hash((self.key, self.hash))

    def __repr__(self):
        return f"Asset(key={self.key!r}, hash={self.hash!r}, size={self.size})"


class RemoteObject:
    """
    The object store's record for a key under the environment prefix.
    """

    def __init__(self, key, etag, size=0, last_modified=None):
        """
        Initialize a RemoteObject.

        Args:
            key: Object key relative to the environment prefix
            etag: ETag as returned by the store (quotes are stripped)
            size: Size in bytes
            last_modified: Last-modified timestamp (informational only)
        """
        self.key = key
        self.etag = (etag or "").strip('"')
        self.size = size
        self.last_modified = last_modified

    @property
    def hash(self):
        """Content hash comparable with :attr:`Asset.hash`.

        Single-part uploads carry the MD5 as ETag. Multipart and encrypted
        ETags never match; the planner then checks the ``md5`` metadata.
        """
        return self.etag.lower()

    @property
    def is_multipart(self):
        return "-" in self.etag

    @property
    def has_md5_etag(self):
        """True if the ETag is a plain hex MD5 (single-part, no SSE-KMS/SSE-C)."""
        return bool(_MD5_HEX.fullmatch(self.hash))

    @classmethod
    def from_listing(cls, entry, prefix=""):
        """Build from a ``list_objects_v2`` ``Contents`` entry.

        Args:
            entry: Dict with ``Key``, ``ETag``, ``Size``, ``LastModified``
            prefix: Environment prefix to strip from the key

        Returns:
            RemoteObject with a prefix-relative key
        """
        key = entry["Key"]
        if prefix and key.startswith(prefix + "/"):
            key = key[len(prefix) + 1:]
        return cls(
            key=key,
            etag=entry.get("ETag", ""),
            size=entry.get("Size", 0),
            last_modified=entry.get("LastModified"),
        )

    def __repr__(self):
        return f"RemoteObject(key={self.key!r}, etag={self.etag!r}, size={self.size})"
