"""
Environment target model
"""

# Valid deployment environments, in promotion order.
ENVIRONMENT_NAMES = ("dev", "tst", "qas", "stg", "prd")


class EnvironmentTarget:
    """
    A named deployment destination mapping to a bucket/prefix on an
    S3-compatible endpoint.
    """

    def __init__(self, name, bucket, prefix="", endpoint_url=None, region=None,
                 sync_enabled=True, acl=None):
        """
        Initialize an EnvironmentTarget.

        Args:
            name: Environment name (dev, tst, qas, stg, prd)
            bucket: Destination bucket
            prefix: Key prefix inside the bucket ("" for the bucket root)
            endpoint_url: S3 endpoint (e.g. https://s3.us-central-1.wasabisys.com)
            region: Region name passed to the client
            sync_enabled: If False, the pipeline builds but never touches the store
            acl: Canned ACL applied to uploads (e.g. ``public-read``)
        """
        self.name = name
        self.bucket = bucket
        self.prefix = normalize_prefix(prefix)
        self.endpoint_url = endpoint_url or None
        self.region = region or None
        self.sync_enabled = sync_enabled
        self.acl = acl or None

    def object_key(self, key):
        """Full store key for an asset key."""
        if not self.prefix:
            return key
        return f"{self.prefix}/{key}"

    @property
    def destination(self):
        """Human-readable ``s3://bucket/prefix/`` location."""
        if self.prefix:
            return f"s3://{self.bucket}/{self.prefix}/"
        return f"s3://{self.bucket}/"

    def to_dict(self):
        """Serialize to dictionary"""
        return {
            "bucket": self.bucket,
            "prefix": self.prefix,
            "endpoint_url": self.endpoint_url or "",
            "region": self.region or "",
            "sync_enabled": self.sync_enabled,
            "acl": self.acl or "",
        }

    @classmethod
    def from_dict(cls, name, data):
        """Deserialize from a config ``environments`` entry"""
        return cls(
            name=name,
            bucket=data.get("bucket", ""),
            prefix=data.get("prefix", ""),
            endpoint_url=data.get("endpoint_url"),
            region=data.get("region"),
            sync_enabled=data.get("sync_enabled", True),
            acl=data.get("acl"),
        )

    def __repr__(self):
        return f"EnvironmentTarget(name={self.name!r}, destination={self.destination!r})"


def normalize_prefix(prefix):
    """Collapse slashes and strip leading/trailing separators."""
    if not prefix:
        return ""
    return "/".join(seg for seg in str(prefix).replace("\\", "/").split("/") if seg)
