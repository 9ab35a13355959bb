"""
Low-level S3 primitive operations.

Provides list, put and head against one environment target. There is
no delete operation.
"""
from typing import Dict, Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from ...exceptions import ListingError, UploadError
from ...models.asset import RemoteObject
from ...utils.logger import get_logger

log = get_logger(__name__)

# Error codes that are safe to retry regardless of HTTP status.
TRANSIENT_ERROR_CODES = frozenset({
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "TooManyRequests",
    "RequestTimeout",
    "RequestTimeTooSkewed",
    "InternalError",
    "ServiceUnavailable",
})


def classify_error(exc):
    """Decide whether a store error is transient.

    Args:
        exc: Exception raised by botocore or while reading the local file

    Returns:
        Tuple of (transient, reason)
    """
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "")
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0) or 0
        message = error.get("Message", "") or str(exc)
        reason = f"{code or 'HTTP ' + str(status)}: {message}"
        transient = code in TRANSIENT_ERROR_CODES or status >= 500 or status == 429
        return transient, reason

    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return False, f"credentials: {exc}"

    # Timeouts (ConnectTimeoutError, ReadTimeoutError) and dropped
    # connections are subclasses of these two.
    if isinstance(exc, (BotoConnectionError, HTTPClientError)):
        return True, f"{type(exc).__name__}: {exc}"

    if isinstance(exc, BotoCoreError):
        return False, f"{type(exc).__name__}: {exc}"

    if isinstance(exc, OSError):
        return False, f"local read failed: {exc}"

    return False, f"{type(exc).__name__}: {exc}"


class S3Operations:
    """Primitive S3 operations scoped to an environment target.

    Args:
        s3_client: boto3 S3 client (or any object with the same methods)
        target: :class:`~cdnsync.models.environment.EnvironmentTarget`
    """

    def __init__(self, s3_client, target):
        self.s3_client = s3_client
        self.target = target

    @property
    def bucket_name(self):
        return self.target.bucket

    def list_remote_objects(self) -> Dict[str, RemoteObject]:
        """List every object under the target prefix.

        Returns:
            Mapping of prefix-relative key to RemoteObject

        Raises:
            ListingError: If any page of the listing fails
        """
        list_prefix = f"{self.target.prefix}/" if self.target.prefix else ""
        remote = {}

        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            pages = paginator.paginate(Bucket=self.bucket_name, Prefix=list_prefix)

            for page in pages:
                for entry in page.get('Contents', []):
                    # Skip directory markers
                    if entry['Key'].endswith('/'):
                        continue
                    obj = RemoteObject.from_listing(entry, self.target.prefix)
                    remote[obj.key] = obj
        except (BotoCoreError, ClientError) as e:
            transient, reason = classify_error(e)
            raise ListingError(
                f"Cannot list {self.target.destination}: {reason}", transient=transient
            ) from e

        log.debug("Listed %d remote object(s) under %s", len(remote), self.target.destination)
        return remote

    def put_asset(self, asset):
        """Upload one asset with a single-part PUT.

        The stored ETag equals the content MD5 afterwards.

        Args:
            asset: :class:`~cdnsync.models.asset.Asset` to upload

        Raises:
            UploadError: With ``transient`` set from :func:`classify_error`
        """
        extra_args = {
            "ContentType": asset.content_type or "application/octet-stream",
            "Metadata": {"md5": asset.hash},
        }
        if self.target.acl:
            extra_args["ACL"] = self.target.acl

        object_key = self.target.object_key(asset.key)

        try:
            with open(asset.path, 'rb') as body:
                self.s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=object_key,
                    Body=body,
                    **extra_args,
                )
        except (BotoCoreError, ClientError, OSError) as e:
            transient, reason = classify_error(e)
            raise UploadError(asset.key, reason, transient=transient) from e

        log.debug("Uploaded %s -> s3://%s/%s", asset.key, self.bucket_name, object_key)

    def head_asset(self, key) -> Optional[dict]:
        """Fetch object metadata for an asset key.

        Returns:
            ``head_object`` response, or None if the object does not exist

        Raises:
            ListingError: For any other failure, with ``transient`` set
        """
        try:
            return self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=self.target.object_key(key),
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
            if code in ("404", "NoSuchKey", "NotFound") or status == 404:
                return None
            transient, reason = classify_error(e)
            raise ListingError(f"Cannot read metadata of {key}: {reason}", transient=transient) from e
        except BotoCoreError as e:
            transient, reason = classify_error(e)
            raise ListingError(f"Cannot read metadata of {key}: {reason}", transient=transient) from e

    def stored_hash(self, key) -> Optional[str]:
        """MD5 recorded in the object's ``md5`` metadata at upload time.

        Returns:
            Lowercase hex digest, or None if the object or the metadata is missing
        """
        response = self.head_asset(key)
        if not response:
            return None
        value = (response.get("Metadata") or {}).get("md5")
        return value.lower() if value else None
