"""AWS utilities for S3-compatible client creation.

Builds boto3 clients from an explicit :class:`SyncConfig`: credentials,
endpoint, region and network timeouts all come from the config value,
never from ad hoc environment reads.
"""
from typing import Optional

from colorama import Fore, Style


def _import_boto3():
    """Lazily import boto3, raising a helpful error if not installed."""
    try:
        import boto3
        return boto3
    except ImportError:
        print(f"{Fore.RED}[ERROR] boto3 is required for sync but is not installed.{Style.RESET_ALL}")
        print(f"{Fore.YELLOW}Install it with: pip install cdnsync{Style.RESET_ALL}")
        raise


def build_client_config(sync_config):
    """botocore client config with timeouts and botocore retries disabled.

    Listing, metadata reads and uploads all retry through the tenacity
    :class:`~cdnsync.services.aws.retry.RetryPolicy`; one botocore attempt
    per call keeps the total attempt count equal to ``max_attempts``.
    """
    from botocore.config import Config

    return Config(
        region_name=sync_config.target.region,
        connect_timeout=sync_config.connect_timeout,
        read_timeout=sync_config.read_timeout,
        retries={"max_attempts": 1, "mode": "standard"},
        max_pool_connections=max(10, sync_config.workers),
    )


def create_s3_client(sync_config, session=None):
    """Create an S3 client for the active environment target.

    Args:
        sync_config: :class:`~cdnsync.utils.config_loader.SyncConfig`
        session: Optional pre-built ``boto3.Session`` (for tests)

    Returns:
        boto3 S3 client

    Example:
        >>> client = create_s3_client(sync_config)
        >>> client.list_objects_v2(Bucket=sync_config.target.bucket)
    """
    if session is None:
        boto3 = _import_boto3()
        session = boto3.Session(
            aws_access_key_id=sync_config.access_key,
            aws_secret_access_key=sync_config.secret_key,
            region_name=sync_config.target.region,
        )

    return session.client(
        's3',
        endpoint_url=sync_config.target.endpoint_url,
        config=build_client_config(sync_config),
    )


def describe_endpoint(endpoint_url: Optional[str]) -> str:
    """Short endpoint label for logs (``AWS`` when using the default)."""
    if not endpoint_url:
        return "AWS S3 (default endpoint)"
    return endpoint_url.replace("https://", "").replace("http://", "")
