"""AWS utilities sub-package.

Contains S3-compatible client creation helpers.
"""
from .aws_utils import (
    build_client_config,
    create_s3_client,
    describe_endpoint,
)

__all__ = [
    'build_client_config',
    'create_s3_client',
    'describe_endpoint',
]
