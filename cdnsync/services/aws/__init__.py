"""
S3 synchronization service package.

- :mod:`operations`: primitive list/put/head helpers (no delete)
- :mod:`planner`: upload manifest computation
- :mod:`executor`: bounded-retry concurrent uploads
- :mod:`retry`: tenacity retry policy shared by listing and uploads
"""
from .executor import SyncExecutor
from .operations import S3Operations, classify_error
from .planner import SyncPlanner, compute_manifest
from .retry import RetryPolicy

__all__ = [
    'RetryPolicy',
    'SyncExecutor',
    'S3Operations',
    'classify_error',
    'SyncPlanner',
    'compute_manifest',
]
