"""
Data models for cdnsync
"""

from .asset import Asset, RemoteObject
from .environment import EnvironmentTarget, ENVIRONMENT_NAMES
from .manifest import SyncManifest
from .sync_result import SyncResult, UploadFailure

__all__ = [
    'Asset',
    'RemoteObject',
    'EnvironmentTarget',
    'ENVIRONMENT_NAMES',
    'SyncManifest',
    'SyncResult',
    'UploadFailure',
]
