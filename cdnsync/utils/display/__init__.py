"""Display sub-package: banners, manifests and summaries."""
from .display_utils import (
    format_bytes,
    print_banner,
    print_manifest,
    print_sync_summary,
    print_target,
)

__all__ = [
    'format_bytes',
    'print_banner',
    'print_manifest',
    'print_sync_summary',
    'print_target',
]
