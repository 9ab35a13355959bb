"""
File system utilities for walking and hashing build output
"""
import fnmatch
import hashlib
import mimetypes
import os
from pathlib import Path
from typing import Iterable, List

from ..models.asset import Asset
from .logger import get_logger

log = get_logger(__name__)

_HASH_CHUNK_SIZE = 8 * 1024 * 1024


def compute_md5(file_path, chunk_size=_HASH_CHUNK_SIZE):
    """
    Hex MD5 digest of a file, read in chunks.

    MD5 matches the ETag S3-compatible stores return for single-part
    uploads, so local and remote hashes compare directly.
    """
    h = hashlib.md5()
    with open(file_path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            h.update(chunk)
    return h.hexdigest()


def guess_content_type(file_path):
    content_type, _ = mimetypes.guess_type(str(file_path))
    return content_type or "application/octet-stream"


def is_excluded(key: str, patterns: Iterable[str]) -> bool:
    """
    Check a POSIX key against exclude globs.

    Args:
        key: Relative POSIX path
        patterns: fnmatch-style patterns (e.g. ``.git/*``)

    Returns:
        True if any pattern matches
    """
    return any(fnmatch.fnmatch(key, pattern) for pattern in patterns or ())


def collect_assets(output_dir, exclude=None) -> List[Asset]:
    """
    Walk the build output and describe every file as an :class:`Asset`.

    Args:
        output_dir: Build output directory
        exclude: Exclude glob patterns matched against relative keys

    Returns:
        Assets sorted by key

    Raises:
        FileNotFoundError: If ``output_dir`` does not exist
    """
    base = Path(output_dir)
    if not base.is_dir():
        raise FileNotFoundError(f"Build output directory not found: {base}")

    assets = []
    excluded = 0
    for root, dirs, files in os.walk(base):
        dirs.sort()
        for filename in sorted(files):
            local_path = Path(root) / filename
            key = local_path.relative_to(base).as_posix()

            if is_excluded(key, exclude):
                excluded += 1
                continue

            assets.append(Asset(
                key=key,
                path=str(local_path.resolve()),
                hash=compute_md5(local_path),
                size=local_path.stat().st_size,
                content_type=guess_content_type(local_path),
            ))

    if excluded:
        log.debug("Excluded %d file(s) from %s", excluded, base)

    assets.sort(key=lambda a: a.key)
    return assets


def count_files(directory) -> int:
    """Number of regular files under ``directory`` (0 if missing)."""
    if not os.path.isdir(directory):
        return 0
    return sum(len(files) for _, _, files in os.walk(directory))
