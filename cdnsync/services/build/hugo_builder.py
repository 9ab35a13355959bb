"""
Hugo static-site builder
"""
import os
import shutil
import subprocess
from typing import List, Optional

from ...exceptions import BuildError
from ...utils.logger import get_logger
from .base import SiteBuilder

log = get_logger(__name__)


class HugoBuilder(SiteBuilder):
    """Runs ``hugo`` against a content tree.

    Args:
        output_dir: Destination directory (``--destination``)
        binary: Hugo executable name or path
        extra_args: Additional arguments (default ``--minify``)
        timeout: Seconds before the build is killed
    """

    name = "hugo"

    def __init__(self, output_dir, binary="hugo", extra_args: Optional[List[str]] = None,
                 timeout=600):
        super().__init__(output_dir)
        self.binary = binary
        self.extra_args = list(extra_args) if extra_args is not None else ["--minify"]
        self.timeout = timeout

    def is_installed(self) -> bool:
        return shutil.which(self.binary) is not None

    def build_command(self, content_dir) -> List[str]:
        return [
            self.binary,
            "--source", str(content_dir),
            "--destination", os.path.abspath(self.output_dir),
            *self.extra_args,
        ]

    def build(self, content_dir) -> str:
        if not os.path.isdir(content_dir):
            raise BuildError(f"Content directory not found: {content_dir}")
        if not self.is_installed():
            raise BuildError(f"'{self.binary}' not found on PATH")

        cmd = self.build_command(content_dir)
        log.info("Building site: %s", " ".join(cmd))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise BuildError(f"hugo timed out after {self.timeout}s") from e
        except OSError as e:
            raise BuildError(f"Could not run hugo: {e}") from e

        if proc.stdout:
            log.debug("hugo output:\n%s", proc.stdout.rstrip())

        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout or "").strip()
            raise BuildError(f"hugo exited with code {proc.returncode}: {detail}")

        return self._verify_output()
