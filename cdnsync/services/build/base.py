"""
Site builder interface.

The static-site generator is a black box whose only contract is: given a
content directory, produce an output directory of files.
"""
import os
from abc import ABC, abstractmethod

from ...exceptions import BuildError
from ...utils.file_utils import count_files


class SiteBuilder(ABC):
    """Abstract base class for static-site builders.

    Args:
        output_dir: Directory the build writes to
    """

    name = "builder"

    def __init__(self, output_dir):
        self.output_dir = str(output_dir)

    @abstractmethod
    def is_installed(self) -> bool:
        """Check if the generator is available.

        Returns:
            True if the build can be attempted
        """
        pass

    @abstractmethod
    def build(self, content_dir) -> str:
        """Build the site.

        Args:
            content_dir: Source content tree

        Returns:
            Path to the output directory

        Raises:
            BuildError: If the generator fails or produces nothing
        """
        pass

    def _verify_output(self):
        """Raise BuildError unless the output directory holds files."""
        if not os.path.isdir(self.output_dir):
            raise BuildError(f"{self.name} produced no output directory at {self.output_dir}")
        if count_files(self.output_dir) == 0:
            raise BuildError(f"{self.name} produced an empty output directory at {self.output_dir}")
        return self.output_dir


class PrebuiltSite(SiteBuilder):
    """Uses an existing directory as-is (``--skip-build``).

    Useful for directories that are published verbatim, such as a
    hand-maintained CDN asset tree.
    """

    name = "prebuilt"

    def is_installed(self) -> bool:
        return True

    def build(self, content_dir=None) -> str:
        return self._verify_output()
