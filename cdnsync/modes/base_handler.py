"""Base mode handler with template method pattern."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..exceptions import ConfigError
from ..services.pipeline import ExitCode
from ..utils.logger import get_logger

log = get_logger(__name__)


class ModeHandler(ABC):
    """Abstract base class for all subcommand handlers."""

    def __init__(self, app, args=None):
        """Initialize mode handler with the CLI application.

        Args:
            app: Main :class:`~cdnsync.cli.CdnSync` instance (holds the
                cancel event and shared state)
            args: Parsed argparse namespace
        """
        self.app = app
        self.args = args

    def execute(self) -> int:
        """Execute mode workflow (Template Method).

        Returns:
            Process exit code
        """
        self.display_banner()

        try:
            if not self.validate_prerequisites():
                return ExitCode.CONFIG_ERROR

            context = self.prepare_context()
            if context is None:
                return ExitCode.CONFIG_ERROR
        except ConfigError as e:
            log.error("Configuration error: %s", e)
            return ExitCode.CONFIG_ERROR

        result = self.execute_workflow(context)
        self.display_completion(result)
        return self.exit_code_for(result)

    @abstractmethod
    def display_banner(self):
        """Display mode-specific banner."""
        pass

    def validate_prerequisites(self) -> bool:
        """Validate prerequisites for this mode.

        Returns:
            True if prerequisites are met, False otherwise
        """
        return True

    @abstractmethod
    def prepare_context(self) -> Optional[Dict[str, Any]]:
        """Prepare execution context.

        Returns:
            Context dictionary with required data, or None if preparation failed

        Raises:
            ConfigError: If configuration is invalid
        """
        pass

    @abstractmethod
    def execute_workflow(self, context: Dict[str, Any]) -> Any:
        """Execute mode-specific workflow.

        Args:
            context: Prepared context dictionary

        Returns:
            Result object (mode-specific)
        """
        pass

    def display_completion(self, result: Any):
        """Display completion message. Override for custom display."""
        pass

    def exit_code_for(self, result: Any) -> int:
        """Map the workflow result to an exit code."""
        return ExitCode.SUCCESS if result else ExitCode.CONFIG_ERROR
