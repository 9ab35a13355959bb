"""Logging for cdnsync runs.

Publish runs mostly execute in CI, so the console handler only emits
colour when its stream is a terminal, and every line can carry the
environment target being published::

    [INFO] [prd] Planned 12 upload(s): 3 new, 9 changed, 410 up to date

Modules log through :func:`get_logger`; the CLI calls
:func:`setup_logging` once and :func:`set_environment` when the target
is known.
"""
import logging
import sys

from colorama import Fore, Style

__all__ = ["get_logger", "setup_logging", "set_environment"]

_ROOT_LOGGER_NAME = "cdnsync"

_LEVEL_COLOURS = {
    logging.DEBUG: Fore.WHITE,
    logging.INFO: Fore.CYAN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class EnvironmentFilter(logging.Filter):
    """Stamps each record with the active environment target name."""

    def __init__(self, environment=None):
        super().__init__()
        self.environment = environment

    def filter(self, record):
        record.environment = self.environment
        return True


class RunFormatter(logging.Formatter):
    """``[LEVEL] [env] message``, level tag coloured only if ``colour``."""

    def __init__(self, colour=False):
        super().__init__("%(message)s")
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname}]"
        if self.colour:
            tag = f"{_LEVEL_COLOURS.get(record.levelno, '')}{tag}{Style.RESET_ALL}"
        environment = getattr(record, "environment", None)
        if environment:
            tag = f"{tag} [{environment}]"
        return f"{tag} {super().format(record)}"


_handler = None
_env_filter = EnvironmentFilter()


def _stream_is_tty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(verbose: bool = False, quiet: bool = False, colour=None, stream=None) -> None:
    """Configure the *cdnsync* logger and its console handler.

    Args:
        verbose: ``DEBUG`` level
        quiet: ``WARNING`` level (wins over *verbose*)
        colour: Force colour on or off; None detects a terminal
        stream: Output stream (default ``sys.stderr``)
    """
    global _handler  # noqa: PLW0603

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    stream = stream or sys.stderr
    if colour is None:
        colour = _stream_is_tty(stream)

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(level)

    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(stream)
    _handler.setFormatter(RunFormatter(colour=colour))
    _handler.addFilter(_env_filter)
    root.addHandler(_handler)
    _env_filter.environment = None

    # botocore and urllib3 log every request at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def set_environment(name) -> None:
    """Tag subsequent console lines with environment ``name`` (None clears it)."""
    _env_filter.environment = name


def get_logger(name: str) -> logging.Logger:
    """Child logger under the *cdnsync* namespace."""
    if not name.startswith(_ROOT_LOGGER_NAME):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
