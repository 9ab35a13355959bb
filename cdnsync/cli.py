"""
cdnsync - Main CLI interface
Static site publish and CDN synchronization

Subcommand model intended for CI jobs: one environment target per
invocation, exit code reflects the outcome.
"""
import argparse
import signal
import sys
import threading

from colorama import Fore, Style, init

from . import __version__
from .models.environment import ENVIRONMENT_NAMES
from .utils.display.display_utils import print_banner
from .utils.logger import get_logger, setup_logging

# Initialize colorama
init(autoreset=True)

log = get_logger(__name__)

# ── Help-text epilogs for subcommands ──────────────────────────────────────

PUBLISH_EXAMPLES = """\
Examples:
  cdnsync publish prd
  cdnsync publish stg --workers 16 --max-attempts 5
  cdnsync publish prd --skip-build --output-dir cdn.support.tools

Credentials (environment):
  CDNSYNC_ACCESS_KEY / AWS_ACCESS_KEY_ID
  CDNSYNC_SECRET_KEY / AWS_SECRET_ACCESS_KEY
  CDNSYNC_ENDPOINT_URL, CDNSYNC_REGION, CDNSYNC_BUCKET, CDNSYNC_PREFIX

Exit codes:
  0 success   2 config error   3 build failure   4 listing failure
  5 partial upload failure   6 total upload failure   130 cancelled
"""

PLAN_EXAMPLES = """\
Examples:
  cdnsync plan prd
  cdnsync plan qas --skip-build --output-dir public

Builds (unless --skip-build) and prints the upload manifest.
Nothing is uploaded.
"""


class CdnSync:
    """Main CLI application class."""

    def __init__(self):
        """Initialize CLI application."""
        self.cancel_event = threading.Event()
        self.pipeline = None

    def install_signal_handlers(self):
        """Route SIGINT/SIGTERM to a graceful cancel.

        The first signal stops new uploads and lets in-flight ones
        finish; a second one exits immediately.
        """
        signal.signal(signal.SIGINT, self.signal_handler)
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, self.signal_handler)

    def signal_handler(self, sig, frame):
        if self.cancel_event.is_set():
            print(f"\n{Fore.RED}[INFO] Forced exit{Style.RESET_ALL}")
            sys.exit(130)
        print(f"\n\n{Fore.YELLOW}[INFO] Cancelling: no new uploads will start, "
              f"waiting for in-flight uploads...{Style.RESET_ALL}")
        self.cancel_event.set()


# ── Argument Parser ────────────────────────────────────────────────────────

def create_argument_parser():
    """Create and configure the subparser-based argument parser."""
    parser = argparse.ArgumentParser(
        prog='cdnsync',
        description='cdnsync: build a static site and additively sync it to an S3-compatible CDN bucket',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    # Shared parent so global flags work after the subcommand name
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--verbose', action='store_true', help='Enable verbose output')
    common.add_argument('--quiet', action='store_true', help='Only show warnings and errors')
    common.add_argument('--config', help='Path to a JSON config file (default: ./cdnsync.json)')

    sync_options = argparse.ArgumentParser(add_help=False)
    sync_options.add_argument('environment', choices=ENVIRONMENT_NAMES,
                              help='Environment target')
    sync_options.add_argument('--content-dir', help='Hugo source directory')
    sync_options.add_argument('--output-dir', help='Build output directory to sync')
    sync_options.add_argument('--skip-build', action='store_true',
                              help='Sync --output-dir as-is without running hugo')
    sync_options.add_argument('--workers', type=int, help='Concurrent uploads')
    sync_options.add_argument('--max-attempts', type=int,
                              help='Upload attempts per object, including the first')
    sync_options.add_argument('--exclude', action='append', default=[], metavar='GLOB',
                              help='Extra exclude pattern (repeatable)')
    sync_options.add_argument('--notify', action='store_true',
                              help='Send a webhook notification with the summary')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ── publish ────────────────────────────────────────────────────────
    subparsers.add_parser(
        'publish',
        parents=[common, sync_options],
        help='Build, plan and upload to an environment target',
        description='Build the site and additively sync it to the environment target.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=PUBLISH_EXAMPLES,
    )

    # ── plan ───────────────────────────────────────────────────────────
    subparsers.add_parser(
        'plan',
        parents=[common, sync_options],
        help='Show what publish would upload (dry run)',
        description='Build and compute the upload manifest without uploading.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=PLAN_EXAMPLES,
    )

    # ── targets ────────────────────────────────────────────────────────
    subparsers.add_parser(
        'targets',
        parents=[common],
        help='List configured environment targets',
        description='Display every environment target and its destination.',
    )

    return parser


# ── Main Entry Point ──────────────────────────────────────────────────────

def main(argv=None):
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        print_banner()
        parser.print_help()
        return 2

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    app = CdnSync()
    app.install_signal_handlers()

    from .modes.publish_handler import PlanHandler, PublishHandler
    from .modes.targets_handler import TargetsHandler

    handlers = {
        'publish': lambda: PublishHandler(app, args),
        'plan': lambda: PlanHandler(app, args),
        'targets': lambda: TargetsHandler(app, args),
    }

    return int(handlers[args.command]().execute())


if __name__ == '__main__':
    sys.exit(main())
