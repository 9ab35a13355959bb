"""Handler for the 'targets' subcommand.

Usage:
    cdnsync targets
"""
from colorama import Fore, Style

from ..models.environment import ENVIRONMENT_NAMES
from ..utils.config_loader import ConfigLoader
from .base_handler import ModeHandler


class TargetsHandler(ModeHandler):
    """Handles ``cdnsync targets``: list configured environment targets."""

    def display_banner(self):
        print(f"\n{Fore.CYAN}  ▸ Environment Targets{Style.RESET_ALL}\n")

    def prepare_context(self):
        config_path = ConfigLoader.get_config_path(getattr(self.args, "config", None))
        config = ConfigLoader.load_config_json(config_path)
        targets = [ConfigLoader.resolve_target(config, name) for name in ENVIRONMENT_NAMES]
        return {"targets": targets, "config_path": config_path}

    def execute_workflow(self, context):
        targets = context["targets"]
        print(f"  {'ENV':<5} {'SYNC':<5} DESTINATION")
        for target in targets:
            sync = f"{Fore.GREEN}on {Style.RESET_ALL}" if target.sync_enabled else f"{Fore.YELLOW}off{Style.RESET_ALL}"
            endpoint = target.endpoint_url or "default endpoint"
            print(f"  {target.name:<5} {sync}   {target.destination}  ({endpoint})")

        source = context["config_path"] or "built-in defaults"
        print(f"\n  Config: {source}\n")
        return True
