"""
Subcommand handlers for the cdnsync CLI.
"""
from .base_handler import ModeHandler
from .publish_handler import PlanHandler, PublishHandler
from .targets_handler import TargetsHandler

__all__ = ['ModeHandler', 'PublishHandler', 'PlanHandler', 'TargetsHandler']
