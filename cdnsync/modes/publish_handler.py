"""Handler for the 'publish' subcommand.

Usage:
    cdnsync publish prd
    cdnsync publish stg --skip-build --output-dir cdn.support.tools
"""
from colorama import Fore, Style

from ..services.notification_service import NotificationService
from ..services.pipeline import PublishPipeline
from ..utils.aws.aws_utils import create_s3_client, describe_endpoint
from ..utils.config_loader import ConfigLoader, mask_secret
from ..utils.display.display_utils import print_manifest, print_sync_summary, print_target
from ..utils.logger import get_logger, set_environment
from .base_handler import ModeHandler

log = get_logger(__name__)


class PublishHandler(ModeHandler):
    """Handles ``cdnsync publish <env>``: build, plan and sync."""

    dry_run = False

    def display_banner(self):
        label = "Plan (dry run)" if self.dry_run else "Publish"
        print(f"\n{Fore.CYAN}  ▸ {label} → {self.args.environment}{Style.RESET_ALL}\n")

    def _cli_overrides(self):
        args = self.args
        return {
            "content_dir": args.content_dir,
            "output_dir": args.output_dir,
            "workers": args.workers,
            "max_attempts": args.max_attempts,
        }

    def prepare_context(self):
        sync_config = ConfigLoader.build_sync_config(
            self.args.environment,
            config_path=self.args.config,
            overrides=self._cli_overrides(),
        )
        # --exclude adds to the configured patterns
        for pattern in self.args.exclude or []:
            if pattern not in sync_config.exclude:
                sync_config.exclude.append(pattern)
        self.sync_config = sync_config
        set_environment(sync_config.target.name)

        target = sync_config.target
        print_target(target, mask_secret(sync_config.access_key))

        if target.sync_enabled and not sync_config.has_credentials:
            log.error("No store credentials: set CDNSYNC_ACCESS_KEY and CDNSYNC_SECRET_KEY "
                      "(or AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY)")
            return None

        s3_client = None
        if target.sync_enabled:
            log.debug("Connecting to %s", describe_endpoint(target.endpoint_url))
            s3_client = create_s3_client(sync_config)

        return {"sync_config": sync_config, "s3_client": s3_client}

    def execute_workflow(self, context):
        sync_config = context["sync_config"]
        pipeline = PublishPipeline.from_config(
            sync_config,
            context["s3_client"],
            skip_build=self.args.skip_build,
            dry_run=self.dry_run,
            cancel_event=self.app.cancel_event,
        )
        self.app.pipeline = pipeline
        return pipeline.run()

    def display_completion(self, report):
        if report.manifest is not None and (self.dry_run or self.args.verbose):
            print_manifest(report.manifest)
        print_sync_summary(report)
        self._notify(report)

    def _notify(self, report):
        sync_config = self.sync_config
        settings = dict(sync_config.notifications)
        if self.args.notify:
            settings["notification_enabled"] = True

        notifier = NotificationService(settings, verbose=self.args.verbose)
        if not notifier.is_enabled():
            return

        target = sync_config.target
        if notifier.send_publish_notification(report, target.name, target.destination,
                                              username=sync_config.triggered_by):
            log.info("Notification sent")

    def exit_code_for(self, report):
        return int(report.exit_code)


class PlanHandler(PublishHandler):
    """Handles ``cdnsync plan <env>``: build and plan, upload nothing."""

    dry_run = True
