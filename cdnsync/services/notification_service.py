"""
Webhook notification service for publish completion
"""
from datetime import datetime
from typing import Optional

import requests

from ..utils.logger import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Sends a run summary to a Slack or Discord webhook.

    Notification failures are logged and never change the pipeline
    outcome.
    """

    def __init__(self, settings: dict, verbose: bool = False):
        """
        Initialize notification service.

        Args:
            settings: ``notification_*`` keys from the configuration
            verbose: If True, log payloads at debug level
        """
        self.settings = settings or {}
        self.verbose = verbose
        self.enabled = self.settings.get('notification_enabled', False)
        self.webhook_type = self.settings.get('notification_type', 'slack')  # 'slack' or 'discord'
        self.webhook_url = self.settings.get('notification_webhook_url', '')

    def is_enabled(self) -> bool:
        """
        Check if notifications are enabled and configured.

        Returns:
            True if notifications can be sent
        """
        return bool(
            self.enabled and
            self.webhook_url and
            self.webhook_type in ['slack', 'discord']
        )

    def build_message(self, report, environment: str, destination: str) -> str:
        """Plain-text summary of a pipeline report."""
        current_time = datetime.now().strftime("%B %d %Y - %H:%M")
        parts = [
            f"CDN publish to {environment} finished on {current_time}.",
            f"Destination: {destination}",
            f"Status: {report.state.value}",
        ]

        if report.manifest is not None:
            parts.append(f"Planned uploads: {len(report.manifest)}")
        if report.result is not None:
            parts.append(f"Uploaded: {len(report.result.succeeded)}")
            parts.append(f"Failed: {len(report.result.failed)}")
            for failure in report.result.failed[:10]:
                parts.append(f"  - {failure.key}: {failure.reason}")
            if len(report.result.failed) > 10:
                parts.append(f"  ... and {len(report.result.failed) - 10} more")
        if report.error:
            parts.append(f"Error: {report.error}")

        return "\n".join(parts)

    def send_publish_notification(self, report, environment: str, destination: str,
                                  username: Optional[str] = None) -> bool:
        """
        Send notification when a publish run completes.

        Args:
            report: :class:`~cdnsync.services.pipeline.PipelineReport`
            environment: Environment target name
            destination: ``s3://`` destination label
            username: Optional user or CI actor who triggered the run

        Returns:
            True if notification sent successfully
        """
        if not self.is_enabled():
            return False

        try:
            message = self.build_message(report, environment, destination)
            if username:
                message += f"\nTriggered by: {username}"

            if self.webhook_type == "discord":
                payload = {"content": message}
            else:
                payload = {"text": message}

            logger.debug("Sending %s webhook to %s", self.webhook_type, self.webhook_url)
            if self.verbose:
                logger.debug("Payload: %s", payload)

            response = requests.post(self.webhook_url, json=payload, timeout=10)

            logger.debug("Webhook response status: %d", response.status_code)

            if not (200 <= response.status_code < 300):
                logger.warning(
                    "Webhook returned HTTP %d: %s", response.status_code, response.text
                )
                return False

            try:
                body = response.json()
                if isinstance(body, dict) and body.get("ok") is False:
                    logger.warning("Slack webhook returned error: %s", body.get("error", "unknown error"))
                    return False
            except ValueError:
                pass

            return True

        except requests.RequestException as e:
            logger.warning("Notification exception: %s: %s", type(e).__name__, e)
            logger.debug("Notification traceback:", exc_info=True)
            return False
