"""
Publish pipeline orchestrator.

Sequences build -> plan -> sync for one environment target and maps the
outcome to a process exit code::

    Idle -> Building -> Planning -> Syncing -> {Succeeded | Failed}

There is no retry across the pipeline; only individual uploads retry.
"""
import threading
import time
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from ..exceptions import BuildError, InvalidTransitionError, ListingError
from ..utils.logger import get_logger
from .aws.executor import SyncExecutor
from .aws.operations import S3Operations
from .aws.planner import SyncPlanner
from .aws.retry import RetryPolicy
from .build.base import PrebuiltSite
from .build.hugo_builder import HugoBuilder

log = get_logger(__name__)


class PipelineState(str, Enum):
    """Pipeline states."""
    IDLE = "idle"
    BUILDING = "building"
    PLANNING = "planning"
    SYNCING = "syncing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({PipelineState.SUCCEEDED, PipelineState.FAILED})

VALID_TRANSITIONS = {
    PipelineState.IDLE: {PipelineState.BUILDING},
    # Succeeded straight from Building when CDN sync is disabled for the target
    PipelineState.BUILDING: {PipelineState.PLANNING, PipelineState.SUCCEEDED, PipelineState.FAILED},
    # Succeeded straight from Planning on an empty manifest or a dry run
    PipelineState.PLANNING: {PipelineState.SYNCING, PipelineState.SUCCEEDED, PipelineState.FAILED},
    PipelineState.SYNCING: {PipelineState.SUCCEEDED, PipelineState.FAILED},
    PipelineState.SUCCEEDED: set(),
    PipelineState.FAILED: set(),
}


class ExitCode(IntEnum):
    """Process exit codes, distinct per failure class for CI alerting."""
    SUCCESS = 0
    CONFIG_ERROR = 2
    BUILD_FAILURE = 3
    LISTING_FAILURE = 4
    PARTIAL_UPLOAD_FAILURE = 5
    TOTAL_UPLOAD_FAILURE = 6
    CANCELLED = 130


class PipelineReport:
    """Final outcome of a pipeline run."""

    def __init__(self, state, exit_code, manifest=None, result=None, error=None,
                 history=None, duration=0.0):
        self.state = state
        self.exit_code = exit_code
        self.manifest = manifest
        self.result = result
        self.error = error
        self.history: List[Tuple[PipelineState, PipelineState]] = list(history or [])
        self.duration = duration

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.SUCCEEDED

    def to_dict(self):
        """Serialize to dictionary"""
        return {
            "state": self.state.value,
            "exit_code": int(self.exit_code),
            "error": self.error,
            "manifest": self.manifest.to_dict() if self.manifest is not None else None,
            "result": self.result.to_dict() if self.result is not None else None,
            "duration": round(self.duration, 3),
        }


class PublishPipeline:
    """Runs one publish for one environment target.

    Args:
        sync_config: :class:`~cdnsync.utils.config_loader.SyncConfig`
        builder: :class:`~cdnsync.services.build.base.SiteBuilder`
        planner: :class:`~cdnsync.services.aws.planner.SyncPlanner`
        executor: :class:`~cdnsync.services.aws.executor.SyncExecutor`
        dry_run: Plan only; never upload
        cancel_event: ``threading.Event`` set on SIGINT/SIGTERM (defaults to the
            executor's)
    """

    def __init__(self, sync_config, builder, planner, executor, dry_run=False,
                 cancel_event=None):
        self.config = sync_config
        self.target = sync_config.target
        self.builder = builder
        self.planner = planner
        self.executor = executor
        self.dry_run = dry_run
        self.cancel_event = cancel_event or executor.cancel_event
        self.state = PipelineState.IDLE
        self.history: List[Tuple[PipelineState, PipelineState]] = []

    @classmethod
    def from_config(cls, sync_config, s3_client, skip_build=False, dry_run=False,
                    cancel_event: Optional[threading.Event] = None, sleep=None):
        """Wire the default builder, planner and executor for a config."""
        if skip_build:
            builder = PrebuiltSite(sync_config.output_dir)
        else:
            builder = HugoBuilder(
                sync_config.output_dir,
                binary=sync_config.hugo_binary,
                extra_args=sync_config.hugo_args,
                timeout=sync_config.build_timeout,
            )

        cancel_event = cancel_event or threading.Event()
        retry_policy = RetryPolicy(
            max_attempts=sync_config.max_attempts,
            base_delay=sync_config.base_delay,
            max_delay=sync_config.max_delay,
        )
        planner = SyncPlanner(
            S3Operations(s3_client, sync_config.target),
            sync_config.exclude,
            retry_policy=retry_policy,
            sleep=sleep or cancel_event.wait,
            cancel_event=cancel_event,
        )
        executor = SyncExecutor(
            s3_client,
            retry_policy=retry_policy,
            workers=sync_config.workers,
            cancel_event=cancel_event,
            sleep=sleep,
        )
        return cls(sync_config, builder, planner, executor, dry_run=dry_run,
                   cancel_event=cancel_event)

    # ── State machine ──────────────────────────────────────────────────

    def transition(self, target_state: PipelineState):
        """Move to ``target_state``; raise if the transition is not allowed."""
        allowed = VALID_TRANSITIONS.get(self.state, set())
        if target_state not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self.state.value} to {target_state.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        log.debug("Pipeline %s -> %s", self.state.value, target_state.value)
        self.history.append((self.state, target_state))
        self.state = target_state

    # ── Run ────────────────────────────────────────────────────────────

    def run(self) -> PipelineReport:
        """Execute build -> plan -> sync.

        Returns:
            PipelineReport with terminal state and exit code
        """
        started = time.monotonic()
        manifest = None
        result = None

        def finish(state, exit_code, error=None):
            self.transition(state)
            return PipelineReport(
                state, exit_code, manifest=manifest, result=result, error=error,
                history=self.history, duration=time.monotonic() - started,
            )

        # Build
        self.transition(PipelineState.BUILDING)
        try:
            output_dir = self.builder.build(self.config.content_dir)
        except BuildError as e:
            if self.cancel_event.is_set():
                log.warning("Build interrupted by cancellation: %s", e)
                return finish(PipelineState.FAILED, ExitCode.CANCELLED, "cancelled")
            log.error("Build failed: %s", e)
            return finish(PipelineState.FAILED, ExitCode.BUILD_FAILURE, str(e))
        log.info("Build output ready at %s", output_dir)

        if not self.target.sync_enabled:
            log.info("CDN sync is disabled for environment '%s'; skipping sync", self.target.name)
            return finish(PipelineState.SUCCEEDED, ExitCode.SUCCESS)

        # Plan
        self.transition(PipelineState.PLANNING)
        try:
            manifest = self.planner.plan(output_dir)
        except ListingError as e:
            if self.cancel_event.is_set():
                log.warning("Planning interrupted by cancellation: %s", e)
                return finish(PipelineState.FAILED, ExitCode.CANCELLED, "cancelled")
            log.error("Remote listing failed, aborting without uploading: %s", e)
            return finish(PipelineState.FAILED, ExitCode.LISTING_FAILURE, str(e))
        except OSError as e:
            log.error("Cannot read build output: %s", e)
            return finish(PipelineState.FAILED, ExitCode.BUILD_FAILURE, str(e))

        if self.dry_run:
            log.info("Dry run: %d object(s) would be uploaded", len(manifest))
            return finish(PipelineState.SUCCEEDED, ExitCode.SUCCESS)

        if manifest.is_empty():
            log.info("Remote is up to date; nothing to upload")
            return finish(PipelineState.SUCCEEDED, ExitCode.SUCCESS)

        # Sync
        self.transition(PipelineState.SYNCING)
        result = self.executor.execute(manifest, self.target)

        if result.success:
            return finish(PipelineState.SUCCEEDED, ExitCode.SUCCESS)

        for failure in result.failed:
            log.error("FAILED %s: %s", failure.key, failure.reason)

        if result.cancelled:
            log.warning("Sync cancelled: %d object(s) not uploaded", len(result.skipped))
            return finish(PipelineState.FAILED, ExitCode.CANCELLED, "cancelled")

        if result.succeeded:
            return finish(
                PipelineState.FAILED, ExitCode.PARTIAL_UPLOAD_FAILURE,
                f"{len(result.failed)} of {result.total} upload(s) failed",
            )
        return finish(
            PipelineState.FAILED, ExitCode.TOTAL_UPLOAD_FAILURE,
            f"all {len(result.failed)} upload(s) failed",
        )
