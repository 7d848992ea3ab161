# sf_deploy/services/deploy_service.py
"""Deployment orchestration

A logical deployment is a short pipeline of stages. Each stage receives the
outcome of the previous one and either hands over to the next stage or ends
the deployment with a :class:`DeployResult`. Stages that run an external
command await its job, so the deploy job of a two-stage chain is only
created once the manifest stage has succeeded.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from rich.progress import Progress

from ..api.exceptions import CliNotFoundError, DeploymentInProgressError, EmptySelectionError
from ..constants import (
    DeploymentVariant,
    Severity,
    PROGRESS_START,
    PROGRESS_MANIFEST,
    PROGRESS_MANIFEST_DONE,
    PROGRESS_DEPLOYING,
    PROGRESS_CHECKING,
    PROGRESS_DONE,
    MSG_STARTING,
    MSG_PREPARING_MANIFEST,
    MSG_DEPLOYING,
    MSG_DEPLOYING_SELECTED,
    MSG_CHECKING_RESULT,
    MSG_DEPLOY_SUCCESS,
    MSG_DEPLOY_SUCCESS_FILE,
    MSG_DEPLOY_FAILED,
    MSG_DEPLOY_FAILED_FILE,
    MSG_DEPLOY_FAILED_STATUS,
    MSG_PARSE_FAILED,
    MSG_PARSE_FAILED_FILE,
    MSG_SOURCE_CONFLICT,
    MSG_SOURCE_CONFLICT_SHORT,
    MSG_MANIFEST_SUCCESS,
    MSG_MANIFEST_FAILED,
    MSG_MISSING_INDEX,
    MSG_MARK_DIRTY_FAILED,
)
from ..core.classifier import classify
from ..core.cli_resolver import CliResolver, resolve_cli
from ..core.commands import current_file_deploy_args, delta_manifest_args, manifest_deploy_args
from ..core.diagnostics import DiagnosticsStore, diagnostics_store, to_diagnostics
from ..core.file_index import FileIndex
from ..core.process import Job, JobFactory
from ..core.progress import create_progress_handle
from ..core.single_flight import SingleFlight
from ..core.workspace import mark_files_dirty, write_deploy_output
from ..models import (
    ComponentFailures,
    DeploymentContext,
    DeployOptions,
    DeployResult,
    DeployStatus,
    ProcessFailure,
    SourceConflict,
    Success,
    context_title,
)
from .notifier import LogNotifier, Notifier

logger = logging.getLogger(__name__)


@dataclass
class StageOutcome:
    """What a stage hands to the next one"""

    result: Optional[DeployResult] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def terminal(self) -> bool:
        return self.result is not None

    @classmethod
    def proceed(cls, **data) -> 'StageOutcome':
        return cls(data=data)

    @classmethod
    def finish(cls, result: DeployResult) -> 'StageOutcome':
        return cls(result=result)


Stage = Callable[[DeploymentContext, StageOutcome], Awaitable[StageOutcome]]


class DeployService:
    """Runs deployments one at a time

    Each public operation validates its preconditions synchronously and
    raises a :class:`ValidationError` without side effects when they do not
    hold. Otherwise it clears the diagnostics store, takes the single-flight
    guard and returns a task resolving to the :class:`DeployResult`. The
    guard is released and the progress handle finished exactly once on
    every path.
    """

    def __init__(self,
                 options: DeployOptions,
                 store: Optional[DiagnosticsStore] = None,
                 notifier: Optional[Notifier] = None,
                 progress: Optional[Progress] = None,
                 job_factory: JobFactory = Job,
                 cli_resolver: CliResolver = resolve_cli,
                 file_index: Optional[FileIndex] = None):
        self.options = options
        self.store = store if store is not None else diagnostics_store
        self.notifier = notifier or LogNotifier()
        self.progress = progress
        self.job_factory = job_factory
        self.cli_resolver = cli_resolver
        self._file_index = file_index
        self.guard = SingleFlight("deploy")

    @property
    def is_running(self) -> bool:
        return self.guard.busy

    @property
    def file_index(self) -> FileIndex:
        """Index of the project source directory (built on first use)"""
        if self._file_index is None:
            self._file_index = FileIndex.build(self.options.source_path)
        return self._file_index

    # Public operations

    def deploy_current_file(self, current_file: str, force: bool = False) -> asyncio.Task:
        """Deploy one source file

        Args:
            current_file: Path of the file to deploy, made absolute against
                the working directory since the job runs in the project root
            force: Ignore conflicts with the target

        Returns:
            Task resolving to the deploy result
        """
        executable = self._check_preconditions()
        return self._launch(
            DeploymentVariant.SINGLE_FILE, os.path.abspath(str(current_file)), force, executable,
            [self._deploy_stage],
        )

    def deploy_changed(self, force: bool = False) -> asyncio.Task:
        """Deploy every file changed since the reference revision"""
        executable = self._check_preconditions()
        return self._launch(
            DeploymentVariant.CHANGED_SET, None, force, executable,
            [self._prepare_manifest_stage, self._deploy_stage],
        )

    def deploy_selected(self, selection: Iterable[str], force: bool = False) -> asyncio.Task:
        """Deploy the indexed files named in a selection list

        Args:
            selection: File names or paths; only names known to the file
                index are deployed
            force: Ignore conflicts with the target

        Returns:
            Task resolving to the deploy result
        """
        executable = self._check_preconditions()
        found = self._resolve_selection(selection)
        return self._launch(
            DeploymentVariant.SELECTED_SET, found, force, executable,
            [self._mark_selection_dirty_stage, self._prepare_manifest_stage, self._deploy_stage],
        )

    # Validation

    def _check_preconditions(self) -> str:
        # Raises RuntimeError outside of a running loop, before any side effect
        asyncio.get_running_loop()

        if self.guard.busy:
            error = DeploymentInProgressError()
            self._notify(str(error), Severity.WARNING)
            raise error

        executable = self.cli_resolver(self.options.sf_cli_path)
        if not executable:
            error = CliNotFoundError(self.options.sf_cli_path)
            self._notify(str(error), Severity.ERROR)
            raise error

        return executable

    def _resolve_selection(self, selection: Iterable[str]) -> List[str]:
        found, missing = self.file_index.resolve(selection)
        if not found:
            error = EmptySelectionError(missing)
            self._notify(str(error), Severity.WARNING)
            raise error

        if missing:
            self._notify(MSG_MISSING_INDEX.format(files=", ".join(missing)), Severity.WARNING)
        logger.debug("Files to deploy: %s", found)
        return found

    # Pipeline driver

    def _launch(self, variant: DeploymentVariant, subject: Any, force: bool,
                executable: str, stages: List[Stage]) -> asyncio.Task:
        self.store.clear()

        context = DeploymentContext(
            variant=variant,
            options=self.options,
            progress=create_progress_handle(context_title(variant, subject), self.progress),
            subject=subject,
            force=force,
            metadata={"executable": executable},
        )
        if not self.guard.try_acquire(context):
            context.progress.finish()
            raise DeploymentInProgressError()

        logger.debug("Setup deployment context: %s", context)
        context.progress.report(MSG_STARTING, PROGRESS_START)
        return asyncio.get_running_loop().create_task(self._drive(context, stages))

    async def _drive(self, context: DeploymentContext, stages: List[Stage]) -> DeployResult:
        outcome = StageOutcome()
        try:
            for stage in stages:
                outcome = await stage(context, outcome)
                if outcome.terminal:
                    break
            if not outcome.terminal:
                raise RuntimeError("Deployment pipeline ended without a result")
            return outcome.result.complete()
        finally:
            self.guard.release(context)
            context.progress.finish()

    def _create_job(self, context: DeploymentContext, args: List[str]) -> Job:
        job = self.job_factory(context.metadata["executable"], args, cwd=self.options.project_root)
        logger.debug("Job args: %s", args)
        return job

    # Stages

    async def _mark_selection_dirty_stage(self, context: DeploymentContext,
                                          previous: StageOutcome) -> StageOutcome:
        ok, failed_file = mark_files_dirty(context.files)
        if not ok:
            message = MSG_MARK_DIRTY_FAILED.format(file=failed_file)
            self._notify(message, Severity.ERROR)
            return StageOutcome.finish(DeployResult(status=DeployStatus.PREPARATION_FAILED, message=message))
        return StageOutcome.proceed(files=context.files)

    async def _prepare_manifest_stage(self, context: DeploymentContext,
                                      previous: StageOutcome) -> StageOutcome:
        context.progress.report(MSG_PREPARING_MANIFEST, PROGRESS_MANIFEST)

        job = self._create_job(context, delta_manifest_args(self.options.delta_path))
        exit_code = await job.start()

        if exit_code != 0:
            logger.debug("Manifest preparation failed: %s", job.stderr_lines or job.stdout_lines)
            self._notify(MSG_MANIFEST_FAILED, Severity.ERROR)
            return StageOutcome.finish(DeployResult(
                status=DeployStatus.MANIFEST_FAILED,
                message=MSG_MANIFEST_FAILED,
                exit_code=exit_code,
            ))

        self._notify(MSG_MANIFEST_SUCCESS, Severity.INFO)
        context.progress.report(MSG_DEPLOYING, PROGRESS_MANIFEST_DONE)
        return StageOutcome.proceed(manifest_path=str(self.options.delta_manifest_path))

    async def _deploy_stage(self, context: DeploymentContext,
                            previous: StageOutcome) -> StageOutcome:
        api_version = self.options.api_version
        if context.variant == DeploymentVariant.SINGLE_FILE:
            args = current_file_deploy_args(context.current_file, api_version, context.force)
        else:
            args = manifest_deploy_args(previous.data["manifest_path"], api_version, context.force)

        message = MSG_DEPLOYING_SELECTED if context.variant == DeploymentVariant.SELECTED_SET else MSG_DEPLOYING
        context.progress.report(message, PROGRESS_DEPLOYING[context.variant])

        job = self._create_job(context, args)
        exit_code = await job.start()

        context.progress.report(MSG_CHECKING_RESULT, PROGRESS_CHECKING)
        return StageOutcome.finish(self._process_deploy_output(context, job.stdout_text, exit_code))

    # Result handling

    def _process_deploy_output(self, context: DeploymentContext, stdout_text: str,
                               exit_code: int) -> DeployResult:
        logger.debug("Deployment JSON output: %s", stdout_text)
        self._save_output(stdout_text)

        outcome = classify(stdout_text, exit_code)
        name = context.display_name

        if isinstance(outcome, Success):
            message = MSG_DEPLOY_SUCCESS_FILE.format(file=name) if name else MSG_DEPLOY_SUCCESS
            return self._finish(context, DeployStatus.SUCCEEDED, outcome, exit_code,
                                message, MSG_DEPLOY_SUCCESS, Severity.INFO)

        if isinstance(outcome, SourceConflict):
            return self._finish(context, DeployStatus.SOURCE_CONFLICT, outcome, exit_code,
                                MSG_SOURCE_CONFLICT.format(message=outcome.message),
                                MSG_SOURCE_CONFLICT_SHORT, Severity.ERROR)

        if isinstance(outcome, ComponentFailures):
            diagnostics = to_diagnostics(outcome.records)
            logger.debug("Deployment diagnostics: %s", diagnostics)
            self.store.set_diagnostics(diagnostics)
            message = MSG_DEPLOY_FAILED_FILE.format(file=name) if name else MSG_DEPLOY_FAILED
            result = self._finish(context, DeployStatus.COMPONENT_FAILURES, outcome, exit_code,
                                  message, MSG_DEPLOY_FAILED, Severity.ERROR)
            result.diagnostics = diagnostics
            return result

        if isinstance(outcome, ProcessFailure):
            if name:
                message = MSG_DEPLOY_FAILED_FILE.format(file=name)
            else:
                message = MSG_DEPLOY_FAILED_STATUS.format(code=outcome.exit_code)
            if outcome.message:
                message = f"{message}: {outcome.message}"
            return self._finish(context, DeployStatus.PROCESS_FAILED, outcome, exit_code,
                                message, MSG_DEPLOY_FAILED, Severity.ERROR)

        message = MSG_PARSE_FAILED_FILE.format(file=name) if name else MSG_PARSE_FAILED
        return self._finish(context, DeployStatus.PARSE_FAILED, outcome, exit_code,
                            message, MSG_PARSE_FAILED, Severity.ERROR)

    def _finish(self, context: DeploymentContext, status: DeployStatus, outcome: Any,
                exit_code: int, message: str, progress_message: str,
                severity: Severity) -> DeployResult:
        context.progress.report(progress_message, PROGRESS_DONE)
        self._notify(message, severity)
        return DeployResult(status=status, message=message, outcome=outcome, exit_code=exit_code)

    def _save_output(self, stdout_text: str) -> None:
        if not stdout_text.strip():
            return
        try:
            write_deploy_output(self.options.deploy_file_path, stdout_text)
        except OSError as e:
            logger.warning(f"Could not save deploy output to {self.options.deploy_file_path}: {e}")

    def _notify(self, message: str, severity: Severity) -> None:
        self.notifier.notify(message, severity)
