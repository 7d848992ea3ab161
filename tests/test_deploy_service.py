"""Deploy service tests"""

import asyncio
import io
import json
import os
import sys
from pathlib import Path

import pytest
from rich.console import Console

from sf_deploy.api.exceptions import (
    CliNotFoundError,
    DeploymentInProgressError,
    EmptySelectionError,
    ValidationError,
)
from sf_deploy.constants import Severity
from sf_deploy.core.diagnostics import diagnostics_store
from sf_deploy.core.process import Job
from sf_deploy.models import DeployStatus, DiagnosticRecord
from sf_deploy.services.deploy_service import DeployService, StageOutcome
from sf_deploy.services.notifier import ConsoleNotifier

from .conftest import FakeJobFactory, RecordingSink, deploy_payload, failure_payload


def make_service(options, store, notifier, jobs, resolver=lambda cli_path: "/usr/bin/sf"):
    return DeployService(
        options,
        store=store,
        notifier=notifier,
        job_factory=jobs,
        cli_resolver=resolver,
    )


def source_file(project, name="Foo.cls"):
    return project / "force-app" / "main" / "default" / "classes" / name


def stale_diagnostic(file_name="Stale.cls"):
    return {file_name: [DiagnosticRecord(Severity.ERROR, "old", 0, 0, file_name)]}


class TestStageOutcome:
    """Stage outcome helpers"""

    def test_proceed_is_not_terminal(self):
        outcome = StageOutcome.proceed(manifest_path="package.xml")
        assert outcome.terminal is False
        assert outcome.data == {"manifest_path": "package.xml"}


class TestDeployCurrentFile:
    """Single file deployments"""

    @pytest.mark.asyncio
    async def test_success(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory((deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)
        path = source_file(project)

        task = service.deploy_current_file(str(path))
        assert service.is_running
        result = await task

        assert result.status == DeployStatus.SUCCEEDED
        assert result.success
        assert result.end_time is not None
        assert result.to_dict()["status"] == "succeeded"
        assert notifier.messages == [("Deployment successful: Foo.cls", Severity.INFO)]
        assert jobs.jobs[0].argv == [
            "/usr/bin/sf", "project", "deploy", "start", "-d", str(path),
            "--json", "--api-version", "65.0",
        ]
        assert not service.is_running

    @pytest.mark.asyncio
    async def test_progress_reported_and_finished_once(self, project, options, store, notifier,
                                                       progress_handles):
        jobs = FakeJobFactory((deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)

        await service.deploy_current_file(str(source_file(project)))

        handle = progress_handles[0]
        assert handle.title == "Foo.cls"
        assert [p for _, p in handle.reports] == [0, 50, 90, 100]
        assert handle.finish_calls == 1
        assert handle.finished

    @pytest.mark.asyncio
    async def test_force_ignores_conflicts(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory((deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)

        await service.deploy_current_file(str(source_file(project)), force=True)

        assert jobs.jobs[0].args[-1] == "--ignore-conflicts"

    @pytest.mark.asyncio
    async def test_output_persisted(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory(("not json at all", 1))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_current_file(str(source_file(project)))

        assert result.status == DeployStatus.PARSE_FAILED
        assert options.deploy_file_path.read_text(encoding="utf-8") == "not json at all"
        assert notifier.messages == [
            ("Failed to parse deployment result for file: Foo.cls", Severity.ERROR),
        ]

    @pytest.mark.asyncio
    async def test_empty_output_not_persisted(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory(("", 1))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_current_file(str(source_file(project)))

        assert result.status == DeployStatus.PARSE_FAILED
        assert not options.deploy_file_path.exists()

    @pytest.mark.asyncio
    async def test_component_failures_published(self, project, options, store, notifier,
                                                progress_handles):
        sink = RecordingSink()
        store.add_sink(sink)
        path = source_file(project)
        output = failure_payload(
            component_failures=[{
                "fullName": "Foo",
                "fileName": "classes/Foo.cls",
                "lineNumber": "3",
                "columnNumber": "5",
                "problemType": "Error",
                "componentType": "ApexClass",
            }],
            files=[{"fullName": "Foo", "filePath": str(path), "error": "Unexpected token"}],
        )
        jobs = FakeJobFactory((output, 1))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_current_file(str(path))

        assert result.status == DeployStatus.COMPONENT_FAILURES
        assert result.diagnostic_count == 1
        diagnostic = store.get("Foo.cls")[0]
        assert (diagnostic.line, diagnostic.col) == (2, 4)
        assert diagnostic.message == "Unexpected token"
        assert sink.published[0][0] == "Foo.cls"
        assert notifier.messages == [("Deployment failed for file: Foo.cls", Severity.ERROR)]

    @pytest.mark.asyncio
    async def test_source_conflict(self, project, options, store, notifier, progress_handles):
        output = json.dumps({"name": "SourceConflictError", "message": "Conflicts found", "status": 1})
        jobs = FakeJobFactory((output, 1))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_current_file(str(source_file(project)))

        assert result.status == DeployStatus.SOURCE_CONFLICT
        assert notifier.messages == [("Source conflicts detected: Conflicts found", Severity.ERROR)]
        assert store.is_empty()

    @pytest.mark.asyncio
    async def test_relative_path_made_absolute(self, project, options, store, notifier,
                                               progress_handles, monkeypatch):
        monkeypatch.chdir(project / "force-app" / "main" / "default")
        jobs = FakeJobFactory((deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)

        await service.deploy_current_file(os.path.join("classes", "Foo.cls"))

        job = jobs.jobs[0]
        target = Path(job.args[4])
        assert target.is_absolute()
        assert target.resolve() == source_file(project).resolve()
        assert job.cwd == str(project)

    @pytest.mark.asyncio
    async def test_bracketed_conflict_message_kept(self, project, options, store,
                                                  progress_handles):
        output = io.StringIO()
        message = "[force-app/main/default/classes/Foo.cls] changed, see [/tmp] for details"
        jobs = FakeJobFactory((json.dumps({"name": "SourceConflictError", "message": message}), 1))
        service = DeployService(
            options,
            store=store,
            notifier=ConsoleNotifier(Console(file=output, force_terminal=False, width=200)),
            job_factory=jobs,
            cli_resolver=lambda cli_path: "/usr/bin/sf",
        )

        result = await service.deploy_current_file(str(source_file(project)))

        assert result.status == DeployStatus.SOURCE_CONFLICT
        assert result.message == f"Source conflicts detected: {message}"
        assert message in output.getvalue()
        assert not service.is_running

    @pytest.mark.asyncio
    async def test_unrunnable_job_releases_guard(self, project, options, store, notifier,
                                                 progress_handles):
        service = make_service(options, store, notifier, Job,
                               resolver=lambda cli_path: sys.executable)

        task = service.deploy_current_file(str(project / "Foo\x00.cls"))
        result = await asyncio.wait_for(task, timeout=10)

        assert result.status == DeployStatus.PARSE_FAILED
        assert result.exit_code == 127
        assert not service.is_running
        assert progress_handles[0].finish_calls == 1

    @pytest.mark.asyncio
    async def test_store_cleared_before_launch(self, project, options, store, notifier,
                                               progress_handles):
        sink = RecordingSink()
        store.add_sink(sink)
        store.set_diagnostics(stale_diagnostic())
        jobs = FakeJobFactory((deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)

        task = service.deploy_current_file(str(source_file(project)))
        assert store.is_empty()
        assert sink.clear_count == 1
        await task


class TestValidation:
    """Rejections before anything is spawned"""

    @pytest.mark.asyncio
    async def test_rejected_while_running(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory((deploy_payload(), 0))
        gate = jobs.hold()
        service = make_service(options, store, notifier, jobs)

        first = service.deploy_current_file(str(source_file(project)))
        store.set_diagnostics(stale_diagnostic())

        with pytest.raises(DeploymentInProgressError):
            service.deploy_changed()

        assert ("A deployment is already in progress. Please wait for it to finish.",
                Severity.WARNING) in notifier.messages
        # The rejected call did not clear the store
        assert store.get("Stale.cls")

        gate.set()
        result = await first

        assert result.success
        assert len(jobs.jobs) == 1
        assert len(progress_handles) == 1
        assert not service.is_running

    @pytest.mark.asyncio
    async def test_accepts_new_deploy_after_finish(self, project, options, store, notifier,
                                                   progress_handles):
        jobs = FakeJobFactory((deploy_payload(), 0), (deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)

        await service.deploy_current_file(str(source_file(project)))
        await service.deploy_current_file(str(source_file(project, "Bar.cls")))

        assert len(jobs.jobs) == 2

    @pytest.mark.asyncio
    async def test_cli_not_found(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory()
        service = make_service(options, store, notifier, jobs, resolver=lambda cli_path: None)
        store.set_diagnostics(stale_diagnostic())

        with pytest.raises(CliNotFoundError) as exc_info:
            service.deploy_current_file(str(source_file(project)))

        assert exc_info.value.cli_path == "sf"
        assert notifier.messages == [("SF CLI not found. Please install it.", Severity.ERROR)]
        assert jobs.jobs == []
        assert progress_handles == []
        assert not service.is_running
        assert store.get("Stale.cls")

    @pytest.mark.asyncio
    async def test_empty_selection(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory()
        service = make_service(options, store, notifier, jobs)
        before = source_file(project).read_text(encoding="utf-8")

        with pytest.raises(EmptySelectionError) as exc_info:
            service.deploy_selected(["Missing.cls", ""])

        assert exc_info.value.missing_files == ["Missing.cls"]
        assert isinstance(exc_info.value, ValidationError)
        assert notifier.messages[0][1] == Severity.WARNING
        assert jobs.jobs == []
        assert progress_handles == []
        assert source_file(project).read_text(encoding="utf-8") == before
        assert not service.is_running

    def test_requires_running_loop(self, options, store, notifier):
        service = make_service(options, store, notifier, FakeJobFactory())

        with pytest.raises(RuntimeError):
            service.deploy_changed()

        assert not service.is_running

    def test_default_store_is_shared(self, options):
        assert DeployService(options).store is diagnostics_store


class TestDeployChanged:
    """Changed set deployments"""

    @pytest.mark.asyncio
    async def test_manifest_then_deploy(self, project, options, store, notifier, progress_handles):
        jobs = FakeJobFactory(("", 0), (deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_changed()

        assert result.success
        manifest_job, deploy_job = jobs.jobs
        assert manifest_job.args == [
            "sgd", "source", "delta", "-c", "--from", "HEAD", "--output-dir", str(options.delta_path),
        ]
        assert manifest_job.cwd == str(project)
        assert deploy_job.args[:5] == [
            "project", "deploy", "start", "--manifest", str(options.delta_manifest_path),
        ]
        assert notifier.messages == [
            ("Manifest prepared successfully", Severity.INFO),
            ("Deployment successful", Severity.INFO),
        ]
        handle = progress_handles[0]
        assert handle.title == "Changed metadata"
        assert [p for _, p in handle.reports] == [0, 10, 20, 30, 90, 100]
        assert handle.finish_calls == 1

    @pytest.mark.asyncio
    async def test_manifest_failure_skips_deploy(self, project, options, store, notifier,
                                                 progress_handles):
        jobs = FakeJobFactory(("", 1))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_changed()

        assert result.status == DeployStatus.MANIFEST_FAILED
        assert result.exit_code == 1
        assert len(jobs.jobs) == 1
        assert notifier.messages == [("Failed to prepare manifest", Severity.ERROR)]
        assert progress_handles[0].finish_calls == 1
        assert not service.is_running

    @pytest.mark.asyncio
    async def test_process_failure(self, project, options, store, notifier, progress_handles):
        output = json.dumps({"status": 1, "message": "No default org"})
        jobs = FakeJobFactory(("", 0), (output, 1))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_changed()

        assert result.status == DeployStatus.PROCESS_FAILED
        assert notifier.messages[-1] == (
            "Deployment failed (status code 1): No default org", Severity.ERROR,
        )


class TestDeploySelected:
    """Selected set deployments"""

    @pytest.mark.asyncio
    async def test_marks_files_and_deploys_manifest(self, project, options, store, notifier,
                                                    progress_handles):
        jobs = FakeJobFactory(("", 0), (deploy_payload(), 0))
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_selected(["Foo.cls", "Missing.cls", "classes/Foo.cls"])

        assert result.success
        assert notifier.messages[0] == ("Could not find index entry for: Missing.cls", Severity.WARNING)
        assert source_file(project).read_text(encoding="utf-8") == "public class Foo {}\n\n"
        assert source_file(project, "Bar.cls").read_text(encoding="utf-8") == "public class Bar {}\n"
        assert jobs.jobs[1].args[3:5] == ["--manifest", str(options.delta_manifest_path)]
        handle = progress_handles[0]
        assert handle.title == "Selected metadata"
        assert ("Deploying selected files...", 50) in handle.reports

    @pytest.mark.asyncio
    async def test_mark_failure_ends_deployment(self, project, options, store, notifier,
                                                progress_handles, monkeypatch):
        monkeypatch.setattr(
            "sf_deploy.services.deploy_service.mark_files_dirty",
            lambda files: (False, files[0]),
        )
        jobs = FakeJobFactory()
        service = make_service(options, store, notifier, jobs)

        result = await service.deploy_selected(["Foo.cls"])

        assert result.status == DeployStatus.PREPARATION_FAILED
        assert jobs.jobs == []
        assert notifier.messages[-1][0].startswith("Failed to open file for modification:")
        assert progress_handles[0].finish_calls == 1
        assert not service.is_running
