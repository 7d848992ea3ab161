"""Shared fixtures and fakes for sf-deploy tests"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from sf_deploy.constants import Severity
from sf_deploy.core.diagnostics import DiagnosticsSink, DiagnosticsStore
from sf_deploy.core.process import JobState
from sf_deploy.core.progress import ProgressHandle
from sf_deploy.models import DeployOptions
from sf_deploy.services.notifier import Notifier


class FakeJob:
    """Job stand-in returning scripted output without spawning anything"""

    def __init__(self, factory: "FakeJobFactory", command, args=None, cwd=None, env=None):
        self.factory = factory
        self.command = command
        self.args = [str(arg) for arg in (args or [])]
        self.cwd = str(cwd) if cwd else None
        self.env = env
        self.state = JobState.NOT_STARTED
        self.stdout_lines: List[str] = []
        self.stderr_lines: List[str] = []
        self.exit_code: Optional[int] = None
        self._stdout_text = ""

    @property
    def argv(self) -> List[str]:
        return [self.command, *self.args]

    @property
    def stdout_text(self) -> str:
        return self._stdout_text

    def start(self, on_exit=None) -> asyncio.Future:
        if self.state != JobState.NOT_STARTED:
            raise RuntimeError("Job already started")
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self.state = JobState.RUNNING
        stdout, exit_code = self.factory.next_response()

        async def finish():
            if self.factory.gate is not None:
                await self.factory.gate.wait()
            self._stdout_text = stdout
            self.stdout_lines = stdout.splitlines()
            self.exit_code = exit_code
            self.state = JobState.EXITED
            if on_exit is not None:
                on_exit(list(self.stdout_lines), [], exit_code)
            future.set_result(exit_code)

        loop.create_task(finish())
        return future


class FakeJobFactory:
    """Creates FakeJobs answering with queued (stdout, exit_code) pairs"""

    def __init__(self, *responses: Tuple[str, int]):
        self.responses = list(responses)
        self.jobs: List[FakeJob] = []
        self.gate: Optional[asyncio.Event] = None

    def __call__(self, command, args=None, cwd=None, env=None) -> FakeJob:
        job = FakeJob(self, command, args, cwd, env)
        self.jobs.append(job)
        return job

    def next_response(self) -> Tuple[str, int]:
        if not self.responses:
            raise AssertionError("No scripted response left for job")
        return self.responses.pop(0)

    def hold(self) -> asyncio.Event:
        """Keep every started job running until the returned event is set"""
        self.gate = asyncio.Event()
        return self.gate


class RecordingNotifier(Notifier):
    """Notifier remembering every (message, severity) pair"""

    def __init__(self):
        self.messages: List[Tuple[str, Severity]] = []

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self.messages.append((message, severity))

    @property
    def texts(self) -> List[str]:
        return [message for message, _ in self.messages]


class RecordingSink(DiagnosticsSink):
    """Diagnostics sink remembering what was published"""

    def __init__(self):
        self.published = []
        self.clear_count = 0

    def publish(self, file_name, diagnostics) -> None:
        self.published.append((file_name, diagnostics))

    def clear(self) -> None:
        self.clear_count += 1


class RecordingProgressHandle(ProgressHandle):
    """Progress handle recording reports and finish calls"""

    def __init__(self, title: str):
        super().__init__(title)
        self.reports: List[Tuple[str, Optional[int]]] = []
        self.finish_calls = 0

    def report(self, message: str, percentage: Optional[int] = None) -> None:
        self.reports.append((message, percentage))
        super().report(message, percentage)

    def finish(self) -> None:
        self.finish_calls += 1
        super().finish()


def deploy_payload(status: str = "Succeeded", success: bool = True, **result) -> str:
    """JSON output of a deploy command"""
    return json.dumps({"status": 0, "result": {"status": status, "success": success, **result}})


def failure_payload(component_failures=None, files=None) -> str:
    """JSON output of a deploy command that failed with component errors"""
    result = {"status": "Failed", "success": False}
    if component_failures is not None:
        result["details"] = {"componentFailures": component_failures}
    if files is not None:
        result["files"] = files
    return json.dumps({"status": 1, "result": result})


@pytest.fixture
def project(tmp_path) -> Path:
    """Minimal project tree with a couple of source files"""
    (tmp_path / "sfdx-project.json").write_text("{}", encoding="utf-8")
    classes = tmp_path / "force-app" / "main" / "default" / "classes"
    classes.mkdir(parents=True)
    (classes / "Foo.cls").write_text("public class Foo {}\n", encoding="utf-8")
    (classes / "Bar.cls").write_text("public class Bar {}\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def options(project) -> DeployOptions:
    return DeployOptions(project_root=str(project))


@pytest.fixture
def store() -> DiagnosticsStore:
    return DiagnosticsStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def progress_handles(monkeypatch) -> List[RecordingProgressHandle]:
    """Replace the progress factory used by the deploy service"""
    handles: List[RecordingProgressHandle] = []

    def factory(title, progress=None):
        handle = RecordingProgressHandle(title)
        handles.append(handle)
        return handle

    monkeypatch.setattr("sf_deploy.services.deploy_service.create_progress_handle", factory)
    return handles


@pytest.fixture
def resolve_found():
    """CLI resolver that always finds the executable"""
    return lambda cli_path: "/usr/bin/sf"
