"""Core functionality for sf-deploy"""

from .process import Job, JobState
from .progress import ProgressHandle, RichProgressHandle, create_progress_handle
from .single_flight import SingleFlight
from .classifier import classify
from .diagnostics import (
    extract,
    to_diagnostic,
    to_diagnostics,
    DiagnosticsSink,
    DiagnosticsStore,
    diagnostics_store,
)
from .file_index import FileIndex
from .cli_resolver import resolve_cli
from .workspace import find_project_root, mark_files_dirty, write_deploy_output, read_deploy_output

__all__ = [
    "Job",
    "JobState",
    "ProgressHandle",
    "RichProgressHandle",
    "create_progress_handle",
    "SingleFlight",
    "classify",
    "extract",
    "to_diagnostic",
    "to_diagnostics",
    "DiagnosticsSink",
    "DiagnosticsStore",
    "diagnostics_store",
    "FileIndex",
    "resolve_cli",
    "find_project_root",
    "mark_files_dirty",
    "write_deploy_output",
    "read_deploy_output",
]
