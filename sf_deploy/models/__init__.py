# sf_deploy/models/__init__.py
"""Data models for sf-deploy"""

from .config import DeployOptions
from .context import DeploymentContext, context_title
from .failure import FailureRecord, DiagnosticRecord, merge_failure_record
from .result import (
    ClassifiedResult,
    Success,
    SourceConflict,
    ComponentFailures,
    ProcessFailure,
    ParseFailure,
    DeployStatus,
    DeployResult,
)

__all__ = [
    # Config models
    "DeployOptions",

    # Context
    "DeploymentContext",
    "context_title",

    # Failure models
    "FailureRecord",
    "DiagnosticRecord",
    "merge_failure_record",

    # Result models
    "ClassifiedResult",
    "Success",
    "SourceConflict",
    "ComponentFailures",
    "ProcessFailure",
    "ParseFailure",
    "DeployStatus",
    "DeployResult",
]
