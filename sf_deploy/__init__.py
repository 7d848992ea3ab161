"""sf-deploy - Deploy Salesforce metadata through the sf CLI.

Runs single file, changed set and selected set deployments one at a time,
classifies the JSON result of the deploy command and turns component
failures into per-file diagnostics.
"""

from .__version__ import __version__, __version_info__, __license__

# Services
from .services import ConfigService, DeployService, ConsoleNotifier, LogNotifier, Notifier

# Core building blocks
from .core import classify, diagnostics_store, DiagnosticsSink, DiagnosticsStore, FileIndex, Job

# Data models
from .models import (
    DeployOptions,
    DeployResult,
    DeployStatus,
    DiagnosticRecord,
    FailureRecord,
)
from .constants import Severity, DeploymentVariant

# Exceptions
from .api.exceptions import (
    SfDeployError,
    ValidationError,
    DeploymentInProgressError,
    CliNotFoundError,
    EmptySelectionError,
    ConfigError,
    ProjectNotFoundError,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__license__",

    # Services
    "ConfigService",
    "DeployService",
    "ConsoleNotifier",
    "LogNotifier",
    "Notifier",

    # Core
    "classify",
    "diagnostics_store",
    "DiagnosticsSink",
    "DiagnosticsStore",
    "FileIndex",
    "Job",

    # Data models
    "DeployOptions",
    "DeployResult",
    "DeployStatus",
    "DiagnosticRecord",
    "FailureRecord",
    "Severity",
    "DeploymentVariant",

    # Exceptions
    "SfDeployError",
    "ValidationError",
    "DeploymentInProgressError",
    "CliNotFoundError",
    "EmptySelectionError",
    "ConfigError",
    "ProjectNotFoundError",
]
