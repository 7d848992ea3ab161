"""Global constants for sf-deploy"""

from enum import Enum

APP_NAME = "sf-deploy"
LOG_FORMAT = "%(message)s"

# Project identification
PROJECT_CONFIG_FILE = ".sf-deploy.yaml"
PROJECT_MARKERS = [
    "sfdx-project.json",
    ".forceignore",
]

# Default configuration values
DEFAULT_SF_CLI_PATH = "sf"
DEFAULT_API_VERSION = "65.0"
DEFAULT_CACHE_DIR = ".sf/sf-deploy"
DEFAULT_DEPLOY_FILE = "deploy.json"
DEFAULT_DELTA_DIR = "delta"
DEFAULT_SOURCE_DIR = "force-app"

# Manifest location inside the delta output directory
DELTA_MANIFEST_RELATIVE_PATH = ("package", "package.xml")

# Environment variables
ENV_SF_CLI_PATH = "SF_DEPLOY_CLI_PATH"
ENV_API_VERSION = "SF_DEPLOY_API_VERSION"
ENV_LOG_LEVEL = "SF_DEPLOY_LOG_LEVEL"

# Deploy command: sf project deploy start
DEPLOY_CMD = ["project", "deploy", "start"]
DEPLOY_ARG_SOURCE_DIR = "-d"
DEPLOY_ARG_MANIFEST = "--manifest"
DEPLOY_ARG_JSON = "--json"
DEPLOY_ARG_API_VERSION = "--api-version"
DEPLOY_ARG_IGNORE_CONFLICTS = "--ignore-conflicts"

# Change detection command: sf sgd source delta
DELTA_CMD = ["sgd", "source", "delta"]
DELTA_ARG_COMPARE = "-c"
DELTA_ARG_FROM = "--from"
DELTA_ARG_OUTPUT_DIR = "--output-dir"
DELTA_HEAD_REF = "HEAD"

# Deploy result payload markers
SOURCE_CONFLICT_ERROR = "SourceConflictError"
RESULT_STATUS_SUCCEEDED = "Succeeded"
PROBLEM_TYPE_ERROR = "Error"

# Diagnostics
DIAGNOSTIC_SOURCE = "sf"
DIAGNOSTIC_END_COL = 255  # the deploy tool never reports an end column
DEFAULT_ERROR_POSITION = 1

# Exit code reported for a command that could not be spawned at all
SPAWN_FAILURE_EXIT_CODE = 127


class Severity(Enum):
    """Severity shared by notifications and diagnostics"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DeploymentVariant(Enum):
    """Kind of logical deployment"""
    SINGLE_FILE = "single_file"
    CHANGED_SET = "changed_set"
    SELECTED_SET = "selected_set"


# Error codes
class ErrorCode:
    CONFIG_FORMAT_ERROR = "SD001"
    PROJECT_NOT_FOUND = "SD002"
    VALIDATION_FAILED = "SD003"
    DEPLOYMENT_IN_PROGRESS = "SD004"
    CLI_NOT_FOUND = "SD005"
    EMPTY_SELECTION = "SD006"


# Progress percentages per stage
PROGRESS_START = 0
PROGRESS_MANIFEST = 10
PROGRESS_MANIFEST_DONE = 20
PROGRESS_DEPLOYING = {
    DeploymentVariant.SINGLE_FILE: 50,
    DeploymentVariant.CHANGED_SET: 30,
    DeploymentVariant.SELECTED_SET: 50,
}
PROGRESS_CHECKING = 90
PROGRESS_DONE = 100

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_INFO = "ℹ"

# Progress titles
TITLE_CHANGED = "Changed metadata"
TITLE_SELECTED = "Selected metadata"

# Messages templates
MSG_STARTING = "Starting deployment..."
MSG_PREPARING_MANIFEST = "Preparing manifest..."
MSG_DEPLOYING = "Deploying..."
MSG_DEPLOYING_SELECTED = "Deploying selected files..."
MSG_CHECKING_RESULT = "Checking deployment result..."
MSG_DEPLOY_SUCCESS = "Deployment successful"
MSG_DEPLOY_SUCCESS_FILE = "Deployment successful: {file}"
MSG_DEPLOY_FAILED = "Deployment failed"
MSG_DEPLOY_FAILED_FILE = "Deployment failed for file: {file}"
MSG_DEPLOY_FAILED_STATUS = "Deployment failed (status code {code})"
MSG_PARSE_FAILED = "Failed to parse deployment result"
MSG_PARSE_FAILED_FILE = "Failed to parse deployment result for file: {file}"
MSG_SOURCE_CONFLICT = "Source conflicts detected: {message}"
MSG_SOURCE_CONFLICT_SHORT = "Source conflicts detected"
MSG_MANIFEST_SUCCESS = "Manifest prepared successfully"
MSG_MANIFEST_FAILED = "Failed to prepare manifest"
MSG_ALREADY_RUNNING = "A deployment is already in progress. Please wait for it to finish."
MSG_CLI_NOT_FOUND = "SF CLI not found. Please install it."
MSG_EMPTY_SELECTION = "No valid, indexed files found in the selection list."
MSG_MISSING_INDEX = "Could not find index entry for: {files}"
MSG_MARK_DIRTY_FAILED = "Failed to open file for modification: {file}"
