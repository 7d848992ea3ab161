"""Exception definitions for sf-deploy API"""

from ..constants import ErrorCode, MSG_ALREADY_RUNNING, MSG_CLI_NOT_FOUND, MSG_EMPTY_SELECTION


class SfDeployError(Exception):
    """Base exception for sf-deploy"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ValidationError(SfDeployError):
    """A deployment was rejected before any process was spawned"""

    def __init__(self, message: str, error_code: str = ErrorCode.VALIDATION_FAILED):
        super().__init__(message, error_code)


class DeploymentInProgressError(ValidationError):
    """Another deployment still holds the single-flight guard"""

    def __init__(self, message: str = MSG_ALREADY_RUNNING):
        super().__init__(message, ErrorCode.DEPLOYMENT_IN_PROGRESS)


class CliNotFoundError(ValidationError):
    """The deploy CLI cannot be resolved to an executable"""

    def __init__(self, cli_path: str, message: str = MSG_CLI_NOT_FOUND):
        super().__init__(message, ErrorCode.CLI_NOT_FOUND)
        self.cli_path = cli_path


class EmptySelectionError(ValidationError):
    """No entry of the selection list resolved to an indexed file"""

    def __init__(self, missing_files=None):
        self.missing_files = list(missing_files or [])
        message = MSG_EMPTY_SELECTION
        if self.missing_files:
            message += " Missing indexed files: " + ", ".join(self.missing_files)
        super().__init__(message, ErrorCode.EMPTY_SELECTION)


class ConfigError(SfDeployError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_FORMAT_ERROR)


class ProjectNotFoundError(SfDeployError):
    """Project root not found error"""

    def __init__(self, message: str = None):
        if message is None:
            message = (
                "No Salesforce project found. Please ensure:\n"
                "1. You are inside a project directory\n"
                "2. The project root contains sfdx-project.json or .forceignore\n"
                "3. Or use --project-root to specify the project location"
            )
        super().__init__(message, ErrorCode.PROJECT_NOT_FOUND)
