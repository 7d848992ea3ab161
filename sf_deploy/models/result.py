"""Result models for deployment operations"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .failure import DiagnosticRecord, FailureRecord


# Classified deploy tool output. Exactly one of these describes any
# (stdout, exit code) pair.

@dataclass(frozen=True)
class Success:
    """Deployment succeeded"""
    payload: Dict[str, Any]


@dataclass(frozen=True)
class SourceConflict:
    """The target has changes that conflict with the local source"""
    message: str


@dataclass(frozen=True)
class ComponentFailures:
    """Deployment failed with per-component errors"""
    records: Dict[str, FailureRecord] = field(default_factory=dict)


@dataclass(frozen=True)
class ProcessFailure:
    """Deployment failed without any component detail"""
    exit_code: int
    message: Optional[str] = None


@dataclass(frozen=True)
class ParseFailure:
    """Deploy tool output was not a JSON object"""
    raw_output: str = ""


ClassifiedResult = Union[Success, SourceConflict, ComponentFailures, ProcessFailure, ParseFailure]


class DeployStatus(Enum):
    """Terminal state of one logical deployment"""
    SUCCEEDED = "succeeded"
    COMPONENT_FAILURES = "component_failures"
    SOURCE_CONFLICT = "source_conflict"
    PROCESS_FAILED = "process_failed"
    PARSE_FAILED = "parse_failed"
    MANIFEST_FAILED = "manifest_failed"
    PREPARATION_FAILED = "preparation_failed"


STATUS_BY_OUTCOME = {
    Success: DeployStatus.SUCCEEDED,
    SourceConflict: DeployStatus.SOURCE_CONFLICT,
    ComponentFailures: DeployStatus.COMPONENT_FAILURES,
    ProcessFailure: DeployStatus.PROCESS_FAILED,
    ParseFailure: DeployStatus.PARSE_FAILED,
}


@dataclass
class DeployResult:
    """Result of one deploy operation"""

    status: DeployStatus
    message: str = ""
    outcome: Optional[ClassifiedResult] = None
    diagnostics: Dict[str, List[DiagnosticRecord]] = field(default_factory=dict)
    exit_code: Optional[int] = None
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.status == DeployStatus.SUCCEEDED

    @property
    def diagnostic_count(self) -> int:
        return sum(len(records) for records in self.diagnostics.values())

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def complete(self) -> 'DeployResult':
        """Mark operation as complete"""
        self.end_time = datetime.now()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "status": self.status.value,
            "success": self.success,
            "message": self.message,
            "duration": self.duration,
            "diagnostics": {
                name: [d.to_dict() for d in records]
                for name, records in self.diagnostics.items()
            },
        }
        if self.exit_code is not None:
            data["exit_code"] = self.exit_code
        return data
