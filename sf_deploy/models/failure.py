"""Component failure and diagnostic models"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from ..constants import DIAGNOSTIC_END_COL, DIAGNOSTIC_SOURCE, Severity


@dataclass(frozen=True)
class FailureRecord:
    """Compile or validation failure attributed to one deployable component

    ``error_line`` and ``error_column`` are 1-based, exactly as reported by the
    deploy tool. ``None`` means the field was never reported.
    """

    component_full_name: str
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    error_line: Optional[int] = None
    error_column: Optional[int] = None
    error_type: Optional[str] = None
    component_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def merge_failure_record(existing: Optional[FailureRecord],
                         incoming: FailureRecord) -> FailureRecord:
    """Merge two partial records for the same component, keeping existing values

    Field precedence, applied field by field:

    1. a field already populated on ``existing`` is kept unchanged;
    2. otherwise the value from ``incoming`` is taken;
    3. empty strings count as unpopulated.

    Merging is therefore order dependent: the first sub-record to report a
    field wins. ``component_full_name`` must match.
    """
    if existing is None:
        return incoming
    if existing.component_full_name != incoming.component_full_name:
        raise ValueError(
            f"Cannot merge failures of different components: "
            f"{existing.component_full_name!r} and {incoming.component_full_name!r}"
        )

    updates = {}
    for f in fields(existing):
        current = getattr(existing, f.name)
        if current is None or current == "":
            value = getattr(incoming, f.name)
            if value is not None and value != "":
                updates[f.name] = value

    return replace(existing, **updates) if updates else existing


@dataclass(frozen=True)
class DiagnosticRecord:
    """Editor-facing diagnostic anchored to one file"""

    severity: Severity
    message: str
    line: int  # zero-based
    col: int  # zero-based
    file_name: str
    end_col: int = DIAGNOSTIC_END_COL
    source: str = DIAGNOSTIC_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "severity": self.severity.value,
            "message": self.message,
            "lnum": self.line,
            "col": self.col,
            "end_col": self.end_col,
            "file": self.file_name,
            "source": self.source,
        }
