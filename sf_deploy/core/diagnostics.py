# sf_deploy/core/diagnostics.py
"""Extraction and storage of deployment diagnostics"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..constants import DEFAULT_ERROR_POSITION, PROBLEM_TYPE_ERROR, Severity
from ..models.failure import DiagnosticRecord, FailureRecord, merge_failure_record

logger = logging.getLogger(__name__)


def _to_position(value: Any) -> Optional[int]:
    """Parse a 1-based line or column; the deploy tool reports them as strings"""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring invalid position %r", value)
        return None


def file_name_of(path: str) -> str:
    """Last path segment of a slash or backslash separated path"""
    return path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


def extract(component_failures: Optional[Iterable[Mapping[str, Any]]],
            files: Optional[Iterable[Mapping[str, Any]]]) -> Dict[str, FailureRecord]:
    """Build failure records keyed by component full name

    Component failures contribute name, position and type; file entries with
    a non-empty ``error`` contribute path and message. Both are merged with
    :func:`merge_failure_record`, so the first value reported for a field
    is kept.

    Args:
        component_failures: ``result.details.componentFailures`` entries
        files: ``result.files`` entries

    Returns:
        Failure records keyed by full name
    """
    records: Dict[str, FailureRecord] = {}

    for failure in component_failures or []:
        full_name = failure.get("fullName") if isinstance(failure, Mapping) else None
        if not full_name:
            logger.debug("Skipping component failure without fullName: %r", failure)
            continue
        incoming = FailureRecord(
            component_full_name=full_name,
            file_name=failure.get("fileName"),
            error_line=_to_position(failure.get("lineNumber")),
            error_column=_to_position(failure.get("columnNumber")),
            error_type=failure.get("problemType"),
            component_type=failure.get("componentType"),
        )
        records[full_name] = merge_failure_record(records.get(full_name), incoming)

    for entry in files or []:
        if not isinstance(entry, Mapping) or not entry.get("error"):
            continue
        full_name = entry.get("fullName")
        if not full_name:
            continue
        incoming = FailureRecord(
            component_full_name=full_name,
            file_path=entry.get("filePath"),
            error_message=entry.get("error"),
        )
        records[full_name] = merge_failure_record(records.get(full_name), incoming)

    logger.debug("Extracted %d failure record(s)", len(records))
    return records


def to_diagnostic(record: FailureRecord, severity: Severity = Severity.ERROR) -> DiagnosticRecord:
    """Convert one failure record into a zero-based diagnostic"""
    line = record.error_line if record.error_line is not None else DEFAULT_ERROR_POSITION
    col = record.error_column if record.error_column is not None else DEFAULT_ERROR_POSITION
    owner = record.file_path or record.file_name or record.component_full_name

    return DiagnosticRecord(
        severity=severity,
        message=record.error_message or "",
        line=max(line - 1, 0),
        col=max(col - 1, 0),
        file_name=file_name_of(owner),
    )


def to_diagnostics(records: Mapping[str, FailureRecord]) -> Dict[str, List[DiagnosticRecord]]:
    """Diagnostics for every ``Error`` typed record, keyed by file name

    Records of any other problem type (warnings, for instance) are skipped
    individually; the records after them are still converted.
    """
    diagnostics: Dict[str, List[DiagnosticRecord]] = {}

    for record in records.values():
        if record.error_type != PROBLEM_TYPE_ERROR:
            logger.debug("Skipping %s failure of %s", record.error_type, record.component_full_name)
            continue
        diagnostic = to_diagnostic(record)
        diagnostics.setdefault(diagnostic.file_name, []).append(diagnostic)

    return diagnostics


class DiagnosticsSink:
    """Receiver of published diagnostics (an editor, a report...)"""

    def publish(self, file_name: str, diagnostics: List[DiagnosticRecord]) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        pass


class DiagnosticsStore:
    """Diagnostics of the last deployments, keyed by file name

    Entries accumulate until :meth:`clear` is called, which every deploy
    does before it starts.
    """

    def __init__(self):
        self._store: Dict[str, List[DiagnosticRecord]] = {}
        self._sinks: List[DiagnosticsSink] = []

    def add_sink(self, sink: DiagnosticsSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: DiagnosticsSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def clear(self) -> None:
        """Forget all diagnostics"""
        self._store = {}
        for sink in self._sinks:
            sink.clear()

    def set_diagnostics(self, diagnostics: Mapping[str, List[DiagnosticRecord]]) -> None:
        """Add diagnostics and publish the affected files to every sink"""
        for file_name, records in diagnostics.items():
            self._store.setdefault(file_name, []).extend(records)

        for file_name in diagnostics:
            for sink in self._sinks:
                sink.publish(file_name, list(self._store[file_name]))

    def get(self, file_name: str) -> List[DiagnosticRecord]:
        return list(self._store.get(file_name, []))

    def is_empty(self) -> bool:
        return not self._store

    def __len__(self) -> int:
        return sum(len(records) for records in self._store.values())

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Convert to dictionary"""
        return {
            name: [d.to_dict() for d in records]
            for name, records in self._store.items()
        }


# Process-wide store shared by every deploy service
diagnostics_store = DiagnosticsStore()
