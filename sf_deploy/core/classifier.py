# sf_deploy/core/classifier.py
"""Classification of deploy tool output"""

import json
import logging
from typing import Any, Mapping

from .diagnostics import extract
from ..constants import RESULT_STATUS_SUCCEEDED, SOURCE_CONFLICT_ERROR
from ..models.result import (
    ClassifiedResult,
    ComponentFailures,
    ParseFailure,
    ProcessFailure,
    SourceConflict,
    Success,
)

logger = logging.getLogger(__name__)


def _get(data: Any, *keys: str) -> Any:
    """Nested lookup that yields None on any missing level"""
    for key in keys:
        if not isinstance(data, Mapping):
            return None
        data = data.get(key)
    return data


def classify(stdout_text: str, exit_code: int) -> ClassifiedResult:
    """Classify the JSON printed by ``sf project deploy start --json``

    Rules, in order:

    1. output that does not decode to a JSON object is a ParseFailure,
       whatever the exit code;
    2. a ``SourceConflictError`` payload is a SourceConflict, even when it
       also carries a successful looking ``result``;
    3. ``result.status == "Succeeded"`` with ``result.success`` true is a
       Success;
    4. otherwise component failures are extracted when the payload carries
       ``result.details.componentFailures`` or ``result.files``; without
       either, a non-zero exit code is a ProcessFailure.

    Args:
        stdout_text: Complete standard output of the deploy command
        exit_code: Exit code of the deploy command

    Returns:
        Classified result
    """
    try:
        payload = json.loads(stdout_text)
    except (TypeError, ValueError):
        logger.debug("Deploy output is not JSON (exit code %s)", exit_code)
        return ParseFailure(raw_output=stdout_text or "")

    if not isinstance(payload, dict):
        logger.debug("Deploy output is JSON but not an object: %r", type(payload).__name__)
        return ParseFailure(raw_output=stdout_text)

    if payload.get("name") == SOURCE_CONFLICT_ERROR:
        return SourceConflict(message=str(payload.get("message") or ""))

    result = payload.get("result")
    if _get(result, "status") == RESULT_STATUS_SUCCEEDED and _get(result, "success") is True:
        return Success(payload=payload)

    component_failures = _get(result, "details", "componentFailures")
    files = _get(result, "files")
    # A single failure is sometimes reported as an object instead of a list
    if isinstance(component_failures, Mapping):
        component_failures = [component_failures]

    if component_failures is None and files is None:
        if exit_code != 0:
            return ProcessFailure(exit_code=exit_code, message=payload.get("message"))
        return ComponentFailures(records={})

    return ComponentFailures(records=extract(component_failures, files))
