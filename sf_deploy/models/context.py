"""Per-invocation deployment context"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import DeployOptions
from ..constants import DeploymentVariant, TITLE_CHANGED, TITLE_SELECTED


@dataclass
class DeploymentContext:
    """State owned by exactly one deploy invocation

    Created when the invocation passes validation and dropped once its
    stage chain reaches a terminal state.
    """

    variant: DeploymentVariant
    options: DeployOptions
    progress: Any
    subject: Union[str, List[str], None] = None
    force: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def current_file(self) -> Optional[str]:
        if self.variant == DeploymentVariant.SINGLE_FILE:
            return self.subject
        return None

    @property
    def files(self) -> List[str]:
        if self.variant == DeploymentVariant.SELECTED_SET:
            return list(self.subject or [])
        return []

    @property
    def display_name(self) -> Optional[str]:
        """File name shown in notifications of single file deployments"""
        if self.current_file:
            return Path(self.current_file).name
        return None


def context_title(variant: DeploymentVariant, subject: Union[str, List[str], None] = None) -> str:
    """Progress title for a deployment"""
    if variant == DeploymentVariant.SINGLE_FILE and subject:
        return Path(subject).name
    if variant == DeploymentVariant.CHANGED_SET:
        return TITLE_CHANGED
    if variant == DeploymentVariant.SELECTED_SET:
        return TITLE_SELECTED
    return "Metadata deployment"
