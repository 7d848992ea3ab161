# sf_deploy/services/__init__.py
"""Business logic services for sf-deploy"""

from .config_service import ConfigService
from .deploy_service import DeployService, StageOutcome
from .notifier import Notifier, LogNotifier, ConsoleNotifier

__all__ = [
    "ConfigService",
    "DeployService",
    "StageOutcome",
    "Notifier",
    "LogNotifier",
    "ConsoleNotifier",
]
