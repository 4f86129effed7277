"""Infrastructure modules for the content translation service.

Centralized infrastructure components:
- configuration: Settings management (settings, TaskSettings, RetrySettings)
- logging: Structured logging (get_module_logger, bind_request_context)
- operations: Operation results and error classification
- tasks: Task records, stores and lifecycle management
- resilience: Retry ledger and scheduler
- services: Dependency injection services (SettingsDep, TaskManagerDep, get_settings)
"""

# Configuration
from infrastructure.configuration import settings

# Logging
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    # Configuration
    "settings",
    # Logging
    "get_module_logger",
    # Operations
    "OperationResult",
    "OperationStatus",
]
