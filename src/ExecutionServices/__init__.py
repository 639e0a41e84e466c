"""
Execution services: configuration registry, job dispatch and job status.
"""

from .base_service import ExecutionService
from .local_service import LocalExecutionService, CommandSolver
from .timeout_service import TimeoutExecutionService

__all__ = [
    'ExecutionService',
    'LocalExecutionService',
    'CommandSolver',
    'TimeoutExecutionService'
]
