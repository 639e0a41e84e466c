"""
Timeout Execution Service

Wraps another execution service and gives up on jobs that stay
non-terminal for too long, reporting them as failed runs.
"""

import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from ga_constants import JobStatus
from ga_exceptions import ConfigurationError
from ga_logging import get_logger
from ga_components.individual import JobOutcome
from ExecutionServices.base_service import ExecutionService


class TimeoutExecutionService(ExecutionService):
    """
    Bounded-wait decorator around an execution service.

    A job still non-terminal ``timeout_seconds`` after dispatch is reported
    with status -5 and result code -1, its result time set to the CPU time
    limit so cost functions penalize it like any failed run. Timed out
    outcomes stay sticky for the life of the wrapper; deadlines of jobs
    reported terminal are dropped.
    """

    def __init__(self, service: ExecutionService, timeout_seconds: float,
                 clock: Callable[[], float] = time.monotonic):
        if timeout_seconds <= 0:
            raise ConfigurationError(f"Job timeout ({timeout_seconds}) must be positive")
        self.service = service
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self.logger = get_logger("TimeoutExecutionService")

        self._dispatched: Dict[int, tuple] = {}
        self._timed_out: Dict[int, JobOutcome] = {}

    def dispatch(self, registry_id: int, instance_id: int, seed: int, cpu_time_limit: float) -> int:
        handle = self.service.dispatch(registry_id, instance_id, seed, cpu_time_limit)
        self._dispatched[handle] = (self.clock(), cpu_time_limit)
        return handle

    def poll_status(self, handles: Iterable[int]) -> Dict[int, JobOutcome]:
        handles = list(handles)
        response = dict(self.service.poll_status(
            [handle for handle in handles if handle not in self._timed_out]))
        now = self.clock()

        for handle in handles:
            if handle in self._timed_out:
                response[handle] = self._timed_out[handle]
                continue
            outcome = response.get(handle)
            if outcome is not None and outcome.is_terminal:
                self._dispatched.pop(handle, None)
                continue
            if handle not in self._dispatched:
                continue
            started, cpu_time_limit = self._dispatched[handle]
            if now - started >= self.timeout_seconds:
                del self._dispatched[handle]
                timed_out = JobOutcome(JobStatus.TIMED_OUT_BY_WRAPPER, cpu_time_limit,
                                       JobStatus.RESULT_FAILURE, cpu_time_limit)
                self._timed_out[handle] = timed_out
                response[handle] = timed_out
                self.logger.warning("Job timed out", handle=handle, waited=f"{now - started:.1f}s")
        return response

    def exists(self, config: Any) -> int:
        return self.service.exists(config)

    def register(self, config: Any, name: str) -> int:
        return self.service.register(config, name)

    def set_cost(self, registry_id: int, cost: float, cost_tag: str):
        self.service.set_cost(registry_id, cost, cost_tag)

    def get_cost(self, registry_id: int) -> Optional[float]:
        return self.service.get_cost(registry_id)

    def get_best_configs(self, cost_tag: str, k: int) -> List[int]:
        return self.service.get_best_configs(cost_tag, k)

    def get_name(self, registry_id: int) -> str:
        return self.service.get_name(registry_id)

    def get_configuration(self, registry_id: int) -> Any:
        return self.service.get_configuration(registry_id)

    def get_instance_ids(self) -> List[int]:
        return self.service.get_instance_ids()
