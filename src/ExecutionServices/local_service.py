"""
Local Execution Service

In-memory configuration registry with jobs run on a thread pool.
Used by the CLI and as a deterministic service in tests.
"""

import copy
import itertools
import shlex
import subprocess
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ga_constants import ExecutionConstants, JobStatus
from ga_exceptions import ExecutionServiceError
from ga_logging import get_logger
from ga_components.individual import JobOutcome
from ExecutionServices.base_service import ExecutionService


# solver(config, instance_id, seed, cpu_time_limit) -> (result_time, result_code)
Solver = Callable[[Any, int, int, float], Tuple[float, int]]


@dataclass
class _RegistryEntry:
    config: Any
    name: str
    cost: Optional[float] = None
    cost_tag: Optional[str] = None


@dataclass
class _Job:
    registry_id: int
    instance_id: int
    seed: int
    cpu_time_limit: float
    future: Future = field(repr=False)


class LocalExecutionService(ExecutionService):
    """
    Runs a solver callable for every dispatched job.

    Registry ids and job handles both start at 1. Job status follows the
    experiment database codes: -1 not started, 0 running, 1 finished,
    2 crashed, 21 time limit exceeded. A job is released once its terminal
    outcome has been reported.
    """

    def __init__(self, solver: Solver, instance_ids: Iterable[int],
                 max_workers: int = ExecutionConstants.DEFAULT_LOCAL_WORKERS):
        self.solver = solver
        self.instance_ids = list(instance_ids)
        self.logger = get_logger("LocalExecutionService")

        self._lock = threading.Lock()
        self._registry: Dict[int, _RegistryEntry] = {}
        self._ids_by_config: Dict[Any, int] = {}
        self._jobs: Dict[int, _Job] = {}
        self._registry_ids = itertools.count(1)
        self._handles = itertools.count(1)
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

    def exists(self, config: Any) -> int:
        with self._lock:
            return self._ids_by_config.get(config, 0)

    def register(self, config: Any, name: str) -> int:
        stored = copy.deepcopy(config)
        with self._lock:
            if stored in self._ids_by_config:
                raise ExecutionServiceError(f"Configuration {name} is already registered",
                                            registry_id=self._ids_by_config[stored])
            registry_id = next(self._registry_ids)
            self._registry[registry_id] = _RegistryEntry(stored, name)
            self._ids_by_config[stored] = registry_id
        return registry_id

    def dispatch(self, registry_id: int, instance_id: int, seed: int, cpu_time_limit: float) -> int:
        entry = self._entry(registry_id)
        future = self._executor.submit(self._run, copy.deepcopy(entry.config), entry.name,
                                       instance_id, seed, cpu_time_limit)
        with self._lock:
            handle = next(self._handles)
            self._jobs[handle] = _Job(registry_id, instance_id, seed, cpu_time_limit, future)
        return handle

    def _run(self, config: Any, name: str, instance_id: int, seed: int, cpu_time_limit: float) -> JobOutcome:
        """Execute one job and translate the solver result into an outcome."""
        try:
            result_time, result_code = self.solver(config, instance_id, seed, cpu_time_limit)
        except Exception as e:
            self.logger.warning("Solver crashed", name=name, instance=instance_id, seed=seed, error=str(e))
            return JobOutcome(JobStatus.CRASHED, cpu_time_limit, JobStatus.RESULT_FAILURE, cpu_time_limit)

        if result_code == JobStatus.RESULT_TIME_LIMIT or result_time > cpu_time_limit:
            return JobOutcome(JobStatus.TIME_LIMIT_EXCEEDED, cpu_time_limit,
                              JobStatus.RESULT_TIME_LIMIT, cpu_time_limit)
        return JobOutcome(JobStatus.FINISHED, float(result_time), int(result_code), cpu_time_limit)

    def poll_status(self, handles: Iterable[int]) -> Dict[int, JobOutcome]:
        response = {}
        with self._lock:
            jobs = {handle: self._jobs[handle] for handle in handles if handle in self._jobs}

        finished = []
        for handle, job in jobs.items():
            if job.future.done():
                response[handle] = job.future.result()
                finished.append(handle)
            elif job.future.running():
                response[handle] = JobOutcome(JobStatus.RUNNING, cpu_time_limit=job.cpu_time_limit)
            else:
                response[handle] = JobOutcome(JobStatus.NOT_STARTED, cpu_time_limit=job.cpu_time_limit)

        # a terminal outcome is reported once; later polls omit the handle
        with self._lock:
            for handle in finished:
                self._jobs.pop(handle, None)
        return response

    def set_cost(self, registry_id: int, cost: float, cost_tag: str):
        entry = self._entry(registry_id)
        with self._lock:
            entry.cost = cost
            entry.cost_tag = cost_tag

    def get_cost(self, registry_id: int) -> Optional[float]:
        return self._entry(registry_id).cost

    def get_best_configs(self, cost_tag: str, k: int) -> List[int]:
        with self._lock:
            ranked = sorted(
                (entry.cost, registry_id) for registry_id, entry in self._registry.items()
                if entry.cost is not None and entry.cost_tag == cost_tag
            )
        return [registry_id for _, registry_id in ranked[:k]]

    def get_name(self, registry_id: int) -> str:
        return self._entry(registry_id).name

    def get_configuration(self, registry_id: int) -> Any:
        return copy.deepcopy(self._entry(registry_id).config)

    def get_instance_ids(self) -> List[int]:
        return list(self.instance_ids)

    def _entry(self, registry_id: int) -> _RegistryEntry:
        with self._lock:
            entry = self._registry.get(registry_id)
        if entry is None:
            raise ExecutionServiceError(f"Unknown registry id {registry_id}", registry_id=registry_id)
        return entry

    def shutdown(self, wait: bool = True):
        """Stop the worker pool."""
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()


class CommandSolver:
    """
    Runs an external solver command for one job.

    The command template may use ``{instance}``, ``{seed}`` and ``{params}``.
    Wall-clock time is reported as the result time; exit code 0 within the
    CPU time limit counts as success.
    """

    def __init__(self, command_template: str, instances: Dict[int, str],
                 format_params: Callable[[Any], str]):
        if not command_template:
            raise ValueError("command_template cannot be empty")
        self.command_template = command_template
        self.instances = instances
        self.format_params = format_params
        self.logger = get_logger("CommandSolver")

    def build_command(self, config: Any, instance_id: int, seed: int) -> List[str]:
        """Expand the template into an argument list."""
        try:
            instance_path = self.instances[instance_id]
        except KeyError:
            raise ExecutionServiceError(f"Unknown instance id {instance_id}")
        command = self.command_template.format(
            instance=shlex.quote(instance_path),
            seed=seed,
            params=self.format_params(config)
        )
        return shlex.split(command)

    def __call__(self, config: Any, instance_id: int, seed: int, cpu_time_limit: float) -> Tuple[float, int]:
        command = self.build_command(config, instance_id, seed)
        start_time = time.time()
        try:
            completed = subprocess.run(command, capture_output=True, text=True, timeout=cpu_time_limit)
        except subprocess.TimeoutExpired:
            self.logger.debug("Solver run timed out", command=' '.join(command))
            return cpu_time_limit, JobStatus.RESULT_TIME_LIMIT
        elapsed = time.time() - start_time

        if completed.returncode != 0:
            self.logger.debug("Solver run failed", command=' '.join(command), returncode=completed.returncode)
            return elapsed, JobStatus.RESULT_FAILURE
        return elapsed, JobStatus.RESULT_SUCCESS
