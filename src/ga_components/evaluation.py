"""
Evaluation Module

Scores a population through the execution service with deduplication,
asynchronous job polling and memory monitoring.

Features:
- Deduplication against the configuration registry (no re-dispatch)
- One job per workload entry for every newly registered configuration
- Polling of pending jobs with an injected polling strategy
- Cost aggregation and write-back to registry and population
- Evaluation statistics and performance metrics
"""

import time
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import psutil
from tqdm import tqdm

from ga_constants import ExecutionConstants
from ga_exceptions import EvaluationError, ExecutionServiceError, validate_cost
from ga_logging import get_logger
from ga_components.cost_functions import CostFunction
from ga_components.individual import Individual, JobOutcome
from ga_components.workload import Workload


class PollingStrategy:
    """
    How the poller waits between status requests.

    The sleep function is injectable so tests can poll without waiting.
    """

    def __init__(self, interval: float = ExecutionConstants.DEFAULT_POLL_INTERVAL_SECONDS,
                 sleep: Callable[[float], None] = time.sleep):
        self.interval = interval
        self.sleep = sleep

    def wait(self):
        if self.interval > 0:
            self.sleep(self.interval)


class JobPoller:
    """Blocks until every dispatched job handle has reached a terminal state."""

    def __init__(self, service: Any, strategy: Optional[PollingStrategy] = None,
                 show_progress: bool = True):
        self.service = service
        self.strategy = strategy or PollingStrategy()
        self.show_progress = show_progress
        self.logger = get_logger("JobPoller")

        self.stats = {
            'polls': 0,
            'total_wait_time': 0.0,
            'peak_memory_usage': 0.0
        }

    def await_all(self, handles: Iterable[int], description: str = "Awaiting jobs") -> Tuple[Dict[int, JobOutcome], float]:
        """
        Poll the execution service until all handles are terminal.

        A handle missing from a poll response counts as not yet terminal.
        There is no timeout; a job that never terminates blocks forever
        unless the service is wrapped in a TimeoutExecutionService.

        Args:
            handles: Job handles to wait for
            description: Progress bar label

        Returns:
            Tuple of (terminal outcome per handle, peak memory in GB)
        """
        pending = list(dict.fromkeys(handles))
        outcomes: Dict[int, JobOutcome] = {}
        peak_memory = self._sample_memory(0.0)

        if not pending:
            return outcomes, peak_memory

        start_time = time.time()
        with tqdm(total=len(pending), desc=description, disable=not self.show_progress) as progress:
            while True:
                try:
                    response = self.service.poll_status(pending)
                except ExecutionServiceError:
                    raise
                except Exception as e:
                    raise ExecutionServiceError(f"Polling {len(pending)} job(s) failed: {e}") from e
                self.stats['polls'] += 1
                peak_memory = self._sample_memory(peak_memory)

                still_pending = []
                for handle in pending:
                    outcome = response.get(handle)
                    if outcome is not None and outcome.is_terminal:
                        outcomes[handle] = outcome
                    else:
                        still_pending.append(handle)

                progress.update(len(pending) - len(still_pending))
                pending = still_pending
                if not pending:
                    break

                self.logger.debug("Jobs still pending", pending=len(pending), finished=len(outcomes))
                self.strategy.wait()

        self.stats['total_wait_time'] += time.time() - start_time
        self.stats['peak_memory_usage'] = max(self.stats['peak_memory_usage'], peak_memory)
        return outcomes, peak_memory

    @staticmethod
    def _sample_memory(peak_memory: float) -> float:
        """Update the peak with the resident memory of this process in GB."""
        try:
            memory_gb = psutil.Process().memory_info().rss / 1024**3
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return peak_memory
        return max(peak_memory, memory_gb)


class EvaluationEngine:
    """
    Evaluation engine for the configurator.

    Registers new configurations with the execution service, dispatches
    their workload, awaits the jobs and writes aggregated costs back.
    """

    def __init__(self, service: Any, parameter_space: Any, workload: Workload,
                 cost_function: CostFunction, cpu_time_limit: float,
                 poller: Optional[JobPoller] = None):
        """
        Initialize evaluation engine.

        Args:
            service: Execution service (registry, dispatch, results)
            parameter_space: Provider used for canonical configuration names
            workload: Workload shared by every individual
            cost_function: Aggregation of job outcomes into a cost
            cpu_time_limit: CPU limit passed to every dispatched job
            poller: Job poller; a default one is created if omitted
        """
        self.service = service
        self.parameter_space = parameter_space
        self.workload = workload
        self.cost_function = cost_function
        self.cpu_time_limit = cpu_time_limit
        self.poller = poller or JobPoller(service)
        self.logger = get_logger("EvaluationEngine")

        self.stats = {
            'configs_registered': 0,
            'dedup_hits': 0,
            'jobs_dispatched': 0,
            'batches': 0,
            'total_evaluation_time': 0.0,
            'peak_memory_usage': 0.0
        }

    def evaluate_population(self, population: List[Individual], generation: int) -> float:
        """
        Give every individual of the population a cost.

        Args:
            population: Population to evaluate; updated in place
            generation: Current generation number (1-based)

        Returns:
            Peak memory usage in GB while waiting for jobs
        """
        start_time = time.time()

        job_map, registered, deduplicated = self._dispatch(population, generation)
        self.logger.log_job_batch(generation, registered, deduplicated, len(job_map))

        outcomes, peak_memory = self.poller.await_all(job_map.keys(), description=f"Generation {generation} jobs")

        self._aggregate(population, generation, job_map, outcomes)

        self.stats['batches'] += 1
        self.stats['total_evaluation_time'] += time.time() - start_time
        self.stats['peak_memory_usage'] = max(self.stats['peak_memory_usage'], peak_memory)
        return peak_memory

    def _dispatch(self, population: List[Individual], generation: int) -> Tuple[Dict[int, int], int, int]:
        """Register unregistered individuals and submit their jobs in population order."""
        job_map: Dict[int, int] = {}
        registered = 0
        deduplicated = 0
        entries = self.workload.entries_for(generation)

        for individual in population:
            if individual.is_registered:
                continue

            existing_id = self.service.exists(individual.config)
            if existing_id:
                individual.registry_id = existing_id
                individual.name = self.service.get_name(existing_id)
                individual.cost = None
                deduplicated += 1
                self.stats['dedup_hits'] += 1
                self.logger.log_dedup_hit(individual.name, existing_id)
                continue

            individual.name = f"Gen {generation} {self.parameter_space.canonical_name(individual.config)}"
            individual.registry_id = self.service.register(individual.config, individual.name)
            individual.cost = None
            if not individual.registry_id:
                raise ExecutionServiceError(f"Registration of {individual.name} returned no id")
            registered += 1
            self.stats['configs_registered'] += 1

            for entry in entries:
                handle = self.service.dispatch(individual.registry_id, entry.instance_id,
                                               entry.seed, self.cpu_time_limit)
                job_map[handle] = individual.registry_id
                self.stats['jobs_dispatched'] += 1

        return job_map, registered, deduplicated

    def _aggregate(self, population: List[Individual], generation: int,
                   job_map: Dict[int, int], outcomes: Dict[int, JobOutcome]):
        """Compute costs of the new configurations and resolve everyone else's."""
        by_registry: Dict[int, List[JobOutcome]] = defaultdict(list)
        for handle, registry_id in job_map.items():
            by_registry[registry_id].append(outcomes[handle])

        workload_size = self.workload.size_for(generation)
        new_costs: Dict[int, float] = {}
        for registry_id, registry_outcomes in by_registry.items():
            cost = self.cost_function.compute(registry_outcomes, workload_size)
            cost = validate_cost(cost, self.service.get_name(registry_id))
            self.service.set_cost(registry_id, cost, self.cost_function.tag)
            new_costs[registry_id] = cost

        for individual in population:
            if individual.registry_id in new_costs:
                individual.cost = new_costs[individual.registry_id]
            elif individual.cost is None:
                cost = self.service.get_cost(individual.registry_id)
                if cost is None:
                    raise EvaluationError(
                        f"No cost known for {individual.name}",
                        individual_name=individual.name,
                        registry_id=individual.registry_id
                    )
                individual.cost = validate_cost(cost, individual.name)

    def get_statistics(self) -> Dict[str, Any]:
        """Get evaluation statistics."""
        stats = self.stats.copy()
        stats['polls'] = self.poller.stats['polls']
        stats['total_wait_time'] = self.poller.stats['total_wait_time']
        if self.stats['configs_registered'] > 0:
            stats['avg_jobs_per_config'] = self.stats['jobs_dispatched'] / self.stats['configs_registered']
        else:
            stats['avg_jobs_per_config'] = 0.0
        return stats
