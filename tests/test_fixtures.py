"""
Test Fixtures and Utilities for GA Tests

Provides reusable parameter spaces, deterministic solvers, an in-memory
scripted execution service and helper functions for component and
integration testing.
"""

import copy
import os
import sys
import shutil
import tempfile
from typing import Any, Dict, Iterable, List, Optional, Tuple

# Add project root and src to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from ga_config import GAConfig
from ga_constants import JobStatus
from ga_components.individual import Individual, JobOutcome
from ExecutionServices.base_service import ExecutionService
from ParameterSpaces.parameter_space import (
    Configuration, ParameterSpace, IntegerParameter, RealParameter, CategoricalParameter
)


def config_runtime(config: Configuration, instance_id: int = 1) -> float:
    """Deterministic runtime of a configuration; the optimum is x=7, y=0.3, mode='b'."""
    runtime = abs(config['x'] - 7) * 0.5 + abs(config['y'] - 0.3) * 4.0
    runtime += 0.0 if config['mode'] == 'b' else 1.0
    return round(runtime + 0.1 * instance_id, 6)


def deterministic_solver(config: Configuration, instance_id: int, seed: int,
                         cpu_time_limit: float) -> Tuple[float, int]:
    """Solver callable for LocalExecutionService; ignores the seed."""
    return config_runtime(config, instance_id), JobStatus.RESULT_SUCCESS


class TestFixtures:
    """Centralized test fixtures and utilities."""

    @staticmethod
    def get_parameter_space() -> ParameterSpace:
        """Small mixed-type parameter space."""
        return ParameterSpace([
            IntegerParameter('x', 0, 20),
            RealParameter('y', 0.0, 1.0),
            CategoricalParameter('mode', ['a', 'b', 'c'])
        ])

    @staticmethod
    def get_parameter_dict() -> Dict[str, Any]:
        """Parameter file contents matching get_parameter_space."""
        return {
            'parameters': [
                {'name': 'x', 'type': 'integer', 'low': 0, 'high': 20},
                {'name': 'y', 'type': 'real', 'low': 0.0, 'high': 1.0},
                {'name': 'mode', 'type': 'categorical', 'values': ['a', 'b', 'c']}
            ]
        }

    @staticmethod
    def make_config(x: int = 5, y: float = 0.5, mode: str = 'a') -> Configuration:
        return Configuration({'x': x, 'y': y, 'mode': mode})

    @staticmethod
    def make_population(costs: List[Optional[float]]) -> List[Individual]:
        """Population of distinct configurations with the given costs."""
        population = []
        for index, cost in enumerate(costs):
            population.append(Individual(
                config=TestFixtures.make_config(x=index % 21, y=0.5, mode='a'),
                registry_id=index + 1 if cost is not None else 0,
                cost=cost,
                name=f"Ind_{index}"
            ))
        return population

    @staticmethod
    def get_test_config(output_dir: str, **overrides) -> GAConfig:
        """Small, fast configuration for tests."""
        params = dict(
            population_size=8,
            tournament_size=2,
            max_termination_hits=2,
            max_generations=6,
            job_cpu_time_limit=30.0,
            poll_interval=0.0,
            seed=1234,
            output_dir=output_dir,
            show_progress=False
        )
        params.update(overrides)
        return GAConfig(**params)


class ScriptedExecutionService(ExecutionService):
    """
    Synchronous in-memory execution service for unit tests.

    Records every call. With ``reveal_per_poll`` set, each poll reveals only
    that many more jobs; unrevealed handles are omitted from the response.
    """

    def __init__(self, instance_ids: Iterable[int] = (1, 2), solver=None,
                 reveal_per_poll: Optional[int] = None):
        self.instance_ids = list(instance_ids)
        self.solver = solver or deterministic_solver
        self.reveal_per_poll = reveal_per_poll

        self.configs: Dict[int, Any] = {}
        self.names: Dict[int, str] = {}
        self.costs: Dict[int, Tuple[float, str]] = {}
        self.ids_by_config: Dict[Any, int] = {}
        self.jobs: Dict[int, Tuple[int, int, int, float]] = {}
        self.revealed = set()

        self.register_calls: List[str] = []
        self.dispatch_calls: List[Tuple[int, int, int, float]] = []
        self.poll_calls: List[List[int]] = []
        self.set_cost_calls: List[Tuple[int, float, str]] = []

    def add_evaluated(self, config: Any, name: str, cost: float, cost_tag: str = "average") -> int:
        """Preload a configuration that was evaluated by an earlier run."""
        registry_id = self.register(config, name)
        self.costs[registry_id] = (cost, cost_tag)
        return registry_id

    def exists(self, config: Any) -> int:
        return self.ids_by_config.get(config, 0)

    def register(self, config: Any, name: str) -> int:
        registry_id = len(self.configs) + 1
        stored = copy.deepcopy(config)
        self.configs[registry_id] = stored
        self.names[registry_id] = name
        self.ids_by_config[stored] = registry_id
        self.register_calls.append(name)
        return registry_id

    def dispatch(self, registry_id: int, instance_id: int, seed: int, cpu_time_limit: float) -> int:
        handle = len(self.jobs) + 1
        self.jobs[handle] = (registry_id, instance_id, seed, cpu_time_limit)
        self.dispatch_calls.append((registry_id, instance_id, seed, cpu_time_limit))
        return handle

    def poll_status(self, handles: Iterable[int]) -> Dict[int, JobOutcome]:
        handles = list(handles)
        self.poll_calls.append(handles)

        if self.reveal_per_poll is None:
            self.revealed.update(handles)
        else:
            hidden = [handle for handle in sorted(handles) if handle not in self.revealed]
            self.revealed.update(hidden[:self.reveal_per_poll])

        response = {}
        for handle in handles:
            if handle in self.revealed:
                response[handle] = self._outcome(handle)
        return response

    def _outcome(self, handle: int) -> JobOutcome:
        registry_id, instance_id, seed, cpu_time_limit = self.jobs[handle]
        result_time, result_code = self.solver(self.configs[registry_id], instance_id, seed, cpu_time_limit)
        status = JobStatus.FINISHED if result_code > 0 else JobStatus.CRASHED
        return JobOutcome(status, result_time, result_code, cpu_time_limit)

    def set_cost(self, registry_id: int, cost: float, cost_tag: str):
        self.costs[registry_id] = (cost, cost_tag)
        self.set_cost_calls.append((registry_id, cost, cost_tag))

    def get_cost(self, registry_id: int) -> Optional[float]:
        entry = self.costs.get(registry_id)
        return entry[0] if entry else None

    def get_best_configs(self, cost_tag: str, k: int) -> List[int]:
        ranked = sorted((cost, registry_id) for registry_id, (cost, tag) in self.costs.items() if tag == cost_tag)
        return [registry_id for _, registry_id in ranked[:k]]

    def get_name(self, registry_id: int) -> str:
        return self.names[registry_id]

    def get_configuration(self, registry_id: int) -> Any:
        return copy.deepcopy(self.configs[registry_id])

    def get_instance_ids(self) -> List[int]:
        return list(self.instance_ids)


class TemporaryOutputDir:
    """Context manager that provides and removes a temporary output directory."""

    def __enter__(self) -> str:
        self.path = tempfile.mkdtemp(prefix="ga_test_")
        return self.path

    def __exit__(self, exc_type, exc_val, exc_tb):
        shutil.rmtree(self.path, ignore_errors=True)
