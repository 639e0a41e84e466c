"""
Individual and Evaluation Data Model

Value types shared by the GA components:

- Individual: a configuration plus its evaluation state
- WorkloadEntry: one (instance, seed) evaluation unit
- JobOutcome: the reported state of one dispatched job
- GenerationStats: cost summary of one evaluated population
"""

import copy
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np

from ga_constants import JobStatus
from ga_exceptions import PopulationError


@dataclass
class Individual:
    """
    One candidate configuration plus its evaluation state.

    ``registry_id`` 0 means the configuration is not registered with the
    execution service yet; ``cost`` is None until evaluation.
    """

    config: Any
    registry_id: int = 0
    cost: Optional[float] = None
    name: str = ""

    @property
    def is_registered(self) -> bool:
        return self.registry_id != 0

    @property
    def is_evaluated(self) -> bool:
        return self.cost is not None

    def copy(self) -> 'Individual':
        """Deep copy; the configuration is never shared with the copy."""
        return Individual(
            config=copy.deepcopy(self.config),
            registry_id=self.registry_id,
            cost=self.cost,
            name=self.name
        )

    def invalidate(self):
        """Forget registration and cost after the configuration changed."""
        self.registry_id = 0
        self.cost = None


@dataclass(frozen=True)
class WorkloadEntry:
    """One evaluation unit of the workload."""

    instance_id: int
    seed: int


@dataclass(frozen=True)
class JobOutcome:
    """Status of a dispatched job as reported by the execution service."""

    status_code: int
    result_time: float = 0.0
    result_code: int = JobStatus.RESULT_UNKNOWN
    cpu_time_limit: float = 0.0

    @property
    def is_terminal(self) -> bool:
        return JobStatus.is_terminal(self.status_code)

    @property
    def is_success(self) -> bool:
        return JobStatus.is_success(self.result_code)


@dataclass
class GenerationStats:
    """Cost summary of one evaluated population."""

    generation: int
    mean_cost: float
    best_cost: float
    worst_cost: float
    count: int
    costs: List[float] = field(default_factory=list, repr=False)

    @classmethod
    def from_population(cls, population: List[Individual], generation: int) -> 'GenerationStats':
        """
        Compute statistics over a fully evaluated population.

        Raises:
            PopulationError: If the population is empty or not fully evaluated
        """
        if not population:
            raise PopulationError("Cannot compute statistics of an empty population")

        missing = [ind.name for ind in population if ind.cost is None]
        if missing:
            raise PopulationError(f"Population has unevaluated individuals: {missing[:5]}")

        costs = np.array([ind.cost for ind in population], dtype=float)
        return cls(
            generation=generation,
            mean_cost=float(np.mean(costs)),
            best_cost=float(np.min(costs)),
            worst_cost=float(np.max(costs)),
            count=len(population),
            costs=costs.tolist()
        )

    @property
    def is_uniform(self) -> bool:
        """Every individual has the same cost; the mean may still differ by round-off."""
        return self.best_cost == self.worst_cost

    def to_dict(self) -> dict:
        return {
            'generation': self.generation,
            'mean_cost': self.mean_cost,
            'best_cost': self.best_cost,
            'worst_cost': self.worst_cost,
            'count': self.count
        }
