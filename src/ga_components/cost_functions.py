"""
Cost Functions Module

Turns the job outcomes of one configuration into a scalar cost.
Costs are runtimes, so lower is better.

- Average: unsuccessful runs count with the CPU time limit.
- PARX(k): unsuccessful runs count with k times the CPU time limit.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from ga_constants import CostFunctionNames
from ga_exceptions import ConfigurationError, EvaluationError
from ga_components.individual import JobOutcome


class CostFunction(ABC):
    """Aggregation policy from job outcomes to a cost."""

    penalty_factor = 1

    @property
    @abstractmethod
    def tag(self) -> str:
        """Name under which costs are stored in the registry."""

    def run_cost(self, outcome: JobOutcome) -> float:
        """Cost contribution of a single run."""
        if outcome.is_success:
            return outcome.result_time
        return self.penalty_factor * outcome.cpu_time_limit

    def compute(self, outcomes: Iterable[JobOutcome], workload_size: int) -> float:
        """
        Aggregate outcomes into a cost.

        Args:
            outcomes: Terminal outcomes of one configuration
            workload_size: Number of runs in the workload; the divisor

        Returns:
            Sum of per-run costs divided by the workload size
        """
        if workload_size < 1:
            raise EvaluationError(f"Workload size must be positive, got {workload_size}")
        return sum(self.run_cost(outcome) for outcome in outcomes) / workload_size

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tag={self.tag!r})"


class AverageCost(CostFunction):
    """Mean runtime; failed runs count with the CPU time limit."""

    @property
    def tag(self) -> str:
        return CostFunctionNames.AVERAGE


class PARXCost(CostFunction):
    """Penalized average runtime of order k."""

    def __init__(self, penalty_factor: int = CostFunctionNames.DEFAULT_PARX_PENALTY):
        if penalty_factor < 1:
            raise ConfigurationError(f"PARX penalty ({penalty_factor}) must be at least 1")
        self.penalty_factor = penalty_factor

    @property
    def tag(self) -> str:
        return f"par{self.penalty_factor}"


def create_cost_function(name: str, parx_penalty: int = CostFunctionNames.DEFAULT_PARX_PENALTY) -> CostFunction:
    """Create the cost function registered under ``name``."""
    if name == CostFunctionNames.AVERAGE:
        return AverageCost()
    if name == CostFunctionNames.PARX:
        return PARXCost(parx_penalty)
    raise ConfigurationError(f"Unknown cost function: {name}")
