"""
Execution Service Interface

The configurator reaches the experiment database only through this
interface: configuration registry, job dispatch, job status and costs.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ga_components.individual import JobOutcome


class ExecutionService(ABC):
    """Registry of configurations plus asynchronous job execution."""

    @abstractmethod
    def exists(self, config: Any) -> int:
        """Registry id of a value-equal configuration, 0 if there is none."""

    @abstractmethod
    def register(self, config: Any, name: str) -> int:
        """Store a new configuration and return its registry id."""

    @abstractmethod
    def dispatch(self, registry_id: int, instance_id: int, seed: int, cpu_time_limit: float) -> int:
        """Submit one run and return its job handle."""

    @abstractmethod
    def poll_status(self, handles: Iterable[int]) -> Dict[int, JobOutcome]:
        """Current outcome of the given jobs; unknown handles may be omitted."""

    @abstractmethod
    def set_cost(self, registry_id: int, cost: float, cost_tag: str):
        """Record the aggregated cost of a configuration."""

    @abstractmethod
    def get_cost(self, registry_id: int) -> Optional[float]:
        """Recorded cost of a configuration, None if not evaluated."""

    @abstractmethod
    def get_best_configs(self, cost_tag: str, k: int) -> List[int]:
        """Registry ids of the k cheapest configurations under ``cost_tag``."""

    @abstractmethod
    def get_name(self, registry_id: int) -> str:
        """Display name of a configuration."""

    @abstractmethod
    def get_configuration(self, registry_id: int) -> Any:
        """Configuration stored under ``registry_id``."""

    @abstractmethod
    def get_instance_ids(self) -> List[int]:
        """Instances of the experiment."""
