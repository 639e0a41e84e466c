"""
Workload Module

Builds the set of (instance, seed) runs every individual is scored against.

Two policies are supported:
- Fixed: each instance repeated R times with an independently drawn seed.
- Racing: a single course of length L, of which generation g exposes the
  first min(g * L / 10, L) runs, so early generations are cheap and late
  generations are evaluated thoroughly.
"""

import random
from typing import List, Optional, Sequence

from ga_constants import ExecutionConstants
from ga_exceptions import ConfigurationError
from ga_components.individual import WorkloadEntry


class Workload:
    """Fixed sequence of workload entries, sampled once at engine construction."""

    def __init__(self, instance_ids: Sequence[int], rng: random.Random,
                 num_runs_per_instance: int = 1,
                 racing_course_length: Optional[int] = None):
        """
        Sample the workload.

        Seeds are drawn from ``rng`` in repeat-major order (all instances of
        repeat 0, then all of repeat 1, ...) or in course order for racing.

        Args:
            instance_ids: Instances of the experiment
            rng: The engine's random stream
            num_runs_per_instance: Repeats per instance (fixed policy)
            racing_course_length: Course length L; enables the racing policy
        """
        if not instance_ids:
            raise ConfigurationError("Workload needs at least one instance")
        if num_runs_per_instance < 1:
            raise ConfigurationError(f"Runs per instance ({num_runs_per_instance}) must be positive")
        if racing_course_length is not None and racing_course_length < 1:
            raise ConfigurationError(f"Racing course length ({racing_course_length}) must be positive")

        self.instance_ids = list(instance_ids)
        self.racing_course_length = racing_course_length
        self.entries: List[WorkloadEntry] = []

        if racing_course_length is None:
            for _ in range(num_runs_per_instance):
                for instance_id in self.instance_ids:
                    self.entries.append(WorkloadEntry(instance_id, rng.randrange(ExecutionConstants.MAX_SEED)))
        else:
            for i in range(racing_course_length):
                instance_id = self.instance_ids[i % len(self.instance_ids)]
                self.entries.append(WorkloadEntry(instance_id, rng.randrange(ExecutionConstants.MAX_SEED)))

    @property
    def is_racing(self) -> bool:
        return self.racing_course_length is not None

    def size_for(self, generation: int) -> int:
        """Number of runs per individual in the given (1-based) generation."""
        if not self.is_racing:
            return len(self.entries)
        length = len(self.entries)
        return max(1, min(generation * length // ExecutionConstants.RACING_STEPS, length))

    def entries_for(self, generation: int) -> List[WorkloadEntry]:
        """Workload entries an individual evaluated in ``generation`` runs on."""
        return self.entries[:self.size_for(generation)]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
