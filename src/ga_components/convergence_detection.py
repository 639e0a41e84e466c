"""
Convergence Detection

Terminates the search when the population mean stops improving.

A generation counts as a non-improvement hit when its mean cost is worse
than 95% of the previous generation's mean. The search stops once the hit
counter reaches the configured maximum. The counter is not reset by an
improving generation unless explicitly requested.
"""

from typing import List, Optional, Tuple

from ga_constants import TerminationConstants
from ga_exceptions import ConfigurationError


class ConvergenceDetector:
    """Non-improvement counter over generation mean costs."""

    def __init__(self, max_hits: int = TerminationConstants.DEFAULT_MAX_HITS,
                 improvement_factor: float = TerminationConstants.IMPROVEMENT_FACTOR,
                 reset_on_improvement: bool = False):
        """
        Initialize the convergence detection system.

        Args:
            max_hits: Non-improving generations that terminate the search
            improvement_factor: A mean must be at most this fraction of the
                previous mean to count as an improvement
            reset_on_improvement: Reset the counter on improving generations
        """
        if max_hits < 1:
            raise ConfigurationError(f"Max termination hits ({max_hits}) must be at least 1")

        self.max_hits = max_hits
        self.improvement_factor = improvement_factor
        self.reset_on_improvement = reset_on_improvement

        self.hits = 0
        self.previous_mean: Optional[float] = None
        self.mean_history: List[float] = []

    def check_convergence(self, mean_cost: float) -> Tuple[bool, str]:
        """
        Record a generation mean and decide whether to stop.

        Args:
            mean_cost: Mean cost of the generation just evaluated

        Returns:
            Tuple of (converged: bool, reason: str)
        """
        self.mean_history.append(mean_cost)
        previous = self.previous_mean
        self.previous_mean = mean_cost

        if previous is None:
            return False, "First generation"

        if mean_cost > self.improvement_factor * previous:
            self.hits += 1
        elif self.reset_on_improvement:
            self.hits = 0

        if self.hits >= self.max_hits:
            return True, (f"Mean cost did not improve by {1 - self.improvement_factor:.0%} "
                          f"in {self.hits} generation(s)")
        return False, f"Non-improvement hits: {self.hits}/{self.max_hits}"

    def get_statistics(self) -> dict:
        """Get statistics about the mean cost progression."""
        return {
            'generations': len(self.mean_history),
            'hits': self.hits,
            'max_hits': self.max_hits,
            'best_mean': min(self.mean_history) if self.mean_history else None,
            'current_mean': self.mean_history[-1] if self.mean_history else None
        }
