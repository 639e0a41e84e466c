"""
Selection Methods Module

Implements parent selection for the configurator.

Features:
- Tournament selection over distinct population slots (minimization)
- Mating pool construction from independent tournaments
- Selection statistics
"""

import random
from typing import Any, Dict, List, Optional

from ga_exceptions import SelectionError
from ga_components.individual import Individual


class SelectionMethods:
    """
    Tournament selection for cost-minimizing populations.

    Randomness comes only from the injected RNG so that a seeded run
    draws the same tournaments every time.
    """

    def __init__(self, tournament_size: int, rng: random.Random):
        """
        Initialize selection methods.

        Args:
            tournament_size: Number of distinct individuals per tournament
            rng: The engine's random stream
        """
        if tournament_size < 1:
            raise SelectionError(f"Tournament size ({tournament_size}) must be positive",
                                 tournament_size=tournament_size)
        self.tournament_size = tournament_size
        self.rng = rng

        # Statistics tracking
        self.selection_stats = {
            'tournaments_held': 0,
            'mating_pools_built': 0
        }

    def tournament_selection(self, population: List[Individual], k: Optional[int] = None) -> Individual:
        """
        Select an individual using tournament selection.

        Samples k distinct slots and returns the cheapest individual; ties
        go to the first minimum in sampling order.

        Args:
            population: Evaluated population
            k: Tournament size (uses instance default if None)

        Returns:
            The winning individual (not a copy)
        """
        if k is None:
            k = self.tournament_size

        if k < 1 or k > len(population):
            raise SelectionError(
                f"Tournament size ({k}) must be between 1 and population size ({len(population)})",
                population_size=len(population),
                tournament_size=k
            )

        indices = self.rng.sample(range(len(population)), k)

        winner = None
        for index in indices:
            candidate = population[index]
            if candidate.cost is None:
                raise SelectionError(
                    f"Individual {candidate.name or index} has no cost",
                    population_size=len(population),
                    tournament_size=k
                )
            if winner is None or candidate.cost < winner.cost:
                winner = candidate

        self.selection_stats['tournaments_held'] += 1
        return winner

    def build_mating_pool(self, population: List[Individual], size: Optional[int] = None) -> List[Individual]:
        """
        Run independent tournaments to fill a mating pool.

        Args:
            population: Evaluated population
            size: Pool size (defaults to the population size)

        Returns:
            Selected individuals; the same individual may appear repeatedly
        """
        if size is None:
            size = len(population)

        pool = [self.tournament_selection(population) for _ in range(size)]
        self.selection_stats['mating_pools_built'] += 1
        return pool

    def get_statistics(self) -> Dict[str, Any]:
        """Get selection statistics."""
        return self.selection_stats.copy()
