"""
Population Management Module

Handles population initialization for the configurator.

Features:
- Random population initialization from the parameter space
- Seeding from the best configurations already known to the registry
- Population statistics
"""

import random
from typing import Any, Dict, List

from ga_exceptions import PopulationError, validate_cost
from ga_logging import get_logger
from ga_components.individual import Individual


class PopulationManager:
    """
    Creates the initial population.

    No deduplication happens here; value-equal configurations are merged
    by the evaluation engine through the registry.
    """

    def __init__(self, parameter_space: Any, service: Any, population_size: int,
                 rng: random.Random, seed_from_best: int = 0, cost_tag: str = "average"):
        """
        Initialize population manager.

        Args:
            parameter_space: Provider of random configurations
            service: Execution service holding the known configurations
            population_size: Target population size
            rng: The engine's random stream
            seed_from_best: Number of best-known configurations to reuse
            cost_tag: Cost function tag used to rank known configurations
        """
        if population_size < 1:
            raise PopulationError(f"Population size ({population_size}) must be positive")

        self.parameter_space = parameter_space
        self.service = service
        self.population_size = population_size
        self.rng = rng
        self.seed_from_best = seed_from_best
        self.cost_tag = cost_tag
        self.logger = get_logger("PopulationManager")

        # Statistics
        self.stats = {
            'individuals_created': 0,
            'individuals_seeded': 0,
            'populations_initialized': 0
        }

    def initialize_population(self) -> List[Individual]:
        """
        Initialize the population, seeded individuals first.

        Returns:
            List of population_size individuals
        """
        population = self._seeded_individuals()

        while len(population) < self.population_size:
            population.append(Individual(config=self.parameter_space.random_config(self.rng)))
            self.stats['individuals_created'] += 1

        self.stats['populations_initialized'] += 1
        return population

    def _seeded_individuals(self) -> List[Individual]:
        """Wrap the best known configurations as already evaluated individuals."""
        count = min(self.seed_from_best, self.population_size)
        if count <= 0:
            return []

        seeded = []
        for registry_id in self.service.get_best_configs(self.cost_tag, count)[:count]:
            name = self.service.get_name(registry_id)
            cost = self.service.get_cost(registry_id)
            if cost is None:
                raise PopulationError(f"Best known configuration {name} has no cost")
            individual = Individual(
                config=self.service.get_configuration(registry_id),
                registry_id=registry_id,
                cost=validate_cost(cost, name),
                name=name
            )
            self.logger.info(f"Using existing config {name}", registry_id=registry_id, cost=f"{individual.cost:.4f}")
            seeded.append(individual)

        self.stats['individuals_seeded'] += len(seeded)
        return seeded

    def get_statistics(self) -> Dict[str, Any]:
        """Get population statistics."""
        return self.stats.copy()
