"""
Genetic Operations Module

Core variation operations of the configurator: crossover and mutation with
adaptive or fixed probabilities.

Features:
- Adaptive probabilities after Srinivas and Patnaik (1994)
- Single-child and paired (two-child) crossover
- One-point and two-point crossover operators from the parameter space
- In-place mutation with invalidation of changed configurations
- Deterministic random-stream consumption for reproducible runs
"""

import copy
import random
from typing import Any, Dict, List, Optional

from ga_constants import GAConstants, AdaptiveConstants, OperatorNames
from ga_exceptions import CrossoverError, MutationError
from ga_logging import get_logger
from ga_components.individual import Individual, GenerationStats


def fitness(cost: float) -> float:
    """Fitness of a cost; higher is better."""
    return 1.0 / max(cost, GAConstants.MIN_COST)


def adaptive_probability(f: float, f_max: float, f_avg: float,
                         k_high: float, k_low: float, uniform: bool = False) -> float:
    """
    Adaptive operator probability.

    Individuals at or above average fitness get ``k_high`` scaled by their
    distance from the best, the rest get ``k_low``. The result is clamped
    to [0, max(k_high, k_low)].

    Args:
        f: Fitness of the individual (or the better parent for crossover)
        f_max: Best fitness of the population
        f_avg: Fitness of the population mean cost
        k_high: Constant for individuals at or above average
        k_low: Constant for individuals below average
        uniform: All costs are equal, so f_max and f_avg only differ by round-off
    """
    upper = max(k_high, k_low)
    if uniform or f_max == f_avg:
        p = k_high if AdaptiveConstants.SATURATE_ON_UNIFORM_FITNESS else k_low
    elif f >= f_avg:
        p = k_high * (f_max - f) / (f_max - f_avg)
    else:
        p = k_low
    return max(0.0, min(upper, p))


class GeneticOperations:
    """
    Produces the next generation from a mating pool.

    Per generation the random stream is consumed in a fixed order: all
    crossover decisions (with the operator's own draws) slot by slot, then
    all mutation draws slot by slot.
    """

    def __init__(self, config: Any, parameter_space: Any, rng: random.Random):
        """
        Initialize genetic operations.

        Args:
            config: GAConfig with the variation policies
            parameter_space: Provider of crossover and mutation operators
            rng: The engine's random stream
        """
        self.config = config
        self.parameter_space = parameter_space
        self.rng = rng
        self.logger = get_logger("GeneticOperations")

        # Statistics tracking
        self.stats = {
            'crossover_count': 0,
            'pass_through_count': 0,
            'mutation_count': 0,
            'last_crossover_probability': None,
            'last_mutation_probability': None
        }

    def crossover_probability(self, parent1: Individual, parent2: Individual,
                              stats: GenerationStats) -> float:
        """Crossover probability for a parent pair."""
        if self.config.crossover_mode == OperatorNames.FIXED:
            return self.config.crossover_probability
        f_prime = max(fitness(parent1.cost), fitness(parent2.cost))
        return adaptive_probability(f_prime, fitness(stats.best_cost), fitness(stats.mean_cost),
                                    AdaptiveConstants.K1, AdaptiveConstants.K3, uniform=stats.is_uniform)

    def mutation_probability(self, f: float, stats: GenerationStats) -> float:
        """Mutation probability for an offspring of fitness ``f``."""
        if self.config.mutation_mode == OperatorNames.FIXED:
            return self.config.mutation_probability
        return adaptive_probability(f, fitness(stats.best_cost), fitness(stats.mean_cost),
                                    AdaptiveConstants.K2, AdaptiveConstants.K4, uniform=stats.is_uniform)

    def produce_offspring(self, population: List[Individual], mating_pool: List[Individual],
                          stats: GenerationStats) -> List[Individual]:
        """
        Create the offspring population.

        Args:
            population: Current evaluated population
            mating_pool: Tournament winners, one per population slot
            stats: Statistics of the current population

        Returns:
            New list of individuals; never aliases mating pool entries
        """
        if len(mating_pool) != len(population):
            raise CrossoverError(
                f"Mating pool size ({len(mating_pool)}) differs from population size ({len(population)})")

        offspring, parents = self._crossover_phase(mating_pool, stats)
        self._mutation_phase(offspring, parents, stats)
        return offspring

    def _crossover_phase(self, mating_pool: List[Individual], stats: GenerationStats):
        size = len(mating_pool)
        offspring: List[Optional[Individual]] = [None] * size
        parents: List[Optional[Individual]] = [None] * size

        if self.config.paired_crossover:
            if size % 2 != 0:
                raise CrossoverError(f"Paired crossover needs an even population, got {size}")
            for i in range(0, size, 2):
                parent1, parent2 = mating_pool[i], mating_pool[i + 1]
                p_c = self.crossover_probability(parent1, parent2, stats)
                self.stats['last_crossover_probability'] = p_c
                if self.rng.random() < p_c:
                    child1, child2 = self._recombine(parent1, parent2, pair=True)
                    offspring[i], offspring[i + 1] = Individual(child1), Individual(child2)
                    self.stats['crossover_count'] += 1
                else:
                    offspring[i], offspring[i + 1] = parent1.copy(), parent2.copy()
                    self.stats['pass_through_count'] += 2
                parents[i], parents[i + 1] = parent1, parent2
        else:
            for i in range(size):
                parent1, parent2 = mating_pool[i], mating_pool[(i + 1) % size]
                p_c = self.crossover_probability(parent1, parent2, stats)
                self.stats['last_crossover_probability'] = p_c
                if self.rng.random() < p_c:
                    offspring[i] = Individual(self._recombine(parent1, parent2, pair=False))
                    self.stats['crossover_count'] += 1
                else:
                    offspring[i] = parent1.copy()
                    self.stats['pass_through_count'] += 1
                parents[i] = parent1

        return offspring, parents

    def _recombine(self, parent1: Individual, parent2: Individual, pair: bool):
        operator = self.config.crossover_operator
        try:
            if pair:
                return self.parameter_space.crossover_pair(parent1.config, parent2.config, self.rng, operator)
            return self.parameter_space.crossover(parent1.config, parent2.config, self.rng, operator)
        except CrossoverError:
            raise
        except Exception as e:
            raise CrossoverError(f"Crossover failed: {e}", parent1.name, parent2.name) from e

    def _mutation_phase(self, offspring: List[Individual], parents: List[Individual],
                        stats: GenerationStats):
        step_factor = self.config.mutation_step_factor
        for individual, parent in zip(offspring, parents):
            cost = individual.cost if individual.cost is not None else parent.cost
            p_m = self.mutation_probability(fitness(cost), stats)
            self.stats['last_mutation_probability'] = p_m

            before = copy.deepcopy(individual.config)
            try:
                self.parameter_space.mutate(individual.config, step_factor, p_m, self.rng)
            except Exception as e:
                raise MutationError(f"Mutation failed: {e}", individual.name, p_m) from e

            if individual.config != before:
                individual.invalidate()
                self.stats['mutation_count'] += 1

    def get_statistics(self) -> Dict[str, Any]:
        """Get statistics about genetic operations performed."""
        return self.stats.copy()
