"""
Parameter Space Interface

The configurator treats configurations as opaque values. Everything it
needs to know about them (sampling, recombination, mutation, naming and
persistence) goes through this interface.
"""

import random
from abc import ABC, abstractmethod
from typing import Any, Tuple


class ParameterSpaceProvider(ABC):
    """Representation of solver configurations and their variation operators."""

    @abstractmethod
    def random_config(self, rng: random.Random) -> Any:
        """Draw a configuration uniformly from the space."""

    @abstractmethod
    def crossover(self, config1: Any, config2: Any, rng: random.Random, operator: str) -> Any:
        """Recombine two configurations into one child."""

    @abstractmethod
    def crossover_pair(self, config1: Any, config2: Any, rng: random.Random, operator: str) -> Tuple[Any, Any]:
        """Recombine two configurations into two complementary children."""

    @abstractmethod
    def mutate(self, config: Any, step_factor: float, probability: float, rng: random.Random):
        """Mutate a configuration in place, each gene with the given probability."""

    @abstractmethod
    def canonical_name(self, config: Any) -> str:
        """Readable, deterministic description of a configuration."""

    @abstractmethod
    def serialize(self, config: Any) -> str:
        """Text form of a configuration; ``deserialize`` restores an equal value."""

    @abstractmethod
    def deserialize(self, text: str) -> Any:
        """Inverse of ``serialize``."""
