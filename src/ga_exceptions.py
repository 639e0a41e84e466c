"""
Custom Exception Classes for the GA Solver Configurator

Provides specific, meaningful exceptions for the different failure modes of
the engine and its external collaborators.
"""

import math


class GAException(Exception):
    """Base exception for all genetic algorithm related errors."""
    pass


class ConfigurationError(GAException, ValueError):
    """Raised when GA configuration is invalid or inconsistent."""
    pass


class ParameterSpaceError(GAException):
    """Raised when the parameter space is missing or malformed."""

    def __init__(self, message: str, parameter: str = None):
        super().__init__(message)
        self.parameter = parameter


class ExecutionServiceError(GAException):
    """Raised when the execution service rejects a request."""

    def __init__(self, message: str, registry_id: int = None,
                 job_handle: int = None):
        super().__init__(message)
        self.registry_id = registry_id
        self.job_handle = job_handle


class EvaluationError(GAException):
    """Raised when an individual cannot be assigned a cost."""

    def __init__(self, message: str, individual_name: str = None,
                 registry_id: int = None):
        super().__init__(message)
        self.individual_name = individual_name
        self.registry_id = registry_id


class InvalidCostError(GAException):
    """Raised when cost aggregation returns an invalid value."""

    def __init__(self, cost_value, individual_name: str = None):
        message = f"Invalid cost value: {cost_value}"
        if individual_name:
            message += f" (individual: {individual_name})"
        super().__init__(message)
        self.cost_value = cost_value
        self.individual_name = individual_name


class PopulationError(GAException):
    """Raised when population operations fail."""
    pass


class SelectionError(GAException):
    """Raised when selection operations fail."""

    def __init__(self, message: str, population_size: int = None,
                 tournament_size: int = None):
        super().__init__(message)
        self.population_size = population_size
        self.tournament_size = tournament_size


class CrossoverError(GAException):
    """Raised when crossover operations fail."""

    def __init__(self, message: str, parent1_name: str = None,
                 parent2_name: str = None):
        super().__init__(message)
        self.parent1_name = parent1_name
        self.parent2_name = parent2_name


class MutationError(GAException):
    """Raised when mutation operations fail."""

    def __init__(self, message: str, individual_name: str = None,
                 mutation_probability: float = None):
        super().__init__(message)
        self.individual_name = individual_name
        self.mutation_probability = mutation_probability


class ReportingError(GAException):
    """Raised when result reporting/saving fails."""

    def __init__(self, message: str, output_dir: str = None,
                 file_type: str = None):
        super().__init__(message)
        self.output_dir = output_dir
        self.file_type = file_type


def validate_cost(cost: float, individual_name: str = None) -> float:
    """
    Validate a cost value and raise InvalidCostError if it is unusable.

    Args:
        cost: Aggregated cost (mean runtime or penalized runtime)
        individual_name: Name of the individual for error context

    Returns:
        The cost as float

    Raises:
        InvalidCostError: If cost is missing, non-numeric, negative or not finite
    """
    if cost is None:
        raise InvalidCostError(cost, individual_name)

    if isinstance(cost, bool) or not isinstance(cost, (int, float)):
        raise InvalidCostError(cost, individual_name)

    if math.isnan(cost) or math.isinf(cost) or cost < 0:
        raise InvalidCostError(cost, individual_name)

    return float(cost)
