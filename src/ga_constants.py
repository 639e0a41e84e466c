"""
Configuration Constants for the GA Solver Configurator

Centralizes all magic numbers and hard-coded values for better maintainability.
All constants are organized by category with clear documentation.
"""


class GAConstants:
    """Configuration constants for genetic algorithm components."""

    # Population defaults
    DEFAULT_POPULATION_SIZE = 40
    DEFAULT_TOURNAMENT_SIZE = 3
    MIN_POPULATION_SIZE = 1
    MIN_TOURNAMENT_SIZE = 1

    # Fixed-mode operator probabilities
    DEFAULT_CROSSOVER_PROBABILITY = 0.8
    DEFAULT_MUTATION_PROBABILITY = 0.1
    DEFAULT_MUTATION_STEP_FACTOR = 0.1

    # Costs are runtimes; clamp before inverting to fitness
    MIN_COST = 1e-9


class AdaptiveConstants:
    """
    Constants of the adaptive probability scheme.

    See "Adaptive Probabilities of Crossover and Mutation in Genetic
    Algorithms", Srinivas and Patnaik, 1994.
    """

    K1 = 1.0   # crossover, individual at or above average fitness
    K3 = 1.0   # crossover, individual below average fitness
    K2 = 0.2   # mutation, individual at or above average fitness
    K4 = 0.2   # mutation, individual below average fitness

    # When f_max == f_avg the ratio is undefined; use the upper constant
    SATURATE_ON_UNIFORM_FITNESS = True


class TerminationConstants:
    """Constants for the generation-mean termination criterion."""

    IMPROVEMENT_FACTOR = 0.95        # new mean must beat 0.95 * previous mean
    DEFAULT_MAX_HITS = 3


class JobStatus:
    """Status and result codes reported by execution services."""

    NOT_STARTED = -1
    RUNNING = 0
    FINISHED = 1
    CRASHED = 2
    TIME_LIMIT_EXCEEDED = 21
    TIMED_OUT_BY_WRAPPER = -5

    RESULT_SUCCESS = 1
    RESULT_UNKNOWN = 0
    RESULT_FAILURE = -1
    RESULT_TIME_LIMIT = -21

    @staticmethod
    def is_terminal(status_code: int) -> bool:
        return status_code >= 1 or status_code < -1

    @staticmethod
    def is_success(result_code: int) -> bool:
        return result_code > 0


class ExecutionConstants:
    """Dispatch and polling configuration."""

    DEFAULT_POLL_INTERVAL_SECONDS = 3.0
    DEFAULT_CPU_TIME_LIMIT = 13.0
    MAX_SEED = 2147483647
    DEFAULT_LOCAL_WORKERS = 4
    RACING_STEPS = 10                 # course is fully exposed after 10 generations


class CostFunctionNames:
    """Names of the supported cost aggregation policies."""

    AVERAGE = "average"
    PARX = "parx"
    DEFAULT_PARX_PENALTY = 10

    ALL = (AVERAGE, PARX)


class OperatorNames:
    """Names of the variation policies."""

    ADAPTIVE = "adaptive"
    FIXED = "fixed"
    PROBABILITY_MODES = (ADAPTIVE, FIXED)

    ONE_POINT = "one_point"
    TWO_POINT = "two_point"
    CROSSOVER_OPERATORS = (ONE_POINT, TWO_POINT)
