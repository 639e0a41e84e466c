"""
GA Components Module

Modular components of the configurator's genetic algorithm.
Each component handles a specific aspect of the search:

- Individual, WorkloadEntry, JobOutcome, GenerationStats: data model
- Workload: (instance, seed) runs every configuration is scored on
- CostFunction: aggregation of job outcomes into a cost (average, PARX)
- PopulationManager: population initialization and seeding
- SelectionMethods: tournament selection
- GeneticOperations: adaptive crossover and mutation
- EvaluationEngine: deduplicated job dispatch, polling and cost write-back
- ConvergenceDetector: non-improvement termination criterion
- GAReporter: generates reports and saves results

Usage:
    from ga_components import SelectionMethods, GeneticOperations
    from ga_components.cost_functions import create_cost_function
"""

# Data model
from .individual import Individual, WorkloadEntry, JobOutcome, GenerationStats
from .workload import Workload
from .cost_functions import CostFunction, AverageCost, PARXCost, create_cost_function

# Core GA components
from .population_management import PopulationManager
from .selection import SelectionMethods
from .genetic_operations import GeneticOperations
from .evaluation import EvaluationEngine, JobPoller, PollingStrategy
from .convergence_detection import ConvergenceDetector
from .reporting import GAReporter

__all__ = [
    # Data model
    'Individual',
    'WorkloadEntry',
    'JobOutcome',
    'GenerationStats',
    'Workload',
    'CostFunction',
    'AverageCost',
    'PARXCost',
    'create_cost_function',

    # Core components
    'PopulationManager',
    'SelectionMethods',
    'GeneticOperations',
    'EvaluationEngine',
    'JobPoller',
    'PollingStrategy',
    'ConvergenceDetector',
    'GAReporter'
]

# Version information
__version__ = '1.0.0'
__description__ = 'Adaptive Genetic Algorithm for Solver Parameter Configuration'
