import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ga_config import GAConfig
from ga_logging import get_logger
from ga_exceptions import ConfigurationError
from ga_components.individual import Individual, GenerationStats
from ga_components.workload import Workload
from ga_components.cost_functions import create_cost_function
from ga_components.convergence_detection import ConvergenceDetector
from ga_components.genetic_operations import GeneticOperations
from ga_components.selection import SelectionMethods
from ga_components.population_management import PopulationManager
from ga_components.evaluation import EvaluationEngine, JobPoller, PollingStrategy
from ga_components.reporting import GAReporter


@dataclass
class GARunResult:
    """Outcome of a configurator run."""

    best_individual: Individual
    final_stats: GenerationStats
    generations: int
    termination_reason: str
    converged: bool
    history: List[GenerationStats] = field(default_factory=list)
    component_stats: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    seed: Optional[int] = None


class GeneticAlgorithm:
    def __init__(self, config: GAConfig, parameter_space: Any, execution_service: Any,
                 rng: Optional[random.Random] = None, poller: Optional[JobPoller] = None,
                 experiment_name: Optional[str] = None) -> None:

        if parameter_space is None:
            raise ConfigurationError("A parameter space provider is required")
        if execution_service is None:
            raise ConfigurationError("An execution service is required")

        # Store core components
        self.config = config
        self.parameter_space = parameter_space
        self.service = execution_service
        self.logger = get_logger("GeneticAlgorithm")

        # Single random stream, seeded once
        self.seed = config.seed if config.seed is not None else int(time.time() * 1000)
        self.rng = rng if rng is not None else random.Random(self.seed)

        self.cost_function = create_cost_function(config.cost_function, config.parx_penalty)

        self.workload = Workload(
            execution_service.get_instance_ids(),
            self.rng,
            num_runs_per_instance=config.num_runs_per_instance,
            racing_course_length=config.racing_course_length
        )

        # Initialize modular components using config values
        self.population_manager = PopulationManager(
            parameter_space,
            execution_service,
            config.population_size,
            self.rng,
            seed_from_best=config.seed_from_best,
            cost_tag=self.cost_function.tag
        )

        self.selection_methods = SelectionMethods(
            tournament_size=config.tournament_size,
            rng=self.rng
        )

        self.genetic_operations = GeneticOperations(config, parameter_space, self.rng)

        self.evaluation_engine = EvaluationEngine(
            execution_service,
            parameter_space,
            self.workload,
            self.cost_function,
            cpu_time_limit=config.job_cpu_time_limit,
            poller=poller or JobPoller(
                execution_service,
                PollingStrategy(interval=config.poll_interval),
                show_progress=config.show_progress
            )
        )

        self.convergence_detector = ConvergenceDetector(
            max_hits=config.max_termination_hits,
            reset_on_improvement=config.reset_hits_on_improvement
        )

        self.reporter = GAReporter(
            output_dir=config.output_dir,
            experiment_name=experiment_name or f"ga_run_{int(time.time())}"
        )

        self.population: List[Individual] = []
        self.best_individual: Optional[Individual] = None
        self.history: List[GenerationStats] = []

    def _update_global_best(self, generation: int):
        """Snapshot any individual that beats the best seen so far."""
        for individual in self.population:
            if self.best_individual is None or individual.cost < self.best_individual.cost:
                self.best_individual = individual.copy()
                self.logger.log_global_best(generation, individual.name, individual.cost)

    def run(self) -> GARunResult:
        """Runs the configurator until the termination criterion holds."""
        run_config = self.config.to_dict()
        run_config['seed'] = self.seed
        run_config['workload_size'] = len(self.workload)
        run_config['cost_tag'] = self.cost_function.tag

        self.reporter.start_run(run_config)
        self.logger.log_config_summary(self.config)

        generation = 1
        converged = False
        reason = ""

        try:
            self.population = self.population_manager.initialize_population()

            while True:
                init_time = time.time()
                self.logger.info("-" * 100)
                self.logger.log_generation_start(generation, len(self.population))

                peak_memory = self.evaluation_engine.evaluate_population(self.population, generation)

                stats = GenerationStats.from_population(self.population, generation)
                self.history.append(stats)
                self._update_global_best(generation)

                self.reporter.save_generation_data(stats, self.population, self.parameter_space,
                                                   {'workload_size': self.workload.size_for(generation)})
                self.logger.log_generation_complete(generation, stats.best_cost, stats.mean_cost,
                                                    time.time() - init_time, peak_memory)

                converged, reason = self.convergence_detector.check_convergence(stats.mean_cost)
                if converged:
                    self.logger.log_convergence(generation, reason)
                    break
                if self.config.max_generations is not None and generation >= self.config.max_generations:
                    reason = f"Max generations reached ({self.config.max_generations})"
                    self.logger.info(reason)
                    break

                mating_pool = self.selection_methods.build_mating_pool(self.population)
                self.population = self.genetic_operations.produce_offspring(self.population, mating_pool, stats)
                generation += 1

            component_stats = {
                'population_manager': self.population_manager.get_statistics(),
                'selection_methods': self.selection_methods.get_statistics(),
                'genetic_operations': self.genetic_operations.get_statistics(),
                'evaluation_engine': self.evaluation_engine.get_statistics(),
                'convergence_detector': self.convergence_detector.get_statistics()
            }

            self.logger.info("Final population")
            for individual in self.population:
                self.logger.debug(individual.name, registry_id=individual.registry_id, cost=individual.cost)
            self.logger.info(f"Best configuration: {self.best_individual.name}",
                             cost=f"{self.best_individual.cost:.4f}",
                             registry_id=self.best_individual.registry_id)

            best_summary = {
                'name': self.best_individual.name,
                'registry_id': self.best_individual.registry_id,
                'cost': self.best_individual.cost,
                'configuration': self.parameter_space.serialize(self.best_individual.config)
            }
            termination_info = {
                'converged': converged,
                'termination_reason': reason,
                'final_generation': generation
            }
            self.reporter.save_run_summary(best_summary, termination_info, component_stats)
            self.reporter.export_cost_history()
        finally:
            self.reporter.cleanup()

        return GARunResult(
            best_individual=self.best_individual.copy(),
            final_stats=self.history[-1],
            generations=generation,
            termination_reason=reason,
            converged=converged,
            history=list(self.history),
            component_stats=component_stats,
            seed=self.seed
        )
