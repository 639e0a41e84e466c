"""
Configuration Management for the GA Solver Configurator

Validates and organizes user-provided parameters into a clean structure.
One engine covers every historical variant (fixed/adaptive probabilities,
1-/2-point crossover, fixed/racing workload, average/PARX cost, seeding from
best-known configurations); the variant is selected here.
"""

import os
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional
from ga_constants import (
    GAConstants, TerminationConstants, ExecutionConstants,
    CostFunctionNames, OperatorNames
)
from ga_exceptions import ConfigurationError


# camelCase keys of experiment configuration files
FILE_KEY_MAP = {
    'populationSize': 'population_size',
    'tournamentSize': 'tournament_size',
    'crossoverProbability': 'crossover_probability',
    'mutationProbability': 'mutation_probability',
    'mutationStandardDeviationFactor': 'mutation_step_factor',
    'maxTerminationCriterionHits': 'max_termination_hits',
    'jobCPUTimeLimit': 'job_cpu_time_limit',
    'numRunsPerInstance': 'num_runs_per_instance',
    'useExistingConfigs': 'seed_from_best',
    'seed': 'seed',
    'crossoverMode': 'crossover_mode',
    'crossoverOperator': 'crossover_operator',
    'crossoverChildren': 'crossover_children',
    'mutationMode': 'mutation_mode',
    'costFunction': 'cost_function',
    'parxPenalty': 'parx_penalty',
    'racingCourseLength': 'racing_course_length',
    'pollInterval': 'poll_interval',
    'maxGenerations': 'max_generations',
    'outputDir': 'output_dir',
}

# Connection keys belong to the execution service, not the engine
SERVICE_KEYS = ('host', 'user', 'password', 'port', 'database', 'idExperiment')


@dataclass
class GAConfig:
    """
    Configuration container that validates and organizes engine parameters.

    Every field has a default, so a config can be built from a file, from
    CLI arguments or from a dict and then validated in one place.
    """

    # Core GA Parameters
    population_size: int = GAConstants.DEFAULT_POPULATION_SIZE
    tournament_size: int = GAConstants.DEFAULT_TOURNAMENT_SIZE

    # Variation policies
    crossover_mode: str = OperatorNames.ADAPTIVE        # "adaptive", "fixed"
    crossover_operator: str = OperatorNames.ONE_POINT   # "one_point", "two_point"
    crossover_children: int = 1                         # 1 or 2 (paired)
    crossover_probability: float = GAConstants.DEFAULT_CROSSOVER_PROBABILITY
    mutation_mode: str = OperatorNames.ADAPTIVE
    mutation_probability: float = GAConstants.DEFAULT_MUTATION_PROBABILITY
    mutation_step_factor: float = GAConstants.DEFAULT_MUTATION_STEP_FACTOR

    # Termination
    max_termination_hits: int = TerminationConstants.DEFAULT_MAX_HITS
    reset_hits_on_improvement: bool = False
    max_generations: Optional[int] = None

    # Evaluation
    cost_function: str = CostFunctionNames.AVERAGE      # "average", "parx"
    parx_penalty: int = CostFunctionNames.DEFAULT_PARX_PENALTY
    num_runs_per_instance: int = 1
    racing_course_length: Optional[int] = None
    job_cpu_time_limit: float = ExecutionConstants.DEFAULT_CPU_TIME_LIMIT
    poll_interval: float = ExecutionConstants.DEFAULT_POLL_INTERVAL_SECONDS

    # Initialization
    seed_from_best: int = 0
    seed: Optional[int] = None

    # Output
    output_dir: str = "ga_results"
    show_progress: bool = True

    def __post_init__(self):
        """Validate parameters after initialization."""
        self._validate()

    def _validate(self):
        """Validate critical parameters to catch errors before the search starts."""
        errors = []

        # Population validation
        if self.population_size < GAConstants.MIN_POPULATION_SIZE:
            errors.append(f"Population size ({self.population_size}) must be positive")
        if self.crossover_children not in (1, 2):
            errors.append(f"Crossover children ({self.crossover_children}) must be 1 or 2")
        elif self.crossover_children == 2 and self.population_size % 2 != 0:
            errors.append(f"Population size ({self.population_size}) must be even for paired crossover")

        # Tournament validation
        if self.tournament_size < GAConstants.MIN_TOURNAMENT_SIZE:
            errors.append(f"Tournament size ({self.tournament_size}) must be positive")
        if self.tournament_size > self.population_size:
            errors.append(f"Tournament size ({self.tournament_size}) cannot exceed population size ({self.population_size})")

        # Policy validation
        if self.crossover_mode not in OperatorNames.PROBABILITY_MODES:
            errors.append(f"Crossover mode ({self.crossover_mode}) must be one of: {list(OperatorNames.PROBABILITY_MODES)}")
        if self.mutation_mode not in OperatorNames.PROBABILITY_MODES:
            errors.append(f"Mutation mode ({self.mutation_mode}) must be one of: {list(OperatorNames.PROBABILITY_MODES)}")
        if self.crossover_operator not in OperatorNames.CROSSOVER_OPERATORS:
            errors.append(f"Crossover operator ({self.crossover_operator}) must be one of: {list(OperatorNames.CROSSOVER_OPERATORS)}")

        # Rate validation
        if not 0.0 <= self.crossover_probability <= 1.0:
            errors.append(f"Crossover probability ({self.crossover_probability}) must be between 0.0 and 1.0")
        if not 0.0 <= self.mutation_probability <= 1.0:
            errors.append(f"Mutation probability ({self.mutation_probability}) must be between 0.0 and 1.0")
        if self.mutation_step_factor < 0:
            errors.append(f"Mutation step factor ({self.mutation_step_factor}) cannot be negative")

        # Termination validation
        if self.max_termination_hits < 1:
            errors.append(f"Max termination hits ({self.max_termination_hits}) must be at least 1")
        if self.max_generations is not None and self.max_generations < 1:
            errors.append(f"Max generations ({self.max_generations}) must be positive")

        # Evaluation validation
        if self.cost_function not in CostFunctionNames.ALL:
            errors.append(f"Cost function ({self.cost_function}) must be one of: {list(CostFunctionNames.ALL)}")
        if self.parx_penalty < 1:
            errors.append(f"PARX penalty ({self.parx_penalty}) must be at least 1")
        if self.num_runs_per_instance < 1:
            errors.append(f"Runs per instance ({self.num_runs_per_instance}) must be positive")
        if self.racing_course_length is not None and self.racing_course_length < 1:
            errors.append(f"Racing course length ({self.racing_course_length}) must be positive")
        if self.job_cpu_time_limit <= 0:
            errors.append(f"Job CPU time limit ({self.job_cpu_time_limit}) must be positive")
        if self.poll_interval < 0:
            errors.append(f"Poll interval ({self.poll_interval}) cannot be negative")
        if self.seed_from_best < 0:
            errors.append(f"Seed from best ({self.seed_from_best}) cannot be negative")

        # Directory validation
        if not self.output_dir or not self.output_dir.strip():
            errors.append("Output directory cannot be empty")

        if errors:
            raise ConfigurationError("Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors))

    @property
    def is_racing(self) -> bool:
        return self.racing_course_length is not None

    @property
    def paired_crossover(self) -> bool:
        return self.crossover_children == 2

    @classmethod
    def from_args(cls, args, base: 'GAConfig' = None) -> 'GAConfig':
        """
        Create configuration from parsed CLI arguments.

        Arguments left at None keep the value of ``base`` (or the default).

        Args:
            args: argparse.Namespace from CLI parsing
            base: Configuration to override, e.g. one loaded from a file

        Returns:
            Validated GAConfig instance
        """
        config_params = base.to_dict() if base is not None else {}
        for field in fields(cls):
            value = getattr(args, field.name, None)
            if value is not None:
                config_params[field.name] = value
        return cls(**config_params)

    @classmethod
    def from_file(cls, file_path: str) -> 'GAConfig':
        """
        Load configuration from a ``key = value`` file.

        Lines starting with ``%`` are comments. Both the experiment-file camelCase
        keys and the field names are accepted; connection keys are ignored.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If a key is unknown or a value is malformed
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Configuration file '{file_path}' not found.")

        field_types = {field.name: field.type for field in fields(cls)}
        config_params: Dict[str, Any] = {}
        use_existing = False

        with open(file_path, 'r') as file:
            for line_number, line in enumerate(file, 1):
                line = line.strip()
                if not line or line.startswith('%'):
                    continue
                if '=' not in line:
                    raise ConfigurationError(f"{file_path}:{line_number}: expected 'key = value', got '{line}'")

                key, value = (part.strip() for part in line.split('=', 1))
                if key in SERVICE_KEYS:
                    continue
                name = FILE_KEY_MAP.get(key, key)
                if name not in field_types:
                    raise ConfigurationError(f"{file_path}:{line_number}: unknown configuration key '{key}'")

                config_params[name] = cls._parse_value(name, value, field_types[name])
                if key == 'useExistingConfigs':
                    use_existing = config_params[name] == 1

        # useExistingConfigs = 1 seeds the whole population from the registry
        if use_existing:
            config_params['seed_from_best'] = config_params.get(
                'population_size', GAConstants.DEFAULT_POPULATION_SIZE)

        return cls(**config_params)

    @staticmethod
    def _parse_value(name: str, value: str, field_type) -> Any:
        """Convert a raw file value to the type of the named field."""
        type_name = field_type.__name__ if isinstance(field_type, type) else str(field_type)
        try:
            if name == 'seed_from_best':
                return int(value)
            if 'bool' in type_name:
                return value.lower() in ('1', 'true', 'yes', 'on')
            if 'int' in type_name:
                return int(value)
            if 'float' in type_name:
                return float(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value '{value}' for '{name}': {e}") from e
        return value

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        summary = f"""GA Configuration:
  Population: {self.population_size} (tournament: {self.tournament_size})
  Crossover: {self.crossover_mode}, {self.crossover_operator}, {self.crossover_children} child(ren)
  Mutation: {self.mutation_mode} (step factor: {self.mutation_step_factor:.3f})
  Termination: {self.max_termination_hits} hits
  Cost function: {self.cost_tag}
  CPU time limit: {self.job_cpu_time_limit}s
  Output: {self.output_dir}"""

        if self.crossover_mode == OperatorNames.FIXED or self.mutation_mode == OperatorNames.FIXED:
            summary += f"""
  Fixed rates: crossover={self.crossover_probability:.3f}, mutation={self.mutation_probability:.3f}"""

        if self.is_racing:
            summary += f"\n  Workload: racing course of {self.racing_course_length} runs"
        else:
            summary += f"\n  Workload: {self.num_runs_per_instance} run(s) per instance"

        if self.seed_from_best:
            summary += f"\n  Seeding: {self.seed_from_best} best-known configuration(s)"

        return summary

    @property
    def cost_tag(self) -> str:
        """Registry tag of the active cost function."""
        if self.cost_function == CostFunctionNames.PARX:
            return f"par{self.parx_penalty}"
        return self.cost_function

    def __str__(self) -> str:
        return f"GAConfig(pop={self.population_size}, tournament={self.tournament_size}, cost={self.cost_tag})"

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'GAConfig':
        """Create config from dictionary."""
        return cls(**config_dict)

    def update(self, **kwargs) -> 'GAConfig':
        """Create a new config with updated values."""
        current_config = self.to_dict()
        current_config.update(kwargs)
        return self.from_dict(current_config)
