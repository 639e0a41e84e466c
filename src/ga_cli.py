"""
Genetic Algorithm for Solver Parameter Configuration

This module provides a command-line interface for tuning the parameters of
a solver with the adaptive genetic algorithm. Jobs are run locally with the
solver command given on the command line.

Features:
- Parameter space definition through JSON configuration
- Run settings from a key = value configuration file, overridable by flags
- Local parallel job execution with an optional per-job timeout
- Comprehensive logging and result reporting

Usage:
    ga-configurator --param_file params.json --instances a.cnf b.cnf \
        --solver "./solver {params} -seed {seed} {instance}"
"""

import os
import argparse
from typing import List, Optional

# Core GA system
from genetic_algorithm import GeneticAlgorithm
from ga_config import GAConfig
from ga_constants import ExecutionConstants, CostFunctionNames, OperatorNames
from ga_logging import setup_logging

# Execution and parameter space implementations
from ExecutionServices.local_service import LocalExecutionService, CommandSolver
from ExecutionServices.timeout_service import TimeoutExecutionService
from ParameterSpaces.parameter_space import ParameterSpace


def build_parser() -> argparse.ArgumentParser:
    """Command-line arguments; GA settings default to None so the config file or defaults apply."""
    parser = argparse.ArgumentParser(description='Run a genetic algorithm for solver parameter configuration.')

    # Inputs
    parser.add_argument('--param_file', '-p', type=str, required=True,
                        help="JSON file describing the solver parameter space")
    parser.add_argument('--instances', '-i', type=str, nargs='+', required=True,
                        help="Problem instance files")
    parser.add_argument('--solver', '-s', type=str, required=True,
                        help="Solver command template with {instance}, {seed} and {params} placeholders")
    parser.add_argument('--config', '-c', type=str,
                        help="Configuration file with 'key = value' lines")

    # Output
    parser.add_argument('--output_dir', '-o', type=str, help="Folder to store the results (default: 'ga_results')")
    parser.add_argument('--experiment_name', '-e', type=str, help="Prefix of the run summary files")
    parser.add_argument('--log_level', type=str, default="INFO",
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument('--no_progress', action='store_true', help="Disable progress bars")

    # Execution
    parser.add_argument('--max_workers', '-mw', type=int, default=ExecutionConstants.DEFAULT_LOCAL_WORKERS,
                        help=f"Parallel solver runs (default: {ExecutionConstants.DEFAULT_LOCAL_WORKERS})")
    parser.add_argument('--job_timeout', type=float,
                        help="Give up on jobs that are not finished after this many seconds")
    parser.add_argument('--job_cpu_time_limit', '-t', type=float, help="CPU time limit per solver run")
    parser.add_argument('--poll_interval', type=float, help="Seconds between job status polls")

    # GA parameters
    parser.add_argument('--population_size', '-ps', type=int, help="Population size (default: 40)")
    parser.add_argument('--tournament_size', '-ts', type=int, help="Tournament size (default: 3)")
    parser.add_argument('--crossover_mode', choices=OperatorNames.PROBABILITY_MODES)
    parser.add_argument('--crossover_operator', choices=OperatorNames.CROSSOVER_OPERATORS)
    parser.add_argument('--crossover_children', type=int, choices=[1, 2])
    parser.add_argument('--crossover_probability', '-cp', type=float, help="Crossover probability in fixed mode")
    parser.add_argument('--mutation_mode', choices=OperatorNames.PROBABILITY_MODES)
    parser.add_argument('--mutation_probability', '-mp', type=float, help="Mutation probability in fixed mode")
    parser.add_argument('--mutation_step_factor', type=float,
                        help="Mutation standard deviation as a fraction of the parameter range")
    parser.add_argument('--max_termination_hits', type=int, help="Non-improving generations before stopping")
    parser.add_argument('--max_generations', '-g', type=int, help="Hard cap on generations")
    parser.add_argument('--cost_function', choices=CostFunctionNames.ALL)
    parser.add_argument('--parx_penalty', type=int, help="Penalty factor k of PARX")
    parser.add_argument('--num_runs_per_instance', '-r', type=int, help="Runs per instance")
    parser.add_argument('--racing_course_length', type=int, help="Enable racing with this course length")
    parser.add_argument('--seed_from_best', type=int, help="Start from this many best known configurations")
    parser.add_argument('--seed', type=int, help="Random seed")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point of the configurator.

    Parses command-line arguments, builds the parameter space and the local
    execution service, runs the genetic algorithm and logs the best
    configuration found.
    """
    args = build_parser().parse_args(argv)

    base = GAConfig.from_file(args.config) if args.config else None
    config = GAConfig.from_args(args, base=base)
    if args.no_progress:
        config = config.update(show_progress=False)

    logger = setup_logging(
        level=args.log_level,
        log_to_file=True,
        output_dir=config.output_dir,
        console_colors=True
    )

    for instance in args.instances:
        if not os.path.isfile(instance):
            raise FileNotFoundError(f"Instance file '{instance}' not found.")

    parameter_space = ParameterSpace.from_json_file(args.param_file)
    instances = {instance_id: path for instance_id, path in enumerate(args.instances, 1)}
    solver = CommandSolver(args.solver, instances, parameter_space.command_line)

    with LocalExecutionService(solver, instances.keys(), max_workers=args.max_workers) as local_service:
        service = local_service
        if args.job_timeout is not None:
            service = TimeoutExecutionService(local_service, args.job_timeout)

        ga = GeneticAlgorithm(config, parameter_space, service, experiment_name=args.experiment_name)
        logger.info("Starting genetic algorithm", instances=len(instances), seed=ga.seed)

        try:
            result = ga.run()
        except Exception as e:
            logger.critical("GA execution failed", exception=e)
            raise

    logger.info(f"GA completed - Best cost: {result.best_individual.cost:.4f}",
                generations=result.generations, reason=result.termination_reason)
    logger.info(f"Best parameters: {parameter_space.command_line(result.best_individual.config)}")


if __name__ == "__main__":
    main()
