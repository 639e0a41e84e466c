"""
Logging for the GA Solver Configurator

Every component logs through a named child of the ``ga`` logger, so one call
to setup_logging configures console and file output for the whole run.
Keyword arguments passed to the log methods are attached to the record and
rendered as ``key=value`` context by the formatter.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "ga"


class GAFormatter(logging.Formatter):
    """Formatter with level colors and trailing ``key=value`` context."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        self.use_colors = use_colors and hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
        fmt = '%(levelname)-8s | %(component)s | %(message)s'
        if include_timestamp:
            fmt = '[%(asctime)s] ' + fmt
        super().__init__(fmt, '%H:%M:%S' if include_timestamp else None)

    def format(self, record):
        record = logging.makeLogRecord(record.__dict__)
        record.component = record.name.split('.', 1)[-1]

        context: Dict[str, Any] = getattr(record, 'context', None) or {}
        if context:
            record.msg = f"{record.getMessage()} | " + " | ".join(f"{k}={v}" for k, v in context.items())
            record.args = None

        if self.use_colors and record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


class GALogger:
    """
    Component logger with structured context and GA-specific helpers.

    Usage:
        logger = get_logger("EvaluationEngine")
        logger.info("Dispatched batch", jobs=40)
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    def _log(self, level: int, message: str, exception: Optional[BaseException] = None, **context):
        if exception is not None:
            message = f"{message} | Exception: {type(exception).__name__}: {exception}"
        self.logger.log(level, message, extra={'context': context})

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, exception: Exception = None, **context):
        self._log(logging.ERROR, message, exception, **context)

    def critical(self, message: str, exception: Exception = None, **context):
        self._log(logging.CRITICAL, message, exception, **context)

    # GA-specific logging methods
    def log_generation_start(self, generation: int, population_size: int):
        self.info(f"Starting generation {generation}", population_size=population_size)

    def log_generation_complete(self, generation: int, best_cost: float, mean_cost: float,
                                time_taken: float, peak_memory: float):
        self.info(f"Generation {generation} complete",
                  best_cost=f"{best_cost:.4f}",
                  mean_cost=f"{mean_cost:.4f}",
                  time_taken=f"{time_taken:.2f}s",
                  peak_memory=f"{peak_memory:.2f}GB")

    def log_global_best(self, generation: int, name: str, cost: float):
        self.info(f"Generation {generation} - global best: {name}", cost=f"{cost:.4f}")

    def log_job_batch(self, generation: int, registered: int, deduplicated: int, jobs: int):
        self.info(f"Dispatched evaluation batch for generation {generation}",
                  registered=registered, deduplicated=deduplicated, jobs=jobs)

    def log_dedup_hit(self, individual_name: str, registry_id: int):
        """Reuse of a configuration that is already in the registry."""
        self.debug(f"Reusing existing configuration {individual_name}", registry_id=registry_id)

    def log_convergence(self, generation: int, reason: str):
        self.info(f"Convergence detected at generation {generation}", reason=reason)

    def log_config_summary(self, config):
        self.info("GA Configuration loaded",
                  population=config.population_size,
                  tournament=config.tournament_size,
                  crossover=f"{config.crossover_mode}/{config.crossover_operator}",
                  mutation=config.mutation_mode,
                  cost_function=config.cost_tag,
                  max_hits=config.max_termination_hits)


def get_logger(name: str = "GA") -> GALogger:
    """Logger of one component; output follows the last setup_logging call."""
    return GALogger(name)


def setup_logging(level: str = "INFO", log_to_file: bool = True,
                  output_dir: str = "logs", console_colors: bool = True) -> GALogger:
    """
    Configure console and optional file output for all component loggers.

    Replaces the handlers of any earlier call. The file handler records
    every level to ``configurator_<timestamp>.log`` in ``output_dir``.

    Returns:
        Logger for the entry point
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(logging.DEBUG if log_to_file else numeric_level)
    root.propagate = False

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(GAFormatter(use_colors=console_colors, include_timestamp=False))
    root.addHandler(console_handler)

    if log_to_file:
        log_dir = Path(output_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"configurator_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(GAFormatter(use_colors=False, include_timestamp=True))
        root.addHandler(file_handler)

    return get_logger("Main")
