"""
Reporting and I/O Module

Persists what a configurator run produced into its output directory:

- generation_<g>.csv          population of generation g with costs and parameters
- <experiment>_log.txt        human-readable run log
- <experiment>_cost_history.csv   best/mean/worst cost per generation
- <experiment>_summary.json   global best, termination and component statistics
"""

import os
import csv
import json
import time
from collections.abc import Mapping
from datetime import datetime
from typing import Dict, List, Any, Optional

from ga_exceptions import ReportingError
from ga_logging import get_logger
from ga_components.individual import Individual, GenerationStats

HISTORY_FIELDS = ['generation', 'best_cost', 'mean_cost', 'worst_cost', 'count', 'workload_size']


class GAReporter:
    """Writes run artifacts; every write failure surfaces as ReportingError."""

    def __init__(self, output_dir: str = "ga_results", experiment_name: str = None):
        self.output_dir = output_dir
        self.experiment_name = experiment_name or f"ga_run_{datetime.now():%Y%m%d_%H%M%S}"
        self.logger = get_logger("Reporter")

        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise ReportingError(f"Cannot create output directory: {e}", output_dir=output_dir) from e

        self.start_time: Optional[float] = None
        self.generation_data: List[Dict[str, Any]] = []
        self.statistics = {
            'total_generations': 0,
            'best_overall_cost': None,
            'total_runtime': 0.0
        }
        self.log_file = None

    def _path(self, filename: str) -> str:
        return os.path.join(self.output_dir, filename)

    def start_run(self, run_config: Dict[str, Any]):
        """Open the run log and record the effective configuration."""
        self.start_time = time.time()
        try:
            self.log_file = open(self._path(f"{self.experiment_name}_log.txt"), 'w')
        except OSError as e:
            raise ReportingError(f"Cannot open run log: {e}", self.output_dir, 'log') from e

        self.log(f"Starting GA run: {self.experiment_name}")
        self.log("Configuration:")
        for key in sorted(run_config):
            self.log(f"  {key}: {run_config[key]}")
        self.log("-" * 50)

    def log(self, message: str, also_print: bool = False):
        """Append a timestamped line to the run log."""
        if self.log_file:
            self.log_file.write(f"[{datetime.now():%H:%M:%S}] {message}\n")
            self.log_file.flush()
        if also_print:
            self.logger.info(message)

    def save_generation_data(self, stats: GenerationStats, population: List[Individual],
                             parameter_space: Any, additional_data: Dict[str, Any] = None) -> str:
        """
        Write the evaluated population of one generation to CSV.

        Mapping configurations get one column per parameter; anything else
        is stored in its serialized form.

        Returns:
            Path of the written CSV file
        """
        record = stats.to_dict()
        record.update(additional_data or {})
        self.generation_data.append(record)

        self.statistics['total_generations'] = stats.generation
        best = self.statistics['best_overall_cost']
        if best is None or stats.best_cost < best:
            self.statistics['best_overall_cost'] = stats.best_cost

        tabular = bool(population) and isinstance(population[0].config, Mapping)
        columns = ['name', 'registry_id', 'cost']
        columns += list(population[0].config.keys()) if tabular else ['configuration']

        rows = []
        for individual in population:
            row = {'name': individual.name, 'registry_id': individual.registry_id, 'cost': individual.cost}
            if tabular:
                row.update(individual.config)
            else:
                row['configuration'] = parameter_space.serialize(individual.config)
            rows.append(row)

        csv_filename = self._path(f"generation_{stats.generation}.csv")
        self._write_csv(csv_filename, columns, rows)

        self.log(f"Generation {stats.generation}: best={stats.best_cost:.4f} "
                 f"mean={stats.mean_cost:.4f} population={stats.count}")
        return csv_filename

    def export_cost_history(self, filename: str = None) -> str:
        """Write best, mean and worst cost of every reported generation."""
        filename = filename or self._path(f"{self.experiment_name}_cost_history.csv")
        self._write_csv(filename, HISTORY_FIELDS, self.generation_data)
        return filename

    def _write_csv(self, filename: str, columns: List[str], rows: List[Dict[str, Any]]):
        try:
            with open(filename, 'w', newline='') as f:
                writer = csv.DictWriter(f, fieldnames=columns, extrasaction='ignore', restval='')
                writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            raise ReportingError(f"Cannot write {filename}: {e}", self.output_dir, 'csv') from e

    def save_run_summary(self, best: Optional[Dict[str, Any]], termination_info: Dict[str, Any] = None,
                         component_stats: Dict[str, Dict[str, Any]] = None) -> str:
        """
        Save the run summary as JSON.

        Args:
            best: Description of the global best individual
            termination_info: Why and when the run stopped
            component_stats: Statistics from the GA components

        Returns:
            Path of the summary file
        """
        if self.start_time:
            self.statistics['total_runtime'] = time.time() - self.start_time

        summary = {
            'experiment_name': self.experiment_name,
            'end_time': datetime.now().isoformat(),
            'statistics': self.statistics,
            'global_best': best,
            'termination': termination_info or {},
            'component_statistics': component_stats or {},
            'generations': self.generation_data
        }

        summary_filename = self._path(f"{self.experiment_name}_summary.json")
        try:
            with open(summary_filename, 'w') as f:
                json.dump(summary, f, indent=2, default=str)
        except OSError as e:
            raise ReportingError(f"Cannot write run summary: {e}", self.output_dir, 'json') from e

        self.log("RUN SUMMARY")
        for key, value in {**self.statistics, **(termination_info or {})}.items():
            self.log(f"  {key}: {value}")
        return summary_filename

    def cleanup(self):
        """Close the run log."""
        if self.log_file:
            self.log("Run completed.")
            self.log_file.close()
            self.log_file = None
