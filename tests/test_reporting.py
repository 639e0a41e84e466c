"""
Reporting Tests

Tests the generation CSV, cost history and run summary files.
"""

import os
import csv
import json
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests.test_fixtures import TestFixtures, TemporaryOutputDir
from ga_components.individual import GenerationStats
from ga_components.reporting import GAReporter
from ga_logging import setup_logging


class TestGAReporter(unittest.TestCase):

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.space = TestFixtures.get_parameter_space()

    def test_generation_csv_has_parameter_columns(self):
        with TemporaryOutputDir() as output_dir:
            reporter = GAReporter(output_dir, "exp")
            population = TestFixtures.make_population([3.0, 1.0])
            stats = GenerationStats.from_population(population, 1)

            path = reporter.save_generation_data(stats, population, self.space, {'workload_size': 2})

            with open(path, newline='') as f:
                rows = list(csv.DictReader(f))
            self.assertEqual(len(rows), 2)
            self.assertEqual(rows[1]['name'], "Ind_1")
            self.assertEqual(float(rows[1]['cost']), 1.0)
            self.assertEqual(rows[1]['mode'], 'a')
            self.assertEqual(reporter.statistics['best_overall_cost'], 1.0)

    def test_history_and_summary(self):
        with TemporaryOutputDir() as output_dir:
            reporter = GAReporter(output_dir, "exp")
            reporter.start_run({'population_size': 2})
            for generation, costs in enumerate([[4.0, 2.0], [3.0, 1.5]], 1):
                population = TestFixtures.make_population(costs)
                reporter.save_generation_data(GenerationStats.from_population(population, generation),
                                              population, self.space)

            history_path = reporter.export_cost_history()
            summary_path = reporter.save_run_summary({'name': 'Ind_1', 'cost': 1.5},
                                                     {'converged': True, 'termination_reason': 'test'})
            reporter.cleanup()

            with open(history_path, newline='') as f:
                history = list(csv.DictReader(f))
            self.assertEqual([float(row['best_cost']) for row in history], [2.0, 1.5])
            self.assertEqual([float(row['mean_cost']) for row in history], [3.0, 2.25])

            with open(summary_path) as f:
                summary = json.load(f)
            self.assertEqual(summary['global_best']['cost'], 1.5)
            self.assertTrue(summary['termination']['converged'])
            self.assertEqual(summary['statistics']['total_generations'], 2)

            with open(os.path.join(output_dir, "exp_log.txt")) as f:
                self.assertIn("Run completed.", f.read())
            self.assertIsNone(reporter.log_file)


if __name__ == '__main__':
    unittest.main()
