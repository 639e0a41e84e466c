"""
Evaluation Tests

Tests deduplicated dispatch, job polling and cost write-back of the
evaluation engine against a scripted execution service.
"""

import os
import random
import sys
import unittest
from unittest.mock import Mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests.test_fixtures import TestFixtures, ScriptedExecutionService, config_runtime
from ga_constants import JobStatus
from ga_components.individual import Individual, JobOutcome
from ga_components.workload import Workload
from ga_components.cost_functions import AverageCost, PARXCost
from ga_components.evaluation import EvaluationEngine, JobPoller, PollingStrategy
from ga_exceptions import EvaluationError, ExecutionServiceError, InvalidCostError
from ga_logging import setup_logging


class TestEvaluationEngine(unittest.TestCase):

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.space = TestFixtures.get_parameter_space()
        self.sleeps = []

    def make_engine(self, service, cost_function=None, racing_course_length=None, cpu_time_limit=10.0):
        workload = Workload(service.get_instance_ids(), random.Random(0),
                            racing_course_length=racing_course_length)
        poller = JobPoller(service, PollingStrategy(interval=1.0, sleep=self.sleeps.append), show_progress=False)
        return EvaluationEngine(service, self.space, workload, cost_function or AverageCost(),
                                cpu_time_limit=cpu_time_limit, poller=poller)

    def test_value_equal_configs_are_registered_once(self):
        service = ScriptedExecutionService(instance_ids=(1, 2))
        engine = self.make_engine(service)
        config_a = TestFixtures.make_config(5, 0.5, 'a')
        config_b = TestFixtures.make_config(7, 0.3, 'b')
        population = [Individual(config_a), Individual(TestFixtures.make_config(5, 0.5, 'a')), Individual(config_b)]

        engine.evaluate_population(population, generation=1)

        self.assertEqual(len(service.register_calls), 2)
        self.assertEqual(len(service.dispatch_calls), 4)
        self.assertEqual(len(service.poll_calls), 1)
        self.assertEqual(population[0].registry_id, population[1].registry_id)

        expected_a = (config_runtime(config_a, 1) + config_runtime(config_a, 2)) / 2
        self.assertAlmostEqual(population[0].cost, expected_a)
        self.assertAlmostEqual(population[1].cost, expected_a)
        self.assertAlmostEqual(service.get_cost(population[0].registry_id), expected_a)
        self.assertEqual(service.set_cost_calls[0][2], "average")

        stats = engine.get_statistics()
        self.assertEqual(stats['configs_registered'], 2)
        self.assertEqual(stats['dedup_hits'], 1)
        self.assertEqual(stats['jobs_dispatched'], 4)

    def test_new_configurations_are_named_by_generation(self):
        service = ScriptedExecutionService(instance_ids=(1,))
        engine = self.make_engine(service)
        population = [Individual(TestFixtures.make_config(5, 0.5, 'a'))]

        engine.evaluate_population(population, generation=3)

        self.assertEqual(population[0].name, "Gen 3 x=5 y=0.5 mode=a")
        self.assertEqual(service.register_calls, ["Gen 3 x=5 y=0.5 mode=a"])

    def test_partial_poll_responses_are_not_terminal(self):
        service = ScriptedExecutionService(instance_ids=(1, 2), reveal_per_poll=1)
        engine = self.make_engine(service)
        population = [Individual(TestFixtures.make_config(1, 0.1, 'a')),
                      Individual(TestFixtures.make_config(2, 0.2, 'b'))]

        engine.evaluate_population(population, generation=1)

        # only pending handles are polled
        self.assertEqual([len(handles) for handles in service.poll_calls], [4, 3, 2, 1])
        self.assertEqual(self.sleeps, [1.0, 1.0, 1.0])
        self.assertTrue(all(individual.cost is not None for individual in population))
        self.assertEqual(engine.get_statistics()['polls'], 4)

    def test_nothing_to_dispatch_does_not_poll(self):
        service = ScriptedExecutionService()
        engine = self.make_engine(service)
        population = TestFixtures.make_population([1.0, 2.0])

        engine.evaluate_population(population, generation=2)

        self.assertEqual(service.poll_calls, [])
        self.assertEqual(self.sleeps, [])
        self.assertEqual([individual.cost for individual in population], [1.0, 2.0])

    def test_dedup_against_earlier_generation(self):
        service = ScriptedExecutionService()
        config = TestFixtures.make_config(4, 0.4, 'c')
        registry_id = service.add_evaluated(config, "Gen 1 old", 1.5)
        engine = self.make_engine(service)
        population = [Individual(TestFixtures.make_config(4, 0.4, 'c'))]

        engine.evaluate_population(population, generation=2)

        self.assertEqual(population[0].registry_id, registry_id)
        self.assertEqual(population[0].name, "Gen 1 old")
        self.assertEqual(population[0].cost, 1.5)
        self.assertEqual(service.dispatch_calls, [])

    def test_missing_registry_cost_fails(self):
        service = ScriptedExecutionService()
        service.register(TestFixtures.make_config(4, 0.4, 'c'), "never evaluated")
        engine = self.make_engine(service)

        with self.assertRaises(EvaluationError):
            engine.evaluate_population([Individual(TestFixtures.make_config(4, 0.4, 'c'))], generation=2)

    def test_failed_runs_are_penalized(self):
        service = ScriptedExecutionService(instance_ids=(1,),
                                           solver=lambda config, instance, seed, limit: (0.5, JobStatus.RESULT_FAILURE))
        engine = self.make_engine(service, cost_function=PARXCost(10), cpu_time_limit=3.0)
        population = [Individual(TestFixtures.make_config())]

        engine.evaluate_population(population, generation=1)

        self.assertEqual(population[0].cost, 30.0)
        self.assertEqual(service.set_cost_calls[0][2], "par10")

    def test_racing_uses_generation_prefix(self):
        service = ScriptedExecutionService(instance_ids=(1, 2))
        engine = self.make_engine(service, racing_course_length=20)
        population = [Individual(TestFixtures.make_config())]

        engine.evaluate_population(population, generation=1)
        self.assertEqual(len(service.dispatch_calls), 2)

        population = [Individual(TestFixtures.make_config(9, 0.9, 'b'))]
        engine.evaluate_population(population, generation=5)
        self.assertEqual(len(service.dispatch_calls), 2 + 10)

    def test_negative_cost_is_rejected(self):
        service = ScriptedExecutionService(instance_ids=(1,),
                                           solver=lambda config, instance, seed, limit: (-1.0, JobStatus.RESULT_SUCCESS))
        engine = self.make_engine(service)
        with self.assertRaises(InvalidCostError):
            engine.evaluate_population([Individual(TestFixtures.make_config())], generation=1)


class TestJobPoller(unittest.TestCase):

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_no_handles_returns_immediately(self):
        service = ScriptedExecutionService()
        poller = JobPoller(service, PollingStrategy(interval=5.0, sleep=self.fail), show_progress=False)
        outcomes, peak_memory = poller.await_all([])
        self.assertEqual(outcomes, {})
        self.assertEqual(service.poll_calls, [])
        self.assertGreaterEqual(peak_memory, 0.0)

    def test_service_failures_are_wrapped(self):
        service = Mock()
        service.poll_status.side_effect = ConnectionError("database gone")
        poller = JobPoller(service, PollingStrategy(interval=0.0), show_progress=False)

        with self.assertRaises(ExecutionServiceError) as context:
            poller.await_all([1, 2])
        self.assertIsInstance(context.exception.__cause__, ConnectionError)

    def test_duplicate_handles_are_polled_once(self):
        service = Mock()
        service.poll_status.return_value = {7: JobOutcome(JobStatus.FINISHED, 1.0, JobStatus.RESULT_SUCCESS, 5.0)}
        poller = JobPoller(service, PollingStrategy(interval=0.0), show_progress=False)

        outcomes, _ = poller.await_all([7, 7])

        service.poll_status.assert_called_once_with([7])
        self.assertEqual(outcomes[7].result_time, 1.0)
        self.assertEqual(poller.stats['polls'], 1)

    def test_zero_interval_does_not_sleep(self):
        sleeps = []
        strategy = PollingStrategy(interval=0.0, sleep=sleeps.append)
        strategy.wait()
        self.assertEqual(sleeps, [])


if __name__ == '__main__':
    unittest.main()
