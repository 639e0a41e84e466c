"""
Cost Function and Workload Tests

Tests cost aggregation (average and PARX) and workload construction
(fixed repeats and racing).
"""

import os
import random
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ga_constants import ExecutionConstants, JobStatus
from ga_components.individual import JobOutcome, WorkloadEntry
from ga_components.cost_functions import AverageCost, PARXCost, create_cost_function
from ga_components.workload import Workload
from ga_exceptions import ConfigurationError, EvaluationError


def example_outcomes():
    """Runtimes 2, 3, a failed run and 1 with a CPU limit of 10."""
    limit = 10.0
    return [
        JobOutcome(JobStatus.FINISHED, 2.0, JobStatus.RESULT_SUCCESS, limit),
        JobOutcome(JobStatus.FINISHED, 3.0, JobStatus.RESULT_SUCCESS, limit),
        JobOutcome(JobStatus.CRASHED, 0.5, JobStatus.RESULT_FAILURE, limit),
        JobOutcome(JobStatus.FINISHED, 1.0, JobStatus.RESULT_SUCCESS, limit),
    ]


class TestCostFunctions(unittest.TestCase):

    def test_average(self):
        self.assertAlmostEqual(AverageCost().compute(example_outcomes(), 4), 4.0)

    def test_parx(self):
        self.assertAlmostEqual(PARXCost(10).compute(example_outcomes(), 4), 26.5)

    def test_time_limit_counts_as_failure(self):
        outcome = JobOutcome(JobStatus.TIME_LIMIT_EXCEEDED, 10.0, JobStatus.RESULT_TIME_LIMIT, 10.0)
        self.assertFalse(outcome.is_success)
        self.assertEqual(PARXCost(2).compute([outcome], 1), 20.0)

    def test_unknown_result_counts_as_failure(self):
        outcome = JobOutcome(JobStatus.FINISHED, 1.0, JobStatus.RESULT_UNKNOWN, 5.0)
        self.assertEqual(AverageCost().compute([outcome], 1), 5.0)

    def test_divides_by_workload_size(self):
        outcomes = example_outcomes()[:2]
        self.assertAlmostEqual(AverageCost().compute(outcomes, 4), 1.25)

    def test_tags(self):
        self.assertEqual(AverageCost().tag, "average")
        self.assertEqual(PARXCost(10).tag, "par10")
        self.assertEqual(create_cost_function("parx", 3).tag, "par3")
        self.assertIsInstance(create_cost_function("average"), AverageCost)

    def test_invalid_inputs(self):
        with self.assertRaises(ConfigurationError):
            create_cost_function("median")
        with self.assertRaises(ConfigurationError):
            PARXCost(0)
        with self.assertRaises(EvaluationError):
            AverageCost().compute(example_outcomes(), 0)

    def test_terminal_status_codes(self):
        self.assertFalse(JobOutcome(JobStatus.NOT_STARTED).is_terminal)
        self.assertFalse(JobOutcome(JobStatus.RUNNING).is_terminal)
        self.assertTrue(JobOutcome(JobStatus.FINISHED).is_terminal)
        self.assertTrue(JobOutcome(JobStatus.TIME_LIMIT_EXCEEDED).is_terminal)
        self.assertTrue(JobOutcome(JobStatus.TIMED_OUT_BY_WRAPPER).is_terminal)


class TestWorkload(unittest.TestCase):

    def test_fixed_workload_is_repeat_major(self):
        workload = Workload([11, 12, 13], random.Random(8), num_runs_per_instance=2)

        replay = random.Random(8)
        expected = []
        for _ in range(2):
            for instance_id in [11, 12, 13]:
                expected.append(WorkloadEntry(instance_id, replay.randrange(ExecutionConstants.MAX_SEED)))

        self.assertEqual(workload.entries, expected)
        self.assertEqual(len(workload), 6)
        self.assertEqual(workload.size_for(1), 6)
        self.assertEqual(workload.entries_for(5), expected)

    def test_racing_prefix_grows_with_generation(self):
        workload = Workload([1, 2, 3], random.Random(0), racing_course_length=25)

        self.assertTrue(workload.is_racing)
        self.assertEqual(workload.size_for(1), 2)
        self.assertEqual(workload.size_for(4), 10)
        self.assertEqual(workload.size_for(10), 25)
        self.assertEqual(workload.size_for(30), 25)
        self.assertEqual(workload.entries_for(4), workload.entries[:10])
        self.assertEqual([entry.instance_id for entry in workload.entries[:4]], [1, 2, 3, 1])

    def test_racing_prefix_has_at_least_one_entry(self):
        workload = Workload([1], random.Random(0), racing_course_length=5)
        self.assertEqual(workload.size_for(1), 1)

    def test_invalid_workloads(self):
        with self.assertRaises(ConfigurationError):
            Workload([], random.Random(0))
        with self.assertRaises(ConfigurationError):
            Workload([1], random.Random(0), num_runs_per_instance=0)
        with self.assertRaises(ConfigurationError):
            Workload([1], random.Random(0), racing_course_length=0)


if __name__ == '__main__':
    unittest.main()
