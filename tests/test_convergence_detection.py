"""
Convergence Detection Tests

Tests the non-improvement termination criterion.
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ga_components.convergence_detection import ConvergenceDetector
from ga_exceptions import ConfigurationError


def run_means(detector, means):
    """Feed means until convergence; return the 1-based generation that stopped, or None."""
    for generation, mean in enumerate(means, 1):
        converged, _ = detector.check_convergence(mean)
        if converged:
            return generation
    return None


class TestConvergenceDetector(unittest.TestCase):

    def test_constant_means_stop_at_fourth_generation(self):
        detector = ConvergenceDetector(max_hits=3)
        self.assertEqual(run_means(detector, [10, 10, 10, 10, 10]), 4)
        self.assertEqual(detector.hits, 3)

    def test_first_generation_never_terminates(self):
        detector = ConvergenceDetector(max_hits=1)
        converged, reason = detector.check_convergence(10.0)
        self.assertFalse(converged)
        self.assertEqual(detector.hits, 0)

    def test_five_percent_improvement_continues(self):
        """4.0 beats 0.95 * 4.25, so the run continues."""
        self.assertIsNone(run_means(ConvergenceDetector(max_hits=1), [4.25, 4.0]))

    def test_equal_means_terminate(self):
        self.assertEqual(run_means(ConvergenceDetector(max_hits=1), [4.0, 4.0]), 2)

    def test_insufficient_improvement_counts_as_hit(self):
        """4.1 is worse than 0.95 * 4.25, so it is a non-improvement."""
        self.assertEqual(run_means(ConvergenceDetector(max_hits=1), [4.25, 4.1]), 2)

    def test_counter_is_never_reset_by_default(self):
        detector = ConvergenceDetector(max_hits=2)
        # hit, improvement, hit
        self.assertEqual(run_means(detector, [10, 10, 5, 5]), 4)

    def test_counter_reset_when_requested(self):
        detector = ConvergenceDetector(max_hits=2, reset_on_improvement=True)
        self.assertIsNone(run_means(detector, [10, 10, 5, 5]))
        self.assertEqual(detector.hits, 1)

    def test_invalid_max_hits(self):
        with self.assertRaises(ConfigurationError):
            ConvergenceDetector(max_hits=0)

    def test_statistics(self):
        detector = ConvergenceDetector(max_hits=3)
        run_means(detector, [8.0, 6.0, 7.0])
        stats = detector.get_statistics()
        self.assertEqual(stats['generations'], 3)
        self.assertEqual(stats['hits'], 1)
        self.assertEqual(stats['best_mean'], 6.0)
        self.assertEqual(stats['current_mean'], 7.0)


if __name__ == '__main__':
    unittest.main()
