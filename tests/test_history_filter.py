"""Tests for history filtering and statistics."""
import unittest
from datetime import datetime, timedelta
from multistop.domain.history import HistoryRecord, NavigationDestination, NavigationStatus
from multistop.query.history_filter import (
    CATEGORY_STATUSES, FilterCategory, filter_history, sort_by_start_time, statuses_for_categories
)
from multistop.query.statistics import compute_statistics

BASE = datetime(2026, 5, 10, 9, 0)


def record(description, status, stops=(), hours=0, estimated=30, actual=None, alarms=0, distance=5.0):
    destinations = [
        NavigationDestination(name=name, address="", latitude=0.0, longitude=0.0, order=i)
        for i, name in enumerate(stops)
    ]
    return HistoryRecord(
        route_description=description,
        start_time=BASE + timedelta(hours=hours),
        status=status,
        destinations=destinations,
        total_distance=distance,
        estimated_duration=estimated,
        actual_duration=actual,
        alarms_triggered=alarms
    )


class TestHistoryFilter(unittest.TestCase):
    """Test the status and text filter."""

    def setUp(self):
        """Set up one record per status."""
        self.completed = record("Home → Office", NavigationStatus.COMPLETED, ["Home", "Office"], hours=0)
        self.cancelled = record("Single destination: Mall", NavigationStatus.CANCELLED, ["Mall"], hours=1)
        self.failed = record("Park → ... → Museum", NavigationStatus.FAILED,
                             ["Park", "Central Library", "Cafe", "Museum"], hours=2)
        self.ongoing = record("School → Gym", NavigationStatus.IN_PROGRESS, ["School", "Gym"], hours=3)
        self.records = [self.completed, self.cancelled, self.failed, self.ongoing]

    def test_no_filters_returns_everything_in_order(self):
        """Test that empty filters keep the full input order."""
        self.assertEqual(filter_history(self.records, set(), ""), self.records)

    def test_empty_input(self):
        self.assertEqual(filter_history([], {NavigationStatus.COMPLETED}, "home"), [])

    def test_status_filter(self):
        result = filter_history(self.records, {NavigationStatus.COMPLETED})
        self.assertEqual(result, [self.completed])

    def test_cancelled_category_includes_failed(self):
        """Test that the cancelled category covers CANCELLED and FAILED."""
        statuses = statuses_for_categories([FilterCategory.CANCELLED])
        self.assertEqual(statuses, {NavigationStatus.CANCELLED, NavigationStatus.FAILED})
        self.assertEqual(filter_history(self.records, statuses), [self.cancelled, self.failed])

    def test_category_table(self):
        """Test the category-to-status mapping."""
        self.assertEqual(CATEGORY_STATUSES[FilterCategory.ALL], frozenset())
        self.assertEqual(CATEGORY_STATUSES[FilterCategory.COMPLETED], {NavigationStatus.COMPLETED})
        self.assertEqual(CATEGORY_STATUSES[FilterCategory.IN_PROGRESS], {NavigationStatus.IN_PROGRESS})

    def test_all_category_clears_selection(self):
        statuses = statuses_for_categories([FilterCategory.COMPLETED, FilterCategory.ALL])
        self.assertEqual(statuses, frozenset())

    def test_categories_accept_strings(self):
        statuses = statuses_for_categories(["completed", "in_progress"])
        self.assertEqual(statuses, {NavigationStatus.COMPLETED, NavigationStatus.IN_PROGRESS})

    def test_query_matches_description_case_insensitive(self):
        self.assertEqual(filter_history(self.records, query="hOmE"), [self.completed])

    def test_query_matches_destination_only(self):
        """Test a stop name hidden from the abbreviated description still matches."""
        result = filter_history(self.records, query="central lib")
        self.assertEqual(result, [self.failed])

    def test_query_is_plain_substring(self):
        """Test that words are not matched independently."""
        self.assertEqual(filter_history(self.records, query="office home"), [])

    def test_query_surrounding_whitespace_ignored(self):
        self.assertEqual(filter_history(self.records, query="  mall "), [self.cancelled])

    def test_combined_filters(self):
        """Test that status and text both have to match."""
        statuses = statuses_for_categories([FilterCategory.CANCELLED])
        self.assertEqual(filter_history(self.records, statuses, "gym"), [])
        self.assertEqual(filter_history(self.records, statuses, "museum"), [self.failed])

    def test_input_not_modified(self):
        records = list(self.records)
        filter_history(records, {NavigationStatus.FAILED}, "park")
        self.assertEqual(records, self.records)

    def test_sort_newest_first(self):
        self.assertEqual(sort_by_start_time(self.records), list(reversed(self.records)))
        self.assertEqual(sort_by_start_time(self.records, descending=False), self.records)


class TestHistoryStatistics(unittest.TestCase):
    """Test aggregate statistics."""

    def test_empty(self):
        stats = compute_statistics([])
        self.assertEqual(stats.total_navigations, 0)
        self.assertEqual(stats.average_duration, 0.0)
        self.assertIsNone(stats.most_visited_destination)

    def test_totals(self):
        records = [
            record("a", NavigationStatus.COMPLETED, ["Home", "Office"], estimated=30, actual=40, alarms=2),
            record("b", NavigationStatus.CANCELLED, ["Office"], estimated=20, alarms=1),
            record("c", NavigationStatus.FAILED, ["Office", "Gym"], estimated=60),
        ]
        stats = compute_statistics(records)

        self.assertEqual(stats.total_navigations, 3)
        self.assertEqual(stats.completed_navigations, 1)
        self.assertEqual(stats.cancelled_navigations, 1)
        self.assertEqual(stats.failed_navigations, 1)
        self.assertAlmostEqual(stats.total_distance, 15.0)
        self.assertEqual(stats.total_duration, 120)
        self.assertAlmostEqual(stats.average_duration, 40.0)
        self.assertEqual(stats.total_alarms, 3)
        self.assertEqual(stats.most_visited_destination, "Office")


if __name__ == '__main__':
    unittest.main()
