"""Tests for route building and stop-by-stop progression."""
import unittest
from multistop.domain.place import Place
from multistop.domain.route import Route, RouteState
from multistop.domain.waypoint import Waypoint


def make_route(*names, alarm_for_each_stop=True) -> Route:
    route = Route(name="Test Route", alarm_for_each_stop=alarm_for_each_stop)
    for idx, name in enumerate(names):
        route.append(
            Place(name=name, address=f"{name} Street", latitude=14.6 + idx * 0.01, longitude=121.1),
            estimated_time_from_previous=10,
            distance_from_previous=2.5
        )
    return route


class TestRouteBuilding(unittest.TestCase):
    """Test appending and removing stops."""

    def test_append_assigns_sequential_order(self):
        """Test that appended stops get contiguous order values."""
        route = make_route("A", "B", "C")
        self.assertEqual([wp.order for wp in route.points], [0, 1, 2])
        self.assertEqual([wp.name for wp in route.points], ["A", "B", "C"])

    def test_append_uses_route_alarm_default(self):
        """Test that new stops inherit the route's alarm setting."""
        self.assertTrue(all(wp.alarm_enabled for wp in make_route("A", "B").points))
        self.assertFalse(any(wp.alarm_enabled for wp in make_route("A", "B", alarm_for_each_stop=False).points))

    def test_append_returns_new_waypoint(self):
        """Test that append returns the stop it created."""
        route = make_route("A")
        waypoint = route.append(Place(name="B"))
        self.assertIs(route.points[-1], waypoint)
        self.assertEqual(waypoint.order, 1)
        self.assertFalse(waypoint.is_completed)

    def test_waypoint_ids_are_unique(self):
        """Test that every stop gets its own id."""
        route = make_route("A", "A", "A")
        self.assertEqual(len({wp.id for wp in route.points}), 3)

    def test_remove_middle_renumbers(self):
        """Test removing the second of three stops."""
        route = make_route("A", "B", "C")
        route.remove(route.points[1].id)

        self.assertEqual([wp.name for wp in route.points], ["A", "C"])
        self.assertEqual([wp.order for wp in route.points], [0, 1])

    def test_remove_first_renumbers_all(self):
        """Test that removing the first stop renumbers every remaining stop."""
        route = make_route("A", "B", "C", "D")
        route.remove(route.points[0].id)
        self.assertEqual([wp.order for wp in route.points], [0, 1, 2])
        self.assertEqual([wp.label for wp in route.points], ["A", "B", "C"])

    def test_remove_unknown_id_is_noop(self):
        """Test that an unknown id leaves the route unchanged."""
        route = make_route("A", "B")
        before = route.to_dict()
        route.remove("missing-id")
        self.assertEqual(route.to_dict()["points"], before["points"])

    def test_orders_stay_contiguous_after_mixed_changes(self):
        """Test order contiguity after a sequence of appends and removals."""
        route = make_route("A", "B", "C", "D", "E")
        route.remove(route.points[3].id)
        route.append(Place(name="F"))
        route.remove(route.points[0].id)
        route.append(Place(name="G"))
        route.remove(route.points[-1].id)

        self.assertEqual([wp.order for wp in route.points], list(range(len(route.points))))
        self.assertEqual([wp.name for wp in route.points], ["B", "C", "E", "F"])

    def test_totals_sum_stop_values(self):
        """Test distance and time totals."""
        route = make_route("A", "B", "C")
        self.assertAlmostEqual(route.total_distance, 7.5)
        self.assertEqual(route.total_estimated_time, 30)

    def test_negative_order_rejected(self):
        """Test that invalid stop metadata is a programming error."""
        with self.assertRaises(ValueError):
            Waypoint(place=Place(name="A"), order=-1)
        with self.assertRaises(ValueError):
            Waypoint(place=Place(name="A"), distance_from_previous=-1.0)


class TestRouteProgression(unittest.TestCase):
    """Test advancing through the stops."""

    def test_advance_scenario(self):
        """Test advancing through three stops; the last advance is refused."""
        route = make_route("A", "B", "C")
        a, b, c = route.points

        self.assertTrue(route.advance())
        self.assertEqual(route.current_point_index, 1)
        self.assertTrue(a.is_completed)

        self.assertTrue(route.advance())
        self.assertEqual(route.current_point_index, 2)
        self.assertTrue(b.is_completed)

        self.assertFalse(route.advance(), "Advancing past the last stop should be refused")
        self.assertEqual(route.current_point_index, 2)
        self.assertFalse(c.is_completed, "Last stop is never marked by advance")
        self.assertFalse(route.is_completed)

    def test_advance_empty_route(self):
        """Test that an empty route never advances."""
        route = Route()
        self.assertFalse(route.advance())
        self.assertEqual(route.current_point_index, 0)

    def test_advance_single_stop(self):
        """Test that a single-stop route is already on its last stop."""
        route = make_route("A")
        self.assertFalse(route.advance())
        self.assertEqual(route.current_point_index, 0)
        self.assertFalse(route.points[0].is_completed)

    def test_progress(self):
        """Test progress fraction."""
        self.assertEqual(Route().progress, 0.0)

        route = make_route("A", "B", "C", "D")
        self.assertEqual(route.progress, 0.0)
        route.advance()
        self.assertAlmostEqual(route.progress, 0.25)
        route.advance()
        route.advance()
        self.assertAlmostEqual(route.progress, 0.75)
        self.assertTrue(0.0 <= route.progress <= 1.0)

    def test_derived_views(self):
        """Test current, next, remaining and completed views."""
        route = make_route("A", "B", "C", "D")
        route.advance()

        self.assertEqual(route.current_point.name, "B")
        self.assertEqual(route.next_point.name, "C")
        self.assertEqual([wp.name for wp in route.remaining_points], ["C", "D"])
        self.assertEqual([wp.name for wp in route.completed_points], ["A"])

    def test_derived_views_on_last_stop(self):
        """Test views when the cursor is on the last stop."""
        route = make_route("A", "B")
        route.advance()
        self.assertEqual(route.current_point.name, "B")
        self.assertIsNone(route.next_point)
        self.assertEqual(route.remaining_points, [])

    def test_empty_route_views(self):
        """Test views of an empty route."""
        route = Route()
        self.assertIsNone(route.current_point)
        self.assertIsNone(route.next_point)
        self.assertTrue(route.is_completed)
        self.assertEqual(route.state, RouteState.COMPLETED)

    def test_state(self):
        """Test the derived progression state."""
        route = make_route("A", "B")
        self.assertEqual(route.state, RouteState.NOT_STARTED)
        route.advance()
        self.assertEqual(route.state, RouteState.IN_PROGRESS)

    def test_remove_before_cursor_keeps_index(self):
        """Test that removing a passed stop leaves the cursor index as it was.

        The cursor then points one stop further along than before.
        """
        route = make_route("A", "B", "C")
        route.advance()
        self.assertEqual(route.current_point.name, "B")

        route.remove(route.points[0].id)

        self.assertEqual(route.current_point_index, 1)
        self.assertEqual(route.current_point.name, "C")
        self.assertEqual([wp.name for wp in route.completed_points], ["B"])

    def test_remove_current_last_stop_moves_cursor_to_end(self):
        """Test removing the stop under the cursor when it is the last one."""
        route = make_route("A", "B", "C")
        route.advance()
        route.advance()

        route.remove(route.points[2].id)

        self.assertEqual(route.current_point_index, 2)
        self.assertIsNone(route.current_point)
        self.assertTrue(route.is_completed)
        self.assertEqual(route.progress, 1.0)

    def test_cursor_past_end_after_removals(self):
        """Test that progress stays capped when removals leave the cursor past the end."""
        route = make_route("A", "B", "C")
        route.advance()
        route.advance()

        route.remove(route.points[0].id)
        route.remove(route.points[0].id)

        self.assertEqual(route.current_point_index, 2)
        self.assertEqual(len(route.points), 1)
        self.assertIsNone(route.current_point)
        self.assertEqual(route.completed_points, route.points)
        self.assertFalse(route.advance())
        self.assertEqual(route.progress, 1.0)


class TestRouteLabels(unittest.TestCase):
    """Test labels and descriptions."""

    def test_letter_labels(self):
        """Test labels A-J for the first ten stops."""
        route = make_route(*[f"P{i}" for i in range(12)])
        labels = [wp.label for wp in route.points]
        self.assertEqual(labels[:10], list("ABCDEFGHIJ"))
        self.assertEqual(labels[10], "11")
        self.assertEqual(labels[11], "12")

    def test_description_empty(self):
        self.assertEqual(Route().description(), "No destinations")

    def test_description_single(self):
        self.assertIn("Market", make_route("Market").description())

    def test_description_short_routes(self):
        """Test that two or three stops are all listed."""
        self.assertEqual(make_route("A", "B").description(), "A → B")
        self.assertEqual(make_route("A", "B", "C").description(), "A → B → C")

    def test_description_long_route_abbreviated(self):
        """Test that longer routes show only the first and last stop."""
        description = make_route("Home", "Bakery", "Library", "Office").description()
        self.assertIn("Home", description)
        self.assertIn("Office", description)
        self.assertIn("...", description)
        self.assertNotIn("Bakery", description)
        self.assertNotIn("Library", description)


class TestRouteSerialization(unittest.TestCase):
    """Test dictionary conversion."""

    def test_from_dict_restores_progress(self):
        """Test that a serialized route keeps ids, cursor and completion."""
        route = make_route("A", "B", "C")
        route.advance()

        restored = Route.from_dict(route.to_dict())

        self.assertEqual(restored.id, route.id)
        self.assertEqual(restored.current_point_index, 1)
        self.assertEqual([wp.id for wp in restored.points], [wp.id for wp in route.points])
        self.assertTrue(restored.points[0].is_completed)
        self.assertEqual(restored.created_at, route.created_at)

    def test_invalid_cursor_rejected(self):
        """Test that a cursor beyond the stop list is a programming error."""
        with self.assertRaises(ValueError):
            Route(current_point_index=1)


if __name__ == '__main__':
    unittest.main()
