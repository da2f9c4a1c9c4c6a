"""Navigation session: drives a route from arrival signals and records history."""
from datetime import datetime
from typing import Callable, Dict, Optional, Set, Tuple
import logging
import threading

from multistop.domain.history import (
    HistoryRecord, HistoryStorageError, InvalidStatusTransition, NavigationStatus,
    snapshot_destinations, start_record
)
from multistop.domain.route import Route, RouteState

logger = logging.getLogger(__name__)


class SessionClosedError(RuntimeError):
    """Raised when a finished session receives further events."""


class NavigationSession:
    """Single-writer wrapper around one Route and its history record.

    Arrival signals are expected in waypoint order; the session does not
    deduplicate or reorder them.
    """

    def __init__(self, route: Route,
                 on_finished: Optional[Callable[[HistoryRecord], None]] = None):
        """Initialize session.

        Args:
            route: Route to navigate
            on_finished: Called with the terminal record, e.g. a repository save
        """
        self.route = route
        self.on_finished = on_finished
        self.record: Optional[HistoryRecord] = None
        self._arrival_times: Dict[str, datetime] = {}
        self._alarms: Set[str] = set()
        self._lock = threading.RLock()

    @property
    def is_started(self) -> bool:
        return self.record is not None

    @property
    def is_finished(self) -> bool:
        return self.record is not None and self.record.status.is_terminal

    def start(self, start_location: Optional[Tuple[float, float]] = None,
              user_id: Optional[str] = None,
              start_time: Optional[datetime] = None) -> HistoryRecord:
        """Begin navigation and create the IN_PROGRESS record."""
        with self._lock:
            self._ensure_open()
            if self.record is None:
                self.route.is_active = True
                self.record = start_record(self.route, start_time=start_time,
                                           start_location=start_location, user_id=user_id)
                logger.info(f"Started navigation {self.record.id}: {self.record.route_description}")
            return self.record

    def arrive(self, alarm_triggered: bool = False,
               arrival_time: Optional[datetime] = None) -> RouteState:
        """Handle an arrival at the current stop.

        Moves the cursor on; arriving at the last stop finishes the session
        as COMPLETED.

        Returns:
            The route state after the arrival
        """
        with self._lock:
            self._ensure_open()
            if self.record is None:
                self.start()

            waypoint = self.route.current_point
            if waypoint is None:
                logger.warning(f"Arrival on route {self.route.id} with no stop left, finishing navigation")
            else:
                self._arrival_times[waypoint.id] = arrival_time or datetime.now()
                if alarm_triggered:
                    self._alarms.add(waypoint.id)

            if self.route.advance():
                destinations = snapshot_destinations(self.route, self._arrival_times, self._alarms)
                self.record = self.record.with_progress(
                    completed_stops=sum(1 for d in destinations if d.is_completed),
                    alarms_triggered=len(self._alarms),
                    destinations=destinations
                )
                return self.route.state

            self._finish(NavigationStatus.COMPLETED, end_time=arrival_time)
            return RouteState.COMPLETED

    def cancel(self, reason: Optional[str] = None) -> HistoryRecord:
        """Abort navigation at the user's request."""
        with self._lock:
            return self._finish(NavigationStatus.CANCELLED, reason=reason)

    def fail(self, reason: Optional[str] = None) -> HistoryRecord:
        """Abort navigation because of an error condition."""
        with self._lock:
            return self._finish(NavigationStatus.FAILED, reason=reason)

    def _ensure_open(self):
        if self.is_finished:
            raise SessionClosedError(f"Navigation {self.record.id} already ended as {self.record.status.value}")

    def _finish(self, status: NavigationStatus, end_time: Optional[datetime] = None,
                reason: Optional[str] = None) -> HistoryRecord:
        self._ensure_open()
        if self.record is None:
            self.start()

        destinations = snapshot_destinations(
            self.route, self._arrival_times, self._alarms,
            reached_all=status is NavigationStatus.COMPLETED
        )
        self.record = self.record.with_progress(
            completed_stops=sum(1 for d in destinations if d.is_completed),
            alarms_triggered=len(self._alarms),
            destinations=destinations
        ).finish(status, end_time=end_time)
        self.route.is_active = False

        logger.info(
            f"Finished navigation {self.record.id}: {status.value} - {self.record.route_description}, "
            f"{self.record.completed_stops}/{self.record.total_stops} stops, "
            f"user: {self.record.user_id or 'guest'}, reason: {reason or 'not specified'}"
        )

        if self.on_finished is not None:
            try:
                self.on_finished(self.record)
            except (HistoryStorageError, InvalidStatusTransition):
                raise
            except Exception as e:
                logger.error(f"Failed to store navigation {self.record.id}: {e}")
                raise HistoryStorageError(f"Failed to store navigation {self.record.id}") from e
        return self.record
