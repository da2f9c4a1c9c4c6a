"""Repository pattern for navigation history storage."""
from contextlib import contextmanager
from typing import List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from multistop.domain.history import (
    HistoryRecord, HistoryStorageError, InvalidStatusTransition, NavigationDestination, NavigationStatus
)
from multistop.persistence import db as database
from multistop.persistence.models import HistoryDestinationModel, HistoryRecordModel

logger = logging.getLogger(__name__)


class HistoryRepository:
    """Repository for navigation history records."""

    def __init__(self, db: Session, max_items: Optional[int] = None):
        """Initialize repository.

        Args:
            db: Database session
            max_items: Records kept per owner (default: MAX_HISTORY_ITEMS setting)
        """
        self.db = db
        self.max_items = max_items if max_items is not None else database.MAX_HISTORY_ITEMS

    @contextmanager
    def _storage(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error while trying to {action}: {e}")
            raise HistoryStorageError(f"Could not {action}") from e

    def save(self, record: HistoryRecord) -> HistoryRecordModel:
        """Insert a record, or replace the stored copy while it is still open.

        Then trims the owner's history.

        Args:
            record: HistoryRecord domain object

        Returns:
            HistoryRecordModel instance

        Raises:
            InvalidStatusTransition: if the stored copy has already ended
        """
        with self._storage(f"save navigation history {record.id}"):
            existing = self.get_by_id(record.id)
            if existing is not None:
                if NavigationStatus.parse(existing.status).is_terminal or existing.end_time is not None:
                    raise InvalidStatusTransition(
                        f"Navigation history {record.id} already ended as {existing.status}"
                    )
                self.db.delete(existing)
                self.db.flush()

            record_model = self._to_model(record)
            self.db.add(record_model)
            self.db.flush()
            self._trim(record.user_id)

            self.db.commit()

        logger.info(
            f"Saved navigation history {record.id} ({record.status.value}), "
            f"user: {record.user_id or 'guest'}"
        )
        return record_model

    def get_by_id(self, record_id: str) -> Optional[HistoryRecordModel]:
        """Get record by ID.

        Args:
            record_id: Record id

        Returns:
            HistoryRecordModel or None
        """
        return self.db.query(HistoryRecordModel).filter(HistoryRecordModel.id == record_id).first()

    def list_all(self, user_id: Optional[str] = None) -> List[HistoryRecordModel]:
        """List records, newest first.

        Args:
            user_id: Only records of this owner (optional)

        Returns:
            List of HistoryRecordModel instances
        """
        query = self.db.query(HistoryRecordModel)
        if user_id is not None:
            query = query.filter(HistoryRecordModel.user_id == user_id)
        return query.order_by(HistoryRecordModel.start_time.desc()).all()

    def load_records(self, user_id: Optional[str] = None) -> List[HistoryRecord]:
        """List records as domain objects, newest first."""
        with self._storage("load navigation history"):
            return [self.to_domain(m) for m in self.list_all(user_id)]

    def delete(self, record_id: str) -> bool:
        """Delete one record.

        Returns:
            True if a record was deleted
        """
        with self._storage(f"delete navigation history {record_id}"):
            record_model = self.get_by_id(record_id)
            if record_model is None:
                logger.warning(f"Navigation history not found for deletion: {record_id}")
                return False
            self.db.delete(record_model)
            self.db.commit()
        logger.info(f"Deleted navigation history {record_id}")
        return True

    def clear(self, user_id: Optional[str] = None) -> int:
        """Delete all records (of one owner, if given).

        Returns:
            Number of deleted records
        """
        with self._storage("clear navigation history"):
            records = self.list_all(user_id)
            for record_model in records:
                self.db.delete(record_model)
            self.db.commit()
        logger.info(f"Cleared {len(records)} navigation history records")
        return len(records)

    def _trim(self, user_id: Optional[str]):
        query = self.db.query(HistoryRecordModel).filter(HistoryRecordModel.user_id == user_id)
        stale = query.order_by(HistoryRecordModel.start_time.desc()).offset(self.max_items).all()
        for record_model in stale:
            self.db.delete(record_model)
        if stale:
            logger.debug(f"Trimmed {len(stale)} history records to {self.max_items} items")

    def _to_model(self, record: HistoryRecord) -> HistoryRecordModel:
        """Convert HistoryRecord to its database model."""
        record_model = HistoryRecordModel(
            id=record.id,
            route_description=record.route_description,
            start_time=record.start_time,
            end_time=record.end_time,
            status=record.status.value,
            start_latitude=record.start_location[0] if record.start_location else None,
            start_longitude=record.start_location[1] if record.start_location else None,
            total_distance=record.total_distance,
            estimated_duration=record.estimated_duration,
            actual_duration=record.actual_duration,
            alarms_triggered=record.alarms_triggered,
            completed_stops=record.completed_stops,
            total_stops=record.total_stops,
            user_id=record.user_id
        )
        for idx, destination in enumerate(record.destinations):
            record_model.destinations.append(HistoryDestinationModel(
                sequence=idx,
                name=destination.name,
                address=destination.address,
                latitude=destination.latitude,
                longitude=destination.longitude,
                stop_order=destination.order,
                is_completed=destination.is_completed,
                arrival_time=destination.arrival_time,
                alarm_triggered=destination.alarm_triggered
            ))
        return record_model

    def to_domain(self, record_model: HistoryRecordModel) -> HistoryRecord:
        """Convert database model to domain object.

        Args:
            record_model: HistoryRecordModel instance

        Returns:
            HistoryRecord domain object
        """
        destinations = [
            NavigationDestination(
                name=d.name,
                address=d.address,
                latitude=d.latitude,
                longitude=d.longitude,
                order=d.stop_order,
                is_completed=bool(d.is_completed),
                arrival_time=d.arrival_time,
                alarm_triggered=bool(d.alarm_triggered)
            )
            for d in sorted(record_model.destinations, key=lambda x: x.sequence)
        ]
        start_location = None
        if record_model.start_latitude is not None and record_model.start_longitude is not None:
            start_location = (record_model.start_latitude, record_model.start_longitude)

        return HistoryRecord(
            id=record_model.id,
            route_description=record_model.route_description,
            start_time=record_model.start_time,
            end_time=record_model.end_time,
            status=NavigationStatus.parse(record_model.status),
            start_location=start_location,
            destinations=destinations,
            total_distance=record_model.total_distance or 0.0,
            estimated_duration=record_model.estimated_duration or 0,
            actual_duration=record_model.actual_duration,
            alarms_triggered=record_model.alarms_triggered or 0,
            completed_stops=record_model.completed_stops or 0,
            total_stops=len(destinations),
            user_id=record_model.user_id
        )
