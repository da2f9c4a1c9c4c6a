"""Navigation history API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from multistop.domain.history import HistoryStorageError
from multistop.export.geojson_exporter import GeoJSONExporter
from multistop.persistence.db import get_db
from multistop.persistence.repositories import HistoryRepository
from multistop.query.history_filter import FilterCategory, filter_history, statuses_for_categories
from multistop.query.statistics import compute_statistics

router = APIRouter(prefix="/api/history", tags=["history"])


def _load(db: Session, user_id: Optional[str]):
    try:
        return HistoryRepository(db).load_records(user_id)
    except HistoryStorageError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _get_record_or_404(db: Session, record_id: str):
    repository = HistoryRepository(db)
    record_model = repository.get_by_id(record_id)
    if record_model is None:
        raise HTTPException(status_code=404, detail="History record not found")
    return repository.to_domain(record_model)


@router.get("/", response_model=List[dict])
async def list_history(
    status: List[FilterCategory] = Query(default=[], description="Filter categories (repeatable)"),
    q: str = Query("", description="Case-insensitive search over description and stop names"),
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """List history records, newest first, filtered by category and search text."""
    records = _load(db, user_id)
    matching = filter_history(records, statuses_for_categories(status), q)
    return [record.to_dict() for record in matching]


@router.get("/statistics", response_model=dict)
async def history_statistics(user_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Aggregate statistics over stored history."""
    return compute_statistics(_load(db, user_id)).to_dict()


@router.get("/{record_id}", response_model=dict)
async def get_history_record(record_id: str, db: Session = Depends(get_db)):
    """Get one history record with display values."""
    record = _get_record_or_404(db, record_id)
    data = record.to_dict()
    data.update({
        "status_display_text": record.status_display_text,
        "formatted_duration": record.formatted_duration,
        "formatted_start_time": record.formatted_start_time,
        "completion_percentage": record.completion_percentage
    })
    return data


@router.get("/{record_id}/geojson", response_model=dict)
async def export_history_geojson(record_id: str, db: Session = Depends(get_db)):
    """Export one record as a GeoJSON FeatureCollection."""
    record = _get_record_or_404(db, record_id)
    return GeoJSONExporter.record_to_feature_collection(record)


@router.delete("/{record_id}", response_model=dict)
async def delete_history_record(record_id: str, db: Session = Depends(get_db)):
    """Delete one history record."""
    try:
        deleted = HistoryRepository(db).delete(record_id)
    except HistoryStorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="History record not found")
    return {"message": "History record deleted"}


@router.delete("/", response_model=dict)
async def clear_history(user_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Delete all history records (of one user, if given)."""
    try:
        count = HistoryRepository(db).clear(user_id)
    except HistoryStorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"message": "History cleared", "deleted": count}
