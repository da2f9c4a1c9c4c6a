"""Route API endpoints: building routes and progressing through them."""
from datetime import datetime
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from multistop.domain.history import (
    HistoryStorageError, InvalidStatusTransition, NavigationStatus, finalize_route
)
from multistop.domain.place import Place
from multistop.domain.route import Route
from multistop.orchestrator.navigation_session import NavigationSession, SessionClosedError
from multistop.persistence.db import get_db
from multistop.persistence.repositories import HistoryRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["routes"])


class PlaceDTO(BaseModel):
    name: str
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    id: Optional[str] = None
    category: Optional[str] = None


class StopDTO(BaseModel):
    place: PlaceDTO
    estimated_time_from_previous: int = Field(0, ge=0)
    distance_from_previous: float = Field(0.0, ge=0.0)


class RouteDTO(BaseModel):
    name: str = ""
    stops: List[StopDTO] = []
    alarm_for_each_stop: bool = True
    voice_announcements_enabled: bool = True


class LocationDTO(BaseModel):
    latitude: float
    longitude: float


class FinalizeRequest(BaseModel):
    status: NavigationStatus
    start_time: Optional[datetime] = None
    start_location: Optional[LocationDTO] = None
    user_id: Optional[str] = None
    actual_duration: Optional[int] = Field(None, ge=0)


class StartRequest(BaseModel):
    start_location: Optional[LocationDTO] = None
    user_id: Optional[str] = None


class ArrivalDTO(BaseModel):
    alarm_triggered: bool = False
    arrival_time: Optional[datetime] = None


class AbortRequest(BaseModel):
    reason: Optional[str] = None


# In-memory storage for routes being planned or navigated
routes_store: dict[str, Route] = {}
sessions_store: dict[str, NavigationSession] = {}


def _get_route_or_404(route_id: str) -> Route:
    route = routes_store.get(route_id)
    if route is None:
        raise HTTPException(status_code=404, detail="Route not found")
    return route


def _get_session_or_404(route_id: str) -> NavigationSession:
    _get_route_or_404(route_id)
    session = sessions_store.get(route_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Navigation not started")
    return session


def _ensure_not_navigating(route_id: str):
    session = sessions_store.get(route_id)
    if session is not None and not session.is_finished:
        raise HTTPException(status_code=409, detail="Route is being navigated")


def _location(location: Optional[LocationDTO]):
    if location is None:
        return None
    return (location.latitude, location.longitude)


def _drive(session: NavigationSession, db: Session, action):
    """Run a session event, storing the record if it finishes the navigation."""
    session.on_finished = HistoryRepository(db).save
    try:
        return action()
    except (SessionClosedError, InvalidStatusTransition) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HistoryStorageError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _append_stop(route: Route, stop: StopDTO):
    route.append(
        Place.from_dict(stop.place.model_dump()),
        estimated_time_from_previous=stop.estimated_time_from_previous,
        distance_from_previous=stop.distance_from_previous
    )


@router.post("/", response_model=dict)
async def create_route(route_dto: RouteDTO):
    """Create a new route, optionally with its stops."""
    route = Route(
        name=route_dto.name,
        alarm_for_each_stop=route_dto.alarm_for_each_stop,
        voice_announcements_enabled=route_dto.voice_announcements_enabled
    )
    for stop in route_dto.stops:
        _append_stop(route, stop)

    routes_store[route.id] = route
    logger.info(f"Created route {route.id} with {len(route.points)} stops")
    return route.to_dict()


@router.get("/", response_model=List[dict])
async def list_routes():
    """List all routes."""
    return [route.to_dict() for route in routes_store.values()]


@router.get("/{route_id}", response_model=dict)
async def get_route(route_id: str):
    """Get route by id."""
    return _get_route_or_404(route_id).to_dict()


@router.delete("/{route_id}", response_model=dict)
async def delete_route(route_id: str):
    """Delete a route."""
    _get_route_or_404(route_id)
    _ensure_not_navigating(route_id)
    del routes_store[route_id]
    sessions_store.pop(route_id, None)
    return {"message": "Route deleted"}


@router.post("/{route_id}/points", response_model=dict)
async def append_point(route_id: str, stop: StopDTO):
    """Append a stop to the end of the route."""
    route = _get_route_or_404(route_id)
    _ensure_not_navigating(route_id)
    _append_stop(route, stop)
    return route.to_dict()


@router.delete("/{route_id}/points/{point_id}", response_model=dict)
async def remove_point(route_id: str, point_id: str):
    """Remove a stop; unknown stop ids leave the route unchanged."""
    route = _get_route_or_404(route_id)
    _ensure_not_navigating(route_id)
    route.remove(point_id)
    return route.to_dict()


@router.post("/{route_id}/advance", response_model=dict)
async def advance_route(route_id: str):
    """Confirm arrival at the current stop and move to the next one."""
    route = _get_route_or_404(route_id)
    _ensure_not_navigating(route_id)
    advanced = route.advance()
    current = route.current_point
    return {
        "advanced": advanced,
        "current_point_index": route.current_point_index,
        "current_point": current.to_dict() if current else None,
        "is_last_point": route.next_point is None,
        "progress": route.progress
    }


@router.post("/{route_id}/finalize", response_model=dict)
async def finalize(route_id: str, request: FinalizeRequest, db: Session = Depends(get_db)):
    """Turn the route into a stored history record and discard the route."""
    route = _get_route_or_404(route_id)
    _ensure_not_navigating(route_id)

    try:
        record = finalize_route(
            route,
            request.status,
            start_time=request.start_time,
            start_location=_location(request.start_location),
            user_id=request.user_id,
            actual_duration=request.actual_duration
        )
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    try:
        HistoryRepository(db).save(record)
    except HistoryStorageError as e:
        raise HTTPException(status_code=503, detail=str(e))

    del routes_store[route_id]
    sessions_store.pop(route_id, None)
    return record.to_dict()


@router.post("/{route_id}/navigation/start", response_model=dict)
async def start_navigation(route_id: str, request: StartRequest, db: Session = Depends(get_db)):
    """Start navigating a route; the in-progress record is stored right away."""
    route = _get_route_or_404(route_id)
    session = sessions_store.get(route_id)
    if session is None:
        session = NavigationSession(route)
        sessions_store[route_id] = session

    record = _drive(session, db, lambda: session.start(
        start_location=_location(request.start_location), user_id=request.user_id
    ))
    _drive(session, db, lambda: HistoryRepository(db).save(record))
    return record.to_dict()


@router.post("/{route_id}/navigation/arrive", response_model=dict)
async def arrive(route_id: str, arrival: ArrivalDTO, db: Session = Depends(get_db)):
    """Report arrival at the current stop."""
    session = _get_session_or_404(route_id)
    state = _drive(session, db, lambda: session.arrive(
        alarm_triggered=arrival.alarm_triggered, arrival_time=arrival.arrival_time
    ))
    current = session.route.current_point
    return {
        "state": state.value,
        "current_point": current.to_dict() if current and not session.is_finished else None,
        "record": session.record.to_dict()
    }


@router.post("/{route_id}/navigation/cancel", response_model=dict)
async def cancel_navigation(route_id: str, request: AbortRequest, db: Session = Depends(get_db)):
    """Stop navigating at the user's request."""
    session = _get_session_or_404(route_id)
    return _drive(session, db, lambda: session.cancel(request.reason)).to_dict()


@router.post("/{route_id}/navigation/fail", response_model=dict)
async def fail_navigation(route_id: str, request: AbortRequest, db: Session = Depends(get_db)):
    """Stop navigating because of an error (e.g. location lost)."""
    session = _get_session_or_404(route_id)
    return _drive(session, db, lambda: session.fail(request.reason)).to_dict()
