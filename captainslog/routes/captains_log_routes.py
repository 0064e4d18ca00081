"""
FastAPI Captain's Log Routes
Itinerary, log, status and summary endpoints derived from the Trello board
"""
import logging
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query

from config import settings
from captainslog.auth import get_current_user, get_optional_user
from captainslog.models.voyage import LogEvent, Schedule, Summary, TripYear, VoyageState, VoyageStatus
from captainslog.schemas import (
    ItineraryResponse,
    LogsResponse,
    PlanStopRequest,
    PositionResponse,
    RemoveStopRequest,
    ReorderStopsRequest,
    SessionUser,
    WriteBackResponse,
)
from captainslog.services.comment_pages import CommentFetchError
from captainslog.services.dead_reckoning import position_for_status
from captainslog.services.itinerary import build_places, build_schedule, build_stops
from captainslog.services.log_events import build_log_events
from captainslog.services.summary import summarize
from captainslog.services.timestamps import parse_instant
from captainslog.services.trello_service import (
    TrelloAPIError,
    TrelloConfigError,
    TrelloService,
    current_user_can_plan,
)
from captainslog.services.trips import build_trips, group_trips_by_year, most_recent_trip_range, select_logs
from captainslog.services.voyage_status import derive_status

logger = logging.getLogger(__name__)

router = APIRouter()

# Handlers are plain functions so the blocking Trello calls run in the threadpool


# ==================== DEPENDENCIES ====================

def get_trello_service() -> TrelloService:
    """Trello client for this request; 503 when the board is not configured"""
    try:
        return TrelloService()
    except TrelloConfigError as e:
        logger.error(f"❌ {e}")
        raise HTTPException(status_code=503, detail=str(e))


def _fetch_board(service: TrelloService) -> Dict:
    try:
        return service.fetch_board()
    except TrelloAPIError as e:
        raise HTTPException(status_code=502, detail=f"Could not load the board: {e}")


def _fetch_events(service: TrelloService, board: Dict) -> List[LogEvent]:
    """Full classified log; a failed page is an error, never a short log"""
    try:
        comments = service.fetch_all_comments()
    except CommentFetchError as e:
        raise HTTPException(
            status_code=502,
            detail={
                "message": f"Could not load the full log: {e}",
                "partial": True,
                "loaded": len(e.partial),
            },
        )
    return build_log_events(comments.actions, board)


def _parse_range(start: Optional[str], end: Optional[str]) -> Tuple:
    start_at = parse_instant(start) if start else None
    end_at = parse_instant(end) if end else None
    if (start and start_at is None) or (end and end_at is None):
        raise HTTPException(status_code=400, detail="start and end must be ISO dates")
    return start_at, end_at


def _speed(speed: Optional[float]) -> float:
    return settings.DEFAULT_SPEED_KNOTS if speed is None else speed


def _itinerary(board: Dict, user: Optional[SessionUser]) -> ItineraryResponse:
    return ItineraryResponse(
        stops=build_stops(board, settings.TRIPS_LIST_NAME),
        places=build_places(board, settings.TRIPS_LIST_NAME),
        can_plan=current_user_can_plan(user, board.get("members")),
    )


# ==================== ITINERARY ====================

@router.get("/data", response_model=ItineraryResponse)
def get_data(
    user: Optional[SessionUser] = Depends(get_optional_user),
    service: TrelloService = Depends(get_trello_service),
):
    """Planned stops, candidate places, and whether the viewer may plan"""
    board = _fetch_board(service)
    return _itinerary(board, user)


@router.get("/itinerary", response_model=Schedule)
def get_itinerary(
    speed: Optional[float] = Query(None, ge=0, description="Cruising speed in knots"),
    user: Optional[SessionUser] = Depends(get_optional_user),
    service: TrelloService = Depends(get_trello_service),
):
    """
    Day-by-day schedule of the future stops with leg distances and ETAs

    Legs start from the departure point while underway, otherwise from the
    current stop.
    """
    board = _fetch_board(service)
    stops = build_stops(board, settings.TRIPS_LIST_NAME)
    places = build_places(board, settings.TRIPS_LIST_NAME)
    status = derive_status(_fetch_events(service, board), stops, places)

    origin = status.departed_from if status.status == VoyageState.UNDERWAY else None
    return build_schedule(
        stops,
        _speed(speed),
        can_plan=current_user_can_plan(user, board.get("members")),
        origin=origin,
    )


# ==================== LOGS ====================

@router.get("/logs", response_model=LogsResponse)
def get_logs(
    trip: Optional[str] = Query(None, description="'all' for the whole history"),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    service: TrelloService = Depends(get_trello_service),
):
    """
    Voyage log, scoped to the most recent trip unless asked otherwise

    Example: /api/logs?start=2025-06-01&end=2025-06-30
    """
    start_at, end_at = _parse_range(start, end)
    board = _fetch_board(service)
    events = _fetch_events(service, board)
    trip_range = most_recent_trip_range(build_trips(board, settings.TRIPS_LIST_NAME))

    logs, scope = select_logs(events, trip_range, trip=trip, start=start_at, end=end_at)
    logger.info(f"📜 {len(logs)} of {len(events)} log entries ({scope})")
    return LogsResponse(logs=logs, most_recent_trip_range=trip_range, scope=scope)


@router.get("/trips", response_model=List[TripYear])
def get_trips(service: TrelloService = Depends(get_trello_service)):
    """Trips grouped by year, newest first"""
    board = _fetch_board(service)
    return group_trips_by_year(build_trips(board, settings.TRIPS_LIST_NAME))


@router.get("/summary", response_model=Summary)
def get_summary(
    trip: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    service: TrelloService = Depends(get_trello_service),
):
    """Distance, time underway, fuel and broken items over the selected log"""
    start_at, end_at = _parse_range(start, end)
    board = _fetch_board(service)
    events = _fetch_events(service, board)
    trip_range = most_recent_trip_range(build_trips(board, settings.TRIPS_LIST_NAME))

    logs, _ = select_logs(events, trip_range, trip=trip, start=start_at, end=end_at)
    return summarize(logs, settings.DIESEL_TANK_LITRES)


# ==================== LIVE STATUS ====================

@router.get("/status", response_model=VoyageStatus)
def get_status(service: TrelloService = Depends(get_trello_service)):
    """In port, underway or unknown, from the whole log"""
    board = _fetch_board(service)
    events = _fetch_events(service, board)
    return derive_status(
        events,
        build_stops(board, settings.TRIPS_LIST_NAME),
        build_places(board, settings.TRIPS_LIST_NAME),
    )


@router.get("/position", response_model=PositionResponse)
def get_position(
    speed: Optional[float] = Query(None, ge=0, description="Cruising speed in knots"),
    service: TrelloService = Depends(get_trello_service),
):
    """Dead-reckoned position while underway; clients poll every refreshSeconds"""
    board = _fetch_board(service)
    events = _fetch_events(service, board)
    status = derive_status(
        events,
        build_stops(board, settings.TRIPS_LIST_NAME),
        build_places(board, settings.TRIPS_LIST_NAME),
    )
    return PositionResponse(
        status=status,
        position=position_for_status(status, _speed(speed)),
        speed_knots=_speed(speed),
        refresh_seconds=settings.POSITION_REFRESH_SECONDS,
    )


# ==================== PLANNING (WRITE-BACK) ====================

def _require_planner(service: TrelloService, user: SessionUser) -> None:
    board = _fetch_board(service)
    if not current_user_can_plan(user, board.get("members")):
        logger.warning(f"⚠️ Member {user.member_id} may not plan on this board")
        raise HTTPException(status_code=403, detail="Only board members can plan stops")


def _after_write(service: TrelloService, user: SessionUser, updated: int) -> WriteBackResponse:
    # The board changed, so everything is derived again from a fresh snapshot
    board = _fetch_board(service)
    return WriteBackResponse(success=True, updated=updated, itinerary=_itinerary(board, user))


@router.post("/plan-stop", response_model=WriteBackResponse)
def plan_stop(
    request: PlanStopRequest,
    user: SessionUser = Depends(get_current_user),
    service: TrelloService = Depends(get_trello_service),
):
    """Give a card a due date, making it a planned stop"""
    _require_planner(service, user)
    try:
        service.plan_stop(request.card_id, request.due, user.trello_token)
    except TrelloAPIError as e:
        raise HTTPException(status_code=502, detail=f"Could not plan stop: {e}")

    logger.info(f"✅ Member {user.member_id} planned {request.card_id} for {request.due}")
    return _after_write(service, user, 1)


@router.post("/remove-stop", response_model=WriteBackResponse)
def remove_stop(
    request: RemoveStopRequest,
    user: SessionUser = Depends(get_current_user),
    service: TrelloService = Depends(get_trello_service),
):
    """Clear a card's due date, turning the stop back into a place"""
    _require_planner(service, user)
    try:
        service.remove_stop(request.card_id, user.trello_token)
    except TrelloAPIError as e:
        raise HTTPException(status_code=502, detail=f"Could not remove stop: {e}")

    logger.info(f"✅ Member {user.member_id} removed stop {request.card_id}")
    return _after_write(service, user, 1)


@router.post("/reorder-stops", response_model=WriteBackResponse)
def reorder_stops(
    request: ReorderStopsRequest,
    user: SessionUser = Depends(get_current_user),
    service: TrelloService = Depends(get_trello_service),
):
    """Move several stops at once by giving each a new due date"""
    if not request.updates:
        raise HTTPException(status_code=400, detail="No updates given")

    _require_planner(service, user)
    updates = [{"card_id": u.card_id, "due": u.due} for u in request.updates]
    try:
        updated = service.reorder_stops(updates, user.trello_token)
    except TrelloAPIError as e:
        raise HTTPException(status_code=502, detail=f"Could not reorder stops: {e}")

    logger.info(f"✅ Member {user.member_id} reordered {updated} stops")
    return _after_write(service, user, updated)
