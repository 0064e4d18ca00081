from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from captainslog.models.voyage import (
    ExpectedPosition,
    LogEvent,
    Place,
    Stop,
    TripRange,
    VoyageModel,
    VoyageStatus,
)


# Session Schemas
class SessionUser(BaseModel):
    member_id: str
    username: Optional[str] = None
    trello_token: str


# Itinerary Schemas
class ItineraryResponse(VoyageModel):
    stops: List[Stop]
    places: List[Place]
    can_plan: bool = False


# Log Schemas
class LogsResponse(VoyageModel):
    logs: List[LogEvent]
    most_recent_trip_range: Optional[TripRange] = None
    scope: str
    complete: bool = True


class PositionResponse(VoyageModel):
    status: VoyageStatus
    position: Optional[ExpectedPosition] = None
    speed_knots: float
    refresh_seconds: int


# Write-back Schemas
class PlanStopRequest(VoyageModel):
    card_id: str = Field(..., min_length=1)
    due: datetime


class RemoveStopRequest(VoyageModel):
    card_id: str = Field(..., min_length=1)


class ReorderStopsRequest(VoyageModel):
    updates: List[PlanStopRequest]


class WriteBackResponse(VoyageModel):
    success: bool = True
    updated: int = 1
    itinerary: ItineraryResponse
