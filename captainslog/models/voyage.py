"""
Voyage Data Models
Value objects derived from the Trello board on every request
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VoyageModel(BaseModel):
    """Immutable model serialised with camelCase field names"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class Label(VoyageModel):
    """Card label with its display colour"""
    name: str = ""
    color: str = "#888"


class Location(VoyageModel):
    """Anything on the board with a name and (maybe) a position"""
    id: str
    name: str
    list_name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    rating: Optional[int] = None
    labels: List[Label] = Field(default_factory=list)
    trello_url: Optional[str] = None
    navily_url: Optional[str] = None

    @property
    def has_position(self) -> bool:
        return self.lat is not None and self.lng is not None


class Stop(Location):
    """Card with a due date: a planned stop or the current location"""
    due: datetime
    due_complete: bool = False


class Place(Location):
    """Unscheduled candidate destination"""


# Serialised with the fields of whichever concrete type it holds
AnyLocation = Union[Stop, Place, Location]


class LogEventType(str, Enum):
    """Comment prefixes recognised in the log"""
    ARRIVED = "Arrived"
    DEPARTED = "Departed"
    VISITED = "Visited"
    WATER = "Water"
    DIESEL = "Diesel"
    BINS = "Bins"
    BBQ_GAS_CHANGE = "BBQ Gas Change"
    GAS_TANK_CHANGE = "Gas Tank Change"
    POWER = "Power"
    BOOM = "Boom"
    BROKEN = "Broken"
    FIXED = "Fixed"
    SEA_TEMPERATURE = "Sea Temperature"


class LogEvent(VoyageModel):
    """A classified comment from the board"""
    type: LogEventType
    timestamp: datetime
    card_id: Optional[str] = None
    card_name: str = "Unknown"
    area: str = "Unknown"
    comment: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    rating: Optional[int] = None
    labels: List[Label] = Field(default_factory=list)
    trello_url: Optional[str] = None
    navily_url: Optional[str] = None

    # Type-specific payload
    diesel_litres: Optional[float] = None
    sea_temp: Optional[float] = None
    item: Optional[str] = None

    @property
    def has_position(self) -> bool:
        return self.lat is not None and self.lng is not None

    def to_location(self) -> Location:
        """Snapshot of the card as it was enriched into this event"""
        return Location(
            id=self.card_id or "",
            name=self.card_name,
            list_name=self.area,
            lat=self.lat,
            lng=self.lng,
            rating=self.rating,
            labels=self.labels,
            trello_url=self.trello_url,
            navily_url=self.navily_url,
        )


class Trip(VoyageModel):
    """Card in the Trips list"""
    name: str
    start: Optional[datetime] = None
    due: Optional[datetime] = None


class TripRange(VoyageModel):
    start: datetime
    end: Optional[datetime] = None


class TripYear(VoyageModel):
    year: str
    trips: List[Trip]


class VoyageState(str, Enum):
    UNKNOWN = "unknown"
    ARRIVED = "arrived"
    UNDERWAY = "underway"


class VoyageStatus(VoyageModel):
    """Where the boat is now, derived from the Arrived/Departed history"""
    status: VoyageState = VoyageState.UNKNOWN
    current: Optional[AnyLocation] = None
    departed_from: Optional[AnyLocation] = Field(default=None, alias="from")
    destination: Optional[AnyLocation] = None
    departed_at: Optional[datetime] = None


class ExpectedPosition(VoyageModel):
    """Dead-reckoned position along a leg"""
    lat: float
    lng: float
    fraction: float
    total_nm: float
    traveled_nm: float
    remaining_nm: float
    eta_hours: Optional[float] = None


class ScheduledStop(Stop):
    """Future stop annotated with gap and leg information"""
    hours_to_next: Optional[float] = None
    overnight: bool = False
    distance_nm: Optional[float] = None
    eta_hours: Optional[float] = None
    eta: str = ""


class ScheduleDay(VoyageModel):
    date: str
    stops: List[ScheduledStop] = Field(default_factory=list)
    total_nm: float = 0.0
    total_hours: Optional[float] = None


class Schedule(VoyageModel):
    """Day-by-day view of the planned itinerary"""
    current: Optional[Stop] = None
    origin: Optional[AnyLocation] = None
    speed_knots: float
    days: List[ScheduleDay] = Field(default_factory=list)
    total_nm: float = 0.0
    total_hours: Optional[float] = None
    can_plan: bool = False


class LongestStay(VoyageModel):
    name: str
    days: float
    arrived_at: datetime
    departed_at: datetime


class Summary(VoyageModel):
    """Trip-level rollups over a log"""
    total_nm: float = 0.0
    total_hours: float = 0.0
    total_diesel: float = 0.0
    efficiency: Optional[float] = None  # NM per litre
    remaining_fuel: Optional[float] = None
    remaining_range: Optional[float] = None
    longest_stay: Optional[LongestStay] = None
    broken_items: Dict[str, str] = Field(default_factory=dict)
    legs: int = 0
    stops_visited: int = 0
    last_sea_temp: Optional[float] = None
