"""
Log Streaming Service
Pushes classified log batches to a WebSocket client as comment pages arrive
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import WebSocket

from captainslog.models.voyage import LogEvent
from captainslog.services.comment_pages import CommentFetchError, stream_comment_batches
from captainslog.services.log_events import build_log_events
from captainslog.services.trello_service import TrelloService
from captainslog.services.trips import build_trips, most_recent_trip_range

logger = logging.getLogger(__name__)


def _dump(logs: List[LogEvent]) -> List[Dict]:
    return [log.model_dump(mode="json", by_alias=True) for log in logs]


class LogStreamer:
    """Stream the full log to one client, batch by batch"""

    def __init__(self, websocket: WebSocket, service: TrelloService, trips_list_name: str = "Trips"):
        self.websocket = websocket
        self.service = service
        self.trips_list_name = trips_list_name
        self.loaded = 0

    async def send(self, message_type: str, **payload):
        await self.websocket.send_json({
            "type": message_type,
            **payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    async def run(self, board: Dict):
        """
        Send a "batch" per comment page, then "done".

        Batches are classified against `board` as they come in; an "error"
        message flagged partial replaces "done" when a page fails.
        """
        trip_range = most_recent_trip_range(build_trips(board, self.trips_list_name))
        batches = stream_comment_batches(self.service.fetch_comment_page, self.service.page_size)
        try:
            async for page in batches:
                logs = build_log_events(page.events, board)
                self.loaded += len(page.events)
                await self.send("batch", logs=_dump(logs), loaded=self.loaded)
        except CommentFetchError as e:
            logger.error(f"Log stream aborted after {self.loaded} comments: {e}")
            await self.send("error", message=str(e), partial=True, loaded=self.loaded)
            return
        finally:
            await batches.aclose()

        logger.info(f"📜 Streamed {self.loaded} comments")
        await self.send(
            "done",
            total=self.loaded,
            mostRecentTripRange=trip_range.model_dump(mode="json", by_alias=True) if trip_range else None,
        )
