"""
Trello Board Service
Fetches the board snapshot and comment feed, and writes planned due dates back
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from config import settings
from captainslog.services.comment_pages import (
    CommentLog,
    CommentPage,
    collect_comments,
    page_from_actions,
)

logger = logging.getLogger(__name__)

PLANNER_MEMBER_TYPES = ("admin", "normal")


class TrelloConfigError(RuntimeError):
    """Board id or credentials are not configured"""

    def __init__(self, missing: List[str]):
        super().__init__(f"Missing Trello configuration: {', '.join(missing)}")
        self.missing = missing


class TrelloAPIError(RuntimeError):
    """Trello answered with an error or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TrelloService:
    """Service for reading and updating the trip board on Trello"""

    BOARD_QUERY = {
        "cards": "open",
        "card_customFieldItems": "true",
        "lists": "open",
        "fields": "all",
        "customFields": "true",
        "members": "all",
        "labels": "all",
    }

    def __init__(
        self,
        board_id: str = None,
        key: str = None,
        token: str = None,
        base_url: str = None,
        page_size: int = None,
    ):
        self.board_id = board_id or settings.TRELLO_BOARD_ID
        self.key = key or settings.TRELLO_KEY
        self.token = token or settings.TRELLO_TOKEN
        self.base_url = (base_url or settings.TRELLO_API_URL).rstrip("/")
        self.page_size = page_size or settings.COMMENT_PAGE_SIZE

        missing = [
            name for name, value in (
                ("TRELLO_BOARD_ID", self.board_id),
                ("TRELLO_KEY", self.key),
                ("TRELLO_TOKEN", self.token),
            ) if not value
        ]
        if missing:
            raise TrelloConfigError(missing)

    @property
    def board_url(self) -> str:
        return f"{self.base_url}/boards/{self.board_id}"

    def _request(self, method: str, url: str, params: Dict) -> Any:
        try:
            response = requests.request(method, url, params=params, timeout=settings.REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"Trello {method} {url} failed with {status_code}")
            raise TrelloAPIError(f"Trello request failed with status {status_code}", status_code) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Error calling Trello {method} {url}: {e}")
            raise TrelloAPIError(f"Trello request failed: {e}") from e

    def _get(self, url: str, **params) -> Any:
        return self._request("GET", url, {"key": self.key, "token": self.token, **params})

    def fetch_board(self) -> Dict:
        """Open cards, lists, custom field definitions and members of the board"""
        board = self._get(self.board_url, **self.BOARD_QUERY)

        # Cards on archived lists still come back with cards=open
        open_list_ids = {lst["id"] for lst in board.get("lists") or []}
        board["cards"] = [c for c in board.get("cards") or [] if c.get("idList") in open_list_ids]
        board.setdefault("customFields", [])
        board.setdefault("members", [])

        logger.info(f"Fetched board with {len(board['cards'])} cards in {len(open_list_ids)} lists")
        return board

    def fetch_comment_page(self, before: Optional[str] = None, limit: Optional[int] = None) -> CommentPage:
        """One page of comments, newest first, older than the action id `before`"""
        limit = limit or self.page_size
        params = {"filter": "commentCard", "limit": limit}
        if before:
            params["before"] = before
        actions = self._get(f"{self.board_url}/actions", **params)
        if not isinstance(actions, list):
            logger.error(f"Trello returned {type(actions).__name__} instead of a list of actions")
            raise TrelloAPIError(f"Unexpected comment page payload: {type(actions).__name__}")
        return page_from_actions(actions, limit)

    def fetch_all_comments(self) -> CommentLog:
        """Every comment on the board; raises CommentFetchError if any page fails"""
        return collect_comments(self.fetch_comment_page, self.page_size)

    # ==================== WRITE-BACK ====================

    def set_due(self, card_id: str, due: Optional[datetime], user_token: str) -> Dict:
        """Set or clear a card's due date with the planner's own token"""
        if not card_id:
            raise ValueError("Missing card id")
        value = _format_due(due) if due is not None else "null"
        logger.info(f"Setting due of card {card_id} to {value}")
        return self._request(
            "PUT",
            f"{self.base_url}/cards/{card_id}",
            {"key": self.key, "token": user_token, "due": value},
        )

    def plan_stop(self, card_id: str, due: datetime, user_token: str) -> Dict:
        return self.set_due(card_id, due, user_token)

    def remove_stop(self, card_id: str, user_token: str) -> Dict:
        return self.set_due(card_id, None, user_token)

    def reorder_stops(self, updates: List[Dict], user_token: str) -> int:
        """Apply new due dates in order; stops at the first failure"""
        for update in updates:
            self.set_due(update["card_id"], update["due"], user_token)
        return len(updates)


def _format_due(due: datetime) -> str:
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    return due.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def current_user_can_plan(user, members: List[Dict]) -> bool:
    """Board admins and normal members may plan; observers and guests may not"""
    if user is None or not members:
        return False
    return any(
        m.get("id") == user.member_id and m.get("memberType") in PLANNER_MEMBER_TYPES
        for m in members
    )
