"""
Comment Pagination
Walks the board's comment feed page by page, newest first
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


@dataclass
class CommentPage:
    """One page of comment actions"""
    events: List[Dict]
    done: bool
    next_cursor: Optional[str] = None


def page_from_actions(actions: List[Dict], limit: int) -> CommentPage:
    """A short page is the last one; otherwise continue before its oldest action"""
    done = len(actions) < limit
    return CommentPage(
        events=actions,
        done=done,
        next_cursor=None if done else actions[-1]["id"],
    )


PageFetcher = Callable[[Optional[str], int], CommentPage]


class CommentFetchError(RuntimeError):
    """A page failed; `partial` holds what was loaded before it"""

    def __init__(self, message: str, partial: Optional[List[Dict]] = None):
        super().__init__(message)
        self.partial = partial or []
        self.complete = False


@dataclass
class CommentLog:
    """Every comment on the board, with how many pages it took"""
    actions: List[Dict] = field(default_factory=list)
    pages: int = 0
    complete: bool = True


def paginate_comments(fetch_page: PageFetcher, limit: int = DEFAULT_PAGE_SIZE) -> Iterator[CommentPage]:
    """Yield pages until one comes back shorter than `limit`"""
    before = None
    while True:
        page = fetch_page(before, limit)
        yield page
        if page.done or not page.next_cursor:
            return
        before = page.next_cursor


def collect_comments(fetch_page: PageFetcher, limit: int = DEFAULT_PAGE_SIZE) -> CommentLog:
    """
    Accumulate the whole feed in delivery order.

    A failing page aborts the walk with CommentFetchError; the partial
    accumulation is attached to it but never returned as a complete log.
    """
    log = CommentLog()
    try:
        for page in paginate_comments(fetch_page, limit):
            log.actions.extend(page.events)
            log.pages += 1
    except Exception as e:
        logger.error(f"Comment page {log.pages + 1} failed after {len(log.actions)} comments: {e}")
        raise CommentFetchError(str(e), partial=log.actions) from e

    logger.info(f"Loaded {len(log.actions)} comments in {log.pages} pages")
    return log


async def stream_comment_batches(
    fetch_page: PageFetcher,
    limit: int = DEFAULT_PAGE_SIZE,
) -> AsyncIterator[CommentPage]:
    """
    Async form of `paginate_comments`.

    Each page is fetched in a worker thread and handed over as soon as it
    arrives. Closing the generator stops the walk before the next request.
    """
    before = None
    loaded = 0
    while True:
        try:
            page = await asyncio.to_thread(fetch_page, before, limit)
        except asyncio.CancelledError:
            logger.info(f"Comment streaming cancelled after {loaded} comments")
            raise
        except Exception as e:
            raise CommentFetchError(str(e)) from e

        loaded += len(page.events)
        yield page
        if page.done or not page.next_cursor:
            return
        before = page.next_cursor
