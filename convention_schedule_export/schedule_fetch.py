"""
Fetch the schedule page and per-event detail pages.

Workflow:
1. GET the public schedule page (no login needed)
2. Parse it with schedule_html.parse_schedule_html
3. Optionally GET every event's detail page, concurrently with a bounded
   worker pool, and copy its description paragraph into the event

Any HTTP or parsing failure aborts the run; nothing is retried.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import requests
from bs4 import BeautifulSoup  # type: ignore[import]

from .errors import EnrichmentError
from .grid_events import ScheduleEvent

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────
#  Constants
# ──────────────────────────────────────────────────────────────────

DEFAULT_SCHEDULE_URL = "https://www.animeboston.com/schedule/index/2024"

# Description paragraph on an event detail page
DEFAULT_DESCRIPTION_SELECTOR = "div.schedule-event-description p"

DEFAULT_TIMEOUT = 30
DEFAULT_WORKERS = 4


# ──────────────────────────────────────────────────────────────────
#  Helpers
# ──────────────────────────────────────────────────────────────────

def fetch_html(url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Download one page and return its text. HTTP errors propagate."""
    logger.debug("GET %s", url)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.text


def fetch_schedule_html(url: str = DEFAULT_SCHEDULE_URL, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Download the schedule page."""
    return fetch_html(url, timeout=timeout)


def extract_description(html: str, selector: str = DEFAULT_DESCRIPTION_SELECTOR) -> str:
    """Text of the first element matching selector on a detail page."""
    soup = BeautifulSoup(html, "html.parser")
    el = soup.select_one(selector)
    text = " ".join(el.get_text(" ", strip=True).split()) if el else ""
    if not text:
        raise EnrichmentError(f"No description found ({selector}).")
    return text


def fetch_description(
    event: ScheduleEvent,
    timeout: float = DEFAULT_TIMEOUT,
    selector: str = DEFAULT_DESCRIPTION_SELECTOR,
) -> str:
    if not event.url:
        raise EnrichmentError(f"Event {event.name!r} has no detail link.")
    try:
        html = fetch_html(event.url, timeout=timeout)
        return extract_description(html, selector)
    except EnrichmentError as e:
        raise EnrichmentError(f"{event.name!r} ({event.url}): {e}") from e
    except requests.RequestException as e:
        raise EnrichmentError(f"Could not fetch {event.url} for {event.name!r}: {e}") from e


# ──────────────────────────────────────────────────────────────────
#  Enrichment
# ──────────────────────────────────────────────────────────────────

def enrich_events(
    events: Sequence[ScheduleEvent],
    max_workers: int = DEFAULT_WORKERS,
    timeout: float = DEFAULT_TIMEOUT,
    selector: str = DEFAULT_DESCRIPTION_SELECTOR,
) -> List[ScheduleEvent]:
    """
    Return copies of events with description filled from their detail pages.

    Each fetch is independent; results are placed back by index, so the
    output order matches the input order. The first failure is raised.
    """
    if not events:
        return []
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1.")

    results: List[Optional[ScheduleEvent]] = [None] * len(events)
    logger.info("Fetching %d detail page(s) with %d worker(s)", len(events), max_workers)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(fetch_description, event, timeout, selector)
            for event in events
        ]
        try:
            for i, future in enumerate(futures):
                results[i] = events[i].with_description(future.result())
        except Exception:
            for future in futures:
                future.cancel()
            raise

    return [event for event in results if event is not None]
