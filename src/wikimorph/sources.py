"""
Content sources: where the English markup for a word comes from.

The decomposer only needs lookup(word) -> Optional[str], returning the
relevant English markup of the word or None when it has no English entry.
Sources are read-only, so one source can serve concurrent decompositions of
different words.
"""

import logging
import time
from pathlib import Path
from typing import Mapping, Optional, Protocol

import requests

from wikimorph.config import Settings
from wikimorph.english import extract_relevant_english
from wikimorph.snapshot import Snapshot, load_snapshot


logger = logging.getLogger(__name__)


class ContentSource(Protocol):
    def lookup(self, word: str) -> Optional[str]:
        ...


class MemorySource:
    """Markup supplied directly, already reduced to the English content."""

    def __init__(self, entries: Mapping[str, str]):
        self._entries = dict(entries)

    def lookup(self, word: str) -> Optional[str]:
        return self._entries.get(word)


class PageSource:
    """Full wikitext pages held in memory; the English part is extracted on lookup."""

    def __init__(self, pages: Mapping[str, str]):
        self._pages = dict(pages)

    def lookup(self, word: str) -> Optional[str]:
        page = self._pages.get(word)
        if page is None:
            return None
        return extract_relevant_english(page)


class SnapshotSource:
    """Lookup in a preloaded snapshot."""

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot

    @classmethod
    def from_path(cls, path: Path) -> "SnapshotSource":
        return cls(load_snapshot(path))

    def lookup(self, word: str) -> Optional[str]:
        return self.snapshot.lookup(word)


class WiktionaryApiSource:
    """
    Fetch a page per word from the MediaWiki API.

    Any failure (missing page, HTTP error, bad payload) yields None; the word
    is then treated as having no English entry. Connection errors and 5xx
    responses are retried `retries` times with a fixed delay.
    """

    def __init__(
        self,
        api_url: str,
        user_agent: str,
        timeout: float = 30.0,
        retries: int = 2,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.headers = {"User-Agent": user_agent}

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "WiktionaryApiSource":
        return cls(
            api_url=settings.api_url,
            user_agent=settings.user_agent,
            timeout=settings.timeout,
            retries=settings.retries,
            retry_delay=settings.retry_delay,
            session=session,
        )

    def fetch_page(self, word: str) -> Optional[str]:
        """Return the raw wikitext of the page titled `word`, or None."""
        params = {
            "action": "parse",
            "page": word,
            "prop": "wikitext",
            "format": "json",
            "formatversion": "2",
        }
        for attempt in range(self.retries + 1):
            try:
                response = self.session.get(
                    self.api_url, params=params, headers=self.headers, timeout=self.timeout,
                )
                if response.status_code >= 500 and attempt < self.retries:
                    logger.warning(f"Wiktionary returned {response.status_code} for '{word}', retrying")
                    time.sleep(self.retry_delay)
                    continue
                response.raise_for_status()
                payload = response.json()
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < self.retries:
                    logger.warning(f"Request for '{word}' failed ({e}), retrying")
                    time.sleep(self.retry_delay)
                    continue
                logger.error(f"Giving up on '{word}': {e}")
                return None
            except (requests.RequestException, ValueError) as e:
                logger.error(f"Request for '{word}' failed: {e}")
                return None

            if "error" in payload:
                logger.debug(f"No page for '{word}': {payload['error'].get('code')}")
                return None
            wikitext = payload.get("parse", {}).get("wikitext")
            if isinstance(wikitext, dict):
                # formatversion=1 shape
                wikitext = wikitext.get("*")
            return wikitext if isinstance(wikitext, str) else None
        return None

    def lookup(self, word: str) -> Optional[str]:
        logger.info(f"Fetching '{word}' from the Wiktionary API")
        page = self.fetch_page(word)
        if page is None:
            return None
        return extract_relevant_english(page)


def open_source(settings: Settings, prefer_snapshot: bool = True, offline: bool = False) -> ContentSource:
    """
    Pick a content source for these settings.

    The local snapshot is used when it exists (and prefer_snapshot is set);
    otherwise the live API. With offline=True a missing snapshot yields an
    empty source instead of the API.
    """
    path = settings.snapshot_path
    if prefer_snapshot and path.exists():
        return SnapshotSource.from_path(path)
    if offline:
        logger.warning(f"No snapshot at {path}; offline mode has no content")
        return MemorySource({})
    return WiktionaryApiSource.from_settings(settings)
