"""
Local snapshot of English Wiktionary markup.

A snapshot lets decomposition run without hitting the Wiktionary API. It is a
JSONL file of rows

    {"word": "cats", "wikitext": "<relevant English markup>", "sha1": "..."}

plus a sidecar <file>.meta.json holding the date of the dump it was built
from:

    {"wt_update_date": "2024-05-01T21:03:12+00:00", "rows": 123456}

Building a snapshot from the bulk dump is a separate job; this module only
reads and writes the layout and decides whether a snapshot is stale.
"""

import hashlib
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

import orjson
import requests

from wikimorph.errors import SnapshotError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotRow:
    word: str
    wikitext: str
    sha1: str


class Snapshot:
    """Immutable in-memory lookup of snapshot rows by word."""

    def __init__(self, rows: Mapping[str, SnapshotRow], update_date: Optional[datetime] = None):
        self._rows = MappingProxyType(dict(rows))
        self.update_date = update_date

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, word: str) -> bool:
        return word in self._rows

    def get(self, word: str) -> Optional[SnapshotRow]:
        return self._rows.get(word)

    def lookup(self, word: str) -> Optional[str]:
        row = self._rows.get(word)
        return row.wikitext if row is not None else None

    def is_stale(self, dump_date: datetime) -> bool:
        """True if the snapshot predates `dump_date` (or has no date)."""
        return self.update_date is None or self.update_date < dump_date


def content_hash(text: str) -> str:
    """SHA-1 hex digest of the markup, as stored in snapshot rows."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def meta_path(path: Path) -> Path:
    return path.with_name(path.name + ".meta.json")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def read_update_date(path: Path) -> Optional[datetime]:
    """Read the dump date from a snapshot's sidecar, if any."""
    meta = meta_path(Path(path))
    if not meta.exists():
        return None
    try:
        data = orjson.loads(meta.read_bytes())
        raw = data.get("wt_update_date")
        return _as_utc(datetime.fromisoformat(raw)) if raw else None
    except (orjson.JSONDecodeError, TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Ignoring unreadable snapshot metadata {meta}: {e}")
        return None


def load_snapshot(path: Path) -> Snapshot:
    """
    Load a snapshot into memory.

    Raises:
        SnapshotError: if the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"Snapshot not found: {path}")

    logger.info(f"Loading snapshot from {path}")
    rows: dict[str, SnapshotRow] = {}
    with open(path, "rb") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
                row = SnapshotRow(
                    word=data["word"],
                    wikitext=data["wikitext"],
                    sha1=data.get("sha1") or content_hash(data["wikitext"]),
                )
            except (orjson.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning(f"Line {line_num}: skipping bad snapshot row: {e}")
                continue
            rows.setdefault(row.word, row)

    update_date = read_update_date(path)
    logger.info(f"  -> Loaded {len(rows):,} words (dump date: {update_date or 'unknown'})")
    return Snapshot(rows, update_date)


def write_snapshot(rows: Iterable[SnapshotRow], path: Path, update_date: datetime) -> int:
    """Write rows and the sidecar metadata. Returns the number of rows."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, "wb") as f:
        for row in rows:
            record = {"word": row.word, "wikitext": row.wikitext, "sha1": row.sha1}
            f.write(orjson.dumps(record) + b"\n")
            count += 1

    meta = {"wt_update_date": _as_utc(update_date).isoformat(), "rows": count}
    meta_path(path).write_bytes(orjson.dumps(meta, option=orjson.OPT_INDENT_2))
    logger.info(f"Written: {path} ({count:,} rows)")
    return count


def snapshot_up_to_date(path: Path, dump_date: datetime) -> bool:
    """Check if the snapshot exists and is at least as new as the dump."""
    path = Path(path)
    if not path.exists():
        return False
    update_date = read_update_date(path)
    return update_date is not None and _as_utc(dump_date) <= update_date


def parse_dump_date(rss_xml: str) -> datetime:
    """Extract the <pubDate> of the dump RSS feed as an aware UTC datetime."""
    try:
        root = ET.fromstring(rss_xml)
    except ET.ParseError as e:
        raise SnapshotError(f"Invalid dump RSS feed: {e}")
    node = root.find(".//pubDate")
    if node is None or not (node.text or "").strip():
        raise SnapshotError("Dump RSS feed has no pubDate")
    try:
        return _as_utc(parsedate_to_datetime(node.text.strip()))
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Unparseable pubDate {node.text!r}: {e}")


def fetch_latest_dump_date(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
    user_agent: Optional[str] = None,
) -> datetime:
    """
    Ask dumps.wikimedia.org for the date of the latest pages-articles dump.

    Raises:
        SnapshotError: if the feed cannot be fetched or parsed
    """
    http = session or requests.Session()
    headers = {"User-Agent": user_agent} if user_agent else {}
    try:
        response = http.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SnapshotError(f"Could not fetch dump feed {url}: {e}")
    return parse_dump_date(response.text)
