"""Tests for the local snapshot layout and freshness checks."""
from datetime import datetime, timezone

import orjson
import pytest
import requests

from wikimorph.errors import SnapshotError
from wikimorph.snapshot import (
    Snapshot,
    SnapshotRow,
    content_hash,
    fetch_latest_dump_date,
    load_snapshot,
    meta_path,
    parse_dump_date,
    read_update_date,
    snapshot_up_to_date,
    write_snapshot,
)


DUMP_DATE = datetime(2024, 5, 1, 21, 3, 12, tzinfo=timezone.utc)

RSS = """<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0">
  <channel>
    <title>enwiktionary dump progress</title>
    <item>
      <title>enwiktionary-latest-pages-articles.xml.bz2</title>
      <pubDate>Wed, 01 May 2024 21:03:12 GMT</pubDate>
    </item>
  </channel>
</rss>
"""


def make_row(word, wikitext):
    return SnapshotRow(word, wikitext, content_hash(wikitext))


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


class TestWriteAndLoad:
    """Test the JSONL + sidecar layout."""

    def test_round_trip(self, temp_dir):
        path = temp_dir / "wikitext_en.jsonl"
        rows = [make_row("cats", "# {{plural of|en|cat}}"), make_row("cat", "# A cat.")]
        assert write_snapshot(rows, path, DUMP_DATE) == 2

        snapshot = load_snapshot(path)
        assert len(snapshot) == 2
        assert "cats" in snapshot
        assert snapshot.lookup("cats") == "# {{plural of|en|cat}}"
        assert snapshot.get("cat").sha1 == content_hash("# A cat.")
        assert snapshot.update_date == DUMP_DATE

    def test_sidecar_contents(self, temp_dir):
        path = temp_dir / "snap.jsonl"
        write_snapshot([make_row("cat", "x")], path, DUMP_DATE)
        assert meta_path(path).name == "snap.jsonl.meta.json"
        meta = orjson.loads(meta_path(path).read_bytes())
        assert meta == {"wt_update_date": "2024-05-01T21:03:12+00:00", "rows": 1}

    def test_creates_parent_directories(self, temp_dir):
        path = temp_dir / "cache" / "wikimorph" / "snap.jsonl"
        write_snapshot([], path, DUMP_DATE)
        assert path.exists()

    def test_missing_file(self, temp_dir):
        with pytest.raises(SnapshotError):
            load_snapshot(temp_dir / "absent.jsonl")

    def test_bad_lines_skipped(self, temp_dir):
        path = temp_dir / "snap.jsonl"
        path.write_bytes(
            b'{"word": "cat", "wikitext": "# A cat."}\n'
            b"not json\n"
            b"\n"
            b'{"word": "dog"}\n'
            b'{"word": "cat", "wikitext": "duplicate"}\n'
        )
        snapshot = load_snapshot(path)
        assert len(snapshot) == 1
        assert snapshot.lookup("cat") == "# A cat."
        assert snapshot.get("cat").sha1 == content_hash("# A cat.")

    def test_without_sidecar_has_no_date(self, temp_dir):
        path = temp_dir / "snap.jsonl"
        path.write_bytes(b'{"word": "cat", "wikitext": "x", "sha1": "abc"}\n')
        assert load_snapshot(path).update_date is None

    def test_unreadable_sidecar(self, temp_dir):
        path = temp_dir / "snap.jsonl"
        path.write_bytes(b"")
        meta_path(path).write_bytes(b'{"wt_update_date": "yesterday"}')
        assert read_update_date(path) is None

    def test_lookup_absent_word(self):
        assert Snapshot({}).lookup("cat") is None


class TestFreshness:
    """Test staleness against the dump date."""

    def test_is_stale(self):
        snapshot = Snapshot({}, update_date=DUMP_DATE)
        assert not snapshot.is_stale(DUMP_DATE)
        assert snapshot.is_stale(datetime(2024, 6, 1, tzinfo=timezone.utc))

    def test_undated_snapshot_is_stale(self):
        assert Snapshot({}).is_stale(DUMP_DATE)

    def test_snapshot_up_to_date(self, temp_dir):
        path = temp_dir / "snap.jsonl"
        assert not snapshot_up_to_date(path, DUMP_DATE)
        write_snapshot([make_row("cat", "x")], path, DUMP_DATE)
        assert snapshot_up_to_date(path, DUMP_DATE)
        assert snapshot_up_to_date(path, datetime(2024, 4, 1))
        assert not snapshot_up_to_date(path, datetime(2024, 6, 1, tzinfo=timezone.utc))


class TestDumpDate:
    """Test reading the dump RSS feed."""

    def test_parse(self):
        assert parse_dump_date(RSS) == DUMP_DATE

    def test_no_pub_date(self):
        with pytest.raises(SnapshotError):
            parse_dump_date("<rss><channel></channel></rss>")

    def test_invalid_xml(self):
        with pytest.raises(SnapshotError):
            parse_dump_date("<rss>")

    def test_fetch(self):
        session = FakeSession(FakeResponse(RSS))
        assert fetch_latest_dump_date("https://dumps.example/rss", session=session, user_agent="test/1.0") == DUMP_DATE
        url, kwargs = session.calls[0]
        assert url == "https://dumps.example/rss"
        assert kwargs["headers"] == {"User-Agent": "test/1.0"}

    def test_fetch_http_error(self):
        session = FakeSession(FakeResponse(status_code=503))
        with pytest.raises(SnapshotError):
            fetch_latest_dump_date("https://dumps.example/rss", session=session)

    def test_fetch_connection_error(self):
        session = FakeSession(error=requests.ConnectionError("down"))
        with pytest.raises(SnapshotError):
            fetch_latest_dump_date("https://dumps.example/rss", session=session)
