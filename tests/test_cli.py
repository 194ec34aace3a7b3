"""Tests for the wikimorph command line."""
from datetime import datetime, timezone

import orjson
import pytest

from wikimorph.cli import main as cli
from wikimorph.errors import SnapshotError
from wikimorph.snapshot import SnapshotRow, content_hash, write_snapshot


DUMP_DATE = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def snapshot_path(temp_dir, sample_markup):
    """A snapshot file holding the sample markup."""
    path = temp_dir / "wikitext_en.jsonl"
    rows = [SnapshotRow(word, text, content_hash(text)) for word, text in sample_markup.items()]
    write_snapshot(rows, path, DUMP_DATE)
    return path


@pytest.fixture(autouse=True)
def isolated_settings(temp_dir, monkeypatch):
    """Never read the user's cache or environment."""
    monkeypatch.setenv("WIKIMORPH_CACHE_DIR", str(temp_dir / "cache"))
    for var in ("WIKIMORPH_MAX_DEPTH", "WIKIMORPH_API_URL", "WIKIMORPH_USER_AGENT", "WIKIMORPH_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)


class TestSplit:
    """Test `wikimorph split`."""

    def test_json(self, snapshot_path, capsys):
        code = cli.main(["-q", "split", "--json", "--snapshot", str(snapshot_path), "rainbows", "unhappy"])
        assert code == cli.EXIT_OK
        lines = capsys.readouterr().out.strip().splitlines()
        first, second = (orjson.loads(line) for line in lines)
        assert first["word"] == "rainbows"
        assert [p["text"] for p in first["pieces"]] == ["rain", "bow", "s"]
        assert second["pieces"] == [
            {"text": "un", "role": "prefix"},
            {"text": "happy", "role": "base_word"},
        ]

    def test_raw(self, snapshot_path, capsys):
        cli.main(["-q", "split", "--json", "--raw", "--snapshot", str(snapshot_path), "unhappiness"])
        data = orjson.loads(capsys.readouterr().out)
        assert [p["text"] for p in data["pieces"]] == ["un-", "happy", "-ness"]

    def test_max_depth(self, snapshot_path, capsys):
        cli.main(["-q", "split", "--json", "--max-depth", "1", "--snapshot", str(snapshot_path), "unhappiness"])
        data = orjson.loads(capsys.readouterr().out)
        assert [p["text"] for p in data["pieces"]] == ["unhappy", "ness"]
        assert data["diagnostics"][0]["kind"] == "depth_exceeded"

    def test_table_output(self, snapshot_path, capsys):
        code = cli.main(["-q", "split", "--snapshot", str(snapshot_path), "cats"])
        assert code == cli.EXIT_OK
        out = capsys.readouterr().out
        assert "cats" in out
        assert "inflection" in out

    def test_invalid_max_depth(self, snapshot_path):
        with pytest.raises(SystemExit):
            cli.main(["split", "--max-depth", "0", "--snapshot", str(snapshot_path), "cats"])

    def test_missing_snapshot(self, temp_dir):
        assert cli.main(["-q", "split", "--snapshot", str(temp_dir / "absent.jsonl"), "cats"]) == cli.EXIT_FAILURE

    def test_offline_without_snapshot(self, capsys):
        code = cli.main(["-q", "split", "--json", "--offline", "cats"])
        assert code == cli.EXIT_OK
        data = orjson.loads(capsys.readouterr().out)
        assert data["pieces"] == [{"text": "cats", "role": "base_word"}]
        assert data["diagnostics"][0]["kind"] == "not_english_word"

    def test_bad_config(self, temp_dir):
        assert cli.main(["--config", str(temp_dir / "absent.yaml"), "split", "cats"]) == cli.EXIT_FAILURE


class TestBatch:
    """Test `wikimorph batch`."""

    def test_writes_jsonl(self, temp_dir, snapshot_path):
        words = temp_dir / "words.txt"
        words.write_text("# sample\ncats\n\nrainbow\nxyzzy\n", encoding="utf-8")
        output = temp_dir / "out" / "pieces.jsonl"

        code = cli.main(["-q", "batch", str(words), str(output), "--snapshot", str(snapshot_path)])
        assert code == cli.EXIT_OK

        rows = [orjson.loads(line) for line in output.read_bytes().splitlines()]
        assert [row["word"] for row in rows] == ["cats", "rainbow", "xyzzy"]
        assert [p["text"] for p in rows[1]["pieces"]] == ["rain", "bow"]
        assert rows[2]["diagnostics"][0]["kind"] == "not_english_word"

    def test_read_words(self, temp_dir):
        path = temp_dir / "words.txt"
        path.write_text("  cat \n#comment\n\ndog\n", encoding="utf-8")
        assert cli.read_words(path) == ["cat", "dog"]


class TestSnapshotStatus:
    """Test `wikimorph snapshot-status`."""

    def test_up_to_date(self, snapshot_path, monkeypatch):
        monkeypatch.setattr(cli, "fetch_latest_dump_date", lambda *args, **kwargs: DUMP_DATE)
        assert cli.main(["-q", "snapshot-status", "--snapshot", str(snapshot_path)]) == cli.EXIT_OK

    def test_stale(self, snapshot_path, monkeypatch):
        newer = datetime(2024, 6, 1, tzinfo=timezone.utc)
        monkeypatch.setattr(cli, "fetch_latest_dump_date", lambda *args, **kwargs: newer)
        assert cli.main(["-q", "snapshot-status", "--snapshot", str(snapshot_path)]) == cli.EXIT_STALE

    def test_missing(self, temp_dir):
        assert cli.main(["-q", "snapshot-status"]) == cli.EXIT_FAILURE

    def test_feed_unavailable(self, snapshot_path, monkeypatch):
        def fail(*args, **kwargs):
            raise SnapshotError("feed unavailable")

        monkeypatch.setattr(cli, "fetch_latest_dump_date", fail)
        assert cli.main(["-q", "snapshot-status", "--snapshot", str(snapshot_path)]) == cli.EXIT_FAILURE
