from __future__ import annotations

import json
from pathlib import Path

from yir_catalog.journal import JournalEvent, RunJournal


def test_event_dict_leads_with_timestamp_and_kind() -> None:
    event = JournalEvent(kind="inserted", url="https://a.test/", details={"id": "a-2024"}, at="T")
    assert list(event.to_dict().items()) == [
        ("at", "T"),
        ("kind", "inserted"),
        ("url", "https://a.test/"),
        ("id", "a-2024"),
    ]


def test_event_without_url_omits_it() -> None:
    assert "url" not in JournalEvent(kind="summary").to_dict()


def test_record_appends_one_line_per_event(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "run.jsonl"
    journal = RunJournal(path)

    journal.record("failed", "https://b.test/", error="HttpStatusError")
    journal.record("summary", stats={"failed": 1})

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [e["kind"] for e in lines] == ["failed", "summary"]
    assert lines[0]["url"] == "https://b.test/"
    assert lines[1]["stats"] == {"failed": 1}
    assert lines[0]["at"].endswith("Z")
