from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def utc_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class JournalEvent:
    kind: str
    url: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    at: str = field(default_factory=utc_iso)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"at": self.at, "kind": self.kind}
        if self.url is not None:
            out["url"] = self.url
        out.update(self.details)
        return out


@dataclass
class RunJournal:
    """Append-only JSONL record of per-URL merge outcomes.

    One line per event; the file is opened per write so a crash mid-run
    still leaves every earlier outcome on disk.
    """

    path: Path

    def record(self, kind: str, url: str | None = None, **details: Any) -> JournalEvent:
        event = JournalEvent(kind=kind, url=url, details=details)
        line = json.dumps(event.to_dict(), ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8", newline="\n") as fh:
            fh.write(line + "\n")
        return event
