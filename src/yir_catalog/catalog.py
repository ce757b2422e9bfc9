from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterator

from .errors import CatalogFormatError, DuplicateId, DuplicateUrl, EntryNotFound
from .extract import ExtractionResult
from .urls import make_entry_id

# Persisted key order; the site reads these exact names.
FIELD_ORDER = ("id", "url", "year", "author", "title", "preview", "wordCount")


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    url: str
    year: int
    author: str
    title: str
    preview: str | None = None
    word_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "url": self.url,
            "year": self.year,
            "author": self.author,
            "title": self.title,
        }
        if self.preview is not None:
            out["preview"] = self.preview
        if self.word_count is not None:
            out["wordCount"] = self.word_count
        return out

    @classmethod
    def from_dict(cls, raw: object, *, index: int) -> CatalogEntry:
        if not isinstance(raw, dict):
            raise CatalogFormatError(f"record {index}: expected an object")

        unknown = set(raw) - set(FIELD_ORDER)
        if unknown:
            raise CatalogFormatError(
                f"record {index}: unknown keys {sorted(unknown)}"
            )

        for key in ("id", "url", "author", "title"):
            value = raw.get(key)
            if not isinstance(value, str) or not value:
                raise CatalogFormatError(
                    f"record {index}: {key!r} must be a non-empty string"
                )

        year = raw.get("year")
        if not isinstance(year, int) or isinstance(year, bool):
            raise CatalogFormatError(f"record {index}: 'year' must be an integer")

        preview = raw.get("preview")
        if preview is not None and not isinstance(preview, str):
            raise CatalogFormatError(f"record {index}: 'preview' must be a string")

        word_count = raw.get("wordCount")
        if word_count is not None and (
            not isinstance(word_count, int)
            or isinstance(word_count, bool)
            or word_count <= 0
        ):
            raise CatalogFormatError(
                f"record {index}: 'wordCount' must be a positive integer"
            )

        return cls(
            id=raw["id"],
            url=raw["url"],
            year=year,
            author=raw["author"],
            title=raw["title"],
            preview=preview,
            word_count=word_count,
        )


def needs_enrichment(entry: CatalogEntry) -> bool:
    return entry.preview is None or entry.word_count is None


class CatalogStore:
    """Ordered, URL-keyed collection of catalog entries.

    Entries keep their insertion order; new entries are appended. The store
    is loaded and saved as a whole document.
    """

    def __init__(self, entries: list[CatalogEntry] | None = None) -> None:
        self._entries: list[CatalogEntry] = []
        self._index_by_url: dict[str, int] = {}
        self._ids: set[str] = set()
        for entry in entries or []:
            self._append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(list(self._entries))

    def _append(self, entry: CatalogEntry) -> None:
        if entry.url in self._index_by_url:
            raise DuplicateUrl(entry.url)
        if entry.id in self._ids:
            raise DuplicateId(entry.id)
        self._index_by_url[entry.url] = len(self._entries)
        self._ids.add(entry.id)
        self._entries.append(entry)

    def lookup(self, url: str) -> CatalogEntry | None:
        idx = self._index_by_url.get(url)
        if idx is None:
            return None
        return self._entries[idx]

    def needs_enrichment(self, entry: CatalogEntry) -> bool:
        return needs_enrichment(entry)

    def ids(self) -> set[str]:
        return set(self._ids)

    def urls(self) -> list[str]:
        return [e.url for e in self._entries]

    def insert(
        self,
        result: ExtractionResult,
        *,
        entry_id: str | None = None,
    ) -> CatalogEntry:
        if result.url in self._index_by_url:
            raise DuplicateUrl(result.url)
        if entry_id is None:
            entry_id = make_entry_id(result.author, result.year, taken=self._ids)
        entry = CatalogEntry(
            id=entry_id,
            url=result.url,
            year=result.year,
            author=result.author,
            title=result.title,
            preview=result.preview,
            word_count=result.word_count,
        )
        self._append(entry)
        return entry

    def enrich_in_place(
        self,
        url: str,
        *,
        preview: str | None = None,
        word_count: int | None = None,
    ) -> bool:
        """Fill absent optional fields of the entry at ``url``.

        Fields that are already present are left untouched. Returns True if
        anything changed.
        """

        idx = self._index_by_url.get(url)
        if idx is None:
            raise EntryNotFound(url)

        entry = self._entries[idx]
        changes: dict[str, Any] = {}
        if entry.preview is None and preview is not None:
            changes["preview"] = preview
        if entry.word_count is None and word_count is not None:
            changes["word_count"] = word_count
        if not changes:
            return False

        self._entries[idx] = replace(entry, **changes)
        return True

    def to_json(self) -> str:
        records = [e.to_dict() for e in self._entries]
        return json.dumps(records, indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_json(cls, text: str) -> CatalogStore:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogFormatError(f"invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise CatalogFormatError("catalog must be a JSON array of records")

        entries = [CatalogEntry.from_dict(raw, index=i) for i, raw in enumerate(data)]
        try:
            return cls(entries)
        except (DuplicateUrl, DuplicateId) as e:
            raise CatalogFormatError(str(e)) from e

    @classmethod
    def load(cls, path: Path) -> CatalogStore:
        if not path.exists():
            return cls()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogFormatError(f"cannot read {path}: {e}") from e
        return cls.from_json(text)

    def save(self, path: Path) -> None:
        """Write the whole catalog atomically (temp file + rename)."""

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(self.to_json())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
