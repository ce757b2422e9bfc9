from __future__ import annotations

import datetime as dt
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from .catalog import CatalogEntry, CatalogStore, needs_enrichment
from .errors import EntryNotFound, ExtractError, UrlError
from .extract import ExtractionResult, extract_metadata
from .http_client import DEFAULT_USER_AGENT, HttpClient
from .journal import RunJournal
from .urls import make_entry_id

LOGGER = logging.getLogger(__name__)


@dataclass
class MergeConfig:
    urls_path: Path = Path("urls.txt")
    catalog_path: Path = Path("catalog.json")
    timeout_s: float = 30
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    journal_path: Path | None = None
    dry_run: bool = False


@dataclass(frozen=True)
class Partition:
    new: list[str]
    enrich: list[str]
    skip: list[str]


@dataclass(frozen=True)
class Failure:
    url: str
    phase: str
    error: str


@dataclass(frozen=True)
class EnrichPatch:
    url: str
    preview: str | None
    word_count: int | None


@dataclass
class MergeReport:
    stats: Counter[str] = field(default_factory=Counter)
    failures: list[Failure] = field(default_factory=list)
    inserted: list[CatalogEntry] = field(default_factory=list)
    written: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.stats["inserted"] or self.stats["enriched"])

    def summary_line(self) -> str:
        s = self.stats
        return (
            f"inserted={s['inserted']} enriched={s['enriched']} "
            f"unchanged={s['unchanged']} skipped={s['skipped']} "
            f"failed={s['failed']}"
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "stats": dict(self.stats),
            "failures": [
                {"url": f.url, "phase": f.phase, "error": f.error}
                for f in self.failures
            ],
            "written": self.written,
        }


def partition_urls(urls: list[str], store: CatalogStore) -> Partition:
    """Split candidates into new / enrich / skip against the store.

    Repeated URLs are collapsed; the first occurrence keeps its position.
    """

    new: list[str] = []
    enrich: list[str] = []
    skip: list[str] = []
    for url in dict.fromkeys(urls):
        entry = store.lookup(url)
        if entry is None:
            new.append(url)
        elif needs_enrichment(entry):
            enrich.append(url)
        else:
            skip.append(url)
    return Partition(new=new, enrich=enrich, skip=skip)


class MergePipeline:
    """Fetch, extract and merge candidate URLs into a catalog.

    URLs are processed one at a time in input order. Per-URL fetch and
    extraction failures are logged and skipped; the catalog is saved at most
    once, after every URL has been processed.
    """

    def __init__(
        self,
        *,
        http: HttpClient,
        store: CatalogStore,
        journal: RunJournal | None = None,
        today: dt.date | None = None,
    ) -> None:
        self.http = http
        self.store = store
        self.journal = journal
        self._today = today

    def _record(self, kind: str, url: str | None = None, **details: object) -> None:
        if self.journal is not None:
            self.journal.record(kind, url, **details)

    def _fetch_and_extract(self, url: str) -> ExtractionResult:
        res = self.http.fetch(url)
        try:
            # Keep the catalog keyed by the requested URL, not the redirect target.
            return extract_metadata(res.text, url, today=self._today)
        except (RecursionError, ValueError) as e:
            raise ExtractError(url, f"Could not parse page: {type(e).__name__}") from e

    def _fail(self, report: MergeReport, url: str, phase: str, e: UrlError) -> None:
        report.stats["failed"] += 1
        report.failures.append(Failure(url=url, phase=phase, error=str(e)))
        LOGGER.warning("[%s] failed %s - %s", phase, url, e.message)
        self._record("failed", url, phase=phase, error=e.kind, message=e.message)

    def _stage_new(
        self, urls: list[str], report: MergeReport
    ) -> list[tuple[str, ExtractionResult]]:
        taken = self.store.ids()
        staged: list[tuple[str, ExtractionResult]] = []
        for url in urls:
            try:
                info = self._fetch_and_extract(url)
            except UrlError as e:
                self._fail(report, url, "new", e)
                continue

            entry_id = make_entry_id(info.author, info.year, taken=taken)
            taken.add(entry_id)
            staged.append((entry_id, info))
            LOGGER.info("[new] ok %s (id=%s)", url, entry_id)
        return staged

    def _stage_enrich(self, urls: list[str], report: MergeReport) -> list[EnrichPatch]:
        patches: list[EnrichPatch] = []
        for url in urls:
            entry = self.store.lookup(url)
            if entry is None:
                raise EntryNotFound(url)
            try:
                info = self._fetch_and_extract(url)
            except UrlError as e:
                self._fail(report, url, "enrich", e)
                continue

            patch = EnrichPatch(
                url=url,
                preview=info.preview if entry.preview is None else None,
                word_count=info.word_count if entry.word_count is None else None,
            )
            if patch.preview is None and patch.word_count is None:
                report.stats["unchanged"] += 1
                LOGGER.info("[enrich] unchanged %s (no missing fields found)", url)
                self._record("unchanged", url)
                continue

            patches.append(patch)
            LOGGER.info("[enrich] ok %s", url)
        return patches

    def run(self, urls: list[str], *, dry_run: bool = False) -> MergeReport:
        report = MergeReport()
        part = partition_urls(urls, self.store)
        report.stats["skipped"] = len(part.skip)
        LOGGER.info(
            "Candidates: new=%s enrich=%s skip=%s",
            len(part.new),
            len(part.enrich),
            len(part.skip),
        )

        if dry_run:
            for url in part.new:
                LOGGER.info("[dry-run] would add %s", url)
            for url in part.enrich:
                LOGGER.info("[dry-run] would enrich %s", url)
            return report

        staged = self._stage_new(part.new, report)
        patches = self._stage_enrich(part.enrich, report)

        if not staged and not patches:
            LOGGER.info("Nothing to do: no new URLs to add and no entries to enrich")
            return report

        for entry_id, info in staged:
            entry = self.store.insert(info, entry_id=entry_id)
            report.inserted.append(entry)
            report.stats["inserted"] += 1
            self._record("inserted", entry.url, id=entry.id)

        for patch in patches:
            if self.store.enrich_in_place(
                patch.url, preview=patch.preview, word_count=patch.word_count
            ):
                report.stats["enriched"] += 1
                self._record(
                    "enriched",
                    patch.url,
                    fields=[
                        name
                        for name, value in (
                            ("preview", patch.preview),
                            ("wordCount", patch.word_count),
                        )
                        if value is not None
                    ],
                )
        return report


def run_merge(
    cfg: MergeConfig,
    *,
    http: HttpClient,
    urls: list[str],
    today: dt.date | None = None,
) -> MergeReport:
    """Load the catalog, merge ``urls`` into it, and save once if changed."""

    store = CatalogStore.load(cfg.catalog_path)
    journal = RunJournal(cfg.journal_path) if cfg.journal_path else None
    pipeline = MergePipeline(http=http, store=store, journal=journal, today=today)

    report = pipeline.run(urls, dry_run=cfg.dry_run)
    if report.changed:
        store.save(cfg.catalog_path)
        report.written = True

    LOGGER.info("summary: %s", report.summary_line())
    if journal is not None:
        journal.record("summary", **report.to_dict())
    return report
