from __future__ import annotations

import datetime as dt
import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from bs4 import BeautifulSoup

from .urls import host_label, infer_year

TITLE_META_SELECTORS = (
    'meta[property="og:title"]',
    'meta[name="twitter:title"]',
    'meta[name="title"]',
)

AUTHOR_META_SELECTORS = (
    'meta[name="author"]',
    'meta[property="article:author"]',
    'meta[name="twitter:creator"]',
)

DESCRIPTION_META_SELECTORS = (
    'meta[property="og:description"]',
    'meta[name="description"]',
    'meta[name="twitter:description"]',
)

PARAGRAPH_SELECTORS = (
    "article p",
    "main p",
    ".post-content p",
    ".entry-content p",
    ".content p",
    "p",
)

CONTENT_SELECTORS = (
    "article",
    "main",
    ".post-content",
    ".entry-content",
    ".content",
    "body",
)

PREVIEW_MIN_CHARS = 50
PREVIEW_MAX_CHARS = 500
WORD_COUNT_MIN_CHARS = 100

NON_CONTENT_TAGS = ["script", "style", "noscript"]

_WS = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractionResult:
    url: str
    title: str
    author: str
    year: int
    preview: str | None = None
    word_count: int | None = None


def _collapse_ws(text: str) -> str:
    return _WS.sub(" ", text).strip()


def first_of(strategies: Iterable[Callable[[], Any]]) -> Any:
    """Run strategies in order; the first non-None result wins."""

    for strategy in strategies:
        value = strategy()
        if value is not None:
            return value
    return None


def _attr_text(val: object) -> str:
    if isinstance(val, list):
        if not val:
            return ""
        return str(val[0])
    return str(val or "")


def pick_meta(soup: BeautifulSoup, selectors: Iterable[str]) -> str | None:
    for sel in selectors:
        node = soup.select_one(sel)
        if node is None:
            continue
        value = _attr_text(node.get("content")).strip()
        if value:
            return value
    return None


def _title_element(soup: BeautifulSoup) -> str | None:
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(" ", strip=True)
    return None


def extract_title(soup: BeautifulSoup, url: str) -> str:
    return first_of(
        [
            lambda: pick_meta(soup, TITLE_META_SELECTORS),
            lambda: _title_element(soup),
            lambda: url,
        ]
    )


def _json_ld_nodes(soup: BeautifulSoup) -> list[dict[str, Any]]:
    nodes: list[dict[str, Any]] = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string if script.string is not None else script.get_text()
        try:
            data = json.loads(raw or "")
        except (ValueError, RecursionError):
            # Unparseable or pathologically nested blocks are ignored.
            continue
        for node in data if isinstance(data, list) else [data]:
            if not isinstance(node, dict):
                continue
            nodes.append(node)
            graph = node.get("@graph")
            if isinstance(graph, list):
                nodes.extend(n for n in graph if isinstance(n, dict))
    return nodes


def _name_of(value: Any) -> str | None:
    if isinstance(value, dict):
        name = value.get("name")
        if isinstance(name, str) and name.strip():
            return name
    return None


def _author_from_node(node: dict[str, Any]) -> str | None:
    author = node.get("author")
    if isinstance(author, str) and author.strip():
        return author
    if isinstance(author, list) and author:
        name = _name_of(author[0])
        if name:
            return name
    name = _name_of(author)
    if name:
        return name

    node_type = node.get("@type")
    if node_type and re.search(r"person", str(node_type), re.IGNORECASE):
        return _name_of(node)
    return None


def author_from_json_ld(soup: BeautifulSoup) -> str | None:
    for node in _json_ld_nodes(soup):
        author = _author_from_node(node)
        if author:
            return author
    return None


def _clean_author(author: str) -> str:
    return re.sub(r"^@", "", author.strip()).strip()


def extract_author(soup: BeautifulSoup, url: str) -> str:
    author = first_of(
        [
            lambda: author_from_json_ld(soup),
            lambda: pick_meta(soup, AUTHOR_META_SELECTORS),
        ]
    )
    if author is not None:
        cleaned = _clean_author(author)
        if cleaned:
            return cleaned
    return _clean_author(host_label(url))


def _is_preview_paragraph(text: str) -> bool:
    if not PREVIEW_MIN_CHARS <= len(text) <= PREVIEW_MAX_CHARS:
        return False
    # All-caps blocks are usually banners or legal boilerplate.
    return text != text.upper()


def first_paragraph(soup: BeautifulSoup) -> str | None:
    for selector in PARAGRAPH_SELECTORS:
        for p in soup.select(selector):
            text = p.get_text().strip()
            if _is_preview_paragraph(text):
                return _collapse_ws(text)
    return None


def extract_preview(soup: BeautifulSoup) -> str | None:
    meta = pick_meta(soup, DESCRIPTION_META_SELECTORS)
    if meta is not None:
        return _collapse_ws(meta)
    return first_paragraph(soup)


def _drop_non_content(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(NON_CONTENT_TAGS):
        tag.decompose()


def extract_word_count(soup: BeautifulSoup) -> int | None:
    """Count words in the first content region with meaningful text.

    Expects a soup already stripped of script/style nodes.
    """

    for selector in CONTENT_SELECTORS:
        nodes = soup.select(selector)
        if not nodes:
            continue
        # Inline markup stays glued to its neighbours; separate regions do not.
        text = _collapse_ws(" ".join(n.get_text() for n in nodes))
        if len(text) > WORD_COUNT_MIN_CHARS:
            return len(text.split())
    return None


def extract_metadata(
    html: str,
    url: str,
    *,
    today: dt.date | None = None,
) -> ExtractionResult:
    """Best-effort metadata for one page. Never raises on odd markup."""

    soup = BeautifulSoup(html or "", "html.parser")

    # JSON-LD lives in <script>, so read head-level fields before cleaning.
    title = extract_title(soup, url)
    author = extract_author(soup, url)

    _drop_non_content(soup)
    return ExtractionResult(
        url=url,
        title=title,
        author=author,
        year=infer_year(url, today=today),
        preview=extract_preview(soup),
        word_count=extract_word_count(soup),
    )
