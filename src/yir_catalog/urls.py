from __future__ import annotations

import datetime as dt
import logging
import re
import unicodedata
from typing import Iterable
from urllib.parse import urlparse

LOGGER = logging.getLogger(__name__)

_YEAR_TOKEN = re.compile(r"(?:19|20)\d{2}")

MAX_SLUG_LEN = 60


def host_label(url: str) -> str:
    """Return the URL's host name without a leading ``www.``."""

    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        host = ""
    if not host:
        return "unknown"
    return re.sub(r"^www\.", "", host)


def infer_year(url: str, *, today: dt.date | None = None) -> int:
    """Infer the publication year from the URL text.

    Common patterns: /2025/, /2025/Dec/31/, ?year=2025. Falls back to the
    current year when the URL carries no year-like token.
    """

    m = _YEAR_TOKEN.search(url)
    if m:
        return int(m.group(0))
    year = (today or dt.date.today()).year
    LOGGER.debug("No year token in %s; defaulting to %s", url, year)
    return year


def slugify(text: str, *, max_len: int = MAX_SLUG_LEN) -> str:
    text = unicodedata.normalize("NFKD", str(text).lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    return text[:max_len]


def make_entry_id(author: str, year: int, *, taken: Iterable[str] = ()) -> str:
    """Build ``<slug(author)>-<year>``, suffixed ``-2``, ``-3``... until unique."""

    taken = set(taken)
    base = f"{slugify(author)}-{year}"
    candidate = base
    n = 2
    while candidate in taken:
        candidate = f"{base}-{n}"
        n += 1
    return candidate
