from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import requests
from requests import exceptions as req_exc
from requests.utils import get_encoding_from_headers

from .errors import (
    FetchTimeout,
    HttpStatusError,
    NetworkError,
    RedirectWithoutLocation,
    TooManyRedirects,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; YearInReviewBot/1.0; +https://example.invalid)"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml"


@dataclass(frozen=True)
class FetchResult:
    url: str
    final_url: str
    status_code: int
    redirects: int
    text: str


def _decode_body(resp: requests.Response) -> str:
    # requests assumes ISO-8859-1 for text/* without a charset; most blogs
    # are UTF-8, so only trust an explicit charset parameter.
    content_type = resp.headers.get("Content-Type") or ""
    encoding = "utf-8"
    if "charset=" in content_type.lower():
        encoding = get_encoding_from_headers(resp.headers) or "utf-8"
    try:
        return resp.content.decode(encoding, errors="replace")
    except LookupError:
        return resp.content.decode("utf-8", errors="replace")


class HttpClient:
    def __init__(
        self,
        session: requests.Session,
        *,
        timeout_s: float = 30,
        max_redirects: int = 5,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._session = session
        self._timeout_s = timeout_s
        self._max_redirects = max_redirects
        self._headers = {"User-Agent": user_agent, "Accept": DEFAULT_ACCEPT}

    def fetch(self, url: str) -> FetchResult:
        """GET ``url``, following at most ``max_redirects`` redirect hops.

        Raises a ``FetchError`` subclass on any failure; there are no
        retries.
        """

        current = url
        for hop in range(self._max_redirects + 1):
            try:
                resp = self._session.get(
                    current,
                    headers=self._headers,
                    timeout=self._timeout_s,
                    allow_redirects=False,
                )
            except req_exc.Timeout as e:
                raise FetchTimeout(current, f"Timed out after {self._timeout_s}s") from e
            except req_exc.RequestException as e:
                raise NetworkError(current, str(e) or type(e).__name__) from e

            status = int(resp.status_code)
            if 300 <= status < 400:
                location = resp.headers.get("Location")
                if not location:
                    raise RedirectWithoutLocation(current, status)
                target = urljoin(current, location)
                LOGGER.debug("HTTP %s %s -> %s", status, current, target)
                current = target
                continue

            if status >= 400:
                raise HttpStatusError(current, status)

            return FetchResult(
                url=url,
                final_url=current,
                status_code=status,
                redirects=hop,
                text=_decode_body(resp),
            )

        raise TooManyRedirects(url, self._max_redirects)
