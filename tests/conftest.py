from __future__ import annotations

from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict


def make_response(
    status_code: int = 200,
    body: str | bytes = "",
    *,
    url: str = "",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    resp.headers = CaseInsensitiveDict(headers or {})
    resp._content = body.encode("utf-8") if isinstance(body, str) else body
    return resp


class FakeSession:
    """Stands in for requests.Session; routes GETs by exact URL."""

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[str] = []
        self.last_kwargs: dict[str, Any] = {}

    def __enter__(self) -> FakeSession:
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append(url)
        self.last_kwargs = kwargs
        route = self.routes.get(url)
        if route is None:
            return make_response(404, "not found", url=url)
        if isinstance(route, BaseException):
            raise route
        if callable(route):
            return route(url)
        return route


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


def page(
    *,
    title: str | None = None,
    head: str = "",
    body: str = "",
) -> str:
    title_tag = f"<title>{title}</title>" if title is not None else ""
    return (
        "<!doctype html><html><head>"
        f"{title_tag}{head}"
        "</head><body>"
        f"{body}"
        "</body></html>"
    )


LONG_PARAGRAPH = (
    "This year I finally shipped the side project I had been talking about "
    "for ages, moved cities, and read more books than ever before."
)

ARTICLE_BODY = (
    "<article>"
    f"<p>{LONG_PARAGRAPH}</p>"
    "<p>Looking ahead, the plan is to write more often and to keep the "
    "scope of each project small enough to finish.</p>"
    "</article>"
)
