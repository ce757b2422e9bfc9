from __future__ import annotations


class CatalogToolError(Exception):
    """Base class for every error raised by yir_catalog."""


# Per-URL failures: non-fatal, the URL is skipped for this run.


class UrlError(CatalogToolError):
    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class FetchError(UrlError):
    pass


class ExtractError(UrlError):
    pass


class RedirectWithoutLocation(FetchError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(url, f"HTTP {status_code} without Location header")
        self.status_code = status_code


class TooManyRedirects(FetchError):
    def __init__(self, url: str, max_redirects: int) -> None:
        super().__init__(url, f"Too many redirects ({max_redirects})")
        self.max_redirects = max_redirects


class HttpStatusError(FetchError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(url, f"HTTP {status_code}")
        self.status_code = status_code


class FetchTimeout(FetchError):
    pass


class NetworkError(FetchError):
    pass


# Store failures: contract violations or a corrupt catalog file. Fatal.


class StoreError(CatalogToolError):
    pass


class DuplicateUrl(StoreError):
    def __init__(self, url: str) -> None:
        super().__init__(f"URL already in catalog: {url}")
        self.url = url


class DuplicateId(StoreError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(f"id already in catalog: {entry_id}")
        self.entry_id = entry_id


class EntryNotFound(StoreError):
    def __init__(self, url: str) -> None:
        super().__init__(f"URL not in catalog: {url}")
        self.url = url


class CatalogFormatError(StoreError):
    pass


# Input failures: fatal at startup, before any fetch.


class InputError(CatalogToolError):
    pass


class MissingInputFile(InputError):
    def __init__(self, path: object) -> None:
        super().__init__(f"URL list not found: {path}")
        self.path = path


class EmptyUrlList(InputError):
    def __init__(self, path: object) -> None:
        super().__init__(f"URL list is empty: {path}")
        self.path = path
