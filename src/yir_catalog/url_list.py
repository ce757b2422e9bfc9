from __future__ import annotations

from pathlib import Path

from .errors import EmptyUrlList, MissingInputFile


def load_url_list(path: Path) -> list[str]:
    """Read a newline-delimited URL list, skipping blank lines."""

    if not path.exists() or not path.is_file():
        raise MissingInputFile(path)
    urls = [
        line.strip()
        for line in path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    if not urls:
        raise EmptyUrlList(path)
    return urls


def write_url_list(path: Path, urls: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "\n".join(urls) + ("\n" if urls else ""),
        encoding="utf-8",
        newline="\n",
    )
