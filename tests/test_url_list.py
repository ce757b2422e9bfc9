from __future__ import annotations

from pathlib import Path

import pytest

from yir_catalog.errors import EmptyUrlList, MissingInputFile
from yir_catalog.url_list import load_url_list, write_url_list


def test_load_trims_and_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "urls.txt"
    path.write_text(
        "\n  https://a.test/2024/  \r\n\n\thttps://b.test/\n   \n", encoding="utf-8"
    )
    assert load_url_list(path) == ["https://a.test/2024/", "https://b.test/"]


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MissingInputFile):
        load_url_list(tmp_path / "nope.txt")


def test_load_blank_file(tmp_path: Path) -> None:
    path = tmp_path / "urls.txt"
    path.write_text("\n   \n\n", encoding="utf-8")
    with pytest.raises(EmptyUrlList):
        load_url_list(path)


def test_write_one_url_per_line(tmp_path: Path) -> None:
    path = tmp_path / "out" / "urls.txt"
    write_url_list(path, ["https://a.test/", "https://b.test/"])
    assert path.read_bytes() == b"https://a.test/\nhttps://b.test/\n"
