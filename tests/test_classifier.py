"""Tests for extension based classification."""

import pytest

from app.models.file import Category
from app.services.classifier import EXT_TO_CATEGORY, classify, extension

TABLE = {
    Category.IMAGE: "jpg jpeg png gif webp svg bmp ico",
    Category.VIDEO: "mp4 webm mov avi mkv m4v",
    Category.AUDIO: "mp3 wav m4a aac flac ogg",
    Category.TEXT: "txt md json xml csv log yml yaml toml ini",
    Category.CODE: "js ts html css rs py java c cpp h hpp go rb php sh bash",
    Category.PDF: "pdf",
    Category.ARCHIVE: "zip rar 7z tar gz bz2",
    Category.DOCUMENT: "doc docx xls xlsx ppt pptx",
}


@pytest.mark.parametrize(
    ("category", "ext"),
    [(category, ext) for category, exts in TABLE.items() for ext in exts.split()],
)
def test_every_extension_maps_to_its_category(category, ext):
    expected_preview = category not in {Category.ARCHIVE, Category.DOCUMENT}

    assert classify(f"file.{ext}") == (category, expected_preview)


def test_table_has_no_extra_extensions():
    expected = {ext for exts in TABLE.values() for ext in exts.split()}

    assert set(EXT_TO_CATEGORY) == expected


def test_extension_is_case_insensitive():
    assert classify("report.PDF") == classify("report.pdf") == (Category.PDF, True)
    assert classify("Photo.JpEg") == (Category.IMAGE, True)


@pytest.mark.parametrize(
    "name",
    ["Makefile", "", "noext.", "weird.exe", "archive.tar.xz", "file.docxx"],
)
def test_unknown_and_missing_extensions(name):
    assert classify(name) == (Category.UNKNOWN, False)


def test_last_extension_wins():
    assert classify("backup.tar.gz") == (Category.ARCHIVE, False)
    assert classify("notes.txt.py") == (Category.CODE, True)


def test_dotfile_extension():
    assert extension(".bashrc") == "bashrc"
    assert extension("README") == ""
