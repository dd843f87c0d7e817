"""Tests for filename sanitizing and storage ids."""

import uuid

import pytest

from app.services.namer import display_name, is_valid_storage_id, make_storage_id, sanitize


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("report.pdf", "report.pdf"),
        ("my file (1).txt", "myfile1.txt"),
        ("../../etc/passwd", "etcpasswd"),
        ("..\\..\\windows\\system.ini", "windowssystem.ini"),
        (".hidden", "hidden"),
        ("...", ""),
        ("C:\\fakepath\\photo.jpg", "Cfakepathphoto.jpg"),
        ("snake_case-name.tar.gz", "snake_case-name.tar.gz"),
        ("résumé.md", "résumé.md"),
    ],
)
def test_sanitize(raw, expected):
    assert sanitize(raw) == expected


@pytest.mark.parametrize("raw", ["../x", "/abs/path", "..", "./.env", "a/../../b", "\\\\server\\share"])
def test_sanitize_never_leaves_separators_or_leading_dot(raw):
    safe = sanitize(raw)

    assert "/" not in safe
    assert "\\" not in safe
    assert not safe.startswith(".")


def test_storage_id_layout():
    storage_id = make_storage_id("notes.txt")
    token, sep, name = storage_id.partition("_")

    assert sep == "_"
    assert name == "notes.txt"
    assert str(uuid.UUID(token)) == token


def test_storage_ids_are_unique_for_identical_names():
    ids = {make_storage_id("same.txt") for _ in range(500)}

    assert len(ids) == 500


def test_empty_name_still_gets_an_id():
    storage_id = make_storage_id("")

    assert storage_id.endswith("_")
    assert display_name(storage_id) == ""


@pytest.mark.parametrize("name", ["plain.txt", "with_underscore_name.py", "_leading.md", "a__b"])
def test_display_name_round_trip(name):
    safe = sanitize(name)

    assert display_name(make_storage_id(safe)) == safe


def test_display_name_without_separator():
    assert display_name("legacyfile") == "legacyfile"


@pytest.mark.parametrize("storage_id", ["", ".", "..", ".env", "a/b", "..\\x", "x\x00y"])
def test_invalid_storage_ids(storage_id):
    assert not is_valid_storage_id(storage_id)


def test_generated_ids_are_valid():
    assert is_valid_storage_id(make_storage_id(sanitize("../../etc/passwd")))
