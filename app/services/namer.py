"""Safe on-disk names for uploaded files.

A storage id is ``<uuid4>_<sanitized name>``. The uuid never contains an
underscore, so splitting at the first ``_`` recovers the sanitized name.
"""
import uuid

_ALLOWED_PUNCTUATION = {".", "-", "_"}


def sanitize(raw_name: str) -> str:
    """Drop everything but alphanumerics, ``.``, ``-`` and ``_``, then strip leading dots."""
    kept = "".join(ch for ch in raw_name if ch.isalnum() or ch in _ALLOWED_PUNCTUATION)
    return kept.lstrip(".")


def make_storage_id(safe_name: str) -> str:
    return f"{uuid.uuid4()}_{safe_name}"


def display_name(storage_id: str) -> str:
    _, sep, name = storage_id.partition("_")
    if not sep:
        return storage_id
    return name


def is_valid_storage_id(storage_id: str) -> bool:
    """True if the id names a plain entry directly inside the storage root."""
    if not storage_id or storage_id.startswith("."):
        return False
    return not any(ch in storage_id for ch in ("/", "\\", "\x00"))
