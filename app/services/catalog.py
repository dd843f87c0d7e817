"""Listing and deletion of stored files. The directory itself is the index."""
import logging
import os
from pathlib import Path

import aiofiles.os
from fastapi.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.exceptions import StorageIOError, StoredFileNotFoundError
from app.models.file import FileRecord
from app.services import namer
from app.services.classifier import classify

logger = logging.getLogger(__name__)


def build_record(storage_id: str, size_bytes: int) -> FileRecord:
    name = namer.display_name(storage_id)
    category, previewable = classify(name)
    return FileRecord(
        display_name=name,
        storage_id=storage_id,
        size_bytes=size_bytes,
        category=category,
        previewable=previewable,
    )


def _scan_records(root: Path) -> list[FileRecord]:
    records = []
    try:
        entries = list(os.scandir(root))
    except FileNotFoundError:
        return records
    for entry in entries:
        try:
            if not entry.is_file(follow_symlinks=False):
                continue
            size = entry.stat(follow_symlinks=False).st_size
        except FileNotFoundError:
            continue
        records.append(build_record(entry.name, size))
    records.sort(key=lambda record: record.display_name)
    return records


class Catalog:
    def __init__(self, settings: Settings) -> None:
        self.root = settings.storage_dir

    async def list(self) -> list[FileRecord]:
        return await run_in_threadpool(_scan_records, self.root)

    def path_for(self, storage_id: str) -> Path:
        """Path of ``storage_id`` inside the root, without checking it exists."""
        if not namer.is_valid_storage_id(storage_id):
            raise StoredFileNotFoundError(storage_id)
        return self.root / storage_id

    async def locate(self, storage_id: str) -> Path:
        path = self.path_for(storage_id)
        if not await aiofiles.os.path.isfile(path):
            raise StoredFileNotFoundError(storage_id)
        return path

    async def delete(self, storage_id: str) -> None:
        path = self.path_for(storage_id)
        try:
            await aiofiles.os.remove(path)
        except (FileNotFoundError, IsADirectoryError):
            raise StoredFileNotFoundError(storage_id)
        except OSError as exc:
            logger.exception("Failed to delete %s", path)
            raise StorageIOError(f"Failed to delete file: {exc.strerror}") from exc
        logger.info("Deleted %s", storage_id)
