"""Streaming multipart ingestion.

The request body is pushed through ``python_multipart``'s incremental parser
chunk by chunk. The parser callbacks only collect events. Each batch of
events is then replayed here with async file I/O, so parts are handled in
arrival order and nothing is buffered beyond a single chunk.
"""
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import anyio
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from app.core.config import Settings
from app.core.exceptions import (
    FileTooLargeError,
    MalformedUploadError,
    NoFilesError,
    StorageIOError,
    TooManyFilesError,
)
from app.models.file import FileRecord
from app.services import namer
from app.services.catalog import build_record

logger = logging.getLogger(__name__)

PART_BEGIN = "part_begin"
HEADER_FIELD = "header_field"
HEADER_VALUE = "header_value"
HEADER_END = "header_end"
HEADERS_FINISHED = "headers_finished"
PART_DATA = "part_data"
PART_END = "part_end"
END = "end"


def multipart_boundary(content_type: str | None) -> bytes:
    ctype, params = parse_options_header(content_type or "")
    if ctype.lower() != b"multipart/form-data":
        raise MalformedUploadError("Expected a multipart/form-data body")
    boundary = params.get(b"boundary")
    if not boundary:
        raise MalformedUploadError("Missing multipart boundary")
    return boundary


def _decode_header(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def _collecting_callbacks(events: list[tuple[str, Any]]) -> dict:
    def data_event(kind):
        def callback(data: bytes, start: int, end: int) -> None:
            # the parser reuses its buffer, keep a copy
            events.append((kind, bytes(data[start:end])))
        return callback

    def notify_event(kind):
        def callback() -> None:
            events.append((kind, None))
        return callback

    return {
        "on_part_begin": notify_event(PART_BEGIN),
        "on_header_field": data_event(HEADER_FIELD),
        "on_header_value": data_event(HEADER_VALUE),
        "on_header_end": notify_event(HEADER_END),
        "on_headers_finished": notify_event(HEADERS_FINISHED),
        "on_part_data": data_event(PART_DATA),
        "on_part_end": notify_event(PART_END),
        "on_end": notify_event(END),
    }


@dataclass
class _OpenPart:
    storage_id: str
    display_name: str
    path: Path
    handle: Any
    size: int = 0


class _UploadSession:
    """State of one upload request while its parts are replayed."""

    def __init__(self, settings: Settings) -> None:
        self.root = settings.storage_dir
        self.max_file_size = settings.max_file_size
        self.max_file_count = settings.max_file_count
        self.records: list[FileRecord] = []
        self.finished = False
        self._file_count = 0
        self._part: _OpenPart | None = None
        self._headers: dict[bytes, bytes] = {}
        self._field = b""
        self._value = b""

    async def handle(self, events: list[tuple[str, Any]]) -> None:
        for kind, data in events:
            if kind == PART_BEGIN:
                self._headers = {}
                self._part = None
            elif kind == HEADER_FIELD:
                self._field += data
            elif kind == HEADER_VALUE:
                self._value += data
            elif kind == HEADER_END:
                self._headers[self._field.lower()] = self._value
                self._field = b""
                self._value = b""
            elif kind == HEADERS_FINISHED:
                await self._begin_part()
            elif kind == PART_DATA:
                if self._part is not None:
                    await self._write(data)
            elif kind == PART_END:
                if self._part is not None:
                    await self._complete()
            elif kind == END:
                self.finished = True

    async def _begin_part(self) -> None:
        disposition = self._headers.get(b"content-disposition")
        if disposition is None:
            return
        _, options = parse_options_header(disposition)
        raw_filename = options.get(b"filename")
        if not raw_filename:
            # plain form field, or a file input left empty
            return

        if self._file_count >= self.max_file_count:
            logger.warning("Rejecting upload: more than %d files", self.max_file_count)
            raise TooManyFilesError(self.max_file_count, self.records)

        safe_name = namer.sanitize(_decode_header(raw_filename))
        storage_id = namer.make_storage_id(safe_name)
        path = self.root / storage_id
        try:
            handle = await aiofiles.open(path, "xb")
        except OSError as exc:
            logger.exception("Failed to create %s", path)
            raise StorageIOError(f"Failed to create file: {exc.strerror}", self.records) from exc

        self._file_count += 1
        self._part = _OpenPart(storage_id=storage_id, display_name=safe_name, path=path, handle=handle)

    async def _write(self, data: bytes) -> None:
        part = self._part
        part.size += len(data)
        if part.size > self.max_file_size:
            logger.warning(
                "Rejecting upload of %s: larger than %d bytes",
                part.display_name,
                self.max_file_size,
            )
            raise FileTooLargeError(self.max_file_size, part.display_name, self.records)
        try:
            await part.handle.write(data)
        except OSError as exc:
            logger.exception("Failed to write %s", part.path)
            raise StorageIOError(f"Failed to write file: {exc.strerror}", self.records) from exc

    async def _complete(self) -> None:
        part = self._part
        try:
            await part.handle.close()
        except OSError as exc:
            logger.exception("Failed to write %s", part.path)
            raise StorageIOError(f"Failed to write file: {exc.strerror}", self.records) from exc
        self._part = None
        self.records.append(build_record(part.storage_id, part.size))
        logger.info("Stored upload %s (%d bytes)", part.storage_id, part.size)

    async def discard_open_part(self) -> None:
        """Remove the file of a part that did not complete."""
        part = self._part
        if part is None:
            return
        self._part = None
        # runs during cancellation too, the removal must not be cancelled with it
        with anyio.CancelScope(shield=True):
            try:
                await part.handle.close()
                await aiofiles.os.remove(part.path)
            except FileNotFoundError:
                pass
            except OSError:
                logger.exception("Failed to remove partial upload %s", part.path)
            else:
                logger.info("Removed partial upload %s", part.storage_id)


class UploadIngestor:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def ingest(self, content_type: str | None, chunks: AsyncIterator[bytes]) -> list[FileRecord]:
        """Write every file part of a multipart body into the storage root.

        Raises an ``UploadValidationError`` subclass when a limit is broken,
        and ``StorageIOError`` when the filesystem fails. Files completed
        before the failure stay on disk. The file being written when the
        failure happened is removed.
        """
        boundary = multipart_boundary(content_type)
        try:
            await aiofiles.os.makedirs(self.settings.storage_dir, exist_ok=True)
        except OSError as exc:
            logger.exception("Failed to create upload directory %s", self.settings.storage_dir)
            raise StorageIOError(f"Failed to create upload directory: {exc.strerror}") from exc

        session = _UploadSession(self.settings)
        events: list[tuple[str, Any]] = []
        parser = MultipartParser(boundary, callbacks=_collecting_callbacks(events))
        try:
            async for chunk in chunks:
                parser.write(chunk)
                await session.handle(events)
                events.clear()
            parser.finalize()
            await session.handle(events)
        except MultipartParseError as exc:
            raise MalformedUploadError("Malformed multipart body", session.records) from exc
        finally:
            await session.discard_open_part()

        if not session.finished:
            raise MalformedUploadError("Upload body ended unexpectedly", session.records)
        if not session.records:
            raise NoFilesError()
        return session.records
