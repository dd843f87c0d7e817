"""Bounded text previews of stored text and code files."""
import codecs
import logging
from dataclasses import dataclass

import aiofiles

from app.core.config import Settings
from app.core.exceptions import NotPreviewableError, PreviewReadError, StoredFileNotFoundError
from app.models.file import Category
from app.services import namer
from app.services.accountant import format_bytes
from app.services.catalog import Catalog
from app.services.classifier import TEXT_CATEGORIES, classify

logger = logging.getLogger(__name__)


@dataclass
class Preview:
    content: str
    display_name: str
    category: Category
    truncated: bool = False


def truncation_marker(limit: int, display_name: str) -> str:
    # whole KiB limits read "10KB", like the default
    shown = f"{limit // 1024}KB" if limit % 1024 == 0 else format_bytes(limit)
    return f"...\n\n[Content truncated - showing first {shown} of {display_name}]"


def decode_preview(data: bytes, limit: int) -> tuple[str, bool]:
    """Decode at most ``limit`` bytes of ``data`` as UTF-8.

    When ``data`` is longer than ``limit`` the text is cut at ``limit`` bytes.
    A multi-byte character split by the cut is dropped, not reported as an
    error. Raises ``UnicodeDecodeError`` for invalid UTF-8.
    """
    if len(data) <= limit:
        return data.decode("utf-8"), False
    decoder = codecs.getincrementaldecoder("utf-8")()
    return decoder.decode(data[:limit], final=False), True


class PreviewReader:
    def __init__(self, settings: Settings, catalog: Catalog) -> None:
        self.limit = settings.preview_max_bytes
        self.catalog = catalog

    async def preview(self, storage_id: str) -> Preview:
        name = namer.display_name(storage_id)
        category, _ = classify(name)
        if category not in TEXT_CATEGORIES:
            raise NotPreviewableError(name)

        path = await self.catalog.locate(storage_id)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read(self.limit + 1)
            content, truncated = decode_preview(data, self.limit)
        except FileNotFoundError:
            # removed after locate
            raise StoredFileNotFoundError(storage_id)
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read %s for preview", storage_id, exc_info=True)
            raise PreviewReadError(storage_id)

        if truncated:
            content += truncation_marker(self.limit, name)
        return Preview(content=content, display_name=name, category=category, truncated=truncated)
