"""Aggregate usage of the storage directory and the host volume."""
import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from app.core.config import Settings
from app.models.storage import StorageStats

logger = logging.getLogger(__name__)

_UNITS = ("B", "KB", "MB", "GB")

# (free_bytes, total_bytes) of the volume holding a path
DiskProbe = Callable[[Path], tuple[int, int]]


def format_bytes(num_bytes: int) -> str:
    """Human readable size, e.g. ``512 B`` or ``1.5 KB``. GB is the largest unit."""
    size = float(num_bytes)
    unit = 0
    while size >= 1024 and unit < len(_UNITS) - 1:
        size /= 1024
        unit += 1
    if unit == 0:
        return f"{num_bytes} {_UNITS[0]}"
    return f"{size:.1f} {_UNITS[unit]}"


def probe_disk(path: Path) -> tuple[int, int]:
    # the storage dir may not exist yet, ask the volume it would live on
    target = path
    while not target.exists() and target.parent != target:
        target = target.parent
    usage = shutil.disk_usage(target)
    return usage.free, usage.total


def scan_usage(root: Path) -> tuple[int, int]:
    """Return ``(used_bytes, file_count)`` over regular files directly in ``root``."""
    used = 0
    count = 0
    try:
        entries = list(os.scandir(root))
    except FileNotFoundError:
        return 0, 0
    for entry in entries:
        try:
            if not entry.is_file(follow_symlinks=False):
                continue
            used += entry.stat(follow_symlinks=False).st_size
        except FileNotFoundError:
            # deleted while we were scanning
            continue
        count += 1
    return used, count


class StorageAccountant:
    def __init__(self, settings: Settings, disk_probe: DiskProbe = probe_disk) -> None:
        self.settings = settings
        self.disk_probe = disk_probe

    def _probe(self) -> tuple[int, int, bool]:
        try:
            free, total = self.disk_probe(self.settings.storage_dir)
        except OSError:
            logger.warning(
                "Disk probe failed for %s, reporting fallback capacity",
                self.settings.storage_dir,
                exc_info=True,
            )
            return (
                self.settings.disk_fallback_free_bytes,
                self.settings.disk_fallback_total_bytes,
                False,
            )
        return free, total, True

    async def compute_stats(self) -> StorageStats:
        used, count = await run_in_threadpool(scan_usage, self.settings.storage_dir)
        free, total, probe_ok = await run_in_threadpool(self._probe)

        quota = self.settings.max_storage_size
        disk_used = max(total - free, 0)
        disk_used_percentage = disk_used / total * 100 if total > 0 else 0.0

        return StorageStats(
            used_bytes=used,
            total_files=count,
            used_percentage=used / quota * 100,
            formatted_used=format_bytes(used),
            max_size_mb=quota // 1024 // 1024,
            disk_free_bytes=free,
            disk_total_bytes=total,
            disk_used_percentage=disk_used_percentage,
            formatted_disk_free=format_bytes(free),
            formatted_disk_total=format_bytes(total),
            disk_probe_ok=probe_ok,
        )
