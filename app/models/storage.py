# app/models/storage.py
from pydantic import BaseModel


class StorageStats(BaseModel):
    # application usage, from a scan of the storage directory
    used_bytes: int
    total_files: int
    used_percentage: float            # against the soft quota
    formatted_used: str
    max_size_mb: int

    # host volume, from the disk probe
    disk_free_bytes: int
    disk_total_bytes: int
    disk_used_percentage: float       # not clamped, the client clamps for display
    formatted_disk_free: str
    formatted_disk_total: str
    disk_probe_ok: bool = True        # False means the disk figures are fallbacks
