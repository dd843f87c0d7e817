"""File storage service: the components behind the HTTP routes, built from one Settings."""
from app.core.config import Settings
from app.services.accountant import DiskProbe, StorageAccountant, probe_disk
from app.services.catalog import Catalog
from app.services.ingestion import UploadIngestor
from app.services.preview import PreviewReader


class FileStorageService:
    """Holds configuration only. All state lives in the storage directory."""

    def __init__(self, settings: Settings, disk_probe: DiskProbe = probe_disk) -> None:
        self.settings = settings
        self.catalog = Catalog(settings)
        self.ingestor = UploadIngestor(settings)
        self.accountant = StorageAccountant(settings, disk_probe=disk_probe)
        self.previewer = PreviewReader(settings, self.catalog)

    def ensure_storage_dir(self) -> None:
        self.settings.storage_dir.mkdir(parents=True, exist_ok=True)
