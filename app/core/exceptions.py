"""Error taxonomy for the file storage service.

Every error carries a stable ``code`` and the HTTP ``status_code`` the
routers answer with. Routers shape the JSON body per endpoint.
"""


class FileServiceError(Exception):
    """Base exception for all file storage errors."""

    code = "error"
    status_code = 500

    def __init__(self, message: str, saved: list | None = None) -> None:
        self.message = message
        # files from the same upload request fully written before the failure
        self.saved = list(saved or [])
        super().__init__(message)


class UploadValidationError(FileServiceError):
    """Raised when an upload request breaks one of the upload limits.

    ``saved`` holds the records of files from the same request that were
    fully written before the failure. They stay on disk.
    """

    status_code = 400


class TooManyFilesError(UploadValidationError):
    code = "count-exceeded"

    def __init__(self, max_count: int, saved: list | None = None) -> None:
        self.max_count = max_count
        super().__init__(f"Maximum {max_count} files allowed", saved)


class FileTooLargeError(UploadValidationError):
    code = "file-too-large"

    def __init__(self, max_bytes: int, filename: str, saved: list | None = None) -> None:
        self.max_bytes = max_bytes
        self.filename = filename
        super().__init__(
            f"File too large. Maximum size is {max_bytes // 1024 // 1024} MB",
            saved,
        )


class NoFilesError(UploadValidationError):
    code = "no-files"

    def __init__(self) -> None:
        super().__init__("No files were uploaded")


class MalformedUploadError(UploadValidationError):
    code = "malformed-upload"


class NotPreviewableError(FileServiceError):
    code = "not-previewable"
    status_code = 400

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__("File cannot be previewed as text")


class StoredFileNotFoundError(FileServiceError):
    code = "not-found"
    status_code = 404

    def __init__(self, storage_id: str) -> None:
        self.storage_id = storage_id
        super().__init__("File not found")


class StorageIOError(FileServiceError):
    """Raised when the filesystem refuses a create, write or delete."""

    code = "io-failure"


class PreviewReadError(FileServiceError):
    code = "read-error"

    def __init__(self, storage_id: str) -> None:
        self.storage_id = storage_id
        super().__init__("Failed to read file")
