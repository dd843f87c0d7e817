import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse
from starlette.requests import ClientDisconnect

from app.core.exceptions import (
    FileServiceError,
    NotPreviewableError,
    PreviewReadError,
    StorageIOError,
    StoredFileNotFoundError,
    UploadValidationError,
)
from app.models.file import ApiResponse, FileListResponse, FileRecord, PreviewResponse, UploadResponse
from app.models.storage import StorageStats
from app.routers.auth import require_auth
from app.services import namer
from app.services.storage import FileStorageService

router = APIRouter(dependencies=[Depends(require_auth)])

logger = logging.getLogger(__name__)


# --- storage service dependency, built once in create_app ---
def get_storage(request: Request) -> FileStorageService:
    return request.app.state.storage


def _upload_failure(exc: FileServiceError, saved: list[FileRecord]) -> JSONResponse:
    message = exc.message
    if saved:
        # earlier files of the same request are not rolled back
        message = f"{message}. {len(saved)} file(s) uploaded before the error were kept"
    body = UploadResponse(success=False, message=message, files=saved)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json", by_alias=True))


# --- upload one or more files (multipart field "files") ---
@router.post("/upload", response_model=UploadResponse)
async def upload_files(request: Request, storage: FileStorageService = Depends(get_storage)):
    try:
        records = await storage.ingestor.ingest(request.headers.get("content-type"), request.stream())
    except (UploadValidationError, StorageIOError) as exc:
        return _upload_failure(exc, exc.saved)
    except ClientDisconnect:
        logger.info("Client disconnected during upload, partial file discarded")
        return JSONResponse(
            status_code=400,
            content=UploadResponse(success=False, message="Upload aborted by client").model_dump(),
        )

    return UploadResponse(
        success=True,
        message=f"Successfully uploaded {len(records)} file(s)",
        files=records,
    )


# --- list stored files, sorted by display name ---
@router.get("/files", response_model=FileListResponse)
async def list_files(storage: FileStorageService = Depends(get_storage)):
    return FileListResponse(files=await storage.catalog.list())


# --- usage against the soft quota and the host disk ---
@router.get("/storage", response_model=StorageStats)
async def get_storage_info(storage: FileStorageService = Depends(get_storage)):
    return await storage.accountant.compute_stats()


# --- delete a file ---
@router.post("/delete/{storage_id}", response_model=ApiResponse)
async def delete_file(storage_id: str, storage: FileStorageService = Depends(get_storage)):
    try:
        await storage.catalog.delete(storage_id)
    except (StoredFileNotFoundError, StorageIOError) as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiResponse(success=False, message=exc.message).model_dump(),
        )
    return ApiResponse(success=True, message="File deleted successfully")


# --- preview text/code files ---
@router.get("/preview/{storage_id}", response_model=PreviewResponse)
async def preview_file(storage_id: str, storage: FileStorageService = Depends(get_storage)):
    try:
        preview = await storage.previewer.preview(storage_id)
    except (NotPreviewableError, StoredFileNotFoundError, PreviewReadError) as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content=PreviewResponse(error=exc.message).model_dump(mode="json"),
        )
    return PreviewResponse(
        content=preview.content,
        file_type=preview.category,
        filename=preview.display_name,
    )


# --- download a file ---
@router.get("/download/{storage_id}")
async def download_file(storage_id: str, storage: FileStorageService = Depends(get_storage)):
    try:
        path = await storage.catalog.locate(storage_id)
    except StoredFileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        path=path,
        filename=namer.display_name(storage_id) or storage_id,
        content_disposition_type="inline",
    )
