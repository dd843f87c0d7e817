import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware
from werkzeug.security import generate_password_hash

from app.core.config import Settings, get_settings
from app.models.user import DebugInfo
from app.routers import auth, files
from app.services.storage import FileStorageService

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, storage: FileStorageService | None = None) -> FastAPI:
    settings = settings or get_settings()
    storage = storage or FileStorageService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        storage.ensure_storage_dir()
        logger.info("Upload directory: %s", settings.storage_dir.resolve())
        yield

    app = FastAPI(title="filecrate", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.password_hash = settings.admin_password_hash or generate_password_hash(settings.admin_password)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie,
        same_site="lax",
        https_only=False,
    )

    # include our routers
    app.include_router(auth.router)
    app.include_router(files.router)

    @app.get("/debug", response_model=DebugInfo)
    def debug_info(request: Request):
        return DebugInfo(debug_mode=request.app.state.settings.debug)

    @app.get("/health")
    def health(request: Request):
        return {"status": "ok", "storage_dir": str(request.app.state.settings.storage_dir)}

    return app


def run() -> None:
    parser = argparse.ArgumentParser(description="Self-hosted file manager server")
    parser.add_argument("--debug", action="store_true", help="enable debug mode")
    parser.add_argument("--host", help="bind address")
    parser.add_argument("--port", type=int, help="bind port")
    args = parser.parse_args()

    settings = get_settings()
    if args.debug:
        settings = settings.model_copy(update={"debug": True, "log_level": "DEBUG"})

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Starting file server at http://%s:%d", host, port)
    if settings.debug:
        logger.info("Debug mode enabled")

    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
