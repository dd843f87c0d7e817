"""Shared fixtures for the file storage tests."""

import uuid

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.services.storage import FileStorageService

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def storage_dir(tmp_path):
    """Storage root inside the test's temporary directory (not created yet)."""
    return tmp_path / "uploads"


@pytest.fixture
def settings(storage_dir):
    """Settings with small limits, isolated from any .env file.

    Returns:
        Settings instance for testing.
    """
    return Settings(
        _env_file=None,
        storage_dir=storage_dir,
        max_file_size=32 * 1024,
        max_file_count=10,
        max_storage_size=1024 * 1024,
        preview_max_bytes=10240,
        admin_username="admin",
        admin_password=TEST_PASSWORD,
        secret_key="test-secret-key",
    )


@pytest.fixture
def disk_probe():
    """Fixed disk capacity: 400 bytes free of 1000."""
    return lambda path: (400, 1000)


@pytest.fixture
def storage(settings, disk_probe):
    return FileStorageService(settings, disk_probe=disk_probe)


@pytest.fixture
def app(settings, storage):
    return create_app(settings, storage=storage)


@pytest.fixture
def client(app):
    """Anonymous test client with the app lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client):
    """Test client holding a logged in session."""
    response = client.post("/login", json={"username": "admin", "password": TEST_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def stored_file(storage_dir):
    """Write a file straight into the storage root, bypassing the upload path.

    Returns:
        Function ``(name, content) -> storage_id``.
    """

    def write(name: str, content: bytes) -> str:
        storage_dir.mkdir(parents=True, exist_ok=True)
        storage_id = f"{uuid.uuid4()}_{name}"
        (storage_dir / storage_id).write_bytes(content)
        return storage_id

    return write


@pytest.fixture
def multipart_body():
    """Build a raw multipart/form-data body.

    Parts are ``(field_name, filename_or_None, data)`` tuples.

    Returns:
        Function ``(parts) -> (content_type, body)``.
    """
    boundary = "----filecrateTestBoundary"

    def build(parts):
        chunks = []
        for field, filename, data in parts:
            disposition = f'form-data; name="{field}"'
            if filename is not None:
                disposition += f'; filename="{filename}"'
            chunks.append(
                f"--{boundary}\r\nContent-Disposition: {disposition}\r\n"
                f"Content-Type: application/octet-stream\r\n\r\n".encode()
            )
            chunks.append(data)
            chunks.append(b"\r\n")
        chunks.append(f"--{boundary}--\r\n".encode())
        return f"multipart/form-data; boundary={boundary}", b"".join(chunks)

    return build


@pytest.fixture
def chunked():
    """Turn bytes into an async chunk stream like ``Request.stream()``.

    Returns:
        Function ``(body, size=...) -> async iterator``.
    """

    def stream(body: bytes, size: int = 1000):
        async def gen():
            for start in range(0, len(body), size):
                yield body[start:start + size]
            yield b""

        return gen()

    return stream
