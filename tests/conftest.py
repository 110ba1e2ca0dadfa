"""
Pytest configuration and fixtures.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from buildtrack.config.settings import Settings
from buildtrack.core.app import create_app
from buildtrack.core.exceptions import StorageError

VALID_ANSWER = (
    '{"analysis": "Wall B dimension does not add up to the overall length.",'
    ' "keywords": ["foundation", "slab", "beam", "column", "rebar"],'
    ' "related_questions": ["What is the slab thickness?", "Which rebar grade?",'
    ' "Is the beam span safe?", "What soil type is assumed?", "How deep is the footing?"]}'
)

# 1x1 transparent PNG
PNG_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeDocumentStorage:
    """In-memory stand-in for the blob storage backend."""

    def __init__(self):
        self.blobs = {}
        self.deleted = []
        self.fail_uploads = False
        self.fail_deletes = False

    async def ensure_container_exists(self) -> bool:
        return True

    async def upload(self, blob_name, content, content_type=None):
        if self.fail_uploads:
            raise StorageError("Upload failed: storage offline")
        self.blobs[blob_name] = (content, content_type)
        return f"https://blobs.test/container/{blob_name}"

    async def delete(self, blob_name):
        if self.fail_deletes:
            raise StorageError("Delete failed: storage offline")
        self.deleted.append(blob_name)
        return self.blobs.pop(blob_name, None) is not None


class FakeVisionModel:
    """Vision model returning a canned answer and recording its calls."""

    def __init__(self, answer=VALID_ANSWER):
        self.answer = answer
        self.calls = []

    async def generate(self, prompt, image_base64, mime_type="image/jpeg"):
        self.calls.append({"prompt": prompt, "image_base64": image_base64, "mime_type": mime_type})
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer


@pytest.fixture
def settings():
    """Test settings, isolated from any local .env file."""
    return Settings(
        _env_file=None,
        gemini_api_key="test-key",
        azure_storage_connection_string="",
        blueprint_provider="gemini",
        cors_origins=["*"],
    )


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 6, 15, 9, 30))


@pytest.fixture
def storage():
    return FakeDocumentStorage()


@pytest.fixture
def vision_model():
    return FakeVisionModel()


@pytest.fixture
def app(settings, storage, vision_model, clock):
    return create_app(settings, storage=storage, vision_model=vision_model, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def png_base64():
    return PNG_BASE64
