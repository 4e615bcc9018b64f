"""
Shared pytest fixtures.

The settings singleton is read at import time, so the temporary database,
image and log locations are exported before any ``app`` module is imported.
"""

import os
import shutil
import tempfile
from io import BytesIO
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="catalog-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{(_TMP_DIR / 'catalog.sqlite3').as_posix()}"
os.environ["IMAGE_DIR"] = str(_TMP_DIR / "images")
os.environ["LOG_DIR"] = str(_TMP_DIR / "logs")
os.environ["HEALTH_RATE_LIMIT"] = "1000/minute"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from PIL import Image

import app.models  # noqa: F401
from app.core.database import Base, SessionLocal, engine
from app.utils.image_store import ImageStore, get_image_store


def pytest_sessionfinish(session, exitstatus):
    engine.dispose()
    shutil.rmtree(_TMP_DIR, ignore_errors=True)


def create_test_image(color: str = "red") -> bytes:
    """Create a small JPEG image in memory"""
    img = Image.new("RGB", (32, 32), color=color)
    img_bytes = BytesIO()
    img.save(img_bytes, format="JPEG")
    return img_bytes.getvalue()


@pytest.fixture(autouse=True)
def clean_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(tmp_path):
    return ImageStore(
        image_dir=tmp_path / "images",
        extension=".jpg",
        default_name="default.jpg",
        max_size=1024 * 1024,
    )


@pytest.fixture
def client(store):
    from main import app

    app.dependency_overrides[get_image_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def jpeg_bytes():
    return create_test_image()
