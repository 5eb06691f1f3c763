"""
Test configuration and fixtures for linkhop.
Every test gets its own SQLite file and freshly built apps around it.
"""

import os

import pytest
from fastapi.testclient import TestClient

from linkhop_app.app_factory import create_admin_app, create_public_app
from linkhop_app.config import Settings
from linkhop_app.services.store import ShortcodeStore

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Settings pointing at a per-test database and the real admin template."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'urls.db'}",
        templates_dir=TEMPLATES_DIR,
        tls_dir=str(tmp_path / "certs"),
    )


@pytest.fixture(scope="function")
def store(settings):
    store = ShortcodeStore.open(settings.database_url)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture(scope="function")
def public_client(store, settings):
    with TestClient(create_public_app(store, settings)) as client:
        yield client


@pytest.fixture(scope="function")
def admin_client(store, settings):
    with TestClient(create_admin_app(store, settings)) as client:
        yield client
