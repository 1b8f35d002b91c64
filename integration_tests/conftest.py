"""Pytest configuration for integration tests."""

import pytest

from momentum_log.db import DatabaseInitializer, get_db_path


def pytest_collection_modifyitems(items):
    """Mark everything under integration_tests/ as an integration test."""
    for item in items:
        if "integration_tests" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
async def seeded_db(tmp_path):
    """A seeded database inside its own data directory."""
    db_path = get_db_path(tmp_path / "primary")
    await DatabaseInitializer(db_path).initialize()
    return db_path


@pytest.fixture
async def restore_db(tmp_path):
    """A second, independent database to restore backups into."""
    db_path = get_db_path(tmp_path / "restore")
    await DatabaseInitializer(db_path).initialize()
    return db_path
