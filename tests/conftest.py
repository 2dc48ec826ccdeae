"""Shared pytest fixtures for the json_any_key test suite."""

import pytest
from loguru import logger

import json_any_key.logging as logging_module


@pytest.fixture
def log_records():
    """Capture json_any_key DEBUG records emitted during a test."""
    records: list[str] = []
    handler_id = logger.add(
        lambda message: records.append(message.record["message"]),
        level="DEBUG",
        filter=logging_module.NAMESPACE,
    )
    yield records
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def _silence_package_logging():
    """Keep the package muted between tests, as it is after import."""
    yield
    logging_module.disable_logging()
