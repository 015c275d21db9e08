"""Shared test fixtures for the scs-template test suite."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator

import pytest

from scs_template.binding.schema_names import SchemaNameCache
from scs_template.document.parser import load_document
from scs_template.shared.constants import PACKAGE_LOGGER
from scs_template.shared.models.asyncapi import AsyncAPIDocument
from scs_template.shared.models.params import GenerationParams

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def order_document() -> AsyncAPIDocument:
    """Order service: a merged function, an enum/int64 topic and a String consumer."""
    return load_document(FIXTURES_DIR / "order_service.yaml")


@pytest.fixture
def solace_document() -> AsyncAPIDocument:
    """Solace app: two channels sharing one queue plus a polymorphic dynamic consumer."""
    return load_document(FIXTURES_DIR / "solace_queues.yaml")


@pytest.fixture
def client_params() -> GenerationParams:
    return GenerationParams()


@pytest.fixture
def solace_params() -> GenerationParams:
    return GenerationParams(binder="solace")


@pytest.fixture
def schema_cache() -> Generator[SchemaNameCache, None, None]:
    cache = SchemaNameCache()
    yield cache
    cache.reset()


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Generator[None, None, None]:
    """Undo the handler and level a generation run installs on the package logger."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
