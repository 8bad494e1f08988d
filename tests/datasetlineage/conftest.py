"""Shared catalog fixtures for datasetlineage tests."""

import copy
from typing import Any, Dict

import pytest
import yaml

from datasetlineage.config import LineageSettings, load_catalog
from datasetlineage.repository import InMemoryDatasetRepository
from tests.utils import CATALOG, CYCLIC_CATALOG


@pytest.fixture
def catalog_dict() -> Dict[str, Any]:
    return copy.deepcopy(CATALOG)


@pytest.fixture
def catalog(catalog_dict):
    return load_catalog(catalog_dict)


@pytest.fixture
def repository(catalog) -> InMemoryDatasetRepository:
    return InMemoryDatasetRepository(catalog)


@pytest.fixture
def cyclic_repository() -> InMemoryDatasetRepository:
    return InMemoryDatasetRepository.from_catalog(copy.deepcopy(CYCLIC_CATALOG))


@pytest.fixture
def settings() -> LineageSettings:
    return LineageSettings()


@pytest.fixture
def catalog_file(tmp_path, catalog_dict):
    path = tmp_path / "catalog.yaml"
    path.write_text(yaml.safe_dump(catalog_dict, sort_keys=False))
    return path
