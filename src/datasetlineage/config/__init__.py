"""Settings and catalog document configuration for datasetlineage."""

from .models import (
    KNOWN_PLATFORMS,
    CatalogDocument,
    DatasetInstance,
    DatasetSpec,
    FamilyRow,
    LineageSettings,
    ObjectMapRow,
)
from .versioning import CURRENT_SCHEMA_VERSION, is_supported_version, parse_schema_version
from .yaml_config import load_catalog, load_settings, read_yaml_file

__all__ = [
    "KNOWN_PLATFORMS",
    "CURRENT_SCHEMA_VERSION",
    "CatalogDocument",
    "DatasetInstance",
    "DatasetSpec",
    "FamilyRow",
    "LineageSettings",
    "ObjectMapRow",
    "is_supported_version",
    "parse_schema_version",
    "load_catalog",
    "load_settings",
    "read_yaml_file",
]
