"""Dataset repository interface, typed records and the in-memory implementation."""

from .base import DatasetRepository, call_repository
from .memory import InMemoryDatasetRepository
from .models import CatalogRecord, DatasetEntry, DependencyEdge, DependentRecord

__all__ = [
    "DatasetRepository",
    "call_repository",
    "InMemoryDatasetRepository",
    "CatalogRecord",
    "DatasetEntry",
    "DependencyEdge",
    "DependentRecord",
]
