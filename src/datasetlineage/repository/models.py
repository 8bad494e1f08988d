"""Typed records exchanged between the lineage core and dataset repositories."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CatalogRecord:
    """Catalog entry a dataset identity resolves to."""

    dataset_id: int
    urn: str
    dataset_type: str = ""
    deployment_tier: Optional[str] = None
    data_center: Optional[str] = None
    server_cluster: Optional[str] = None


@dataclass(frozen=True)
class DependencyEdge:
    """One outgoing edge of the object name map: what a dataset is derived from."""

    mapped_dataset_id: Optional[int]
    mapped_object_name: Optional[str] = None
    mapped_object_type: Optional[str] = None
    mapped_object_sub_type: Optional[str] = None


@dataclass(frozen=True)
class DependentRecord:
    """A dataset whose object name map points at another dataset."""

    dataset_id: int
    urn: str
    dataset_type: str = ""
    object_sub_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DatasetEntry:
    """A dataset row of the catalog."""

    id: int
    urn: str
    dataset_type: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)
    source_modified_time: Optional[int] = None
    properties_text: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Datasets are only served by the latest-of-type queries when ``valid`` is the string ``"true"``."""
        value = self.properties.get("valid")
        return isinstance(value, str) and value.lower() == "true"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["CatalogRecord", "DependencyEdge", "DependentRecord", "DatasetEntry"]
