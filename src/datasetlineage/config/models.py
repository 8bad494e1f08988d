"""
Pydantic models for datasetlineage settings and catalog documents.

``LineageSettings`` replaces process-wide constants (default cluster name,
recognized URI schemes, traversal limits) with an injectable, environment
aware settings object. ``CatalogDocument`` describes a catalog snapshot that
:class:`~datasetlineage.repository.InMemoryDatasetRepository` serves from:
dataset records, their deployed instances, the object name map holding
dependency edges, and the parent/child family table.
"""

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .versioning import CURRENT_SCHEMA_VERSION, is_supported_version, parse_schema_version

# Schemes the URI normalizer knows how to build an identity for
KNOWN_PLATFORMS = ("hive", "dalids")

DEFAULT_CLUSTER = "ltx1-holdem"
DEFAULT_MAX_DEPTH = 64
DEFAULT_MAX_NODES = 10000


def _check_schema_version(v: str) -> str:
    try:
        parse_schema_version(v)
    except (TypeError, ValueError) as exc:
        raise ValueError(str(exc)) from exc
    if not is_supported_version(v):
        raise ValueError(
            f"Unsupported schema version '{v}'; this release reads {CURRENT_SCHEMA_VERSION}"
        )
    return v


class LineageSettings(BaseSettings):
    """
    Runtime settings for lineage resolution.

    Every field can be overridden through a ``DATASETLINEAGE_`` prefixed
    environment variable, e.g. ``DATASETLINEAGE_DEFAULT_CLUSTER=ltx1-test``.

    Attributes:
        default_cluster: Cluster used when a URI does not name one
        platforms: Recognized URI schemes in match priority order
        max_depth: Deepest dependency level the tree builder will expand
        max_nodes: Largest number of dependency records a single tree may hold
        ancestor_mode: ``corrected`` compares parents of both urns, ``legacy``
            reproduces the historical behaviour that compares the first urn's
            parents with themselves
    """

    model_config = SettingsConfigDict(
        env_prefix="DATASETLINEAGE_",
        case_sensitive=False,
        extra="ignore",
        str_strip_whitespace=True,
    )

    schema_version: str = Field(default=CURRENT_SCHEMA_VERSION)
    default_cluster: str = Field(default=DEFAULT_CLUSTER, min_length=1)
    platforms: List[str] = Field(default_factory=lambda: list(KNOWN_PLATFORMS))
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1)
    max_nodes: int = Field(default=DEFAULT_MAX_NODES, ge=1)
    ancestor_mode: Literal["corrected", "legacy"] = "corrected"

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        return _check_schema_version(v)

    @field_validator("platforms")
    @classmethod
    def validate_platforms(cls, v: List[str]) -> List[str]:
        """Lower-case, de-duplicate and restrict to schemes the normalizer supports."""
        normalized: List[str] = []
        for platform in v:
            name = str(platform).strip().lower()
            if name not in KNOWN_PLATFORMS:
                raise ValueError(
                    f"Unknown platform '{platform}'. Supported platforms: {', '.join(KNOWN_PLATFORMS)}"
                )
            if name not in normalized:
                normalized.append(name)
        return normalized


class DatasetInstance(BaseModel):
    """A deployment of a dataset on one server cluster."""

    model_config = ConfigDict(extra="allow")

    deployment_tier: Optional[str] = None
    data_center: Optional[str] = None
    server_cluster: Optional[str] = None


class DatasetSpec(BaseModel):
    """One dataset record of the catalog."""

    model_config = ConfigDict(extra="allow")

    id: int
    urn: str = Field(min_length=1)
    dataset_type: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict)
    # stored text of the properties blob when it was supplied as JSON text
    properties_text: Optional[str] = None
    source_modified_time: Optional[int] = None
    instances: List[DatasetInstance] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def keep_properties_text(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("properties_text") is None:
            raw = data.get("properties")
            if isinstance(raw, str) and raw.strip():
                data = {**data, "properties_text": raw}
        return data

    @field_validator("properties", mode="before")
    @classmethod
    def parse_properties(cls, v: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
        """Accept properties either as a mapping or as a JSON text blob."""
        if v is None:
            return {}
        if isinstance(v, str):
            if not v.strip():
                return {}
            parsed = json.loads(v)
            if not isinstance(parsed, dict):
                raise ValueError("properties JSON must describe an object")
            return parsed
        return v


class ObjectMapRow(BaseModel):
    """
    A row of the object name map.

    ``object_*`` columns describe the dataset that owns the edge,
    ``mapped_object_*`` columns describe the object it depends on.
    """

    model_config = ConfigDict(extra="allow")

    object_dataset_id: Optional[int] = None
    object_name: str
    object_type: str = ""
    object_sub_type: Optional[str] = None
    map_phrase: Optional[str] = None
    is_identical_map: Optional[str] = None
    mapped_object_dataset_id: Optional[int] = None
    mapped_object_name: Optional[str] = None
    mapped_object_type: Optional[str] = None
    mapped_object_sub_type: Optional[str] = None


class FamilyRow(BaseModel):
    """Direct parent/child relation between two dataset urns."""

    parent_urn: str = Field(min_length=1)
    child_urn: str = Field(min_length=1)


class CatalogDocument(BaseModel):
    """A complete catalog snapshot."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default=CURRENT_SCHEMA_VERSION)
    datasets: List[DatasetSpec] = Field(default_factory=list)
    object_map: List[ObjectMapRow] = Field(default_factory=list)
    family: List[FamilyRow] = Field(default_factory=list)

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        return _check_schema_version(v)

    @model_validator(mode="after")
    def check_unique_datasets(self) -> "CatalogDocument":
        seen_ids = set()
        seen_urns = set()
        for dataset in self.datasets:
            if dataset.id in seen_ids:
                raise ValueError(f"Duplicate dataset id {dataset.id}")
            if dataset.urn in seen_urns:
                raise ValueError(f"Duplicate dataset urn '{dataset.urn}'")
            seen_ids.add(dataset.id)
            seen_urns.add(dataset.urn)
        return self


__all__ = [
    "KNOWN_PLATFORMS",
    "DEFAULT_CLUSTER",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_NODES",
    "LineageSettings",
    "DatasetInstance",
    "DatasetSpec",
    "ObjectMapRow",
    "FamilyRow",
    "CatalogDocument",
]
