"""
Dataset URI normalization.

Three URI grammars are accepted, checked in this order (first match wins):

1. ``<platform>:///<db>.<table>`` or ``<platform>:///<db>/<table>`` - the
   cluster comes from the caller's default.
2. ``<platform>://<cluster>.<db>.<table>`` or ``<platform>://<cluster>/<db>/<table>``.
3. ``[<cluster>:]<db>.<table>`` (also ``<cluster>:<db>/<table>``) - generic form,
   only considered when the string contains a dot.

Platform prefixes are searched anywhere in the string, every three-slash
form is tried before any two-slash form, and platforms are tried in the
configured priority order. Once a prefix is found its grammar decides the
outcome: a wrong segment count is a failure, not a fall-through to the next
grammar. A trailing separator is ignored.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from datasetlineage import logger
from .config.models import KNOWN_PLATFORMS
from .exceptions import UriError

_SEGMENT_SEPARATOR = re.compile(r"[./]")


class Platform(str, Enum):
    """Data-system family encoded in a dataset URI scheme."""

    HIVE = "hive"
    DALIDS = "dalids"
    GENERIC = "generic"

    @property
    def is_recognized(self) -> bool:
        return self is not Platform.GENERIC

    @classmethod
    def from_dataset_type(cls, dataset_type: Optional[str]) -> Optional["Platform"]:
        """Map a catalog ``dataset_type`` onto a recognized platform, if any."""
        if not dataset_type:
            return None
        name = dataset_type.strip().lower()
        for platform in (cls.HIVE, cls.DALIDS):
            if platform.value == name:
                return platform
        return None


@dataclass(frozen=True)
class DatasetIdentity:
    """Canonical identity of a dataset."""

    platform: Platform
    cluster: str
    database: str
    table: str

    @property
    def object_path(self) -> str:
        """Object name as stored in the catalog, ``/<database>/<table>``."""
        return f"/{self.database}/{self.table}"

    @property
    def is_recognized(self) -> bool:
        return self.platform.is_recognized

    def with_platform(self, platform: Platform) -> "DatasetIdentity":
        return replace(self, platform=platform)


def _split_segments(value: str) -> List[str]:
    segments = _SEGMENT_SEPARATOR.split(value)
    # trailing separators do not produce a segment
    while len(segments) > 1 and segments[-1] == "":
        segments.pop()
    return segments


def _match_platform_prefix(
    uri: str,
    platforms: Sequence[str],
    slashes: str,
) -> Optional[Tuple[Platform, str]]:
    for name in platforms:
        prefix = f"{name}:{slashes}"
        index = uri.find(prefix)
        if index != -1:
            return Platform(name), uri[index + len(prefix):]
    return None


def _require_segments(raw_uri: str, remainder: str, expected: int, grammar: str) -> List[str]:
    segments = _split_segments(remainder)
    if len(segments) != expected:
        raise UriError(
            f"Expected {expected} segments in {grammar} dataset uri, found {len(segments)}",
            error_code="URI_002",
            context={"raw_uri": raw_uri, "grammar": grammar},
        )
    return segments


def normalize(
    raw_uri: Optional[str],
    default_cluster: str,
    platforms: Sequence[str] = KNOWN_PLATFORMS,
) -> DatasetIdentity:
    """
    Parse a raw dataset URI into a :class:`DatasetIdentity`.

    Args:
        raw_uri: URI as supplied by the caller
        default_cluster: Cluster used when the URI does not carry one
        platforms: Recognized schemes in priority order

    Returns:
        Identity with non-blank cluster, database and table

    Raises:
        UriError: URI_001 blank input, URI_002 no grammar matches or the
            segment count is wrong, URI_003 a component is blank

    Example:
        >>> normalize("hive:///db1/tbl1", "clusterX")
        DatasetIdentity(platform=<Platform.HIVE: 'hive'>, cluster='clusterX', database='db1', table='tbl1')
    """
    if raw_uri is None or not str(raw_uri).strip():
        raise UriError("Dataset uri is missing", error_code="URI_001", context={"raw_uri": raw_uri})

    uri = str(raw_uri)
    cluster = default_cluster

    match = _match_platform_prefix(uri, platforms, "///")
    if match is not None:
        platform, remainder = match
        database, table = _require_segments(uri, remainder, 2, f"{platform.value}:///")
    else:
        match = _match_platform_prefix(uri, platforms, "//")
        if match is not None:
            platform, remainder = match
            cluster, database, table = _require_segments(uri, remainder, 3, f"{platform.value}://")
        elif "." in uri:
            platform = Platform.GENERIC
            remainder = uri
            colon = uri.find(":")
            if colon != -1:
                cluster = uri[:colon]
                remainder = uri[colon + 1:]
            database, table = _require_segments(uri, remainder, 2, "generic")
        else:
            raise UriError(
                "Dataset uri does not match any supported format",
                error_code="URI_002",
                context={"raw_uri": uri},
            )

    blank = [
        name for name, value in (("cluster", cluster), ("database", database), ("table", table))
        if not value or not value.strip()
    ]
    if blank:
        raise UriError(
            f"Dataset uri has blank {', '.join(blank)}",
            error_code="URI_003",
            context={"raw_uri": uri, "blank_fields": blank},
        )

    identity = DatasetIdentity(platform=platform, cluster=cluster, database=database, table=table)
    logger.debug(f"Normalized '{uri}' to {identity}")
    return identity


def reconstruct_uri(identity: DatasetIdentity) -> str:
    """
    Render the canonical display form of an identity.

    ``<platform>://<cluster>/<db>/<table>`` for recognized platforms,
    ``<cluster>/<db>/<table>`` otherwise.
    """
    path = f"{identity.cluster}/{identity.database}/{identity.table}"
    if identity.is_recognized:
        return f"{identity.platform.value}://{path}"
    return path


def canonical_form(
    raw_uri: str,
    default_cluster: str,
    platforms: Sequence[str] = KNOWN_PLATFORMS,
) -> str:
    """Shorthand for ``reconstruct_uri(normalize(raw_uri, default_cluster))``."""
    return reconstruct_uri(normalize(raw_uri, default_cluster, platforms))


__all__ = [
    "Platform",
    "DatasetIdentity",
    "normalize",
    "reconstruct_uri",
    "canonical_form",
]
