"""Schema versions accepted in settings files and catalog snapshots."""

from typing import Final

from semantic_version import SimpleSpec, Version

CURRENT_SCHEMA_VERSION: Final[str] = "1.0.0"

# snapshots from earlier releases of the current major stay readable
SUPPORTED_SCHEMA_VERSIONS: Final[SimpleSpec] = SimpleSpec(f">=1.0.0,<={CURRENT_SCHEMA_VERSION}")


def parse_schema_version(version: str) -> Version:
    if not isinstance(version, str):
        raise TypeError(f"schema_version must be a string such as '1.0.0', not {type(version).__name__}")
    try:
        return Version(version)
    except ValueError as exc:
        raise ValueError(f"Invalid schema version '{version}': {exc}") from exc


def is_supported_version(version: str) -> bool:
    """``True`` when *version* falls inside :data:`SUPPORTED_SCHEMA_VERSIONS`."""
    return SUPPORTED_SCHEMA_VERSIONS.match(parse_schema_version(version))
