"""
YAML loading for settings and catalog documents.

Both loaders accept a path to a YAML file or an already parsed dictionary
and return validated Pydantic models. Every failure surfaces as a
:class:`~datasetlineage.exceptions.ConfigError` whose error code tells
missing files, YAML syntax errors, validation failures and unsupported
schema versions apart.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

from datasetlineage import logger
from ..exceptions import ConfigError
from .models import CatalogDocument, LineageSettings

ModelT = TypeVar("ModelT", bound=BaseModel)

PathOrDict = Union[str, Path, Dict[str, Any]]


def read_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a YAML mapping from disk.

    Raises:
        ConfigError: CONFIG_001 when the file is missing, CONFIG_002 when it
            cannot be parsed or does not hold a mapping
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            error_code="CONFIG_001",
            context={"config_path": config_path},
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration {config_path}: {e}")
        raise ConfigError(
            f"Error parsing YAML configuration: {e}",
            error_code="CONFIG_002",
            context={"config_path": config_path},
        ) from e

    if data is None:
        logger.warning(f"YAML file is empty or contains only comments: {config_path}")
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration must be a mapping, got {type(data).__name__}",
            error_code="CONFIG_002",
            context={"config_path": config_path},
        )
    return data


def _format_validation_errors(error: ValidationError) -> List[str]:
    details = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item["loc"]) or "<root>"
        details.append(f"Field '{field_path}': {item['msg']}")
    return details


def _validate(model: Type[ModelT], data: Dict[str, Any], source: str) -> ModelT:
    try:
        return model(**data)
    except ValidationError as e:
        error_details = _format_validation_errors(e)
        unsupported = any("Unsupported schema version" in detail for detail in error_details)
        detailed_error = f"{model.__name__} validation failed:\n" + "\n".join(error_details)
        logger.error(detailed_error)
        raise ConfigError(
            detailed_error,
            error_code="CONFIG_004" if unsupported else "CONFIG_003",
            context={"config_path": source, "validation_errors": error_details},
        ) from e


def _load(model: Type[ModelT], path_or_dict: PathOrDict) -> ModelT:
    if isinstance(path_or_dict, dict):
        logger.debug(f"Validating {model.__name__} from dictionary input")
        return _validate(model, path_or_dict, "<dict>")

    if not isinstance(path_or_dict, (str, Path)):
        raise ConfigError(
            f"Expected a path or dictionary, got {type(path_or_dict).__name__}",
            error_code="CONFIG_003",
        )

    data = read_yaml_file(path_or_dict)
    logger.debug(f"Loaded {model.__name__} YAML from {path_or_dict}")
    return _validate(model, data, str(path_or_dict))


def load_settings(path_or_dict: Optional[PathOrDict] = None) -> LineageSettings:
    """
    Build :class:`LineageSettings`.

    Values read from the YAML file or dictionary take precedence over
    ``DATASETLINEAGE_*`` environment variables, which take precedence over
    defaults.

    Example:
        >>> settings = load_settings({"default_cluster": "ltx1-test"})
        >>> settings.default_cluster
        'ltx1-test'
    """
    if path_or_dict is None:
        return _validate(LineageSettings, {}, "<environment>")
    return _load(LineageSettings, path_or_dict)


def load_catalog(path_or_dict: PathOrDict) -> CatalogDocument:
    """
    Load and validate a catalog snapshot.

    Example:
        >>> catalog = load_catalog("catalog.yaml")
        >>> len(catalog.datasets)
        12
    """
    catalog = _load(CatalogDocument, path_or_dict)
    logger.info(
        f"Catalog loaded: {len(catalog.datasets)} datasets, "
        f"{len(catalog.object_map)} object map rows, {len(catalog.family)} family rows"
    )
    return catalog
