"""
Run configuration loader and validator.

An optional YAML file can hold the settings of a recurring publish run so the
operator does not have to repeat them on the command line. Command-line
options override anything read from the file.

Example config file (config/publish.yaml):
    ```yaml
    version: "1.0"
    url: https://fuel.example.org
    dir: /data/models
    owner: OpenRobotics

    upload:
      delay_seconds: 2
      timeout_seconds: 300

    renderer:
      executable: gzserver
      plugin: libModelPropShop.so
      timeout_seconds: 120
    ```

Usage:
    >>> from fuel_publisher.utils.config_loader import load_config, validate_config
    >>> config = load_config("config/publish.yaml")
    >>> errors = validate_config(config)
    >>> if not errors:
    ...     print(f"Publishing {config['dir']} as {config['owner']}")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from fuel_publisher.utils.logging import get_logger

logger = get_logger(__name__)


SUPPORTED_VERSIONS = ["1.0"]

# Top-level keys that must be strings when present
STRING_FIELDS = ["url", "dir", "owner"]

# Allowed keys per section and whether they must be non-negative numbers
SECTION_FIELDS = {
    "upload": {"delay_seconds": True, "timeout_seconds": True},
    "renderer": {"executable": False, "plugin": False, "timeout_seconds": True},
}


@dataclass
class ConfigError:
    """Validation error in configuration file."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load run configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing parsed configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the path is not a file, or the file is empty or not a mapping
        yaml.YAMLError: If YAML is malformed
    """
    path = Path(config_path)
    logger.info(f"Loading configuration from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Configuration path is not a file: {path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise

    if config is None:
        raise ValueError("Configuration file is empty")

    if not isinstance(config, dict):
        raise ValueError(
            f"Configuration file must contain a mapping, got {type(config).__name__}"
        )

    logger.info(f"Configuration loaded: {path.name}")
    return dict(config)


def validate_config(config: Dict[str, Any]) -> List[ConfigError]:
    """
    Validate run configuration against the expected schema.

    Every key is optional except ``version``; missing url/dir/owner are
    reported later by the CLI once command-line values have been merged in.

    Args:
        config: Configuration dictionary to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[ConfigError] = []

    if "version" not in config:
        errors.append(ConfigError("version", "Missing required field"))
    elif str(config["version"]) not in SUPPORTED_VERSIONS:
        errors.append(
            ConfigError(
                "version",
                f"Unsupported version (supported: {SUPPORTED_VERSIONS})",
                config["version"],
            )
        )

    for field in STRING_FIELDS:
        if field in config and not isinstance(config[field], str):
            errors.append(
                ConfigError(field, "Must be a string", type(config[field]).__name__)
            )

    for section, fields in SECTION_FIELDS.items():
        if section in config:
            errors.extend(_validate_section(section, config[section], fields))

    if errors:
        logger.warning(f"Configuration validation failed with {len(errors)} errors")
    else:
        logger.info("Configuration validation passed")

    return errors


def _validate_section(
    section: str, values: Any, fields: Dict[str, bool]
) -> List[ConfigError]:
    """Validate one nested section (upload, renderer)."""
    errors: List[ConfigError] = []

    if not isinstance(values, dict):
        errors.append(ConfigError(section, "Must be a mapping", type(values).__name__))
        return errors

    for key, value in values.items():
        name = f"{section}.{key}"
        if key not in fields:
            errors.append(ConfigError(name, "Unknown field"))
        elif fields[key]:
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                errors.append(ConfigError(name, "Must be a number", type(value).__name__))
            elif value < 0:
                errors.append(ConfigError(name, "Must not be negative", value))
        elif not isinstance(value, str):
            errors.append(ConfigError(name, "Must be a string", type(value).__name__))

    return errors

