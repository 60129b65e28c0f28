"""
Model descriptor reader.

Parses ``model.config`` files into validated metadata and selects the
highest SDF version a model declares.
"""

from .reader import (
    CONFIG_FILENAME,
    DescriptorEntry,
    ModelMetadata,
    ParseError,
    parse_version,
    read_model_config,
    select_descriptor,
)

__all__ = [
    "CONFIG_FILENAME",
    "DescriptorEntry",
    "ModelMetadata",
    "ParseError",
    "parse_version",
    "read_model_config",
    "select_descriptor",
]
