"""
Model metadata reader.

Parses the ``model.config`` descriptor found at the top level of every model
directory:

    <?xml version="1.0"?>
    <model>
      <name>Box</name>
      <description>A simple box</description>
      <sdf version="1.5">model-1_5.sdf</sdf>
      <sdf version="1.6">model.sdf</sdf>
    </model>

The parse is strict about what makes a model publishable (a readable document,
a ``<model>`` root and a non-empty ``<name>``) and permissive about the rest:
a missing description is only a warning and unparsable ``version`` attributes
count as 0.0.

Example usage:
    >>> from fuel_publisher.config_reader import read_model_config
    >>> metadata = read_model_config(Path("models/Box"))
    >>> metadata.selected_descriptor
    DescriptorEntry(version=1.6, path='model.sdf')
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from fuel_publisher.utils.logging import get_logger

logger = get_logger(__name__)

# Descriptor file expected at the top of each model directory
CONFIG_FILENAME = "model.config"

# Leading numeric prefix of a version attribute ("1.6beta" -> "1.6")
_VERSION_PREFIX = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class ParseError(Exception):
    """Raised when a model descriptor cannot be turned into ModelMetadata."""


@dataclass
class DescriptorEntry:
    """
    One ``<sdf>`` element of a model descriptor.

    Attributes:
        version: Numeric SDF version (0.0 when the attribute is unparsable)
        path: Description file path relative to the model directory
    """

    version: float
    path: str


@dataclass
class ModelMetadata:
    """
    Validated contents of a model descriptor.

    Attributes:
        name: Model name, trimmed and non-empty
        description: Model description, trimmed (may be empty)
        descriptors: SDF entries in declaration order
        source: Path of the descriptor file these values came from
    """

    name: str
    description: str = ""
    descriptors: List[DescriptorEntry] = field(default_factory=list)
    source: Optional[Path] = None

    @property
    def selected_descriptor(self) -> Optional[DescriptorEntry]:
        """Highest-version SDF entry, or None when there are none."""
        return select_descriptor(self.descriptors)


def parse_version(value: Optional[str]) -> float:
    """
    Parse a version attribute permissively.

    Reads the longest leading number and ignores the rest; anything without a
    leading number is 0.0.

    Example:
        >>> parse_version("1.6")
        1.6
        >>> parse_version("1.6beta")
        1.6
        >>> parse_version("draft")
        0.0
    """
    if not value:
        return 0.0

    match = _VERSION_PREFIX.match(value)
    if match is None:
        return 0.0

    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def select_descriptor(entries: Iterable[DescriptorEntry]) -> Optional[DescriptorEntry]:
    """
    Pick the entry with the greatest version.

    Only a strictly greater version replaces the current pick, so among equal
    versions the first one declared wins.

    Args:
        entries: Descriptor entries in declaration order

    Returns:
        The selected entry, or None if ``entries`` is empty
    """
    selected: Optional[DescriptorEntry] = None
    max_version = float("-inf")

    for entry in entries:
        if entry.version > max_version:
            selected = entry
            max_version = entry.version

    return selected


def _element_text(parent: ET.Element, tag: str) -> Optional[str]:
    element = parent.find(tag)
    if element is None:
        return None
    return "".join(element.itertext()).strip()


def read_model_config(model_dir: Path) -> ModelMetadata:
    """
    Read and validate the descriptor of one model directory.

    Args:
        model_dir: Model directory containing ``model.config``

    Returns:
        ModelMetadata with name, description and SDF entries

    Raises:
        ParseError: If the descriptor cannot be opened or parsed, has no
            ``<model>`` root, or has a missing or empty ``<name>``
    """
    config_path = Path(model_dir) / CONFIG_FILENAME

    try:
        tree = ET.parse(config_path)
    except (OSError, ET.ParseError) as e:
        raise ParseError(f"Failed to open {config_path}: {e}") from e

    model = tree.getroot()
    if model.tag != "model":
        raise ParseError(
            f"Error reading <model> element in {config_path}. Skipping."
        )

    name = _element_text(model, "name")
    if not name:
        raise ParseError(
            f"Missing or empty <name> element in {config_path}. Skipping."
        )

    description = _element_text(model, "description")
    if not description:
        logger.warning(f"Warning. Missing <description> in {config_path}.")
        description = ""

    descriptors = [
        DescriptorEntry(
            version=parse_version(sdf.get("version")),
            path="".join(sdf.itertext()).strip(),
        )
        for sdf in model.findall("sdf")
    ]
    if not descriptors:
        logger.warning(f"Unable to read the <sdf> element in {config_path}.")

    return ModelMetadata(
        name=name,
        description=description,
        descriptors=descriptors,
        source=config_path,
    )
