"""
Upload payload assembly.

Turns validated model metadata and the files of a model directory into the
multipart form the asset server expects:

    multipart, name, URLName, description, tags, license, owner,
    permission, private      -> plain form fields
    file (repeated)          -> one part per file, named by its path
                                relative to the source root

Example usage:
    >>> payload = build_payload(metadata, "OpenRobotics", root / "Box", root)
    >>> [f.upload_name for f in payload.files]
    ['Box/meshes/box.dae', 'Box/model.config', 'Box/model.sdf']
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from fuel_publisher.config_reader import ModelMetadata
from fuel_publisher.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)

# Fixed form values; the pipeline publishes everything public under license 1
MULTIPART = "true"
TAGS = ""
LICENSE_ID = "1"
PERMISSION = "0"
PRIVATE = "0"


@dataclass
class PayloadFile:
    """
    One file part of an upload.

    Attributes:
        upload_name: POSIX path relative to the source root (e.g. 'Box/model.sdf')
        local_path: Location of the file on disk
    """

    upload_name: str
    local_path: Path


@dataclass
class UploadPayload:
    """
    Multipart body of one model upload.

    Attributes:
        fields: Form fields in wire order
        files: File parts in upload order
    """

    fields: List[Tuple[str, str]] = field(default_factory=list)
    files: List[PayloadFile] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        """Combined size of all file parts."""
        return sum(f.local_path.stat().st_size for f in self.files)


def url_name(name: str) -> str:
    """URL-safe model name: spaces become underscores."""
    return name.replace(" ", "_")


def collect_model_files(model_dir: Path, source_root: Path) -> List[PayloadFile]:
    """
    List every file under a model directory.

    Directories whose name starts with a dot are not descended into. Files are
    taken regardless of their name, hidden ones included.

    Args:
        model_dir: Model directory to walk
        source_root: Root the upload names are made relative to

    Returns:
        PayloadFile list sorted by upload name
    """
    model_dir = Path(model_dir)
    source_root = Path(source_root)
    files: List[PayloadFile] = []

    for dirpath, dirnames, filenames in os.walk(model_dir):
        # Prune in place so os.walk skips hidden directories
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]

        for filename in filenames:
            local_path = Path(dirpath) / filename
            upload_name = local_path.relative_to(source_root).as_posix()
            files.append(PayloadFile(upload_name=upload_name, local_path=local_path))

    files.sort(key=lambda f: f.upload_name)
    logger.debug(f"Collected {len(files)} files from {model_dir}")
    return files


@log_function_call
def build_payload(
    metadata: ModelMetadata,
    owner: str,
    model_dir: Path,
    source_root: Path,
) -> UploadPayload:
    """
    Assemble the upload payload of one model.

    Args:
        metadata: Validated model metadata
        owner: Account the model is published under
        model_dir: Model directory whose files are attached
        source_root: Directory holding all model directories

    Returns:
        UploadPayload ready for upload_model()
    """
    fields = [
        ("multipart", MULTIPART),
        ("name", metadata.name),
        ("URLName", url_name(metadata.name)),
        ("description", metadata.description),
        ("tags", TAGS),
        ("license", LICENSE_ID),
        ("owner", owner),
        ("permission", PERMISSION),
        ("private", PRIVATE),
    ]

    return UploadPayload(
        fields=fields,
        files=collect_model_files(model_dir, source_root),
    )
