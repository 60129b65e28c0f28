"""
Batch driver for publishing a directory of models.

Walks the model directories under a source root one at a time and takes each
through the pipeline stages:

    DISCOVERED -> METADATA_VALIDATED -> DESCRIPTOR_SELECTED
               -> THUMBNAIL_ATTEMPTED -> PAYLOAD_BUILT -> UPLOADED | FAILED

A validation problem before the payload is built ends the model in SKIPPED.
A failed thumbnail render does not change the trajectory. Nothing that goes
wrong with one model stops the batch.

Example usage:
    >>> config = UploadConfig(base_url="https://fuel.example.org", token=jwt)
    >>> summary = run_batch(Path("/data/models"), "OpenRobotics", config)
    >>> print(f"{summary.uploaded} uploaded, {summary.failed} failed")
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

import requests

from fuel_publisher.config_reader import ParseError, read_model_config
from fuel_publisher.payload import build_payload
from fuel_publisher.thumbnails import (
    GazeboThumbnailRenderer,
    ThumbnailRenderer,
    generate_thumbnails,
    write_scene_template,
)
from fuel_publisher.uploader import UploadConfig, UploadResult, upload_model
from fuel_publisher.utils.logging import (
    clear_correlation_id,
    get_logger,
    log_function_call,
    set_correlation_id,
)
from fuel_publisher.utils.metrics import get_metrics

logger = get_logger(__name__)

metrics = get_metrics()


class ModelState(Enum):
    """Processing state of one model directory."""

    DISCOVERED = "discovered"
    METADATA_VALIDATED = "metadata_validated"
    DESCRIPTOR_SELECTED = "descriptor_selected"
    THUMBNAIL_ATTEMPTED = "thumbnail_attempted"
    PAYLOAD_BUILT = "payload_built"
    UPLOADED = "uploaded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ModelOutcome:
    """
    What happened to one model directory.

    Attributes:
        model_dir: The model directory
        state: Terminal state reached
        reason: Why the model was skipped or failed ('' otherwise)
        thumbnails_created: Whether the renderer reported success
        upload_result: Result of the upload attempt, if one was made
    """

    model_dir: Path
    state: ModelState = ModelState.DISCOVERED
    reason: str = ""
    thumbnails_created: bool = False
    upload_result: Optional[UploadResult] = None


@dataclass
class BatchSummary:
    """Outcomes of a batch run in processing order."""

    outcomes: List[ModelOutcome] = field(default_factory=list)

    def _count(self, state: ModelState) -> int:
        return sum(1 for o in self.outcomes if o.state is state)

    @property
    def uploaded(self) -> int:
        return self._count(ModelState.UPLOADED)

    @property
    def failed(self) -> int:
        return self._count(ModelState.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(ModelState.SKIPPED)


@dataclass
class PipelineContext:
    """Settings shared by every model of one run."""

    source_root: Path
    owner: str
    upload_config: UploadConfig
    renderer: ThumbnailRenderer
    scene_path: Path
    session: Optional[requests.Session] = None


@log_function_call
def discover_model_dirs(source_root: Path) -> List[Path]:
    """
    List candidate model directories under ``source_root``.

    Only real directories count; names starting with a dot are ignored.
    """
    source_root = Path(source_root)
    return sorted(
        entry
        for entry in source_root.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    )


def _skip(outcome: ModelOutcome, reason: str) -> ModelOutcome:
    logger.warning(reason)
    outcome.state = ModelState.SKIPPED
    outcome.reason = reason
    return outcome


def process_model(model_dir: Path, context: PipelineContext) -> ModelOutcome:
    """
    Take one model directory through the pipeline.

    Args:
        model_dir: Model directory to publish
        context: Run-wide settings

    Returns:
        ModelOutcome in a terminal state
    """
    outcome = ModelOutcome(model_dir=model_dir)
    logger.info(f"# Processing {model_dir}")

    try:
        metadata = read_model_config(model_dir)
    except ParseError as e:
        return _skip(outcome, str(e))
    outcome.state = ModelState.METADATA_VALIDATED

    selected = metadata.selected_descriptor
    model_path = model_dir / (selected.path if selected else "")
    if selected is None or not selected.path or not model_path.is_file():
        missing = selected.path if selected else "<sdf>"
        return _skip(outcome, f"{missing} file does not exist. Skipping")
    outcome.state = ModelState.DESCRIPTOR_SELECTED

    try:
        outcome.thumbnails_created = generate_thumbnails(
            model_dir, model_path, context.scene_path, context.renderer
        )
    except FileNotFoundError as e:
        # Descriptor vanished between the check above and the render
        return _skip(outcome, str(e))
    outcome.state = ModelState.THUMBNAIL_ATTEMPTED

    payload = build_payload(metadata, context.owner, model_dir, context.source_root)
    outcome.state = ModelState.PAYLOAD_BUILT

    result = upload_model(payload, context.upload_config, session=context.session)
    outcome.upload_result = result

    if result.success:
        outcome.state = ModelState.UPLOADED
    else:
        outcome.state = ModelState.FAILED
        outcome.reason = result.message
        logger.error(f"Failed to upload {model_dir}: {result.message}")

    return outcome


@log_function_call
def run_batch(
    source_root: Path,
    owner: str,
    upload_config: UploadConfig,
    renderer: Optional[ThumbnailRenderer] = None,
    session: Optional[requests.Session] = None,
) -> BatchSummary:
    """
    Publish every model directory under ``source_root``.

    Args:
        source_root: Directory holding one subdirectory per model
        owner: Account the models are published under
        upload_config: Server URL, credentials and timing
        renderer: Thumbnail renderer (gzserver with defaults if None)
        session: requests session used for uploads

    Returns:
        BatchSummary with one outcome per candidate directory
    """
    source_root = Path(source_root)
    renderer = renderer if renderer is not None else GazeboThumbnailRenderer()
    summary = BatchSummary()

    candidates = discover_model_dirs(source_root)
    logger.info(f"Found {len(candidates)} model directories in {source_root}")

    with write_scene_template() as scene_path:
        context = PipelineContext(
            source_root=source_root,
            owner=owner,
            upload_config=upload_config,
            renderer=renderer,
            scene_path=scene_path,
            session=session,
        )

        for model_dir in candidates:
            set_correlation_id(model_dir.name)
            try:
                outcome = process_model(model_dir, context)
            except Exception as e:
                logger.error(
                    f"Unexpected error while processing {model_dir}: {e}",
                    exc_info=True,
                )
                outcome = ModelOutcome(
                    model_dir=model_dir, state=ModelState.FAILED, reason=str(e)
                )
            finally:
                clear_correlation_id()

            metrics.record_model_outcome(outcome.state.value)
            summary.outcomes.append(outcome)

    logger.info(
        f"Batch complete: {summary.uploaded} uploaded, "
        f"{summary.failed} failed, {summary.skipped} skipped"
    )
    return summary
