"""
Batch publishing driver.

Runs every model directory under a source root through metadata validation,
thumbnail rendering, payload assembly and upload, one model at a time.
"""

from .driver import (
    BatchSummary,
    ModelOutcome,
    ModelState,
    PipelineContext,
    discover_model_dirs,
    process_model,
    run_batch,
)

__all__ = [
    "BatchSummary",
    "ModelOutcome",
    "ModelState",
    "PipelineContext",
    "discover_model_dirs",
    "process_model",
    "run_batch",
]
