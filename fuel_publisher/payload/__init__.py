"""
Multipart payload assembly for model uploads.
"""

from .builder import (
    LICENSE_ID,
    PERMISSION,
    PRIVATE,
    PayloadFile,
    UploadPayload,
    build_payload,
    collect_model_files,
    url_name,
)

__all__ = [
    "LICENSE_ID",
    "PERMISSION",
    "PRIVATE",
    "PayloadFile",
    "UploadPayload",
    "build_payload",
    "collect_model_files",
    "url_name",
]
