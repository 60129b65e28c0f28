"""
Asset server uploader module.

Posts assembled model payloads to the server's model creation endpoint with
bearer-token authentication and reports the outcome of each attempt.
"""

from .uploader import (
    UploadConfig,
    UploadResult,
    extract_error_message,
    upload_model,
)

__all__ = [
    "UploadConfig",
    "UploadResult",
    "extract_error_message",
    "upload_model",
]
