"""
Asset server uploader implementation.

Sends one model payload to ``POST {base_url}/1.0/models`` as
multipart/form-data with bearer-token authentication and interprets the
response. Every attempt is followed by a fixed pause so a batch run does not
hammer the server; failed uploads are reported, never retried.

Example usage:
    >>> from fuel_publisher.uploader import upload_model, UploadConfig
    >>> config = UploadConfig(base_url="https://fuel.example.org", token=jwt)
    >>> result = upload_model(payload, config)
    >>> if not result.success:
    ...     print(f"Server said: {result.message}")
"""

import time
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Optional

import requests

from fuel_publisher.payload import UploadPayload
from fuel_publisher.utils.logging import get_logger, log_function_call
from fuel_publisher.utils.metrics import get_metrics

logger = get_logger(__name__)

metrics = get_metrics()

UPLOAD_ENDPOINT = "/1.0/models"
DEFAULT_DELAY_SECONDS = 2.0
DEFAULT_TIMEOUT_SECONDS = 300
FILE_CONTENT_TYPE = "application/octet-stream"


@dataclass
class UploadConfig:
    """
    Configuration for model uploads.

    Attributes:
        base_url: Server base URL (e.g. 'https://fuel.example.org')
        token: JWT sent as the bearer token
        delay_seconds: Pause after every upload attempt
        timeout_seconds: Request timeout in seconds
        endpoint: Upload path appended to base_url
    """

    base_url: str
    token: str = field(repr=False)
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    endpoint: str = UPLOAD_ENDPOINT

    def __post_init__(self):
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative (got: {self.delay_seconds})")

    @property
    def upload_url(self) -> str:
        return self.base_url.rstrip("/") + self.endpoint


@dataclass
class UploadResult:
    """
    Result of one upload attempt.

    Attributes:
        success: Whether the server answered 200
        message: Server error message on failure ('' when none could be read)
        status_code: HTTP status, None if no response was received
        duration_seconds: Request time in seconds
    """

    success: bool
    message: str = ""
    status_code: Optional[int] = None
    duration_seconds: float = 0.0


def extract_error_message(response: Optional[requests.Response]) -> str:
    """
    Read the ``msg`` field of a JSON error body.

    Returns '' when there is no response or body, the body is not JSON, or it
    carries no string ``msg``.
    """
    if response is None or not response.content:
        return ""

    try:
        body = response.json()
    except ValueError:
        return ""

    if not isinstance(body, dict):
        return ""

    msg = body.get("msg")
    if not isinstance(msg, str):
        return ""
    return msg


@log_function_call
def upload_model(
    payload: UploadPayload,
    config: UploadConfig,
    session: Optional[requests.Session] = None,
) -> UploadResult:
    """
    Upload one model payload.

    Args:
        payload: Fields and files assembled by build_payload()
        config: Server URL, credentials and timing
        session: requests session to send with (a plain requests.post if None)

    Returns:
        UploadResult; success only for HTTP 200
    """
    url = config.upload_url
    headers = {"Authorization": f"Bearer {config.token}"}
    sender = session if session is not None else requests

    logger.debug(f"Uploading {len(payload.files)} files to {url}")
    start_time = time.time()
    response: Optional[requests.Response] = None

    try:
        with ExitStack() as stack, metrics.track_upload():
            files = [
                (
                    "file",
                    (
                        f.upload_name,
                        stack.enter_context(open(f.local_path, "rb")),
                        FILE_CONTENT_TYPE,
                    ),
                )
                for f in payload.files
            ]
            response = sender.post(
                url,
                headers=headers,
                data=payload.fields,
                files=files,
                timeout=config.timeout_seconds,
            )
    except (requests.RequestException, OSError) as e:
        logger.warning(f"Upload request to {url} failed: {e}")

    duration = time.time() - start_time

    if response is not None and response.status_code == 200:
        logger.info("Uploaded")
        metrics.record_upload_success(payload.total_bytes)
        result = UploadResult(
            success=True,
            status_code=response.status_code,
            duration_seconds=duration,
        )
    else:
        metrics.record_upload_failure()
        result = UploadResult(
            success=False,
            message=extract_error_message(response),
            status_code=response.status_code if response is not None else None,
            duration_seconds=duration,
        )

    # Don't abuse the server too much
    time.sleep(config.delay_seconds)

    return result
