"""Shared fixtures for publisher tests."""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
import requests


MODEL_CONFIG_TEMPLATE = """<?xml version="1.0"?>
<model>
{body}
</model>
"""


def make_response(status_code: int, body: bytes = b"") -> requests.Response:
    """Build a real requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    return response


class FakeRenderer:
    """ThumbnailRenderer double that records calls and writes a placeholder image."""

    def __init__(self, success: bool = True) -> None:
        self.success = success
        self.calls: List[Tuple[Path, Path, Path]] = []

    def render(self, scene_path: Path, model_path: Path, output_dir: Path) -> bool:
        self.calls.append((scene_path, model_path, output_dir))
        if self.success:
            output_dir.mkdir(parents=True, exist_ok=True)
            (output_dir / "1.png").write_bytes(b"\x89PNG fake")
        return self.success


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def failing_renderer() -> FakeRenderer:
    return FakeRenderer(success=False)


@pytest.fixture
def http_response() -> Callable[..., requests.Response]:
    """Factory for real requests.Response objects."""
    return make_response


@pytest.fixture
def mock_session() -> MagicMock:
    """requests.Session double answering every POST with 200."""
    session = MagicMock(spec=requests.Session)
    session.post.return_value = make_response(200, b"{}")
    return session


@pytest.fixture
def make_model(tmp_path: Path) -> Callable[..., Path]:
    """
    Factory writing a model directory under ``tmp_path/models``.

    Args (of the returned callable):
        dirname: Model directory name
        name: <name> text, or None to omit the element
        description: <description> text, or None to omit the element
        sdf: list of (version, path) pairs for <sdf> elements
        files: extra files to create, relative path -> content
        create_sdf: write the files referenced by ``sdf``
    """
    root = tmp_path / "models"
    root.mkdir(exist_ok=True)

    def _make(
        dirname: str = "Box",
        name: Optional[str] = "Box",
        description: Optional[str] = "A simple box",
        sdf: Optional[List[Tuple[str, str]]] = None,
        files: Optional[Dict[str, str]] = None,
        create_sdf: bool = True,
    ) -> Path:
        model_dir = root / dirname
        model_dir.mkdir(parents=True, exist_ok=True)
        sdf = sdf if sdf is not None else [("1.5", "model.sdf")]

        lines = []
        if name is not None:
            lines.append(f"  <name>{name}</name>")
        if description is not None:
            lines.append(f"  <description>{description}</description>")
        for version, path in sdf:
            lines.append(f'  <sdf version="{version}">{path}</sdf>')

        (model_dir / "model.config").write_text(
            MODEL_CONFIG_TEMPLATE.format(body="\n".join(lines))
        )

        if create_sdf:
            for version, path in sdf:
                target = model_dir / path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(f"<sdf version='{version}'><model name='{name}'/></sdf>")

        for rel_path, content in (files or {}).items():
            target = model_dir / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)

        return model_dir

    return _make
