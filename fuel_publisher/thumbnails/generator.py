"""
Thumbnail generation for model directories.

Thumbnails are rendered by an external process. The default renderer runs
``gzserver`` with the ModelPropShop system plugin against a fixed white-world
scene; the plugin loads the model, takes its pictures and writes them to the
``thumbnails`` directory of the model before exiting.

Rendering is best effort: a failed render is logged and the model is still
uploaded without fresh thumbnails.

Example usage:
    >>> renderer = GazeboThumbnailRenderer()
    >>> with write_scene_template() as scene_path:
    ...     generate_thumbnails(model_dir, model_dir / "model.sdf", scene_path, renderer)
"""

import os
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Protocol

from fuel_publisher.utils.logging import get_logger
from fuel_publisher.utils.metrics import get_metrics

logger = get_logger(__name__)

metrics = get_metrics()

THUMBNAIL_DIRNAME = "thumbnails"

DEFAULT_RENDERER = "gzserver"
DEFAULT_PLUGIN = "libModelPropShop.so"

# Scene every model is photographed in: flat light, light grey background,
# no grid or shadows, camera looking down at the origin from the front right
SCENE_TEMPLATE = """<sdf version='1.6'>
  <world name='default'>
    <scene>
      <ambient>0.5 0.5 0.5 1</ambient>
      <background>.980392157 .980392157 .980392157 1</background>
      <shadows>0</shadows>
      <grid>0</grid>
    </scene>
    <gui fullscreen='0'>
      <camera name='user_camera'>
        <pose>5.65634 -4.1009 2.6069 0 0.275643 2.35619</pose>
        <view_controller>orbit</view_controller>
      </camera>
    </gui>
  </world>
</sdf>
"""


class ThumbnailRenderer(Protocol):
    """Anything able to render thumbnails of one model description file."""

    def render(self, scene_path: Path, model_path: Path, output_dir: Path) -> bool:
        """Render ``model_path`` inside ``scene_path`` into ``output_dir``."""
        ...


class GazeboThumbnailRenderer:
    """
    Renders thumbnails by running gzserver with the ModelPropShop plugin.

    Attributes:
        executable: Server executable to run
        plugin: System plugin that takes the pictures
        timeout_seconds: Kill the renderer after this long (None waits forever)
    """

    def __init__(
        self,
        executable: str = DEFAULT_RENDERER,
        plugin: str = DEFAULT_PLUGIN,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.executable = executable
        self.plugin = plugin
        self.timeout_seconds = timeout_seconds

    def build_command(self, scene_path: Path, model_path: Path, output_dir: Path) -> List[str]:
        return [
            self.executable,
            "-s",
            self.plugin,
            str(scene_path),
            "--propshop-save",
            str(output_dir),
            "--propshop-model",
            str(model_path),
        ]

    def render(self, scene_path: Path, model_path: Path, output_dir: Path) -> bool:
        cmd = self.build_command(scene_path, model_path, output_dir)
        logger.debug(f"Running renderer: {' '.join(cmd)}")

        try:
            completed = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Renderer timed out after {self.timeout_seconds}s")
            return False
        except OSError as e:
            logger.warning(f"Unable to run renderer {self.executable}: {e}")
            return False

        if completed.returncode != 0:
            logger.debug(f"Renderer exited with status {completed.returncode}")
            return False

        return True


@contextmanager
def write_scene_template() -> Iterator[Path]:
    """
    Write the thumbnail scene to a temporary file for the duration of a run.

    Yields:
        Path of the scene file; it is deleted when the context exits
    """
    fd, name = tempfile.mkstemp(prefix="whiteworld", suffix=".world")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(SCENE_TEMPLATE)
        yield Path(name)
    finally:
        try:
            os.unlink(name)
        except OSError as e:
            logger.debug(f"Could not remove scene template {name}: {e}")


def clear_thumbnail_dir(thumb_dir: Path) -> None:
    """
    Remove a previous, empty thumbnails directory.

    Non-empty or missing directories are left as they are; the error is
    logged at DEBUG and dropped.
    """
    try:
        thumb_dir.rmdir()
    except OSError as e:
        logger.debug(f"Left {thumb_dir} in place: {e}")


def generate_thumbnails(
    model_dir: Path,
    model_path: Path,
    scene_path: Path,
    renderer: ThumbnailRenderer,
) -> bool:
    """
    Render thumbnails of one model into ``model_dir/thumbnails``.

    Args:
        model_dir: Model directory the thumbnails belong to
        model_path: Selected SDF description file of the model
        scene_path: Scene template written by write_scene_template()
        renderer: Renderer to invoke

    Returns:
        True if the renderer reported success, False otherwise

    Raises:
        FileNotFoundError: If ``model_path`` is not an existing file; nothing
            is rendered in that case
    """
    model_path = Path(model_path)
    if not model_path.is_file():
        raise FileNotFoundError(f"{model_path} file does not exist. Skipping")

    thumb_dir = Path(model_dir) / THUMBNAIL_DIRNAME
    clear_thumbnail_dir(thumb_dir)

    success = renderer.render(Path(scene_path), model_path, thumb_dir)
    metrics.record_thumbnail(success)

    if success:
        logger.info("Created thumbnails")
    else:
        logger.warning("Failed to create thumbnails")

    return success
