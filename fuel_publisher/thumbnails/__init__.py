"""
Thumbnail rendering for model directories.

Drives an external renderer (gzserver with the ModelPropShop plugin by
default) to produce preview images under each model's ``thumbnails``
directory.
"""

from .generator import (
    SCENE_TEMPLATE,
    THUMBNAIL_DIRNAME,
    GazeboThumbnailRenderer,
    ThumbnailRenderer,
    clear_thumbnail_dir,
    generate_thumbnails,
    write_scene_template,
)

__all__ = [
    "SCENE_TEMPLATE",
    "THUMBNAIL_DIRNAME",
    "GazeboThumbnailRenderer",
    "ThumbnailRenderer",
    "clear_thumbnail_dir",
    "generate_thumbnails",
    "write_scene_template",
]
