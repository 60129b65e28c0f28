"""
Fuel Model Publisher

Batch-publishes a directory of Gazebo models to an Ignition Fuel style asset
server: each model's metadata is validated, a preview thumbnail is rendered
with gzserver, and the model's files are uploaded as one multipart request.

This package provides modular components for each stage of the pipeline:
- config_reader: model.config parsing and SDF version selection
- thumbnails: external thumbnail rendering
- payload: multipart upload assembly
- uploader: authenticated upload to the server
- pipeline: the batch driver tying the stages together
- utils: Logging, configuration and metrics
"""

__version__ = "0.1.0"

from fuel_publisher.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging()
