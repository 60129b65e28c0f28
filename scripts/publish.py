#!/usr/bin/env python3
"""
Publish a directory of Gazebo models to a Fuel asset server.

CLI wrapper for the pipeline driver. The bearer token is read from the
IGN_FUEL_JWT environment variable (or a .env file in the working directory).

Usage:
    python scripts/publish.py -u https://fuel.example.org -d /data/models -o OpenRobotics
    python scripts/publish.py --config config/publish.yaml
    python scripts/publish.py --config config/publish.yaml --owner SomeoneElse --delay 5
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from fuel_publisher.pipeline import ModelState, run_batch  # noqa: E402
from fuel_publisher.thumbnails import GazeboThumbnailRenderer  # noqa: E402
from fuel_publisher.uploader import UploadConfig  # noqa: E402
from fuel_publisher.utils.config import PublisherConfig, get_config  # noqa: E402
from fuel_publisher.utils.config_loader import load_config, validate_config  # noqa: E402
from fuel_publisher.utils.logging import setup_logging  # noqa: E402
from fuel_publisher.utils.metrics import start_metrics_server  # noqa: E402

REQUIRED_OPTIONS = [("url", "--url"), ("dir", "--dir"), ("owner", "--owner")]


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Publish Gazebo models to a Fuel asset server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Publish every model under /data/models
  %(prog)s -u https://fuel.example.org -d /data/models -o OpenRobotics

  # Read url/dir/owner from a run file
  %(prog)s --config config/publish.yaml

  # Expose Prometheus metrics while the batch runs
  %(prog)s --config config/publish.yaml --metrics-port 9090

The IGN_FUEL_JWT environment variable must hold a valid JWT token.
        """,
    )

    parser.add_argument(
        "-u",
        "--url",
        help="Destination URL, such as https://fuel.example.org (required)",
    )

    parser.add_argument(
        "-d",
        "--dir",
        help="Directory containing one or more Gazebo models (required)",
    )

    parser.add_argument(
        "-o",
        "--owner",
        help="Name of the owner the models are published under (required)",
    )

    parser.add_argument(
        "-c",
        "--config",
        help="YAML run configuration; command-line options override it",
    )

    parser.add_argument(
        "--delay",
        type=float,
        help="Seconds to wait after each upload (default: 2)",
    )

    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Serve Prometheus metrics on this port while running",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser


def merge_options(args: argparse.Namespace, file_config: Dict[str, Any]) -> Dict[str, Any]:
    """Combine run-file values with command-line options (CLI wins)."""
    upload = file_config.get("upload", {})
    renderer = file_config.get("renderer", {})

    options: Dict[str, Any] = {
        "url": file_config.get("url"),
        "dir": file_config.get("dir"),
        "owner": file_config.get("owner"),
        "delay": upload.get("delay_seconds"),
        "timeout": upload.get("timeout_seconds"),
        "renderer": renderer.get("executable"),
        "plugin": renderer.get("plugin"),
        "render_timeout": renderer.get("timeout_seconds"),
    }

    for key in ("url", "dir", "owner", "delay"):
        value = getattr(args, key)
        if value is not None:
            options[key] = value

    return options


def _pick(value: Any, fallback: Any) -> Any:
    return value if value is not None else fallback


def build_upload_config(options: Dict[str, Any], env_config: PublisherConfig) -> UploadConfig:
    """Upload settings from merged options, falling back to the environment."""
    return UploadConfig(
        base_url=options["url"],
        token=env_config.token,
        delay_seconds=_pick(options["delay"], env_config.upload_delay_seconds),
        timeout_seconds=_pick(options["timeout"], env_config.upload_timeout_seconds),
    )


def build_renderer(options: Dict[str, Any], env_config: PublisherConfig) -> GazeboThumbnailRenderer:
    """Thumbnail renderer from merged options, falling back to the environment."""
    return GazeboThumbnailRenderer(
        executable=options["renderer"] or env_config.renderer_executable,
        plugin=options["plugin"] or env_config.renderer_plugin,
        timeout_seconds=_pick(options["render_timeout"], env_config.render_timeout_seconds),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the publish CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else "INFO")

    file_config: Dict[str, Any] = {}
    if args.config:
        try:
            file_config = load_config(args.config)
        except (OSError, ValueError) as e:
            print(f"❌ Configuration error: {e}")
            return 1

        errors = validate_config(file_config)
        if errors:
            print(f"❌ Invalid configuration file {args.config}:")
            for error in errors:
                print(f"  • {error}")
            return 1

    options = merge_options(args, file_config)

    missing = [flag for key, flag in REQUIRED_OPTIONS if not options[key]]
    if missing:
        parser.error(f"the following options are required: {', '.join(missing)}")

    if options["delay"] is not None and options["delay"] < 0:
        print(f"❌ Configuration error: --delay must not be negative (got: {options['delay']})")
        return 1

    try:
        env_config = get_config()
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        return 1

    source_root = Path(options["dir"])
    if not source_root.is_dir():
        print(f"❌ Source directory not found: {source_root}")
        return 1

    upload_config = build_upload_config(options, env_config)
    renderer = build_renderer(options, env_config)

    if args.metrics_port:
        start_metrics_server(port=args.metrics_port)

    print(f"📤 Publishing models from {source_root}")
    print(f"   Server: {upload_config.base_url}")
    print(f"   Owner: {options['owner']}")
    print()

    try:
        summary = run_batch(source_root, options["owner"], upload_config, renderer=renderer)
    except KeyboardInterrupt:
        print("\n⚠️  Publishing cancelled by user")
        return 130

    print("\n📊 Batch Summary:")
    print(f"  Total: {len(summary.outcomes)}")
    print(f"  ✅ Uploaded: {summary.uploaded}")
    print(f"  ❌ Failed: {summary.failed}")
    print(f"  ⏭️  Skipped: {summary.skipped}")

    if summary.failed or summary.skipped:
        print("\nNot published:")
        for outcome in summary.outcomes:
            if outcome.state in (ModelState.FAILED, ModelState.SKIPPED):
                reason = outcome.reason or "no message from server"
                print(f"  • {outcome.model_dir.name}: {reason}")

    # Individual model failures do not change the exit status
    return 0


if __name__ == "__main__":
    sys.exit(main())
