"""
Utility modules for the Fuel model publisher.

This package provides shared utilities used across all pipeline stages:
- logging: Structured logging with entry/exit decorators
- config: Credential and tunable loading from the environment
- config_loader: Optional YAML run configuration
- metrics: Prometheus counters for publish runs
"""

from fuel_publisher.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
