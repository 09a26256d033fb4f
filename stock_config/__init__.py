"""
stock_config -- single public entrypoint for report configuration.

Responsibility:
    Provides the one way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a validated, frozen
    ``ReconciliationConfig``.

Architecture position:
    Configuration -- YAML-driven settings.  Sits above ``stock_kernel`` and
    below ``stock_services``.  The kernel MUST NEVER import from
    ``stock_config``.

Failure modes:
    - ``FileNotFoundError`` -- an explicit path does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``InvalidConfigError`` -- a setting failed validation.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``STOCK_CONFIG_TRACE`` log entry with the source path and the effective
    settings, tying each report back to the configuration that shaped it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stock_config.loader import load_config
from stock_config.schema import ReconciliationConfig

_logger = logging.getLogger("stock_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> ReconciliationConfig:
    """The single runtime configuration entrypoint.

    Args:
        path: YAML file to load.  Defaults to stock_config/defaults.yaml.

    Returns:
        A validated ``ReconciliationConfig``.
    """
    source = Path(path) if path is not None else _DEFAULT_CONFIG_PATH
    config = load_config(source)

    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "trace_type": "STOCK_CONFIG_TRACE",
            "config_path": str(source),
            "default_page_size": config.default_page_size,
            "max_page_size": config.max_page_size,
            "quantity_places": config.quantity_places,
            "totals_tolerance": str(config.totals_tolerance),
            "deadline_seconds": config.deadline_seconds,
            "report_version": config.report_version,
        },
    )
    return config


__all__ = [
    "ReconciliationConfig",
    "get_active_config",
    "load_config",
]
