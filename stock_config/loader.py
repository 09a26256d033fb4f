"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into a typed
``ReconciliationConfig``.  Runtime code should go through
``stock_config.get_active_config()`` instead of calling this directly.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends only on the kernel's
exceptions and logging.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top-level value that is not a mapping  -> ``InvalidConfigError``.
* Field validation failures  -> ``InvalidConfigError`` from the schema.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import ReconciliationConfig
from stock_kernel.exceptions import InvalidConfigError

# Settings live under this key so the file can hold other sections.
CONFIG_SECTION = "reconciliation"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_config(data: dict[str, Any]) -> ReconciliationConfig:
    """Parse the ``reconciliation`` section of a loaded document."""
    if not isinstance(data, dict):
        raise InvalidConfigError("<root>", data, "expected a mapping")
    section = data.get(CONFIG_SECTION, {}) or {}
    if not isinstance(section, dict):
        raise InvalidConfigError(CONFIG_SECTION, section, "expected a mapping")
    return ReconciliationConfig.from_dict(section)


def load_config(path: Path | str) -> ReconciliationConfig:
    """Load and validate a configuration file."""
    return parse_config(load_yaml_file(Path(path)))
