"""
Module: config

Purpose:
    Toolkit configuration: backend URL, timeouts, retry and fetch settings,
    output directory and attainment parameters.

    Sources, later wins:
        1. Defaults
        2. Optional JSON file
        3. Environment (SPT_API_URL, SPT_TIMEOUT, SPT_MAX_WORKERS)

    A corrupted file falls back to defaults with a warning; an invalid value
    raises ConfigError.

Key Functions:
    - load_config(): Build a ToolkitConfig

Key Classes:
    - ToolkitConfig: Frozen, validated settings
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from spt_toolkit.client.retry import RetryPolicy
from spt_toolkit.client.session import DEFAULT_API_URL
from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS, AttainmentParameters
from spt_toolkit.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_API_URL = "SPT_API_URL"
ENV_TIMEOUT = "SPT_TIMEOUT"
ENV_MAX_WORKERS = "SPT_MAX_WORKERS"


@dataclass(frozen=True)
class ToolkitConfig:
    """Validated toolkit settings."""

    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    retry_attempts: int = 3
    retry_delay: float = 1.0
    throttle: float = 0.1  # Seconds between sequential fetches
    max_workers: int = 1
    output_dir: Path = Path(".")
    attainment: AttainmentParameters = field(default=ATTAINMENT_PARAMETERS)

    def __post_init__(self) -> None:
        if not isinstance(self.api_url, str) or not self.api_url.startswith(("http://", "https://")):
            raise ConfigError(f"api_url must be an http(s) URL: {self.api_url!r}")
        for name in ("timeout", "retry_delay", "throttle"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value) or value < 0:
                raise ConfigError(f"{name} must be a non-negative number: {value!r}")
        if self.timeout == 0:
            raise ConfigError("timeout must be greater than 0")
        for name in ("retry_attempts", "max_workers"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer: {value!r}")

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.retry_attempts, delay=self.retry_delay)


def _read_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug(f"No config file at {path}; using defaults")
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Config file {path} is corrupted ({e}); using defaults")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Config file {path} is not a JSON object; using defaults")
        return {}
    return data


def _from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    if environ.get(ENV_API_URL):
        values["api_url"] = environ[ENV_API_URL]
    try:
        if environ.get(ENV_TIMEOUT):
            values["timeout"] = float(environ[ENV_TIMEOUT])
        if environ.get(ENV_MAX_WORKERS):
            values["max_workers"] = int(environ[ENV_MAX_WORKERS])
    except ValueError as e:
        raise ConfigError(f"Invalid environment setting: {e}") from e
    return values


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> ToolkitConfig:
    """
    Load configuration.

    Args:
        path: Optional JSON file; unknown keys are ignored with a warning
        environ: Environment mapping (default os.environ)

    Raises:
        ConfigError: If any value is invalid
    """
    data = _read_file(Path(path)) if path else {}
    known = {f.name for f in fields(ToolkitConfig)}
    for key in sorted(set(data) - known):
        logger.warning(f"Ignoring unknown config key: {key}")
    values = {k: v for k, v in data.items() if k in known}
    values.update(_from_env(os.environ if environ is None else environ))

    if "output_dir" in values:
        values["output_dir"] = Path(values["output_dir"])
    if "attainment" in values:
        attainment = values["attainment"]
        if not isinstance(attainment, dict):
            raise ConfigError("attainment must be an object")
        try:
            values["attainment"] = AttainmentParameters(**attainment)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid attainment parameters: {e}") from e

    config = ToolkitConfig(**values)
    logger.debug(f"Loaded config: {config}")
    return config
