"""
costs_config -- single public entrypoint for application configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Settings come from ``defaults.yaml`` shipped
    with the package, overlaid by the file named in ``COSTS_CONFIG_PATH``
    (or the ``config_path`` argument).

Architecture position:
    Configuration -- sits above ``costs_kernel`` and below ``costs_api``.
    The kernel MUST NEVER import from ``costs_config``.

Failure modes:
    - ``FileNotFoundError`` -- the override file does not exist.
    - ``ValueError`` -- the file is not a YAML mapping or holds bad values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from costs_config.loader import deep_merge, load_yaml_file
from costs_kernel.logging_config import get_logger
from costs_modules.closing.config import ClosingConfig

_logger = get_logger("config")

_DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"

CONFIG_PATH_ENV = "COSTS_CONFIG_PATH"


@dataclass(frozen=True)
class AppConfig:
    database_url: str = "sqlite://"
    echo_sql: bool = False
    log_level: str = "INFO"
    closing: ClosingConfig = field(default_factory=ClosingConfig)


def get_active_config(config_path: Path | str | None = None) -> AppConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override file.  Defaults to ``$COSTS_CONFIG_PATH`` when
            set, otherwise only the packaged defaults are used.
    """
    data = load_yaml_file(_DEFAULTS_FILE)

    override = config_path or os.environ.get(CONFIG_PATH_ENV)
    if override:
        data = deep_merge(data, load_yaml_file(Path(override)))

    database = data.get("database") or {}
    logging_section = data.get("logging") or {}
    config = AppConfig(
        database_url=str(database.get("url", AppConfig.database_url)),
        echo_sql=bool(database.get("echo_sql", False)),
        log_level=str(logging_section.get("level", "INFO")).upper(),
        closing=ClosingConfig.from_dict(data.get("closing") or {}),
    )

    _logger.info(
        "COSTS_CONFIG_TRACE",
        extra={
            "trace_type": "COSTS_CONFIG_TRACE",
            "source": str(override) if override else "defaults",
            "log_level": config.log_level,
            "non_productive_category": config.closing.non_productive_category_name,
        },
    )
    return config


__all__ = ["AppConfig", "CONFIG_PATH_ENV", "get_active_config"]
