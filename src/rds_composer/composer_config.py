# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration for rds-composer.

Configuration via environment variables:
    RDS_COMPOSER_DB: Database connection string (SQLite path or mysql:// URL)
    RDS_COMPOSER_TIME_ZONE: Zone for datetime literals (default: local)
    RDS_COMPOSER_LOG_LEVEL: Logging level name (default: WARNING)

Usage:
    config = config_from_env()
    db = SqlDb(config.db_url, time_zone=config.time_zone)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass
class ComposerConfig:
    """Settings shared by the CLI and SqlDb construction.

    Attributes:
        db_url: Database connection string; None when only composing SQL.
        time_zone: "local", "Z" or "+HH:MM" for datetime literals.
        log_level: Logging level name.
    """

    db_url: str | None = None
    time_zone: str = "local"
    log_level: str = "WARNING"

    def configure_logging(self) -> None:
        """Apply log_level to the root logger."""
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.WARNING),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def config_from_env() -> ComposerConfig:
    """Build ComposerConfig from RDS_COMPOSER_* environment variables."""
    return ComposerConfig(
        db_url=os.environ.get("RDS_COMPOSER_DB") or None,
        time_zone=os.environ.get("RDS_COMPOSER_TIME_ZONE", "local"),
        log_level=os.environ.get("RDS_COMPOSER_LOG_LEVEL", "WARNING"),
    )


__all__ = ["ComposerConfig", "config_from_env"]
