# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""rds-composer: injection-safe SQL composition for MySQL-style databases.

The composer turns structured intent (tables, columns, conditions, values)
into finished SQL text and hands it to an execution delegate. See
``rds_composer.sql`` for the public API.
"""

from .composer_config import ComposerConfig, config_from_env
from .sql import ConfigurationError, Operator, SqlDb

__version__ = "0.1.0"

__all__ = ["ComposerConfig", "ConfigurationError", "Operator", "SqlDb", "config_from_env"]
