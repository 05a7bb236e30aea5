# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exceptions raised by the statement composer."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a call cannot be turned into safe SQL.

    Always raised before anything reaches the execution delegate.
    """


__all__ = ["ConfigurationError"]
