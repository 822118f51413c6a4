"""Utility modules for the translation gateway.

This package provides logging configuration and string helpers used by the
translation cache.
"""

from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["LoggerUtils", "StringUtils"]
