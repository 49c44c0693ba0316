"""Utility modules for safemdx.

Provides:
- logger: get_logger for logging
"""

from safemdx.utils.logger import get_logger

__all__ = ["get_logger"]
