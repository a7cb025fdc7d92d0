"""Utility modules for scriptorium.

Provides:
- logger: get_logger for namespaced logging
"""

from scriptorium.utils.logger import get_logger

__all__ = ["get_logger"]
