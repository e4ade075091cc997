"""Utility helpers."""

from .logger import get_logger, set_logger

__all__ = ["get_logger", "set_logger"]
