"""Configuration and logging utilities."""

from .config import *  # noqa: F401,F403
from .logger import get_logger

__all__ = ["get_logger"]
