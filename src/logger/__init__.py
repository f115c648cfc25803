"""Logging helpers shared by every package of the episode pipeline."""

from .logging_decorator import setup_logging, log_function, default_log_file

__all__ = ["setup_logging", "log_function", "default_log_file"]
