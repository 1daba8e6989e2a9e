"""Utility helpers for git-compat-patch."""

from .logging_config import setup_logging

__all__ = ["setup_logging"]
