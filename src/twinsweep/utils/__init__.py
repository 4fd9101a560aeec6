"""Shared helpers with no dependency on the core engine."""

from .convert_utils import ConvertUtils

__all__ = ["ConvertUtils"]
