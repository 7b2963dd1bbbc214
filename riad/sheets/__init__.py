"""Tabular store abstractions and implementations."""

from .base import SheetStore

__all__ = ["SheetStore"]
