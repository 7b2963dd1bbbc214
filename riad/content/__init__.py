"""Spreadsheet-backed site content."""

from .adapter import ContentAdapter, PageNotFoundError, UnknownSheetError

__all__ = ["ContentAdapter", "PageNotFoundError", "UnknownSheetError"]
