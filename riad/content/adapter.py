"""Content adapter: spreadsheet tabs → JSON shapes for the website.

Each request reads one tab fresh from the store, turns its rows into
header-keyed dicts and applies the transform declared for that tab:

  generic     image rewrite, optional ``Order`` sort, hero tabs → first row
  settings    key/value tab collapsed into one flat mapping
  rooms       generic + ``Features`` split into a ``features`` list
  sectioned   ``{"sections": {Section: row}, "items": [rows]}``
  grouped     ``{Building: [rows sorted by Order]}``
  footer      shared-spreadsheet footer rows
  pages       shared-spreadsheet legal pages, optionally one by slug
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from riad.content.drive import convert_drive_url
from riad.sheets.base import SheetStore

log = logging.getLogger("riad.content")

ContentRow = dict[str, str]

# URL segment → spreadsheet tab
SHEET_MAP: dict[str, str] = {
    "amenities": "Amenities",
    "amenities-hero": "Amenities_Hero",
    "beyond-the-walls": "Beyond_The_Walls",
    "beyond-the-walls-hero": "Beyond_The_Walls_Hero",
    "booking-conditions": "Booking_Conditions",
    "content": "Content",
    "desert-content": "Desert_Content",
    "desert-gallery": "Desert_Gallery",
    "desert-hero": "Desert_Hero",
    "desert-tents": "Desert_Tents",
    "directions": "Directions",
    "directions-settings": "Directions_Settings",
    "disclaimer": "Disclaimer",
    "douaria-content": "Douaria_Content",
    "douaria-gallery": "Douaria_Gallery",
    "douaria-hero": "Douaria_Hero",
    "douaria-rooms": "Douaria_Rooms",
    "faq": "FAQ",
    "farm-content": "Farm_Content",
    "farm-hero": "Farm_Hero",
    "farm-produce": "Farm_Produce",
    "home": "Home",
    "house-rules": "House_Rules",
    "journeys": "Journeys",
    "kasbah-content": "Kasbah_Content",
    "kasbah-experience": "Kasbah_Experience",
    "kasbah-gallery": "Kasbah_Gallery",
    "kasbah-hero": "Kasbah_Hero",
    "philosophy": "Philosophy",
    "privacy": "Privacy",
    "rooms": "Rooms",
    "rooms-gallery": "Rooms_Gallery",
    "rooms-hero": "Rooms_Hero",
    "settings": "Settings",
    "terms": "Terms",
    "testimonials": "Testimonials",
    "the-riad": "The_Riad",
    # Shared spreadsheet
    "nexus-footer": "Footer",
    "nexus-legal": "Legal_Pages",
}

# Segments with a dedicated transform; everything else is generic
SHEET_KINDS: dict[str, str] = {
    "settings": "settings",
    "rooms": "rooms",
    "the-riad": "sectioned",
    "directions": "grouped",
    "nexus-footer": "footer",
    "nexus-legal": "pages",
}

IMAGE_FIELDS = ("Image_URL", "heroImage", "image_url", "image")

DEFAULT_GROUP = "main"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class UnknownSheetError(LookupError):
    """The requested URL segment is not in SHEET_MAP."""


class PageNotFoundError(LookupError):
    """No page in the legal-pages tab matches the requested slug."""


# ── Row helpers ──────────────────────────────────────────────────


def rows_to_objects(rows: list[list[str]]) -> list[ContentRow]:
    """Turn raw rows into dicts keyed by the header row.

    Blank rows are skipped and short rows are padded with "".
    """
    if not rows:
        return []
    headers = [h.strip() for h in rows[0]]
    objects: list[ContentRow] = []
    for row in rows[1:]:
        if not any(str(cell).strip() for cell in row):
            continue
        objects.append(
            {
                header: (row[idx] if idx < len(row) else "")
                for idx, header in enumerate(headers)
                if header
            }
        )
    return objects


def rewrite_images(row: ContentRow, required: tuple[str, ...] = ()) -> ContentRow:
    """Return a copy of the row with every known image field made direct.

    Fields in ``required`` are present in the result, "" when the tab lacks them.
    """
    processed = dict(row)
    for field in IMAGE_FIELDS:
        if processed.get(field):
            processed[field] = convert_drive_url(processed[field])
    for field in required:
        processed.setdefault(field, "")
    return processed


def order_key(row: ContentRow) -> int:
    """Integer value of the ``Order`` column; non-numeric or missing → 0."""
    match = _LEADING_INT.match(str(row.get("Order") or ""))
    return int(match.group(1)) if match else 0


def sort_by_order(rows: list[ContentRow]) -> list[ContentRow]:
    """Stable ascending sort on ``Order`` (ties keep sheet order)."""
    return sorted(rows, key=order_key)


def split_features(raw: str) -> list[str]:
    """Parse a comma-separated feature list."""
    if not raw:
        return []
    return [f.strip() for f in raw.split(",") if f.strip()]


# ── Transforms ───────────────────────────────────────────────────


def transform_generic(sheet_name: str, rows: list[ContentRow]) -> Any:
    processed = [rewrite_images(row) for row in rows]

    if processed and all("Order" in row for row in processed):
        processed = sort_by_order(processed)

    if "hero" in sheet_name.lower():
        return processed[0] if processed else {}

    return processed


def transform_settings(rows: list[list[str]]) -> dict[str, str]:
    """Collapse a two-column key/value tab (header row first) into a dict.

    Values are returned verbatim; typed parsing is left to the caller.
    """
    settings: dict[str, str] = {}
    for row in rows[1:]:
        if not row or not str(row[0]).strip():
            continue
        key = str(row[0]).strip()
        value = row[1] if len(row) > 1 else ""
        settings[key] = convert_drive_url(value) if key in IMAGE_FIELDS else value
    return settings


def transform_rooms(sheet_name: str, rows: list[ContentRow]) -> list[dict]:
    rooms = transform_generic(sheet_name, rows)
    return [
        {
            **room,
            "Image_URL": room.get("Image_URL", ""),
            "features": split_features(room.get("Features", "")),
        }
        for room in rooms
    ]


def transform_sectioned(rows: list[ContentRow]) -> dict[str, Any]:
    """Index rows by ``Section``; the last row of a section wins."""
    items = [rewrite_images(row, required=("Image_URL",)) for row in rows]
    sections: dict[str, ContentRow] = {}
    for item in items:
        if item.get("Section"):
            sections[item["Section"]] = item
    return {"sections": sections, "items": items}


def transform_grouped(
    rows: list[ContentRow], group_field: str = "Building"
) -> dict[str, list[ContentRow]]:
    """Partition rows by ``group_field`` and order each group's steps."""
    groups: dict[str, list[ContentRow]] = {}
    for row in rows:
        group = row.get(group_field) or DEFAULT_GROUP
        groups.setdefault(group, []).append(rewrite_images(row, required=("Image_URL",)))
    return {group: sort_by_order(steps) for group, steps in groups.items()}


# ── Adapter ──────────────────────────────────────────────────────


class ContentAdapter:
    """Resolve a URL segment to its tab, fetch it and shape it."""

    def __init__(self, store: SheetStore, nexus_store: SheetStore | None = None) -> None:
        self._store = store
        self._nexus_store = nexus_store or store
        self._handlers: dict[str, Callable] = {
            "settings": self._settings,
            "rooms": self._rooms,
            "sectioned": self._sectioned,
            "grouped": self._grouped,
            "footer": self._footer,
            "pages": self._pages,
        }

    async def fetch_rows(self, sheet_name: str, nexus: bool = False) -> list[ContentRow]:
        """Read one tab and return header-keyed rows."""
        store = self._nexus_store if nexus else self._store
        return rows_to_objects(await store.get_rows(sheet_name))

    async def get(self, segment: str, page: str | None = None) -> Any:
        """Return the JSON value served for ``/api/sheets/{segment}``.

        Raises:
            UnknownSheetError: segment is not a known content tab.
            PageNotFoundError: ``page`` matches no legal page.

        Store errors propagate unchanged.
        """
        sheet_name = SHEET_MAP.get(segment)
        if sheet_name is None:
            raise UnknownSheetError(segment)

        kind = SHEET_KINDS.get(segment, "generic")
        log.debug("Loading %s (%s, kind=%s)", segment, sheet_name, kind)

        handler = self._handlers.get(kind)
        if handler is None:
            return transform_generic(sheet_name, await self.fetch_rows(sheet_name))
        return await handler(sheet_name, page)

    # ------------------------------------------------------------------
    # Kind handlers
    # ------------------------------------------------------------------

    async def _settings(self, sheet_name: str, page: str | None) -> dict[str, str]:
        return transform_settings(await self._store.get_rows(sheet_name))

    async def _rooms(self, sheet_name: str, page: str | None) -> list[dict]:
        return transform_rooms(sheet_name, await self.fetch_rows(sheet_name))

    async def _sectioned(self, sheet_name: str, page: str | None) -> dict[str, Any]:
        return transform_sectioned(await self.fetch_rows(sheet_name))

    async def _grouped(self, sheet_name: str, page: str | None) -> dict[str, list[ContentRow]]:
        return transform_grouped(await self.fetch_rows(sheet_name))

    async def _footer(self, sheet_name: str, page: str | None) -> dict[str, Any]:
        rows = await self.fetch_rows(sheet_name, nexus=True)
        if not rows:
            return {"success": False}
        return {"success": True, "data": rows}

    async def _pages(self, sheet_name: str, page: str | None) -> Any:
        pages = await self.fetch_rows(sheet_name, nexus=True)
        if not page:
            return pages
        for item in pages:
            if page in (item.get("slug"), item.get("Slug")):
                return item
        raise PageNotFoundError(page)
