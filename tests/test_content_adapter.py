"""Tests for the content adapter transforms and Drive URL rewriting."""

import pytest

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from riad.content.adapter import (
    ContentAdapter,
    PageNotFoundError,
    SHEET_MAP,
    UnknownSheetError,
    order_key,
    rows_to_objects,
    split_features,
    transform_generic,
    transform_grouped,
    transform_sectioned,
    transform_settings,
)
from riad.content.drive import convert_drive_url
from riad.sheets.base import SheetStore

DRIVE = "https://drive.google.com/file/d/abc123/view?usp=sharing"
DIRECT = "https://lh3.googleusercontent.com/d/abc123"


class DictStore(SheetStore):
    """In-memory store: tab name → raw rows."""

    def __init__(self, tabs):
        self.tabs = tabs
        self.reads = []

    async def get_rows(self, sheet_name):
        self.reads.append(sheet_name)
        if sheet_name not in self.tabs:
            raise RuntimeError(f"Unable to parse range: {sheet_name}")
        return self.tabs[sheet_name]

    async def append_row(self, sheet_name, values):
        self.tabs.setdefault(sheet_name, []).append(values)


# ── Drive URLs ──────────────────────────────────────────────────────


class TestConvertDriveUrl:
    def test_file_view_link(self):
        assert convert_drive_url(DRIVE) == DIRECT

    def test_open_and_uc_links(self):
        assert convert_drive_url("https://drive.google.com/open?id=abc123") == DIRECT
        assert convert_drive_url("https://drive.google.com/uc?export=view&id=abc123") == DIRECT

    def test_other_urls_pass_through(self):
        url = "https://images.example.com/riad.jpg"
        assert convert_drive_url(url) == url

    def test_empty(self):
        assert convert_drive_url("") == ""
        assert convert_drive_url(None) == ""


# ── Row helpers ─────────────────────────────────────────────────────


class TestRowsToObjects:
    def test_header_keyed(self):
        rows = [["Name", "Price_EUR"], ["Suite", "120"], ["Room", "90"]]
        assert rows_to_objects(rows) == [
            {"Name": "Suite", "Price_EUR": "120"},
            {"Name": "Room", "Price_EUR": "90"},
        ]

    def test_short_rows_padded_and_blank_rows_skipped(self):
        rows = [["Name", "Caption"], ["Suite"], [], ["", " "], ["Room", "Nice"]]
        assert rows_to_objects(rows) == [
            {"Name": "Suite", "Caption": ""},
            {"Name": "Room", "Caption": "Nice"},
        ]

    def test_empty(self):
        assert rows_to_objects([]) == []
        assert rows_to_objects([["Name"]]) == []


class TestOrderKey:
    def test_numeric(self):
        assert order_key({"Order": "3"}) == 3
        assert order_key({"Order": " 12 "}) == 12

    def test_non_numeric_and_missing(self):
        assert order_key({"Order": "first"}) == 0
        assert order_key({"Order": ""}) == 0
        assert order_key({}) == 0


class TestSplitFeatures:
    def test_trims(self):
        assert split_features(" King bed, Wi-Fi ,Courtyard view") == [
            "King bed", "Wi-Fi", "Courtyard view",
        ]

    def test_empty(self):
        assert split_features("") == []


# ── Transforms ──────────────────────────────────────────────────────


class TestTransformGeneric:
    def test_sorts_by_order_stably(self):
        rows = [
            {"Name": "a", "Order": "2"},
            {"Name": "b", "Order": "x"},
            {"Name": "c", "Order": "1"},
            {"Name": "d", "Order": ""},
            {"Name": "e", "Order": "1"},
        ]
        result = transform_generic("Testimonials", rows)
        assert [r["Name"] for r in result] == ["b", "d", "c", "e", "a"]

    def test_no_order_column_keeps_sheet_order(self):
        rows = [{"Q": "2"}, {"Q": "1"}]
        assert transform_generic("FAQ", rows) == rows

    def test_partial_order_column_keeps_sheet_order(self):
        rows = [
            {"Name": "a", "Order": "3"},
            {"Name": "b"},
            {"Name": "c", "Order": "1"},
        ]
        result = transform_generic("Testimonials", rows)
        assert [r["Name"] for r in result] == ["a", "b", "c"]

    def test_rewrites_image_fields(self):
        rows = [{"Image_URL": DRIVE, "image": DRIVE, "Caption": DRIVE}]
        result = transform_generic("Rooms_Gallery", rows)[0]
        assert result["Image_URL"] == DIRECT
        assert result["image"] == DIRECT
        assert result["Caption"] == DRIVE

    def test_does_not_mutate_input(self):
        rows = [{"Image_URL": DRIVE}]
        transform_generic("Home", rows)
        assert rows[0]["Image_URL"] == DRIVE

    def test_hero_returns_first_row(self):
        rows = [{"Title": "Welcome", "heroImage": DRIVE}, {"Title": "Ignored"}]
        assert transform_generic("Rooms_Hero", rows) == {"Title": "Welcome", "heroImage": DIRECT}

    def test_empty_hero_is_empty_object(self):
        assert transform_generic("Desert_Hero", []) == {}


class TestTransformSettings:
    def test_key_value_collapse(self):
        rows = [["Key", "Value"], ["city_tax_eur", "2.50"], ["", "orphan"], ["whatsapp", ""]]
        assert transform_settings(rows) == {"city_tax_eur": "2.50", "whatsapp": ""}

    def test_image_keys_rewritten(self):
        rows = [["Key", "Value"], ["heroImage", DRIVE], ["logo_text", DRIVE]]
        result = transform_settings(rows)
        assert result["heroImage"] == DIRECT
        assert result["logo_text"] == DRIVE


class TestTransformSectioned:
    def test_sections_and_items(self):
        rows = [
            {"Section": "intro", "Title": "A", "Image_URL": DRIVE},
            {"Section": "", "Title": "B"},
            {"Section": "intro", "Title": "C"},
            {"Section": "history", "Title": "D"},
        ]
        result = transform_sectioned(rows)
        assert [i["Title"] for i in result["items"]] == ["A", "B", "C", "D"]
        assert result["items"][0]["Image_URL"] == DIRECT
        assert result["sections"]["intro"]["Title"] == "C"
        assert set(result["sections"]) == {"intro", "history"}

    def test_image_url_always_present(self):
        result = transform_sectioned([{"Section": "intro", "Title": "A"}])
        assert result["items"][0]["Image_URL"] == ""
        assert result["sections"]["intro"]["Image_URL"] == ""


class TestTransformGrouped:
    def test_groups_and_orders_steps(self):
        rows = [
            {"Building": "Douaria", "Step": "d2", "Order": "2"},
            {"Building": "", "Step": "m1", "Order": "1", "Image_URL": DRIVE},
            {"Building": "Douaria", "Step": "d1", "Order": "1"},
            {"Step": "m0", "Order": "0"},
        ]
        result = transform_grouped(rows)
        assert list(result) == ["Douaria", "main"]
        assert [s["Step"] for s in result["Douaria"]] == ["d1", "d2"]
        assert [s["Step"] for s in result["main"]] == ["m0", "m1"]
        assert result["main"][1]["Image_URL"] == DIRECT

    def test_image_url_always_present(self):
        result = transform_grouped([{"Building": "Kasbah", "Step": "k1"}])
        assert result["Kasbah"][0]["Image_URL"] == ""


# ── ContentAdapter ──────────────────────────────────────────────────


class TestContentAdapter:
    @pytest.fixture
    def store(self):
        return DictStore({
            "Rooms": [
                ["Name", "Features", "Image_URL"],
                ["Courtyard Suite", "King bed, Ensuite", DRIVE],
                ["Garden Room", "", ""],
            ],
            "Rooms_Hero": [["Title", "Image_URL"]],
            "Settings": [["Key", "Value"], ["city_tax_eur", "2.5"]],
            "Directions": [["Building", "Order", "Text"], ["Main", "2", "b"], ["Main", "1", "a"]],
            "The_Riad": [["Section", "Title"], ["intro", "Welcome"]],
            "Testimonials": [["Quote", "Order"], ["Lovely", "2"], ["Perfect", "1"]],
        })

    @pytest.fixture
    def nexus(self):
        return DictStore({
            "Footer": [["Label", "Url"], ["Instagram", "https://instagram.com/riad"]],
            "Legal_Pages": [["slug", "Title"], ["privacy", "Privacy Policy"], ["terms", "Terms"]],
        })

    async def test_unknown_sheet(self, store):
        with pytest.raises(UnknownSheetError):
            await ContentAdapter(store).get("secrets")
        assert store.reads == []

    async def test_rooms(self, store):
        rooms = await ContentAdapter(store).get("rooms")
        assert rooms[0]["features"] == ["King bed", "Ensuite"]
        assert rooms[0]["Image_URL"] == DIRECT
        assert rooms[1]["features"] == []

    async def test_rooms_without_image_column(self):
        store = DictStore({"Rooms": [["Name", "Features"], ["Tent", "Rug"]]})
        rooms = await ContentAdapter(store).get("rooms")
        assert rooms == [{"Name": "Tent", "Features": "Rug", "Image_URL": "", "features": ["Rug"]}]

    async def test_empty_hero(self, store):
        assert await ContentAdapter(store).get("rooms-hero") == {}

    async def test_settings(self, store):
        assert await ContentAdapter(store).get("settings") == {"city_tax_eur": "2.5"}

    async def test_directions(self, store):
        result = await ContentAdapter(store).get("directions")
        assert [s["Text"] for s in result["Main"]] == ["a", "b"]

    async def test_the_riad(self, store):
        result = await ContentAdapter(store).get("the-riad")
        assert result["sections"]["intro"]["Title"] == "Welcome"

    async def test_generic_sorted(self, store):
        result = await ContentAdapter(store).get("testimonials")
        assert [r["Quote"] for r in result] == ["Perfect", "Lovely"]

    async def test_footer_from_nexus_store(self, store, nexus):
        result = await ContentAdapter(store, nexus).get("nexus-footer")
        assert result == {"success": True, "data": [{"Label": "Instagram", "Url": "https://instagram.com/riad"}]}
        assert "Footer" not in store.reads

    async def test_empty_footer(self, store):
        nexus = DictStore({"Footer": [["Label", "Url"]]})
        assert await ContentAdapter(store, nexus).get("nexus-footer") == {"success": False}

    async def test_legal_pages(self, store, nexus):
        adapter = ContentAdapter(store, nexus)
        assert len(await adapter.get("nexus-legal")) == 2
        assert (await adapter.get("nexus-legal", page="terms"))["Title"] == "Terms"
        with pytest.raises(PageNotFoundError):
            await adapter.get("nexus-legal", page="cookies")

    async def test_store_errors_propagate(self, store):
        with pytest.raises(RuntimeError):
            await ContentAdapter(store).get("faq")

    def test_sheet_map_segments_are_unique_tabs(self):
        assert len(set(SHEET_MAP.values())) == len(SHEET_MAP)
