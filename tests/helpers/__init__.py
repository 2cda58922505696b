"""Test helper utilities for ingestion service tests."""

from .fake_page import FakeElement, FakePage, load_fixture_pages, make_cards

__all__ = ["FakePage", "FakeElement", "make_cards", "load_fixture_pages"]
