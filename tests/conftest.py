"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from settings import reset_settings_cache


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached; clear around each test so env overrides apply."""
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def single_slide_doc():
    """One slide (s1) with one text element (e1)."""
    return {
        "version": 1,
        "slides": [
            {
                "id": "s1",
                "objects": [
                    {"id": "e1", "type": "text", "text": "old", "x": 0, "y": 0},
                ],
            }
        ],
    }


@pytest.fixture
def deck_doc():
    """A three-slide deck with a global properties mapping."""
    return {
        "version": 3,
        "global": {"palette": {"background": "#111", "text": "#fff"}},
        "slides": [
            {
                "id": "slide_1",
                "objects": [
                    {"id": "title", "text": "Welcome", "x": 40, "y": 60, "fontSize": 48},
                    {"id": "body", "text": "Intro", "x": 40, "y": 200},
                ],
            },
            {
                "id": "slide_2",
                "objects": [
                    {"id": "title", "text": "Agenda", "x": 40, "y": 60},
                    {"id": "image_hero", "assetId": "a1", "x": 0, "y": 300},
                ],
            },
            {
                # No element list at all.
                "id": "slide_3",
            },
        ],
    }


@pytest.fixture
def lock_encodings():
    """The same lock (slide_1 / index 1, element "title") in every encoding."""
    return {
        "token_list_by_id": ["slide_1:title"],
        "token_list_by_index": ["1:title"],
        "nested_by_id": {"slide_1": {"title": True}},
        "nested_by_index": {"1": {"title": True}},
        "dotted_by_id": {"slide_1.title": True},
        "dotted_by_index": {"1.title": True},
        "wrapped_by_id": {"bySlide": {"slide_1": {"title": True}}},
        "wrapped_by_index": {"bySlide": {"1": {"title": True}}},
    }
