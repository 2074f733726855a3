"""
Unit Tests for Device Width Classification.
"""

import pytest

from notesync.client.layout import SMALL_WIDTH, Layout, WidthClass, classify, select_layout


class TestClassify:
    @pytest.mark.parametrize(
        ("width", "expected"),
        [
            (0, WidthClass.SMALL),
            (320, WidthClass.SMALL),
            (599, WidthClass.SMALL),
            (600, WidthClass.NOT_SMALL),
            (1920, WidthClass.NOT_SMALL),
        ],
    )
    def test_default_threshold(self, width, expected):
        assert classify(width) is expected

    def test_default_threshold_is_600(self):
        assert SMALL_WIDTH == 600

    def test_custom_threshold(self):
        assert classify(79, threshold=80) is WidthClass.SMALL
        assert classify(80, threshold=80) is WidthClass.NOT_SMALL


class TestSelectLayout:
    def test_small_root_shows_sidebar_only(self):
        assert select_layout(None, WidthClass.SMALL) is Layout.SIDEBAR_ONLY

    def test_small_note_shows_editor_only(self):
        assert select_layout("n1", WidthClass.SMALL) is Layout.EDITOR_ONLY

    @pytest.mark.parametrize("note_id", [None, "n1"])
    def test_large_shows_both(self, note_id):
        assert select_layout(note_id, WidthClass.NOT_SMALL) is Layout.SIDEBAR_AND_EDITOR
