"""
Device Width Classification.

Maps a viewport width to a size class, and a size class plus the current
route to the layout the shell renders.
"""

from enum import Enum

SMALL_WIDTH = 600


class WidthClass(str, Enum):
    SMALL = "small"
    NOT_SMALL = "not_small"


class Layout(str, Enum):
    SIDEBAR_ONLY = "sidebar_only"
    EDITOR_ONLY = "editor_only"
    SIDEBAR_AND_EDITOR = "sidebar_and_editor"


def classify(width: int, threshold: int = SMALL_WIDTH) -> WidthClass:
    """SMALL when ``width`` is strictly below ``threshold``."""
    if width < threshold:
        return WidthClass.SMALL
    return WidthClass.NOT_SMALL


def select_layout(note_id: str | None, width_class: WidthClass) -> Layout:
    """
    Choose what the shell shows.

    Small screens show one pane at a time: the note list at the root path,
    the editor when a note is selected. Larger screens show both.
    """
    if width_class is WidthClass.NOT_SMALL:
        return Layout.SIDEBAR_AND_EDITOR
    if note_id is None:
        return Layout.SIDEBAR_ONLY
    return Layout.EDITOR_ONLY
