"""Tests for grouping OCR lines into blocks."""

from shipping_label.ocr.base import BoundingBox, TextLine
from shipping_label.ocr.layout import group_lines_into_blocks


def line(text: str, left: float, top: float, right: float | None = None, height: float = 20.0):
    right = left + 200.0 if right is None else right
    return TextLine(text, BoundingBox(left, top, right, top + height))


class TestGroupLinesIntoBlocks:
    """Test group_lines_into_blocks()."""

    def test_empty(self):
        """Test no lines give no blocks."""
        assert group_lines_into_blocks([]) == []

    def test_close_lines_form_one_block(self):
        """Test lines separated by a small gap share a block."""
        lines = [
            line("JANE DOE", 10, 100),
            line("123 MAIN ST", 10, 130),
            line("OTTAWA ON K1A 0B1", 10, 160),
        ]
        blocks = group_lines_into_blocks(lines)

        assert len(blocks) == 1
        assert blocks[0].text == "JANE DOE\n123 MAIN ST\nOTTAWA ON K1A 0B1"
        assert blocks[0].bounding_box == BoundingBox(10, 100, 210, 180)

    def test_large_gap_splits_blocks(self):
        """Test a gap larger than the ratio starts a new block."""
        blocks = group_lines_into_blocks([line("TO / À:", 10, 0), line("JANE DOE", 10, 60)])
        assert [block.text for block in blocks] == ["TO / À:", "JANE DOE"]

    def test_gap_ratio_is_configurable(self):
        """Test a wider gap ratio merges more lines."""
        lines = [line("TO / À:", 10, 0), line("JANE DOE", 10, 60)]
        assert len(group_lines_into_blocks(lines, gap_ratio=2.0)) == 1

    def test_side_by_side_columns_stay_apart(self):
        """Test lines without horizontal overlap never merge."""
        lines = [
            line("FROM / DE:", 10, 0, right=200),
            line("TO / À:", 400, 0, right=600),
            line("ACME", 10, 25, right=200),
            line("JANE DOE", 400, 25, right=600),
        ]
        blocks = group_lines_into_blocks(lines)

        assert sorted(block.text for block in blocks) == [
            "FROM / DE:\nACME",
            "TO / À:\nJANE DOE",
        ]

    def test_lines_visited_top_to_bottom(self):
        """Test engine order does not affect grouping."""
        lines = [line("second", 10, 30), line("first", 10, 0)]
        blocks = group_lines_into_blocks(lines)
        assert [ln.text for ln in blocks[0].lines] == ["first", "second"]

    def test_unpositioned_lines_are_own_blocks(self):
        """Test lines without boxes become single-line boxless blocks."""
        lines = [TextLine("floating"), line("placed", 10, 0)]
        blocks = group_lines_into_blocks(lines)

        assert [block.text for block in blocks] == ["placed", "floating"]
        assert blocks[1].bounding_box is None
