"""Reading-order normalization of recognized text blocks."""

import logging
from collections.abc import Iterable

from shipping_label.ocr.base import BoundingBox, TextBlock

logger = logging.getLogger(__name__)

NormalizedDocument = list[list[str]]
"""Blocks top-to-bottom, each block's lines top-to-bottom."""


def _vertical_key(box: BoundingBox | None) -> tuple[bool, float]:
    # Missing boxes sort after every positioned item
    if box is None:
        return (True, 0.0)
    return (False, box.top)


def normalize(blocks: Iterable[TextBlock] | None) -> NormalizedDocument:
    """
    Sort text blocks and their lines into top-to-bottom reading order.

    Sorting is stable: items with the same top coordinate, or without a
    bounding box, keep their delivery order.

    Args:
        blocks: Text blocks as delivered by the recognition engine.

    Returns:
        The line strings of every block, in reading order.
    """
    if not blocks:
        return []

    document: NormalizedDocument = []
    for block in sorted(blocks, key=lambda b: _vertical_key(b.bounding_box)):
        lines = sorted(block.lines, key=lambda line: _vertical_key(line.bounding_box))
        document.append([line.text for line in lines])
        logger.debug("Sorted text block: %s (box: %s)", document[-1], block.bounding_box)

    return document
