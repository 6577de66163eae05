"""Grouping of line-level OCR detections into text blocks."""

from shipping_label.ocr.base import BoundingBox, TextBlock, TextLine


def group_lines_into_blocks(
    lines: list[TextLine], gap_ratio: float = 0.8
) -> list[TextBlock]:
    """
    Group line detections into blocks of visually related lines.

    Lines are visited top-to-bottom. A line joins the most recent block it
    overlaps horizontally when its top edge is no further than
    ``gap_ratio`` line heights below that block's bottom edge; otherwise it
    starts a new block. Lines without a bounding box become single-line
    blocks of their own.

    Args:
        lines: Line detections from a line-level engine.
        gap_ratio: Maximum vertical gap, in line heights, inside a block.

    Returns:
        Text blocks with bounding boxes covering their lines.
    """
    positioned = sorted(
        (line for line in lines if line.bounding_box is not None),
        key=lambda line: line.bounding_box.top,
    )

    groups: list[list[TextLine]] = []
    boxes: list[BoundingBox] = []

    for line in positioned:
        box = line.bounding_box
        max_gap = max(box.height, 1.0) * gap_ratio
        target = None
        # Most recent blocks are the likeliest neighbours
        for index in range(len(groups) - 1, -1, -1):
            block_box = boxes[index]
            if box.overlaps_horizontally(block_box) and (
                box.top - block_box.bottom
            ) <= max_gap:
                target = index
                break

        if target is None:
            groups.append([line])
            boxes.append(box)
        else:
            groups[target].append(line)
            boxes[target] = boxes[target].union(box)

    blocks = [
        TextBlock(lines=tuple(group), bounding_box=box)
        for group, box in zip(groups, boxes)
    ]
    blocks.extend(
        TextBlock(lines=(line,), bounding_box=None)
        for line in lines
        if line.bounding_box is None
    )
    return blocks
