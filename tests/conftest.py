"""Shared helpers for building recognized text."""

import pytest

from shipping_label.ocr.base import BoundingBox, TextBlock, TextLine


def make_block(*texts: str, top: float | None = None, line_height: float = 20.0) -> TextBlock:
    """Build a block whose lines are stacked downwards from ``top``.

    With ``top=None`` neither the block nor its lines carry a box.
    """
    if top is None:
        return TextBlock(lines=tuple(TextLine(text) for text in texts))

    lines = tuple(
        TextLine(
            text,
            BoundingBox(
                left=10.0,
                top=top + i * line_height,
                right=300.0,
                bottom=top + (i + 1) * line_height,
            ),
        )
        for i, text in enumerate(texts)
    )
    box = BoundingBox(
        left=10.0, top=top, right=300.0, bottom=top + len(texts) * line_height
    )
    return TextBlock(lines=lines, bounding_box=box)


def stack(*blocks: tuple[str, ...]) -> list[TextBlock]:
    """Build blocks laid out top-to-bottom in the given order."""
    result = []
    top = 0.0
    for texts in blocks:
        result.append(make_block(*texts, top=top))
        top += len(texts) * 20.0 + 40.0
    return result


@pytest.fixture
def sample_label_blocks() -> list[TextBlock]:
    """A complete label as recognized, delivered out of reading order."""
    blocks = stack(
        ("FROM / DE:",),
        ("30x20x10cm",),
        ("2.500",),
        ("KG",),
        ("MANIFEST 0042",),
        ("ACME SUPPLY CO", "55 KING ST W", "MONTREAL QC H3B 2Y5"),
        ("Priority",),
        ("TO / À:",),
        ("JANE DOE", "123 MAIN ST", "OTTAWA ON K1A 0B1"),
        ("18+ SIGNATURE",),
        ("K1A 0B1",),
        ("PIN/NIP: 1234 5678 9012 3456",),
        ("Ref / Réf: INV-2024-17",),
    )
    return list(reversed(blocks))
