"""Anchor-based field extraction for Canada Post style shipping labels."""

import logging
from enum import Enum
from typing import NamedTuple

from shipping_label.extractor.base import Extractor
from shipping_label.extractor.normalizer import NormalizedDocument
from shipping_label.extractor.patterns import (
    FROM_ADDRESS_HEADER_PATTERN,
    MANIFEST_PATTERN,
    POSTAL_CODE_PATTERN,
    PRODUCT_DIMENSION_PATTERN,
    PRODUCT_WEIGHT_PATTERN,
    PRODUCT_WEIGHT_VALUE_PATTERN,
    REFERENCE_PATTERN,
    TO_ADDRESS_HEADER_PATTERN,
    TRACKING_PIN_PATTERN,
    WEIGHT_LOOKBACK_BLOCKS,
    find_instruction,
    find_product_type,
)
from shipping_label.models.label import ExtractedLabel

logger = logging.getLogger(__name__)


class Anchor(str, Enum):
    """Markers located in the document before fields are extracted."""

    PRODUCT_TYPE = "productType"
    TO_ADDRESS_HEADER = "toAddressHeader"
    FROM_ADDRESS_HEADER = "fromAddressHeader"
    POSTAL_CODE = "postalCode"
    TRACKING_PIN = "trackingPin"
    PRODUCT_DIMENSION = "productDimension"
    PRODUCT_WEIGHT = "productWeight"
    PRODUCT_INSTRUCTION = "productInstruction"
    REFERENCE = "reference"


class Position(NamedTuple):
    """Block and line index of an anchor."""

    block: int
    line: int


AnchorIndex = dict[Anchor, Position]


def find_anchors(document: NormalizedDocument) -> AnchorIndex:
    """
    Locate every anchor in one pass over the document.

    Blocks are visited in order, then their lines. The first match of each
    anchor wins and is never replaced. Postal code, tracking PIN and
    dimensions are only recognized in single-line blocks, and a single line
    anchors at most one of those three.
    """
    anchors: AnchorIndex = {}

    def mark(anchor: Anchor, block_index: int, line_index: int) -> None:
        if anchor not in anchors:
            anchors[anchor] = Position(block_index, line_index)

    for block_index, block in enumerate(document):
        single_line = len(block) == 1
        for line_index, line in enumerate(block):
            if single_line:
                if Anchor.POSTAL_CODE not in anchors and POSTAL_CODE_PATTERN.search(line):
                    mark(Anchor.POSTAL_CODE, block_index, line_index)
                elif Anchor.TRACKING_PIN not in anchors and TRACKING_PIN_PATTERN.search(line):
                    mark(Anchor.TRACKING_PIN, block_index, line_index)
                elif (
                    Anchor.PRODUCT_DIMENSION not in anchors
                    and PRODUCT_DIMENSION_PATTERN.search(line)
                ):
                    mark(Anchor.PRODUCT_DIMENSION, block_index, line_index)

            if find_product_type(line):
                mark(Anchor.PRODUCT_TYPE, block_index, line_index)
            if TO_ADDRESS_HEADER_PATTERN.search(line):
                mark(Anchor.TO_ADDRESS_HEADER, block_index, line_index)
            if FROM_ADDRESS_HEADER_PATTERN.search(line):
                mark(Anchor.FROM_ADDRESS_HEADER, block_index, line_index)
            if PRODUCT_WEIGHT_PATTERN.search(line):
                mark(Anchor.PRODUCT_WEIGHT, block_index, line_index)
            if find_instruction(line):
                mark(Anchor.PRODUCT_INSTRUCTION, block_index, line_index)
            if REFERENCE_PATTERN.search(line):
                mark(Anchor.REFERENCE, block_index, line_index)

            if len(anchors) == len(Anchor):
                return anchors

    return anchors


def _first_line(block: list[str]) -> str:
    return block[0] if block else ""


def _after_last_colon(text: str) -> str:
    return text.rsplit(":", 1)[-1].strip()


def _join_address(lines: list[str]) -> str:
    return ", ".join(line.strip() for line in lines)


def _is_non_address_block(block: list[str]) -> bool:
    """Blocks printed between the sender header and the sender address."""
    return any(
        PRODUCT_DIMENSION_PATTERN.search(line)
        or PRODUCT_WEIGHT_PATTERN.search(line)
        or PRODUCT_WEIGHT_VALUE_PATTERN.search(line)
        or MANIFEST_PATTERN.search(line)
        for line in block
    )


class FieldExtractor(Extractor):
    """Extracts the nine label fields around anchors found in the text.

    Stateless: a single instance can serve any number of threads.
    """

    @property
    def name(self) -> str:
        return "anchors"

    def extract(self, document: NormalizedDocument | None) -> ExtractedLabel:
        """Extract label fields from a normalized document."""
        if not document:
            return ExtractedLabel()

        anchors = find_anchors(document)
        logger.debug(
            "Anchors found: %s",
            {anchor.value: tuple(position) for anchor, position in anchors.items()},
        )

        label = ExtractedLabel(
            product_type=self._product_type(document, anchors.get(Anchor.PRODUCT_TYPE)),
            to_address=self._to_address(document, anchors.get(Anchor.TO_ADDRESS_HEADER)),
            dest_postal_code=self._single_line(document, anchors.get(Anchor.POSTAL_CODE)),
            tracking_pin=self._tracking_pin(document, anchors.get(Anchor.TRACKING_PIN)),
            from_address=self._from_address(
                document, anchors.get(Anchor.FROM_ADDRESS_HEADER)
            ),
            product_dimension=self._single_line(
                document, anchors.get(Anchor.PRODUCT_DIMENSION)
            ),
            product_weight=self._product_weight(
                document, anchors.get(Anchor.PRODUCT_WEIGHT)
            ),
            product_instruction=self._product_instruction(
                document, anchors.get(Anchor.PRODUCT_INSTRUCTION)
            ),
            reference=self._reference(document, anchors.get(Anchor.REFERENCE)),
        )
        logger.debug("Extracted fields: %s", label.model_dump())
        return label

    def _product_type(self, document: NormalizedDocument, anchor: Position | None) -> str:
        if anchor is None:
            return ""
        for line in document[anchor.block]:
            product_type = find_product_type(line)
            if product_type:
                return product_type
        return ""

    def _to_address(self, document: NormalizedDocument, header: Position | None) -> str:
        """Recipient address: lines after the header up to the postal code.

        The walk stops before a delivery instruction line, which is printed
        right after the recipient block. A standalone postal-code block is
        the destination postal code field and ends the walk unappended.
        """
        if header is None:
            return ""

        parts = document[header.block][header.line + 1 :]
        if any(POSTAL_CODE_PATTERN.search(line) for line in parts):
            return _join_address(parts)

        for block in document[header.block + 1 :]:
            if len(block) == 1 and POSTAL_CODE_PATTERN.fullmatch(block[0].strip()):
                break
            for line in block:
                if find_instruction(line):
                    return _join_address(parts)
                parts.append(line)
                if POSTAL_CODE_PATTERN.search(line):
                    return _join_address(parts)

        return _join_address(parts)

    def _from_address(self, document: NormalizedDocument, header: Position | None) -> str:
        """Sender address: lines after the header up to the postal code.

        Dimension, weight and manifest blocks that sit between the header
        and the address are skipped.
        """
        if header is None:
            return ""

        parts = document[header.block][header.line + 1 :]
        if any(POSTAL_CODE_PATTERN.search(line) for line in parts):
            return _join_address(parts)

        for block in document[header.block + 1 :]:
            if _is_non_address_block(block):
                continue
            for line in block:
                parts.append(line)
                if POSTAL_CODE_PATTERN.search(line):
                    return _join_address(parts)

        return _join_address(parts)

    def _single_line(self, document: NormalizedDocument, anchor: Position | None) -> str:
        if anchor is None:
            return ""
        return _first_line(document[anchor.block])

    def _tracking_pin(self, document: NormalizedDocument, anchor: Position | None) -> str:
        if anchor is None:
            return ""
        line = _first_line(document[anchor.block])
        # Printed as "PIN/NIP: 1234 ..." near the bottom of some labels
        if ":" in line:
            return _after_last_colon(line)
        return line

    def _product_weight(self, document: NormalizedDocument, anchor: Position | None) -> str:
        """Weight value near the KG marker.

        The marker block's first line is the value unless it is the marker
        itself; then up to WEIGHT_LOOKBACK_BLOCKS earlier blocks are tried,
        skipping dimensions and the sender header.
        """
        if anchor is None:
            return ""

        first = _first_line(document[anchor.block])
        if not PRODUCT_WEIGHT_PATTERN.search(first):
            return first

        for offset in range(1, WEIGHT_LOOKBACK_BLOCKS + 1):
            index = anchor.block - offset
            if index < 0:
                break
            candidate = _first_line(document[index])
            if PRODUCT_DIMENSION_PATTERN.search(
                candidate
            ) or FROM_ADDRESS_HEADER_PATTERN.search(candidate):
                continue
            return candidate

        return ""

    def _product_instruction(
        self, document: NormalizedDocument, anchor: Position | None
    ) -> str:
        if anchor is None:
            return ""
        for line in document[anchor.block]:
            instruction = find_instruction(line)
            if instruction:
                return instruction
        return ""

    def _reference(self, document: NormalizedDocument, anchor: Position | None) -> str:
        if anchor is None:
            return ""
        return _after_last_colon(document[anchor.block][anchor.line])
