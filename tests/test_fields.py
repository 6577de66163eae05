"""Tests for anchor discovery and field extraction."""

import pytest

from shipping_label.extractor.fields import Anchor, FieldExtractor, Position, find_anchors
from shipping_label.extractor.normalizer import normalize
from shipping_label.models.label import ExtractedLabel


@pytest.fixture
def extractor():
    return FieldExtractor()


class TestFindAnchors:
    """Test find_anchors()."""

    def test_empty_document(self):
        """Test no anchors in an empty document."""
        assert find_anchors([]) == {}

    def test_full_label(self, sample_label_blocks):
        """Test every anchor is located on a complete label."""
        anchors = find_anchors(normalize(sample_label_blocks))

        assert anchors == {
            Anchor.FROM_ADDRESS_HEADER: Position(0, 0),
            Anchor.PRODUCT_DIMENSION: Position(1, 0),
            Anchor.PRODUCT_WEIGHT: Position(3, 0),
            Anchor.PRODUCT_TYPE: Position(6, 0),
            Anchor.TO_ADDRESS_HEADER: Position(7, 0),
            Anchor.PRODUCT_INSTRUCTION: Position(9, 0),
            Anchor.POSTAL_CODE: Position(10, 0),
            Anchor.TRACKING_PIN: Position(11, 0),
            Anchor.REFERENCE: Position(12, 0),
        }

    def test_first_match_wins(self):
        """Test later matches never replace the first one."""
        anchors = find_anchors([["K1A 0B1"], ["H3B 2Y5"], ["Xpresspost"], ["Priority"]])
        assert anchors[Anchor.POSTAL_CODE] == Position(0, 0)
        assert anchors[Anchor.PRODUCT_TYPE] == Position(2, 0)

    def test_header_line_index_recorded(self):
        """Test header anchors remember the line inside the block."""
        anchors = find_anchors([["ACME", "FROM / DE:", "1 RUE X"]])
        assert anchors[Anchor.FROM_ADDRESS_HEADER] == Position(0, 1)

    def test_single_line_fields_ignored_in_multiline_blocks(self):
        """Test postal code, PIN and dimensions need single-line blocks."""
        anchors = find_anchors([["K1A 0B1", "1234 5678 9012 3456", "10x10x10cm"]])
        assert Anchor.POSTAL_CODE not in anchors
        assert Anchor.TRACKING_PIN not in anchors
        assert Anchor.PRODUCT_DIMENSION not in anchors

    def test_postal_code_accepts_letter_o_for_zero(self):
        """Test OCR's O-for-0 confusion still matches a postal code."""
        assert find_anchors([["K1A OB1"]])[Anchor.POSTAL_CODE] == Position(0, 0)
        assert find_anchors([["KOA-1B0"]])[Anchor.POSTAL_CODE] == Position(0, 0)


class TestFieldExtractor:
    """Test FieldExtractor.extract()."""

    def test_empty_document(self, extractor):
        """Test empty or missing documents yield an all-empty label."""
        assert extractor.extract([]) == ExtractedLabel()
        assert extractor.extract(None) == ExtractedLabel()

    def test_postal_code_only(self, extractor):
        """Test a lone postal code fills only destPostalCode."""
        label = extractor.extract([["A1B 2C3"]])
        assert label == ExtractedLabel(dest_postal_code="A1B 2C3")

    def test_to_address_ends_at_postal_code_block(self, extractor):
        """Test the recipient address walk stops at the postal code block."""
        label = extractor.extract([["TO A"], ["123 Main St"], ["A1B 2C3"]])
        assert label.to_address == "123 Main St"
        assert label.dest_postal_code == "A1B 2C3"

    def test_full_label(self, extractor, sample_label_blocks):
        """Test every field on a complete label."""
        label = extractor.extract(normalize(sample_label_blocks))

        assert label.product_type == "Priority"
        assert label.to_address == "JANE DOE, 123 MAIN ST, OTTAWA ON K1A 0B1"
        assert label.dest_postal_code == "K1A 0B1"
        assert label.tracking_pin == "1234 5678 9012 3456"
        assert label.from_address == "ACME SUPPLY CO, 55 KING ST W, MONTREAL QC H3B 2Y5"
        assert label.product_dimension == "30x20x10cm"
        assert label.product_weight == "2.500"
        assert label.product_instruction == "18+ SIGNATURE"
        assert label.reference == "INV-2024-17"

    def test_extract_is_idempotent(self, extractor, sample_label_blocks):
        """Test extracting twice from one document gives the same label."""
        document = normalize(sample_label_blocks)
        assert extractor.extract(document) == extractor.extract(document)

    def test_address_in_header_block(self, extractor):
        """Test address lines sharing the header block are used directly."""
        label = extractor.extract(
            [["TO / À:", "JANE DOE", "OTTAWA ON K1A 0B1"], ["OTHER", "TEXT"]]
        )
        assert label.to_address == "JANE DOE, OTTAWA ON K1A 0B1"

    def test_to_address_stops_before_instruction(self, extractor):
        """Test the instruction block is not absorbed into the address."""
        label = extractor.extract(
            [["TO A"], ["JANE DOE", "123 MAIN ST"], ["SIGNATURE"], ["EXTRA", "LINES"]]
        )
        assert label.to_address == "JANE DOE, 123 MAIN ST"
        assert label.product_instruction == "SIGNATURE"

    def test_to_address_without_postal_code_runs_to_end(self, extractor):
        """Test a missing postal code consumes the rest of the document."""
        label = extractor.extract([["TO A"], ["JANE DOE", "123 MAIN ST"], ["OTTAWA"]])
        assert label.to_address == "JANE DOE, 123 MAIN ST, OTTAWA"

    def test_from_address_skips_non_address_blocks(self, extractor):
        """Test dimension, weight and manifest blocks are skipped."""
        label = extractor.extract(
            [
                ["FROM / DE"],
                ["15x15x15cm"],
                ["1.250"],
                ["KG"],
                ["manifest"],
                ["ACME", "MONTREAL QC H3B 2Y5"],
                ["LATER", "BLOCK"],
            ]
        )
        assert label.from_address == "ACME, MONTREAL QC H3B 2Y5"

    def test_address_lines_are_trimmed(self, extractor):
        """Test stray whitespace around address lines is removed."""
        label = extractor.extract(
            [
                ["TO / À:  ", "  JANE DOE "],
                [" OTTAWA ON K1A 0B1  "],
                ["FROM / DE:"],
                ["  ACME SUPPLY CO", "MONTREAL QC H3B 2Y5 "],
            ]
        )
        assert label.to_address == "JANE DOE, OTTAWA ON K1A 0B1"
        assert label.from_address == "ACME SUPPLY CO, MONTREAL QC H3B 2Y5"

    def test_tracking_pin_without_label(self, extractor):
        """Test a bare PIN line is used as is."""
        label = extractor.extract([["1234 5678 9012 3456"]])
        assert label.tracking_pin == "1234 5678 9012 3456"

    def test_weight_value_in_marker_block(self, extractor):
        """Test a value on the first line of the marker block is used."""
        label = extractor.extract([["1.250", "KG"]])
        assert label.product_weight == "1.250"

    def test_weight_lookback_skips_dimensions(self, extractor):
        """Test the backward search passes over dimension blocks."""
        label = extractor.extract([["0.750"], ["30x20x10cm"], ["KG"]])
        assert label.product_weight == "0.750"

    def test_weight_lookback_rejects_sender_header(self, extractor):
        """Test the sender header is never taken as the weight."""
        label = extractor.extract([["FROM / DE"], ["KG"]])
        assert label.product_weight == ""

    def test_weight_lookback_is_bounded(self, extractor):
        """Test values more than three blocks back are not used."""
        label = extractor.extract(
            [["1.000"], ["30x20x10cm"], ["20x20x20cm"], ["10x10x10cm"], ["KG"]]
        )
        assert label.product_weight == ""

    def test_instruction_matches_whole_line_ignoring_case(self, extractor):
        """Test instructions are canonical and need an exact line match."""
        assert extractor.extract([["leave at the door"]]).product_instruction == (
            "LEAVE AT THE DOOR"
        )
        assert extractor.extract([["SIGNATURE REQUIRED"]]).product_instruction == ""

    def test_product_type_inside_line(self, extractor):
        """Test product types are found inside longer lines."""
        label = extractor.extract([["Canada Post Expedited Parcel"]])
        assert label.product_type == "Expedited Parcel"

    def test_reference_without_colon(self, extractor):
        """Test a reference line without a colon is kept whole."""
        label = extractor.extract([["Ref / Réf INV-9"]])
        assert label.reference == "Ref / Réf INV-9"

    def test_noise_yields_empty_fields(self, extractor):
        """Test unrelated text never raises and yields empty fields."""
        label = extractor.extract([["lorem ipsum"], [], ["", "dolor"]])
        assert label.is_empty
