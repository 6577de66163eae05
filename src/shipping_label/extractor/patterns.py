"""Regex patterns and vocabularies for shipping label parsing."""

import re

# Service levels printed on the label
PRODUCT_TYPES: tuple[str, ...] = (
    "Priority",
    "Regular Parcel",
    "Xpresspost",
    "Expedited Parcel",
)

# Delivery instructions, matched case-insensitively against whole lines
PRODUCT_INSTRUCTIONS: tuple[str, ...] = (
    "SIGNATURE",
    "18+ SIGNATURE",
    "19+ SIGNATURE",
    "21+ SIGNATURE",
    "CARD FOR PICKUP",
    "DELIVER TO PO",
    "LEAVE AT THE DOOR",
    "DO NOT SAFE DROP",
)

# Bilingual "TO / À" recipient header
TO_ADDRESS_HEADER_PATTERN: re.Pattern = re.compile(r"TO.*[AÀÅ]", re.IGNORECASE)

# Bilingual "FROM / DE" sender header
FROM_ADDRESS_HEADER_PATTERN: re.Pattern = re.compile(r"FROM.*DE", re.IGNORECASE)

# Canadian postal code (A1A 1A1); OCR often reads the digit 0 as the letter O
POSTAL_CODE_PATTERN: re.Pattern = re.compile(
    r"[a-zA-Z][O0-9][a-zA-Z][\\ \-]?[O0-9][a-zA-Z][O0-9]"
)

# Tracking PIN printed as four groups of four digits
TRACKING_PIN_PATTERN: re.Pattern = re.compile(r"\d\d\d\d\s\d\d\d\d\s\d\d\d\d\s\d\d\d\d")

# Parcel dimensions, e.g. 30x20x10cm
PRODUCT_DIMENSION_PATTERN: re.Pattern = re.compile(r"\d*x\d*x\d*cm")

# Weight unit marker; the numeric value usually sits in an earlier block
PRODUCT_WEIGHT_PATTERN: re.Pattern = re.compile(r"KG")

# Bare weight value, e.g. 1.250
PRODUCT_WEIGHT_VALUE_PATTERN: re.Pattern = re.compile(r"\d*[.]\d\d\d")

# Bilingual "Ref / Réf" sender reference
REFERENCE_PATTERN: re.Pattern = re.compile(r"Ref.*R[eé]f", re.IGNORECASE)

# Marker of the manifest block printed between sender header and address
MANIFEST_PATTERN: re.Pattern = re.compile(r"MANIFEST", re.IGNORECASE)

# Number of blocks searched backwards from the KG marker for the weight value
WEIGHT_LOOKBACK_BLOCKS: int = 3


def find_product_type(line: str) -> str | None:
    """Return the first service level contained in the line."""
    for product_type in PRODUCT_TYPES:
        if product_type in line:
            return product_type
    return None


def find_instruction(line: str) -> str | None:
    """Return the delivery instruction the whole line spells, ignoring case."""
    folded = line.casefold()
    for instruction in PRODUCT_INSTRUCTIONS:
        if folded == instruction.casefold():
            return instruction
    return None
