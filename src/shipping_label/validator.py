"""Minimum-content validation of scanned labels."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from rich.console import Console

from shipping_label.models.label import ExtractedLabel, LabelRecord

logger = logging.getLogger(__name__)

RESCAN_HINT = "please rescan and try again"


class Alert(Protocol):
    """Receives a signal whenever a label fails validation."""

    def signal(self) -> None: ...


class ConsoleBellAlert:
    """Audible alert ringing the terminal bell."""

    def __init__(self, console: Console | None = None):
        self._console = console or Console(stderr=True)

    def signal(self) -> None:
        self._console.bell()


@dataclass
class ValidationResult:
    """Outcome of validating one label: a record or a diagnostic."""

    missing_fields: list[str] = field(default_factory=list)
    record: LabelRecord | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        """True when the label passed validation."""
        return self.record is not None

    @property
    def output(self) -> str:
        """JSON record for valid labels, diagnostic message otherwise."""
        return self.record.to_json() if self.record is not None else self.message


class LabelValidator:
    """Checks that a scanned label carries enough content to be shipped."""

    def __init__(
        self,
        alert: Alert | None = None,
        min_to_address_length: int = 9,
        min_from_address_length: int = 11,
        min_barcode_length: int = 7,
    ):
        """
        Initialize the validator.

        Args:
            alert: Notified when validation fails. None disables alerts.
            min_to_address_length: Shortest acceptable recipient address.
            min_from_address_length: Shortest acceptable sender address.
            min_barcode_length: Shortest acceptable barcode value.
        """
        self._alert = alert
        self._min_lengths = {
            "toAddress": min_to_address_length,
            "fromAddress": min_from_address_length,
            "barCode": min_barcode_length,
        }

    def validate(self, label: ExtractedLabel, barcode_value: str) -> ValidationResult:
        """
        Validate a label and convert it to a structured record.

        Never raises: a failing label yields a diagnostic naming every
        missing or too-short field, and the alert is signalled.

        Args:
            label: Extracted text fields.
            barcode_value: Decoded barcode for the same scan.

        Returns:
            ValidationResult holding either the record or the diagnostic.
        """
        values = {
            "toAddress": label.to_address,
            "fromAddress": label.from_address,
            "barCode": barcode_value or "",
        }
        missing = [
            name
            for name, value in values.items()
            if not value.strip() or len(value) < self._min_lengths[name]
        ]

        if not missing:
            return ValidationResult(record=LabelRecord.from_scan(label, barcode_value))

        message = f"Missing or invalid fields: {', '.join(missing)}\n\n{RESCAN_HINT}"
        logger.info("Label failed validation: %s", ", ".join(missing))
        self._signal()
        return ValidationResult(missing_fields=missing, message=message)

    def _signal(self) -> None:
        if self._alert is None:
            return
        try:
            self._alert.signal()
        except Exception:
            logger.exception("Validation alert failed")
