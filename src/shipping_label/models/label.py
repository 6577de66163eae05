"""Pydantic models for shipping label data."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExtractedLabel(BaseModel):
    """Fields extracted from the text of one shipping label.

    Every field is a string; a field that could not be found is empty.
    """

    product_type: str = Field(default="", description="Service level, e.g. Priority")
    to_address: str = Field(default="", description="Recipient address")
    dest_postal_code: str = Field(default="", description="Destination postal code")
    tracking_pin: str = Field(default="", description="16-digit tracking PIN")
    from_address: str = Field(default="", description="Sender address")
    product_dimension: str = Field(default="", description="Parcel dimensions in cm")
    product_weight: str = Field(default="", description="Parcel weight value in kg")
    product_instruction: str = Field(default="", description="Delivery instruction")
    reference: str = Field(default="", description="Sender reference")

    @property
    def is_empty(self) -> bool:
        """True when no field was extracted."""
        return not any(self.model_dump().values())


class ScanResult(BaseModel):
    """Aggregated outcome of analyzing one frame."""

    label: ExtractedLabel = Field(
        default_factory=ExtractedLabel, description="Fields extracted from text"
    )
    barcode_value: str = Field(default="", description="First decoded barcode")

    @property
    def is_empty(self) -> bool:
        """True when neither text fields nor a barcode were found."""
        return self.label.is_empty and not self.barcode_value


class LabelRecord(BaseModel):
    """Structured label record handed to downstream systems.

    Serializes with camelCase keys (``productType``, ``trackPin``,
    ``barCode``...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_type: str = ""
    to_address: str = ""
    dest_postal_code: str = ""
    track_pin: str = ""
    bar_code: str = ""
    from_address: str = ""
    product_dimension: str = ""
    product_weight: str = ""
    product_instruction: str = ""
    reference: str = ""

    @classmethod
    def from_scan(cls, label: ExtractedLabel, barcode_value: str) -> "LabelRecord":
        """Build a record from extracted fields and the frame's barcode."""
        weight = f"{label.product_weight}kg" if label.product_weight else ""
        return cls(
            product_type=label.product_type,
            to_address=label.to_address,
            dest_postal_code=label.dest_postal_code,
            track_pin=label.tracking_pin,
            bar_code=barcode_value,
            from_address=label.from_address,
            product_dimension=label.product_dimension,
            product_weight=weight,
            product_instruction=label.product_instruction,
            reference=label.reference,
        )

    def to_json(self) -> str:
        """Pretty-printed JSON with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=2)
