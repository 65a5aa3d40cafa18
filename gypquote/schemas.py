"""
Record shapes exchanged with the persistence store, the input surface and
the document renderer.

Stored JSON is camelCase; attributes are snake_case. Numeric fields accept
whatever the user typed and degrade to 0 instead of failing validation, and
unknown keys from older app versions are kept so a load/save round trip never
drops user data.
"""

from typing import Annotated, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic.functional_validators import BeforeValidator

from .calculators.base import parse_number
from .config import settings
from .countries import Country, parse_country


def _to_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _to_int(value) -> int:
    return int(parse_number(value))


def _to_raw_number(value):
    """Keep what was typed (row identity is stable while editing); None becomes 0."""
    if value is None:
        return 0.0
    return value


def _to_percent(value) -> Optional[float]:
    """Tax rates were saved as 5, "5" or "5%" by different app versions."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    return parse_number(value)


def _to_lines(value) -> List[str]:
    """Text sections were once saved as one newline-joined string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [line for line in value.split("\n") if line.strip()]
    return [_to_text(line) for line in value]


def default_record_country() -> Country:
    """Country for a record that does not name one (DEFAULT_RECORD_COUNTRY)."""
    return parse_country(settings.DEFAULT_RECORD_COUNTRY, Country.INDIA)


def default_quotation_country() -> Country:
    return parse_country(settings.DEFAULT_QUOTATION_COUNTRY, Country.UAE)


Text = Annotated[str, BeforeValidator(_to_text)]
Number = Annotated[float, BeforeValidator(parse_number)]
Whole = Annotated[int, BeforeValidator(_to_int)]
RawNumber = Annotated[Union[float, str], BeforeValidator(_to_raw_number)]
Percent = Annotated[Optional[float], BeforeValidator(_to_percent)]
TextLines = Annotated[List[str], BeforeValidator(_to_lines)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoredModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    @field_validator("*", mode="before")
    @classmethod
    def _none_lists(cls, value, info):
        # Older records stored null for empty sub-lists
        field = cls.model_fields.get(info.field_name)
        if value is None and field is not None and field.default_factory is list:
            return []
        return value


# --- Measurement side ---

class AdhocEntry(CamelModel):
    """Ad-hoc priced line (bulk cutting or other custom work): length × runs × rate."""
    name: Text = ""
    length: Text = ""
    runs: Text = ""
    rate: Text = ""


class ExtraExpense(CamelModel):
    description: Text = ""
    amount: Text = ""


class AttachedRoom(StoredModel):
    """Sub-area priced with the base formula only and rolled into its parent."""
    title: Text = ""
    length: Text = ""
    width: Text = ""
    material: Text = ""
    custom_material_name: Optional[str] = None
    material_rate: Optional[Number] = None  # None: catalogue rate for the material
    thickness: Optional[Whole] = None  # None: thinnest catalogue tier
    thickness_rate: Optional[Number] = None  # None: catalogue default for the thickness

    # calculated
    room_sqft: Number = 0.0
    room_cost: Number = 0.0


class AreaMeasurement(StoredModel):
    title: Text = ""
    length: Text = ""
    width: Text = ""

    material: Text = ""
    custom_material_name: Optional[str] = None
    material_rate: Optional[Number] = None  # None: catalogue rate for the material
    thickness: Optional[Whole] = None  # None: thinnest catalogue tier
    thickness_rate: Optional[Number] = None

    additionals: Dict[str, bool] = Field(default_factory=dict)
    additional_rates: Dict[str, Number] = Field(default_factory=dict)
    additional_lengths: Dict[str, Text] = Field(default_factory=dict)

    bulk_cutting_entries: List[AdhocEntry] = Field(default_factory=list)
    other_custom_entries: List[AdhocEntry] = Field(default_factory=list)
    extra_expenses: List[ExtraExpense] = Field(default_factory=list)
    attached_rooms: List[AttachedRoom] = Field(default_factory=list)

    # calculated, never edited directly
    area: Number = 0.0
    total_sqft: Number = 0.0
    base_cost: Number = 0.0
    attached_base_cost: Number = 0.0
    extras_cost: Number = 0.0
    extra_expenses_cost: Number = 0.0
    total_cost: Number = 0.0

    @field_validator("additionals", mode="before")
    @classmethod
    def _additionals_from_keys(cls, value):
        if value is None:
            return {}
        if isinstance(value, (list, tuple, set)):
            return {str(key): True for key in value}
        if isinstance(value, dict):
            return {key: bool(enabled) for key, enabled in value.items()}
        return value

    @field_validator("additional_rates", "additional_lengths", mode="before")
    @classmethod
    def _none_maps(cls, value):
        return {} if value is None else value

    def enabled_additionals(self) -> List[str]:
        return [key for key, enabled in self.additionals.items() if enabled]


class SavedRecord(StoredModel):
    """A client's measurement job."""
    id: Text = ""
    date: Text = ""
    country: Country = Field(default_factory=default_record_country)
    client_name: Text = ""
    areas: List[AreaMeasurement] = Field(default_factory=list)
    grand_total: Number = 0.0
    advance: Text = "0"
    balance: Number = 0.0

    @field_validator("country", mode="before")
    @classmethod
    def _country(cls, value):
        return parse_country(value, default_record_country())


class RecordTotals(CamelModel):
    grand_total: float
    balance: float


# --- Quotation side ---

class QuotationItem(CamelModel):
    description: Text = Field("", validation_alias=AliasChoices("description", "desc"))
    quantity: RawNumber = Field(1.0, validation_alias=AliasChoices("quantity", "qty"))
    unit_rate: RawNumber = Field(0.0, validation_alias=AliasChoices("unitRate", "unit_rate", "rate"))

    def line_total(self) -> float:
        """quantity × unitRate; unparseable values (or an overflowing product) count as 0."""
        return parse_number(parse_number(self.quantity) * parse_number(self.unit_rate))


class MaterialEntry(CamelModel):
    """Common-materials catalogue entry on a quotation. Descriptive only, not priced."""
    name: Text = ""
    description: Text = ""
    images: List[str] = Field(default_factory=list)

    @field_validator("images", mode="before")
    @classmethod
    def _none_images(cls, value):
        return [] if value is None else value


class SavedQuotation(StoredModel):
    id: Text = ""
    date: Text = ""
    country: Country = Field(default_factory=default_quotation_country)
    cover_poster: Optional[str] = None

    client: Text = ""
    consultant: Text = ""
    project: Text = ""
    plot_no: Text = ""
    quotation_no: Text = ""
    duration: Text = ""

    items: List[QuotationItem] = Field(default_factory=list)
    materials: List[MaterialEntry] = Field(default_factory=list)

    subtotal: Number = 0.0
    tax_amount: Number = Field(0.0, validation_alias=AliasChoices("taxAmount", "tax_amount", "vat"))
    total: Number = 0.0
    tax_rate_percent: Percent = None
    tax_rate_overridden: bool = False
    currency_symbol: Optional[str] = None
    tax_label: Optional[str] = None

    message: Text = ""
    standard_method: Text = ""
    conditions: TextLines = Field(default_factory=list)
    payment_terms: TextLines = Field(default_factory=list)
    excluding_work: TextLines = Field(default_factory=list)

    @field_validator("country", mode="before")
    @classmethod
    def _country(cls, value):
        return parse_country(value, default_quotation_country())


class QuotationTotals(CamelModel):
    subtotal: float
    tax_amount: float
    total: float
