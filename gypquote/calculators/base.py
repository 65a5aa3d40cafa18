"""
Shared base for the pricing calculators.

Input arrives as text typed by the user, often half-finished ("3.", "", "abc").
Every parse here degrades to a default instead of raising, so a record can be
priced at any point while it is being edited.
"""

import math
from abc import ABC, abstractmethod

from ..catalog import Catalog, DEFAULT_CATALOG

# Linear meter-to-foot factor. Squared for floor area.
METER_TO_FEET = 3.28084

# Quantity factor for additional work. Single power and rounded, unlike the area
# factor above; existing saved totals depend on it, so it is kept as is.
ADDITIONAL_QTY_FACTOR = 3.28


def parse_number(value, default: float = 0.0) -> float:
    """Parse a numeric value from user input. Blank, invalid and non-finite input gives default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return default
        try:
            number = float(text)
        except (ValueError, TypeError):
            return default
    if not math.isfinite(number):
        return default
    return number


def parse_non_negative(value, default: float = 0.0) -> float:
    """Parse a dimension. Negative values are treated as 0."""
    return max(parse_number(value, default), 0.0)


class BaseCalculator(ABC):
    """All calculators are parameterized over a Catalog and never mutate their input."""

    def __init__(self, catalog: Catalog = None):
        self.catalog = catalog or DEFAULT_CATALOG

    @abstractmethod
    def calculate(self, *args, **kwargs):
        """Returns a new, fully computed model."""
        pass

    # --- Helper methods for all calculators ---

    def parse_number(self, value, default: float = 0.0) -> float:
        return parse_number(value, default)

    def parse_meters(self, value) -> float:
        """Parse a length/width in meters. Missing or invalid is 0."""
        return parse_non_negative(value)

    def sqft_from_meters(self, length_m: float, width_m: float) -> float:
        """Floor area in square feet from meter dimensions."""
        return length_m * width_m * METER_TO_FEET * METER_TO_FEET

    def additional_quantity(self, length_m: float, width_m: float) -> float:
        """Quantity that additional-work rates are charged against."""
        return length_m * width_m * ADDITIONAL_QTY_FACTOR
