"""
Country-dependent labels — the only locale logic in the engine.

Currency symbol, tax label and the default tax rate are resolved once from
the country and carried as plain values afterwards.
"""

import enum


class Country(str, enum.Enum):
    UAE = "UAE"
    INDIA = "India"


CURRENCY_SYMBOLS = {
    Country.INDIA: "₹",
    Country.UAE: "AED",
}

TAX_LABELS = {
    Country.INDIA: "GST",
    Country.UAE: "VAT",
}

DEFAULT_TAX_RATES = {
    Country.INDIA: 18.0,
    Country.UAE: 5.0,
}


def parse_country(value, default: Country = Country.UAE) -> Country:
    """Resolve a stored/entered country string. Unknown values fall back to default."""
    if isinstance(value, Country):
        return value
    text = str(value or "").strip().lower()
    for country in Country:
        if country.value.lower() == text:
            return country
    return default


def currency_symbol(country: Country) -> str:
    return CURRENCY_SYMBOLS[country]


def tax_label(country: Country) -> str:
    return TAX_LABELS[country]


def default_tax_rate(country: Country) -> float:
    """Tax rate applied when a quotation is created for a country (India 18, UAE 5)."""
    return DEFAULT_TAX_RATES[country]
