"""
Quotation pricing — line items and a tax rate to subtotal / tax / total.

Pure math:
    subtotal   = Σ quantity × unit_rate
    tax_amount = subtotal × tax_rate_percent / 100
    total      = subtotal + tax_amount

The three are always recomputed together. Rows with a non-numeric quantity
or rate price as 0 but are never dropped, so row positions stay stable while
the user is editing.
"""

from typing import List

from . import lists
from .calculators.base import parse_number
from .countries import currency_symbol, default_tax_rate, parse_country, tax_label
from .schemas import (
    MaterialEntry, QuotationItem, QuotationTotals, SavedQuotation, default_quotation_country,
)

DEFAULT_TEMPLATE = {
    "message": (
        "Dear Sir/Madam,\n\n"
        "Thank you for considering ASSAQF Technical Services LLC for your gypsum and "
        "interior works requirements. We truly appreciate the opportunity to provide you "
        "with our quotation. With over 25+ years of experience, Assaqf is committed to "
        "delivering premium quality workmanship, timely execution, and elegant interior "
        "solutions. Below is the detailed cost breakdown for the proposed scope of work."
    ),
    "standard_method": (
        "We used ceiling materials details frame with Channels, channels section to section "
        "40cm distance, intermediate 80cm distance, angle support 100 meter and perimeter "
        "in wallside. Powder joint compound two coat with fiber."
    ),
    "conditions": [
        "Electricity, Water and adequate work space will be provided by the client.",
        "Any other site obstacles will be handled by the client.",
        "If plywood work is required, client will provide the plywood materials.",
    ],
    "payment_terms": [
        "50% Advance",
        "40% After framing",
        "Payments should clear within 10 days",
    ],
    "excluding_work": [
        "Electrical work",
        "Civil work",
        "Painting work",
    ],
}


def blank_item() -> QuotationItem:
    return QuotationItem(description="", quantity=1, unit_rate=0)


class PricingEngine:
    """
    Quotation financial model.
    Stateless — one instance can price any number of quotations.
    """

    def price(self, items: List[QuotationItem], tax_rate_percent) -> QuotationTotals:
        """
        Subtotal, tax and total for a list of items at a tax rate (negative
        rates count as 0). A subtotal or tax that overflows to infinity
        counts as 0, like any other unusable number.
        """
        subtotal = parse_number(self._calculate_subtotal(items))
        tax_amount = parse_number(subtotal * self._clamp_rate(tax_rate_percent) / 100.0)
        return QuotationTotals(
            subtotal=subtotal,
            tax_amount=tax_amount,
            total=parse_number(subtotal + tax_amount),
        )

    def _calculate_subtotal(self, items: List[QuotationItem]) -> float:
        return sum(item.line_total() for item in items)

    def _clamp_rate(self, tax_rate_percent) -> float:
        return max(parse_number(tax_rate_percent), 0.0)

    def finalize(self, quotation: SavedQuotation) -> SavedQuotation:
        """
        Recompute subtotal, tax and total together, and fill in the country
        labels / default tax rate if the quotation does not carry them yet.
        """
        country = quotation.country
        rate = quotation.tax_rate_percent
        if rate is None:
            rate = default_tax_rate(country)
        # The stored rate must be the one the tax was computed with
        rate = self._clamp_rate(rate)
        totals = self.price(quotation.items, rate)
        return quotation.model_copy(deep=True, update={
            "tax_rate_percent": rate,
            "currency_symbol": quotation.currency_symbol or currency_symbol(country),
            "tax_label": quotation.tax_label or tax_label(country),
            "subtotal": totals.subtotal,
            "tax_amount": totals.tax_amount,
            "total": totals.total,
        })

    def new_quotation(self, country=None) -> SavedQuotation:
        """
        Fresh quotation from the default template, with one blank item row.
        Without a country the configured default quotation country is used.
        """
        country = parse_country(country, default_quotation_country())
        quotation = SavedQuotation(
            country=country,
            items=[blank_item()],
            tax_rate_percent=default_tax_rate(country),
            message=DEFAULT_TEMPLATE["message"],
            standard_method=DEFAULT_TEMPLATE["standard_method"],
            conditions=list(DEFAULT_TEMPLATE["conditions"]),
            payment_terms=list(DEFAULT_TEMPLATE["payment_terms"]),
            excluding_work=list(DEFAULT_TEMPLATE["excluding_work"]),
        )
        return self.finalize(quotation)

    def set_country(self, quotation: SavedQuotation, country) -> SavedQuotation:
        """
        Change country: currency and tax label always follow it. The tax rate
        follows it only until the user has edited the rate themselves.
        """
        country = parse_country(country)
        changes = {
            "country": country,
            "currency_symbol": currency_symbol(country),
            "tax_label": tax_label(country),
        }
        if not quotation.tax_rate_overridden:
            changes["tax_rate_percent"] = default_tax_rate(country)
        return self.finalize(quotation.model_copy(deep=True, update=changes))

    def set_tax_rate(self, quotation: SavedQuotation, tax_rate_percent) -> SavedQuotation:
        edited = quotation.model_copy(deep=True, update={
            "tax_rate_percent": self._clamp_rate(tax_rate_percent),
            "tax_rate_overridden": True,
        })
        return self.finalize(edited)


def price_quotation(items: List[QuotationItem], tax_rate_percent) -> QuotationTotals:
    return PricingEngine().price(items, tax_rate_percent)


def finalize_quotation(quotation: SavedQuotation) -> SavedQuotation:
    return PricingEngine().finalize(quotation)


# --- Per-row section edits ---

def _text_row(value) -> str:
    return "" if value is None else str(value)


SECTION_ROWS = {
    # section: (row parser, placeholder row when the last one is removed)
    "items": (QuotationItem.model_validate, blank_item),
    "materials": (MaterialEntry.model_validate, None),
    "conditions": (_text_row, lambda: ""),
    "payment_terms": (_text_row, lambda: ""),
    "excluding_work": (_text_row, lambda: ""),
}


def edit_section(quotation: SavedQuotation, section: str, action: str,
                 index: int = None, value=None) -> SavedQuotation:
    """
    Append / insert / update / remove one row of a quotation section and
    return the repriced quotation. Raises ValueError for an unknown section
    or action and IndexError for a row that does not exist.
    """
    if section not in SECTION_ROWS:
        raise ValueError(f"Unknown section: {section}. Available: {list(SECTION_ROWS.keys())}")
    parse_row, placeholder = SECTION_ROWS[section]
    rows = getattr(quotation, section)

    if action == "append":
        rows = lists.append_item(rows, parse_row(value if value is not None else _empty_row(section)))
    elif action == "insert":
        rows = lists.insert_item(rows, index or 0, parse_row(value if value is not None else _empty_row(section)))
    elif action == "update":
        rows = lists.update_item(rows, index, parse_row(value))
    elif action == "remove":
        rows = lists.remove_item(rows, index, placeholder)
    else:
        raise ValueError(f"Unknown action: {action}. Available: append, insert, update, remove")

    return finalize_quotation(quotation.model_copy(deep=True, update={section: rows}))


def _empty_row(section: str):
    if section == "items":
        return blank_item().model_dump()
    if section == "materials":
        return {}
    return ""
