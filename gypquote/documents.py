"""
Document views — the flattened data a renderer needs to print a measurement
record or a quotation.

No layout, no HTML: plain dicts of values. Money is carried both as a number
and as a two-decimal display string; rounding happens only in the display
string. Free-text sections pass through verbatim.
"""

from .calculators.record import balance_status
from .catalog import Catalog, DEFAULT_CATALOG, OTHER_MATERIAL
from .countries import currency_symbol, tax_label
from .pricing_engine import finalize_quotation
from .schemas import AreaMeasurement, SavedQuotation, SavedRecord
from .words import amount_in_words


def money(value: float) -> str:
    return f"{value:.2f}"


def material_display_name(area, catalog: Catalog = DEFAULT_CATALOG) -> str:
    """Custom materials show the typed name; some materials show their thickness."""
    if area.material == OTHER_MATERIAL:
        return area.custom_material_name or OTHER_MATERIAL
    option = catalog.material(area.material)
    if option and option.show_thickness:
        thickness = area.thickness if area.thickness is not None else catalog.default_thickness().mm
        return f"{area.material} ({thickness} mm)"
    return area.material


def _area_row(index: int, area: AreaMeasurement, catalog: Catalog) -> dict:
    additionals = [
        {
            "key": key,
            "label": catalog.additional_label(key),
            "rate": area.additional_rates.get(key, catalog.additional_rate(key)),
        }
        for key in area.enabled_additionals()
    ]
    return {
        "index": index,
        "title": area.title or "Unnamed Area",
        "size": f"{area.length or '-'} × {area.width or '-'} m",
        "material": material_display_name(area, catalog),
        "sqft": area.area,
        "sqft_display": money(area.area),
        "total_sqft": area.total_sqft,
        "additionals": additionals,
        "attached_rooms": len(area.attached_rooms),
        "cost": area.total_cost,
        "cost_display": money(area.total_cost),
    }


def record_document(record: SavedRecord, catalog: Catalog = None) -> dict:
    """Measurement record view. Expects a repriced record (as returned by the store)."""
    catalog = catalog or DEFAULT_CATALOG
    symbol = currency_symbol(record.country)
    return {
        "client_name": record.client_name or "Unnamed Client",
        "date": record.date,
        "country": record.country.value,
        "currency_symbol": symbol,
        "areas": [_area_row(i + 1, area, catalog) for i, area in enumerate(record.areas)],
        "grand_total": record.grand_total,
        "grand_total_display": money(record.grand_total),
        "advance": record.advance,
        "balance": record.balance,
        "balance_display": money(record.balance),
        "balance_status": balance_status(record.balance),
    }


def quotation_document(quotation: SavedQuotation) -> dict:
    """Quotation view with the total spelled out in words."""
    quotation = finalize_quotation(quotation)
    symbol = quotation.currency_symbol or currency_symbol(quotation.country)
    label = quotation.tax_label or tax_label(quotation.country)

    lines = []
    for i, item in enumerate(quotation.items):
        total = item.line_total()
        lines.append({
            "index": i + 1,
            "description": item.description,
            "quantity": item.quantity,
            "rate": item.unit_rate,
            "total": total,
            "total_display": money(total),
        })

    return {
        "date": quotation.date,
        "country": quotation.country.value,
        "client": quotation.client,
        "consultant": quotation.consultant,
        "project": quotation.project,
        "plot_no": quotation.plot_no,
        "quotation_no": quotation.quotation_no,
        "duration": quotation.duration,
        "cover_poster": quotation.cover_poster,
        "currency_symbol": symbol,
        "tax_label": label,
        "tax_rate_percent": quotation.tax_rate_percent,
        "lines": lines,
        "materials": [m.model_dump() for m in quotation.materials],
        "subtotal": quotation.subtotal,
        "subtotal_display": money(quotation.subtotal),
        "tax_amount": quotation.tax_amount,
        "tax_amount_display": money(quotation.tax_amount),
        "total": quotation.total,
        "total_display": money(quotation.total),
        "total_in_words": amount_in_words(quotation.total, symbol),
        "message": quotation.message,
        "standard_method": quotation.standard_method,
        "conditions": list(quotation.conditions),
        "payment_terms": list(quotation.payment_terms),
        "excluding_work": list(quotation.excluding_work),
    }
