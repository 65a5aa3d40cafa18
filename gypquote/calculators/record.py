"""
Record aggregator — priced areas to a record-level grand total and balance.

No rounding here; two-decimal rounding is display formatting only.
"""

from typing import List

from ..catalog import Catalog
from ..schemas import AreaMeasurement, RecordTotals, SavedRecord
from .base import parse_number
from .measurement import reprice_areas

BALANCE_DUE = "due"
BALANCE_SETTLED = "settled"
BALANCE_OVERPAID = "overpaid"


def aggregate_record(areas: List[AreaMeasurement], advance) -> RecordTotals:
    """
    grand_total = Σ area.total_cost
    balance     = grand_total - advance   (advance text, invalid/missing is 0)

    A negative balance means the client overpaid; it is not an error.
    """
    grand_total = sum(area.total_cost for area in areas)
    balance = grand_total - parse_number(advance)
    return RecordTotals(grand_total=grand_total, balance=balance)


def balance_status(balance: float) -> str:
    """Which display style the caller should use for a balance."""
    if balance > 0:
        return BALANCE_DUE
    if balance == 0:
        return BALANCE_SETTLED
    return BALANCE_OVERPAID


def finalize_record(record: SavedRecord, catalog: Catalog = None) -> SavedRecord:
    """Reprice every area and recompute the totals. Run before a record is read back or stored."""
    areas = reprice_areas(record.areas, catalog)
    totals = aggregate_record(areas, record.advance)
    return record.model_copy(deep=True, update={
        "areas": areas,
        "advance": record.advance or "0",
        "grand_total": totals.grand_total,
        "balance": totals.balance,
    })
