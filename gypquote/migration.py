"""
Decode stored records / quotations, migrating older shapes to the current one.

Outcomes:
    empty       nothing stored under the key
    current     already in the current shape (totals still recomputed)
    migrated    an older shape was normalised; the caller should write it back
    unreadable  not JSON, or a shape we have no mapping for — the caller
                decides whether to reset the key

Nothing here raises for bad data. Only the documented legacy mappings are
applied; anything else is reported as unreadable rather than guessed at.
"""

import json
import logging
import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ValidationError

from .calculators.record import finalize_record
from .catalog import Catalog
from .config import settings
from .pricing_engine import finalize_quotation
from .schemas import SavedQuotation, SavedRecord

logger = logging.getLogger(__name__)

EMPTY = "empty"
CURRENT = "current"
MIGRATED = "migrated"
UNREADABLE = "unreadable"

COMPUTED_AREA_FIELDS = (
    "area", "totalSqft", "baseCost", "attachedBaseCost",
    "extrasCost", "extraExpensesCost", "totalCost",
)
TEXT_LIST_FIELDS = ("conditions", "paymentTerms", "excludingWork")


class DecodeResult(BaseModel):
    status: Literal["empty", "current", "migrated", "unreadable"]
    items: List[Any] = []
    changes: List[str] = []
    error: Optional[str] = None

    @property
    def readable(self) -> bool:
        return self.status != UNREADABLE

    @property
    def needs_write_back(self) -> bool:
        return self.status == MIGRATED


def new_id() -> str:
    return str(uuid.uuid4())


def timestamp(now: datetime = None) -> str:
    """Creation stamp stored on records and quotations, e.g. "19/10/2026, 14:05:09"."""
    return (now or datetime.now()).strftime("%d/%m/%Y, %H:%M:%S")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _load_json(raw: Optional[str]):
    """Returns (status, parsed, error)."""
    if raw is None or not raw.strip():
        return EMPTY, None, None
    try:
        return None, json.loads(raw), None
    except ValueError as e:
        return UNREADABLE, None, f"invalid JSON: {e}"


def _as_list(parsed, kind: str, changes: List[str]):
    """Legacy stores held a single object instead of a list. Returns None for any other shape."""
    if isinstance(parsed, list):
        if not all(isinstance(entry, dict) for entry in parsed):
            return None
        return parsed
    if isinstance(parsed, dict):
        changes.append(f"single {kind} object wrapped in a list")
        return [parsed]
    return None


# --- Records ---

def _migrate_record(raw: dict, changes: List[str], index: int) -> dict:
    record = dict(raw)
    if not record.get("id"):
        record["id"] = new_id()
        changes.append(f"record {index}: generated id")
    if not record.get("date"):
        record["date"] = timestamp()
        changes.append(f"record {index}: generated date")
    if "country" not in record:
        record["country"] = settings.DEFAULT_RECORD_COUNTRY
        changes.append(f"record {index}: country defaulted to {settings.DEFAULT_RECORD_COUNTRY}")
    if "clientName" not in record:
        record["clientName"] = "Unnamed"
        changes.append(f"record {index}: clientName defaulted")
    if not isinstance(record.get("areas"), list):
        record["areas"] = []
        changes.append(f"record {index}: areas reset to an empty list")
    if not isinstance(record.get("advance"), str):
        record["advance"] = str(record.get("advance") or "0")
        changes.append(f"record {index}: advance stored as text")
    for key in ("grandTotal", "balance"):
        if not _is_number(record.get(key)):
            changes.append(f"record {index}: {key} coerced to a number")
    for area_index, area in enumerate(record["areas"]):
        if isinstance(area, dict) and any(field not in area for field in COMPUTED_AREA_FIELDS):
            changes.append(f"record {index}: area {area_index} missing computed fields")
    return record


def decode_records(raw: Optional[str], catalog: Catalog = None) -> DecodeResult:
    """Decode the stored records list. Every returned record is freshly repriced."""
    status, parsed, error = _load_json(raw)
    if status is not None:
        if status == UNREADABLE:
            logger.error("Stored records are unreadable: %s", error)
        return DecodeResult(status=status, error=error)

    changes: List[str] = []
    entries = _as_list(parsed, "record", changes)
    if entries is None:
        error = f"unexpected stored shape: {type(parsed).__name__}"
        logger.error("Stored records are unreadable: %s", error)
        return DecodeResult(status=UNREADABLE, error=error)

    records = []
    for index, entry in enumerate(entries):
        try:
            record = SavedRecord.model_validate(_migrate_record(entry, changes, index))
        except ValidationError as e:
            logger.error("Stored record %d is unreadable: %s", index, e)
            return DecodeResult(status=UNREADABLE, error=f"record {index}: {e}")
        records.append(finalize_record(record, catalog))

    if changes:
        logger.warning("Migrated stored records: %s", "; ".join(changes))
        return DecodeResult(status=MIGRATED, items=records, changes=changes)
    return DecodeResult(status=CURRENT, items=records)


# --- Quotations ---

def _migrate_quotation(raw: dict, changes: List[str], index: int) -> dict:
    quotation = dict(raw)
    if not quotation.get("id"):
        quotation["id"] = new_id()
        changes.append(f"quotation {index}: generated id")
    if "country" not in quotation:
        quotation["country"] = settings.DEFAULT_QUOTATION_COUNTRY
        changes.append(f"quotation {index}: country defaulted to {settings.DEFAULT_QUOTATION_COUNTRY}")
    for key in TEXT_LIST_FIELDS:
        if isinstance(quotation.get(key), str):
            changes.append(f"quotation {index}: {key} split into lines")
    if "vat" in quotation and "taxAmount" not in quotation:
        changes.append(f"quotation {index}: vat renamed to taxAmount")
    if not _is_number(quotation.get("taxRatePercent")):
        changes.append(f"quotation {index}: taxRatePercent normalised")
    if not quotation.get("currencySymbol") or not quotation.get("taxLabel"):
        changes.append(f"quotation {index}: currency / tax label derived from country")
    items = quotation.get("items")
    if items is None:
        quotation["items"] = []
    elif not isinstance(items, list):
        raise ValueError("items is not a list")
    elif any(isinstance(item, dict) and ("desc" in item or "qty" in item) for item in items):
        changes.append(f"quotation {index}: items mapped from desc/qty/rate")
    return quotation


def decode_quotations(raw: Optional[str]) -> DecodeResult:
    """Decode the stored quotations list. Totals are recomputed on every load."""
    status, parsed, error = _load_json(raw)
    if status is not None:
        if status == UNREADABLE:
            logger.error("Stored quotations are unreadable: %s", error)
        return DecodeResult(status=status, error=error)

    changes: List[str] = []
    entries = _as_list(parsed, "quotation", changes)
    if entries is None:
        error = f"unexpected stored shape: {type(parsed).__name__}"
        logger.error("Stored quotations are unreadable: %s", error)
        return DecodeResult(status=UNREADABLE, error=error)

    quotations = []
    for index, entry in enumerate(entries):
        try:
            quotation = SavedQuotation.model_validate(_migrate_quotation(entry, changes, index))
        except (ValidationError, ValueError) as e:
            logger.error("Stored quotation %d is unreadable: %s", index, e)
            return DecodeResult(status=UNREADABLE, error=f"quotation {index}: {e}")
        quotations.append(finalize_quotation(quotation))

    if changes:
        logger.warning("Migrated stored quotations: %s", "; ".join(changes))
        return DecodeResult(status=MIGRATED, items=quotations, changes=changes)
    return DecodeResult(status=CURRENT, items=quotations)


def decode_draft(raw: Optional[str]) -> Optional[SavedQuotation]:
    """The in-progress quotation draft. A damaged draft is dropped, not reported."""
    status, parsed, error = _load_json(raw)
    if status == EMPTY:
        return None
    if status == UNREADABLE or not isinstance(parsed, dict):
        logger.warning("Discarding unreadable quotation draft: %s", error or type(parsed).__name__)
        return None
    try:
        return finalize_quotation(SavedQuotation.model_validate(parsed))
    except ValidationError as e:
        logger.warning("Discarding unreadable quotation draft: %s", e)
        return None
