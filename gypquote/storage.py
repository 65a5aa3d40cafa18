"""
Record store — saved measurement records, quotations and the quotation draft.

A thin adapter over the key/value table. The pricing engine never touches
it; everything written here is repriced first, so stored totals always match
their inputs. Other entries in a list are written back exactly as they were
read (a delete or an edit never rewrites its neighbours).
"""

import json
import logging
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from . import models
from .calculators.record import finalize_record
from .catalog import Catalog, get_catalog
from .database import get_db
from .migration import (
    DecodeResult, decode_draft, decode_quotations, decode_records, new_id, timestamp,
)
from .pricing_engine import finalize_quotation
from .schemas import SavedQuotation, SavedRecord

logger = logging.getLogger(__name__)


class UnreadableStorage(Exception):
    """Stored data under a key could not be decoded; it must be reset before it can be changed."""

    def __init__(self, key: str, error: Optional[str]):
        super().__init__(f"stored {key} are unreadable: {error}")
        self.key = key
        self.error = error


def _dump(entries) -> str:
    return json.dumps(entries, ensure_ascii=False)


def _to_json(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


class RecordStore:
    def __init__(self, db: Session, catalog: Catalog = None):
        self.db = db
        self.catalog = catalog

    # --- raw key/value access ---

    def _get(self, key: str) -> Optional[str]:
        entry = self.db.query(models.StorageEntry).filter(models.StorageEntry.key == key).first()
        return entry.value if entry else None

    def _set(self, key: str, value: str) -> None:
        entry = self.db.query(models.StorageEntry).filter(models.StorageEntry.key == key).first()
        if entry:
            entry.value = value
        else:
            self.db.add(models.StorageEntry(key=key, value=value))
        self.db.commit()

    def reset(self, key: str) -> None:
        """Drop everything stored under a key (used after an unreadable load)."""
        entry = self.db.query(models.StorageEntry).filter(models.StorageEntry.key == key).first()
        if entry:
            self.db.delete(entry)
            self.db.commit()
        logger.warning("Storage key %s reset", key)

    def _raw_entries(self, key: str, result: DecodeResult) -> List[dict]:
        """
        The stored list as plain dicts. Call after load_*, which has already
        written back any migration. Raises UnreadableStorage if the key cannot
        be decoded.
        """
        if not result.readable:
            raise UnreadableStorage(key, result.error)
        raw = self._get(key)
        return json.loads(raw) if raw else []

    # --- measurement records ---

    def load_records(self) -> DecodeResult:
        """All records, freshly repriced. Migrated shapes are written back in the current shape."""
        result = decode_records(self._get(models.RECORDS_KEY), self.catalog)
        if result.needs_write_back:
            self._set(models.RECORDS_KEY, _dump([_to_json(r) for r in result.items]))
            logger.info("Wrote back %d migrated records", len(result.items))
        return result

    def get_record(self, record_id: str) -> Optional[SavedRecord]:
        result = self.load_records()
        if not result.readable:
            raise UnreadableStorage(models.RECORDS_KEY, result.error)
        for record in result.items:
            if record.id == record_id:
                return record
        return None

    def save_record(self, record: SavedRecord) -> SavedRecord:
        """
        Create (no id, or an id not stored yet) or fully replace an existing record.
        A replaced record keeps its original id and date.
        """
        entries = self._raw_entries(models.RECORDS_KEY, self.load_records())
        priced = finalize_record(record, self.catalog)

        for index, entry in enumerate(entries):
            if priced.id and entry.get("id") == priced.id:
                priced = priced.model_copy(update={"date": entry.get("date") or priced.date})
                entries[index] = _to_json(priced)
                self._set(models.RECORDS_KEY, _dump(entries))
                logger.info("Replaced record %s (%s)", priced.id, priced.client_name)
                return priced

        priced = priced.model_copy(update={
            "id": priced.id or new_id(),
            "date": priced.date or timestamp(),
        })
        entries.append(_to_json(priced))
        self._set(models.RECORDS_KEY, _dump(entries))
        logger.info("Created record %s (%s)", priced.id, priced.client_name)
        return priced

    def delete_record(self, record_id: str) -> bool:
        entries = self._raw_entries(models.RECORDS_KEY, self.load_records())
        remaining = [entry for entry in entries if entry.get("id") != record_id]
        if len(remaining) == len(entries):
            return False
        self._set(models.RECORDS_KEY, _dump(remaining))
        logger.info("Deleted record %s", record_id)
        return True

    # --- quotations ---

    def load_quotations(self) -> DecodeResult:
        result = decode_quotations(self._get(models.QUOTATIONS_KEY))
        if result.needs_write_back:
            self._set(models.QUOTATIONS_KEY, _dump([_to_json(q) for q in result.items]))
            logger.info("Wrote back %d migrated quotations", len(result.items))
        return result

    def get_quotation(self, quotation_id: str) -> Optional[SavedQuotation]:
        result = self.load_quotations()
        if not result.readable:
            raise UnreadableStorage(models.QUOTATIONS_KEY, result.error)
        for quotation in result.items:
            if quotation.id == quotation_id:
                return quotation
        return None

    def save_quotation(self, quotation: SavedQuotation) -> SavedQuotation:
        """
        Create (prepended, newest first) or fully replace a quotation.
        Saving a quotation clears the in-progress draft.
        """
        entries = self._raw_entries(models.QUOTATIONS_KEY, self.load_quotations())
        priced = finalize_quotation(quotation)

        replaced = False
        for index, entry in enumerate(entries):
            if priced.id and entry.get("id") == priced.id:
                priced = priced.model_copy(update={"date": entry.get("date") or priced.date})
                entries[index] = _to_json(priced)
                replaced = True
                break

        if not replaced:
            priced = priced.model_copy(update={
                "id": priced.id or new_id(),
                "date": priced.date or timestamp(),
            })
            entries.insert(0, _to_json(priced))

        self._set(models.QUOTATIONS_KEY, _dump(entries))
        self.clear_draft()
        logger.info("%s quotation %s (%s)", "Replaced" if replaced else "Created",
                    priced.id, priced.client)
        return priced

    def delete_quotation(self, quotation_id: str) -> bool:
        entries = self._raw_entries(models.QUOTATIONS_KEY, self.load_quotations())
        remaining = [entry for entry in entries if entry.get("id") != quotation_id]
        if len(remaining) == len(entries):
            return False
        self._set(models.QUOTATIONS_KEY, _dump(remaining))
        logger.info("Deleted quotation %s", quotation_id)
        return True

    # --- draft ---

    def load_draft(self) -> Optional[SavedQuotation]:
        return decode_draft(self._get(models.DRAFT_KEY))

    def save_draft(self, quotation: SavedQuotation) -> SavedQuotation:
        priced = finalize_quotation(quotation)
        self._set(models.DRAFT_KEY, _dump(_to_json(priced)))
        return priced

    def clear_draft(self) -> None:
        entry = self.db.query(models.StorageEntry).filter(
            models.StorageEntry.key == models.DRAFT_KEY
        ).first()
        if entry:
            self.db.delete(entry)
            self.db.commit()


def get_store(db: Session = Depends(get_db), catalog: Catalog = Depends(get_catalog)) -> RecordStore:
    return RecordStore(db, catalog)
