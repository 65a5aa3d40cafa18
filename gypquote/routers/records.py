"""
Saved measurement records.

GET    /api/records                 — all records (repriced, migrated if needed)
POST   /api/records                 — create a record
PUT    /api/records/{id}            — replace a record (edit and resave)
DELETE /api/records/{id}            — delete one record
DELETE /api/records                 — reset storage after an unreadable load
GET    /api/records/{id}/document   — flattened view for the document renderer
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from .. import models
from ..documents import record_document
from ..schemas import SavedRecord
from ..storage import RecordStore, UnreadableStorage, get_store

router = APIRouter(prefix="/records", tags=["records"])


def _unreadable(e: UnreadableStorage) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"Saved records are unreadable ({e.error}). DELETE /api/records to reset.",
    )


@router.get("/", response_model=List[SavedRecord])
def list_records(store: RecordStore = Depends(get_store)):
    result = store.load_records()
    if not result.readable:
        raise _unreadable(UnreadableStorage(models.RECORDS_KEY, result.error))
    return result.items


@router.post("/", response_model=SavedRecord)
def create_record(record: SavedRecord, store: RecordStore = Depends(get_store)):
    try:
        return store.save_record(record.model_copy(update={"id": "", "date": ""}))
    except UnreadableStorage as e:
        raise _unreadable(e)


@router.get("/{record_id}", response_model=SavedRecord)
def get_record(record_id: str, store: RecordStore = Depends(get_store)):
    try:
        record = store.get_record(record_id)
    except UnreadableStorage as e:
        raise _unreadable(e)
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")
    return record


@router.put("/{record_id}", response_model=SavedRecord)
def replace_record(record_id: str, record: SavedRecord, store: RecordStore = Depends(get_store)):
    try:
        if not store.get_record(record_id):
            raise HTTPException(status_code=404, detail="Record not found")
        return store.save_record(record.model_copy(update={"id": record_id}))
    except UnreadableStorage as e:
        raise _unreadable(e)


@router.delete("/{record_id}")
def delete_record(record_id: str, store: RecordStore = Depends(get_store)):
    try:
        deleted = store.delete_record(record_id)
    except UnreadableStorage as e:
        raise _unreadable(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Record not found")
    return {"ok": True, "deleted": record_id}


@router.delete("/")
def reset_records(store: RecordStore = Depends(get_store)):
    store.reset(models.RECORDS_KEY)
    return {"ok": True}


@router.get("/{record_id}/document")
def get_record_document(record_id: str, store: RecordStore = Depends(get_store)):
    try:
        record = store.get_record(record_id)
    except UnreadableStorage as e:
        raise _unreadable(e)
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")
    return record_document(record, store.catalog)
