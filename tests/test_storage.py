"""
Record store tests — key/value persistence of records, quotations and the draft.

Tests:
1-4.  Records: create, replace keeps id and date, delete leaves others byte-identical, missing id
5-7.  Quotations: newest first, saving clears the draft, replace in place
8-9.  Draft save / load / clear
10-11. Legacy data written back once, unreadable data blocks writes until reset
"""

import json

import pytest

from gypquote import models
from gypquote.migration import CURRENT, EMPTY, MIGRATED, UNREADABLE
from gypquote.schemas import AreaMeasurement, QuotationItem, SavedQuotation, SavedRecord
from gypquote.storage import UnreadableStorage


def _raw(db, key):
    entry = db.query(models.StorageEntry).filter(models.StorageEntry.key == key).first()
    return entry.value if entry else None


def _put(db, key, value):
    db.add(models.StorageEntry(key=key, value=value))
    db.commit()


def _record(client_name, length="3"):
    return SavedRecord(
        client_name=client_name,
        advance="500",
        areas=[AreaMeasurement(title="Hall", length=length, width="2",
                               material="Gypsum Board", material_rate=120, thickness_rate=0)],
    )


def _quotation(client, quantity=10):
    return SavedQuotation(
        client=client,
        items=[QuotationItem(description="Ceiling", quantity=quantity, unit_rate=200)],
    )


# --- Records ---

def test_create_record(store):
    assert store.load_records().status == EMPTY

    saved = store.save_record(_record("Mr. Rahul"))
    assert saved.id
    assert saved.date
    assert saved.grand_total == pytest.approx(6 * 3.28084 ** 2 * 120)
    assert saved.balance == pytest.approx(saved.grand_total - 500)

    result = store.load_records()
    assert result.status == CURRENT
    assert [r.id for r in result.items] == [saved.id]


def test_replace_record_keeps_id_and_date(store):
    saved = store.save_record(_record("Mr. Rahul"))
    edited = saved.model_copy(update={"client_name": "Mr. Rahul Menon", "date": "changed"})
    edited = edited.model_copy(update={"areas": [a.model_copy(update={"length": "4"}) for a in edited.areas]})

    replaced = store.save_record(edited)
    assert replaced.id == saved.id
    assert replaced.date == saved.date
    assert replaced.grand_total > saved.grand_total

    records = store.load_records().items
    assert len(records) == 1
    assert records[0].client_name == "Mr. Rahul Menon"


def test_delete_leaves_other_records_byte_identical(store, db):
    first = store.save_record(_record("A"))
    second = store.save_record(_record("B", length="4"))
    third = store.save_record(_record("C", length="5"))
    before = json.loads(_raw(db, models.RECORDS_KEY))

    assert store.delete_record(second.id) is True

    after = _raw(db, models.RECORDS_KEY)
    assert after == json.dumps([before[0], before[2]], ensure_ascii=False)
    assert [r.id for r in store.load_records().items] == [first.id, third.id]


def test_delete_missing_record(store):
    store.save_record(_record("A"))
    assert store.delete_record("no-such-id") is False
    assert store.get_record("no-such-id") is None


# --- Quotations ---

def test_quotations_newest_first(store):
    older = store.save_quotation(_quotation("First"))
    newer = store.save_quotation(_quotation("Second"))
    result = store.load_quotations()
    assert [q.id for q in result.items] == [newer.id, older.id]
    assert newer.total == pytest.approx(2100)
    assert newer.currency_symbol == "AED"


def test_saving_quotation_clears_draft(store, db):
    store.save_draft(_quotation("Draft client"))
    assert store.load_draft() is not None

    store.save_quotation(_quotation("Draft client"))
    assert store.load_draft() is None
    assert _raw(db, models.DRAFT_KEY) is None


def test_replace_quotation_in_place(store):
    first = store.save_quotation(_quotation("First"))
    second = store.save_quotation(_quotation("Second"))

    replaced = store.save_quotation(first.model_copy(update={
        "items": [QuotationItem(description="Ceiling", quantity=20, unit_rate=200)],
    }))
    assert replaced.id == first.id
    assert replaced.date == first.date
    assert replaced.total == pytest.approx(4200)

    ids = [q.id for q in store.load_quotations().items]
    assert ids == [second.id, first.id]
    assert store.delete_quotation(first.id) is True
    assert [q.id for q in store.load_quotations().items] == [second.id]


# --- Draft ---

def test_draft_round_trip(store):
    assert store.load_draft() is None
    saved = store.save_draft(_quotation("Draft client", quantity=3))
    assert saved.total == pytest.approx(630)

    draft = store.load_draft()
    assert draft.client == "Draft client"
    assert draft.total == pytest.approx(630)

    store.clear_draft()
    assert store.load_draft() is None


def test_damaged_draft_is_dropped(store, db):
    _put(db, models.DRAFT_KEY, "{half a draft")
    assert store.load_draft() is None


# --- Migration and unreadable data ---

def test_legacy_records_written_back_once(store, db):
    _put(db, models.RECORDS_KEY, json.dumps({
        "clientName": "Old Client",
        "areas": [{"title": "Hall", "length": "3", "width": "2", "materialRate": 150}],
    }))

    first = store.load_records()
    assert first.status == MIGRATED
    stored = json.loads(_raw(db, models.RECORDS_KEY))
    assert isinstance(stored, list)
    assert stored[0]["id"] == first.items[0].id

    second = store.load_records()
    assert second.status == CURRENT
    assert second.items[0].id == first.items[0].id


def test_unreadable_records_block_writes_until_reset(store, db):
    _put(db, models.RECORDS_KEY, "{not json")

    assert store.load_records().status == UNREADABLE
    with pytest.raises(UnreadableStorage):
        store.save_record(_record("A"))
    with pytest.raises(UnreadableStorage):
        store.delete_record("anything")
    # Nothing was overwritten
    assert _raw(db, models.RECORDS_KEY) == "{not json"

    store.reset(models.RECORDS_KEY)
    assert store.load_records().status == EMPTY
    assert store.save_record(_record("A")).id
