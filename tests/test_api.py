"""
API tests — the HTTP surface over the calculators and the record store.

Tests:
1.     Health
2-6.   Measurements: catalogue, new area, price, material / additional edits, aggregate
7-10.  Records: create → list → replace → document → delete, 404s, unreadable storage
11-15. Quotations: new, price, words, edits, country / tax rate
16-18. Saved quotations and the draft
19-23. Catalogue rate for rooms, non-finite amounts, configured default countries
"""

import pytest

from gypquote import models
from gypquote.config import settings


def _area_payload(**overrides):
    payload = {
        "title": "Hall",
        "length": "3",
        "width": "2",
        "material": "Gypsum MR Board (Kool Brand)",
        "materialRate": 150,
        "thickness": 6,
        "thicknessRate": 0,
        "additionals": {"cornerBeading": True},
        "additionalRates": {"cornerBeading": 15},
    }
    payload.update(overrides)
    return payload


def _quotation_payload(**overrides):
    payload = {
        "client": "Al Noor Villa",
        "country": "UAE",
        "taxRatePercent": 5,
        "items": [{"description": "Gypsum ceiling", "quantity": 10, "unitRate": 200}],
    }
    payload.update(overrides)
    return payload


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# --- Measurements ---

def test_catalog(client):
    resp = client.get("/api/measurements/catalog")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["materials"]) == 7
    assert data["materials"][0]["name"] == "Gypsum MR Board (Kool Brand)"
    assert [t["mm"] for t in data["thicknesses"]] == [6, 8, 10, 12, 18]


def test_new_area(client):
    resp = client.post("/api/measurements/new", json={"title": "Bedroom"})
    assert resp.status_code == 200
    area = resp.json()
    assert area["title"] == "Bedroom"
    assert area["materialRate"] == 150
    assert area["thickness"] == 6
    assert area["additionalRates"]["cornerBeading"] == 15
    assert area["totalCost"] == 0


def test_price_area(client):
    resp = client.post("/api/measurements/price", json=_area_payload())
    assert resp.status_code == 200
    area = resp.json()
    assert area["area"] == pytest.approx(64.5835, abs=1e-3)
    assert area["extrasCost"] == pytest.approx(295.2)
    assert area["totalCost"] == pytest.approx(9982.72, abs=0.01)


def test_material_and_additional_edits(client):
    resp = client.post("/api/measurements/material", json={
        "area": _area_payload(), "material": "Cement Board",
    })
    assert resp.status_code == 200
    area = resp.json()
    assert area["materialRate"] == 200
    assert area["thickness"] == 6

    resp = client.post("/api/measurements/thickness", json={"area": area, "thickness": 12})
    area = resp.json()
    assert area["thicknessRate"] == 35

    resp = client.post("/api/measurements/additional", json={
        "area": area, "key": "cornerBeading", "toggle": True,
    })
    area = resp.json()
    assert area["additionals"]["cornerBeading"] is False
    assert area["extrasCost"] == 0

    resp = client.post("/api/measurements/additional", json={
        "area": area, "key": "cutting", "toggle": True, "rate": "10",
    })
    area = resp.json()
    assert area["additionalRates"]["cutting"] == 10
    assert area["extrasCost"] == pytest.approx(3 * 2 * 3.28 * 10)


def test_aggregate(client):
    resp = client.post("/api/measurements/aggregate", json={
        "areas": [_area_payload(), _area_payload(length="0")],
        "advance": "10000",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["grand_total"] == pytest.approx(9982.72, abs=0.01)
    assert data["balance"] == pytest.approx(-17.28, abs=0.01)
    assert data["balance_status"] == "overpaid"


# --- Records ---

def test_record_lifecycle(client):
    resp = client.post("/api/records/", json={
        "clientName": "Mr. Rahul",
        "country": "India",
        "advance": "1000",
        "areas": [_area_payload()],
    })
    assert resp.status_code == 200
    record = resp.json()
    record_id = record["id"]
    assert record_id
    assert record["grandTotal"] == pytest.approx(9982.72, abs=0.01)
    assert record["balance"] == pytest.approx(8982.72, abs=0.01)

    resp = client.get("/api/records/")
    assert [r["id"] for r in resp.json()] == [record_id]

    record["clientName"] = "Mr. Rahul Menon"
    record["advance"] = "9982.72"
    resp = client.put(f"/api/records/{record_id}", json=record)
    assert resp.status_code == 200
    assert resp.json()["date"] == record["date"]

    resp = client.get(f"/api/records/{record_id}/document")
    assert resp.status_code == 200
    doc = resp.json()
    assert doc["client_name"] == "Mr. Rahul Menon"
    assert doc["currency_symbol"] == "₹"
    assert doc["areas"][0]["cost_display"] == "9982.72"

    resp = client.delete(f"/api/records/{record_id}")
    assert resp.status_code == 200
    assert client.get("/api/records/").json() == []


def test_record_not_found(client):
    assert client.get("/api/records/missing").status_code == 404
    assert client.put("/api/records/missing", json={"clientName": "X"}).status_code == 404
    assert client.delete("/api/records/missing").status_code == 404
    assert client.get("/api/records/missing/document").status_code == 404


def test_unreadable_records(client, db):
    db.add(models.StorageEntry(key=models.RECORDS_KEY, value="{not json"))
    db.commit()

    resp = client.get("/api/records/")
    assert resp.status_code == 409
    assert "reset" in resp.json()["detail"]
    assert client.post("/api/records/", json={"clientName": "X"}).status_code == 409

    assert client.delete("/api/records/").status_code == 200
    assert client.get("/api/records/").json() == []


# --- Quotations: stateless ---

def test_new_quotation(client):
    resp = client.post("/api/quotations/new", json={"country": "India"})
    assert resp.status_code == 200
    quotation = resp.json()
    assert quotation["taxRatePercent"] == 18
    assert quotation["currencySymbol"] == "₹"
    assert quotation["taxLabel"] == "GST"
    assert len(quotation["items"]) == 1
    assert quotation["paymentTerms"][0] == "50% Advance"


def test_price_quotation(client):
    resp = client.post("/api/quotations/price", json={
        "items": [{"description": "Gypsum ceiling", "quantity": 10, "unitRate": 200}],
        "tax_rate_percent": 5,
        "currency_symbol": "AED",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["subtotal"] == pytest.approx(2000)
    assert data["tax_amount"] == pytest.approx(100)
    assert data["total"] == pytest.approx(2100)
    assert data["total_in_words"] == "AED Two Thousand One Hundred Only"


def test_words(client):
    resp = client.get("/api/quotations/words/2100")
    assert resp.json() == {"amount": 2100, "words": "Two Thousand One Hundred"}
    assert client.get("/api/quotations/words/1234567.5").json()["amount"] == 1234568
    assert client.get("/api/quotations/words/-5").status_code == 422


def test_edit_quotation(client):
    resp = client.post("/api/quotations/edit", json={
        "quotation": _quotation_payload(),
        "section": "items",
        "action": "append",
        "value": {"description": "Partition", "quantity": 2, "unitRate": 500},
    })
    assert resp.status_code == 200
    assert resp.json()["subtotal"] == pytest.approx(3000)

    resp = client.post("/api/quotations/edit", json={
        "quotation": _quotation_payload(), "section": "items", "action": "remove", "index": 4,
    })
    assert resp.status_code == 404

    resp = client.post("/api/quotations/edit", json={
        "quotation": _quotation_payload(), "section": "signatures", "action": "append",
    })
    assert resp.status_code == 422


def test_country_and_tax_rate(client):
    resp = client.post("/api/quotations/country", json={
        "quotation": _quotation_payload(taxRatePercent=None), "country": "India",
    })
    quotation = resp.json()
    assert quotation["taxRatePercent"] == 18
    assert quotation["total"] == pytest.approx(2360)

    resp = client.post("/api/quotations/tax-rate", json={"quotation": quotation, "tax_rate_percent": "12"})
    quotation = resp.json()
    assert quotation["taxRateOverridden"] is True

    resp = client.post("/api/quotations/country", json={"quotation": quotation, "country": "UAE"})
    quotation = resp.json()
    assert quotation["taxRatePercent"] == 12
    assert quotation["taxLabel"] == "VAT"
    assert quotation["total"] == pytest.approx(2240)


def test_preview_document(client):
    resp = client.post("/api/quotations/document", json=_quotation_payload())
    assert resp.status_code == 200
    assert resp.json()["total_in_words"] == "AED Two Thousand One Hundred Only"


# --- Quotations: saved and draft ---

def test_quotation_lifecycle(client):
    first = client.post("/api/quotations/", json=_quotation_payload(client="First")).json()
    second = client.post("/api/quotations/", json=_quotation_payload(client="Second")).json()
    assert first["total"] == pytest.approx(2100)

    listed = client.get("/api/quotations/").json()
    assert [q["id"] for q in listed] == [second["id"], first["id"]]

    first["items"][0]["quantity"] = 20
    resp = client.put(f"/api/quotations/{first['id']}", json=first)
    assert resp.status_code == 200
    assert resp.json()["total"] == pytest.approx(4200)

    doc = client.get(f"/api/quotations/{first['id']}/document").json()
    assert doc["total_in_words"] == "AED Four Thousand Two Hundred Only"

    assert client.delete(f"/api/quotations/{first['id']}").status_code == 200
    assert client.get(f"/api/quotations/{first['id']}").status_code == 404


def test_draft(client):
    assert client.get("/api/quotations/draft").json() is None

    resp = client.put("/api/quotations/draft", json=_quotation_payload(client="Draft"))
    assert resp.status_code == 200
    assert client.get("/api/quotations/draft").json()["client"] == "Draft"

    client.post("/api/quotations/", json=_quotation_payload(client="Draft"))
    assert client.get("/api/quotations/draft").json() is None


def test_discard_draft(client):
    client.put("/api/quotations/draft", json=_quotation_payload())
    assert client.delete("/api/quotations/draft").status_code == 200
    assert client.get("/api/quotations/draft").json() is None


# --- Catalogue defaults, non-finite amounts, configured country ---

def test_room_without_rate_counts_toward_total(client):
    area = _area_payload(attachedRooms=[{"title": "Store", "length": "2", "width": "1",
                                         "material": "Gypsum Board"}])
    resp = client.post("/api/measurements/price", json=area)
    assert resp.status_code == 200
    priced = resp.json()
    assert priced["attachedRooms"][0]["roomCost"] == pytest.approx(2 * 3.28084 ** 2 * 120)
    assert priced["attachedBaseCost"] > 0


@pytest.mark.parametrize("amount", ["inf", "nan", "-inf"])
def test_words_rejects_non_finite(client, amount):
    assert client.get(f"/api/quotations/words/{amount}").status_code == 422


def test_overflowing_quotation_still_prices(client):
    resp = client.post("/api/quotations/price", json={
        "items": [{"description": "Typo", "quantity": "1e308", "unitRate": "10"}],
        "tax_rate_percent": 5,
        "currency_symbol": "AED",
    })
    assert resp.status_code == 200
    assert resp.json()["total"] == 0
    assert resp.json()["total_in_words"] == "AED Zero Only"

    resp = client.post("/api/quotations/document", json=_quotation_payload(
        items=[{"description": "Typo", "quantity": "1e308", "unitRate": "10"}],
    ))
    assert resp.status_code == 200
    assert resp.json()["lines"][0]["total_display"] == "0.00"


def test_new_quotation_uses_configured_country(client, monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_QUOTATION_COUNTRY", "India")
    quotation = client.post("/api/quotations/new", json={}).json()
    assert quotation["country"] == "India"
    assert quotation["taxRatePercent"] == 18


def test_record_without_country_uses_configured_default(client, monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_RECORD_COUNTRY", "UAE")
    record = client.post("/api/records/", json={"clientName": "Walk-in"}).json()
    assert record["country"] == "UAE"
