"""
Quotations API.

POST   /api/quotations/new              — new quotation from the default template
POST   /api/quotations/price            — subtotal / tax / total for items at a rate
POST   /api/quotations/country          — change country (labels, default rate)
POST   /api/quotations/tax-rate         — override the tax rate
POST   /api/quotations/edit             — append / insert / update / remove one section row
POST   /api/quotations/document         — document view of an unsaved quotation
GET    /api/quotations/words/{amount}   — amount in words (Indian grouping)
GET    /api/quotations/draft            — in-progress draft
PUT    /api/quotations/draft            — save the draft
DELETE /api/quotations/draft            — discard the draft
GET    /api/quotations                  — all saved quotations, newest first
POST   /api/quotations                  — save a new quotation (clears the draft)
GET    /api/quotations/{id}             — one quotation
PUT    /api/quotations/{id}             — replace a quotation
DELETE /api/quotations/{id}             — delete a quotation
DELETE /api/quotations                  — reset storage after an unreadable load
GET    /api/quotations/{id}/document    — document view of a saved quotation
"""

import math
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .. import models
from ..countries import Country
from ..documents import quotation_document
from ..pricing_engine import PricingEngine, edit_section
from ..schemas import QuotationItem, SavedQuotation, default_quotation_country
from ..storage import RecordStore, UnreadableStorage, get_store
from ..words import amount_in_words, round_amount, to_words

router = APIRouter(prefix="/quotations", tags=["quotations"])

# Stateless, one shared instance
engine = PricingEngine()


# --- Request schemas ---

class NewQuotationRequest(BaseModel):
    country: Country = Field(default_factory=default_quotation_country)


class PriceRequest(BaseModel):
    items: List[QuotationItem] = []
    tax_rate_percent: Any = 0
    currency_symbol: str = ""


class CountryRequest(BaseModel):
    quotation: SavedQuotation
    country: Country


class TaxRateRequest(BaseModel):
    quotation: SavedQuotation
    tax_rate_percent: Any


class EditRequest(BaseModel):
    quotation: SavedQuotation
    section: str
    action: str
    index: Optional[int] = None
    value: Any = None


def _unreadable(e: UnreadableStorage) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"Saved quotations are unreadable ({e.error}). DELETE /api/quotations to reset.",
    )


# --- Stateless pricing endpoints ---

@router.post("/new", response_model=SavedQuotation)
def new_quotation(request: NewQuotationRequest):
    return engine.new_quotation(request.country)


@router.post("/price")
def price(request: PriceRequest):
    totals = engine.price(request.items, request.tax_rate_percent)
    return {
        "subtotal": totals.subtotal,
        "tax_amount": totals.tax_amount,
        "total": totals.total,
        "total_in_words": amount_in_words(totals.total, request.currency_symbol),
    }


@router.post("/country", response_model=SavedQuotation)
def change_country(request: CountryRequest):
    return engine.set_country(request.quotation, request.country)


@router.post("/tax-rate", response_model=SavedQuotation)
def change_tax_rate(request: TaxRateRequest):
    return engine.set_tax_rate(request.quotation, request.tax_rate_percent)


@router.post("/edit", response_model=SavedQuotation)
def edit(request: EditRequest):
    try:
        return edit_section(request.quotation, request.section, request.action,
                            request.index, request.value)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/document")
def preview_document(quotation: SavedQuotation):
    return quotation_document(quotation)


@router.get("/words/{amount}")
def words(amount: float):
    if not math.isfinite(amount):
        raise HTTPException(status_code=422, detail="Amount must be a finite number")
    if amount < 0:
        raise HTTPException(status_code=422, detail="Amount must not be negative")
    rounded = round_amount(amount)
    return {"amount": rounded, "words": to_words(rounded)}


# --- Draft ---

@router.get("/draft", response_model=Optional[SavedQuotation])
def get_draft(store: RecordStore = Depends(get_store)):
    return store.load_draft()


@router.put("/draft", response_model=SavedQuotation)
def save_draft(quotation: SavedQuotation, store: RecordStore = Depends(get_store)):
    return store.save_draft(quotation)


@router.delete("/draft")
def discard_draft(store: RecordStore = Depends(get_store)):
    store.clear_draft()
    return {"ok": True}


# --- Saved quotations ---

@router.get("/", response_model=List[SavedQuotation])
def list_quotations(store: RecordStore = Depends(get_store)):
    result = store.load_quotations()
    if not result.readable:
        raise _unreadable(UnreadableStorage(models.QUOTATIONS_KEY, result.error))
    return result.items


@router.post("/", response_model=SavedQuotation)
def create_quotation(quotation: SavedQuotation, store: RecordStore = Depends(get_store)):
    try:
        return store.save_quotation(quotation.model_copy(update={"id": "", "date": ""}))
    except UnreadableStorage as e:
        raise _unreadable(e)


@router.delete("/")
def reset_quotations(store: RecordStore = Depends(get_store)):
    store.reset(models.QUOTATIONS_KEY)
    return {"ok": True}


@router.get("/{quotation_id}", response_model=SavedQuotation)
def get_quotation(quotation_id: str, store: RecordStore = Depends(get_store)):
    try:
        quotation = store.get_quotation(quotation_id)
    except UnreadableStorage as e:
        raise _unreadable(e)
    if not quotation:
        raise HTTPException(status_code=404, detail="Quotation not found")
    return quotation


@router.put("/{quotation_id}", response_model=SavedQuotation)
def replace_quotation(quotation_id: str, quotation: SavedQuotation,
                      store: RecordStore = Depends(get_store)):
    try:
        if not store.get_quotation(quotation_id):
            raise HTTPException(status_code=404, detail="Quotation not found")
        return store.save_quotation(quotation.model_copy(update={"id": quotation_id}))
    except UnreadableStorage as e:
        raise _unreadable(e)


@router.delete("/{quotation_id}")
def delete_quotation(quotation_id: str, store: RecordStore = Depends(get_store)):
    try:
        deleted = store.delete_quotation(quotation_id)
    except UnreadableStorage as e:
        raise _unreadable(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Quotation not found")
    return {"ok": True, "deleted": quotation_id}


@router.get("/{quotation_id}/document")
def get_quotation_document(quotation_id: str, store: RecordStore = Depends(get_store)):
    try:
        quotation = store.get_quotation(quotation_id)
    except UnreadableStorage as e:
        raise _unreadable(e)
    if not quotation:
        raise HTTPException(status_code=404, detail="Quotation not found")
    return quotation_document(quotation)
