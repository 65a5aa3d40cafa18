"""
Measurement pricing API — the input surface posts an area after every edit
and displays the computed fields it gets back.

POST /api/measurements/new        — blank area with catalogue defaults
POST /api/measurements/price      — reprice one area
POST /api/measurements/material   — switch material (rate and thickness reset)
POST /api/measurements/thickness  — switch thickness tier
POST /api/measurements/additional — toggle an additional / change its rate
POST /api/measurements/aggregate  — grand total and balance for a set of areas
GET  /api/measurements/catalog    — materials, thickness tiers, additional rates
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..calculators.measurement import MeasurementCalculator, reprice_areas
from ..calculators.record import aggregate_record, balance_status
from ..catalog import Catalog, get_catalog
from ..schemas import AreaMeasurement

router = APIRouter(prefix="/measurements", tags=["measurements"])


# --- Request schemas ---

class NewAreaRequest(BaseModel):
    title: str = ""


class MaterialRequest(BaseModel):
    area: AreaMeasurement
    material: str
    custom_name: Optional[str] = None


class ThicknessRequest(BaseModel):
    area: AreaMeasurement
    thickness: int


class AdditionalRequest(BaseModel):
    area: AreaMeasurement
    key: str
    toggle: bool = False
    rate: Optional[str] = None


class AggregateRequest(BaseModel):
    areas: List[AreaMeasurement] = []
    advance: str = "0"


# --- Endpoints ---

@router.get("/catalog", response_model=Catalog)
def read_catalog(catalog: Catalog = Depends(get_catalog)):
    return catalog


@router.post("/new", response_model=AreaMeasurement)
def new_area(request: NewAreaRequest, catalog: Catalog = Depends(get_catalog)):
    return MeasurementCalculator(catalog).new_area(request.title)


@router.post("/price", response_model=AreaMeasurement)
def price(area: AreaMeasurement, catalog: Catalog = Depends(get_catalog)):
    return MeasurementCalculator(catalog).calculate(area)


@router.post("/material", response_model=AreaMeasurement)
def select_material(request: MaterialRequest, catalog: Catalog = Depends(get_catalog)):
    calculator = MeasurementCalculator(catalog)
    return calculator.select_material(request.area, request.material, request.custom_name)


@router.post("/thickness", response_model=AreaMeasurement)
def select_thickness(request: ThicknessRequest, catalog: Catalog = Depends(get_catalog)):
    return MeasurementCalculator(catalog).select_thickness(request.area, request.thickness)


@router.post("/additional", response_model=AreaMeasurement)
def edit_additional(request: AdditionalRequest, catalog: Catalog = Depends(get_catalog)):
    calculator = MeasurementCalculator(catalog)
    area = request.area
    if request.rate is not None:
        area = calculator.set_additional_rate(area, request.key, request.rate)
    if request.toggle:
        area = calculator.toggle_additional(area, request.key)
    return calculator.calculate(area)


@router.post("/aggregate")
def aggregate(request: AggregateRequest, catalog: Catalog = Depends(get_catalog)):
    """Reprices the areas first, so stale computed fields in the request are ignored."""
    areas = reprice_areas(request.areas, catalog)
    totals = aggregate_record(areas, request.advance)
    return {
        "grand_total": totals.grand_total,
        "balance": totals.balance,
        "balance_status": balance_status(totals.balance),
    }
