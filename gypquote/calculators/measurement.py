"""
Measurement calculator — one area's dimensions and selections to a priced AreaMeasurement.

Formula:
    area        = length × width × 3.28084²           (sqft, shown to the user)
    base_cost   = area × (material_rate + thickness_rate)
    extra_qty   = length × width × 3.28                (single power, kept for saved totals)
    extras_cost = Σ enabled additionals: extra_qty × rate
                + Σ bulk cutting / other custom lines: length × runs × rate
    attached    = Σ attached rooms priced with the base formula only
    expenses    = Σ flat expense amounts
    total_cost  = base_cost + attached + extras_cost + expenses

A missing material rate, thickness or thickness rate is taken from the catalogue.
Every editing helper below returns a NEW, repriced area. Computed fields are
never patched on their own.
"""

from typing import List

from ..catalog import Catalog, OTHER_MATERIAL
from ..schemas import AreaMeasurement, AttachedRoom
from .base import BaseCalculator


class MeasurementCalculator(BaseCalculator):
    """Prices areas against an injected Catalog."""

    def calculate(self, area: AreaMeasurement) -> AreaMeasurement:
        """Full recompute of every computed field. Does not modify the input."""
        length_m = self.parse_meters(area.length)
        width_m = self.parse_meters(area.width)

        thickness = self._thickness(area)
        area_sqft = self.sqft_from_meters(length_m, width_m)
        base_cost = area_sqft * (self._material_rate(area) + self._thickness_rate(area, thickness))

        extra_qty = self.additional_quantity(length_m, width_m)
        extras_cost = 0.0
        for key in area.enabled_additionals():
            extras_cost += extra_qty * self._additional_rate(area, key)

        for entry in list(area.bulk_cutting_entries) + list(area.other_custom_entries):
            extras_cost += (
                self.parse_number(entry.length)
                * self.parse_number(entry.runs)
                * self.parse_number(entry.rate)
            )

        rooms = [self.price_room(room) for room in area.attached_rooms]
        attached_sqft = sum(room.room_sqft for room in rooms)
        attached_base_cost = sum(room.room_cost for room in rooms)

        extra_expenses_cost = sum(self.parse_number(e.amount) for e in area.extra_expenses)

        total_cost = base_cost + attached_base_cost + extras_cost + extra_expenses_cost

        return area.model_copy(deep=True, update={
            "thickness": thickness,
            "attached_rooms": rooms,
            "area": area_sqft,
            "total_sqft": area_sqft + attached_sqft,
            "base_cost": base_cost,
            "attached_base_cost": attached_base_cost,
            "extras_cost": extras_cost,
            "extra_expenses_cost": extra_expenses_cost,
            "total_cost": total_cost,
        })

    def price_room(self, room: AttachedRoom) -> AttachedRoom:
        """Attached rooms use the base formula only: no additionals, no nesting."""
        sqft = self.sqft_from_meters(self.parse_meters(room.length), self.parse_meters(room.width))
        thickness = self._thickness(room)
        cost = sqft * (self._material_rate(room) + self._thickness_rate(room, thickness))
        return room.model_copy(deep=True, update={
            "thickness": thickness, "room_sqft": sqft, "room_cost": cost,
        })

    def _material_rate(self, item) -> float:
        if item.material_rate is not None:
            return item.material_rate
        return self.catalog.material_rate(item.material)

    def _thickness(self, item) -> int:
        if item.thickness is not None:
            return item.thickness
        return self.catalog.default_thickness().mm

    def _thickness_rate(self, item, thickness: int) -> float:
        if item.thickness_rate is not None:
            return item.thickness_rate
        return self.catalog.thickness_rate(thickness)

    def _additional_rate(self, area: AreaMeasurement, key: str) -> float:
        if key in area.additional_rates:
            return area.additional_rates[key]
        return self.catalog.additional_rate(key)

    # --- Editing operations (input surface → repriced area) ---

    def new_area(self, title: str = "") -> AreaMeasurement:
        """Blank area: first catalogue material, thinnest tier, default additional rates."""
        material = self.catalog.default_material()
        thickness = self.catalog.default_thickness()
        return self.calculate(AreaMeasurement(
            title=title,
            material=material.name,
            material_rate=material.rate,
            thickness=thickness.mm,
            thickness_rate=thickness.extra_rate,
            additional_rates=self.catalog.default_additional_rates(),
        ))

    def update(self, area: AreaMeasurement, **changes) -> AreaMeasurement:
        """Apply input field changes (snake_case names) and reprice."""
        edited = area.model_validate({**area.model_dump(), **changes})
        return self.calculate(edited)

    def select_material(self, area: AreaMeasurement, name: str,
                        custom_name: str = None) -> AreaMeasurement:
        """
        Switch material. The rate snaps to the catalogue default (0 for a custom
        material) and the thickness resets to the thinnest tier, as the picker does.
        """
        thickness = self.catalog.default_thickness()
        changes = {
            "material": name,
            "material_rate": self.catalog.material_rate(name),
            "thickness": thickness.mm,
            "thickness_rate": thickness.extra_rate,
        }
        if name == OTHER_MATERIAL:
            changes["custom_material_name"] = custom_name or area.custom_material_name or ""
        return self.update(area, **changes)

    def select_thickness(self, area: AreaMeasurement, mm: int) -> AreaMeasurement:
        return self.update(area, thickness=mm, thickness_rate=self.catalog.thickness_rate(mm))

    def toggle_additional(self, area: AreaMeasurement, key: str) -> AreaMeasurement:
        additionals = dict(area.additionals)
        additionals[key] = not additionals.get(key, False)
        rates = dict(area.additional_rates)
        rates.setdefault(key, self.catalog.additional_rate(key))
        return self.update(area, additionals=additionals, additional_rates=rates)

    def set_additional_rate(self, area: AreaMeasurement, key: str, value) -> AreaMeasurement:
        rates = dict(area.additional_rates)
        rates[key] = self.parse_number(value)
        return self.update(area, additional_rates=rates)


def price_area(area: AreaMeasurement, catalog: Catalog = None) -> AreaMeasurement:
    """Price one area. Pure and deterministic."""
    return MeasurementCalculator(catalog).calculate(area)


def reprice_areas(areas: List[AreaMeasurement], catalog: Catalog = None) -> List[AreaMeasurement]:
    calculator = MeasurementCalculator(catalog)
    return [calculator.calculate(area) for area in areas]
