"""
Pricing catalogue — materials, thickness tiers and additional-work rates.

Static configuration, not derived data. The catalogue only supplies DEFAULTS:
every rate it provides can be overridden per area by direct edit. A Catalog is
frozen once built and is passed into the pricing functions, so a different
price list (or a synthetic one in tests) can be swapped in without touching
the formulas.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# Material name used when the contractor types in their own material
OTHER_MATERIAL = "Other"


class MaterialOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    rate: float
    show_thickness: bool = False  # thickness printed next to the name on documents


class ThicknessTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    mm: int
    extra_rate: float


class AdditionalOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    rate: float


class Catalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    materials: Tuple[MaterialOption, ...]
    thicknesses: Tuple[ThicknessTier, ...]
    additionals: Tuple[AdditionalOption, ...]

    def material(self, name: str) -> Optional[MaterialOption]:
        for option in self.materials:
            if option.name == name:
                return option
        return None

    def material_rate(self, name: str) -> float:
        """Default rate per sqft for a material. Unknown / custom materials default to 0."""
        option = self.material(name)
        return option.rate if option else 0.0

    def default_material(self) -> MaterialOption:
        return self.materials[0]

    def thickness_rate(self, mm) -> float:
        for tier in self.thicknesses:
            if tier.mm == mm:
                return tier.extra_rate
        return 0.0

    def default_thickness(self) -> ThicknessTier:
        return min(self.thicknesses, key=lambda t: t.mm)

    def additional(self, key: str) -> Optional[AdditionalOption]:
        for option in self.additionals:
            if option.key == key:
                return option
        return None

    def additional_rate(self, key: str) -> float:
        option = self.additional(key)
        return option.rate if option else 0.0

    def additional_label(self, key: str) -> str:
        """Display label; custom additionals are shown by their key."""
        option = self.additional(key)
        return option.label if option else key

    def default_additional_rates(self) -> dict:
        return {option.key: option.rate for option in self.additionals}


DEFAULT_CATALOG = Catalog(
    materials=(
        MaterialOption(name="Gypsum MR Board (Kool Brand)", rate=150),
        MaterialOption(name="Gypsum Board", rate=120),
        MaterialOption(name="Gypsum Partition", rate=180),
        MaterialOption(name="Glass Wool", rate=60),
        MaterialOption(name="Grid Ceiling", rate=110),
        MaterialOption(name="Aluminium Grid Ceiling", rate=140),
        MaterialOption(name="Cement Board", rate=200, show_thickness=True),
    ),
    thicknesses=(
        ThicknessTier(mm=6, extra_rate=0),
        ThicknessTier(mm=8, extra_rate=10),
        ThicknessTier(mm=10, extra_rate=20),
        ThicknessTier(mm=12, extra_rate=35),
        ThicknessTier(mm=18, extra_rate=60),
    ),
    additionals=(
        AdditionalOption(key="cornerBeading", label="Corner Beading", rate=15),
        AdditionalOption(key="accessPanel", label="Access Panel", rate=25),
        AdditionalOption(key="cutting", label="Cuttings", rate=20),
        AdditionalOption(key="bulkCutting", label="Bulk Cutting", rate=30),
        AdditionalOption(key="profiling", label="Profiling", rate=40),
    ),
)


def load_catalog(path: Optional[str] = None) -> Catalog:
    """
    Load a price list from a JSON file, or return the built-in default.

    The file has the same shape as Catalog: {"materials": [...],
    "thicknesses": [...], "additionals": [...]}.
    """
    if not path:
        return DEFAULT_CATALOG
    catalog = Catalog.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(
        "Loaded catalogue from %s (%d materials, %d thickness tiers, %d additionals)",
        path, len(catalog.materials), len(catalog.thicknesses), len(catalog.additionals),
    )
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Catalogue configured for this process (CATALOG_PATH or the built-in default)."""
    from .config import settings
    return load_catalog(settings.CATALOG_PATH)
