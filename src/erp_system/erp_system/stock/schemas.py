from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field

from ..http.schema import RequestSchema


class AisleConfigBody(RequestSchema):
    aisle_number: int = Field(..., ge=1, le=99)
    shelves_count: int = Field(..., ge=0, le=99)
    bins_per_shelf: int = Field(..., ge=0, le=26)


class CodePatternBody(RequestSchema):
    separator: str = Field("-", max_length=1)
    aisle_digits: int = Field(2, ge=1, le=3)
    shelf_digits: int = Field(2, ge=1, le=3)
    bin_labeling: str = "LETTERS"


class ZoneStructureBody(RequestSchema):
    aisles: int = Field(0, ge=0, le=99)
    shelves_per_aisle: int = Field(0, ge=0, le=99)
    bins_per_shelf: int = Field(0, ge=0, le=26)
    aisle_configs: List[AisleConfigBody] = Field(default_factory=list)
    code_pattern: Optional[CodePatternBody] = None
    dimensions: Optional[dict] = None

    def as_structure(self) -> dict:
        return self.model_dump(exclude_none=True)


class CreateWarehouseBody(RequestSchema):
    code: str = Field(..., min_length=1, max_length=8)
    name: str = Field(..., min_length=1, max_length=128)


class CreateZoneBody(RequestSchema):
    code: str = Field(..., min_length=1, max_length=8)
    name: str = Field(..., min_length=1, max_length=128)
    structure: Optional[ZoneStructureBody] = None


class ConfigureZoneBody(RequestSchema):
    structure: ZoneStructureBody


class BlockBinBody(RequestSchema):
    reason: str = Field(..., min_length=1, max_length=256)


class BinCapacityBody(RequestSchema):
    capacity: Optional[int] = Field(None, ge=0)


class CreateVariantBody(RequestSchema):
    product_name: str = Field(..., min_length=1, max_length=256)
    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=256)
    price: float = Field(0.0, ge=0)


class ItemEntryBody(RequestSchema):
    variant_id: str
    bin_id: str
    quantity: int = Field(..., gt=0)
    unique_code: Optional[str] = Field(None, max_length=128)
    batch_number: Optional[str] = Field(None, max_length=64)
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class ItemExitBody(RequestSchema):
    quantity: int = Field(..., gt=0)
    movement_type: str
    reason_code: Optional[str] = Field(None, max_length=64)
    sales_order_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)


class TransferItemBody(RequestSchema):
    destination_bin_id: str
    notes: Optional[str] = Field(None, max_length=1000)


class BatchTransferBody(RequestSchema):
    item_ids: List[str] = Field(..., min_length=1, max_length=100)
    destination_bin_id: str
    notes: Optional[str] = Field(None, max_length=1000)


class CreateVolumeBody(RequestSchema):
    code: str = Field(..., min_length=1, max_length=64)
    notes: Optional[str] = Field(None, max_length=1000)


class VolumeItemBody(RequestSchema):
    item_id: str
