# app/presentation/schemas.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Literal

from app.domain.models import ProductRecord


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── SCAN ─────────────────────────────────────────────────────────
class ScanResponse(_Camel):
    scanned_data: ProductRecord = Field(..., alias="scannedData")
    saved_data: Optional[List[Dict[str, Any]]] = Field(None, alias="savedData")
    db_error: Optional[str] = Field(None, alias="dbError")

class ScanAccepted(_Camel):
    scan_id: str = Field(..., alias="scanId")
    status: Literal["processing"] = "processing"

class ScanStatusResponse(_Camel):
    id: str
    status: Literal["processing", "completed", "failed"]
    scanned_data: Optional[ProductRecord] = Field(None, alias="scannedData")
    saved_data: Optional[bool] = Field(None, alias="savedData")
    db_error: Optional[str] = Field(None, alias="dbError")
    error: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

# ── PRODUCTS ─────────────────────────────────────────────────────
class SavedProduct(BaseModel):
    id: int
    name: str
    price: float
    ingredients: List[str]
    macronutrients: Dict[str, float]
    vitamins: Dict[str, float] = {}
    created_at: Optional[str] = None

class ProductList(BaseModel):
    items: List[SavedProduct]

class ErrorBody(BaseModel):
    error: str
