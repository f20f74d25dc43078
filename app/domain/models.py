# app/domain/models.py
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Macronutrients(BaseModel):
    model_config = ConfigDict(frozen=True)

    calories: float
    protein: float
    carbohydrates: float
    fat: float


class ProductRecord(BaseModel):
    """
    One scanned product label. Built from the model response, never mutated,
    persisted as one row in `products_scanned`.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    price: Optional[float] = None
    ingredients: List[str] = Field(default_factory=list)
    macronutrients: Macronutrients
    vitamins: Optional[Dict[str, float]] = None

    def to_row(self) -> Dict[str, Any]:
        # DB columns are NOT NULL: price → 0, vitamins → {}
        data = self.model_dump()
        data["price"] = 0 if self.price is None else self.price
        data["vitamins"] = {} if self.vitamins is None else dict(self.vitamins)
        return data


class ScanStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScanJob(BaseModel):
    id: str
    status: ScanStatus = ScanStatus.PROCESSING
    scanned_data: Optional[ProductRecord] = None
    saved_data: Optional[bool] = None
    db_error: Optional[str] = None
    error: Optional[str] = None
    created_at: str = Field(default_factory=_utcnow)
    updated_at: str = Field(default_factory=_utcnow)

    def complete(self, product: ProductRecord, *, saved: bool, db_error: Optional[str]) -> "ScanJob":
        return self.model_copy(update={
            "status": ScanStatus.COMPLETED,
            "scanned_data": product,
            "saved_data": saved,
            "db_error": db_error,
            "updated_at": _utcnow(),
        })

    def fail(self, message: str) -> "ScanJob":
        return self.model_copy(update={
            "status": ScanStatus.FAILED,
            "error": message,
            "updated_at": _utcnow(),
        })

    def to_public(self) -> Dict[str, Any]:
        """Shape the polling client reads (camelCase keys, absent fields dropped)."""
        out: Dict[str, Any] = {
            "id": self.id,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.scanned_data is not None:
            out["scannedData"] = self.scanned_data.model_dump()
        if self.saved_data is not None:
            out["savedData"] = self.saved_data
        if self.db_error is not None:
            out["dbError"] = self.db_error
        if self.error is not None:
            out["error"] = self.error
        return out
