"""
SQLAlchemy ORM model for scanned products.
"""

from __future__ import annotations

import os

from sqlalchemy import JSON, TIMESTAMP, Column, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

PRODUCTS_TABLE = os.getenv("PRODUCTS_TABLE", "products_scanned")

# JSONB on Postgres/Supabase, plain JSON elsewhere (SQLite in dev and tests)
JsonType = JSON().with_variant(JSONB(), "postgresql")

Base = declarative_base()


class ScannedProduct(Base):
    __tablename__ = PRODUCTS_TABLE

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    ingredients = Column(JsonType, nullable=False, default=list)
    macronutrients = Column(JsonType, nullable=False)
    vitamins = Column(JsonType, nullable=False, default=dict)
    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price) if self.price is not None else 0.0,
            "ingredients": list(self.ingredients or []),
            "macronutrients": dict(self.macronutrients or {}),
            "vitamins": dict(self.vitamins or {}),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<ScannedProduct(id={self.id}, name='{self.name}')>"
