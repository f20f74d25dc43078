# app/infra/repo/sql_repo.py
from __future__ import annotations

import os
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from app.domain.errors import RepositoryError
from app.domain.models import ProductRecord
from app.domain.ports import ProductRepoPort
from app.infra.repo.tables import Base, ScannedProduct

log = logging.getLogger("labelscan.repo")

# Supabase: postgresql://postgres:<pw>@db.<ref>.supabase.co:5432/postgres
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./label_scanner.db")


def make_engine(url: str = DATABASE_URL) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_size=5, max_overflow=10, pool_pre_ping=True)


class SqlProductRepo(ProductRepoPort):
    """
    Thin insert/select wrapper over the `products_scanned` table.

    SQLAlchemy sessions are blocking; every public coroutine hands the work
    to Starlette's thread pool so the event loop stays free.
    """

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self.engine = engine or make_engine()
        self.Session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    # ──────────────────────────────────────────────────────────────
    #  Schema
    # ──────────────────────────────────────────────────────────────
    def _ensure_schema(self) -> None:
        Base.metadata.create_all(self.engine)

    async def ensure_schema(self) -> None:
        try:
            await run_in_threadpool(self._ensure_schema)
        except SQLAlchemyError as e:
            log.error("Error creating schema: %s", e)
            raise RepositoryError(f"Database unavailable: {e}") from e

    # ──────────────────────────────────────────────────────────────
    #  Insert
    # ──────────────────────────────────────────────────────────────
    def _save(self, product: ProductRecord) -> List[Dict[str, Any]]:
        with self.Session() as session:
            row = ScannedProduct(**product.to_row())
            session.add(row)
            session.commit()
            session.refresh(row)
            return [row.to_dict()]

    async def save_product(self, product: ProductRecord) -> List[Dict[str, Any]]:
        try:
            data = await run_in_threadpool(self._save, product)
        except SQLAlchemyError as e:
            log.error("Error saving product: %s", e)
            raise RepositoryError(str(e)) from e
        log.info("Product saved successfully: id=%s name=%s", data[0]["id"], data[0]["name"])
        return data

    # ──────────────────────────────────────────────────────────────
    #  Select
    # ──────────────────────────────────────────────────────────────
    def _list(self, limit: int) -> List[Dict[str, Any]]:
        with self.Session() as session:
            stmt = select(ScannedProduct).order_by(ScannedProduct.id.desc()).limit(limit)
            return [r.to_dict() for r in session.scalars(stmt)]

    async def list_recent(self, limit: int = 20) -> List[Dict[str, Any]]:
        try:
            return await run_in_threadpool(self._list, limit)
        except SQLAlchemyError as e:
            log.error("Error listing products: %s", e)
            raise RepositoryError(str(e)) from e

    def _get(self, product_id: int) -> Optional[Dict[str, Any]]:
        with self.Session() as session:
            row = session.get(ScannedProduct, product_id)
            return row.to_dict() if row else None

    async def get(self, product_id: int) -> Optional[Dict[str, Any]]:
        try:
            return await run_in_threadpool(self._get, product_id)
        except SQLAlchemyError as e:
            log.error("Error loading product %s: %s", product_id, e)
            raise RepositoryError(str(e)) from e
