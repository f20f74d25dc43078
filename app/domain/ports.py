# app/domain/ports.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.domain.models import ProductRecord, ScanJob


class VisionLlmPort(ABC):
    @abstractmethod
    async def describe_label(self, image_bytes: bytes) -> str:
        """Return the raw model text for one label photo (JPEG bytes)."""


class ProductRepoPort(ABC):
    @abstractmethod
    async def ensure_schema(self) -> None: ...

    @abstractmethod
    async def save_product(self, product: ProductRecord) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def list_recent(self, limit: int = 20) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def get(self, product_id: int) -> Optional[Dict[str, Any]]: ...


class JobStorePort(ABC):
    @abstractmethod
    async def create(self, job: ScanJob) -> None: ...

    @abstractmethod
    async def get(self, job_id: str) -> Optional[ScanJob]: ...

    @abstractmethod
    async def update(self, job: ScanJob) -> None: ...
