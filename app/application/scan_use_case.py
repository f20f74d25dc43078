# app/application/scan_use_case.py
from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from starlette.concurrency import run_in_threadpool

from app.domain.errors import RepositoryError, ScanError
from app.domain.models import ProductRecord, ScanJob
from app.domain.parsing import parse_product
from app.domain.ports import JobStorePort, ProductRepoPort, VisionLlmPort
from app.infra.vision.image_prep import prepare_label_image

log = logging.getLogger("labelscan.scan")

GENERIC_FAILURE = "Failed to process image"


class ScanLabelUseCase:
    """
    Use case for:
      - POST /api/scan-image?mode=sync   → scan()
      - POST /api/scan-image?mode=async  → submit() + run_job() in background
      - GET  /api/scan-status            → status()

    Flow: photo → Pillow (validate + JPEG) → vision LLM → parse → DB insert.
    A failing DB insert never fails the scan; it is reported as dbError.
    """

    def __init__(self, *, llm: VisionLlmPort, repo: ProductRepoPort, jobs: JobStorePort) -> None:
        self.llm = llm
        self.repo = repo
        self.jobs = jobs

    # ──────────────────────────────────────────────────────────────
    #  Steps
    # ──────────────────────────────────────────────────────────────
    async def prepare(self, image_bytes: bytes, content_type: Optional[str] = None) -> bytes:
        # Pillow decode/resize is CPU-bound; keep it off the event loop
        return await run_in_threadpool(prepare_label_image, image_bytes, content_type)

    async def analyze(self, jpeg_bytes: bytes) -> ProductRecord:
        content = await self.llm.describe_label(jpeg_bytes)
        return parse_product(content)

    async def persist(self, product: ProductRecord) -> Tuple[Optional[List[Dict[str, Any]]], Optional[str]]:
        try:
            rows = await self.repo.save_product(product)
            return rows, None
        except RepositoryError as e:
            log.error("Error saving product to database: %s", e.message)
            return None, e.message

    # ──────────────────────────────────────────────────────────────
    #  Synchronous scan
    # ──────────────────────────────────────────────────────────────
    async def scan(self, image_bytes: bytes, content_type: Optional[str] = None) -> Dict[str, Any]:
        jpeg = await self.prepare(image_bytes, content_type)
        product = await self.analyze(jpeg)
        rows, db_error = await self.persist(product)
        return {
            "scannedData": product.model_dump(),
            "savedData": rows,
            "dbError": db_error,
        }

    # ──────────────────────────────────────────────────────────────
    #  Job flow
    # ──────────────────────────────────────────────────────────────
    async def submit(self, image_bytes: bytes, content_type: Optional[str] = None) -> Tuple[ScanJob, bytes]:
        """Validate the photo and register a `processing` job. Caller schedules run_job."""
        jpeg = await self.prepare(image_bytes, content_type)
        job = ScanJob(id=uuid.uuid4().hex)
        await self.jobs.create(job)
        log.info("[scan] job %s created", job.id)
        return job, jpeg

    async def run_job(self, job: ScanJob, jpeg_bytes: bytes) -> ScanJob:
        """Runs after the submit response is sent; outcome lands in the job store."""
        try:
            product = await self.analyze(jpeg_bytes)
            rows, db_error = await self.persist(product)
            job = job.complete(product, saved=bool(rows), db_error=db_error)
            log.info("[scan] job %s completed (saved=%s)", job.id, bool(rows))
        except ScanError as e:
            log.error("[scan] job %s failed: %s", job.id, e.message)
            job = job.fail(e.message)
        except Exception:
            log.exception("[scan] job %s crashed", job.id)
            job = job.fail(GENERIC_FAILURE)
        await self.jobs.update(job)
        return job

    async def status(self, job_id: str) -> Optional[ScanJob]:
        return await self.jobs.get(job_id)
