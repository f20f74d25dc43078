# app/presentation/routers.py
from __future__ import annotations

import logging
from typing import Literal, Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse

from app.application.scan_use_case import GENERIC_FAILURE, ScanLabelUseCase
from app.container import get_product_repo, get_scan_use_case
from app.domain.errors import InvalidImageError, RepositoryError, ScanError
from app.domain.ports import ProductRepoPort
from app.infra.api.security import require_api_key
from app.presentation.schemas import (
    ErrorBody, ProductList, SavedProduct, ScanAccepted, ScanResponse, ScanStatusResponse,
)

# ──────────────────────────────────────────────────────────────────────
# Logging
# ──────────────────────────────────────────────────────────────────────
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# All endpoints under /api, optionally guarded by X-Api-Key
router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)])

# ── SCAN: submit photo ───────────────────────────────────────────
@router.post(
    "/scan-image",
    response_model=Union[ScanResponse, ScanAccepted],
    responses={400: {"model": ErrorBody}, 500: {"model": ErrorBody}},
)
async def scan_image(
    background: BackgroundTasks,
    image: Optional[UploadFile] = File(None),
    mode: Literal["sync", "async"] = Query("sync"),
    uc: ScanLabelUseCase = Depends(get_scan_use_case),
):
    if image is None:
        return _error(400, "No image provided")

    data = await image.read()
    logger.info("[scan-image] mode=%s file=%s ct=%s bytes=%d",
                mode, image.filename, image.content_type, len(data))
    try:
        if mode == "async":
            job, jpeg = await uc.submit(data, image.content_type)
            background.add_task(uc.run_job, job, jpeg)
            return JSONResponse(
                status_code=202,
                content=ScanAccepted(scan_id=job.id).model_dump(by_alias=True),
            )
        return await uc.scan(data, image.content_type)
    except InvalidImageError as e:
        return _error(400, e.message)
    except ScanError as e:
        logger.error("Error processing image: %s", e.message)
        return _error(500, GENERIC_FAILURE)
    except Exception:
        logger.exception("Error processing image")
        return _error(500, GENERIC_FAILURE)

# ── SCAN: poll status ────────────────────────────────────────────
@router.get(
    "/scan-status",
    response_model=ScanStatusResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorBody}, 404: {"model": ErrorBody}},
)
async def scan_status(
    id: Optional[str] = Query(None),
    scan_id: Optional[str] = Query(None, alias="scanId"),
    uc: ScanLabelUseCase = Depends(get_scan_use_case),
):
    job_id = id or scan_id
    if not job_id:
        return _error(400, "No scan ID provided")

    job = await uc.status(job_id)
    if job is None:
        return _error(404, "Scan job not found")
    return job.to_public()

# ── PRODUCTS: saved rows ─────────────────────────────────────────
@router.get("/products", response_model=ProductList, responses={503: {"model": ErrorBody}})
async def list_products(
    limit: int = Query(20, ge=1, le=100),
    repo: ProductRepoPort = Depends(get_product_repo),
):
    try:
        return {"items": await repo.list_recent(limit)}
    except RepositoryError as e:
        return _error(503, e.message)

@router.get(
    "/products/{product_id}",
    response_model=SavedProduct,
    responses={404: {"model": ErrorBody}, 503: {"model": ErrorBody}},
)
async def get_product(product_id: int, repo: ProductRepoPort = Depends(get_product_repo)):
    try:
        row = await repo.get(product_id)
    except RepositoryError as e:
        return _error(503, e.message)
    if row is None:
        return _error(404, "Product not found")
    return row
