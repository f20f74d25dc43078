# app/presentation/health.py
from fastapi import APIRouter, Depends

from app.container import get_job_store, get_product_repo, get_vision_llm

router = APIRouter()

@router.get("/healthz")
async def healthz():
    return {"ok": True}

@router.get("/readyz")
async def readyz(
    repo = Depends(get_product_repo),
    jobs = Depends(get_job_store),
    llm = Depends(get_vision_llm),
):
    checks = {}; ok = True
    # Database
    try:
        await repo.ensure_schema()
        checks["database"] = True
    except Exception as e:
        checks["database"] = False; checks["database_error"] = str(e); ok = False
    # Job store (redis only)
    try:
        pong = await jobs.ping() if hasattr(jobs, "ping") else True
        checks["job_store"] = bool(pong); ok = ok and bool(pong)
    except Exception as e:
        checks["job_store"] = False; checks["job_store_error"] = str(e); ok = False
    # LLM configured (not fatal: DEV_MODE serves an offline sample)
    checks["openai_configured"] = llm.configured()
    return {"ok": ok, **checks}
