# main.py
from dotenv import load_dotenv
load_dotenv()

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.container import get_product_repo
from app.domain.errors import RepositoryError
from app.presentation.health import router as health_router
from app.presentation.pages import router as pages_router
from app.presentation.routers import router as api_router

# --- logging config must run before anything logs ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# own request logger, not 'uvicorn.access'
app_logger = logging.getLogger("labelscan.request")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create products_scanned if missing; a dead DB must not block the scanner
    try:
        await get_product_repo().ensure_schema()
    except RepositoryError as e:
        app_logger.warning("Database not ready at startup: %s", e.message)
    yield


app = FastAPI(
    title="Label Scanner",
    version=os.getenv("APP_VERSION", "0.1.0"),
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    app_logger.info(f"Incoming {request.method} {request.url.path}")
    try:
        response = await call_next(request)
        app_logger.info(f"Completed {request.method} {request.url.path} -> {response.status_code}")
        return response
    except Exception:
        app_logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        raise

# ─────────────────────────────────────────────────────────────
# CORS (env: CORS_ALLOW_ORIGINS="https://foo.com,https://bar.com")
# ─────────────────────────────────────────────────────────────
raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
allow_origins = [o.strip().rstrip("/") for o in raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials="*" not in allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────
app.include_router(api_router, tags=["api"])
app.include_router(health_router, tags=["health"])
app.include_router(pages_router, tags=["ui"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "0") == "1",
    )
