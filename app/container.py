# app/container.py
import os
from functools import lru_cache

from app.infra.cache.memory_store import InMemoryJobStore
from app.infra.cache.redis_cache import RedisJobStore
from app.infra.llm.openai_adapter import OpenAIVisionLlm
from app.infra.repo.sql_repo import SqlProductRepo
from app.domain.ports import JobStorePort

from app.application.scan_use_case import ScanLabelUseCase


@lru_cache
def _jobs() -> JobStorePort:
    kind = os.getenv("JOB_STORE", "memory").lower()
    if kind == "redis":
        return RedisJobStore.from_env()
    return InMemoryJobStore()

@lru_cache
def _repo() -> SqlProductRepo: return SqlProductRepo()

@lru_cache
def _llm() -> OpenAIVisionLlm: return OpenAIVisionLlm()

def get_job_store() -> JobStorePort: return _jobs()
def get_product_repo() -> SqlProductRepo: return _repo()
def get_vision_llm() -> OpenAIVisionLlm: return _llm()

def get_scan_use_case() -> ScanLabelUseCase:
    return ScanLabelUseCase(llm=_llm(), repo=_repo(), jobs=_jobs())
