# app/infra/cache/redis_cache.py
import os
import json
from typing import Any, Optional
import redis.asyncio as aioredis

from app.domain.models import ScanJob
from app.domain.ports import JobStorePort


DEFAULT_TTL = int(os.getenv("SCAN_JOB_TTL_SECONDS", "3600"))  # 1h default
KEY_PREFIX = "scanjob:"


class RedisJobStore(JobStorePort):
    """
    Scan jobs as JSON strings under `scanjob:<id>`.

    Survives process restarts and is shared between workers, unlike the
    in-memory store. Keys expire after SCAN_JOB_TTL_SECONDS.
    """
    def __init__(self, client: Optional[aioredis.Redis] = None, ttl: int = DEFAULT_TTL):
        self.r = client or aioredis.from_url(
            os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            encoding="utf-8",
            decode_responses=True,
        )
        self.ttl = ttl

    @classmethod
    def from_env(cls):
        url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        return cls(aioredis.from_url(url, encoding="utf-8", decode_responses=True))

    # ------- JSON helpers -------
    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.r.get(key)
        return json.loads(raw) if raw else None

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None):
        await self.r.set(key, json.dumps(value, ensure_ascii=False, default=str), ex=ttl or self.ttl)

    # ------- JobStorePort -------
    async def create(self, job: ScanJob) -> None:
        await self.set_json(KEY_PREFIX + job.id, job.model_dump(mode="json"))

    async def get(self, job_id: str) -> Optional[ScanJob]:
        data = await self.get_json(KEY_PREFIX + job_id)
        return ScanJob.model_validate(data) if data else None

    async def update(self, job: ScanJob) -> None:
        await self.set_json(KEY_PREFIX + job.id, job.model_dump(mode="json"))

    # ------- Utility -------
    async def ping(self) -> bool:
        return bool(await self.r.ping())
