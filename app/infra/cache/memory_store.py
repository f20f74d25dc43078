# app/infra/cache/memory_store.py
from __future__ import annotations

import asyncio
from typing import Dict, Optional

from app.domain.models import ScanJob
from app.domain.ports import JobStorePort


class InMemoryJobStore(JobStorePort):
    """
    Process-local job map. Jobs are lost on restart and are not shared
    between uvicorn workers; use JOB_STORE=redis for that.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, ScanJob] = {}
        self._lock = asyncio.Lock()

    async def create(self, job: ScanJob) -> None:
        async with self._lock:
            self._jobs[job.id] = job

    async def get(self, job_id: str) -> Optional[ScanJob]:
        async with self._lock:
            return self._jobs.get(job_id)

    async def update(self, job: ScanJob) -> None:
        async with self._lock:
            self._jobs[job.id] = job
