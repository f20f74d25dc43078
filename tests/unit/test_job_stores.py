# tests/unit/test_job_stores.py
import asyncio
import json

from app.domain.models import Macronutrients, ProductRecord, ScanJob, ScanStatus
from app.infra.cache.memory_store import InMemoryJobStore
from app.infra.cache.redis_cache import KEY_PREFIX, RedisJobStore


class FakeRedis:
    """The handful of redis.asyncio calls RedisJobStore makes."""
    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex

    async def ping(self):
        return True


def _product():
    return ProductRecord(
        name="Kefir", price=2.99, ingredients=["mleko"],
        macronutrients=Macronutrients(calories=50, protein=3, carbohydrates=4, fat=2),
        vitamins={"B2": 0.2},
    )


async def _roundtrip(store):
    job = ScanJob(id="job1")
    await store.create(job)
    got = await store.get("job1")
    assert got.status is ScanStatus.PROCESSING

    await store.update(got.complete(_product(), saved=True, db_error=None))
    done = await store.get("job1")
    assert done.status is ScanStatus.COMPLETED
    assert done.scanned_data == _product()
    assert done.saved_data is True
    assert await store.get("missing") is None


def test_memory_store_ops():
    store = InMemoryJobStore()
    asyncio.run(_roundtrip(store))

def test_redis_store_ops():
    fake = FakeRedis()
    store = RedisJobStore(client=fake, ttl=120)
    asyncio.run(_roundtrip(store))
    raw = json.loads(fake.data[KEY_PREFIX + "job1"])
    assert raw["status"] == "completed"
    assert fake.ttls[KEY_PREFIX + "job1"] == 120

def test_redis_store_ping():
    fake = FakeRedis()
    store = RedisJobStore(client=fake)

    async def _run():
        await store.create(ScanJob(id="a"))
        assert await store.ping()
        assert (await store.get("a")).status is ScanStatus.PROCESSING

    asyncio.run(_run())
