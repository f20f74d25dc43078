# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.application.scan_use_case import ScanLabelUseCase
from app.infra.cache.memory_store import InMemoryJobStore
from app.infra.repo.sql_repo import SqlProductRepo
from tests.fakes import BrokenRepo, FakeLlm, make_image


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def repo():
    r = SqlProductRepo(engine=_memory_engine())
    r._ensure_schema()
    return r


@pytest.fixture
def broken_repo():
    r = BrokenRepo(engine=_memory_engine())
    r._ensure_schema()
    return r


@pytest.fixture
def unreachable_repo():
    """Repo whose database file can never be opened."""
    return SqlProductRepo(engine=create_engine("sqlite:////nonexistent-dir/labels.db"))


@pytest.fixture
def fake_llm():
    return FakeLlm()


@pytest.fixture
def jobs():
    return InMemoryJobStore()


@pytest.fixture
def use_case(fake_llm, repo, jobs):
    return ScanLabelUseCase(llm=fake_llm, repo=repo, jobs=jobs)


def _client(use_case, repo, jobs, llm):
    from main import app
    from app.container import get_job_store, get_product_repo, get_scan_use_case, get_vision_llm

    app.dependency_overrides[get_scan_use_case] = lambda: use_case
    app.dependency_overrides[get_product_repo] = lambda: repo
    app.dependency_overrides[get_job_store] = lambda: jobs
    app.dependency_overrides[get_vision_llm] = lambda: llm
    return TestClient(app)


@pytest.fixture
def client(use_case, repo, jobs, fake_llm):
    """App with the LLM, DB and job store swapped for in-process fakes."""
    yield _client(use_case, repo, jobs, fake_llm)
    from main import app
    app.dependency_overrides.clear()


@pytest.fixture
def client_without_db(unreachable_repo, jobs, fake_llm):
    """Same app, but the database cannot be reached."""
    uc = ScanLabelUseCase(llm=fake_llm, repo=unreachable_repo, jobs=jobs)
    yield _client(uc, unreachable_repo, jobs, fake_llm)
    from main import app
    app.dependency_overrides.clear()
