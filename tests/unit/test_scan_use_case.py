# tests/unit/test_scan_use_case.py
import asyncio
import threading

import pytest

from app.application import scan_use_case
from app.application.scan_use_case import GENERIC_FAILURE, ScanLabelUseCase
from app.domain.errors import InvalidImageError, LlmError
from app.domain.models import ScanStatus
from tests.fakes import FakeLlm


def test_scan_returns_product_and_saved_rows(use_case, png_bytes, fake_llm):
    out = asyncio.run(use_case.scan(png_bytes, "image/png"))
    assert out["scannedData"]["name"] == "Jogurt naturalny"
    assert out["savedData"][0]["id"] == 1
    assert out["dbError"] is None
    # the model only ever sees JPEG
    assert fake_llm.calls[0][:2] == b"\xff\xd8"

def test_scan_survives_db_failure(fake_llm, broken_repo, jobs, png_bytes):
    uc = ScanLabelUseCase(llm=fake_llm, repo=broken_repo, jobs=jobs)
    out = asyncio.run(uc.scan(png_bytes))
    assert out["scannedData"]["price"] == 3.49
    assert out["savedData"] is None
    assert "products_scanned" in out["dbError"]

def test_scan_rejects_bad_image(use_case, fake_llm):
    with pytest.raises(InvalidImageError):
        asyncio.run(use_case.scan(b"nope"))
    assert fake_llm.calls == []

def test_job_completes(use_case, jobs, png_bytes):
    async def _run():
        job, jpeg = await use_case.submit(png_bytes, "image/png")
        assert (await use_case.status(job.id)).status is ScanStatus.PROCESSING
        await use_case.run_job(job, jpeg)
        return await use_case.status(job.id)

    done = asyncio.run(_run())
    assert done.status is ScanStatus.COMPLETED
    assert done.scanned_data.name == "Jogurt naturalny"
    assert done.saved_data is True
    assert done.db_error is None

def test_job_completes_unsaved_when_db_down(broken_repo, jobs, png_bytes):
    uc = ScanLabelUseCase(llm=FakeLlm(), repo=broken_repo, jobs=jobs)

    async def _run():
        job, jpeg = await uc.submit(png_bytes)
        return await uc.run_job(job, jpeg)

    done = asyncio.run(_run())
    assert done.status is ScanStatus.COMPLETED
    assert done.saved_data is False
    assert done.db_error

def test_job_fails_on_unparseable_answer(repo, jobs, png_bytes):
    uc = ScanLabelUseCase(llm=FakeLlm(content="I can't read that."), repo=repo, jobs=jobs)

    async def _run():
        job, jpeg = await uc.submit(png_bytes)
        await uc.run_job(job, jpeg)
        return await uc.status(job.id)

    failed = asyncio.run(_run())
    assert failed.status is ScanStatus.FAILED
    assert failed.error == "Failed to parse model response as JSON"

def test_job_records_llm_error(repo, jobs, png_bytes):
    uc = ScanLabelUseCase(llm=FakeLlm(exc=LlmError("No content in model response")), repo=repo, jobs=jobs)

    async def _run():
        job, jpeg = await uc.submit(png_bytes)
        return await uc.run_job(job, jpeg)

    assert asyncio.run(_run()).error == "No content in model response"

def test_job_unexpected_error_gets_generic_message(repo, jobs, png_bytes):
    uc = ScanLabelUseCase(llm=FakeLlm(exc=KeyError("choices")), repo=repo, jobs=jobs)

    async def _run():
        job, jpeg = await uc.submit(png_bytes)
        return await uc.run_job(job, jpeg)

    assert asyncio.run(_run()).error == GENERIC_FAILURE

def test_unknown_job_is_none(use_case):
    assert asyncio.run(use_case.status("nope")) is None

def test_image_prep_runs_off_the_event_loop_thread(use_case, png_bytes, monkeypatch):
    seen = []
    real = scan_use_case.prepare_label_image

    def recording(data, content_type=None):
        seen.append(threading.get_ident())
        return real(data, content_type)

    monkeypatch.setattr(scan_use_case, "prepare_label_image", recording)

    async def _run():
        loop_thread = threading.get_ident()
        await use_case.scan(png_bytes, "image/png")
        return loop_thread

    loop_thread = asyncio.run(_run())
    assert len(seen) == 1
    assert seen[0] != loop_thread
