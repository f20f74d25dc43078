import pytest
from pydantic import ValidationError

from app.domain.models import Macronutrients, ProductRecord, ScanJob, ScanStatus


def _product(**kw):
    base = dict(name="Woda", macronutrients=Macronutrients(calories=0, protein=0, carbohydrates=0, fat=0))
    base.update(kw)
    return ProductRecord(**base)

def test_product_is_frozen():
    p = _product()
    with pytest.raises(ValidationError):
        p.name = "Sok"

def test_to_row_fills_db_defaults():
    row = _product().to_row()
    assert row["price"] == 0
    assert row["vitamins"] == {}

def test_to_row_keeps_values():
    row = _product(price=1.5, vitamins={"C": 30.0}).to_row()
    assert row["price"] == 1.5
    assert row["vitamins"] == {"C": 30.0}

def test_job_lifecycle_public_shape():
    job = ScanJob(id="abc")
    assert job.to_public()["status"] == "processing"
    assert "scannedData" not in job.to_public()

    done = job.complete(_product(), saved=True, db_error=None)
    assert done.status is ScanStatus.COMPLETED
    out = done.to_public()
    assert out["scannedData"]["name"] == "Woda"
    assert out["savedData"] is True
    assert "dbError" not in out
    # original job untouched
    assert job.status is ScanStatus.PROCESSING

def test_job_fail_records_error():
    out = ScanJob(id="x").fail("boom").to_public()
    assert out["status"] == "failed"
    assert out["error"] == "boom"
