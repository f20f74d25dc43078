# app/domain/parsing.py
from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from app.domain.errors import ProductParseError
from app.domain.models import Macronutrients, ProductRecord

log = logging.getLogger("labelscan.parsing")

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_NUMBER = re.compile(r"[-+]?\d+(?:\.\d+)?")
# "1 234,5", NBSP and narrow NBSP as thousands separators
_DIGIT_GAP = re.compile(r"(?<=\d)[ \u00a0\u202f]+(?=\d)")
MACRO_KEYS = ("calories", "protein", "carbohydrates", "fat")
UNKNOWN_NAME = "Unknown Product"


def extract_json_text(content: str) -> str:
    """Body of the first ```json fenced block, else the whole text."""
    m = _JSON_FENCE.search(content or "")
    return m.group(1) if m else (content or "")


def to_number(value: Any) -> Optional[float]:
    """
    Lenient numeric coercion for label values:
      12 → 12.0, "4,99" → 4.99, "250 kcal" → 250.0, "1,234.5" → 1234.5,
      "1 234,5" / "1.234,5" → 1234.5.
    Returns None when nothing numeric is found or the value is not finite.
    Booleans are not numbers.
    """
    if isinstance(value, bool) or value is None:
        return None
    num: Optional[float] = None
    if isinstance(value, (int, float)):
        try:
            num = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        m = _NUMBER.search(_normalize_separators(value.strip()))
        if m:
            num = float(m.group(0))
    if num is None or not math.isfinite(num):
        return None
    return num


def _normalize_separators(s: str) -> str:
    # the right-most of "," / "." is the decimal mark
    s = _DIGIT_GAP.sub("", s)
    comma, dot = s.rfind(","), s.rfind(".")
    if comma >= 0 and dot >= 0:
        if comma > dot:
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if comma >= 0:
        return s.replace(",", ".") if s.count(",") == 1 else s.replace(",", "")
    if s.count(".") > 1:
        return s.replace(".", "")
    return s


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name}")


def _ingredients(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [p.strip() for p in raw.split(",") if p.strip()]
    if not isinstance(raw, list):
        raise ProductParseError("Invalid product data structure")
    return [str(x).strip() for x in raw if x is not None and str(x).strip()]


def _macros(raw: Any) -> Macronutrients:
    if raw is None:
        return Macronutrients(calories=0, protein=0, carbohydrates=0, fat=0)
    if not isinstance(raw, dict):
        raise ProductParseError("Invalid product data structure")
    values: Dict[str, float] = {}
    for key in MACRO_KEYS:
        num = to_number(raw.get(key))
        if num is None:
            raise ProductParseError("Invalid product data structure")
        values[key] = num
    return Macronutrients(**values)


def _vitamins(raw: Any) -> Optional[Dict[str, float]]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ProductParseError("Invalid product data structure")
    out: Dict[str, float] = {}
    for k, v in raw.items():
        num = to_number(v)
        if num is None:
            log.debug("dropping vitamin %r with non-numeric amount %r", k, v)
            continue
        out[str(k)] = num
    return out


def parse_product(content: str) -> ProductRecord:
    """
    Turn the raw model answer into a ProductRecord.

    Field mapping:
      name           ← product_name | name | "Unknown Product"
      price          ← price (null / unreadable → None)
      ingredients    ← ingredients (list, or comma-separated string) | []
      macronutrients ← macronutrients | all zeros
      vitamins       ← vitamins (null → None)
    """
    try:
        parsed = json.loads(extract_json_text(content), parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        log.error("model response is not JSON: %s", e)
        raise ProductParseError("Failed to parse model response as JSON") from e

    if not isinstance(parsed, dict):
        raise ProductParseError("Invalid product data structure")

    name = parsed.get("product_name") or parsed.get("name") or UNKNOWN_NAME
    if not isinstance(name, str):
        raise ProductParseError("Invalid product data structure")

    return ProductRecord(
        name=name.strip() or UNKNOWN_NAME,
        price=to_number(parsed.get("price")),
        ingredients=_ingredients(parsed.get("ingredients")),
        macronutrients=_macros(parsed.get("macronutrients")),
        vitamins=_vitamins(parsed.get("vitamins")),
    )
