# app/infra/llm/openai_adapter.py
from __future__ import annotations
import os, json, base64, logging
from typing import Any, Dict, List

from openai import AsyncOpenAI

from app.domain.errors import LlmError
from app.domain.ports import VisionLlmPort

log = logging.getLogger("labelscan.llm")

SYSTEM_PROMPT = (
    "You are a product label analyzer. Extract information from the image and return it "
    "in JSON format matching the ProductData interface. The product may be in Polish."
)

USER_PROMPT = (
    "Analyze this product label. Extract the product name, price (if available), list of "
    "ingredients, macronutrients (calories, protein, carbohydrates, fat), and vitamins "
    "(if available). Format the response as JSON matching the ProductData interface. "
    "If price or vitamins are not available, use null."
)

# Returned in DEV_MODE so the whole flow runs without an API key
OFFLINE_SAMPLE = {
    "product_name": "Sample Product (offline)",
    "price": None,
    "ingredients": [],
    "macronutrients": {"calories": 0, "protein": 0, "carbohydrates": 0, "fat": 0},
    "vitamins": None,
}


class OpenAIVisionLlm(VisionLlmPort):
    def __init__(self, client: AsyncOpenAI | None = None):
        self.api_key = os.getenv("OPENAI_API_KEY", "")
        self.dev_mode = os.getenv("DEV_MODE", "0") == "1"
        self.model = os.getenv("LLM_MODEL", "gpt-4o-mini")
        self.max_tokens = int(os.getenv("LLM_MAX_TOKENS", "500"))
        self.temperature = float(os.getenv("LLM_TEMPERATURE", "0.2"))
        self._client = client

    def configured(self) -> bool:
        return self._client is not None or (bool(self.api_key) and not self.dev_mode)

    def _ensure_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    @staticmethod
    def build_messages(image_bytes: bytes) -> List[Dict[str, Any]]:
        b64 = base64.b64encode(image_bytes).decode("ascii")
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{b64}"}},
                ],
            },
        ]

    async def describe_label(self, image_bytes: bytes) -> str:
        if not self.configured():
            log.warning("OpenAI not configured (DEV_MODE or missing key); returning offline sample")
            return json.dumps(OFFLINE_SAMPLE)

        client = self._ensure_client()
        try:
            rsp = await client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(image_bytes),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            log.exception("OpenAI request failed")
            raise LlmError(f"Vision model request failed: {e}") from e

        content = rsp.choices[0].message.content if rsp.choices else None
        if not content:
            raise LlmError("No content in model response")

        log.info("Raw model response: %s", content)
        return content
