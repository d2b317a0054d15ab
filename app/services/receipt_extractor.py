"""
Cliente de extracción de recibos con Gemini (API REST generateContent).

Se crea una sola instancia por proceso (ver get_receipt_extractor) y se
inyecta en las rutas; los tests la reemplazan con un extractor falso.
"""
import base64
import json
import logging
import re
from functools import lru_cache

import httpx

from app.core import config
from app.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)

RECEIPT_PROMPT = """
Analyze this receipt image. Extract the following details:
- merchant: The name of the store or merchant.
- amount: The final total amount paid, as a number.
- date: The date of the transaction in YYYY-MM-DD format.
- category: Suggest a likely category from this list: Groceries, Food, Shopping, Bills, Transportation, Entertainment.

Return the result as a single, minified JSON object. For example:
{"merchant":"Walmart","amount":42.97,"date":"2025-09-13","category":"Groceries"}
"""

_FENCE_OPEN = re.compile(r"^[\s`]*```\s*(?:json)?[\s`]*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"[\s`]*```[\s`]*$")


def parse_model_output(raw: str) -> dict:
    """Quita los bloques ```json del texto y lo parsea; si no es JSON válido devuelve {}."""
    cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", raw or "")).strip()
    try:
        data = json.loads(cleaned)
    except ValueError:
        logger.warning("Receipt extraction returned invalid JSON, using defaults: %r", cleaned[:200])
        return {}
    return data if isinstance(data, dict) else {}


class ReceiptExtractor:
    def __init__(self, api_key: str, model: str, base_url: str, timeout: float = 30.0, transport=None):
        self.model = model
        self._api_key = api_key
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def extract(self, content: bytes, mime_type: str) -> dict:
        payload = {
            "contents": [{
                "role": "user",
                "parts": [
                    {"text": RECEIPT_PROMPT},
                    {"inline_data": {
                        "mime_type": mime_type,
                        "data": base64.b64encode(content).decode("ascii"),
                    }},
                ],
            }]
        }
        try:
            response = self._client.post(
                f"/models/{self.model}:generateContent",
                params={"key": self._api_key},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamFailure("Failed to process receipt with AI", str(exc)) from exc

        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        raw = "\n\n".join(p.get("text", "") for p in parts)
        return parse_model_output(raw)

    def close(self):
        self._client.close()


@lru_cache
def get_receipt_extractor() -> ReceiptExtractor:
    return ReceiptExtractor(
        api_key=config.GEMINI_API_KEY,
        model=config.GEMINI_MODEL,
        base_url=config.GEMINI_API_URL,
    )


def close_receipt_extractor() -> None:
    """Cierra el cliente HTTP compartido si llegó a crearse (apagado de la app)."""
    if get_receipt_extractor.cache_info().currsize:
        get_receipt_extractor().close()
        get_receipt_extractor.cache_clear()
