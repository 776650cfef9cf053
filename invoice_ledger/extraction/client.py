"""
Invoice Extraction Client Module.

This module provides the InvoiceExtractionClient that sends an invoice
document to the external extraction service (Gemini generateContent
REST endpoint) and turns its JSON answer into InvoiceData.

Approach:
    One request per invoice: system instruction + user prompt (with the
    optional price book) + the document as inline base64 data, asking
    for a JSON response at low temperature.

Failure modes, all raised as ExtractionError subclasses:
    - MissingCredentialError: no API key configured
    - ExtractionServiceError: network failure or non-2xx status
    - MalformedResponseError: empty body, non-JSON body, or no
      line_items array

Author: ML Engineering Team
"""

import base64
import json
import os
import time
from typing import Any, Dict, Optional

import httpx

from config import get_config
from invoice_ledger.models.invoice_data import InvoiceData
from invoice_ledger.postprocessor.processor import LedgerPostProcessor
from invoice_ledger.utils.exceptions import (
    MissingCredentialError,
    ExtractionServiceError,
    MalformedResponseError
)
from invoice_ledger.utils.logger import get_logger
from .prompts import SYSTEM_INSTRUCTION, build_user_prompt

# Initialize module logger
logger = get_logger(__name__)


def strip_code_fence(text: str) -> str:
    """
    Remove a surrounding Markdown code fence from a model answer.

    Example:
        >>> strip_code_fence('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    text = text.strip()
    if text.startswith("```"):
        text = text.strip("`").strip()
        if text.lower().startswith("json"):
            text = text[4:].strip()
    return text


class InvoiceExtractionClient:
    """
    HTTP client for the invoice extraction service.

    Attributes:
        model: Model name used in the endpoint path
        api_base: Service base URL
        api_key_env: Environment variable holding the API key
        temperature: Sampling temperature
        timeout: Request timeout in seconds
        price_book_max_chars: Price book text beyond this length is dropped

    Example:
        >>> client = InvoiceExtractionClient()
        >>> data = client.extract(pdf_bytes, "application/pdf")
        >>> print(data.invoice_header.invoice_total)
    """

    DEFAULT_MODEL = "gemini-2.5-flash"
    DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        post_processor: Optional[LedgerPostProcessor] = None
    ) -> None:
        """
        Initialize the extraction client.

        Args:
            api_key: API key. If None, read from the configured
                     environment variable at request time.
            model: Model name. If None, uses config.
            api_base: Base URL. If None, uses config.
            timeout: Request timeout in seconds. If None, uses config.
            http_client: Pre-built httpx.Client (e.g. with a mock transport).
            post_processor: Payload post-processor; a default one if None.
        """
        self.api_key = api_key
        self.api_key_env = get_config("extraction.api_key_env", "API_KEY")
        self.model = model or get_config("extraction.model", self.DEFAULT_MODEL)
        self.api_base = (api_base or get_config(
            "extraction.api_base", self.DEFAULT_API_BASE
        )).rstrip("/")
        self.timeout = timeout or get_config("extraction.timeout_seconds", 120)
        self.temperature = get_config("extraction.temperature", 0.1)
        self.price_book_max_chars = get_config("extraction.price_book_max_chars", 200000)

        self._http_client = http_client
        self.post_processor = post_processor or LedgerPostProcessor()

        logger.debug(f"InvoiceExtractionClient initialized with model: {self.model}")

    @property
    def endpoint(self) -> str:
        """generateContent URL for the configured model."""
        return f"{self.api_base}/models/{self.model}:generateContent"

    def _resolve_api_key(self) -> str:
        """Return the API key or raise MissingCredentialError."""
        api_key = self.api_key or os.environ.get(self.api_key_env)
        if not api_key:
            raise MissingCredentialError(self.api_key_env)
        return api_key

    def build_request(
        self,
        document: bytes,
        mime_type: str,
        price_book_text: Optional[str] = None,
        price_book_note: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the generateContent request body.

        Args:
            document: Raw invoice bytes.
            mime_type: MIME type of the document.
            price_book_text: Optional price book contents.
            price_book_note: Optional note about an unreadable price book.

        Returns:
            JSON-serializable request body.
        """
        prompt = build_user_prompt(
            price_book_text,
            price_book_note,
            max_chars=self.price_book_max_chars
        )

        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": prompt},
                        {
                            "inlineData": {
                                "mimeType": mime_type,
                                "data": base64.b64encode(document).decode("ascii")
                            }
                        }
                    ]
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "temperature": self.temperature
            }
        }

    def extract(
        self,
        document: bytes,
        mime_type: str,
        price_book_text: Optional[str] = None,
        price_book_note: Optional[str] = None
    ) -> InvoiceData:
        """
        Extract an invoice through the service.

        Args:
            document: Raw invoice bytes.
            mime_type: MIME type of the document.
            price_book_text: Optional price book contents.
            price_book_note: Optional note about an unreadable price book.

        Returns:
            InvoiceData built from the service answer.

        Raises:
            MissingCredentialError: If no API key is configured.
            ExtractionServiceError: If the service cannot be reached or
                answers with an error status.
            MalformedResponseError: If the answer is empty, not JSON, or
                lacks a line_items array.
        """
        api_key = self._resolve_api_key()
        body = self.build_request(document, mime_type, price_book_text, price_book_note)

        logger.info(
            f"Requesting extraction ({mime_type}, {len(document)} bytes, "
            f"price book: {'yes' if price_book_text else 'no'})"
        )
        start_time = time.time()

        envelope = self._post(body, api_key)
        text = self._response_text(envelope)
        payload = self._parse_payload(text)

        data = self.post_processor.process(payload)

        logger.info(
            f"Extraction complete: {data.row_count} rows, "
            f"time: {time.time() - start_time:.2f}s"
        )
        return data

    def _post(self, body: Dict[str, Any], api_key: str) -> Dict[str, Any]:
        """Send the request and return the decoded response envelope."""
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": api_key
        }

        try:
            if self._http_client is not None:
                resp = self._http_client.post(self.endpoint, json=body, headers=headers)
                resp.raise_for_status()
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    resp = client.post(self.endpoint, json=body, headers=headers)
                    resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Extraction service returned HTTP {exc.response.status_code}")
            raise ExtractionServiceError(
                exc.response.text[:500],
                status_code=exc.response.status_code
            ) from exc
        except httpx.RequestError as exc:
            logger.error(f"Could not reach extraction service: {exc}")
            raise ExtractionServiceError(f"Connection error: {exc}") from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError("service response is not JSON") from exc

    @staticmethod
    def _response_text(envelope: Any) -> str:
        """Join the text parts of the first candidate."""
        try:
            parts = envelope["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise MalformedResponseError("Received empty response from AI") from exc

        if not text.strip():
            raise MalformedResponseError("Received empty response from AI")
        return text

    @staticmethod
    def _parse_payload(text: str) -> Dict[str, Any]:
        """Decode the model's JSON answer and check its basic shape."""
        try:
            payload = json.loads(strip_code_fence(text))
        except json.JSONDecodeError as exc:
            raise MalformedResponseError("answer is not valid JSON") from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("line_items"), list):
            raise MalformedResponseError("line_items is missing or not an array")

        return payload

    def get_client_info(self) -> Dict[str, Any]:
        """
        Get information about the configured service.

        Returns:
            Dictionary with endpoint details (no credentials).
        """
        return {
            'model': self.model,
            'endpoint': self.endpoint,
            'temperature': self.temperature,
            'timeout': self.timeout,
            'api_key_env': self.api_key_env,
            'price_book_max_chars': self.price_book_max_chars
        }
