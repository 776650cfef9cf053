"""Tests for the extraction service client, using an httpx mock transport."""

import base64
import json

import httpx
import pytest

from invoice_ledger.extraction import (
    InvoiceExtractionClient,
    PRICE_BOOK_UNREADABLE_NOTE,
    build_user_prompt,
    strip_code_fence,
)
from invoice_ledger.utils.exceptions import (
    ExtractionError,
    ExtractionServiceError,
    MalformedResponseError,
    MissingCredentialError,
)


def envelope(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def make_client():
    """Build a client whose HTTP calls go to handler."""
    def _make_client(handler):
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        return InvoiceExtractionClient(http_client=http_client)
    return _make_client


def test_successful_extraction(api_key, make_client, raw_payload):
    seen = {}

    def handler(request):
        seen['request'] = request
        return httpx.Response(200, json=envelope(json.dumps(raw_payload)))

    data = make_client(handler).extract(b"%PDF-1.4", "application/pdf")

    assert data.row_count == 2
    assert data.invoice_header.invoice_total == 500.0

    request = seen['request']
    assert request.url.path.endswith("/models/gemini-2.5-flash:generateContent")
    assert request.headers["x-goog-api-key"] == "test-key"

    body = json.loads(request.content)
    inline = body["contents"][0]["parts"][1]["inlineData"]
    assert inline["mimeType"] == "application/pdf"
    assert base64.b64decode(inline["data"]) == b"%PDF-1.4"
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["temperature"] == 0.1


def test_fenced_answer_is_accepted(api_key, make_client):
    answer = '```json\n{"invoice_header": {}, "line_items": [{"qty": 1}]}\n```'
    client = make_client(lambda request: httpx.Response(200, json=envelope(answer)))

    assert client.extract(b"img", "image/png").row_count == 1


def test_missing_api_key(monkeypatch, make_client):
    monkeypatch.delenv("API_KEY", raising=False)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=envelope("{}"))

    with pytest.raises(MissingCredentialError) as excinfo:
        make_client(handler).extract(b"img", "image/png")

    assert calls == []
    assert excinfo.value.message == (
        "API Key is missing. Please check your environment configuration."
    )


def test_explicit_api_key_wins(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    seen = {}

    def handler(request):
        seen['key'] = request.headers["x-goog-api-key"]
        return httpx.Response(200, json=envelope('{"line_items": []}'))

    client = InvoiceExtractionClient(
        api_key="explicit",
        http_client=httpx.Client(transport=httpx.MockTransport(handler))
    )
    client.extract(b"img", "image/png")

    assert seen['key'] == "explicit"


def test_error_status(api_key, make_client):
    client = make_client(lambda request: httpx.Response(500, text="quota exceeded"))

    with pytest.raises(ExtractionServiceError) as excinfo:
        client.extract(b"img", "image/png")

    assert excinfo.value.details["status_code"] == 500
    assert "quota exceeded" in excinfo.value.details["reason"]


def test_connection_failure(api_key, make_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExtractionServiceError) as excinfo:
        make_client(handler).extract(b"img", "image/png")

    assert "Connection error" in excinfo.value.details["reason"]


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>not json</html>"),
    httpx.Response(200, json={"candidates": []}),
    httpx.Response(200, json=envelope("   ")),
    httpx.Response(200, json=envelope("Sorry, I cannot read this invoice.")),
    httpx.Response(200, json=envelope('{"invoice_header": {}}')),
    httpx.Response(200, json=envelope('{"line_items": "none"}')),
    httpx.Response(200, json=envelope('[1, 2, 3]')),
])
def test_malformed_answers(api_key, make_client, response):
    client = make_client(lambda request: response)

    with pytest.raises(MalformedResponseError):
        client.extract(b"img", "image/png")


def test_errors_share_a_base_class():
    assert issubclass(MissingCredentialError, ExtractionError)
    assert issubclass(ExtractionServiceError, ExtractionError)
    assert issubclass(MalformedResponseError, ExtractionError)


def test_price_book_is_sent_truncated():
    client = InvoiceExtractionClient(api_key="k")
    client.price_book_max_chars = 10

    body = client.build_request(b"img", "image/png", price_book_text="0123456789ABCDEF")
    prompt = body["contents"][0]["parts"][0]["text"]

    assert "HERE IS THE PRICE BOOK DATA (CSV format):\n0123456789\n" in prompt
    assert "ABCDEF" not in prompt


def test_prompt_mentions_unreadable_price_book():
    prompt = build_user_prompt(price_book_note=PRICE_BOOK_UNREADABLE_NOTE)

    assert prompt.endswith(PRICE_BOOK_UNREADABLE_NOTE)
    assert "PRICE BOOK DATA" not in prompt


def test_strip_code_fence():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('```\n[]\n```') == '[]'
    assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'


def test_client_info_has_no_credentials():
    info = InvoiceExtractionClient(api_key="secret").get_client_info()

    assert "secret" not in json.dumps(info)
    assert info["endpoint"].endswith(":generateContent")
