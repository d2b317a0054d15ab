import os

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core import config
from app.core.errors import UpstreamFailure
from app.database import get_session
from app.main import app
from app.models.receipt import Receipt
from app.models.transaction import Transaction
from app.services.receipt_extractor import ReceiptExtractor, get_receipt_extractor, parse_model_output
from tests.conftest import OTHER_USER_ID, USER_ID

IMAGE = ("receipt.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")


def test_upload_creates_receipt_and_expense(client, extractor):
    response = client.post("/receipts/upload", files={"receipt": IMAGE})
    assert response.status_code == 201

    body = response.json()
    assert body["userId"] == str(USER_ID)
    assert body["fileUrl"].startswith("/uploads/") and body["fileUrl"].endswith(".jpg")
    assert body["extractedData"]["merchant"] == "Walmart"
    assert body["extractedData"]["amount"] == 42.97
    assert body["extractedData"]["category"] == "Groceries"
    assert body["extractedData"]["date"].startswith("2025-09-13")

    assert extractor.calls == [(IMAGE[1], "image/jpeg")]
    stored = os.path.join(config.UPLOAD_DIR, os.path.basename(body["fileUrl"]))
    with open(stored, "rb") as fh:
        assert fh.read() == IMAGE[1]

    [tx] = client.get("/transactions").json()["transactions"]
    assert tx["name"] == "Walmart"
    assert tx["category"] == "Groceries"
    assert tx["cost"] == 42.97
    assert tx["isIncome"] is False
    assert tx["addedOn"].startswith("2025-09-13")
    assert tx["note"] == f"Added from receipt: {body['fileUrl']}"


def test_upload_uses_defaults_when_extraction_is_empty(client, extractor):
    extractor.result = {"amount": "not a number", "date": "someday"}
    body = client.post("/receipts/upload", files={"receipt": IMAGE}).json()

    assert body["extractedData"]["merchant"] == "Unknown Merchant"
    assert body["extractedData"]["amount"] == 0
    assert body["extractedData"]["category"] == "Miscellaneous"

    [tx] = client.get("/transactions").json()["transactions"]
    assert tx["category"] == "Miscellaneous"
    assert tx["cost"] == 0


def test_upload_requires_file(client):
    response = client.post("/receipts/upload")
    assert response.status_code == 400
    assert response.json()["message"] == "Please upload a file"


def test_upload_rejects_unsupported_file_type(client, extractor):
    before = set(os.listdir(config.UPLOAD_DIR))
    page = ("x.html", b"<script>alert(1)</script>", "text/html")

    response = client.post("/receipts/upload", files={"receipt": page})
    assert response.status_code == 400
    assert response.json()["message"] == "Unsupported file type"
    assert extractor.calls == []
    assert set(os.listdir(config.UPLOAD_DIR)) == before
    assert client.get("/receipts").json() == []


def test_stored_suffix_follows_content_type(client):
    upload = ("scan.html", b"%PDF-1.4", "application/pdf")
    body = client.post("/receipts/upload", files={"receipt": upload}).json()
    assert body["fileUrl"].endswith(".pdf")


def test_upload_reports_extraction_failure(client, extractor):
    extractor.error = UpstreamFailure("Failed to process receipt with AI", "503 from upstream")
    response = client.post("/receipts/upload", files={"receipt": IMAGE})
    assert response.status_code == 500
    assert response.json() == {
        "message": "Failed to process receipt with AI",
        "error": "503 from upstream",
    }
    assert client.get("/receipts").json() == []


def test_receipt_survives_failed_transaction(client, engine):
    class FailingLedgerSession(Session):
        def commit(self):
            if any(isinstance(obj, Transaction) for obj in self.new):
                raise SQLAlchemyError("ledger unavailable")
            super().commit()

    def _get_session():
        with FailingLedgerSession(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    response = client.post("/receipts/upload", files={"receipt": IMAGE})
    assert response.status_code == 201

    with Session(engine) as session:
        assert len(session.exec(select(Receipt)).all()) == 1
        assert session.exec(select(Transaction)).all() == []


def test_list_receipts(client, login_as):
    client.post("/receipts/upload", files={"receipt": IMAGE})
    assert len(client.get("/receipts").json()) == 1

    login_as(OTHER_USER_ID)
    assert client.get("/receipts").json() == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"merchant":"Target","amount":10}', {"merchant": "Target", "amount": 10}),
        ('```json\n{"merchant":"Target"}\n```', {"merchant": "Target"}),
        ("  ``` JSON {\"amount\": 3.5} ```  ", {"amount": 3.5}),
        ("I could not read this receipt", {}),
        ("[1, 2]", {}),
        ("", {}),
    ],
)
def test_parse_model_output(raw, expected):
    assert parse_model_output(raw) == expected


def _extractor(handler):
    return ReceiptExtractor(
        api_key="k",
        model="gemini-test",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(handler),
    )


def test_extractor_calls_generate_content():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={
            "candidates": [{"content": {"parts": [
                {"text": '```json\n{"merchant":"Cafe","amount":4.2,"date":"2025-01-02","category":"Food"}\n```'},
            ]}}]
        })

    result = _extractor(handler).extract(b"img", "image/png")
    assert result == {"merchant": "Cafe", "amount": 4.2, "date": "2025-01-02", "category": "Food"}
    assert seen["url"].startswith("https://gemini.test/v1beta/models/gemini-test")
    assert "generateContent" in seen["url"]
    assert seen["url"].endswith("key=k")
    assert b'"mime_type":"image/png"' in seen["body"].replace(b" ", b"")


def test_extractor_wraps_http_errors():
    extractor = _extractor(lambda request: httpx.Response(503, json={"error": "busy"}))
    with pytest.raises(UpstreamFailure):
        extractor.extract(b"img", "image/png")


def test_extractor_without_candidates_returns_empty():
    assert _extractor(lambda request: httpx.Response(200, json={})).extract(b"img", "image/png") == {}


def test_shutdown_closes_shared_extractor():
    get_receipt_extractor.cache_clear()
    shared = get_receipt_extractor()

    with TestClient(app):
        pass

    assert shared._client.is_closed
    assert get_receipt_extractor.cache_info().currsize == 0
