"""
Tests for the account import API.

Tests cover:
- App factory and route wiring
- POST /api/v1/imports/accounts happy path, partial results, structural errors
- Malformed and oversized uploads
- Template download
"""

from __future__ import annotations

import io
import threading

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from debtdesk.core.config import reset_settings
from debtdesk.ingest.pipeline import ingest_file
from debtdesk.main import create_app
from debtdesk.routers import imports

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MINIMAL = ["first_name", "last_name", "account_number", "original_balance"]


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(), raise_server_exceptions=False)


def _upload(client: TestClient, content: bytes, filename: str = "accounts.xlsx", **params):
    return client.post(
        "/api/v1/imports/accounts",
        files={"file": (filename, content, XLSX_TYPE)},
        params=params,
    )


class TestAppFactory:
    """Test that the app wires its routers."""

    def test_routes_registered(self) -> None:
        routes = [route.path for route in create_app().routes]
        assert "/health" in routes
        assert "/api/v1/imports/accounts" in routes
        assert "/api/v1/imports/accounts/template" in routes

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["environment"] == "dev"

    def test_request_id_echoed(self, client: TestClient) -> None:
        response = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestImportAccounts:
    """Tests for POST /api/v1/imports/accounts."""

    def test_valid_file(self, client: TestClient, make_xlsx) -> None:
        content = make_xlsx([MINIMAL, ["John", "Doe", "ACC-1", "1000.00"]])
        response = _upload(client, content)

        assert response.status_code == 200
        data = response.json()
        assert data["errors"] == []
        assert data["records"] == [
            {
                "firstName": "John",
                "lastName": "Doe",
                "accountNumber": "ACC-1",
                "originalBalance": 1000.0,
                "currentBalance": 1000.0,
                "status": "active",
            }
        ]
        assert data["summary"] == {"rows": 1, "records": 1, "errors": 0, "structural": False}

    def test_partial_result_is_200(self, client: TestClient, make_xlsx) -> None:
        content = make_xlsx(
            [MINIMAL, ["John", "Doe", "ACC-1", "10"], ["Jane", "Roe", "", "20"]]
        )
        data = _upload(client, content).json()

        assert len(data["records"]) == 1
        assert data["errors"] == [
            {
                "row": 3,
                "message": "Account number is required",
                "code": "ROW_REQUIRED",
                "field": "account_number",
            }
        ]

    def test_structural_error_is_200_with_errors(self, client: TestClient, make_xlsx) -> None:
        content = make_xlsx([["first_name", "last_name"], ["John", "Doe"]])
        response = _upload(client, content)

        assert response.status_code == 200
        data = response.json()
        assert data["records"] == []
        assert data["summary"]["structural"] is True
        assert {e["code"] for e in data["errors"]} == {"STRUCT_COLUMNS"}
        assert {e["row"] for e in data["errors"]} == {1}

    def test_accumulate_query(self, client: TestClient, make_xlsx) -> None:
        content = make_xlsx([MINIMAL, ["", "", "ACC-1", "10"]])
        assert len(_upload(client, content).json()["errors"]) == 1
        assert len(_upload(client, content, accumulate="true").json()["errors"]) == 2

    def test_accumulate_from_settings(self, monkeypatch, make_xlsx) -> None:
        monkeypatch.setenv("IMPORT_ACCUMULATE_ROW_ERRORS", "true")
        reset_settings()
        client = TestClient(create_app())
        content = make_xlsx([MINIMAL, ["", "", "ACC-1", "10"]])
        assert len(_upload(client, content).json()["errors"]) == 2

    def test_csv_upload(self, client: TestClient, make_csv) -> None:
        content = make_csv([MINIMAL, ["John", "Doe", "ACC-1", "1000.00"]])
        response = client.post(
            "/api/v1/imports/accounts",
            files={"file": ("accounts.csv", content, "text/csv")},
        )
        assert response.status_code == 200
        assert len(response.json()["records"]) == 1

    def test_malformed_file_is_400(self, client: TestClient) -> None:
        response = _upload(client, b"definitely not a workbook", filename="accounts.xlsx")

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "malformed_file"
        assert "accounts.xlsx" in data["message"]

    def test_oversized_upload_is_413(self, monkeypatch, make_xlsx) -> None:
        monkeypatch.setenv("IMPORT_MAX_UPLOAD_BYTES", "100")
        reset_settings()
        client = TestClient(create_app(), raise_server_exceptions=False)
        content = make_xlsx([MINIMAL, ["John", "Doe", "ACC-1", "1000.00"]])

        response = _upload(client, content)
        assert response.status_code == 413
        assert response.json()["error"] == "payload_too_large"
        assert "limit of 100 bytes" in response.json()["message"]

    def test_upload_read_is_bounded(self, monkeypatch, make_xlsx) -> None:
        """Only limit + 1 bytes are ever pulled from the upload."""
        monkeypatch.setenv("IMPORT_MAX_UPLOAD_BYTES", "100")
        reset_settings()
        sizes: list[int] = []
        real_read = StarletteUploadFile.read

        async def recording_read(self, size: int = -1) -> bytes:
            sizes.append(size)
            return await real_read(self, size)

        monkeypatch.setattr(StarletteUploadFile, "read", recording_read)
        client = TestClient(create_app(), raise_server_exceptions=False)

        _upload(client, make_xlsx([MINIMAL, ["John", "Doe", "ACC-1", "1000.00"]]))
        assert 101 in sizes
        assert -1 not in sizes

    def test_upload_at_limit_accepted(self, monkeypatch, make_csv) -> None:
        content = make_csv([MINIMAL, ["John", "Doe", "ACC-1", "1000.00"]])
        monkeypatch.setenv("IMPORT_MAX_UPLOAD_BYTES", str(len(content)))
        reset_settings()
        client = TestClient(create_app())

        response = _upload(client, content, filename="accounts.csv")
        assert response.status_code == 200
        assert len(response.json()["records"]) == 1

    def test_unrepresentable_balance_is_row_error(self, client: TestClient, make_xlsx) -> None:
        content = make_xlsx([MINIMAL, ["John", "Doe", "ACC-1", "9" * 400]])
        data = _upload(client, content).json()

        assert data["records"] == []
        assert data["errors"] == [
            {
                "row": 2,
                "message": "Original balance must be a positive number",
                "code": "ROW_NUMBER",
                "field": "original_balance",
            }
        ]

    def test_ingestion_runs_off_the_event_loop(
        self, client: TestClient, monkeypatch, make_xlsx
    ) -> None:
        loop_threads: list[int] = []
        worker_threads: list[int] = []

        async def recording_threadpool(func, *args, **kwargs):
            loop_threads.append(threading.get_ident())
            return await run_in_threadpool(func, *args, **kwargs)

        def recording_ingest(*args, **kwargs):
            worker_threads.append(threading.get_ident())
            return ingest_file(*args, **kwargs)

        monkeypatch.setattr(imports, "run_in_threadpool", recording_threadpool)
        monkeypatch.setattr(imports, "ingest_file", recording_ingest)

        content = make_xlsx([MINIMAL, ["John", "Doe", "ACC-1", "1000.00"]])
        assert len(_upload(client, content).json()["records"]) == 1
        assert len(loop_threads) == 1
        assert len(worker_threads) == 1
        assert worker_threads[0] != loop_threads[0]

    def test_missing_file_is_422(self, client: TestClient) -> None:
        response = client.post("/api/v1/imports/accounts")
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestTemplateDownload:
    """Tests for GET /api/v1/imports/accounts/template."""

    def test_xlsx_template(self, client: TestClient) -> None:
        response = client.get("/api/v1/imports/accounts/template")

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_TYPE
        assert 'filename="accounts_template.xlsx"' in response.headers["content-disposition"]
        workbook = load_workbook(io.BytesIO(response.content))
        assert workbook.sheetnames == ["Accounts Template"]

    def test_csv_template(self, client: TestClient) -> None:
        response = client.get("/api/v1/imports/accounts/template", params={"format": "csv"})
        assert response.status_code == 200
        assert response.text.startswith("first_name,last_name,email")

    def test_unknown_format_rejected(self, client: TestClient) -> None:
        response = client.get("/api/v1/imports/accounts/template", params={"format": "ods"})
        assert response.status_code == 422

    def test_template_upload_round_trip(self, client: TestClient) -> None:
        template = client.get("/api/v1/imports/accounts/template").content
        data = _upload(client, template, filename="accounts_template.xlsx").json()
        assert data["errors"] == []
        assert data["summary"]["records"] == 2
