# tests/conftest.py
"""
Fixtures compartidos: un fake en memoria del servicio de Google Sheets v4 y
un ScanStore sobre SQLite.
"""
from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httplib2
import pytest
from googleapiclient.errors import HttpError
from sqlalchemy import create_engine, insert

from scan_ledger.integrations.scan_store import ScanStore, metadata, scanned_data
from scan_ledger.integrations.sheets_client import SheetsLedgerClient

SPREADSHEET_ID = "test-spreadsheet"

_RANGE = re.compile(r"^'(?P<title>(?:[^']|'')+)'!(?P<span>.+)$")
_CELL = re.compile(r"^[A-Z]+(?P<row>\d*)$")


def make_http_error(status: int, message: str) -> HttpError:
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content, uri="https://sheets.googleapis.com/v4/spreadsheets/test")


class _FakeRequest:
    def __init__(self, callback):
        self._callback = callback

    def execute(self):
        return self._callback()


class _FakeValues:
    def __init__(self, service: "FakeSheetsService") -> None:
        self._service = service

    def get(self, spreadsheetId: str, range: str):  # noqa: N803 - API compatibility
        return _FakeRequest(lambda: self._service._handle_get(range))

    def append(self, spreadsheetId: str, range: str, valueInputOption: str, body: Dict[str, Any]):  # noqa: N803
        return _FakeRequest(lambda: self._service._handle_append(range, valueInputOption, body))

    def update(self, spreadsheetId: str, range: str, valueInputOption: str, body: Dict[str, Any]):  # noqa: N803
        return _FakeRequest(lambda: self._service._handle_update(range, valueInputOption, body))

    def clear(self, spreadsheetId: str, range: str, body: Dict[str, Any]):  # noqa: N803
        return _FakeRequest(lambda: self._service._handle_clear(range))


class _FakeSpreadsheets:
    def __init__(self, service: "FakeSheetsService") -> None:
        self._service = service

    def values(self) -> _FakeValues:
        return _FakeValues(self._service)

    def get(self, spreadsheetId: str, includeGridData: bool = False):  # noqa: N803
        return _FakeRequest(self._service._handle_describe)

    def batchUpdate(self, spreadsheetId: str, body: Dict[str, Any]):  # noqa: N802, N803
        return _FakeRequest(lambda: self._service._handle_batch_update(body))


class FakeSheetsService:
    """
    Simula una spreadsheet: un dict título -> filas. Solo entiende spans que
    empiezan en la columna A ("A:D", "A2:D", "A1:D1").
    """

    def __init__(self, sheets: Optional[Dict[str, List[List[Any]]]] = None) -> None:
        self.title = "QR Scans"
        self.sheets: Dict[str, List[List[Any]]] = {
            name: [list(row) for row in rows] for name, rows in (sheets or {}).items()
        }
        self.calls: List[tuple] = []
        self.fail_on_append: Optional[int] = None
        self.append_count = 0

    def spreadsheets(self) -> _FakeSpreadsheets:
        return _FakeSpreadsheets(self)

    # Internal helpers -------------------------------------------------
    def _resolve(self, range_spec: str) -> tuple[List[List[Any]], int]:
        match = _RANGE.match(range_spec)
        if not match:
            raise make_http_error(400, f"Unable to parse range: {range_spec}")
        title = match.group("title").replace("''", "'")
        if title not in self.sheets:
            raise make_http_error(400, f"Unable to parse range: {range_spec}")
        start = match.group("span").split(":")[0]
        cell = _CELL.match(start)
        start_row = int(cell.group("row")) if cell and cell.group("row") else 1
        return self.sheets[title], start_row - 1

    def _handle_get(self, range_spec: str) -> Dict[str, Any]:
        self.calls.append(("get", range_spec))
        rows, start = self._resolve(range_spec)
        values = [list(row) for row in rows[start:]]
        if range_spec.endswith("1:D1"):
            values = values[:1]
        while values and not any(values[-1]):
            values.pop()
        return {"range": range_spec, "values": values} if values else {"range": range_spec}

    def _handle_append(self, range_spec: str, option: str, body: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("append", range_spec, option))
        self.append_count += 1
        if self.fail_on_append is not None and self.append_count == self.fail_on_append:
            raise make_http_error(429, "Quota exceeded for quota metric 'Write requests'")
        rows, _ = self._resolve(range_spec)
        while rows and not any(rows[-1]):
            rows.pop()
        first = len(rows) + 1
        new_rows = [list(row) for row in body["values"]]
        rows.extend(new_rows)
        return {
            "updates": {
                "updatedRange": f"{range_spec.split('!')[0]}!A{first}:D{len(rows)}",
                "updatedRows": len(new_rows),
                "updatedCells": sum(len(row) for row in new_rows),
            }
        }

    def _handle_update(self, range_spec: str, option: str, body: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("update", range_spec, option))
        rows, start = self._resolve(range_spec)
        new_rows = [list(row) for row in body["values"]]
        while len(rows) < start + len(new_rows):
            rows.append([])
        for offset, row in enumerate(new_rows):
            rows[start + offset] = row
        return {
            "updatedRange": range_spec,
            "updatedRows": len(new_rows),
            "updatedCells": sum(len(row) for row in new_rows),
        }

    def _handle_clear(self, range_spec: str) -> Dict[str, Any]:
        self.calls.append(("clear", range_spec))
        rows, start = self._resolve(range_spec)
        for index in range(start, len(rows)):
            rows[index] = []
        return {"clearedRange": range_spec}

    def _handle_describe(self) -> Dict[str, Any]:
        self.calls.append(("describe",))
        return {
            "spreadsheetId": SPREADSHEET_ID,
            "properties": {"title": self.title},
            "spreadsheetUrl": f"https://docs.google.com/spreadsheets/d/{SPREADSHEET_ID}/edit",
            "sheets": [
                {"properties": {"sheetId": index, "title": name}}
                for index, name in enumerate(self.sheets)
            ],
        }

    def _handle_batch_update(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("batchUpdate",))
        replies = []
        for request in body.get("requests", []):
            title = request["addSheet"]["properties"]["title"]
            if title in self.sheets:
                raise make_http_error(
                    400,
                    f'Invalid requests[0].addSheet: A sheet with the name "{title}" already exists. '
                    "Please enter another name.",
                )
            self.sheets[title] = []
            replies.append({"addSheet": {"properties": {"sheetId": len(self.sheets) - 1, "title": title}}})
        return {"spreadsheetId": SPREADSHEET_ID, "replies": replies}

    def data_rows(self, title: str) -> List[List[Any]]:
        rows = [list(row) for row in self.sheets.get(title, [])[1:]]
        return [row for row in rows if any(row)]


@pytest.fixture
def fake_service() -> FakeSheetsService:
    return FakeSheetsService({"Sheet1": []})


@pytest.fixture
def sheets_client(fake_service: FakeSheetsService) -> SheetsLedgerClient:
    return SheetsLedgerClient(SPREADSHEET_ID, service=fake_service)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'scans.db'}")
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def scan_store(engine) -> ScanStore:
    return ScanStore(engine)


@pytest.fixture
def insert_scans(engine):
    """Inserta (data, scanned_at) en scanned_data."""

    def _insert(*scans: tuple[str, datetime]) -> None:
        with engine.begin() as conn:
            conn.execute(
                insert(scanned_data),
                [
                    {"data": data, "scanned_at": scanned_at.astimezone(timezone.utc).replace(tzinfo=None)}
                    for data, scanned_at in scans
                ],
            )

    return _insert
