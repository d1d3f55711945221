# scan_ledger/domain/ledger.py
"""
Tipos del ledger: direcciones de rango, filas, registros de escaneo y
resultados de cada operación remota.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, NamedTuple, Optional, Sequence

LEDGER_WIDTH = 4


def column_letter(col: int) -> str:
    """
    Convierte número de columna a letra(s).

    Ejemplos:
        1 -> A
        4 -> D
        27 -> AA
    """
    if col < 1:
        raise ValueError("Column index must be >= 1")
    result = ""
    while col > 0:
        col -= 1
        result = chr(col % 26 + ord('A')) + result
        col //= 26
    return result


@dataclass(frozen=True)
class RangeAddress:
    """
    Región rectangular de una pestaña: nombre de la hoja + span A1 ("A:D", "A1:D1", "A2:D").

    El span no se valida aquí; un span mal formado lo rechaza Google al momento de la llamada.
    """
    sheet_name: str
    span: str

    @property
    def a1(self) -> str:
        # Títulos siempre entre comillas simples, escapando las internas
        quoted = self.sheet_name.replace("'", "''")
        return f"'{quoted}'!{self.span}"

    @classmethod
    def columns(cls, sheet_name: str, width: int = LEDGER_WIDTH, start_row: int = 1) -> "RangeAddress":
        last = column_letter(width)
        if start_row <= 1:
            return cls(sheet_name, f"A:{last}")
        return cls(sheet_name, f"A{start_row}:{last}")

    @classmethod
    def row(cls, sheet_name: str, row: int, width: int = LEDGER_WIDTH) -> "RangeAddress":
        if row < 1:
            raise ValueError("Row index must be >= 1")
        return cls(sheet_name, f"A{row}:{column_letter(width)}{row}")

    def __str__(self) -> str:
        return self.a1


class LedgerRow(NamedTuple):
    """Fila posicional del ledger. El orden de las columnas es fijo."""
    scan_time: str
    content: str
    validity: str
    content_time: str

    @classmethod
    def from_cells(cls, cells: Sequence[Any]) -> "LedgerRow":
        """
        Frontera de conversión desde los valores crudos de Sheets.
        Celdas faltantes al final (Sheets las omite) quedan como "".
        """
        values = ["" if cell is None else str(cell) for cell in list(cells)[:LEDGER_WIDTH]]
        values.extend([""] * (LEDGER_WIDTH - len(values)))
        return cls(*values)

    def to_cells(self) -> List[str]:
        return list(self)


@dataclass(frozen=True)
class ScanRecord:
    """Fila de scanned_data. Solo lectura."""
    data: str
    scanned_at: datetime


@dataclass(frozen=True)
class Worksheet:
    title: str
    header_row: LedgerRow


@dataclass(frozen=True)
class AppendResult:
    updated_range: Optional[str]
    updated_rows: int = 0
    updated_cells: int = 0

    @classmethod
    def from_response(cls, response: dict) -> "AppendResult":
        updates = response.get("updates") or {}
        return cls(
            updated_range=updates.get("updatedRange"),
            updated_rows=updates.get("updatedRows", 0),
            updated_cells=updates.get("updatedCells", 0),
        )


@dataclass(frozen=True)
class UpdateResult:
    updated_range: Optional[str]
    updated_rows: int = 0
    updated_cells: int = 0

    @classmethod
    def from_response(cls, response: dict) -> "UpdateResult":
        return cls(
            updated_range=response.get("updatedRange"),
            updated_rows=response.get("updatedRows", 0),
            updated_cells=response.get("updatedCells", 0),
        )


@dataclass(frozen=True)
class ClearResult:
    cleared_range: Optional[str]

    @classmethod
    def from_response(cls, response: dict) -> "ClearResult":
        return cls(cleared_range=response.get("clearedRange"))


@dataclass(frozen=True)
class CreateResult:
    sheet_id: Optional[int]
    title: str

    @classmethod
    def from_response(cls, response: dict, title: str) -> "CreateResult":
        replies = response.get("replies") or [{}]
        properties = (replies[0].get("addSheet") or {}).get("properties") or {}
        return cls(sheet_id=properties.get("sheetId"), title=properties.get("title", title))


@dataclass(frozen=True)
class SpreadsheetDescriptor:
    title: Optional[str]
    url: Optional[str]
    worksheet_titles: List[str] = field(default_factory=list)

    @classmethod
    def from_response(cls, response: dict) -> "SpreadsheetDescriptor":
        return cls(
            title=(response.get("properties") or {}).get("title"),
            url=response.get("spreadsheetUrl"),
            worksheet_titles=[
                (sheet.get("properties") or {}).get("title", "")
                for sheet in response.get("sheets") or []
            ],
        )


@dataclass(frozen=True)
class BootstrapResult:
    success: bool
    message: str
    created: bool
    worksheet: Worksheet


@dataclass(frozen=True)
class ErrorDetail:
    operation: str
    message: str
    record_index: Optional[int] = None


@dataclass
class SyncReport:
    """
    Resultado de una corrida de sync. Una corrida parcial es un resultado válido, no una excepción.
    """
    attempted: int = 0
    succeeded: int = 0
    first_error: Optional[ErrorDetail] = None

    @property
    def complete(self) -> bool:
        return self.first_error is None and self.succeeded == self.attempted
