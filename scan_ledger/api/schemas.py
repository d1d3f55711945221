# scan_ledger/api/schemas.py
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from scan_ledger.domain.ledger import LedgerRow


class CamelModel(BaseModel):
    # La UI consume camelCase (recentScans, errorDetail, actionType)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecentScan(CamelModel):
    scan_time: str = Field(..., description="Hora del escaneo (Asia/Taipei).")
    content: str = Field(..., description="Contenido crudo del QR Code.")
    validity: str = Field(..., description="Etiqueta de validez.")
    content_time: str = Field(..., description="Contenido interpretado como timestamp, o 'Invalid Date'.")

    @classmethod
    def from_row(cls, row: LedgerRow) -> "RecentScan":
        return cls(**row._asdict())


class SpreadsheetInfo(CamelModel):
    title: Optional[str] = None
    url: Optional[str] = None
    sheets: List[str] = Field(default_factory=list, description="Títulos de las pestañas.")


class LedgerOverviewResponse(CamelModel):
    status: Literal["success", "error"]
    message: str
    recent_scans: Optional[List[RecentScan]] = None
    spreadsheet_info: Optional[SpreadsheetInfo] = None
    error_detail: Optional[str] = None


class ActionRequest(CamelModel):
    # Sin actionType cae en la rama de acción desconocida (400), no en un 422
    action_type: Optional[str] = Field(None, description="'syncData' o 'clearSheets'.")


class ActionResponse(CamelModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    attempted: Optional[int] = Field(None, description="Registros leídos de la base (solo syncData).")
    succeeded: Optional[int] = Field(None, description="Filas agregadas al ledger (solo syncData).")


class DbHealthResponse(CamelModel):
    status: Literal["success", "error"]
    message: str
    db_time: Optional[str] = None
    record_count: Optional[int] = None
    error_detail: Optional[str] = None
