from __future__ import annotations

import json
from typing import Any, Callable, List, Optional, Sequence

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from scan_ledger.config.settings import Settings
from scan_ledger.domain.ledger import (
    AppendResult,
    ClearResult,
    CreateResult,
    LedgerRow,
    RangeAddress,
    SpreadsheetDescriptor,
    UpdateResult,
)
from scan_ledger.errors import ConfigurationError, RemoteLedgerError
from scan_ledger.logger import get_logger

logger = get_logger(__name__)

SCOPES = ['https://www.googleapis.com/auth/spreadsheets']

# Los valores se interpretan como si un humano los tipeara (fechas/números se convierten)
VALUE_INPUT_OPTION = 'USER_ENTERED'


class SheetsLedgerClient:
    """
    Cliente del ledger remoto sobre la API v4 de Google Sheets.

    Una instancia = una spreadsheet. No reintenta: toda falla sale como
    RemoteLedgerError con el mensaje original de Google.
    """

    def __init__(
        self,
        spreadsheet_id: Optional[str],
        service=None,
        credentials_info: Optional[str] = None,
        credentials_path: Optional[str] = None,
    ) -> None:
        """
        Args:
            spreadsheet_id: ID de la spreadsheet destino
            service: Google Sheets API service ya inicializado (para testing/DI)
            credentials_info: Contenido JSON de la service account
            credentials_path: Ruta al archivo JSON de service account

        Raises:
            ConfigurationError: si falta el spreadsheet id o no hay credenciales
        """
        if not spreadsheet_id:
            raise ConfigurationError("Spreadsheet ID is required")
        self.spreadsheet_id = spreadsheet_id

        if service is not None:
            self.service = service
        elif credentials_info or credentials_path:
            self.service = self._initialize_service(credentials_info, credentials_path)
        else:
            raise ConfigurationError(
                "Google service account credentials are required "
                "(SCAN_LEDGER_GOOGLE_SERVICE_ACCOUNT_KEY or SCAN_LEDGER_GOOGLE_SERVICE_ACCOUNT_KEY_PATH)"
            )

    @classmethod
    def from_settings(cls, settings: Settings, service=None) -> "SheetsLedgerClient":
        return cls(
            spreadsheet_id=settings.google_spreadsheet_id,
            service=service,
            credentials_info=settings.google_service_account_key,
            credentials_path=settings.google_service_account_key_path,
        )

    def _initialize_service(self, credentials_info: Optional[str], credentials_path: Optional[str]):
        """Inicializa el servicio de Google Sheets API con service account."""
        try:
            if credentials_info:
                logger.info("Initializing Google Sheets API service from inline service account key")
                credentials = service_account.Credentials.from_service_account_info(
                    json.loads(credentials_info), scopes=SCOPES
                )
            else:
                logger.info("Initializing Google Sheets API service with credentials: %s", credentials_path)
                credentials = service_account.Credentials.from_service_account_file(
                    credentials_path, scopes=SCOPES
                )
        except (ValueError, OSError) as e:
            # json.JSONDecodeError es subclase de ValueError
            logger.error("Failed to load Google service account credentials: %s", e)
            raise ConfigurationError(f"Invalid service account credentials: {e}") from e

        service = build('sheets', 'v4', credentials=credentials, cache_discovery=False)
        logger.info("Google Sheets API service initialized for spreadsheet %s", self.spreadsheet_id)
        return service

    # ------------------------------------------------------------------
    # Operaciones sobre rangos
    # ------------------------------------------------------------------
    def read(self, address: RangeAddress) -> List[LedgerRow]:
        """Lee un rango. Nunca retorna None: un rango vacío da lista vacía."""
        response = self._execute(
            "read",
            lambda: self.service.spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=address.a1,
            ),
        )
        values = response.get('values') or []
        logger.info("Read %d rows from %s", len(values), address)
        return [LedgerRow.from_cells(cells) for cells in values]

    def append(self, address: RangeAddress, rows: Sequence[LedgerRow]) -> AppendResult:
        """Agrega filas después del contenido existente de la hoja; nunca sobreescribe."""
        response = self._execute(
            "append",
            lambda: self.service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=address.a1,
                valueInputOption=VALUE_INPUT_OPTION,
                body={'values': [row.to_cells() for row in rows]},
            ),
        )
        result = AppendResult.from_response(response)
        logger.info("Appended %d rows at %s", result.updated_rows, result.updated_range or address)
        return result

    def update(self, address: RangeAddress, rows: Sequence[LedgerRow]) -> UpdateResult:
        """Sobreescribe exactamente las celdas direccionadas."""
        response = self._execute(
            "update",
            lambda: self.service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=address.a1,
                valueInputOption=VALUE_INPUT_OPTION,
                body={'values': [row.to_cells() for row in rows]},
            ),
        )
        result = UpdateResult.from_response(response)
        logger.info("Updated %d cells at %s", result.updated_cells, result.updated_range or address)
        return result

    def clear(self, address: RangeAddress) -> ClearResult:
        """Deja en blanco el rango. No borra la pestaña ni su formato."""
        response = self._execute(
            "clear",
            lambda: self.service.spreadsheets().values().clear(
                spreadsheetId=self.spreadsheet_id,
                range=address.a1,
                body={},
            ),
        )
        result = ClearResult.from_response(response)
        logger.info("Cleared %s", result.cleared_range or address)
        return result

    def create_worksheet(self, title: str) -> CreateResult:
        """
        Crea una pestaña nueva. Si ya existe, Google responde 400 y se
        propaga como RemoteLedgerError; la idempotencia es del llamador.
        """
        body = {
            'requests': [
                {'addSheet': {'properties': {'title': title}}}
            ]
        }
        response = self._execute(
            "create_worksheet",
            lambda: self.service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body=body,
            ),
        )
        result = CreateResult.from_response(response, title)
        logger.info("Created worksheet '%s' (sheetId=%s)", result.title, result.sheet_id)
        return result

    def describe(self) -> SpreadsheetDescriptor:
        """Snapshot de metadata: título, URL y títulos de pestañas."""
        response = self._execute(
            "describe",
            lambda: self.service.spreadsheets().get(
                spreadsheetId=self.spreadsheet_id,
                includeGridData=False,
            ),
        )
        return SpreadsheetDescriptor.from_response(response)

    def _execute(self, operation: str, request_factory: Callable[[], Any]) -> dict:
        logger.debug("Sheets %s on spreadsheet %s", operation, self.spreadsheet_id)
        try:
            return request_factory().execute() or {}
        except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            logger.error("Google Sheets %s failed: %s", operation, e)
            raise RemoteLedgerError(operation, e) from e
