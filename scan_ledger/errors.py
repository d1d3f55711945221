# scan_ledger/errors.py
"""
Errores del núcleo de sincronización.

Toda falla se propaga al llamador con el nombre de la operación; nada se
recupera localmente.
"""
from __future__ import annotations


class LedgerSyncError(Exception):
    """Base de todos los errores del servicio."""


class ConfigurationError(LedgerSyncError):
    """Falta o es inválida la configuración (credenciales, spreadsheet id, base de datos)."""


class _OperationError(LedgerSyncError):
    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")


class RemoteLedgerError(_OperationError):
    """Falla del servicio de Google Sheets (auth, cuota, rango mal formado, red)."""


class RelationalStoreError(_OperationError):
    """Falla de conexión o de consulta contra la base relacional."""
