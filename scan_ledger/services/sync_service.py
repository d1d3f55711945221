# scan_ledger/services/sync_service.py
"""
Sincronización best-effort de scanned_data hacia el ledger.

Cada corrida es un lote completo: no hay deduplicación ni sync incremental.
Los appends son secuenciales y no transaccionales; si uno falla la corrida
se detiene y las filas ya agregadas quedan en el ledger.
"""
from __future__ import annotations

from typing import List, Optional

from scan_ledger.domain.ledger import (
    LEDGER_WIDTH,
    ClearResult,
    ErrorDetail,
    LedgerRow,
    RangeAddress,
    SyncReport,
)
from scan_ledger.errors import RemoteLedgerError
from scan_ledger.integrations.scan_store import ScanStore
from scan_ledger.integrations.sheets_client import SheetsLedgerClient
from scan_ledger.logger import get_logger
from scan_ledger.services.record_formatter import RecordFormatter
from scan_ledger.services.worksheet_bootstrapper import LEDGER_WORKSHEET

logger = get_logger(__name__)

DEFAULT_SYNC_LIMIT = 50
DEFAULT_RECENT_LIMIT = 10


class SyncOrchestrator:
    """
    Coordina lectura de la base, formateo y append al ledger.
    """

    def __init__(
        self,
        store: ScanStore,
        client: SheetsLedgerClient,
        formatter: Optional[RecordFormatter] = None,
        worksheet: str = LEDGER_WORKSHEET,
    ) -> None:
        self.store = store
        self.client = client
        self.formatter = formatter or RecordFormatter()
        self.worksheet = worksheet

    @property
    def append_range(self) -> RangeAddress:
        return RangeAddress.columns(self.worksheet, LEDGER_WIDTH)

    @property
    def data_range(self) -> RangeAddress:
        # Todo menos el header
        return RangeAddress.columns(self.worksheet, LEDGER_WIDTH, start_row=2)

    def sync_batch(self, limit: int = DEFAULT_SYNC_LIMIT) -> SyncReport:
        """
        Sube los `limit` escaneos más recientes, del más nuevo al más viejo,
        una fila por append.

        Errores de la base se propagan (RelationalStoreError). Un error de
        append detiene la corrida y queda en `first_error`.
        """
        records = self.store.fetch_recent_scans(limit)
        report = SyncReport(attempted=len(records))

        for index, record in enumerate(records):
            # La validez no se re-deriva del registro: todo lo que está en la base se asume válido
            row = self.formatter.format(record, is_valid=True)
            try:
                self.client.append(self.append_range, [row])
            except RemoteLedgerError as e:
                report.first_error = ErrorDetail(
                    operation=e.operation,
                    message=str(e.cause),
                    record_index=index,
                )
                logger.error(
                    "Sync stopped at record %d/%d: %s", index + 1, report.attempted, e
                )
                break
            report.succeeded += 1

        logger.info("Sync finished: %d/%d rows appended", report.succeeded, report.attempted)
        return report

    def reset_ledger_data(self) -> ClearResult:
        """Borra todas las filas de datos; el header queda intacto. Sin confirmación ni undo."""
        logger.warning("Clearing ledger data range %s", self.data_range)
        return self.client.clear(self.data_range)

    def get_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[LedgerRow]:
        """
        Últimas `limit` filas del ledger, la más reciente primero.
        Depende de que el orden de append sea el cronológico.
        """
        rows = self.client.read(self.data_range)
        if limit <= 0:
            return []
        return list(reversed(rows[-limit:]))
