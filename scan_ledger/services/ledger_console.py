# scan_ledger/services/ledger_console.py
"""
Operaciones de la página de administración del ledger: vista general,
acciones (sync / limpiar) y diagnóstico de la base.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from scan_ledger.api.schemas import (
    ActionResponse,
    DbHealthResponse,
    LedgerOverviewResponse,
    RecentScan,
    SpreadsheetInfo,
)
from scan_ledger.errors import LedgerSyncError
from scan_ledger.integrations.scan_store import ScanStore
from scan_ledger.logger import get_logger
from scan_ledger.services.record_formatter import RecordFormatter
from scan_ledger.services.sync_service import SyncOrchestrator
from scan_ledger.services.worksheet_bootstrapper import WorksheetBootstrapper

logger = get_logger(__name__)


class ActionType(str, Enum):
    SYNC_DATA = "syncData"
    CLEAR_SHEETS = "clearSheets"


class UnknownActionError(ValueError):
    """El actionType no es ninguno de los soportados."""


class LedgerConsole:
    """
    Traduce las operaciones del núcleo a los payloads que consume la UI.

    Los errores del núcleo se convierten en payloads de error con el mensaje
    original como detalle; la decisión del status HTTP queda en las rutas.
    """

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        bootstrapper: WorksheetBootstrapper,
        store: ScanStore,
        formatter: RecordFormatter,
        recent_limit: int = 10,
        sync_limit: int = 50,
    ) -> None:
        self.orchestrator = orchestrator
        self.bootstrapper = bootstrapper
        self.store = store
        self.formatter = formatter
        self.recent_limit = recent_limit
        self.sync_limit = sync_limit

    def overview(self) -> LedgerOverviewResponse:
        try:
            self.bootstrapper.ensure_worksheet()
            recent = self.orchestrator.get_recent(self.recent_limit)
            descriptor = self.orchestrator.client.describe()
        except LedgerSyncError as e:
            logger.error("Google Sheets connection error: %s", e)
            return LedgerOverviewResponse(
                status="error",
                message="無法連接到 Google Sheets",
                error_detail=str(e),
            )

        return LedgerOverviewResponse(
            status="success",
            message="成功連接到 Google Sheets！",
            recent_scans=[RecentScan.from_row(row) for row in recent],
            spreadsheet_info=SpreadsheetInfo(
                title=descriptor.title,
                url=descriptor.url,
                sheets=descriptor.worksheet_titles,
            ),
        )

    def run_action(self, action_type: Optional[str]) -> ActionResponse:
        """
        Raises:
            UnknownActionError: si action_type no es syncData ni clearSheets
        """
        try:
            action = ActionType(action_type)
        except ValueError:
            raise UnknownActionError(action_type) from None

        try:
            if action is ActionType.SYNC_DATA:
                return self._sync()
            self.orchestrator.reset_ledger_data()
            return ActionResponse(success=True, message="已清空 Google Sheets 資料")
        except LedgerSyncError as e:
            logger.error("Google Sheets action %s error: %s", action.value, e)
            return ActionResponse(success=False, error=str(e))

    def _sync(self) -> ActionResponse:
        report = self.orchestrator.sync_batch(self.sync_limit)
        if report.first_error is not None:
            return ActionResponse(
                success=False,
                error=(
                    f"同步中斷：已同步 {report.succeeded}/{report.attempted} 筆資料，"
                    f"錯誤：{report.first_error.message}"
                ),
                attempted=report.attempted,
                succeeded=report.succeeded,
            )
        return ActionResponse(
            success=True,
            message=f"已同步 {report.succeeded} 筆資料到 Google Sheets",
            attempted=report.attempted,
            succeeded=report.succeeded,
        )

    def database_health(self) -> DbHealthResponse:
        try:
            health = self.store.health()
        except LedgerSyncError as e:
            logger.error("Database health check error: %s", e)
            return DbHealthResponse(
                status="error",
                message="資料庫查詢失敗。",
                error_detail=str(e),
            )

        db_time = (
            self.formatter.render(health.database_time)
            if health.database_time is not None
            else "無法取得時間"
        )
        return DbHealthResponse(
            status="success",
            message="成功連接到資料庫！",
            db_time=db_time,
            record_count=health.record_count,
        )
