# Arranque: uvicorn --factory scan_ledger.main:create_app
from typing import Optional

from fastapi import FastAPI

from scan_ledger.api.routes import router as ledger_router
from scan_ledger.config.settings import Settings
from scan_ledger.integrations.scan_store import ScanStore
from scan_ledger.integrations.sheets_client import SheetsLedgerClient
from scan_ledger.logger import configure_logging, get_logger
from scan_ledger.services.ledger_console import LedgerConsole
from scan_ledger.services.record_formatter import RecordFormatter
from scan_ledger.services.sync_service import SyncOrchestrator
from scan_ledger.services.worksheet_bootstrapper import WorksheetBootstrapper

logger = get_logger(__name__)


def build_console(
    settings: Settings,
    client: Optional[SheetsLedgerClient] = None,
    store: Optional[ScanStore] = None,
) -> LedgerConsole:
    """
    Arma los componentes a partir de la configuración.

    Raises:
        ConfigurationError: si faltan credenciales, spreadsheet id o database url
    """
    client = client or SheetsLedgerClient.from_settings(settings)
    store = store or ScanStore.from_settings(settings)
    formatter = RecordFormatter(settings.display_timezone)
    return LedgerConsole(
        orchestrator=SyncOrchestrator(store=store, client=client, formatter=formatter),
        bootstrapper=WorksheetBootstrapper(client),
        store=store,
        formatter=formatter,
        recent_limit=settings.recent_scans_limit,
        sync_limit=settings.sync_batch_limit,
    )


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[SheetsLedgerClient] = None,
    store: Optional[ScanStore] = None,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.ledger_console = build_console(settings, client=client, store=store)
    app.include_router(ledger_router)
    logger.info("%s ready (spreadsheet=%s)", settings.app_name, settings.google_spreadsheet_id)
    return app

