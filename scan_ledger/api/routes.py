# scan_ledger/api/routes.py
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from scan_ledger.api.schemas import (
    ActionRequest,
    ActionResponse,
    DbHealthResponse,
    LedgerOverviewResponse,
)
from scan_ledger.logger import get_logger
from scan_ledger.services.ledger_console import LedgerConsole, UnknownActionError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["sheets"])


def get_ledger_console(request: Request) -> LedgerConsole:
    """Dependency injection: la consola se arma una sola vez en create_app()."""
    return request.app.state.ledger_console


def _payload(model, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(by_alias=True, exclude_none=True),
    )


# Handlers sync: FastAPI los corre en el threadpool, las llamadas a Google bloquean
@router.get("/sheets", response_model=LedgerOverviewResponse, response_model_exclude_none=True)
def ledger_overview(console: LedgerConsole = Depends(get_ledger_console)):
    """
    Inicializa la pestaña del ledger y retorna los escaneos recientes junto
    con la metadata de la spreadsheet.
    """
    logger.info("Received ledger overview request")
    result = console.overview()
    if result.status == "error":
        return _payload(result, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _payload(result)


@router.post("/sheets/actions", response_model=ActionResponse, response_model_exclude_none=True)
def ledger_action(
    request: ActionRequest,
    console: LedgerConsole = Depends(get_ledger_console),
):
    """
    Ejecuta una acción sobre el ledger.

    - syncData: sube los escaneos más recientes de la base
    - clearSheets: borra las filas de datos (el header se conserva)
    """
    logger.info("Received ledger action=%s", request.action_type)
    try:
        result = console.run_action(request.action_type)
    except UnknownActionError:
        logger.warning("Unknown ledger action: %s", request.action_type)
        return _payload(
            ActionResponse(success=False, error="未知的操作類型"),
            status.HTTP_400_BAD_REQUEST,
        )

    if not result.success:
        return _payload(result, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _payload(result)


@router.get("/health/db", response_model=DbHealthResponse, response_model_exclude_none=True)
def database_health(console: LedgerConsole = Depends(get_ledger_console)):
    """Diagnóstico de la conexión a la base relacional."""
    logger.info("Attempting to connect to the database...")
    result = console.database_health()
    if result.status == "error":
        return _payload(result, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _payload(result)
