from __future__ import annotations

from scan_ledger.domain.ledger import BootstrapResult, LedgerRow, RangeAddress, Worksheet
from scan_ledger.integrations.sheets_client import SheetsLedgerClient
from scan_ledger.logger import get_logger

logger = get_logger(__name__)

LEDGER_WORKSHEET = "掃描記錄"
LEDGER_HEADER = LedgerRow("掃描時間", "QR Code 內容", "驗證狀態", "QR Code 時間戳")


class WorksheetBootstrapper:
    """
    Asegura que exista la pestaña y que su primera fila sea el header esperado.
    """

    def __init__(self, client: SheetsLedgerClient) -> None:
        self.client = client

    def ensure_worksheet(
        self,
        title: str = LEDGER_WORKSHEET,
        header: LedgerRow = LEDGER_HEADER,
    ) -> BootstrapResult:
        """
        Crea la pestaña solo si no existe y reescribe el header siempre, así
        un bootstrap que falló entre la creación y el header se repara solo.

        No está serializado contra otro bootstrap concurrente: dos llamadas
        pueden ver "no existe" y la segunda creación falla con RemoteLedgerError.
        """
        descriptor = self.client.describe()
        created = False
        if title in descriptor.worksheet_titles:
            logger.debug("Worksheet '%s' already present", title)
        else:
            logger.info("Worksheet '%s' not found, creating it", title)
            self.client.create_worksheet(title)
            created = True

        self.client.update(RangeAddress.row(title, 1, width=len(header)), [header])
        return BootstrapResult(
            success=True,
            message="工作表初始化完成",
            created=created,
            worksheet=Worksheet(title=title, header_row=header),
        )
