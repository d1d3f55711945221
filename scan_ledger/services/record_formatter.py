# scan_ledger/services/record_formatter.py
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from scan_ledger.domain.ledger import LedgerRow, ScanRecord

DEFAULT_TIMEZONE = "Asia/Taipei"
DATETIME_FORMAT = "%Y/%m/%d %H:%M:%S"

VALID_LABEL = "有效"
INVALID_LABEL = "無效"
INVALID_DATE = "Invalid Date"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Solo dígitos ASCII, como parseInt
_INTEGER_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")


def parse_epoch_millis(raw: str) -> Optional[int]:
    """
    Lee el prefijo entero de `raw` ("1700000000000abc" -> 1700000000000).
    Retorna None si no empieza con dígitos.
    """
    match = _INTEGER_PREFIX.match(raw or "")
    if not match:
        return None
    return int(match.group(1))


class RecordFormatter:
    """
    Convierte un ScanRecord en una fila del ledger.

    No valida la entrada: contenido no numérico produce "Invalid Date" en la
    columna 4 en lugar de un error.
    """

    def __init__(self, timezone_name: str = DEFAULT_TIMEZONE) -> None:
        self.tz = ZoneInfo(timezone_name)

    def render(self, moment: datetime) -> str:
        """Fecha-hora en la zona configurada, o "Invalid Date" si cae fuera del rango de datetime."""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        try:
            return moment.astimezone(self.tz).strftime(DATETIME_FORMAT)
        except (OverflowError, ValueError):
            return INVALID_DATE

    def render_epoch_millis(self, raw: str) -> str:
        millis = parse_epoch_millis(raw)
        if millis is None:
            return INVALID_DATE
        try:
            moment = _EPOCH + timedelta(milliseconds=millis)
        except (OverflowError, ValueError):
            # datetime llega hasta el año 9999; epochs mayores no se pueden representar
            return INVALID_DATE
        return self.render(moment)

    def format(self, record: ScanRecord, is_valid: bool) -> LedgerRow:
        return LedgerRow(
            scan_time=self.render(record.scanned_at),
            content=record.data,
            validity=VALID_LABEL if is_valid else INVALID_LABEL,
            content_time=self.render_epoch_millis(record.data),
        )
