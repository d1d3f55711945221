# scan_ledger/integrations/scan_store.py
"""
Acceso de solo lectura a la tabla scanned_data.

Cada operación abre su propia conexión con `with engine.connect()`, lo que
garantiza que se libere al pool en cualquier salida (éxito, error de query
o error al convertir filas).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    create_engine,
    func,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from scan_ledger.config.settings import Settings
from scan_ledger.domain.ledger import ScanRecord
from scan_ledger.errors import ConfigurationError, RelationalStoreError
from scan_ledger.logger import get_logger

logger = get_logger(__name__)

metadata = MetaData()

scanned_data = Table(
    "scanned_data",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("data", Text, nullable=False),
    Column("scanned_at", DateTime(timezone=True), nullable=False),
)


@dataclass(frozen=True)
class StoreHealth:
    database_time: Optional[datetime]
    record_count: int


def _as_utc(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    # Timestamps sin zona se asumen UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ScanStore:
    """
    Fuente relacional de los escaneos. Nunca escribe.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScanStore":
        if not settings.database_url:
            raise ConfigurationError("SCAN_LEDGER_DATABASE_URL is required")
        try:
            engine = create_engine(settings.database_url, pool_pre_ping=True)
        except (SQLAlchemyError, ImportError, ValueError) as e:
            # ImportError: driver del dialecto no instalado
            raise ConfigurationError(f"Invalid database URL: {e}") from e
        return cls(engine)

    def query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Ejecuta una consulta textual y retorna las filas como dicts."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), dict(params or {}))
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            logger.error("Query failed: %s", e)
            raise RelationalStoreError("query", e) from e

    def fetch_recent_scans(self, limit: int) -> List[ScanRecord]:
        """
        Retorna hasta `limit` escaneos, del más reciente al más antiguo.
        """
        stmt = (
            select(scanned_data.c.data, scanned_data.c.scanned_at)
            .order_by(scanned_data.c.scanned_at.desc())
            .limit(limit)
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
                records = [
                    ScanRecord(data=str(row.data), scanned_at=_as_utc(row.scanned_at))
                    for row in rows
                ]
        except SQLAlchemyError as e:
            logger.error("Fetching recent scans failed: %s", e)
            raise RelationalStoreError("fetch_recent_scans", e) from e

        logger.info("Fetched %d scans (limit=%d)", len(records), limit)
        return records

    def health(self) -> StoreHealth:
        """
        Chequeo de diagnóstico: hora del servidor y cantidad de registros.
        Si la tabla todavía no existe el conteo es 0.
        """
        try:
            with self.engine.connect() as conn:
                db_time = conn.execute(select(func.current_timestamp())).scalar()
                try:
                    count = conn.execute(select(func.count()).select_from(scanned_data)).scalar_one()
                except SQLAlchemyError as table_error:
                    logger.warning("scanned_data table may not exist yet: %s", table_error)
                    conn.rollback()
                    count = 0
        except SQLAlchemyError as e:
            logger.error("Database health check failed: %s", e)
            raise RelationalStoreError("health", e) from e

        logger.info("Database reachable, %d records in scanned_data", count)
        return StoreHealth(
            database_time=_as_utc(db_time) if db_time is not None else None,
            record_count=int(count),
        )
