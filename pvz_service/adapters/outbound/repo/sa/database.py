from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from pvz_service.adapters.outbound.repo.sa.base import Base
from pvz_service.ports.common.interfaces import Startable
from pvz_service.ports.common.logs import logger
from pvz_service.ports.outbound.metrics import DatabaseMetrics


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database(Startable):

    def __init__(self, uri: str, echo: bool = False, metrics: Optional[DatabaseMetrics] = None):
        self.engine = create_async_engine(uri, echo=echo)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        self.metrics = metrics
        if self.dialect_name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        if metrics is not None:
            event.listen(self.engine.sync_engine, "checkout",
                         lambda dbapi_connection, connection_record, connection_proxy:
                         metrics.connection_checked_out())
            event.listen(self.engine.sync_engine, "checkin",
                         lambda dbapi_connection, connection_record: metrics.connection_checked_in())

    @property
    def session(self) -> AsyncSession:
        return self.sessionmaker()

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def start(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database schema is ready: dialect=%s", self.dialect_name)

    async def stop(self) -> None:
        await self.engine.dispose()
