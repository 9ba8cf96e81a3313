from contextlib import asynccontextmanager
from typing import Optional, Dict, Any, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pvz_service.adapters.outbound.repo.sa.database import Database
from pvz_service.ports.common.logs import logger
from pvz_service.ports.outbound.metrics import DatabaseMetrics
from pvz_service.ports.outbound.repo.transaction import Transaction, TransactionManager, IsolationLevel, \
    AccessMode, OuterBoundTransaction, TransactionError


def execution_options_for(dialect_name: str,
                          isolation_level: IsolationLevel,
                          access_mode: AccessMode) -> Dict[str, Any]:
    """ Параметры соединения для уровня изоляции и режима доступа с учётом диалекта """
    if dialect_name == "postgresql":
        return {"isolation_level": isolation_level.value,
                "postgresql_readonly": access_mode == AccessMode.READ_ONLY}
    if dialect_name == "sqlite":
        # SQLite поддерживает только SERIALIZABLE
        return {"isolation_level": IsolationLevel.SERIALIZABLE.value}
    return {"isolation_level": isolation_level.value}


class SATransaction(Transaction):

    def __init__(self, session: AsyncSession, execution_options: Optional[Dict[str, Any]] = None):
        self._session = session
        self._execution_options = execution_options or {}

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def begin(self) -> None:
        try:
            await self._session.connection(execution_options=self._execution_options)
        except SQLAlchemyError as e:
            logger.error("failed to begin transaction: options=%s, error=%s", self._execution_options, e)
            raise TransactionError("failed to begin transaction") from e

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error("failed to commit transaction: error=%s", e)
            raise TransactionError("failed to commit transaction") from e

    async def rollback(self) -> None:
        await self._session.rollback()

    async def close(self) -> None:
        await self._session.close()


class SATransactionManager(TransactionManager):
    def __init__(self, database: Database):
        self._database = database

    @property
    def database_metrics(self) -> Optional[DatabaseMetrics]:
        return self._database.metrics

    def create(self,
               isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
               access_mode: AccessMode = AccessMode.READ_WRITE,
               outer: Optional[Transaction] = None) -> Transaction:
        if outer is not None:
            return OuterBoundTransaction(outer)
        execution_options = execution_options_for(self._database.dialect_name, isolation_level, access_mode)
        return SATransaction(self._database.session, execution_options)

    @asynccontextmanager
    async def get_executor(self, transaction: Optional[Transaction] = None) -> AsyncIterator[AsyncSession]:
        if transaction is not None:
            yield transaction.session
            return
        async with self._database.session as session:
            yield session
            await session.commit()
