import enum
from abc import ABC, abstractmethod
from typing import Self, Optional, Any, Callable, Awaitable, TypeVar, AsyncContextManager

from pvz_service.ports.common.logs import logger

TResult = TypeVar('TResult')


class IsolationLevel(str, enum.Enum):
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class AccessMode(str, enum.Enum):
    READ_WRITE = "READ WRITE"
    READ_ONLY = "READ ONLY"


class TransactionError(Exception):
    """ Ошибка начала, фиксации или отката транзакции. Инфраструктурная, не доменная """
    pass


class Transaction(ABC):
    """
    Объект-транзакция, который передаётся в репозитории.
    Один экземпляр соответствует одной транзакции. Ровно одно из commit/rollback выполняется при выходе из контекста.
    """

    @property
    @abstractmethod
    def session(self) -> Any:
        """ Исполнитель запросов, привязанный к транзакции """
        pass

    @abstractmethod
    async def begin(self) -> None:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        """Освобождает ресурсы транзакции."""
        pass

    async def __aenter__(self) -> Self:
        try:
            await self.begin()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """ Откат при любом исключении (включая отмену задачи), иначе фиксация """
        try:
            if exc_type is not None:
                try:
                    await self.rollback()
                except Exception as rollback_error:
                    logger.error("failed to rollback transaction: error=%s, cause=%r", rollback_error, exc_val)
            else:
                await self.commit()
        finally:
            await self.close()


class OuterBoundTransaction(Transaction):
    """
    Вложенная "транзакция": использует исполнителя внешней транзакции и не управляет ею.
    Вторая физическая транзакция не открывается, откат и фиксация остаются за внешней.
    """

    def __init__(self, outer: Transaction):
        self._outer = outer

    @property
    def session(self) -> Any:
        return self._outer.session

    async def begin(self) -> None:
        pass

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass

    async def close(self) -> None:
        pass


class TransactionManager(ABC):

    @abstractmethod
    def create(self,
               isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
               access_mode: AccessMode = AccessMode.READ_WRITE,
               outer: Optional[Transaction] = None) -> Transaction:
        """ Создаёт транзакцию. Если передана внешняя транзакция, возвращает привязанную к ней """
        pass

    @abstractmethod
    def get_executor(self, transaction: Optional[Transaction] = None) -> AsyncContextManager[Any]:
        """
        Возвращает исполнителя запросов: сессию переданной транзакции или,
        если транзакции нет, сессию из пула, фиксирующую свой запрос при успехе.
        """
        pass

    async def with_tx(self,
                      isolation_level: IsolationLevel,
                      access_mode: AccessMode,
                      work: Callable[[Transaction], Awaitable[TResult]],
                      outer: Optional[Transaction] = None) -> TResult:
        """ Выполняет work атомарно и возвращает его результат """
        async with self.create(isolation_level, access_mode, outer) as transaction:
            return await work(transaction)
