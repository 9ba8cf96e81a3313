from abc import ABC, abstractmethod
from typing import Dict, Any


class BusinessMetrics(ABC):
    """ Бизнес-счётчики сервиса. Увеличиваются только после успешной фиксации операции """

    @abstractmethod
    def pvz_created(self) -> None:
        pass

    @abstractmethod
    def reception_created(self) -> None:
        pass

    @abstractmethod
    def product_added(self) -> None:
        pass

    @abstractmethod
    def snapshot(self) -> Dict[str, int]:
        pass


class DatabaseMetrics(ABC):
    """ Метрики работы с хранилищем: длительность запросов репозиториев и занятые соединения пула """

    @abstractmethod
    def observe_query(self, table: str, operation: str, duration_seconds: float, success: bool) -> None:
        pass

    @abstractmethod
    def connection_checked_out(self) -> None:
        pass

    @abstractmethod
    def connection_checked_in(self) -> None:
        pass

    @abstractmethod
    def snapshot(self) -> Dict[str, Any]:
        pass
