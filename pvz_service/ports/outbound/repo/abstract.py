from abc import ABC, abstractmethod
from typing import List, TypeVar, Generic, Optional

from pvz_service.ports.outbound.repo.fields import PaginationQuery, UpdateFields
from pvz_service.ports.outbound.repo.transaction import Transaction

TDomain = TypeVar('TDomain')  # Domain объект
TModel = TypeVar('TModel')  # ORM/Database модель
TPK = TypeVar('TPK')  # Тип первичного ключа


class Repo(ABC, Generic[TDomain, TModel, TPK]):
    """
    Репозиторий одной таблицы. Транзакциями не управляет: если передана транзакция,
    запрос выполняется в ней, иначе на отдельной сессии из пула.
    """

    @abstractmethod
    def to_model(self, obj: TDomain) -> TModel:
        """ Метод для конвертации объекта домена в модель хранения """
        pass

    @abstractmethod
    def to_domain(self, obj: TModel) -> TDomain:
        """ Метод для конвертации модели хранения в объект домена """
        pass

    @abstractmethod
    async def create(self,
                     obj: TDomain,
                     transaction: Optional[Transaction] = None) -> TDomain:
        """ Создает объект и возвращает его с заполненным первичным ключом """
        pass

    @abstractmethod
    async def update(self,
                     obj_pk: TPK,
                     fields: UpdateFields,
                     transaction: Optional[Transaction] = None) -> Optional[TDomain]:
        """Обновляет атрибуты объекта по первичному ключу. Возвращает None, если объекта нет."""
        pass

    @abstractmethod
    async def delete(self,
                     obj_pk: TPK,
                     transaction: Optional[Transaction] = None) -> bool:
        """ Удаляет объект по первичному ключу. Возвращает False, если объекта нет """
        pass

    @abstractmethod
    async def get(self,
                  obj_pk: TPK,
                  transaction: Optional[Transaction] = None) -> Optional[TDomain]:
        """ Возвращает объект по его первичному ключу из коллекции """
        pass

    @abstractmethod
    async def get_all(self,
                      transaction: Optional[Transaction] = None) -> List[TDomain]:
        """ Возвращает все объекты в коллекции """
        pass

    @abstractmethod
    async def paginated(self,
                        pagination_query: PaginationQuery,
                        transaction: Optional[Transaction] = None) -> List[TDomain]:
        """ Возвращает результат запроса к коллекции объектов пачками в соответствии с переданными
         настройками фильтрации данных. Если не указаны размеры пагинации, то отдается вся коллекция объектов,
         подходящая под условие. Если не указано и условие, то результат равносилен вызову
         метода get_all """
        pass
