from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from pvz_service.domain.schemas.pvz import Product
from pvz_service.ports.outbound.repo.abstract import Repo
from pvz_service.ports.outbound.repo.transaction import Transaction


class ProductRepo(Repo, ABC):

    @abstractmethod
    async def find_last_in_open_reception(self,
                                          pvz_id: UUID,
                                          transaction: Optional[Transaction] = None) -> Product:
        """
        Последний добавленный товар незакрытой приёмки ПВЗ.
        Если приёмки или товаров нет, поднимает NoProductsToDeleteError
        """
        pass

    @abstractmethod
    async def get_by_reception_id(self,
                                  reception_id: UUID,
                                  transaction: Optional[Transaction] = None) -> List[Product]:
        pass
