from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from pvz_service.domain.schemas.pvz import Pvz, PvzInfo
from pvz_service.ports.outbound.repo.abstract import Repo
from pvz_service.ports.outbound.repo.transaction import Transaction


class PvzRepo(Repo, ABC):

    @abstractmethod
    async def get_page(self,
                       page: int,
                       limit: int,
                       transaction: Optional[Transaction] = None) -> List[Pvz]:
        """ Страница ПВЗ, начиная с самых новых по дате регистрации. Страницы нумеруются с 1 """
        pass

    @abstractmethod
    async def get_all(self,
                      transaction: Optional[Transaction] = None) -> List[Pvz]:
        """ Все ПВЗ, начиная с самых новых """
        pass

    @abstractmethod
    async def get_pvzs_with_receptions_and_products(self,
                                                    page: int,
                                                    limit: int,
                                                    start_date: Optional[datetime] = None,
                                                    end_date: Optional[datetime] = None,
                                                    transaction: Optional[Transaction] = None) -> List[PvzInfo]:
        """
        Страница ПВЗ с приёмками за период и их товарами одним запросом.
        ПВЗ без приёмок за период тоже попадают в результат, с пустым списком приёмок.
        """
        pass
