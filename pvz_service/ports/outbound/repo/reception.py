from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pvz_service.domain.schemas.enums import ReceptionStatus
from pvz_service.domain.schemas.pvz import Reception
from pvz_service.ports.outbound.repo.abstract import Repo
from pvz_service.ports.outbound.repo.transaction import Transaction


class ReceptionRepo(Repo, ABC):

    @abstractmethod
    async def find_open_by_pvz_id(self,
                                  pvz_id: UUID,
                                  transaction: Optional[Transaction] = None) -> Reception:
        """ Незакрытая приёмка ПВЗ. Если её нет, поднимает NoOpenReceptionError """
        pass

    @abstractmethod
    async def update_status(self,
                            reception_id: UUID,
                            status: ReceptionStatus,
                            transaction: Optional[Transaction] = None) -> Reception:
        """ Если приёмки нет, поднимает ReceptionNotFoundError """
        pass

    @abstractmethod
    async def get_by_pvz_id_filtered(self,
                                     pvz_id: UUID,
                                     start_date: Optional[datetime] = None,
                                     end_date: Optional[datetime] = None,
                                     transaction: Optional[Transaction] = None) -> List[Reception]:
        pass
