from abc import ABC, abstractmethod
from typing import Optional

from pvz_service.domain.schemas.user import User
from pvz_service.ports.outbound.repo.abstract import Repo
from pvz_service.ports.outbound.repo.transaction import Transaction


class UserRepo(Repo, ABC):

    @abstractmethod
    async def find_by_email(self,
                            email: str,
                            transaction: Optional[Transaction] = None) -> User:
        """ Если пользователя нет, поднимает NotFoundError """
        pass
