from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from pvz_service.adapters.outbound.repo.sa import models
from pvz_service.adapters.outbound.repo.sa.abstract import AbstractSARepo
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.domain.errors import AppError, UserAlreadyExistsError, NotFoundError
from pvz_service.domain.schemas.enums import UserRole
from pvz_service.domain.schemas.user import User, UserPK
from pvz_service.ports.outbound.repo.transaction import Transaction
from pvz_service.ports.outbound.repo.user import UserRepo


class SAUserRepo(AbstractSARepo, UserRepo):

    def __init__(self, transaction_manager: SATransactionManager):
        super().__init__(transaction_manager, models.User)

    def to_model(self, obj: User) -> models.User:
        return models.User(id=obj.id,
                           email=obj.email,
                           password=obj.password_hash,
                           role=obj.role.value,
                           created_at=obj.created_at)

    def to_domain(self, obj: models.User) -> User:
        return User(id=obj.id,
                    email=obj.email,
                    password_hash=obj.password,
                    role=UserRole(obj.role),
                    created_at=obj.created_at)

    def pk_to_model_pk(self, pk: UserPK) -> Dict:
        return {"id": pk.id}

    def integrity_error_as_app_error(self, e: IntegrityError) -> Optional[AppError]:
        if "unique" in str(e.orig).lower():
            return UserAlreadyExistsError()
        return None

    async def find_by_email(self,
                            email: str,
                            transaction: Optional[Transaction] = None) -> User:
        query = select(models.User).where(models.User.email == email).limit(1)
        async with self.executor("find_by_email", transaction) as session:
            result = await session.scalars(query)
            model = result.first()
        if model is None:
            raise NotFoundError("user not found")
        return self.to_domain(model)
