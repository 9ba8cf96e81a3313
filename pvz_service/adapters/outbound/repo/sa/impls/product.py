from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from pvz_service.adapters.outbound.repo.sa import models
from pvz_service.adapters.outbound.repo.sa.abstract import AbstractSARepo
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.domain.errors import AppError, NoProductsToDeleteError, ReceptionNotFoundError
from pvz_service.domain.schemas.enums import ReceptionStatus
from pvz_service.domain.schemas.pvz import Product, ProductPK
from pvz_service.ports.outbound.repo.fields import PaginationQuery, FilterFieldsDNF
from pvz_service.ports.outbound.repo.product import ProductRepo
from pvz_service.ports.outbound.repo.transaction import Transaction


class SAProductRepo(AbstractSARepo, ProductRepo):

    def __init__(self, transaction_manager: SATransactionManager):
        super().__init__(transaction_manager, models.Product)

    def to_model(self, obj: Product) -> models.Product:
        return models.Product(id=obj.id,
                              reception_id=obj.reception_id,
                              type=obj.type,
                              date_time=obj.date_time)

    def to_domain(self, obj: models.Product) -> Product:
        return Product(id=obj.id,
                       reception_id=obj.reception_id,
                       type=obj.type,
                       date_time=obj.date_time)

    def pk_to_model_pk(self, pk: ProductPK) -> Dict:
        return {"id": pk.id}

    def integrity_error_as_app_error(self, e: IntegrityError) -> Optional[AppError]:
        if "foreign key" in str(e.orig).lower():
            return ReceptionNotFoundError()
        return None

    async def delete(self,
                     obj_pk: ProductPK,
                     transaction: Optional[Transaction] = None) -> bool:
        deleted = await super().delete(obj_pk, transaction)
        if not deleted:
            raise NoProductsToDeleteError()
        return deleted

    async def find_last_in_open_reception(self,
                                          pvz_id: UUID,
                                          transaction: Optional[Transaction] = None) -> Product:
        query = (select(models.Product)
                 .join(models.Reception, models.Product.reception_id == models.Reception.id)
                 .where(models.Reception.pvz_id == pvz_id,
                        models.Reception.status == ReceptionStatus.IN_PROGRESS.value)
                 .order_by(models.Product.date_time.desc(), models.Product.id.desc())
                 .limit(1))
        async with self.executor("find_last_in_open_reception", transaction, pvz_id=pvz_id) as session:
            result = await session.scalars(query)
            model = result.first()
        if model is None:
            raise NoProductsToDeleteError()
        return self.to_domain(model)

    async def get_by_reception_id(self,
                                  reception_id: UUID,
                                  transaction: Optional[Transaction] = None) -> List[Product]:
        return await self.paginated(PaginationQuery(order_by="date_time",
                                                    then_order_by=["id"],
                                                    asc_sort=True,
                                                    filter_fields_dnf=FilterFieldsDNF.single("reception_id",
                                                                                             reception_id)),
                                    transaction)
