from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select, and_

from pvz_service.adapters.outbound.repo.sa import models
from pvz_service.adapters.outbound.repo.sa.abstract import AbstractSARepo
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.domain.schemas.pvz import Pvz, PvzPK, PvzInfo, PvzFlatRow
from pvz_service.domain.services.pvz_tree_builder import build_pvz_tree
from pvz_service.ports.outbound.repo.fields import PaginationQuery
from pvz_service.ports.outbound.repo.pvz import PvzRepo
from pvz_service.ports.outbound.repo.transaction import Transaction


class SAPvzRepo(AbstractSARepo, PvzRepo):

    def __init__(self, transaction_manager: SATransactionManager):
        super().__init__(transaction_manager, models.Pvz)

    def to_model(self, obj: Pvz) -> models.Pvz:
        return models.Pvz(id=obj.id,
                          city=obj.city,
                          registration_date=obj.registration_date)

    def to_domain(self, obj: models.Pvz) -> Pvz:
        return Pvz(id=obj.id,
                   city=obj.city,
                   registration_date=obj.registration_date)

    def pk_to_model_pk(self, pk: PvzPK) -> Dict:
        return {"id": pk.id}

    async def get_page(self,
                       page: int,
                       limit: int,
                       transaction: Optional[Transaction] = None) -> List[Pvz]:
        return await self.paginated(PaginationQuery.page(page, limit,
                                                         order_by="registration_date",
                                                         then_order_by=["id"],
                                                         asc_sort=False),
                                    transaction)

    async def get_all(self,
                      transaction: Optional[Transaction] = None) -> List[Pvz]:
        return await self.paginated(PaginationQuery(order_by="registration_date",
                                                    then_order_by=["id"],
                                                    asc_sort=False),
                                    transaction)

    async def get_pvzs_with_receptions_and_products(self,
                                                    page: int,
                                                    limit: int,
                                                    start_date: Optional[datetime] = None,
                                                    end_date: Optional[datetime] = None,
                                                    transaction: Optional[Transaction] = None) -> List[PvzInfo]:
        pvz_page = (select(models.Pvz)
                    .order_by(models.Pvz.registration_date.desc(), models.Pvz.id.desc())
                    .limit(limit)
                    .offset((page - 1) * limit)
                    .subquery("pvz_page"))
        reception_on = [models.Reception.pvz_id == pvz_page.c.id]
        # Границы периода в условии соединения, чтобы ПВЗ без приёмок за период не пропадали
        if start_date is not None:
            reception_on.append(models.Reception.date_time >= start_date)
        if end_date is not None:
            reception_on.append(models.Reception.date_time <= end_date)
        query = (select(pvz_page.c.id.label("pvz_id"),
                        pvz_page.c.registration_date,
                        pvz_page.c.city,
                        models.Reception.id.label("reception_id"),
                        models.Reception.date_time.label("reception_date"),
                        models.Reception.status,
                        models.Product.id.label("product_id"),
                        models.Product.date_time.label("product_date"),
                        models.Product.type.label("product_type"))
                 .select_from(pvz_page)
                 .outerjoin(models.Reception, and_(*reception_on))
                 .outerjoin(models.Product, models.Product.reception_id == models.Reception.id)
                 .order_by(pvz_page.c.registration_date.desc(),
                           pvz_page.c.id.desc(),
                           models.Reception.date_time,
                           models.Reception.id,
                           models.Product.date_time,
                           models.Product.id))
        async with self.executor("get_pvzs_with_receptions_and_products", transaction,
                                 page=page, limit=limit) as session:
            result = await session.execute(query)
            rows = result.mappings().all()
        return build_pvz_tree(PvzFlatRow.model_validate(dict(row)) for row in rows)
