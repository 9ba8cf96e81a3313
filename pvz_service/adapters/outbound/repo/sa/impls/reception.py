from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from pvz_service.adapters.outbound.repo.sa import models
from pvz_service.adapters.outbound.repo.sa.abstract import AbstractSARepo
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.domain.errors import AppError, OpenReceptionExistsError, NotFoundError, NoOpenReceptionError, \
    ReceptionNotFoundError
from pvz_service.domain.schemas.enums import ReceptionStatus
from pvz_service.domain.schemas.pvz import Reception, ReceptionPK
from pvz_service.ports.outbound.repo.fields import UpdateFields, PaginationQuery, FilterFieldsDNF, FilterField, \
    date_range_conditions
from pvz_service.ports.outbound.repo.reception import ReceptionRepo
from pvz_service.ports.outbound.repo.transaction import Transaction


class SAReceptionRepo(AbstractSARepo, ReceptionRepo):

    def __init__(self, transaction_manager: SATransactionManager):
        super().__init__(transaction_manager, models.Reception)

    def to_model(self, obj: Reception) -> models.Reception:
        return models.Reception(id=obj.id,
                                pvz_id=obj.pvz_id,
                                date_time=obj.date_time,
                                status=obj.status.value)

    def to_domain(self, obj: models.Reception) -> Reception:
        return Reception(id=obj.id,
                         pvz_id=obj.pvz_id,
                         date_time=obj.date_time,
                         status=ReceptionStatus(obj.status))

    def pk_to_model_pk(self, pk: ReceptionPK) -> Dict:
        return {"id": pk.id}

    def integrity_error_as_app_error(self, e: IntegrityError) -> Optional[AppError]:
        text = str(e.orig).lower()
        if "unique" in text:
            return OpenReceptionExistsError()
        if "foreign key" in text:
            return NotFoundError("pvz not found")
        return None

    async def create(self,
                     obj: Reception,
                     transaction: Optional[Transaction] = None) -> Reception:
        return await super().create(obj.model_copy(update={"status": ReceptionStatus.IN_PROGRESS}), transaction)

    async def find_open_by_pvz_id(self,
                                  pvz_id: UUID,
                                  transaction: Optional[Transaction] = None) -> Reception:
        query = (select(models.Reception)
                 .where(models.Reception.pvz_id == pvz_id,
                        models.Reception.status == ReceptionStatus.IN_PROGRESS.value)
                 .order_by(models.Reception.date_time.desc(), models.Reception.id.desc())
                 .limit(1))
        async with self.executor("find_open_by_pvz_id", transaction, pvz_id=pvz_id) as session:
            result = await session.scalars(query)
            model = result.first()
        if model is None:
            raise NoOpenReceptionError()
        return self.to_domain(model)

    async def update_status(self,
                            reception_id: UUID,
                            status: ReceptionStatus,
                            transaction: Optional[Transaction] = None) -> Reception:
        updated = await self.update(ReceptionPK(id=reception_id),
                                    UpdateFields.single("status", status.value),
                                    transaction)
        if updated is None:
            raise ReceptionNotFoundError()
        return updated

    async def get_by_pvz_id_filtered(self,
                                     pvz_id: UUID,
                                     start_date: Optional[datetime] = None,
                                     end_date: Optional[datetime] = None,
                                     transaction: Optional[Transaction] = None) -> List[Reception]:
        conditions = [FilterField(name="pvz_id", value=pvz_id)]
        conditions.extend(date_range_conditions("date_time", start_date, end_date))
        return await self.paginated(PaginationQuery(order_by="date_time",
                                                    then_order_by=["id"],
                                                    asc_sort=True,
                                                    filter_fields_dnf=FilterFieldsDNF.single_conjunct(conditions)),
                                    transaction)
