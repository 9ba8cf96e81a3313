from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from pvz_service.domain.schemas.annotations import LocalDatetime
from pvz_service.domain.schemas.enums import ReceptionStatus


class PvzPK(BaseModel):
    id: UUID = None

    def __eq__(self, other):
        return isinstance(other, PvzPK) and self.id == other.id

    def __hash__(self):
        return hash(self.id)


class Pvz(PvzPK):
    """ Пункт выдачи заказов. Не изменяется после создания """
    city: str
    registration_date: LocalDatetime


class ReceptionPK(BaseModel):
    id: UUID = None

    def __eq__(self, other):
        return isinstance(other, ReceptionPK) and self.id == other.id

    def __hash__(self):
        return hash(self.id)


class Reception(ReceptionPK):
    """ Приёмка товаров на ПВЗ. Переходит из in_progress в closed ровно один раз """
    pvz_id: UUID
    date_time: LocalDatetime
    status: ReceptionStatus = ReceptionStatus.IN_PROGRESS


class ProductPK(BaseModel):
    id: UUID = None

    def __eq__(self, other):
        return isinstance(other, ProductPK) and self.id == other.id

    def __hash__(self):
        return hash(self.id)


class Product(ProductPK):
    reception_id: UUID
    type: str
    date_time: LocalDatetime = Field(description="Время добавления товара в приёмку")


class ReceptionInfo(BaseModel):
    reception: Reception
    products: List[Product] = Field(default_factory=list)


class PvzInfo(BaseModel):
    pvz: Pvz
    receptions: List[ReceptionInfo] = Field(default_factory=list)


class PvzFlatRow(BaseModel):
    """ Одна строка денормализованной выборки ПВЗ -> приёмки -> товары """
    pvz_id: UUID
    registration_date: datetime
    city: str
    reception_id: Optional[UUID] = None
    reception_date: Optional[datetime] = None
    status: Optional[ReceptionStatus] = None
    product_id: Optional[UUID] = None
    product_date: Optional[datetime] = None
    product_type: Optional[str] = None
