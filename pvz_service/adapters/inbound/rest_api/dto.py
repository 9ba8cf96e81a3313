from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pvz_service.domain.schemas.annotations import LocalDatetime
from pvz_service.domain.schemas.pvz import Pvz, Reception, Product, PvzInfo, ReceptionInfo
from pvz_service.domain.schemas.user import User


class CamelModel(BaseModel):
    """ Поля в JSON именуются в camelCase, в коде в snake_case """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorDTO(CamelModel):
    code: str
    message: str


# Auth

class DummyLoginRequest(CamelModel):
    role: str


class RegisterRequest(CamelModel):
    email: str
    password: str
    role: str


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenDTO(CamelModel):
    token: str


class UserDTO(CamelModel):
    id: UUID
    email: str
    role: str

    @classmethod
    def from_domain(cls, user: User) -> "UserDTO":
        return cls(id=user.id, email=user.email, role=user.role.value)


# Pvz

class CreatePvzRequest(CamelModel):
    city: str


class PvzDTO(CamelModel):
    id: UUID
    registration_date: datetime
    city: str

    @classmethod
    def from_domain(cls, pvz: Pvz) -> "PvzDTO":
        return cls(id=pvz.id, registration_date=pvz.registration_date, city=pvz.city)


class CreateReceptionRequest(CamelModel):
    pvz_id: UUID
    date_time: Optional[LocalDatetime] = None


class ReceptionDTO(CamelModel):
    id: UUID
    date_time: datetime
    pvz_id: UUID
    status: str

    @classmethod
    def from_domain(cls, reception: Reception) -> "ReceptionDTO":
        return cls(id=reception.id,
                   date_time=reception.date_time,
                   pvz_id=reception.pvz_id,
                   status=reception.status.value)


class AddProductRequest(CamelModel):
    pvz_id: UUID
    type: str


class ProductDTO(CamelModel):
    id: UUID
    date_time: datetime
    type: str
    reception_id: UUID

    @classmethod
    def from_domain(cls, product: Product) -> "ProductDTO":
        return cls(id=product.id,
                   date_time=product.date_time,
                   type=product.type,
                   reception_id=product.reception_id)


class MessageDTO(CamelModel):
    message: str


class ReceptionInfoDTO(CamelModel):
    reception: ReceptionDTO
    products: List[ProductDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, reception_info: ReceptionInfo) -> "ReceptionInfoDTO":
        return cls(reception=ReceptionDTO.from_domain(reception_info.reception),
                   products=[ProductDTO.from_domain(product) for product in reception_info.products])


class PvzInfoDTO(CamelModel):
    pvz: PvzDTO
    receptions: List[ReceptionInfoDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, pvz_info: PvzInfo) -> "PvzInfoDTO":
        return cls(pvz=PvzDTO.from_domain(pvz_info.pvz),
                   receptions=[ReceptionInfoDTO.from_domain(reception_info)
                               for reception_info in pvz_info.receptions])
